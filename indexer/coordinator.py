"""
ModeCoordinator - Per-tick decision logic for the indexer.

Each tick the coordinator:
- Captures both break-beams once
- Dispatches on the requested mode (source load override, AMP, SPEAKER)
- Runs the SPEAKER feed cycle: feed, detect the piece at the center beam,
  wait out the settle window, then stop and rumble the operators
- Forces every output to zero on sensor faults and on command end

The settle window is a deadline against the injected clock; nothing in
here blocks.
"""

import logging
from typing import Any, Callable, Optional

from .actuators import ActuatorArray
from .interfaces import Clock, HapticFeedback, IntakeActuator, MonotonicClock, StatusLight
from .position_controller import PositionController
from .sensor_gate import SensorGate
from .types import (
    CoordinatorConfig,
    Drive,
    FeedCycleState,
    FeedState,
    HapticChannel,
    IndexerRequest,
    Mode,
    SensorFault,
    SensorState,
)


logger = logging.getLogger(__name__)


class ModeCoordinator:
    """
    Arbitrates the indexer drives and the intake between modes.

    The owning command calls `initialize()` once, `execute()` every tick and
    `end()` when it finishes or is interrupted.
    """

    def __init__(
        self,
        sensors: SensorGate,
        actuators: ActuatorArray,
        position: PositionController,
        intake: IntakeActuator,
        config: CoordinatorConfig,
        haptics: Optional[HapticFeedback] = None,
        status_light: Optional[StatusLight] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        """
        Initialize coordinator.

        Args:
            sensors: Break-beam sensors
            actuators: Indexer drives
            position: Carriage angle controller
            intake: Upstream intake subsystem
            config: Speeds, settle window and source angle
            haptics: Operator rumble (optional)
            status_light: Status LED (optional)
            clock: Monotonic time source (defaults to time.monotonic)
        """
        config.validate()
        self.sensors = sensors
        self.actuators = actuators
        self.position = position
        self.intake = intake
        self.config = config
        self.haptics = haptics
        self.status_light = status_light
        self.clock: Clock = clock or MonotonicClock()

        self.feed = FeedCycleState()
        self._warned_no_mode = False
        self._state_callbacks: list[Callable[[FeedState, FeedState], Any]] = []

    def add_state_callback(self, callback: Callable[[FeedState, FeedState], Any]) -> None:
        """
        Register callback for feed state changes.

        Callback signature: callback(old_state, new_state)
        """
        self._state_callbacks.append(callback)

    @property
    def state(self) -> FeedState:
        return self.feed.state

    def initialize(self) -> None:
        """Start a new command invocation"""
        logger.info("Indexer command starting")
        self.feed.reset()
        self.position.reset()
        self._warned_no_mode = False

    def execute(self, request: Optional[IndexerRequest], now: Optional[float] = None) -> FeedState:
        """
        Run one control tick.

        Args:
            request: Mode request for this tick, None if no mode is selected
            now: Clock reading to use (defaults to the injected clock)

        Returns:
            Feed state after the tick
        """
        if now is None:
            now = self.clock.now()

        try:
            sensors = self.sensors.capture()
        except SensorFault as e:
            self._enter_fault(str(e))
            return self.state

        if not sensors.center_broken and self.status_light is not None:
            self.status_light.set(self.config.ready_light_pattern)

        mode = request.effective_mode if request is not None else None
        if mode is None:
            self._no_mode()
            self._restart_feed_cycle()
            return self.state
        self._warned_no_mode = False

        try:
            if mode is Mode.SOURCE_LOAD:
                self.position.move_to_angle(self.config.source_angle)
            elif mode is Mode.AMP:
                self._amp()
            elif mode is Mode.SPEAKER:
                self._speaker(sensors, now)
        except SensorFault as e:
            self._enter_fault(str(e))
            return self.state

        # Edge tracking only carries across consecutive SPEAKER ticks
        if mode is not Mode.SPEAKER:
            self._restart_feed_cycle()

        return self.state

    def end(self, interrupted: bool = False) -> None:
        """
        Finish the command: every drive and the intake go to zero.

        Args:
            interrupted: True if the command was preempted
        """
        logger.info(f"Indexer command ending (interrupted={interrupted})")
        self.fail_safe()
        if self.haptics is not None and self.config.clear_feedback_on_end:
            for channel in HapticChannel:
                self.haptics.signal(channel, 0.0)

    def fail_safe(self) -> None:
        """Zero every indexer drive and the intake"""
        self.actuators.stop_all()
        self.intake.set_speed(0.0)

    def _speaker(self, sensors: SensorState, now: float) -> None:
        """SPEAKER feed cycle"""
        center = sensors.center_broken

        if self.state == FeedState.SENSOR_FAULT:
            self._restart_feed_cycle()

        if self.state == FeedState.CENTER_CONFIRMED_STOPPED:
            if center:
                self._hold_stopped()
            else:
                logger.info("Piece left the center beam, feeding again")
                self._transition_to(FeedState.IDLE_OR_FEEDING)
                self._run_feed()
            return

        if self.state == FeedState.IDLE_OR_FEEDING:
            if not center:
                self._run_feed()
                return
            self.feed.edge_time = now
            self._transition_to(FeedState.CENTER_DETECTED_PENDING_SETTLE)

        # Pending settle
        if not self.feed.settle_elapsed(now, self.config.settle_time):
            self._run_feed()
            return

        self.feed.edge_time = None
        if center:
            self._hold_stopped()
            self._signal_operators()
            self.feed.confirmations += 1
            self._transition_to(FeedState.CENTER_CONFIRMED_STOPPED)
        else:
            logger.debug("Center beam cleared during settle, ignoring detection")
            self._transition_to(FeedState.IDLE_OR_FEEDING)
            self._run_feed()

    def _amp(self) -> None:
        cfg = self.config
        self.actuators.set_percent(Drive.TOP_WHEEL, cfg.amp_top_wheel_percent)
        self.actuators.set_percent(Drive.BOTTOM_WHEELS, cfg.amp_bottom_wheels_percent)
        self.intake.set_top_speed(cfg.amp_intake_top)
        self.intake.set_bottom_speed(cfg.amp_intake_bottom)
        # TODO: the AMP outputs above are overwritten in the same tick. Confirm
        # whether AMP should run until the top beam breaks before removing this.
        self.actuators.set_all_feed_wheels_percent(0.0)
        self.intake.set_speed(0.0)

    def _run_feed(self) -> None:
        cfg = self.config
        self.intake.set_top_speed(cfg.speaker_intake_top)
        self.intake.set_bottom_speed(cfg.speaker_intake_bottom)
        self.actuators.set_all_feed_wheels_percent(cfg.speaker_feed_percent)

    def _hold_stopped(self) -> None:
        self.actuators.set_all_feed_wheels_percent(0.0)
        self.intake.set_speed(0.0)

    def _signal_operators(self) -> None:
        if self.haptics is None:
            return
        for channel in HapticChannel:
            self.haptics.signal(channel, self.config.haptic_intensity)

    def _no_mode(self) -> None:
        """No mode selected: feed wheels and intake off, carriage untouched"""
        if not self._warned_no_mode:
            logger.warning("No indexer mode selected, holding feed outputs at zero")
            self._warned_no_mode = True
        self._hold_stopped()

    def _restart_feed_cycle(self) -> None:
        """Drop any pending detection; leaves SENSOR_FAULT after a clean tick"""
        if self.state == FeedState.SENSOR_FAULT:
            logger.info("Sensors healthy again")
        self.feed.edge_time = None
        self._transition_to(FeedState.IDLE_OR_FEEDING)

    def _enter_fault(self, reason: str) -> None:
        self.fail_safe()
        self.feed.edge_time = None
        if self.state != FeedState.SENSOR_FAULT:
            logger.error(f"Sensor fault, outputs forced to zero: {reason}")
            self._transition_to(FeedState.SENSOR_FAULT)

    def _transition_to(self, new_state: FeedState) -> None:
        """
        Transition to new feed state.

        Args:
            new_state: State to transition to
        """
        if new_state == self.state:
            return

        old_state = self.state
        logger.info(f"State transition: {old_state.value} -> {new_state.value}")
        self.feed.state = new_state

        for callback in self._state_callbacks:
            try:
                callback(old_state, new_state)
            except Exception as e:
                logger.error(f"Error in state callback: {e}", exc_info=True)

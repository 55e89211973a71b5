#!/usr/bin/env python3
"""
Indexer Demo - Simple example application.

Runs the indexer command against mock hardware: the carriage is simulated,
and a game piece reaches the center beam partway through the run.
"""

import argparse
import asyncio
import logging
import sys

from command_input import RequestScripts, ScriptedRequests
from indexer.actuators import ActuatorArray
from indexer.coordinator import ModeCoordinator
from indexer.hardware import (
    MockDigitalInput,
    MockEncoder,
    MockHaptics,
    MockIntake,
    MockMotor,
    MockStatusLight,
    RecordingTelemetry,
    SimulatedCarriage,
)
from indexer.position_controller import PositionController
from indexer.runner import CommandRunner
from indexer.sensor_gate import SensorGate
from indexer.types import FeedState
from indexer_config import get_config


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    stream=sys.stdout
)

logger = logging.getLogger(__name__)


SCRIPTS = {
    "speaker": RequestScripts.speaker_feed,
    "amp": RequestScripts.amp_handoff,
    "source": RequestScripts.source_load,
    "mixed": RequestScripts.speaker_then_source,
}


async def run_demo(mode: str, duration: float):
    """Run the indexer command with mock components"""

    logger.info("=" * 60)
    logger.info("Indexer Demo")
    logger.info("=" * 60)

    env = get_config()
    position_config = env.position_config()
    coordinator_config = env.coordinator_config()
    runner_config = env.runner_config()

    # Mock hardware
    top_wheel = MockMotor("top_wheel")
    bottom_wheels = MockMotor("bottom_wheels")
    rotate = MockMotor("rotate")
    encoder = MockEncoder()
    center_beam = MockDigitalInput()
    top_beam = MockDigitalInput()
    intake = MockIntake()
    haptics = MockHaptics()
    telemetry = RecordingTelemetry()
    carriage = SimulatedCarriage(rotate, encoder, position_config, angle=0.5)

    actuators = ActuatorArray(top_wheel, bottom_wheels, rotate)
    position = PositionController(actuators, encoder, position_config, telemetry)
    coordinator = ModeCoordinator(
        sensors=SensorGate(center_beam, top_beam),
        actuators=actuators,
        position=position,
        intake=intake,
        config=coordinator_config,
        haptics=haptics,
        status_light=MockStatusLight(),
    )

    def on_state_change(old_state: FeedState, new_state: FeedState):
        logger.info(f"STATE CHANGE: {old_state.value} -> {new_state.value}")

    coordinator.add_state_callback(on_state_change)

    runner = CommandRunner(
        request_source=ScriptedRequests(SCRIPTS[mode]()),
        coordinator=coordinator,
        config=runner_config,
    )

    logger.info(f"Running '{mode}' script for {duration:.1f}s...")
    runner_task = asyncio.create_task(runner.run())

    step = 0.1
    elapsed = 0.0
    while elapsed < duration:
        await asyncio.sleep(step)
        elapsed += step
        carriage.step(step)

        # A piece reaches the center beam a third of the way in
        if center_beam.raw and elapsed >= duration / 3:
            logger.info("Piece arrives at center beam")
            center_beam.set_blocked(True)

        if round(elapsed / step) % 10 == 0:
            logger.info(
                f"Status: {coordinator.state.value} | "
                f"Angle: {telemetry.values.get('Current', 0.0):.3f} rad | "
                f"Feed: {top_wheel.percent:+.2f} | "
                f"Intake: {intake.top:+.2f}/{intake.bottom:+.2f}"
            )

    logger.info("Demo complete. Shutting down...")
    runner.stop()
    await runner_task

    logger.info(f"Ticks run: {runner.tick_count}")
    logger.info(f"Rumble signals: {len(haptics.signals)}")
    logger.info("=" * 60)


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(description="Indexer demo with mock hardware")
    parser.add_argument("--mode", choices=sorted(SCRIPTS), default="speaker",
                        help="Request script to play")
    parser.add_argument("--duration", type=float, default=3.0,
                        help="Seconds to run")
    args = parser.parse_args()

    try:
        asyncio.run(run_demo(args.mode, args.duration))
    except KeyboardInterrupt:
        logger.info("\nDemo interrupted by user")
    except Exception as e:
        logger.error(f"Demo failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()

"""
CommandRunner - Reference scheduler loop for the indexer command.

Plays the part of the robot's command scheduler:
- Calls initialize() once, execute() every tick, end() exactly once
- Reads the per-tick request from a RequestSource
- Publishes controller telemetry after every tick
- Runs the fail-safe when a tick raises, gives up after repeated failures

Cancellation of the run() task ends the command as interrupted.
"""

import asyncio
import logging

from .coordinator import ModeCoordinator
from .interfaces import RequestSource
from .types import RunnerConfig


logger = logging.getLogger(__name__)


class CommandRunner:
    """Fixed-rate loop around a ModeCoordinator"""

    def __init__(
        self,
        request_source: RequestSource,
        coordinator: ModeCoordinator,
        config: RunnerConfig,
    ) -> None:
        """
        Initialize runner.

        Args:
            request_source: Supplies the mode request each tick
            coordinator: Indexer decision logic
            config: Loop timing and error limits
        """
        self.source = request_source
        self.coordinator = coordinator
        self.config = config

        self._running = False
        self._tick_count = 0
        self._consecutive_errors = 0

    async def run(self) -> None:
        """
        Main control loop - runs until stopped or cancelled.

        Call this from an async context.
        """
        logger.info("Runner starting")
        self._running = True
        interrupted = False

        try:
            await self.source.start()
            self.coordinator.initialize()

            while self._running:
                try:
                    await self._update()
                    self._consecutive_errors = 0
                except Exception as e:
                    self._consecutive_errors += 1
                    logger.error(f"Error in indexer tick: {e}", exc_info=True)
                    self.coordinator.fail_safe()
                    if self._consecutive_errors >= self.config.max_consecutive_errors:
                        logger.critical(
                            f"{self._consecutive_errors} failed ticks in a row, ending command"
                        )
                        interrupted = True
                        break

                await asyncio.sleep(self.config.loop_interval)

        except asyncio.CancelledError:
            interrupted = True
            raise

        finally:
            logger.info("Runner stopping")
            self._running = False
            await self._cleanup(interrupted)

    def stop(self) -> None:
        """Stop the loop after the current tick (call from outside async context)"""
        self._running = False

    async def _update(self) -> None:
        """Single iteration of control loop"""
        request = await self.source.read_request()
        state = self.coordinator.execute(request)
        self.coordinator.position.periodic()
        self._tick_count += 1
        logger.debug(f"Tick {self._tick_count}: {state.value}")

    async def _cleanup(self, interrupted: bool) -> None:
        """End the command, then release the request source"""
        self.coordinator.end(interrupted)
        try:
            await self.source.stop()
        except Exception as e:
            logger.error(f"Error stopping request source: {e}", exc_info=True)

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def tick_count(self) -> int:
        """Number of completed ticks"""
        return self._tick_count

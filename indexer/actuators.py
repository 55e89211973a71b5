"""
ActuatorArray - Uniform command interface over the indexer drives.

Values are passed straight through; range limits are the driver's job.
"""

import logging
from typing import Dict, Optional

from .interfaces import MotorDrive
from .types import FEED_WHEELS, ActuatorCommand, CommandUnit, Drive


logger = logging.getLogger(__name__)


class ActuatorArray:
    """
    Top wheel, bottom wheels and carriage rotate drive.

    Remembers the last command per drive so callers (and tests) can see
    what was issued this tick.
    """

    def __init__(self, top_wheel: MotorDrive, bottom_wheels: MotorDrive, rotate: MotorDrive) -> None:
        self._drives: Dict[Drive, MotorDrive] = {
            Drive.TOP_WHEEL: top_wheel,
            Drive.BOTTOM_WHEELS: bottom_wheels,
            Drive.ROTATE: rotate,
        }
        self._last: Dict[Drive, ActuatorCommand] = {}

    def set_percent(self, drive: Drive, value: float) -> None:
        """
        Run a drive at a fraction of max output.

        Args:
            drive: Target drive
            value: Percent of max (-1.0 to 1.0)
        """
        self._drives[drive].set(value)
        self._record(drive, value, CommandUnit.PERCENT)

    def set_volts(self, drive: Drive, value: float) -> None:
        """
        Run a drive at a fixed voltage.

        Args:
            drive: Target drive
            value: Volts to apply
        """
        self._drives[drive].set_voltage(value)
        self._record(drive, value, CommandUnit.VOLTS)

    def set_all_feed_wheels_percent(self, value: float) -> None:
        """Run both feed wheel drives at the same percent"""
        for drive in FEED_WHEELS:
            self.set_percent(drive, value)

    def set_all_feed_wheels_volts(self, value: float) -> None:
        """Run both feed wheel drives at the same voltage"""
        for drive in FEED_WHEELS:
            self.set_volts(drive, value)

    def stop_all(self) -> None:
        """Zero every drive"""
        for drive in Drive:
            self.set_percent(drive, 0.0)

    def last_command(self, drive: Drive) -> Optional[ActuatorCommand]:
        """Get the most recent command issued to a drive"""
        return self._last.get(drive)

    def commands(self) -> Dict[Drive, ActuatorCommand]:
        """Snapshot of the most recent command per drive"""
        return dict(self._last)

    @property
    def all_stopped(self) -> bool:
        """Check if every drive was last commanded to zero"""
        return all(
            drive in self._last and self._last[drive].is_zero
            for drive in Drive
        )

    def _record(self, drive: Drive, value: float, unit: CommandUnit) -> None:
        self._last[drive] = ActuatorCommand(drive=drive, value=value, unit=unit)
        logger.debug(f"{drive.value} <- {value:+.3f} {unit.value}")

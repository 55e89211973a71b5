"""
SensorGate - Logical view of the two break-beam sensors.

The beams are wired active-low: a blocked beam pulls the line low, so the
logical "piece present" value is the negation of the raw read. No
debouncing happens here; settle timing belongs to the coordinator.
"""

import logging
from typing import Optional

from .interfaces import DigitalInput
from .types import SensorFault, SensorState


logger = logging.getLogger(__name__)


class SensorGate:
    """Read-through access to the center and top break-beams"""

    def __init__(self, center: DigitalInput, top: DigitalInput) -> None:
        """
        Args:
            center: Raw center break-beam line
            top: Raw top break-beam line
        """
        self.center = center
        self.top = top

    def is_center_broken(self) -> bool:
        """Check if a piece is blocking the center beam"""
        return not self._read(self.center, "center")

    def is_top_broken(self) -> bool:
        """Check if a piece is blocking the top beam"""
        return not self._read(self.top, "top")

    def capture(self) -> SensorState:
        """
        Read both beams once for a tick.

        Returns:
            SensorState snapshot

        Raises:
            SensorFault: If either beam cannot be read
        """
        return SensorState(
            center_broken=self.is_center_broken(),
            top_broken=self.is_top_broken(),
        )

    @staticmethod
    def _read(line: DigitalInput, name: str) -> bool:
        try:
            raw: Optional[bool] = line.read()
        except SensorFault:
            raise
        except Exception as e:
            raise SensorFault(f"{name} break-beam read failed: {e}") from e

        if raw is None:
            raise SensorFault(f"{name} break-beam unavailable")
        return bool(raw)

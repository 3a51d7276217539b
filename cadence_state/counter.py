"""
Observable Counter Module
=========================

Integer state container with change notification.

Design:
- Mutation only through add / subtract / set
- Optional floor clamp at zero
- Observers notified only when the value actually changes,
  synchronously and in registration order
"""

from typing import Optional

from cadence_events import CallbackChannel
from cadence_logging import StructuredLogger, LogEvent, create_logger


class ObservableCounter:
    """
    Observable integer (health, coins, sanity, ...).

    Notification is reentrant: an observer may mutate the counter again.
    The nested mutation notifies every observer with its own value before
    the outer dispatch continues with the remaining observers.

    Usage:
        coins = ObservableCounter("coins", clamp_floor=True)
        coins.on_value_changed.add(lambda value: print(f"coins={value}"))

        coins.add(5)        # coins=5
        coins.subtract(10)  # coins=0 (clamped)
        coins.set(0)        # no notification, value unchanged
    """

    def __init__(
        self,
        name: str = "Stat",
        initial_value: int = 0,
        clamp_floor: bool = True,
        logger: Optional[StructuredLogger] = None,
    ):
        """
        Args:
            name: Identification only (e.g., "Health", "Coins")
            initial_value: Starting value (clamped when clamp_floor is set)
            clamp_floor: Prevent the value from dropping below zero
            logger: Diagnostic sink
        """
        self.name = name
        self.clamp_floor = clamp_floor
        self.logger = logger or create_logger("state")
        self.on_value_changed = CallbackChannel(f"{name}.changed", logger=self.logger)
        self._value = self._clamp(int(initial_value))

    @property
    def value(self) -> int:
        return self._value

    def get(self) -> int:
        """Return the current value."""
        return self._value

    def add(self, delta: int) -> bool:
        """
        Adjust the value by a delta (positive or negative).

        Returns:
            True if the value changed (and observers were notified)
        """
        return self._apply(self._value + int(delta))

    def subtract(self, amount: int) -> bool:
        """Decrease the value by |amount|."""
        return self.add(-abs(int(amount)))

    def set(self, value: int) -> bool:
        """Set the value directly."""
        return self._apply(int(value))

    def _clamp(self, value: int) -> int:
        if self.clamp_floor and value < 0:
            return 0
        return value

    def _apply(self, requested: int) -> bool:
        new_value = self._clamp(requested)
        if new_value == self._value:
            return False

        previous = self._value
        self._value = new_value
        self.logger.info(
            event=LogEvent.COUNTER_CHANGED,
            message=f"{self.name} changed",
            metadata={'counter': self.name, 'previous': previous, 'value': new_value}
        )
        self.on_value_changed.invoke(new_value)
        return True

    def __repr__(self) -> str:
        return (
            f"ObservableCounter(name={self.name!r}, value={self._value}, "
            f"clamp_floor={self.clamp_floor})"
        )

"""
Counter Text Display Module
===========================

Writes a counter's value onto a presentation surface as
`{prefix}{value}{suffix}` (e.g. "Coins: 12", "80 HP").
"""

from typing import Optional

from cadence_logging import StructuredLogger, LogEvent, create_logger
from cadence_state.counter import ObservableCounter
from cadence_state.presentation import PresentationSink


class CounterTextDisplay:
    """
    Keeps a text surface in sync with a counter.

    Updates on every change notification; with update_continuously the
    driver's per-tick refresh() rewrites the text as well.
    """

    def __init__(
        self,
        counter: Optional[ObservableCounter],
        target: Optional[PresentationSink],
        prefix: str = "",
        suffix: str = "",
        update_continuously: bool = False,
        name: str = "display",
        logger: Optional[StructuredLogger] = None,
    ):
        self.counter = counter
        self.target = target
        self.prefix = prefix
        self.suffix = suffix
        self.update_continuously = update_continuously
        self.name = name
        self.logger = logger or create_logger("state")
        self._subscribed_to: Optional[ObservableCounter] = None

        if target is None:
            self.logger.warning(
                event=LogEvent.DISPLAY_MISCONFIGURED,
                message=f"[{name}] No text surface assigned",
                metadata={'display': name}
            )

    @property
    def is_active(self) -> bool:
        return self._subscribed_to is not None

    def format(self, value: int) -> str:
        return f"{self.prefix}{value}{self.suffix}"

    def activate(self) -> bool:
        """Subscribe and write the current value immediately."""
        if self.counter is None:
            self.logger.warning(
                event=LogEvent.DISPLAY_MISCONFIGURED,
                message=f"[{self.name}] No counter assigned",
                metadata={'display': self.name}
            )
            return False
        if self._subscribed_to is None:
            self.counter.on_value_changed.add(self._on_value_changed)
            self._subscribed_to = self.counter
        self._on_value_changed(self.counter.get())
        return True

    def deactivate(self) -> None:
        if self._subscribed_to is not None:
            self._subscribed_to.on_value_changed.remove(self._on_value_changed)
            self._subscribed_to = None

    def refresh(self) -> None:
        """Per-tick hook; rewrites the text only when update_continuously is set."""
        if self.update_continuously and self.counter is not None:
            self._on_value_changed(self.counter.get())

    def _on_value_changed(self, value: int) -> None:
        if self.target is not None:
            self.target.set_text(self.format(value))

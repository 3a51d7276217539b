"""
Published Widget
================

Presentation sink whose surface lives in a remote UI.

Every state change is kept locally (so the runtime can report it) and
forwarded as a SignalEvent through the emit callable, usually
CadenceRuntime.emit_signal → SignalEventPublisher.
"""

from typing import Any, Callable, Optional

from .schemas import SignalKind

EmitFn = Callable[[str, SignalKind, Any], None]


class PublishedWidget:
    """
    Remote text surface.

    Example:
        >>> widget = PublishedWidget("door_label", emit=runtime.emit_signal)
        >>> widget.set_text("Door open")   # emits widget_text "Door open"
        >>> widget.set_visible(False)      # emits widget_visible False
    """

    def __init__(self, widget_id: str, emit: Optional[EmitFn] = None, text: str = ""):
        self.widget_id = widget_id
        self.text = text
        self.visible = True
        self.present = True
        self._emit = emit

    @property
    def surface(self) -> str:
        """Remote surfaces are identified by widget id."""
        return self.widget_id

    def set_text(self, text: str) -> None:
        self.text = text
        self._send(SignalKind.WIDGET_TEXT, text)

    def set_visible(self, visible: bool) -> None:
        self.visible = visible
        self._send(SignalKind.WIDGET_VISIBLE, visible)

    def set_present(self, present: bool) -> None:
        self.present = present
        self._send(SignalKind.WIDGET_PRESENT, present)

    def snapshot(self) -> dict:
        return {'text': self.text, 'visible': self.visible, 'present': self.present}

    def _send(self, kind: SignalKind, value: Any) -> None:
        if self._emit is not None:
            self._emit(self.widget_id, kind, value)

    def __repr__(self) -> str:
        return f"PublishedWidget(widget_id={self.widget_id!r}, text={self.text!r})"

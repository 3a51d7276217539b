"""
Presentation Sink Module
========================

Bounded Context: Where condition results become visible.

Design:
- PresentationSink is the single capability the dispatcher talks to:
  set_text / set_visible / set_present
- `surface` names the underlying object, so two sinks over one surface
  can be recognised
- Rendering itself is out of scope; TextWidget only records state

Visibility strategies (ShowMode):
- LAYER_ALPHA: layer group opacity + interactivity, surface stays attached
- PRESENCE: surface attached to / detached from the active scene graph
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Protocol


class ShowMode(str, Enum):
    """How a surface is shown or hidden."""
    LAYER_ALPHA = "layer_alpha"
    PRESENCE = "presence"


class TargetMode(str, Enum):
    """One surface with two texts, or two surfaces toggled exclusively."""
    SINGLE = "single"
    DUAL = "dual"


class PresentationSink(Protocol):
    """Protocol for presentation surfaces (interface)."""

    @property
    def surface(self) -> Any:
        """Identity of the underlying surface."""
        ...

    def set_text(self, text: str) -> None:
        ...

    def set_visible(self, visible: bool) -> None:
        """Layer-group visibility: opaque + interactive, or transparent + inert."""
        ...

    def set_present(self, present: bool) -> None:
        """Scene-graph presence: attached or detached."""
        ...


@dataclass
class LayerGroup:
    """Opacity and interactivity of a surface's layering group."""

    alpha: float = 1.0
    interactable: bool = True
    blocks_input: bool = True

    def show(self, visible: bool) -> None:
        self.alpha = 1.0 if visible else 0.0
        self.interactable = visible
        self.blocks_input = visible

    @property
    def is_visible(self) -> bool:
        return self.alpha > 0.0


class TextWidget:
    """
    In-process text surface.

    The layer group is created on first use, mirroring a widget that gets
    its group attached lazily.
    """

    def __init__(self, name: str, text: str = "", present: bool = True):
        self.name = name
        self.text = text
        self.present = present
        self.layer_group: Optional[LayerGroup] = None

    @property
    def surface(self) -> "TextWidget":
        return self

    def set_text(self, text: str) -> None:
        self.text = text

    def set_visible(self, visible: bool) -> None:
        if self.layer_group is None:
            self.layer_group = LayerGroup()
        self.layer_group.show(visible)

    def set_present(self, present: bool) -> None:
        self.present = present

    @property
    def is_shown(self) -> bool:
        """Attached and, if it has a layer group, opaque."""
        if not self.present:
            return False
        return self.layer_group is None or self.layer_group.is_visible

    def __repr__(self) -> str:
        return f"TextWidget(name={self.name!r}, text={self.text!r}, shown={self.is_shown})"


def same_surface(first: Optional[PresentationSink], second: Optional[PresentationSink]) -> bool:
    """True when both sinks exist and drive the same underlying surface."""
    if first is None or second is None:
        return False
    return first.surface == second.surface

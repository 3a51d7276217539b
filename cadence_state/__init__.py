"""
State Layer
===========

Bounded Context: Observable numeric state and the conditions that watch it.

Architecture:

    cadence_state/
    ├── counter.py       # ObservableCounter (clamp + change notification)
    ├── comparison.py    # Comparison operator table
    ├── presentation.py  # PresentationSink, TextWidget, ShowMode, TargetMode
    ├── conditional.py   # ConditionalDispatcher (edge-triggered branches)
    └── display.py       # CounterTextDisplay (prefix + value + suffix)

Usage:

    from cadence_state import (
        ObservableCounter, ConditionalDispatcher, Comparison, TargetMode, TextWidget
    )

    coins = ObservableCounter("coins")
    label = TextWidget("door_label")

    door = ConditionalDispatcher(
        counter=coins,
        threshold=10,
        comparison=Comparison.GREATER_OR_EQUAL,
        single_target=label,
        single_true_text="Door open",
        single_false_text="Collect 10 coins",
        invoke_on_auto_checks=True,
    )
    door.on_became_true.add(open_door)
    door.activate()
"""

from cadence_state.counter import ObservableCounter
from cadence_state.comparison import Comparison
from cadence_state.presentation import (
    PresentationSink,
    LayerGroup,
    TextWidget,
    ShowMode,
    TargetMode,
    same_surface,
)
from cadence_state.conditional import ConditionalDispatcher
from cadence_state.display import CounterTextDisplay

__all__ = [
    "ObservableCounter",
    "Comparison",
    "PresentationSink",
    "LayerGroup",
    "TextWidget",
    "ShowMode",
    "TargetMode",
    "same_surface",
    "ConditionalDispatcher",
    "CounterTextDisplay",
]

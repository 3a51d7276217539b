"""
Zone Layer
==========

Bounded Context: Spatial overlap filtering by layer.

The physics/collision system is external; it reports overlaps with a
layer index and this package decides whether they count.

    cadence_zone/
    ├── layers.py   # LayerMask (bitmask membership)
    └── trigger.py  # LayeredZoneTrigger (fire-once, delayed enter)
"""

from cadence_zone.layers import LayerMask, MAX_LAYERS
from cadence_zone.trigger import LayeredZoneTrigger

__all__ = [
    "LayerMask",
    "MAX_LAYERS",
    "LayeredZoneTrigger",
]

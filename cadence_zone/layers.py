"""
Layer Mask Module
=================

Set of layer indices stored as a bitmask (bit n set = layer n is a member).
"""

from dataclasses import dataclass
from typing import Iterable, List

MAX_LAYERS = 32


@dataclass(frozen=True)
class LayerMask:
    """
    Immutable layer membership mask.

    Example:
        >>> mask = LayerMask.from_layers([0, 8])
        >>> 8 in mask
        True
        >>> mask.value
        257
    """

    value: int = 0

    def __post_init__(self):
        if not 0 <= self.value < (1 << MAX_LAYERS):
            raise ValueError(
                f"LayerMask value must fit in {MAX_LAYERS} bits, got {self.value}"
            )

    @classmethod
    def from_layers(cls, layers: Iterable[int]) -> "LayerMask":
        value = 0
        for layer in layers:
            if not 0 <= layer < MAX_LAYERS:
                raise ValueError(f"Layer must be in [0, {MAX_LAYERS - 1}], got {layer}")
            value |= 1 << layer
        return cls(value=value)

    @classmethod
    def everything(cls) -> "LayerMask":
        return cls(value=(1 << MAX_LAYERS) - 1)

    def contains(self, layer: int) -> bool:
        if not 0 <= layer < MAX_LAYERS:
            return False
        return (self.value & (1 << layer)) != 0

    def __contains__(self, layer: int) -> bool:
        return self.contains(layer)

    def layers(self) -> List[int]:
        return [layer for layer in range(MAX_LAYERS) if self.contains(layer)]

    def __str__(self) -> str:
        return f"LayerMask({self.layers()})"

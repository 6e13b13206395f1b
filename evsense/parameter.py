"""Conversion between raw bus values and physical quantities."""

from __future__ import annotations

from dataclasses import dataclass

_UINT16_MAX = 0xFFFF


@dataclass(frozen=True)
class Parameter:
    """Linear scaling: physical = normal * resolution + offset."""

    offset: int
    resolution: float
    min_physical: int
    max_physical: int

    def to_physical(self, normal: int) -> float:
        """Return the physical value of a raw value."""
        return normal * self.resolution + self.offset

    def to_normal(self, physical: float) -> int:
        """Return the raw value of a physical value, truncated toward zero."""
        normal = int((physical - self.offset) / self.resolution)
        if not 0 <= normal <= _UINT16_MAX:
            raise ValueError(f"physical value {physical} does not fit a raw 16-bit value")
        return normal
from __future__ import annotations

"""Sticker (emoji decoration) records."""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class DotAnchor:
    """Placed on a dot. Only used again to prune when the dot disappears."""
    index: int


@dataclass(frozen=True)
class PointAnchor:
    """Placed on an arbitrary point."""


Anchor = Union[DotAnchor, PointAnchor]


@dataclass
class Decoration:
    id: int
    emoji: str
    size: float
    anchor: Anchor
    # Offset from the tree center, fixed at placement time.
    rx: float
    ry: float

    @property
    def dot_index(self) -> Optional[int]:
        if isinstance(self.anchor, DotAnchor):
            return self.anchor.index
        return None

    def to_record(self) -> "DecorationRecord":
        return DecorationRecord(
            rx=self.rx,
            ry=self.ry,
            emoji=self.emoji,
            size=self.size,
            dot_index=self.dot_index,
        )


@dataclass(frozen=True)
class DecorationRecord:
    """Serializable form of a sticker, always in center-offset form."""
    rx: float
    ry: float
    emoji: str
    size: float
    dot_index: Optional[int] = None

    @property
    def anchor(self) -> Anchor:
        if self.dot_index is None:
            return PointAnchor()
        return DotAnchor(self.dot_index)

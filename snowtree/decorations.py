"""Emoji stickers pinned to the tree center."""
from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional

from snowtree.frames import AnimationHandle, FrameScheduler, ORDER_AFTER_LAYOUT, start_animation
from snowtree.layout.center import CenterResolver, Vec2
from snowtree.render.elements import Element, ElementLayer, KIND_STICKER, STICKER_Z
from snowtree.state.params import TreeParams
from snowtree.state.stickers import Decoration, DecorationRecord, DotAnchor, PointAnchor

log = logging.getLogger(__name__)

DotLocator = Callable[[int], Optional[Vec2]]


class DecorationManager:
    """
    Sticker collection.

    Every sticker is stored as an offset (rx, ry) from the tree center,
    taken once when it is placed. reanchor() only ever reads the center, so
    a sticker follows the tree when the center moves (offset sliders,
    panel toggles, window resizes) but does not chase a moving dot.
    """

    def __init__(
        self,
        params: TreeParams,
        resolver: CenterResolver,
        layer: ElementLayer,
        dot_locator: DotLocator,
    ) -> None:
        self.params = params
        self.resolver = resolver
        self.layer = layer
        self.dot_locator = dot_locator
        # insertion order == placement order == export order
        self.decorations: Dict[int, Decoration] = {}
        self.elements: Dict[int, Element] = {}
        self.interactive = False
        self._next_id = 1
        self.handle: Optional[AnimationHandle] = None

    def __len__(self) -> int:
        return len(self.decorations)

    # ------------------------------------------------------------------ #
    # Lookups

    def find_at_dot(self, index: int) -> Optional[int]:
        for dec in self.decorations.values():
            if dec.dot_index == index:
                return dec.id
        return None

    def emoji_at_dot(self, index: int) -> Optional[str]:
        dec_id = self.find_at_dot(index)
        if dec_id is None:
            return None
        return self.decorations[dec_id].emoji

    def get(self, dec_id: int) -> Optional[Decoration]:
        return self.decorations.get(dec_id)

    # ------------------------------------------------------------------ #
    # Placement

    def _default_size(self, size: Optional[float]) -> float:
        if size is None or size <= 0:
            return float(self.params.emoji_size)
        return float(size)

    def _add(self, emoji: str, size: float, anchor, rx: float, ry: float) -> int:
        dec = Decoration(id=self._next_id, emoji=emoji, size=size, anchor=anchor, rx=rx, ry=ry)
        self._next_id += 1
        el = self.layer.create(
            KIND_STICKER,
            text=emoji,
            z_index=STICKER_Z,
            interactive=self.interactive,
        )
        self.decorations[dec.id] = dec
        self.elements[dec.id] = el
        self._position(dec, el, self.resolver.get_center())
        return dec.id

    def place_at_dot(self, index: int, emoji: str, size: Optional[float] = None) -> Optional[int]:
        if not emoji:
            return None
        pos = self.dot_locator(index)
        if pos is None:
            return None
        self.remove_at_dot(index)
        cx, cy = self.resolver.get_center()
        return self._add(emoji, self._default_size(size), DotAnchor(index), pos[0] - cx, pos[1] - cy)

    def place_at_point(self, x: float, y: float, emoji: str, size: Optional[float] = None) -> Optional[int]:
        if not emoji:
            return None
        cx, cy = self.resolver.get_center()
        return self._add(emoji, self._default_size(size), PointAnchor(), x - cx, y - cy)

    def import_records(self, records: Iterable[DecorationRecord]) -> List[int]:
        """Recreate stickers from offset-form records (e.g. a decoded link)."""
        ids: List[int] = []
        for rec in records:
            if not rec.emoji:
                continue
            if rec.dot_index is not None:
                # keep one sticker per dot, last one wins
                self.remove_at_dot(rec.dot_index)
            ids.append(self._add(rec.emoji, self._default_size(rec.size), rec.anchor, rec.rx, rec.ry))
        return ids

    # ------------------------------------------------------------------ #
    # Removal

    def remove(self, dec_id: int) -> None:
        self.decorations.pop(dec_id, None)
        self.layer.destroy(self.elements.pop(dec_id, None))

    def remove_at_dot(self, index: int) -> None:
        dec_id = self.find_at_dot(index)
        if dec_id is not None:
            self.remove(dec_id)

    def remove_all(self) -> None:
        for dec_id in list(self.decorations):
            self.remove(dec_id)

    def prune(self, dot_count: int) -> List[int]:
        """Drop stickers whose dot no longer exists. Returns the removed ids."""
        dangling = [
            dec.id for dec in self.decorations.values()
            if dec.dot_index is not None and dec.dot_index >= dot_count
        ]
        for dec_id in dangling:
            self.remove(dec_id)
        if dangling:
            log.debug("pruned %d stickers anchored past dot %d", len(dangling), dot_count)
        return dangling

    # ------------------------------------------------------------------ #
    # Positioning / styling

    def _position(self, dec: Decoration, el: Element, center: Vec2) -> None:
        half = dec.size / 2
        el.resize(dec.size)
        el.place(center[0] + dec.rx - half, center[1] + dec.ry - half)

    def screen_position(self, dec_id: int) -> Optional[Vec2]:
        dec = self.decorations.get(dec_id)
        if dec is None:
            return None
        cx, cy = self.resolver.get_center()
        return (cx + dec.rx, cy + dec.ry)

    def reanchor(self) -> None:
        center = self.resolver.get_center()
        for dec_id, dec in self.decorations.items():
            self._position(dec, self.elements[dec_id], center)

    def set_global_size(self, px: float) -> None:
        size = float(px)
        if size <= 0:
            return
        for dec in self.decorations.values():
            dec.size = size
        self.reanchor()

    def set_interactivity(self, enabled: bool) -> None:
        self.interactive = bool(enabled)
        for el in self.elements.values():
            el.interactive = self.interactive

    def hit_test(self, px: float, py: float) -> Optional[int]:
        el = self.layer.hit_test(px, py, KIND_STICKER)
        if el is None:
            return None
        for dec_id, owned in self.elements.items():
            if owned is el:
                return dec_id
        return None

    # ------------------------------------------------------------------ #
    # Export

    def export_all(self) -> List[DecorationRecord]:
        return [dec.to_record() for dec in self.decorations.values()]

    # ------------------------------------------------------------------ #
    # Frame loop

    def _on_frame(self, now_ms: int) -> None:
        self.reanchor()

    def start(self, scheduler: FrameScheduler) -> AnimationHandle:
        self.stop()
        self.handle = start_animation(scheduler, self._on_frame, ORDER_AFTER_LAYOUT)
        return self.handle

    def stop(self) -> None:
        if self.handle is not None:
            self.handle.stop()

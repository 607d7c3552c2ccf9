from __future__ import annotations

"""
snowtree/render/elements.py

A small retained-mode element tree.

The tree engine and the decoration manager never draw directly: they
create elements here, mutate their position/style every frame, and destroy
them when they go away. The layer draws everything in stacking order.
Each owner only ever touches the elements it created.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import pygame

RGB = Tuple[int, int, int]

KIND_DOT = "dot"
KIND_STICKER = "sticker"

DOT_COLOR: RGB = (255, 236, 170)
STICKER_Z = 9999

EMOJI_FONTS = "segoeuiemoji,notocoloremoji,applecoloremoji,symbola"


def _clamp_u8(x: float) -> int:
    return max(0, min(255, int(x)))


@dataclass
class Element:
    id: int
    kind: str
    x: float = 0.0          # top-left
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    opacity: float = 1.0
    z_index: int = 0
    text: str = ""
    color: RGB = DOT_COLOR
    interactive: bool = False
    attached: bool = True

    def place(self, x: float, y: float) -> None:
        self.x = x
        self.y = y

    def resize(self, size: float) -> None:
        self.width = size
        self.height = size

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px < self.x + self.width and self.y <= py < self.y + self.height


class ElementLayer:
    def __init__(self) -> None:
        self._elements: Dict[int, Element] = {}
        self._next_id = 1
        # cached glyph fonts: key = pixel size
        self._fonts: Dict[int, pygame.font.Font] = {}

    # ---- tree operations ------------------------------------------------ #

    def create(self, kind: str, **style) -> Element:
        el = Element(id=self._next_id, kind=kind, **style)
        self._next_id += 1
        self._elements[el.id] = el
        return el

    def destroy(self, el: Optional[Element]) -> None:
        if el is None:
            return
        el.attached = False
        self._elements.pop(el.id, None)

    def __len__(self) -> int:
        return len(self._elements)

    def of_kind(self, kind: str) -> List[Element]:
        return [el for el in self._elements.values() if el.kind == kind]

    def stacked(self) -> List[Element]:
        """Bottom-to-top. Ties keep creation order."""
        return sorted(self._elements.values(), key=lambda el: (el.z_index, el.id))

    def hit_test(self, px: float, py: float, kind: Optional[str] = None) -> Optional[Element]:
        """Topmost interactive element under the point, if any."""
        for el in reversed(self.stacked()):
            if not el.interactive:
                continue
            if kind is not None and el.kind != kind:
                continue
            if el.contains(px, py):
                return el
        return None

    # ---- drawing -------------------------------------------------------- #

    def _font(self, size: int) -> pygame.font.Font:
        font = self._fonts.get(size)
        if font is None:
            if not pygame.font.get_init():
                pygame.font.init()
            font = pygame.font.SysFont(EMOJI_FONTS, size)
            self._fonts[size] = font
        return font

    def _draw_dot(self, surface: pygame.Surface, el: Element) -> None:
        d = max(1, int(round(el.width)))
        sprite = pygame.Surface((d, d), pygame.SRCALPHA)
        r = d / 2
        pygame.draw.circle(sprite, (*el.color, _clamp_u8(el.opacity * 255)), (r, r), r)
        surface.blit(sprite, (el.x, el.y))

    def _draw_sticker(self, surface: pygame.Surface, el: Element) -> None:
        size = max(1, int(round(el.height)))
        glyph = self._font(size).render(el.text, True, (255, 255, 255))
        glyph.set_alpha(_clamp_u8(el.opacity * 255))
        cx, cy = el.center
        surface.blit(glyph, glyph.get_rect(center=(int(cx), int(cy))))

    def draw(self, surface: pygame.Surface, min_z: Optional[int] = None, max_z: Optional[int] = None) -> None:
        """Draw elements with min_z <= z_index < max_z (either bound optional)."""
        for el in self.stacked():
            if min_z is not None and el.z_index < min_z:
                continue
            if max_z is not None and el.z_index >= max_z:
                continue
            if el.kind == KIND_STICKER:
                self._draw_sticker(surface, el)
            else:
                self._draw_dot(surface, el)

# snowtree/ui/widgets.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

import pygame

from snowtree.state.params import FIELD_SPECS, TreeParams


@dataclass
class WidgetContext:
    """
    Lightweight context passed into widget methods.

    - surface:  the surface the widget should draw into
    - scene:    the owning Scene (or None if not relevant)
    - renderer: the active renderer (fonts, colors)
    """
    surface: pygame.Surface
    scene: object | None
    renderer: object


class Widget:
    """
    Minimal base class for UI widgets.

    Keeps a rect (for layout and hit-testing), optional children, and
    overridable layout / draw / handle_event hooks.
    """

    def __init__(self) -> None:
        self.rect: pygame.Rect = pygame.Rect(0, 0, 0, 0)
        self.visible: bool = True
        self.children: List[Widget] = []

    def add_child(self, child: "Widget") -> None:
        self.children.append(child)

    def layout(self, ctx: WidgetContext) -> None:
        for child in self.children:
            child.layout(ctx)

    def draw(self, ctx: WidgetContext) -> None:
        if not self.visible:
            return
        for child in self.children:
            child.draw(ctx)

    def handle_event(self, event, ctx: WidgetContext) -> bool:
        """Return True if the event was consumed."""
        # Later-added children are treated as "on top".
        for child in reversed(self.children):
            if child.handle_event(event, ctx):
                return True
        return False


class LabelWidget(Widget):
    def __init__(
        self,
        text: str = "",
        *,
        text_fn: Optional[Callable[[], str]] = None,
        color: Optional[tuple[int, int, int]] = None,
        padding: int = 0,
    ) -> None:
        super().__init__()
        self.text = text
        self.text_fn = text_fn
        self.color = color
        self.padding = padding

    def current_text(self) -> str:
        return self.text_fn() if self.text_fn is not None else self.text

    def _font(self, ctx: WidgetContext) -> pygame.font.Font:
        return getattr(ctx.renderer, "small_font", getattr(ctx.renderer, "font"))

    def layout(self, ctx: WidgetContext) -> None:
        w, h = self._font(ctx).size(self.current_text())
        # x/y are chosen by the container.
        self.rect.width = w + 2 * self.padding
        self.rect.height = h + 2 * self.padding
        super().layout(ctx)

    def draw(self, ctx: WidgetContext) -> None:
        if not self.visible:
            return
        color = self.color or getattr(ctx.renderer, "fg", (255, 255, 255))
        text_surf = self._font(ctx).render(self.current_text(), True, color)
        ctx.surface.blit(text_surf, (self.rect.x + self.padding, self.rect.y + self.padding))
        super().draw(ctx)


class SidePanel(Widget):
    """
    Read-only settings readout docked on the left edge.

    The center resolver reads `visible` and `rendered_width` live, so
    toggling the panel re-centers the tree on the very next frame.
    """

    def __init__(self, params: TreeParams, width: int = 320, visible: bool = False) -> None:
        super().__init__()
        self.params = params
        self.width = width
        self.rect = pygame.Rect(0, 0, width, 0)
        self.visible = visible
        self.status: str = ""
        for spec in FIELD_SPECS:
            self.add_child(LabelWidget(text_fn=self._field_text(spec.wire), padding=2))
        self.add_child(LabelWidget(text_fn=lambda: self.status, padding=2))

    def _field_text(self, wire: str) -> Callable[[], str]:
        return lambda: f"{wire:<10} {self.params.get(wire):>6}"

    def toggle(self) -> bool:
        self.visible = not self.visible
        return self.visible

    @property
    def rendered_width(self) -> float:
        return float(self.rect.width if self.visible else 0)

    def layout(self, ctx: WidgetContext) -> None:
        height = ctx.surface.get_height()
        self.rect = pygame.Rect(0, 0, self.width, height)
        y = 16
        for child in self.children:
            child.layout(ctx)
            child.rect.x = 16
            child.rect.y = y
            y += child.rect.height + 4

    def draw(self, ctx: WidgetContext) -> None:
        if not self.visible:
            return
        bg = pygame.Surface(self.rect.size, pygame.SRCALPHA)
        bg.fill((20, 24, 40, 200))
        ctx.surface.blit(bg, self.rect.topleft)
        super().draw(ctx)

    def handle_event(self, event, ctx: WidgetContext) -> bool:
        # Swallow clicks on the panel so they don't place stickers behind it.
        if not self.visible:
            return False
        if event.type in (pygame.MOUSEBUTTONDOWN, pygame.MOUSEBUTTONUP):
            return self.rect.collidepoint(event.pos)
        return False

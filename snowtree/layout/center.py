"""Tree center resolution (viewport + offsets + side panel)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

from snowtree.state.params import TreeParams

Vec2 = Tuple[float, float]

WIDE_BREAKPOINT = 1024


@dataclass
class Viewport:
    width: int
    height: int
    wide_breakpoint: int = WIDE_BREAKPOINT

    def resize(self, width: int, height: int) -> None:
        self.width = max(0, int(width))
        self.height = max(0, int(height))

    @property
    def is_wide(self) -> bool:
        return self.width >= self.wide_breakpoint


class PanelLike(Protocol):
    visible: bool

    @property
    def rendered_width(self) -> float: ...


class CenterResolver:
    """
    Answers "where is the tree center right now?".

    Nothing is cached: the viewport and the panel change on their own
    schedule (resize events, panel toggles), so every call reads them live.
    """

    def __init__(
        self,
        viewport: Viewport,
        params: TreeParams,
        panel: Optional[PanelLike] = None,
    ) -> None:
        self.viewport = viewport
        self.params = params
        self.panel = panel

    def panel_shift(self) -> float:
        # On wide layouts the panel sits on the left; shift right by half its
        # width so the tree centers in the remaining visible area.
        if not self.viewport.is_wide:
            return 0.0
        panel = self.panel
        if panel is None or not panel.visible:
            return 0.0
        return panel.rendered_width / 2

    def center_for(self, params: TreeParams) -> Vec2:
        cx = self.viewport.width / 2 + self.panel_shift() + params.x_offset
        cy = self.viewport.height / 2 + params.y_offset
        return (cx, cy)

    def get_center(self) -> Vec2:
        return self.center_for(self.params)

"""Breathing tree of dots laid out on a tapered, stacked ellipse."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from snowtree.frames import AnimationHandle, FrameScheduler, ORDER_SIMULATION, start_animation
from snowtree.layout.center import CenterResolver, Vec2
from snowtree.render.elements import Element, ElementLayer, KIND_DOT
from snowtree.state.params import TreeParams

log = logging.getLogger(__name__)

OPACITY_MIN = 0.2
OPACITY_MAX = 1.0
BASE_Z = 10

RebuildListener = Callable[[int], None]


@dataclass(frozen=True)
class DotPose:
    index: int
    x: float        # element top-left
    y: float
    size: float
    depth: float
    opacity: float
    z_index: int

    @property
    def center(self) -> Vec2:
        return (self.x + self.size / 2, self.y + self.size / 2)


def layout_dot(index: int, total: int, phase: float, params: TreeParams, center: Vec2) -> DotPose:
    """
    Closed-form pose of one dot.

    Dots trail each other around an ellipse by a phase delay; the orbit
    radius shrinks toward earlier indices (taper) and each index is pushed
    down by `gap` pixels, which stacks the rings into a cone.
    """
    cx, cy = center
    delay = (params.delay / total) * index
    angle = phase - delay * 0.01

    radius = params.x_scale - params.taper * (total - index)
    x = cx + radius * math.cos(angle)
    y = cy + params.y_scale * math.sin(angle)
    top = y + params.gap * index

    depth = math.sin(angle)
    opacity = OPACITY_MIN + (OPACITY_MAX - OPACITY_MIN) * (1 + depth) / 2
    return DotPose(
        index=index,
        x=x,
        y=top,
        size=params.size,
        depth=depth,
        opacity=opacity,
        z_index=BASE_Z + math.floor(depth * 100),
    )


def layout_tree(total: int, phase: float, params: TreeParams, center: Vec2) -> List[DotPose]:
    # total == 0 never reaches the delay division.
    return [layout_dot(i, total, phase, params, center) for i in range(total)]


class TreeEngine:
    """
    Owns the dot elements and the shared phase angle.

    The dot collection is only ever changed by tearing it down and building
    it again (set_dot_count / rebuild); listeners are told the new count so
    they can drop anything anchored to a dot that no longer exists.
    """

    def __init__(self, params: TreeParams, resolver: CenterResolver, layer: ElementLayer) -> None:
        self.params = params
        self.resolver = resolver
        self.layer = layer
        self.phase = 0.0
        self.dots: List[Element] = []
        self.poses: List[DotPose] = []
        self.handle: Optional[AnimationHandle] = None
        self._rebuild_listeners: List[RebuildListener] = []

    # ------------------------------------------------------------------ #
    # Dot collection

    def add_rebuild_listener(self, listener: RebuildListener) -> None:
        self._rebuild_listeners.append(listener)

    @property
    def dot_count(self) -> int:
        return len(self.dots)

    def set_dot_count(self, n: int) -> None:
        n = max(0, int(n))
        self.params.set("count", n)
        n = self.params.count
        for el in self.dots:
            self.layer.destroy(el)
        self.dots = [self.layer.create(KIND_DOT) for _ in range(n)]
        self.poses = []
        log.debug("tree rebuilt with %d dots", n)
        for listener in list(self._rebuild_listeners):
            listener(n)
        # Give the fresh elements a pose right away so dot_center() is valid
        # before the next frame runs.
        self._apply_layout()

    def rebuild(self) -> None:
        self.set_dot_count(self.params.count)

    # ------------------------------------------------------------------ #
    # Per-frame layout

    def _apply_layout(self) -> None:
        total = len(self.dots)
        if total == 0:
            self.poses = []
            return
        center = self.resolver.get_center()
        self.poses = layout_tree(total, self.phase, self.params, center)
        for el, pose in zip(self.dots, self.poses):
            el.place(pose.x, pose.y)
            el.resize(pose.size)
            el.opacity = pose.opacity
            el.z_index = pose.z_index

    def tick(self, phase_delta: float = 0.02) -> List[DotPose]:
        """Lay every dot out at the current phase, then advance the phase."""
        self._apply_layout()
        self.phase += phase_delta
        return self.poses

    def pose(self, index: int) -> Optional[DotPose]:
        if 0 <= index < len(self.poses):
            return self.poses[index]
        return None

    def dot_center(self, index: int) -> Optional[Vec2]:
        """Live on-screen center of a dot, or None for an invalid index."""
        if not 0 <= index < len(self.dots):
            return None
        return self.dots[index].center

    def nearest_dot(self, px: float, py: float, max_dist: float) -> Optional[int]:
        best: Tuple[float, int] | None = None
        for i, el in enumerate(self.dots):
            cx, cy = el.center
            d = math.hypot(px - cx, py - cy)
            if d <= max_dist and (best is None or d < best[0]):
                best = (d, i)
        return None if best is None else best[1]

    # ------------------------------------------------------------------ #
    # Frame loop

    def _on_frame(self, now_ms: int) -> None:
        self.tick()

    def start(self, scheduler: FrameScheduler) -> AnimationHandle:
        self.stop()
        self.handle = start_animation(scheduler, self._on_frame, ORDER_SIMULATION)
        return self.handle

    def stop(self) -> None:
        if self.handle is not None:
            self.handle.stop()

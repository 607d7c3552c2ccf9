"""Falling snow particle field drawn onto a raster surface."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import pygame

from snowtree.frames import AnimationHandle, FrameScheduler, ORDER_SIMULATION, start_animation
from snowtree.rng import RNG, new_rng

log = logging.getLogger(__name__)

SNOW_FILL = (255, 255, 255, 77)  # white at ~0.3 alpha
RESPAWN_Y = -10
SIDE_MARGIN = 5


@dataclass
class Snowflake:
    x: float
    y: float
    radius: float   # visual size, fixed at creation
    density: float  # fall phase offset, fixed at creation


class SnowField:
    """
    Fixed-size pool of snowflakes.

    The pool never grows or shrinks after initialize(); flakes that leave
    the bounds are respawned in place, keeping their radius and density.
    """

    def __init__(self, rng: Optional[RNG] = None) -> None:
        self.rng = rng or new_rng()
        self.flakes: List[Snowflake] = []
        self.width = 0
        self.height = 0
        self.phase = 0.0
        self.handle: Optional[AnimationHandle] = None

    # ------------------------------------------------------------------ #
    # Setup

    def initialize(self, pool_size: int, bounds: Tuple[int, int]) -> None:
        pool_size = max(0, int(pool_size))
        self.width, self.height = int(bounds[0]), int(bounds[1])
        rnd = self.rng.random
        self.flakes = [
            Snowflake(
                x=rnd() * self.width,
                y=rnd() * self.height,
                radius=rnd() * 2 + 1,
                density=rnd() * pool_size,
            )
            for _ in range(pool_size)
        ]
        log.debug("snow field seeded with %d flakes in %dx%d", pool_size, self.width, self.height)

    def resize(self, width: int, height: int) -> None:
        # Positions are left alone; stragglers re-enter through recycling.
        self.width = max(0, int(width))
        self.height = max(0, int(height))

    # ------------------------------------------------------------------ #
    # Simulation

    def _out_of_bounds(self, f: Snowflake) -> bool:
        return f.x > self.width + SIDE_MARGIN or f.x < -SIDE_MARGIN or f.y > self.height

    def _respawn(self, index: int, f: Snowflake, sway: float) -> None:
        rnd = self.rng.random
        if index % 3 != 0:
            # two of three come back in from the top
            f.x = rnd() * self.width
            f.y = RESPAWN_Y
        else:
            # the rest drift in from whichever side the wind blows from
            f.x = -SIDE_MARGIN if sway > 0 else self.width + SIDE_MARGIN
            f.y = rnd() * self.height

    def tick(self, phase_delta: float = 0.01) -> None:
        self.phase += phase_delta
        phase = self.phase
        sway = math.sin(phase)
        for i, f in enumerate(self.flakes):
            f.y += math.cos(phase + f.density) + 1 + f.radius / 2
            f.x += sway * 0.2
            if self._out_of_bounds(f):
                self._respawn(i, f, sway)

    # ------------------------------------------------------------------ #
    # Drawing

    def render(self, surface: pygame.Surface) -> None:
        """Clear the surface and draw every flake as a translucent disc."""
        surface.fill((0, 0, 0, 0))
        for f in self.flakes:
            pygame.draw.circle(surface, SNOW_FILL, (f.x, f.y), f.radius)

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

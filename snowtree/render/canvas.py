"""Pygame window renderer: background, element layer, snow layer, HUD."""
import logging
from typing import Tuple

import pygame

from snowtree.render.elements import ElementLayer
from snowtree.snow import SnowField

log = logging.getLogger(__name__)

# Stacking slot of the snow layer inside the element layer's z range:
# dots facing the viewer (z > 0) draw over the snow, the back of the tree under it.
SNOW_Z = 1


class SceneRenderer:
    def __init__(self, width: int, height: int, title: str = "snowtree") -> None:
        pygame.init()
        self.width = width
        self.height = height
        self.surface_flags = pygame.RESIZABLE
        self.fullscreen = False
        self.display = pygame.display.set_mode((width, height), self.surface_flags)
        pygame.display.set_caption(title)
        # snow has its own cleared-every-frame raster surface
        self.snow_surface = pygame.Surface((width, height), pygame.SRCALPHA)
        self.font = pygame.font.SysFont("consolas", 20)
        self.small_font = pygame.font.SysFont("consolas", 16)
        self.bg = (8, 12, 28)
        self.fg = (220, 230, 240)
        self.dim = (120, 130, 150)
        self.sel = (255, 230, 120)
        self.quit_requested = False

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def handle_resize(self, width: int, height: int) -> None:
        self.width = max(1, int(width))
        self.height = max(1, int(height))
        if not self.fullscreen:
            self.display = pygame.display.set_mode((self.width, self.height), self.surface_flags)
        self.snow_surface = pygame.Surface((self.width, self.height), pygame.SRCALPHA)
        log.debug("renderer resized to %dx%d", self.width, self.height)

    def toggle_fullscreen(self) -> None:
        flags = self.display.get_flags()
        if flags & pygame.FULLSCREEN:
            self.display = pygame.display.set_mode((self.width, self.height), self.surface_flags)
            self.fullscreen = False
        else:
            self.display = pygame.display.set_mode((0, 0), pygame.FULLSCREEN)
            self.fullscreen = True
        self.handle_resize(*self.display.get_size())

    def draw_scene(self, snow: SnowField, layer: ElementLayer) -> None:
        surface = self.display
        surface.fill(self.bg)
        layer.draw(surface, max_z=SNOW_Z)
        snow.render(self.snow_surface)
        surface.blit(self.snow_surface, (0, 0))
        layer.draw(surface, min_z=SNOW_Z)

    def draw_text(self, text: str, pos: Tuple[int, int], color=None) -> None:
        surf = self.small_font.render(text, True, color or self.dim)
        self.display.blit(surf, pos)

    def present(self) -> None:
        pygame.display.flip()

    def teardown(self) -> None:
        pygame.quit()

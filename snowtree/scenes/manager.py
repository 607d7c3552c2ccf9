# manager.py
from __future__ import annotations

from typing import List, Optional

import pygame

from snowtree.config import AppConfig
from snowtree.frames import FrameScheduler
from snowtree.render.canvas import SceneRenderer

from .base import Scene


class SceneManager:
    def __init__(self, cfg: AppConfig, renderer: SceneRenderer) -> None:
        self.cfg = cfg
        self.renderer = renderer
        # One scheduler per window: every animated component queues its
        # next frame here and the live loop dispatches once per refresh.
        self.scheduler = FrameScheduler()
        self.scene_stack: List[Scene] = []

    # ------------------------------------------------------------------ #
    # Stack operations

    def push_scene(self, scene: Scene) -> None:
        self.scene_stack.append(scene)
        scene.enter(self)

    def pop_scene(self) -> None:
        if not self.scene_stack:
            return
        scene = self.scene_stack.pop()
        scene.exit(self)

    def set_scene(self, scene: Optional[Scene]) -> None:
        while self.scene_stack:
            self.pop_scene()
        if scene is not None:
            self.push_scene(scene)

    # ------------------------------------------------------------------ #
    # Live loop

    def run(self) -> None:
        renderer = self.renderer
        clock = pygame.time.Clock()

        while self.scene_stack:
            scene = self.scene_stack[-1]
            dt = clock.tick(self.cfg.fps)

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.set_scene(None)
                    return

                if event.type == pygame.VIDEORESIZE:
                    renderer.handle_resize(event.w, event.h)
                    scene.handle_resize(renderer.width, renderer.height, self)
                    continue

                # Global fullscreen toggle
                if event.type == pygame.KEYDOWN and event.key == pygame.K_F11:
                    renderer.toggle_fullscreen()
                    scene.handle_resize(renderer.width, renderer.height, self)
                    continue

                scene.handle_event(event, self)

            if not self.scene_stack or self.scene_stack[-1] is not scene:
                continue

            scene.update(dt, self)
            self.scheduler.dispatch(pygame.time.get_ticks())
            scene.render(renderer, self)
            renderer.present()

            if renderer.quit_requested:
                renderer.quit_requested = False
                self.set_scene(None)

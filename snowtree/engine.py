from __future__ import annotations

"""
Engine entry point: owns the window and the live loop.

The SceneManager drives one refresh at a time: events, the frame
scheduler (snow, tree and sticker callbacks), then rendering.
"""

from typing import Optional

from snowtree.config import AppConfig
from snowtree.render.canvas import SceneRenderer
from snowtree.rng import new_rng
from snowtree.scenes import SceneManager, TreeScene


class Engine:
    def __init__(self, cfg: AppConfig, query: Optional[str] = None, seed: Optional[int] = None) -> None:
        self.cfg = cfg
        self.renderer = SceneRenderer(cfg.view_width, cfg.view_height)
        self.manager = SceneManager(cfg, self.renderer)
        self.scene = TreeScene(cfg, query=query, rng=new_rng(seed))

    def run(self) -> None:
        try:
            self.manager.set_scene(self.scene)
            self.manager.run()
        finally:
            # stop() is idempotent; set_scene(None) may already have run it
            self.scene.stop()
            self.renderer.teardown()

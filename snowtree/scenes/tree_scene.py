from __future__ import annotations

import logging
from typing import Optional

import pygame

from snowtree import codec
from snowtree.config import AppConfig
from snowtree.decorations import DecorationManager
from snowtree.layout.center import CenterResolver, Viewport
from snowtree.render.elements import ElementLayer
from snowtree.rng import RNG
from snowtree.snow import SnowField
from snowtree.tree import TreeEngine
from snowtree.ui.widgets import SidePanel, WidgetContext

from .base import Scene

log = logging.getLogger(__name__)

COUNT_STEP = 5
EMOJI_SIZE_STEP = 2

FOOTER_HELP = (
    "click: place  E: eraser  1-9: emoji  Up/Down: dots  [ ]: emoji size  "
    "Tab: panel  Del: clear  S: share  Esc: quit"
)


class TreeScene(Scene):
    """
    The one and only scene: snow behind/around a breathing tree that can be
    decorated with emoji and shared as a link.

    Components are built up front so the scene can be exercised without a
    window; enter() only starts their frame loops.
    """

    def __init__(self, cfg: AppConfig, query: Optional[str] = None, rng: Optional[RNG] = None) -> None:
        self.cfg = cfg
        self.params = cfg.initial_params()
        self.viewport = Viewport(cfg.view_width, cfg.view_height, cfg.wide_breakpoint)
        self.panel = SidePanel(self.params, width=cfg.panel_width, visible=cfg.panel_visible)
        self.resolver = CenterResolver(self.viewport, self.params, self.panel)
        self.layer = ElementLayer()

        self.snow = SnowField(rng)
        self.snow.initialize(cfg.snow_pool_size, (self.viewport.width, self.viewport.height))

        self.tree = TreeEngine(self.params, self.resolver, self.layer)
        self.decorations = DecorationManager(self.params, self.resolver, self.layer, self.tree.dot_center)
        self.tree.add_rebuild_listener(self.decorations.prune)

        self.palette = list(cfg.palette)
        self.selected = 0
        self.eraser = False
        self.last_share_url: Optional[str] = None

        incoming = None
        if query:
            incoming = codec.decode_query(
                query, self.resolver.center_for, float(self.params.emoji_size), base=self.params
            )
        if incoming is not None:
            incoming.apply_to(self.params)
        self.tree.set_dot_count(self.params.count)
        if incoming is not None and incoming.decorations:
            self.decorations.import_records(incoming.decorations)
            self.decorations.prune(self.tree.dot_count)
            log.info("restored %d stickers from shared link", len(incoming.decorations))
        self._set_status("")

    # ------------------------------------------------------------------ #
    # Lifecycle

    def enter(self, manager) -> None:
        self.snow.start(manager.scheduler)
        self.tree.start(manager.scheduler)
        self.decorations.start(manager.scheduler)

    def exit(self, manager) -> None:
        self.stop()

    def stop(self) -> None:
        self.snow.stop()
        self.tree.stop()
        self.decorations.stop()

    # ------------------------------------------------------------------ #
    # Commands (what the bindings do)

    @property
    def selected_emoji(self) -> str:
        return self.palette[self.selected % len(self.palette)] if self.palette else ""

    def _set_status(self, text: str) -> None:
        mode = "eraser" if self.eraser else f"emoji {self.selected_emoji}"
        self.panel.status = f"{mode}  {text}".rstrip()

    def select_emoji(self, slot: int) -> None:
        if 0 <= slot < len(self.palette):
            self.selected = slot
            self._set_status("")

    def toggle_eraser(self) -> bool:
        self.eraser = not self.eraser
        self.decorations.set_interactivity(self.eraser)
        self._set_status("")
        return self.eraser

    def click(self, x: float, y: float) -> None:
        if self.eraser:
            dec_id = self.decorations.hit_test(x, y)
            if dec_id is not None:
                self.decorations.remove(dec_id)
            return
        emoji = self.selected_emoji
        if not emoji:
            return
        reach = self.params.size + self.params.emoji_size / 2
        index = self.tree.nearest_dot(x, y, reach)
        if index is None:
            self.decorations.place_at_point(x, y, emoji)
        elif self.decorations.emoji_at_dot(index) == emoji:
            # same emoji on the same dot toggles it off
            self.decorations.remove_at_dot(index)
        else:
            self.decorations.place_at_dot(index, emoji)

    def change_count(self, delta: int) -> None:
        self.params.nudge("count", delta)
        self.tree.set_dot_count(self.params.count)
        log.info("dot count -> %d", self.params.count)

    def change_emoji_size(self, delta: int) -> None:
        size = self.params.nudge("emojiSize", delta)
        self.decorations.set_global_size(size)

    def share_url(self) -> str:
        token = codec.encode(self.params, self.decorations.export_all())
        url = codec.build_share_url(self.cfg.share_base_url, token)
        self.last_share_url = url
        log.info("share link: %s", url)
        self._set_status("link logged")
        return url

    # ------------------------------------------------------------------ #
    # Live-loop hooks

    def handle_resize(self, width: int, height: int, manager) -> None:
        # Only bounds change here; the next frame picks them up.
        self.viewport.resize(width, height)
        self.snow.resize(width, height)
        self.tree.rebuild()

    def handle_event(self, event, manager) -> None:
        ctx = WidgetContext(surface=manager.renderer.display, scene=self, renderer=manager.renderer)
        if self.panel.handle_event(event, ctx):
            return

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self.click(*event.pos)
            return

        if event.type != pygame.KEYDOWN:
            return

        key = event.key
        if key == pygame.K_ESCAPE:
            manager.renderer.quit_requested = True
        elif key == pygame.K_e:
            self.toggle_eraser()
        elif key == pygame.K_TAB:
            self.panel.toggle()
        elif key == pygame.K_UP:
            self.change_count(COUNT_STEP)
        elif key == pygame.K_DOWN:
            self.change_count(-COUNT_STEP)
        elif key == pygame.K_RIGHTBRACKET:
            self.change_emoji_size(EMOJI_SIZE_STEP)
        elif key == pygame.K_LEFTBRACKET:
            self.change_emoji_size(-EMOJI_SIZE_STEP)
        elif key in (pygame.K_DELETE, pygame.K_BACKSPACE):
            self.decorations.remove_all()
        elif key == pygame.K_s:
            self.share_url()
        elif pygame.K_1 <= key <= pygame.K_9:
            self.select_emoji(key - pygame.K_1)

    def render(self, renderer, manager) -> None:
        renderer.draw_scene(self.snow, self.layer)
        ctx = WidgetContext(surface=renderer.display, scene=self, renderer=renderer)
        self.panel.layout(ctx)
        self.panel.draw(ctx)
        renderer.draw_text(FOOTER_HELP, (12, renderer.height - 24))

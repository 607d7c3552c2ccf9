from urllib.parse import urlencode

import pytest

from snowtree import codec
from snowtree.config import AppConfig
from snowtree.frames import FrameScheduler
from snowtree.rng import new_rng
from snowtree.scenes.tree_scene import TreeScene


class _Manager:
    def __init__(self):
        self.scheduler = FrameScheduler()


def _scene(query=None, **cfg_kw):
    cfg = AppConfig(view_width=800, view_height=600, snow_pool_size=20, **cfg_kw)
    return TreeScene(cfg, query=query, rng=new_rng(1))


def test_scene_builds_with_defaults():
    scene = _scene()
    assert scene.tree.dot_count == 50
    assert len(scene.snow.flakes) == 20
    assert len(scene.decorations) == 0


def test_click_near_dot_places_then_toggles_off():
    scene = _scene()
    scene.tree.tick()
    x, y = scene.tree.dot_center(12)
    index = scene.tree.nearest_dot(x, y, 1.0)
    scene.click(x, y)
    assert scene.decorations.emoji_at_dot(index) == scene.selected_emoji
    scene.click(x, y)
    assert scene.decorations.emoji_at_dot(index) is None


def test_click_on_empty_space_places_point_sticker():
    scene = _scene()
    scene.click(5, 590)
    (rec,) = scene.decorations.export_all()
    assert rec.dot_index is None
    cx, cy = scene.resolver.get_center()
    assert (rec.rx, rec.ry) == (5 - cx, 590 - cy)


def test_eraser_mode_removes_clicked_sticker():
    scene = _scene()
    scene.click(5, 590)
    scene.toggle_eraser()
    scene.click(5, 590)
    assert len(scene.decorations) == 0
    scene.toggle_eraser()
    scene.click(5, 590)
    assert len(scene.decorations) == 1


def test_count_change_prunes_dangling_stickers():
    scene = _scene()
    scene.decorations.place_at_dot(48, "⭐")
    scene.decorations.place_at_dot(1, "🎁")
    scene.change_count(-5)
    assert scene.tree.dot_count == 45
    assert [r.dot_index for r in scene.decorations.export_all()] == [1]


def test_share_link_restores_scene():
    scene = _scene()
    scene.params.update({"taper": 6, "gap": 12})
    scene.change_count(-20)
    scene.decorations.place_at_dot(3, "🦌")
    scene.decorations.place_at_point(100, 100, "🍬")
    url = scene.share_url()

    restored = _scene(query=url)
    assert restored.params.shareable() == scene.params.shareable()
    assert restored.tree.dot_count == 30
    assert restored.decorations.export_all() == scene.decorations.export_all()
    assert restored.decorations.screen_position(2) == pytest.approx((100.0, 100.0))


def test_broken_link_starts_with_defaults():
    scene = _scene(query="?state=%%%not-a-token")
    assert scene.params.shareable() == AppConfig().initial_params().shareable()


def test_legacy_sticker_blob_lands_against_configured_center():
    blob = codec.encode_legacy_emojis([{"x": 450, "y": 200, "emoji": "⭐"}])
    scene = _scene(query=urlencode({"emojis": blob}), tree={"xOffset": 50, "yOffset": -100})
    assert scene.resolver.get_center() == (450.0, 200.0)
    (rec,) = scene.decorations.export_all()
    assert (rec.rx, rec.ry) == (0.0, 0.0)
    assert scene.decorations.screen_position(1) == (450.0, 200.0)


def test_partial_legacy_fields_keep_configured_values_for_the_rest():
    blob = codec.encode_legacy_emojis([{"x": 520, "y": 230, "emoji": "🔔"}])
    query = urlencode({"xOffset": 100, "emojis": blob})
    scene = _scene(query=query, tree={"xOffset": 50, "yOffset": -100})
    assert (scene.params.x_offset, scene.params.y_offset) == (100, -100)
    assert scene.resolver.get_center() == (500.0, 200.0)
    (rec,) = scene.decorations.export_all()
    assert (rec.rx, rec.ry) == (20.0, 30.0)


def test_resize_keeps_sticker_offsets():
    scene = _scene()
    dec_id = scene.decorations.place_at_point(420, 100, "⭐")
    scene.handle_resize(1000, 800, _Manager())
    scene.decorations.reanchor()
    cx, cy = scene.resolver.get_center()
    # placed at center (400, -50): offset (20, 150)
    assert (cx, cy) == (500.0, 50.0)
    assert scene.decorations.screen_position(dec_id) == (520.0, 200.0)


def test_emoji_size_change_applies_globally():
    scene = _scene()
    dec_id = scene.decorations.place_at_point(100, 100, "⭐")
    scene.change_emoji_size(10)
    assert scene.params.emoji_size == 34
    assert scene.decorations.get(dec_id).size == 34.0


def test_enter_and_exit_drive_animation_handles():
    scene = _scene()
    manager = _Manager()
    scene.enter(manager)
    phase = scene.tree.phase
    manager.scheduler.dispatch(16)
    assert scene.tree.phase > phase
    assert scene.snow.phase > 0
    scene.exit(manager)
    scene.exit(manager)
    assert manager.scheduler.pending == 0

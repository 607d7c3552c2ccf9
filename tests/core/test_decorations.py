import pytest

from snowtree.decorations import DecorationManager
from snowtree.frames import FrameScheduler
from snowtree.layout.center import CenterResolver, Viewport
from snowtree.render.elements import ElementLayer, KIND_STICKER
from snowtree.state.params import TreeParams
from snowtree.state.stickers import DecorationRecord, DotAnchor, PointAnchor
from snowtree.tree import TreeEngine


@pytest.fixture
def scene():
    params = TreeParams(x_offset=0, y_offset=0, count=50, emoji_size=24)
    viewport = Viewport(800, 600)
    resolver = CenterResolver(viewport, params)
    layer = ElementLayer()
    tree = TreeEngine(params, resolver, layer)
    decorations = DecorationManager(params, resolver, layer, tree.dot_center)
    tree.add_rebuild_listener(decorations.prune)
    tree.set_dot_count(50)
    return params, viewport, tree, decorations, layer


def test_place_at_point_stores_center_offset(scene):
    params, viewport, tree, decorations, layer = scene
    dec_id = decorations.place_at_point(450, 320, "⭐")
    dec = decorations.get(dec_id)
    assert (dec.rx, dec.ry) == (50.0, 20.0)
    assert dec.anchor == PointAnchor()
    assert dec.size == 24.0
    assert decorations.screen_position(dec_id) == (450.0, 320.0)


def test_decoration_follows_center_exactly(scene):
    params, viewport, tree, decorations, layer = scene
    dec_id = decorations.place_at_point(450, 320, "⭐")
    cx, cy = 400.0, 300.0
    params.update({"xOffset": 37, "yOffset": -12})
    viewport.resize(1000, 700)
    decorations.reanchor()
    ncx, ncy = 500.0 + 37, 350.0 - 12
    assert decorations.screen_position(dec_id) == (450 + (ncx - cx), 320 + (ncy - cy))
    el = decorations.elements[dec_id]
    assert el.center == (450 + (ncx - cx), 320 + (ncy - cy))


def test_place_at_dot_uses_live_dot_position_once(scene):
    params, viewport, tree, decorations, layer = scene
    tree.tick()
    before = tree.dot_center(7)
    dec_id = decorations.place_at_dot(7, "🎁")
    assert decorations.screen_position(dec_id) == pytest.approx(before)
    for _ in range(30):
        tree.tick()
    decorations.reanchor()
    # the dot moved, the sticker did not
    assert tree.dot_center(7) != pytest.approx(before)
    assert decorations.screen_position(dec_id) == pytest.approx(before)
    assert decorations.get(dec_id).anchor == DotAnchor(7)


def test_place_at_dot_replaces_existing(scene):
    _, _, _, decorations, layer = scene
    first = decorations.place_at_dot(3, "🎁")
    second = decorations.place_at_dot(3, "🔔")
    assert second != first
    assert decorations.get(first) is None
    assert decorations.emoji_at_dot(3) == "🔔"
    assert len(layer.of_kind(KIND_STICKER)) == 1


def test_out_of_range_and_unknown_ids_are_noops(scene):
    _, _, _, decorations, layer = scene
    assert decorations.place_at_dot(50, "🎁") is None
    assert decorations.place_at_dot(-1, "🎁") is None
    assert decorations.place_at_point(1, 1, "") is None
    decorations.remove(999)
    decorations.remove_at_dot(4)
    assert len(decorations) == 0
    assert len(layer.of_kind(KIND_STICKER)) == 0


def test_ids_are_unique_and_increasing(scene):
    _, _, _, decorations, _ = scene
    ids = [decorations.place_at_point(i, i, "❄️") for i in range(5)]
    decorations.remove(ids[-1])
    ids.append(decorations.place_at_point(0, 0, "❄️"))
    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)


def test_shrink_then_grow_prunes_exactly_once(scene):
    params, _, tree, decorations, _ = scene
    low = decorations.place_at_dot(2, "🎁")
    high_a = decorations.place_at_dot(10, "⭐")
    high_b = decorations.place_at_dot(42, "🔔")
    free = decorations.place_at_point(10, 10, "🍬")

    removed = []
    original_prune = decorations.prune

    def spy(count):
        removed.extend(original_prune(count))

    tree._rebuild_listeners = [spy]
    tree.set_dot_count(10)
    tree.set_dot_count(50)

    assert sorted(removed) == sorted([high_a, high_b])
    assert decorations.get(low) is not None
    assert decorations.get(free) is not None
    assert len(decorations) == 2


def test_global_size_keeps_sticker_centered(scene):
    _, _, _, decorations, _ = scene
    dec_id = decorations.place_at_point(450, 320, "⭐")
    decorations.set_global_size(40)
    el = decorations.elements[dec_id]
    assert (el.width, el.height) == (40.0, 40.0)
    assert el.center == (450.0, 320.0)
    assert decorations.get(dec_id).size == 40.0


def test_interactivity_gates_hit_testing(scene):
    _, _, _, decorations, _ = scene
    dec_id = decorations.place_at_point(450, 320, "⭐")
    assert decorations.hit_test(450, 320) is None
    decorations.set_interactivity(True)
    assert decorations.hit_test(450, 320) == dec_id
    # stickers placed while enabled are interactive as well
    other = decorations.place_at_point(100, 100, "🎁")
    assert decorations.hit_test(100, 100) == other
    decorations.set_interactivity(False)
    assert decorations.hit_test(100, 100) is None


def test_export_and_import_records(scene):
    _, _, _, decorations, _ = scene
    decorations.place_at_point(450, 320, "⭐", size=30)
    decorations.place_at_dot(5, "🎁")
    records = decorations.export_all()
    assert records[0] == DecorationRecord(rx=50.0, ry=20.0, emoji="⭐", size=30.0, dot_index=None)
    assert records[1].dot_index == 5

    decorations.remove_all()
    assert decorations.export_all() == []
    decorations.import_records(records)
    assert decorations.export_all() == records


def test_import_gives_sizeless_stickers_the_current_emoji_size(scene):
    _, _, _, decorations, _ = scene
    (dec_id,) = decorations.import_records([DecorationRecord(rx=0.0, ry=0.0, emoji="⭐", size=0.0)])
    assert decorations.get(dec_id).size == 24.0


def test_reanchor_runs_after_layout_in_same_refresh(scene):
    params, _, tree, decorations, _ = scene
    scheduler = FrameScheduler()
    calls = []
    decorations.start(scheduler)
    tree.start(scheduler)
    original_tick, original_reanchor = tree.tick, decorations.reanchor
    tree.tick = lambda: (calls.append("tree"), original_tick())
    decorations.reanchor = lambda: (calls.append("stickers"), original_reanchor())
    scheduler.dispatch(16)
    scheduler.dispatch(32)
    assert calls == ["tree", "stickers", "tree", "stickers"]
    decorations.stop()
    tree.stop()
    decorations.stop()
    assert scheduler.pending == 0

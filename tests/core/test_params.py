import pytest

from snowtree.state.params import SHARE_FIELDS, TreeParams, parse_int


@pytest.mark.parametrize(
    "raw, expected",
    [("12", 12), (" -7", -7), ("12px", 12), ("3.9", 3), (5, 5), (2.7, 2),
     ("abc", None), ("", None), (None, None), (float("nan"), None), (True, None)],
)
def test_parse_int(raw, expected):
    assert parse_int(raw) == expected


def test_defaults_are_fully_populated():
    p = TreeParams()
    wire = p.to_wire()
    assert list(wire) == [
        "count", "xOffset", "yOffset", "xScale", "yScale",
        "delay", "gap", "taper", "size", "emojiSize",
    ]
    assert all(isinstance(v, int) for v in wire.values())


def test_from_mapping_defaults_bad_values_and_clamps():
    p = TreeParams.from_mapping({"count": "abc", "xScale": "99999", "gap": "-3", "size": "7", "nope": "1"})
    assert p.count == 50
    assert p.x_scale == 1000
    assert p.gap == 0
    assert p.size == 7


def test_update_reports_changes_only():
    p = TreeParams()
    changed = p.update({"count": "50", "taper": "6", "emoji_size": 30})
    assert changed == {"taper": 6, "emojiSize": 30}


def test_shareable_excludes_emoji_size():
    p = TreeParams()
    assert "emojiSize" not in p.shareable()
    assert tuple(p.shareable()) == SHARE_FIELDS


def test_nudge_clamps():
    p = TreeParams(count=2)
    assert p.nudge("count", -5) == 0
    assert p.count == 0


def test_construction_and_assignment_stay_in_range():
    p = TreeParams(count=800, delay=20000, taper=-2, gap=-5, x_scale=1500)
    assert (p.count, p.delay, p.taper, p.gap, p.x_scale) == (500, 10000, 0, 0, 1000)
    p.size = 0
    assert p.size == 1
    p.y_offset = "-120px"
    assert p.y_offset == -120


def test_from_mapping_over_base_keeps_unlisted_fields():
    live = TreeParams(x_offset=50, y_offset=-100, gap=12)
    p = TreeParams.from_mapping({"xOffset": "5"}, base=live)
    assert (p.x_offset, p.y_offset, p.gap) == (5, -100, 12)
    assert live.x_offset == 50


def test_copy_is_independent():
    p = TreeParams(count=7)
    q = p.copy()
    q.count = 9
    assert (p.count, q.count) == (7, 9)

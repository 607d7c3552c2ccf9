from __future__ import annotations

"""
Configuration vector for the tree animation.

Every field always holds an int. Values coming from the outside (UI
controls, query strings, YAML) go through parse_field(), which mirrors a
lenient integer parse ("12px" -> 12) and then clamps into the range of the
matching control. Anything unparseable falls back to the field default.
TreeParams runs every assignment through it, so a vector can never hold a
value outside its ranges.
"""

import re
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Tuple


@dataclass(frozen=True)
class FieldSpec:
    attr: str
    wire: str
    default: int
    lo: int
    hi: int
    shareable: bool = True


# Ordered: this is also the key order of the shareable payload.
FIELD_SPECS: Tuple[FieldSpec, ...] = (
    FieldSpec("count", "count", 50, 0, 500),
    FieldSpec("x_offset", "xOffset", 0, -1000, 1000),
    FieldSpec("y_offset", "yOffset", -350, -1000, 1000),
    FieldSpec("x_scale", "xScale", 200, 0, 1000),
    FieldSpec("y_scale", "yScale", 20, 0, 500),
    FieldSpec("delay", "delay", 2500, 0, 10000),
    FieldSpec("gap", "gap", 10, 0, 50),
    FieldSpec("taper", "taper", 4, 0, 20),
    FieldSpec("size", "size", 10, 1, 50),
    FieldSpec("emoji_size", "emojiSize", 24, 8, 96, shareable=False),
)

SPECS_BY_WIRE: Dict[str, FieldSpec] = {s.wire: s for s in FIELD_SPECS}
SPECS_BY_ATTR: Dict[str, FieldSpec] = {s.attr: s for s in FIELD_SPECS}

# Wire names carried by a shareable token (emojiSize is a local preference).
SHARE_FIELDS: Tuple[str, ...] = tuple(s.wire for s in FIELD_SPECS if s.shareable)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_int(value: Any) -> int | None:
    """Lenient integer parse. Returns None when there is no leading integer."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return int(value)
    m = _LEADING_INT.match(str(value))
    if not m:
        return None
    return int(m.group(1))


def parse_field(spec: FieldSpec, value: Any) -> int:
    parsed = parse_int(value)
    if parsed is None:
        return spec.default
    return max(spec.lo, min(spec.hi, parsed))


@dataclass
class TreeParams:
    """Live slider values. Engines hold a reference and read it every frame."""
    count: int = 50
    x_offset: int = 0
    y_offset: int = -350
    x_scale: int = 200
    y_scale: int = 20
    delay: int = 2500
    gap: int = 10
    taper: int = 4
    size: int = 10
    emoji_size: int = 24

    def __setattr__(self, name: str, value: Any) -> None:
        spec = SPECS_BY_ATTR.get(name)
        if spec is not None:
            value = parse_field(spec, value)
        super().__setattr__(name, value)

    # ---- construction -------------------------------------------------- #

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any], base: "TreeParams | None" = None) -> "TreeParams":
        """Build from wire-named values; missing fields come from base (or the defaults)."""
        params = base.copy() if base is not None else cls()
        params.update(values)
        return params

    # ---- mutation ------------------------------------------------------ #

    def update(self, values: Mapping[str, Any]) -> Dict[str, int]:
        """
        Apply wire-named (or attribute-named) values in place.

        Unknown keys are ignored. Returns {wire_name: new_value} for the
        fields that actually changed so callers can react (e.g. count).
        """
        changed: Dict[str, int] = {}
        for key, raw in values.items():
            spec = SPECS_BY_WIRE.get(key) or SPECS_BY_ATTR.get(key)
            if spec is None:
                continue
            new = parse_field(spec, raw)
            if getattr(self, spec.attr) != new:
                setattr(self, spec.attr, new)
                changed[spec.wire] = new
        return changed

    def set(self, wire: str, value: Any) -> int:
        spec = SPECS_BY_WIRE[wire]
        new = parse_field(spec, value)
        setattr(self, spec.attr, new)
        return new

    def nudge(self, wire: str, delta: int) -> int:
        spec = SPECS_BY_WIRE[wire]
        return self.set(wire, getattr(self, spec.attr) + delta)

    # ---- views --------------------------------------------------------- #

    def get(self, wire: str) -> int:
        return getattr(self, SPECS_BY_WIRE[wire].attr)

    def to_wire(self) -> Dict[str, int]:
        return {s.wire: getattr(self, s.attr) for s in FIELD_SPECS}

    def shareable(self) -> Dict[str, int]:
        """All fields except emojiSize, keyed by wire name."""
        return {s.wire: getattr(self, s.attr) for s in FIELD_SPECS if s.shareable}

    def copy(self) -> "TreeParams":
        return TreeParams(**{f.name: getattr(self, f.name) for f in fields(self)})

from __future__ import annotations

"""
snowtree/codec.py

Shareable-state token: slider values + stickers packed into one query
parameter.

Current format (query key "state"):
    JSON object -> UTF-8 bytes -> URL-safe base64 without padding.
    The JSON carries the nine shareable fields as decimal strings and,
    when there are stickers, an "emojis" list of
    {rx, ry, emoji, size, dotIndex}.

Legacy formats, still accepted:
    1. bare fields:   ?count=50&xOffset=0&yOffset=-350&...
    2. sticker blob:  ?emojis=<standard base64 of a UTF-8 JSON list>
       whose items carry absolute {x, y} (or {rx, ry}) coordinates.

Decoders are tried in a fixed order (current, then bare fields + blob).
Each one raises DecodeError on bad input; the public entry points turn
that into "no state present".
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

from snowtree.state.params import SHARE_FIELDS, SPECS_BY_WIRE, TreeParams, parse_field, parse_int
from snowtree.state.stickers import DecorationRecord

log = logging.getLogger(__name__)

STATE_KEY = "state"
LEGACY_EMOJI_KEY = "emojis"
DECORATIONS_KEY = "emojis"

Vec2 = Tuple[float, float]
CenterFor = Callable[[TreeParams], Vec2]
Query = Union[str, Mapping[str, Any]]


class DecodeError(ValueError):
    """A token or query could not be decoded."""


@dataclass
class StatePayload:
    fields: Dict[str, int] = field(default_factory=dict)
    decorations: List[DecorationRecord] = field(default_factory=list)

    def apply_to(self, params: TreeParams) -> Dict[str, int]:
        return params.update(self.fields)


# ---------------------------------------------------------------------------
# Transforms
# ---------------------------------------------------------------------------

def _to_token(text: str) -> str:
    raw = text.encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _from_token(token: str) -> str:
    token = token.strip()
    if not token:
        raise DecodeError("empty token")
    # Accept both alphabets and missing padding.
    token = token.replace("+", "-").replace("/", "_").replace(" ", "-")
    token += "=" * (-len(token) % 4)
    try:
        raw = base64.urlsafe_b64decode(token.encode("ascii"))
        return raw.decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise DecodeError(f"token is not valid base64/UTF-8: {exc}") from exc


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError as exc:
        raise DecodeError(f"payload is not JSON: {exc}") from exc


# ---------------------------------------------------------------------------
# Decoration records
# ---------------------------------------------------------------------------

def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        f = float(value)
    elif isinstance(value, str):
        try:
            f = float(value)
        except ValueError:
            return None
    else:
        return None
    if f != f or f in (float("inf"), float("-inf")):
        return None
    return f


def _record_from_item(item: Any, center: Vec2, default_size: float) -> DecorationRecord:
    if not isinstance(item, Mapping):
        raise DecodeError(f"decoration is not an object: {item!r}")
    emoji = item.get("emoji")
    if not isinstance(emoji, str) or not emoji:
        raise DecodeError("decoration has no emoji")

    rx, ry = _number(item.get("rx")), _number(item.get("ry"))
    if rx is None or ry is None:
        # absolute form; normalise against the import-time center
        x, y = _number(item.get("x")), _number(item.get("y"))
        if x is None or y is None:
            raise DecodeError("decoration has neither rx/ry nor x/y")
        rx, ry = x - center[0], y - center[1]

    size = _number(item.get("size"))
    if size is None:
        size = default_size

    dot_index = item.get("dotIndex")
    if dot_index is not None:
        dot_index = parse_int(dot_index)
        if dot_index is not None and dot_index < 0:
            dot_index = None
    return DecorationRecord(rx=rx, ry=ry, emoji=emoji, size=size, dot_index=dot_index)


def _records_from_list(items: Any, center: Vec2, default_size: float) -> List[DecorationRecord]:
    if not isinstance(items, list):
        raise DecodeError("decorations are not a list")
    records: List[DecorationRecord] = []
    for item in items:
        try:
            records.append(_record_from_item(item, center, default_size))
        except DecodeError as exc:
            # one bad sticker doesn't spoil the scene
            log.debug("skipping decoration: %s", exc)
    return records


def _record_to_item(rec: DecorationRecord) -> Dict[str, Any]:
    return {
        "rx": rec.rx,
        "ry": rec.ry,
        "emoji": rec.emoji,
        "size": rec.size,
        "dotIndex": rec.dot_index,
    }


# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------

def _fields_from(source: Mapping[str, Any]) -> Dict[str, int]:
    out: Dict[str, int] = {}
    for wire in SHARE_FIELDS:
        if wire in source:
            out[wire] = parse_field(SPECS_BY_WIRE[wire], source[wire])
    return out


def _center_for(fields: Dict[str, int], center_for: Optional[CenterFor], base: Optional[TreeParams]) -> Vec2:
    # Fields the link leaves out keep their import-time (base) values.
    if center_for is None:
        return (0.0, 0.0)
    return center_for(TreeParams.from_mapping(fields, base))


# ---------------------------------------------------------------------------
# Encode
# ---------------------------------------------------------------------------

def encode(params: TreeParams, decorations: Sequence[DecorationRecord] = ()) -> str:
    doc: Dict[str, Any] = {k: str(v) for k, v in params.shareable().items()}
    if decorations:
        doc[DECORATIONS_KEY] = [_record_to_item(rec) for rec in decorations]
    text = json.dumps(doc, ensure_ascii=False, separators=(",", ":"))
    return _to_token(text)


def build_share_url(base_url: str, token: str) -> str:
    """base_url with its query replaced by ?state=<token>."""
    parts = urlsplit(base_url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode({STATE_KEY: token}), ""))


def encode_legacy_query(params: TreeParams) -> str:
    """The old bare-field link query (no stickers)."""
    return urlencode({k: str(v) for k, v in params.shareable().items()})


def encode_legacy_emojis(items: Sequence[Mapping[str, Any]]) -> str:
    """The old sticker blob (standard base64 of a UTF-8 JSON list)."""
    text = json.dumps(list(items), ensure_ascii=False)
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


# ---------------------------------------------------------------------------
# Decode
# ---------------------------------------------------------------------------

def decode_strict(
    token: str,
    center_for: Optional[CenterFor] = None,
    default_size: float = 24.0,
    base: Optional[TreeParams] = None,
) -> StatePayload:
    doc = _parse_json(_from_token(token))
    if not isinstance(doc, dict):
        raise DecodeError("payload is not an object")
    fields = _fields_from(doc)
    decorations: List[DecorationRecord] = []
    if DECORATIONS_KEY in doc:
        center = _center_for(fields, center_for, base)
        decorations = _records_from_list(doc[DECORATIONS_KEY], center, default_size)
    return StatePayload(fields=fields, decorations=decorations)


def decode(
    token: str,
    center_for: Optional[CenterFor] = None,
    default_size: float = 24.0,
    base: Optional[TreeParams] = None,
) -> Optional[StatePayload]:
    """Decode a current-format token; None when it is malformed."""
    try:
        return decode_strict(token, center_for, default_size, base)
    except DecodeError as exc:
        log.debug("ignoring shared state token: %s", exc)
        return None


def decode_legacy_emojis(
    blob: str,
    center: Vec2 = (0.0, 0.0),
    default_size: float = 24.0,
) -> List[DecorationRecord]:
    blob = blob.strip()
    blob += "=" * (-len(blob) % 4)
    try:
        text = base64.b64decode(blob.replace(" ", "+").encode("ascii"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise DecodeError(f"legacy decoration blob is not base64/UTF-8: {exc}") from exc
    return _records_from_list(_parse_json(text), center, default_size)


def decode_legacy(
    params: Mapping[str, str],
    center_for: Optional[CenterFor] = None,
    default_size: float = 24.0,
    base: Optional[TreeParams] = None,
) -> StatePayload:
    fields = _fields_from(params)
    decorations: List[DecorationRecord] = []
    blob = params.get(LEGACY_EMOJI_KEY)
    if blob:
        try:
            decorations = decode_legacy_emojis(blob, _center_for(fields, center_for, base), default_size)
        except DecodeError as exc:
            log.debug("ignoring legacy decoration blob: %s", exc)
    if not fields and not decorations:
        raise DecodeError("no legacy fields present")
    return StatePayload(fields=fields, decorations=decorations)


def _query_params(query: Query) -> Dict[str, str]:
    if isinstance(query, Mapping):
        return {str(k): str(v) for k, v in query.items()}
    text = query.strip()
    if "?" in text:
        text = urlsplit(text).query
    parsed = parse_qs(text, keep_blank_values=False)
    # first value wins, as with URLSearchParams.get()
    return {k: v[0] for k, v in parsed.items() if v}


def decode_query(
    query: Query,
    center_for: Optional[CenterFor] = None,
    default_size: float = 24.0,
    base: Optional[TreeParams] = None,
) -> Optional[StatePayload]:
    """
    Decode whatever state a link carries, or None.

    query may be a full URL, a raw query string, or an already-parsed
    mapping of query parameters. Absolute sticker positions are normalised
    against the centre of base (the live configuration) with the link's
    fields applied on top.
    """
    params = _query_params(query)
    token = params.get(STATE_KEY)
    if token:
        try:
            return decode_strict(token, center_for, default_size, base)
        except DecodeError as exc:
            log.debug("state token unusable, trying legacy fields: %s", exc)
    try:
        return decode_legacy(params, center_for, default_size, base)
    except DecodeError as exc:
        log.debug("no shared state in query: %s", exc)
        return None

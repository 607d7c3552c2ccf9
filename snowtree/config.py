from __future__ import annotations

"""Application configuration loaded from YAML."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping

import yaml

from snowtree.state.params import TreeParams, parse_int

log = logging.getLogger(__name__)

DEFAULT_PALETTE = ["⭐", "🎁", "🔔", "❄️", "🍬", "🦌", "🎄", "🕯️", "🧦"]


class ConfigError(ValueError):
    """A config file could not be read or parsed."""


@dataclass
class AppConfig:
    view_width: int = 1280
    view_height: int = 900
    fps: int = 60
    wide_breakpoint: int = 1024
    panel_width: int = 320
    panel_visible: bool = False
    snow_pool_size: int = 100
    tree: Dict[str, Any] = field(default_factory=dict)   # wire-named initial values
    palette: List[str] = field(default_factory=lambda: list(DEFAULT_PALETTE))
    share_base_url: str = "http://localhost:8000/"

    def initial_params(self) -> TreeParams:
        return TreeParams.from_mapping(self.tree)


def default_config_path() -> Path:
    return Path(__file__).resolve().parent / "content" / "scene.yaml"


def _int(section: Mapping[str, Any], key: str, default: int, lo: int = 0) -> int:
    value = parse_int(section.get(key))
    if value is None:
        return default
    return max(lo, value)


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    return value if isinstance(value, Mapping) else {}


def config_from_dict(data: Mapping[str, Any]) -> AppConfig:
    """Build an AppConfig; malformed or missing values keep their defaults."""
    cfg = AppConfig()
    window = _section(data, "window")
    cfg.view_width = _int(window, "width", cfg.view_width, lo=1)
    cfg.view_height = _int(window, "height", cfg.view_height, lo=1)
    cfg.fps = _int(window, "fps", cfg.fps, lo=1)
    cfg.wide_breakpoint = _int(window, "wide_breakpoint", cfg.wide_breakpoint)

    panel = _section(data, "panel")
    cfg.panel_width = _int(panel, "width", cfg.panel_width)
    cfg.panel_visible = bool(panel.get("visible", cfg.panel_visible))

    snow = _section(data, "snow")
    cfg.snow_pool_size = _int(snow, "pool_size", cfg.snow_pool_size)

    cfg.tree = dict(_section(data, "tree"))

    palette = data.get("palette")
    if isinstance(palette, list):
        emojis = [str(e) for e in palette if e]
        if emojis:
            cfg.palette = emojis

    base = data.get("share_base_url")
    if isinstance(base, str) and base:
        cfg.share_base_url = base
    return cfg


def load_config(path: Path | str | None = None) -> AppConfig:
    """
    Load the scene config. With no path the bundled scene.yaml is used.
    An explicit path that can't be read or parsed raises ConfigError.
    """
    explicit = path is not None
    path = Path(path) if explicit else default_config_path()
    if not path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        log.debug("no bundled config at %s, using defaults", path)
        return AppConfig()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Config file unreadable: {path}: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ConfigError(f"Config file malformed: {path}")
    cfg = config_from_dict(data)
    log.debug("loaded config from %s", path)
    return cfg

"""Persistent renderer settings schema and load/save helpers."""

from __future__ import annotations

import json
import os
import platform
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any


CONFIG_VERSION = 1

BACKENDS = ("raster", "vector")
IMAGE_FORMATS = ("png", "bmp")
COLOR_DEPTHS = (1, 4)
MIN_SIZE = 16
MAX_SIZE = 4096


@dataclass
class DisplayConfig:
    width: int = 800
    height: int = 480
    color_depth: int = 1


@dataclass
class RenderConfig:
    backend: str = "raster"
    timezone: str = "Australia/Melbourne"
    image_format: str = "png"
    font_path: str | None = None
    bold_font_path: str | None = None


@dataclass
class LayoutConfig:
    current: str = "dashboard"
    templates: dict[str, Any] = field(default_factory=dict)


@dataclass
class LoggingConfig:
    keep_log_files: int = 7
    level: str = "INFO"
    console: bool = True


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    display: DisplayConfig = field(default_factory=DisplayConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def config_path() -> Path:
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "Inkboard" / "config.json"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "Inkboard" / "config.json"
    return Path.home() / ".config" / "inkboard" / "config.json"


def _merge(dataclass_type, raw: Any):
    defaults = dataclass_type()  # type: ignore[misc]
    if not isinstance(raw, dict):
        return defaults
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _clamp_int(value: Any, default: int, low: int, high: int) -> int:
    try:
        return max(low, min(high, int(value)))
    except (TypeError, ValueError):
        return default


def _normalize_display(cfg: AppConfig) -> None:
    cfg.display.width = _clamp_int(cfg.display.width, 800, MIN_SIZE, MAX_SIZE)
    cfg.display.height = _clamp_int(cfg.display.height, 480, MIN_SIZE, MAX_SIZE)
    if cfg.display.color_depth not in COLOR_DEPTHS:
        cfg.display.color_depth = 1


def _normalize_render(cfg: AppConfig) -> None:
    if cfg.render.backend not in BACKENDS:
        cfg.render.backend = "raster"
    fmt = str(cfg.render.image_format or "").lower()
    cfg.render.image_format = fmt if fmt in IMAGE_FORMATS else "png"
    if not cfg.render.timezone:
        cfg.render.timezone = "Australia/Melbourne"


def _normalize_layout(cfg: AppConfig) -> None:
    if not isinstance(cfg.layout.templates, dict):
        cfg.layout.templates = {}
    if not cfg.layout.current:
        cfg.layout.current = "dashboard"


def _normalize_logging(cfg: AppConfig) -> None:
    cfg.logging.keep_log_files = _clamp_int(cfg.logging.keep_log_files, 7, 2, 90)
    cfg.logging.level = str(cfg.logging.level or "INFO").upper()


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return AppConfig()
    if not isinstance(data, dict):
        return AppConfig()

    cfg = AppConfig(
        config_version=CONFIG_VERSION,
        display=_merge(DisplayConfig, data.get("display", {})),
        render=_merge(RenderConfig, data.get("render", {})),
        layout=_merge(LayoutConfig, data.get("layout", {})),
        logging=_merge(LoggingConfig, data.get("logging", {})),
    )

    _normalize_display(cfg)
    _normalize_render(cfg)
    _normalize_layout(cfg)
    _normalize_logging(cfg)
    return cfg


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path

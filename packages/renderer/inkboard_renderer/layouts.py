"""Built-in layout templates and config-defined extras."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .models import LayoutTemplate, Zone

DEFAULT_LAYOUT_NAME = "dashboard"
FOCUS_PLUGINS = ("weather", "calendar", "news", "custom")

HEADER_HEIGHT = 50
OUTER_MARGIN = 10
ZONE_GAP = 10
FOCUS_MARGIN = 20


def dashboard_layout(width: int = 800, height: int = 480) -> LayoutTemplate:
    top = HEADER_HEIGHT + OUTER_MARGIN
    row_h = (height - top - ZONE_GAP - OUTER_MARGIN) // 2
    left_w = (width - 2 * OUTER_MARGIN - ZONE_GAP) // 2
    right_x = OUTER_MARGIN + left_w + ZONE_GAP
    bottom_y = top + row_h + ZONE_GAP
    return LayoutTemplate(
        name=DEFAULT_LAYOUT_NAME,
        title="DASHBOARD",
        zones=(
            Zone("weather", OUTER_MARGIN, top, left_w, row_h, plugin="weather"),
            Zone("news", right_x, top, width - right_x - OUTER_MARGIN, row_h, plugin="news"),
            Zone("calendar", OUTER_MARGIN, bottom_y, width - 2 * OUTER_MARGIN, height - bottom_y - OUTER_MARGIN, plugin="calendar"),
        ),
    )


def focus_layout(plugin: str, width: int = 800, height: int = 480) -> LayoutTemplate:
    top = HEADER_HEIGHT + ZONE_GAP
    return LayoutTemplate(
        name=f"focus-{plugin}",
        title=plugin.upper(),
        zones=(Zone("main", FOCUS_MARGIN, top, width - 2 * FOCUS_MARGIN, height - top - FOCUS_MARGIN, plugin=plugin),),
        focus=True,
    )


def template_from_dict(name: str, raw: Mapping[str, Any], width: int = 800, height: int = 480) -> LayoutTemplate:
    zones_raw = raw.get("zones")
    if not isinstance(zones_raw, list) or not zones_raw:
        raise ValueError(f"Layout {name!r} needs a non-empty zones list")

    zones: list[Zone] = []
    for idx, z in enumerate(zones_raw):
        try:
            zone = Zone(
                name=str(z.get("name") or f"zone{idx}"),
                x=int(z["x"]),
                y=int(z["y"]),
                width=int(z["width"]),
                height=int(z["height"]),
                plugin=z.get("plugin"),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Layout {name!r} zone {idx} is malformed: {exc}") from exc
        if zone.width <= 0 or zone.height <= 0 or zone.x < 0 or zone.y < 0 or zone.right > width or zone.bottom > height:
            raise ValueError(f"Layout {name!r} zone {zone.name!r} falls outside the {width}x{height} canvas")
        zones.append(zone)

    return LayoutTemplate(
        name=name,
        title=str(raw.get("title") or name.upper()),
        zones=tuple(zones),
        focus=bool(raw.get("focus", len(zones) == 1)),
    )


def build_layouts(
    width: int = 800,
    height: int = 480,
    extra: Mapping[str, Mapping[str, Any]] | None = None,
) -> dict[str, LayoutTemplate]:
    layouts = {DEFAULT_LAYOUT_NAME: dashboard_layout(width, height)}
    for plugin in FOCUS_PLUGINS:
        template = focus_layout(plugin, width, height)
        layouts[template.name] = template
    for name, raw in (extra or {}).items():
        layouts[name] = template_from_dict(name, raw, width, height)
    return layouts


def list_layouts(layouts: Mapping[str, LayoutTemplate]) -> list[str]:
    return sorted(layouts.keys())


def with_default_layout(
    layouts: Mapping[str, LayoutTemplate], width: int = 800, height: int = 480
) -> dict[str, LayoutTemplate]:
    """Copy ``layouts``, adding the built-in dashboard when the fallback target is missing."""
    out = dict(layouts)
    out.setdefault(DEFAULT_LAYOUT_NAME, dashboard_layout(width, height))
    return out


def get_layout(layouts: Mapping[str, LayoutTemplate], name: str | None) -> LayoutTemplate:
    template = layouts.get(name) if name else None
    if template is None:
        template = layouts[DEFAULT_LAYOUT_NAME]
    return template

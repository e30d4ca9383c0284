"""Zone compositor: turns a layout template plus plugin data into a draw-list."""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Any, Callable
from zoneinfo import ZoneInfo

from .layouts import HEADER_HEIGHT, build_layouts, get_layout, with_default_layout
from .models import DrawElement, DrawList, LayoutTemplate, RectElement, TextElement, Zone
from .primitives import BLACK, WHITE
from .results import (
    DEFAULT_EVENT_TITLE,
    DEFAULT_ITEM_TITLE,
    CalendarResult,
    CustomResult,
    NewsResult,
    PluginResult,
    WeatherResult,
    parse_plugin_result,
)
from .text import char_width, fit_text, measure_text, wrap_text

logger = logging.getLogger("inkboard.renderer.compositor")

DEFAULT_TIMEZONE = "Australia/Melbourne"

ZONE_PADDING = 10
BOTTOM_MARGIN = 10
BORDER_WIDTH = 2
BULLET_SIZE = 4
BULLET_INDENT = 10
CUSTOM_PAYLOAD_LIMIT = 100

PLACEHOLDER_TEXT = "No data"


@dataclass(frozen=True)
class ListStyle:
    heading_size: int
    heading_advance: int
    max_entries: int | None
    meta_size: int
    meta_advance: int
    body_size: int
    body_advance: int
    body_lines: int
    gap: int

    def fits(self, width: float) -> bool:
        return width >= char_width(max(self.meta_size, self.body_size))


CALENDAR_STYLE = {
    False: ListStyle(18, 26, 4, 14, 16, 16, 18, 2, 4),
    True: ListStyle(24, 36, 8, 14, 16, 16, 20, 2, 4),
}
NEWS_STYLE = {
    False: ListStyle(18, 26, 3, 0, 0, 14, 16, 3, 6),
    True: ListStyle(24, 36, 6, 0, 0, 16, 20, 3, 10),
}
CUSTOM_STYLE = {
    False: ListStyle(18, 26, None, 16, 20, 14, 16, 3, 6),
    True: ListStyle(24, 36, None, 18, 24, 16, 20, 4, 10),
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_temp(value: float | None) -> str:
    if value is None:
        return "--°C"
    return f"{round_half_up(value)}°C"


def format_number(value: float | None) -> str:
    if value is None:
        return "--"
    return f"{value:g}"


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def payload_text(data: Any) -> str:
    text = data if isinstance(data, str) else json.dumps(data, default=str, ensure_ascii=False)
    return text[:CUSTOM_PAYLOAD_LIMIT]


class ZoneCompositor:
    """Builds one immutable draw-list per call; keeps no state between calls."""

    def __init__(
        self,
        layouts: Mapping[str, LayoutTemplate] | None = None,
        width: int = 800,
        height: int = 480,
        tz: str | tzinfo = DEFAULT_TIMEZONE,
    ) -> None:
        self.width = width
        self.height = height
        self.layouts = with_default_layout(layouts, width, height) if layouts is not None else build_layouts(width, height)
        self.tz = ZoneInfo(tz) if isinstance(tz, str) else tz
        self._builders: dict[str, Callable[[Zone, Any, bool], list[DrawElement]]] = {
            "weather": self._weather_zone,
            "calendar": self._calendar_zone,
            "news": self._news_zone,
            "custom": self._custom_zone,
        }

    def resolve(self, layout_name: str | None) -> LayoutTemplate:
        return get_layout(self.layouts, layout_name)

    def compose(
        self,
        layout_name: str | None,
        data: Mapping[str, Any] | None,
        now: datetime | None = None,
    ) -> DrawList:
        template = self.resolve(layout_name)
        data = data or {}
        elements: list[DrawElement] = self.header(template.title, now)
        for zone in template.zones:
            raw = data.get(zone.plugin) if zone.plugin else None
            elements.extend(self.build_zone(zone, parse_plugin_result(raw), large=template.focus))
        return tuple(elements)

    def header(self, title: str, now: datetime | None = None) -> list[DrawElement]:
        stamp = self.format_timestamp(now)
        stamp_x = self.width - 20 - math.ceil(measure_text(stamp, 16))
        out: list[DrawElement] = [RectElement(0, 0, self.width, HEADER_HEIGHT, fill=BLACK)]
        if stamp_x - 40 >= char_width(28):
            out.append(TextElement(20, 11, fit_text(title, stamp_x - 40, 28), font_size=28, fill=WHITE, bold=True))
        if stamp_x >= 0:
            out.append(TextElement(stamp_x, 17, stamp, font_size=16, fill=WHITE))
        return out

    def _local(self, moment: datetime) -> datetime:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment.astimezone(self.tz)

    def format_timestamp(self, now: datetime | None = None) -> str:
        local = self._local(now or datetime.now(timezone.utc))
        return f"{local:%d %b, %H:%M}"

    def format_event_time(self, start: datetime | None, raw: str = "") -> str:
        if start is None:
            return raw
        local = self._local(start)
        return f"{local.day} {local:%b}, {local:%H:%M}"

    def build_zone(self, zone: Zone, result: PluginResult | None, large: bool = False) -> list[DrawElement]:
        builder = self._builders.get(getattr(result, "kind", ""))
        if result is None or builder is None:
            logger.debug("zone %s has no renderable data for plugin %s", zone.name, zone.plugin)
            return self.placeholder(zone, large)
        return builder(zone, result, large)

    @staticmethod
    def placeholder(zone: Zone, large: bool = False) -> list[DrawElement]:
        size = 24 if large else 16
        avail = zone.width - 2 * ZONE_PADDING
        if avail < char_width(size) or 2 * ZONE_PADDING + size > zone.height:
            return []
        text = fit_text(PLACEHOLDER_TEXT, avail, size)
        return [TextElement(zone.x + ZONE_PADDING, zone.y + ZONE_PADDING, text, font_size=size)]

    @staticmethod
    def _border(zone: Zone) -> RectElement:
        return RectElement(zone.x, zone.y, zone.width, zone.height, fill=None, stroke=BLACK, stroke_width=BORDER_WIDTH)

    @staticmethod
    def _limit(zone: Zone) -> int:
        return zone.bottom - BOTTOM_MARGIN

    def _line(
        self,
        out: list[DrawElement],
        zone: Zone,
        x: int,
        y: int,
        text: str,
        size: int,
        advance: int,
        bold: bool = False,
    ) -> bool:
        if y + advance > self._limit(zone):
            return False
        avail = zone.right - ZONE_PADDING - x
        if text and avail >= char_width(size):
            out.append(TextElement(x, y, fit_text(text, avail, size), font_size=size, bold=bold))
        return True

    def _weather_zone(self, zone: Zone, data: WeatherResult, large: bool) -> list[DrawElement]:
        pad = 40 if large else ZONE_PADDING + 5
        x = zone.x + pad
        top = zone.y + pad
        out: list[DrawElement] = [self._border(zone)]

        if large:
            self._line(out, zone, x, top, data.location, 24, 30, bold=True)
            self._line(out, zone, x, top + 40, format_temp(data.temp), 64, 72, bold=True)
            desc_y, desc_size, desc_adv = top + 120, 20, 24
        else:
            self._line(out, zone, x, top, data.location, 16, 20, bold=True)
            self._line(out, zone, x, top + 24, format_temp(data.temp), 40, 44, bold=True)
            desc_y, desc_size, desc_adv = top + 74, 16, 20

        for i, line in enumerate(wrap_text(capitalize_first(data.description), zone.width - 2 * pad, desc_size)[:2]):
            self._line(out, zone, x, desc_y + i * desc_adv, line, desc_size, desc_adv)

        if large:
            details = (
                f"Feels like: {format_temp(data.feels_like)}",
                f"High: {format_temp(data.temp_max)}  Low: {format_temp(data.temp_min)}",
                f"Humidity: {format_number(data.humidity)}%  Wind: {format_number(data.wind_speed)} m/s",
            )
            for i, text in enumerate(details):
                self._line(out, zone, x, top + 180 + i * 30, text, 16, 20)
        return out

    def _heading(self, out: list[DrawElement], zone: Zone, text: str, style: ListStyle) -> int:
        y = zone.y + ZONE_PADDING
        self._line(out, zone, zone.x + ZONE_PADDING, y, text, style.heading_size, style.heading_advance, bold=True)
        return y + style.heading_advance

    def _empty(self, out: list[DrawElement], zone: Zone, y: int, text: str) -> list[DrawElement]:
        self._line(out, zone, zone.x + ZONE_PADDING, y, text, 16, 20)
        return out

    def _calendar_zone(self, zone: Zone, data: CalendarResult, large: bool) -> list[DrawElement]:
        style = CALENDAR_STYLE[large]
        out: list[DrawElement] = [self._border(zone)]
        y = self._heading(out, zone, "Upcoming Events", style)
        if not data.events:
            return self._empty(out, zone, y, "No upcoming events")

        x = zone.x + ZONE_PADDING
        wrap_width = zone.width - 2 * ZONE_PADDING
        if not style.fits(wrap_width):
            return out
        limit = self._limit(zone)
        for event in data.events[: style.max_entries]:
            lines = wrap_text(event.title or DEFAULT_EVENT_TITLE, wrap_width, style.body_size)[: style.body_lines]
            block = style.meta_advance + len(lines) * style.body_advance
            if y + block > limit:
                break
            stamp = self.format_event_time(event.start, event.raw_start)
            if stamp:
                out.append(TextElement(x, y, fit_text(stamp, wrap_width, style.meta_size), font_size=style.meta_size))
            y += style.meta_advance
            for line in lines:
                out.append(TextElement(x, y, line, font_size=style.body_size, bold=True))
                y += style.body_advance
            y += style.gap
        return out

    def _news_zone(self, zone: Zone, data: NewsResult, large: bool) -> list[DrawElement]:
        style = NEWS_STYLE[large]
        out: list[DrawElement] = [self._border(zone)]
        y = self._heading(out, zone, "Latest News", style)
        if not data.items:
            return self._empty(out, zone, y, "No news items")

        x = zone.x + ZONE_PADDING
        wrap_width = zone.width - 2 * ZONE_PADDING - BULLET_INDENT
        if not style.fits(wrap_width):
            return out
        limit = self._limit(zone)
        for item in data.items[: style.max_entries]:
            lines = wrap_text(item.title or DEFAULT_ITEM_TITLE, wrap_width, style.body_size)[: style.body_lines]
            if y + len(lines) * style.body_advance > limit:
                break
            bullet_y = y + (style.body_size - BULLET_SIZE) // 2
            out.append(RectElement(x, bullet_y, BULLET_SIZE, BULLET_SIZE, fill=BLACK))
            for line in lines:
                out.append(TextElement(x + BULLET_INDENT, y, line, font_size=style.body_size))
                y += style.body_advance
            y += style.gap
        return out

    def _custom_zone(self, zone: Zone, data: CustomResult, large: bool) -> list[DrawElement]:
        style = CUSTOM_STYLE[large]
        out: list[DrawElement] = [self._border(zone)]
        y = self._heading(out, zone, "Custom Data", style)
        if not data.results:
            return self._empty(out, zone, y, "No custom data")

        x = zone.x + ZONE_PADDING
        wrap_width = zone.width - 2 * ZONE_PADDING
        if not style.fits(wrap_width):
            return out
        limit = self._limit(zone)
        for entry in data.results:
            if not entry.ok:
                continue
            lines = wrap_text(payload_text(entry.data), wrap_width, style.body_size)[: style.body_lines]
            if y + style.meta_advance + len(lines) * style.body_advance > limit:
                break
            name = entry.name or "Result"
            out.append(TextElement(x, y, fit_text(name, wrap_width, style.meta_size), font_size=style.meta_size, bold=True))
            y += style.meta_advance
            for line in lines:
                out.append(TextElement(x, y, line, font_size=style.body_size))
                y += style.body_advance
            y += style.gap
        return out

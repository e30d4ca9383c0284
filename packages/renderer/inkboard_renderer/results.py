"""Plugin result types consumed by the zone compositor.

Each provider output becomes exactly one of the result classes below. The
``kind`` field is fixed when the object is built and is the only thing the
compositor dispatches on. Raw provider mappings (as decoded from JSON) go
through :func:`parse_plugin_result`, which applies the field-presence rule
once: ``temp`` means weather, then ``events``, ``items``, ``results``.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Union

DEFAULT_EVENT_TITLE = "Untitled Event"
DEFAULT_ITEM_TITLE = "Untitled"


@dataclass(frozen=True)
class WeatherResult:
    temp: float | None
    location: str = ""
    description: str = ""
    feels_like: float | None = None
    temp_min: float | None = None
    temp_max: float | None = None
    humidity: float | None = None
    wind_speed: float | None = None
    kind: str = field(default="weather", init=False)


@dataclass(frozen=True)
class CalendarEvent:
    title: str = DEFAULT_EVENT_TITLE
    start: datetime | None = None
    raw_start: str = ""
    end: datetime | None = None
    location: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class CalendarResult:
    events: tuple[CalendarEvent, ...] = ()
    count: int = 0
    kind: str = field(default="calendar", init=False)


@dataclass(frozen=True)
class NewsItem:
    title: str = DEFAULT_ITEM_TITLE
    link: str | None = None
    pub_date: str | None = None
    source: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class NewsResult:
    items: tuple[NewsItem, ...] = ()
    count: int = 0
    kind: str = field(default="news", init=False)


@dataclass(frozen=True)
class CustomEntry:
    name: str
    data: Any = None
    status: str = "success"
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "success" and bool(self.data)


@dataclass(frozen=True)
class CustomResult:
    results: tuple[CustomEntry, ...] = ()
    kind: str = field(default="custom", init=False)


PluginResult = Union[WeatherResult, CalendarResult, NewsResult, CustomResult]
RESULT_TYPES = (WeatherResult, CalendarResult, NewsResult, CustomResult)


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        out = float(value)
    except (TypeError, ValueError):
        return None
    return out if math.isfinite(out) else None


def _as_text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO-8601 string (or pass a datetime through); naive means UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _event(raw: Any) -> CalendarEvent:
    if not isinstance(raw, Mapping):
        return CalendarEvent()
    start = raw.get("start")
    return CalendarEvent(
        title=_as_text(raw.get("title"), DEFAULT_EVENT_TITLE),
        start=parse_datetime(start),
        raw_start=_as_text(start),
        end=parse_datetime(raw.get("end")),
        location=raw.get("location"),
        description=raw.get("description"),
    )


def _news_item(raw: Any) -> NewsItem:
    if not isinstance(raw, Mapping):
        return NewsItem()
    return NewsItem(
        title=_as_text(raw.get("title"), DEFAULT_ITEM_TITLE),
        link=raw.get("link"),
        pub_date=raw.get("pubDate") or raw.get("pub_date"),
        source=raw.get("source"),
        description=raw.get("description"),
    )


def _custom_entry(raw: Any) -> CustomEntry:
    if not isinstance(raw, Mapping):
        return CustomEntry(name="", status="error", error="malformed result")
    return CustomEntry(
        name=_as_text(raw.get("name")),
        data=raw.get("data"),
        status=_as_text(raw.get("status"), "error"),
        error=raw.get("error"),
    )


def weather_from_mapping(raw: Mapping[str, Any]) -> WeatherResult:
    return WeatherResult(
        temp=_as_float(raw.get("temp")),
        location=_as_text(raw.get("location")),
        description=_as_text(raw.get("description")),
        feels_like=_as_float(raw.get("feels_like")),
        temp_min=_as_float(raw.get("temp_min")),
        temp_max=_as_float(raw.get("temp_max")),
        humidity=_as_float(raw.get("humidity")),
        wind_speed=_as_float(raw.get("wind_speed")),
    )


def calendar_from_mapping(raw: Mapping[str, Any]) -> CalendarResult:
    events = tuple(_event(e) for e in _as_list(raw.get("events")))
    count = raw.get("count")
    return CalendarResult(events=events, count=count if isinstance(count, int) else len(events))


def news_from_mapping(raw: Mapping[str, Any]) -> NewsResult:
    items = tuple(_news_item(i) for i in _as_list(raw.get("items")))
    count = raw.get("count")
    return NewsResult(items=items, count=count if isinstance(count, int) else len(items))


def custom_from_mapping(raw: Mapping[str, Any]) -> CustomResult:
    return CustomResult(results=tuple(_custom_entry(r) for r in _as_list(raw.get("results"))))


_SIGNATURES = (
    ("temp", weather_from_mapping),
    ("events", calendar_from_mapping),
    ("items", news_from_mapping),
    ("results", custom_from_mapping),
)


def parse_plugin_result(raw: Any) -> PluginResult | None:
    if raw is None or isinstance(raw, RESULT_TYPES):
        return raw
    if not isinstance(raw, Mapping):
        return None
    for key, factory in _SIGNATURES:
        if key in raw:
            return factory(raw)
    return None

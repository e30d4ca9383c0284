"""Typed renderer models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class TextElement:
    x: int
    y: int
    text: str
    font_size: int = 16
    fill: str = "#000"
    bold: bool = False
    max_width: int | None = None
    kind: str = field(default="text", init=False)


@dataclass(frozen=True)
class RectElement:
    x: int
    y: int
    width: int
    height: int
    fill: str | None = "#000"
    stroke: str | None = None
    stroke_width: int = 1
    kind: str = field(default="rect", init=False)


@dataclass(frozen=True)
class LineElement:
    x1: int
    y1: int
    x2: int
    y2: int
    stroke: str = "#000"
    stroke_width: int = 1
    kind: str = field(default="line", init=False)


DrawElement = Union[TextElement, RectElement, LineElement]
DrawList = tuple[DrawElement, ...]


@dataclass(frozen=True)
class Zone:
    name: str
    x: int
    y: int
    width: int
    height: int
    plugin: str | None = None

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def contains(self, x: int, y: int, width: int = 0, height: int = 0) -> bool:
        return self.x <= x and self.y <= y and x + width <= self.right and y + height <= self.bottom


@dataclass(frozen=True)
class LayoutTemplate:
    name: str
    title: str
    zones: tuple[Zone, ...]
    focus: bool = False


@dataclass(frozen=True)
class RenderedImage:
    width: int
    height: int
    layout: str
    image_format: str
    color_depth: int
    data: bytes


@dataclass(frozen=True)
class FrameBuffer:
    width: int
    height: int
    pixel_format: str
    bytes: bytes

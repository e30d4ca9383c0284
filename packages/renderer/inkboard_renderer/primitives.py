"""Drawing primitives shared by the raster and vector backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from functools import lru_cache
from io import BytesIO
from pathlib import Path
from typing import Any, Iterator

from PIL import Image, ImageColor, ImageDraw, ImageFont

from .models import DrawElement, LineElement, RectElement, TextElement
from .text import LINE_GAP, measure_text, wrap_text

WHITE = "#fff"
BLACK = "#000"

IMAGE_FORMATS = {"png": "PNG", "bmp": "BMP"}

REGULAR_FONTS = ("DejaVuSansMono.ttf", "LiberationMono-Regular.ttf")
BOLD_FONTS = ("DejaVuSansMono-Bold.ttf", "LiberationMono-Bold.ttf")


@lru_cache(maxsize=64)
def parse_color(value: str) -> tuple[int, int, int]:
    return tuple(ImageColor.getrgb(value)[:3])  # type: ignore[return-value]


def bresenham_points(x1: int, y1: int, x2: int, y2: int) -> Iterator[tuple[int, int]]:
    dx = abs(x2 - x1)
    dy = abs(y2 - y1)
    sx = 1 if x1 < x2 else -1
    sy = 1 if y1 < y2 else -1
    err = dx - dy

    while True:
        yield x1, y1
        if x1 == x2 and y1 == y2:
            return
        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x1 += sx
        if e2 < dx:
            err += dx
            y1 += sy


def encode_image(image: Image.Image, fmt: str = "png") -> bytes:
    key = fmt.lower().lstrip(".")
    if key not in IMAGE_FORMATS:
        raise ValueError(f"Unsupported image format: {fmt}")
    buf = BytesIO()
    image.save(buf, format=IMAGE_FORMATS[key])
    return buf.getvalue()


class DrawingBackend(ABC):
    """Primitive contract the compositor output is painted through."""

    name = "base"
    line_gap = LINE_GAP

    @abstractmethod
    def create_canvas(self, width: int = 800, height: int = 480) -> Any: ...

    @abstractmethod
    def draw_rect(
        self,
        canvas: Any,
        x: int,
        y: int,
        w: int,
        h: int,
        fill: str | None = None,
        stroke: str | None = BLACK,
        stroke_width: int = 1,
    ) -> None: ...

    @abstractmethod
    def draw_line(self, canvas: Any, x1: int, y1: int, x2: int, y2: int, color: str = BLACK, width: int = 1) -> None: ...

    @abstractmethod
    def _draw_text_line(self, canvas: Any, text: str, x: int, y: int, font_size: int, color: str, bold: bool) -> None: ...

    @abstractmethod
    def rasterize(self, canvas: Any) -> Image.Image: ...

    def measure_text(self, text: str, font_size: int = 16) -> float:
        return measure_text(text, font_size)

    def draw_text(
        self,
        canvas: Any,
        text: str,
        x: int,
        y: int,
        font_size: int = 16,
        color: str = BLACK,
        bold: bool = False,
        max_width: int | None = None,
    ) -> int:
        lines = wrap_text(text, max_width, font_size, self.measure_text) if max_width else [text]
        for line in lines:
            self._draw_text_line(canvas, line, x, y, font_size, color, bold)
            y += font_size + self.line_gap
        return y

    def paint(self, canvas: Any, elements: tuple[DrawElement, ...] | list[DrawElement]) -> Any:
        for el in elements:
            if isinstance(el, RectElement):
                self.draw_rect(canvas, el.x, el.y, el.width, el.height, el.fill, el.stroke, el.stroke_width)
            elif isinstance(el, LineElement):
                self.draw_line(canvas, el.x1, el.y1, el.x2, el.y2, el.stroke, el.stroke_width)
            elif isinstance(el, TextElement):
                self.draw_text(canvas, el.text, el.x, el.y, el.font_size, el.fill, el.bold, el.max_width)
            else:
                raise TypeError(f"Unknown draw element: {el!r}")
        return canvas

    def to_buffer(self, canvas: Any, fmt: str = "png") -> bytes:
        return encode_image(self.rasterize(canvas), fmt)

    def save_to_file(self, canvas: Any, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.to_buffer(canvas, path.suffix or "png"))
        return path


@dataclass
class RasterCanvas:
    image: Image.Image
    _pixels: Any = field(init=False, repr=False)
    draw: ImageDraw.ImageDraw = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._pixels = self.image.load()
        self.draw = ImageDraw.Draw(self.image)

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def put(self, x: int, y: int, color: tuple[int, int, int]) -> None:
        if self.in_bounds(x, y):
            self._pixels[x, y] = color


class RasterBackend(DrawingBackend):
    """Paints straight into a Pillow RGB buffer."""

    name = "raster"

    def __init__(self, font_path: str | None = None, bold_font_path: str | None = None) -> None:
        self.font_path = font_path
        self.bold_font_path = bold_font_path

    def create_canvas(self, width: int = 800, height: int = 480) -> RasterCanvas:
        return RasterCanvas(Image.new("RGB", (width, height), parse_color(WHITE)))

    def draw_rect(
        self,
        canvas: RasterCanvas,
        x: int,
        y: int,
        w: int,
        h: int,
        fill: str | None = None,
        stroke: str | None = BLACK,
        stroke_width: int = 1,
    ) -> None:
        if w <= 0 or h <= 0:
            return
        if fill:
            x0, y0 = max(x, 0), max(y, 0)
            x1, y1 = min(x + w, canvas.width), min(y + h, canvas.height)
            if x0 < x1 and y0 < y1:
                canvas.draw.rectangle((x0, y0, x1 - 1, y1 - 1), fill=parse_color(fill))
        if stroke:
            color = parse_color(stroke)
            for i in range(max(1, stroke_width)):
                if w - 2 * i <= 0 or h - 2 * i <= 0:
                    break
                self._outline(canvas, x + i, y + i, w - 2 * i, h - 2 * i, color)

    @staticmethod
    def _outline(canvas: RasterCanvas, x: int, y: int, w: int, h: int, color: tuple[int, int, int]) -> None:
        for i in range(max(x, 0), min(x + w, canvas.width)):
            canvas.put(i, y, color)
            canvas.put(i, y + h - 1, color)
        for j in range(max(y, 0), min(y + h, canvas.height)):
            canvas.put(x, j, color)
            canvas.put(x + w - 1, j, color)

    def draw_line(
        self, canvas: RasterCanvas, x1: int, y1: int, x2: int, y2: int, color: str = BLACK, width: int = 1
    ) -> None:
        rgb = parse_color(color)
        for px, py in bresenham_points(int(x1), int(y1), int(x2), int(y2)):
            canvas.put(px, py, rgb)
            # Thicker strokes repeat the run along the minor axis.
            for k in range(1, max(1, width)):
                if abs(x2 - x1) >= abs(y2 - y1):
                    canvas.put(px, py + k, rgb)
                else:
                    canvas.put(px + k, py, rgb)

    def _draw_text_line(
        self, canvas: RasterCanvas, text: str, x: int, y: int, font_size: int, color: str, bold: bool
    ) -> None:
        if not text or y >= canvas.height or x >= canvas.width or y + font_size < 0:
            return
        canvas.draw.text((x, y), text, font=self._font(font_size, bold), fill=parse_color(color))

    def _font(self, size: int, bold: bool = False):
        return _load_font(self.bold_font_path if bold else self.font_path, size, bold)

    def rasterize(self, canvas: RasterCanvas) -> Image.Image:
        return canvas.image


@lru_cache(maxsize=32)
def _load_font(path: str | None, size: int, bold: bool):
    candidates = ([path] if path else []) + list(BOLD_FONTS if bold else REGULAR_FONTS)
    for candidate in candidates:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def create_backend(name: str = "raster", **options: Any) -> DrawingBackend:
    key = (name or "raster").lower()
    if key == "raster":
        return RasterBackend(**options)
    if key == "vector":
        from .vector import VectorBackend

        return VectorBackend(**options)
    raise ValueError(f"Unknown drawing backend: {name}")

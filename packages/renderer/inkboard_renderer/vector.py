"""Vector backend: record a draw-list, emit SVG, rasterize it in one pass."""

from __future__ import annotations

from dataclasses import dataclass, field
from io import BytesIO
from xml.sax.saxutils import escape

from PIL import Image

from .models import DrawElement, LineElement, RectElement, TextElement
from .primitives import BLACK, WHITE, DrawingBackend, parse_color

try:  # pragma: no cover - needs the native cairo library at import time
    import cairosvg
except Exception:  # pragma: no cover
    cairosvg = None

# Baseline sits this far below the top of a line box, as a fraction of the font size.
BASELINE_RATIO = 0.8
DEFAULT_FONT_FAMILY = "DejaVu Sans Mono, Liberation Mono, monospace"

_XML_ATTR = {'"': "&quot;", "'": "&apos;"}


def escape_xml(text: object) -> str:
    return escape(str(text), _XML_ATTR)


@dataclass
class VectorCanvas:
    width: int
    height: int
    elements: list[DrawElement] = field(default_factory=list)


class VectorBackend(DrawingBackend):
    """Builds the frame as vector elements; pixels only exist after rasterize()."""

    name = "vector"

    def __init__(self, font_family: str = DEFAULT_FONT_FAMILY) -> None:
        self.font_family = font_family

    def create_canvas(self, width: int = 800, height: int = 480) -> VectorCanvas:
        return VectorCanvas(width=width, height=height)

    def draw_rect(
        self,
        canvas: VectorCanvas,
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
        canvas.elements.append(RectElement(x, y, w, h, fill=fill, stroke=stroke, stroke_width=stroke_width))

    def draw_line(
        self, canvas: VectorCanvas, x1: int, y1: int, x2: int, y2: int, color: str = BLACK, width: int = 1
    ) -> None:
        canvas.elements.append(LineElement(x1, y1, x2, y2, stroke=color, stroke_width=width))

    def _draw_text_line(
        self, canvas: VectorCanvas, text: str, x: int, y: int, font_size: int, color: str, bold: bool
    ) -> None:
        if text:
            canvas.elements.append(TextElement(x, y, text, font_size=font_size, fill=color, bold=bold))

    def to_svg(self, canvas: VectorCanvas) -> str:
        body = "\n".join(part for el in canvas.elements for part in self._svg_parts(el))
        return (
            f'<svg width="{canvas.width}" height="{canvas.height}" '
            f'viewBox="0 0 {canvas.width} {canvas.height}" xmlns="http://www.w3.org/2000/svg">\n'
            f'<rect x="0" y="0" width="{canvas.width}" height="{canvas.height}" fill="{WHITE}" />\n'
            f"{body}\n</svg>"
        )

    def _svg_parts(self, el: DrawElement) -> list[str]:
        if isinstance(el, RectElement):
            parts = []
            if el.fill:
                parts.append(
                    f'<rect x="{el.x}" y="{el.y}" width="{el.width}" height="{el.height}" '
                    f'fill="{el.fill}" shape-rendering="crispEdges" />'
                )
            if el.stroke:
                # One 1px ring per unit of width, centred on pixel rows/columns.
                for i in range(max(1, el.stroke_width)):
                    w, h = el.width - 2 * i, el.height - 2 * i
                    if w <= 0 or h <= 0:
                        break
                    parts.append(
                        f'<rect x="{el.x + i + 0.5}" y="{el.y + i + 0.5}" width="{w - 1}" height="{h - 1}" '
                        f'fill="none" stroke="{el.stroke}" stroke-width="1" shape-rendering="crispEdges" />'
                    )
            return parts
        if isinstance(el, LineElement):
            return [
                f'<line x1="{el.x1 + 0.5}" y1="{el.y1 + 0.5}" x2="{el.x2 + 0.5}" y2="{el.y2 + 0.5}" '
                f'stroke="{el.stroke}" stroke-width="{el.stroke_width}" stroke-linecap="square" '
                f'shape-rendering="crispEdges" />'
            ]
        if isinstance(el, TextElement):
            weight = ' font-weight="bold"' if el.bold else ""
            baseline = el.y + round(el.font_size * BASELINE_RATIO)
            return [
                f'<text x="{el.x}" y="{baseline}" font-family="{escape_xml(self.font_family)}" '
                f'font-size="{el.font_size}" fill="{el.fill}"{weight} xml:space="preserve">{escape_xml(el.text)}</text>'
            ]
        raise TypeError(f"Unknown draw element: {el!r}")

    def rasterize(self, canvas: VectorCanvas) -> Image.Image:
        if cairosvg is None:
            raise RuntimeError("cairosvg is required for vector rasterization")
        png = cairosvg.svg2png(
            bytestring=self.to_svg(canvas).encode("utf-8"),
            output_width=canvas.width,
            output_height=canvas.height,
        )
        rendered = Image.open(BytesIO(png)).convert("RGBA")
        base = Image.new("RGBA", rendered.size, parse_color(WHITE) + (255,))
        return Image.alpha_composite(base, rendered).convert("RGB")

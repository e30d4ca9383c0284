"""Layout engine: compose, paint, quantize and encode one e-ink frame."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from PIL import Image

from .compositor import DEFAULT_TIMEZONE, ZoneCompositor
from .layouts import DEFAULT_LAYOUT_NAME, build_layouts, list_layouts
from .models import DrawList, FrameBuffer, LayoutTemplate, RenderedImage
from .primitives import IMAGE_FORMATS, DrawingBackend, create_backend, encode_image
from .quantize import COLOR_DEPTHS, pack_frame, quantize_for_eink

logger = logging.getLogger("inkboard.renderer")


class RenderError(RuntimeError):
    """A frame could not be produced; no partial image is returned."""


class LayoutEngine:
    def __init__(
        self,
        width: int = 800,
        height: int = 480,
        color_depth: int = 1,
        backend: str | DrawingBackend = "raster",
        timezone: str = DEFAULT_TIMEZONE,
        layouts: Mapping[str, LayoutTemplate] | None = None,
        current_layout: str = DEFAULT_LAYOUT_NAME,
        image_format: str = "png",
        backend_options: Mapping[str, Any] | None = None,
    ) -> None:
        if color_depth not in COLOR_DEPTHS:
            raise ValueError(f"Unsupported color depth: {color_depth}")
        if image_format.lower() not in IMAGE_FORMATS:
            raise ValueError(f"Unsupported image format: {image_format}")
        self.width = width
        self.height = height
        self.color_depth = color_depth
        self.image_format = image_format.lower()
        self.backend = backend if isinstance(backend, DrawingBackend) else create_backend(backend, **dict(backend_options or {}))
        self.compositor = ZoneCompositor(layouts, width=width, height=height, tz=timezone)
        self.layouts = self.compositor.layouts
        self._current_layout = current_layout

    @classmethod
    def from_config(cls, cfg: Any) -> "LayoutEngine":
        width, height = cfg.display.width, cfg.display.height
        options: dict[str, Any] = {}
        if cfg.render.backend == "raster":
            options = {"font_path": cfg.render.font_path, "bold_font_path": cfg.render.bold_font_path}
        return cls(
            width=width,
            height=height,
            color_depth=cfg.display.color_depth,
            backend=cfg.render.backend,
            timezone=cfg.render.timezone,
            layouts=build_layouts(width, height, extra=cfg.layout.templates),
            current_layout=cfg.layout.current,
            image_format=cfg.render.image_format,
            backend_options=options,
        )

    @property
    def current_layout(self) -> str:
        return self._current_layout

    def set_layout(self, name: str) -> None:
        # Unknown names are accepted here and fall back at render time.
        self._current_layout = name

    def list_layouts(self) -> list[str]:
        return list_layouts(self.layouts)

    def resolve_layout(self, name: str | None) -> LayoutTemplate:
        return self.compositor.resolve(name)

    def build_draw_list(
        self,
        data: Mapping[str, Any] | None,
        layout_name: str | None = None,
        now: datetime | None = None,
    ) -> DrawList:
        return self.compositor.compose(layout_name or self._current_layout, data, now)

    def render_image(
        self,
        data: Mapping[str, Any] | None,
        layout_name: str | None = None,
        now: datetime | None = None,
    ) -> Image.Image:
        requested = layout_name or self._current_layout
        template = self.resolve_layout(requested)
        if template.name != requested:
            logger.debug("unknown layout %r, falling back to %s", requested, template.name)

        canvas = self.backend.create_canvas(self.width, self.height)
        self.backend.paint(canvas, self.compositor.compose(template.name, data, now))
        return quantize_for_eink(self.backend.rasterize(canvas), self.color_depth)

    def render(
        self,
        data: Mapping[str, Any] | None,
        layout_name: str | None = None,
        now: datetime | None = None,
    ) -> RenderedImage:
        return self._render(data, layout_name, now)[0]

    def render_frame(
        self,
        data: Mapping[str, Any] | None,
        layout_name: str | None = None,
        now: datetime | None = None,
    ) -> tuple[RenderedImage, FrameBuffer]:
        """Render once and return the encoded image with the matching packed panel bytes."""
        rendered, image = self._render(data, layout_name, now)
        try:
            frame = pack_frame(image, self.color_depth)
        except Exception as exc:
            logger.exception("frame packing failed layout=%s", rendered.layout, extra={"event": "render_failed", "layout": rendered.layout})
            raise RenderError(f"frame packing failed for layout {rendered.layout!r}: {exc}") from exc
        return rendered, frame

    def _render(
        self,
        data: Mapping[str, Any] | None,
        layout_name: str | None,
        now: datetime | None,
    ) -> tuple[RenderedImage, Image.Image]:
        requested = layout_name or self._current_layout
        start = time.perf_counter()
        try:
            template = self.resolve_layout(requested)
            image = self.render_image(data, requested, now)
            payload = encode_image(image, self.image_format)
        except Exception as exc:
            logger.exception("render failed layout=%s", requested, extra={"event": "render_failed", "layout": requested})
            raise RenderError(f"render failed for layout {requested!r}: {exc}") from exc

        duration_ms = (time.perf_counter() - start) * 1000.0
        logger.info(
            "render complete layout=%s backend=%s bytes=%d",
            template.name,
            self.backend.name,
            len(payload),
            extra={"event": "render_complete", "layout": template.name, "duration_ms": round(duration_ms, 2)},
        )
        rendered = RenderedImage(
            width=self.width,
            height=self.height,
            layout=template.name,
            image_format=self.image_format,
            color_depth=self.color_depth,
            data=payload,
        )
        return rendered, image

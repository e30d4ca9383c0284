"""Renderer package for Inkboard e-ink frame composition."""

from .compositor import ZoneCompositor
from .engine import LayoutEngine, RenderError
from .layouts import DEFAULT_LAYOUT_NAME, build_layouts, get_layout, list_layouts
from .models import (
    DrawElement,
    DrawList,
    FrameBuffer,
    LayoutTemplate,
    LineElement,
    RectElement,
    RenderedImage,
    TextElement,
    Zone,
)
from .primitives import DrawingBackend, RasterBackend, bresenham_points, create_backend, encode_image
from .quantize import build_test_pattern, pack_frame, quantize_for_eink, threshold, to_grayscale
from .results import PluginResult, parse_plugin_result
from .text import measure_text, wrap_text
from .vector import VectorBackend

__all__ = [
    "DEFAULT_LAYOUT_NAME",
    "DrawElement",
    "DrawList",
    "DrawingBackend",
    "FrameBuffer",
    "LayoutEngine",
    "LayoutTemplate",
    "LineElement",
    "PluginResult",
    "RasterBackend",
    "RectElement",
    "RenderError",
    "RenderedImage",
    "TextElement",
    "VectorBackend",
    "Zone",
    "ZoneCompositor",
    "bresenham_points",
    "build_layouts",
    "build_test_pattern",
    "create_backend",
    "encode_image",
    "get_layout",
    "list_layouts",
    "measure_text",
    "pack_frame",
    "parse_plugin_result",
    "quantize_for_eink",
    "threshold",
    "to_grayscale",
    "wrap_text",
]

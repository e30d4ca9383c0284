"""Grayscale reduction, 1-bit thresholding and panel frame packing."""

from __future__ import annotations

import numpy as np
from PIL import Image

from .models import FrameBuffer

THRESHOLD = 128
COLOR_DEPTHS = (1, 4)

PATTERNS = ("white", "black", "checkerboard", "quadrants", "h-gradient", "v-gradient")


def to_grayscale(image: Image.Image) -> Image.Image:
    """ITU-R 601-2 luma: L = R * 299/1000 + G * 587/1000 + B * 114/1000."""
    if image.mode == "L":
        return image
    if image.mode in ("RGBA", "LA", "P"):
        image = image.convert("RGB")
    return image.convert("L")


def threshold(gray: Image.Image, level: int = THRESHOLD) -> Image.Image:
    arr = np.asarray(to_grayscale(gray), dtype=np.uint8)
    out = np.where(arr > level, 255, 0).astype(np.uint8)
    return Image.fromarray(out)


def quantize_for_eink(image: Image.Image, color_depth: int = 1) -> Image.Image:
    if color_depth not in COLOR_DEPTHS:
        raise ValueError(f"Unsupported color depth: {color_depth}")
    gray = to_grayscale(image)
    if color_depth == 1:
        return threshold(gray).convert("1", dither=Image.Dither.NONE)
    return gray


def pack_frame(image: Image.Image, color_depth: int = 1) -> FrameBuffer:
    """Pack a frame MSB-first, row-major, the way e-paper controllers take it."""
    if color_depth not in COLOR_DEPTHS:
        raise ValueError(f"Unsupported color depth: {color_depth}")
    arr = np.asarray(to_grayscale(image), dtype=np.uint8)
    height, width = arr.shape

    if color_depth == 1:
        bits = (arr > THRESHOLD).astype(np.uint8)
        packed = np.packbits(bits, axis=1, bitorder="big")
        return FrameBuffer(width=width, height=height, pixel_format="MONO1_MSB", bytes=packed.tobytes())

    nibbles = (arr >> 4).astype(np.uint8)
    if width % 2:
        nibbles = np.pad(nibbles, ((0, 0), (0, 1)), constant_values=0x0F)
    packed = (nibbles[:, 0::2] << 4) | nibbles[:, 1::2]
    return FrameBuffer(width=width, height=height, pixel_format="GRAY4_MSB", bytes=packed.astype(np.uint8).tobytes())


def build_test_pattern(name: str, width: int, height: int) -> Image.Image:
    ys, xs = np.mgrid[0:height, 0:width]
    if name == "white":
        arr = np.full((height, width), 255)
    elif name == "black":
        arr = np.zeros((height, width))
    elif name == "checkerboard":
        arr = np.where((xs // 24 + ys // 24) % 2 == 0, 255, 0)
    elif name == "quadrants":
        left = xs < width // 2
        top = ys < height // 2
        arr = np.select([top & left, top & ~left, ~top & left], [0, 85, 170], default=255)
    elif name == "h-gradient":
        arr = 255 * xs / max(width - 1, 1)
    elif name == "v-gradient":
        arr = 255 * ys / max(height - 1, 1)
    else:
        raise ValueError(f"Unknown pattern: {name}")
    return Image.fromarray(arr.astype(np.uint8)).convert("RGB")

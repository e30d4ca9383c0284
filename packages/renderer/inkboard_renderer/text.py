"""Text measurement and greedy word wrapping.

Every width in the renderer comes from :func:`measure_text`, a fixed advance of
``0.6 * font_size`` per character. The raster backend draws with a monospaced
face whose advance matches, so wrapped lines land where the layout math put them.
"""

from __future__ import annotations

import math
from typing import Callable

CHAR_WIDTH_RATIO = 0.6
LINE_GAP = 4

MeasureFn = Callable[[str, int], float]


def char_width(font_size: int) -> float:
    return font_size * CHAR_WIDTH_RATIO


def measure_text(text: str, font_size: int = 16) -> float:
    return len(text) * char_width(font_size)


def max_chars(max_width: float, font_size: int) -> int:
    return max(1, int(math.floor(max_width / char_width(font_size))))


def wrap_text(
    text: str,
    max_width: float,
    font_size: int = 16,
    measure: MeasureFn | None = None,
) -> list[str]:
    """Split ``text`` into lines no wider than ``max_width``.

    Words are separated by single spaces and packed greedily. A word that is
    wider than a whole line is cut every :func:`max_chars` characters with no
    hyphen. Non-empty input always yields at least one line, so whitespace-only
    text comes back unchanged as a single line.
    """
    measure = measure or measure_text
    if not text:
        return []

    limit = max_chars(max_width, font_size)
    lines: list[str] = []
    current: str | None = None

    for word in text.split(" "):
        candidate = word if current is None else f"{current} {word}"
        if measure(candidate, font_size) <= max_width:
            current = candidate
            continue

        if current:
            lines.append(current)
        current = word
        while len(current) > limit and measure(current, font_size) > max_width:
            lines.append(current[:limit])
            current = current[limit:]

    if current or not lines:
        lines.append(current or "")
    return lines


def fit_text(text: str, max_width: float, font_size: int = 16) -> str:
    if measure_text(text, font_size) <= max_width:
        return text
    return text[: max_chars(max_width, font_size)]


def line_advance(font_size: int) -> int:
    return font_size + LINE_GAP

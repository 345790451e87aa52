"""Output formatting for extracted colors."""

import json
from typing import List

from .types import Color

OUTPUT_FORMATS = ("json", "text")


def format_json(colors: List[Color]) -> str:
    """Render colors as a pretty-printed JSON array of {r, g, b, percentage}."""
    return json.dumps([color.to_dict() for color in colors], indent=2)


def format_text(colors: List[Color]) -> str:
    """Render one ``Color: #RRGGBB (RGB: r, g, b) - p.p%`` line per color."""
    return "\n".join(
        f"Color: {color.to_hex()} (RGB: {color.r}, {color.g}, {color.b}) - {color.percentage:.1f}%"
        for color in colors
    )


def format_colors(colors: List[Color], fmt: str) -> str:
    """Render colors in the named output format.

    Args:
        colors: Extracted colors
        fmt: One of "json" or "text"

    Returns:
        Formatted string

    Raises:
        ValueError: If fmt is not a supported format
    """
    if fmt == "json":
        return format_json(colors)
    if fmt == "text":
        return format_text(colors)
    raise ValueError(f"Unsupported output format: {fmt}")

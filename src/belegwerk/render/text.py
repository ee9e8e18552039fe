#!/usr/bin/env python3
from __future__ import annotations

from .canvas import Canvas

ELLIPSIS = "..."


def font_line_height(size_pt: float, multiplier: float = 1.2) -> float:
    pt_to_mm = 0.3527777778
    return float(size_pt) * pt_to_mm * multiplier


def fit_to_width(canvas: Canvas, content: str, max_width: float) -> str:
    """Truncate content with an ellipsis so it fits into max_width."""
    if not content or canvas.string_width(content) <= max_width:
        return content
    if canvas.string_width(ELLIPSIS) > max_width:
        return ""
    low, high = 0, len(content)
    while low < high:
        mid = (low + high + 1) // 2
        if canvas.string_width(content[:mid].rstrip() + ELLIPSIS) <= max_width:
            low = mid
        else:
            high = mid - 1
    return content[:low].rstrip() + ELLIPSIS

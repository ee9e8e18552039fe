#!/usr/bin/env python3
# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol, cast

from fpdf import FPDF
from fpdf.errors import FPDFException

from ..core.errors import CanvasError
from .geometry import page_format
from .spec import PageSpec

RGB = tuple[int, int, int]
BLACK: RGB = (0, 0, 0)
# Core PDF fonts only cover Latin-1.
_CORE_FONT_ENCODING = "latin-1"


class Canvas(Protocol):
    """Stateful drawing surface; font and colours persist between calls."""

    def set_font(self, family: str, style: str = "", size: float = 9.0) -> None: ...

    def set_text_color(self, color: RGB) -> None: ...

    def set_draw_color(self, color: RGB) -> None: ...

    def set_line_width(self, width: float) -> None: ...

    def text(
        self,
        content: str,
        x: float,
        y: float,
        *,
        width: float | None = None,
        height: float | None = None,
        align: str = "L",
    ) -> None: ...

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None: ...

    def rect(self, x: float, y: float, w: float, h: float) -> None: ...

    def new_page(self) -> None: ...

    def string_width(self, content: str) -> float: ...

    @property
    def page_count(self) -> int: ...

    def output(self) -> bytes: ...


class FpdfCanvas:
    def __init__(
        self,
        page: PageSpec,
        *,
        creation_date: datetime | None = None,
        title: str | None = None,
    ) -> None:
        pdf = FPDF(unit="mm", format=cast(Any, page_format(page)))
        pdf.set_auto_page_break(False)
        pdf.c_margin = 0
        if creation_date is not None:
            pdf.set_creation_date(creation_date)
        if title:
            pdf.set_title(title)
        self._pdf = pdf

    def set_font(self, family: str, style: str = "", size: float = 9.0) -> None:
        self._pdf.set_font(family, style=style, size=size)

    def set_text_color(self, color: RGB) -> None:
        self._pdf.set_text_color(*color)

    def set_draw_color(self, color: RGB) -> None:
        self._pdf.set_draw_color(*color)

    def set_line_width(self, width: float) -> None:
        self._pdf.set_line_width(width)

    def text(
        self,
        content: str,
        x: float,
        y: float,
        *,
        width: float | None = None,
        height: float | None = None,
        align: str = "L",
    ) -> None:
        pdf = self._pdf
        content = _core_font_safe(content)
        line_height = height if height is not None else _line_height(pdf)
        cell_width = width if width is not None else pdf.get_string_width(content)
        pdf.set_xy(x, y)
        pdf.cell(cell_width, line_height, content, align=align)

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self._pdf.line(x1, y1, x2, y2)

    def rect(self, x: float, y: float, w: float, h: float) -> None:
        self._pdf.rect(x, y, w, h)

    def new_page(self) -> None:
        self._pdf.add_page()

    def string_width(self, content: str) -> float:
        return self._pdf.get_string_width(_core_font_safe(content))

    @property
    def page_count(self) -> int:
        return self._pdf.page_no()

    def output(self) -> bytes:
        try:
            return bytes(self._pdf.output())
        except (FPDFException, OSError) as exc:
            raise CanvasError(f"unable to finalize PDF: {exc}") from exc


def _line_height(pdf: FPDF, multiplier: float = 1.2) -> float:
    return pdf.font_size * multiplier


def _core_font_safe(content: str) -> str:
    return content.encode(_CORE_FONT_ENCODING, "replace").decode(_CORE_FONT_ENCODING)

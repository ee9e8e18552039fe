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

from dataclasses import dataclass
from datetime import date

from .canvas import BLACK, Canvas
from .geometry import page_size_mm
from .spec import LetterheadSpec, PageSpec
from .text import fit_to_width, font_line_height

MUTED = (90, 90, 90)
DIVIDER = (80, 80, 80)
_DIVIDER_GAP_MM = 2.5
_RECIPIENT_GAP_MM = 6.0
_FOOTER_OFFSET_MM = 5.0


@dataclass(frozen=True)
class LetterheadContent:
    title: str
    number: str
    document_date: date
    recipient_lines: tuple[str, ...] = ()
    delivery_date: date | None = None
    reference_number: str | None = None


def format_date(value: date) -> str:
    return value.strftime("%d.%m.%Y")


def meta_lines(content: LetterheadContent, *, page_number: int) -> list[str]:
    lines = [
        f"Nr.: {content.number}",
        f"Datum: {format_date(content.document_date)}",
    ]
    if content.delivery_date is not None:
        lines.append(f"Lieferdatum: {format_date(content.delivery_date)}")
    if content.reference_number:
        lines.append(f"Bezug auf Beleg: {content.reference_number}")
    lines.append(f"Seite {page_number}")
    return lines


def draw_letterhead(
    canvas: Canvas,
    page: PageSpec,
    spec: LetterheadSpec,
    content: LetterheadContent,
    *,
    page_number: int,
) -> None:
    """Draw company block, document meta, recipient and footer for one page."""
    page_w, page_h = page_size_mm(page)
    left = page.margin_left_mm
    right = page_w - page.margin_right_mm
    usable_w = right - left
    ratio = max(0.5, min(spec.split_left_ratio, 0.8))
    left_w = usable_w * ratio
    right_w = usable_w - left_w
    x_right = left + left_w
    top = page.margin_top_mm
    limit = top + spec.height_mm

    canvas.set_text_color(BLACK)
    canvas.set_font(spec.font_family, style="B", size=spec.title_size)
    title_height = font_line_height(spec.title_size)
    canvas.text(spec.company_name, left, top, width=left_w, height=title_height)
    y_left = top + title_height
    canvas.set_font(spec.font_family, style="", size=spec.meta_size)
    canvas.set_text_color(MUTED)
    for line in spec.company_lines:
        canvas.text(line, left, y_left, width=left_w, height=font_line_height(spec.meta_size))
        y_left += font_line_height(spec.meta_size)

    canvas.set_text_color(BLACK)
    canvas.set_font(spec.font_family, style="B", size=spec.subtitle_size)
    subtitle_height = font_line_height(spec.subtitle_size)
    canvas.text(content.title, x_right, top, width=right_w, height=subtitle_height, align="R")
    y_right = top + subtitle_height
    canvas.set_font(spec.font_family, style="", size=spec.meta_size)
    meta_height = font_line_height(spec.meta_size)
    for line in meta_lines(content, page_number=page_number):
        canvas.text(line, x_right, y_right, width=right_w, height=meta_height, align="R")
        y_right += meta_height

    divider_y = max(y_left, y_right) + _DIVIDER_GAP_MM
    canvas.set_draw_color(DIVIDER)
    canvas.set_line_width(spec.divider_thickness_mm)
    canvas.line(left, divider_y, right, divider_y)

    y = divider_y + _RECIPIENT_GAP_MM
    canvas.set_font(spec.font_family, style="", size=spec.body_size)
    canvas.set_text_color(BLACK)
    for idx, line in enumerate(content.recipient_lines):
        if y + spec.line_height_mm > limit:
            break
        if idx == 0:
            canvas.set_font(spec.font_family, style="B", size=spec.body_size)
        else:
            canvas.set_font(spec.font_family, style="", size=spec.body_size)
        canvas.text(
            fit_to_width(canvas, line, left_w),
            left,
            y,
            width=left_w,
            height=spec.line_height_mm,
        )
        y += spec.line_height_mm

    footer_y = page_h - page.margin_bottom_mm + _FOOTER_OFFSET_MM
    if spec.footer:
        canvas.set_draw_color(DIVIDER)
        canvas.set_line_width(0.2)
        canvas.line(left, footer_y - 1.0, right, footer_y - 1.0)
        canvas.set_font(spec.font_family, style="", size=spec.meta_size)
        canvas.set_text_color(MUTED)
        canvas.text(spec.footer, left, footer_y, width=usable_w, height=meta_height, align="C")
    canvas.set_text_color(BLACK)
    canvas.set_draw_color(BLACK)

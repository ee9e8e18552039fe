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

"""Item table layout: rows, page breaks with carry-over, totals and signatures."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal

from ..core.models import LineItem
from .canvas import BLACK, Canvas
from .geometry import ColumnLayout, PageRegion
from .money import (
    ZERO,
    ResolvedRow,
    TotalsBlock,
    compute_totals,
    format_amount,
    format_rate,
    resolve_packaging_row,
    resolve_row,
)
from .spec import (
    COLUMN_BATCH,
    COLUMN_DESCRIPTION,
    COLUMN_ITEM_CODE,
    COLUMN_LINE_TOTAL,
    COLUMN_QUANTITY,
    COLUMN_UNIT_PRICE,
    TableSpec,
)
from .text import fit_to_width

RULE_WIDTH_MM = 0.2
HEAVY_RULE_WIDTH_MM = 0.4


@dataclass
class LayoutCursor:
    y: float
    carried: Decimal = ZERO
    page_subtotal: Decimal = ZERO
    page_items: int = 0

    @property
    def running_total(self) -> Decimal:
        return self.carried + self.page_subtotal

    def add(self, amount: Decimal) -> None:
        self.page_subtotal += amount
        self.page_items += 1

    def start_page(self, top: float) -> None:
        self.carried += self.page_subtotal
        self.page_subtotal = ZERO
        self.page_items = 0
        self.y = top


@dataclass(frozen=True)
class FlowResult:
    page_count: int
    carry_overs: tuple[Decimal, ...]
    last_page_subtotal: Decimal
    totals: TotalsBlock


def item_row_count(item: LineItem) -> int:
    return len(item.packaging) + max(1, len(item.batch_numbers))


def break_check_height(item: LineItem, spec: TableSpec) -> float:
    """Height tested against the page bottom before an item is placed.

    Continuation batch lines are only counted when the table spec asks for it;
    otherwise they may run into the reserved trailing area.
    """
    if spec.break_check_includes_batch_lines:
        rows = item_row_count(item)
    else:
        rows = len(item.packaging) + 1
    return rows * spec.row_height_mm


def render_table(
    canvas: Canvas,
    region: PageRegion,
    columns: ColumnLayout,
    items: Sequence[LineItem],
    tax_rate: Decimal | None,
    *,
    spec: TableSpec,
    on_new_page: Callable[[], None],
) -> FlowResult:
    """Lay out the item table starting on the canvas' current page.

    The caller has already drawn the first page's letterhead. ``on_new_page``
    must advance the canvas and redraw the letterhead; the table resumes at
    ``region.top`` afterwards.
    """
    cursor = LayoutCursor(y=region.top)
    cursor.y = _draw_header_row(canvas, columns, spec, cursor.y)

    carry_overs: list[Decimal] = []
    grand_total = ZERO
    row_height = spec.row_height_mm

    for item in items:
        required = break_check_height(item, spec)
        if cursor.page_items > 0 and cursor.y + required > region.content_bottom:
            carry = cursor.running_total
            _draw_carry_over(canvas, region, columns, spec, carry)
            carry_overs.append(carry)
            on_new_page()
            cursor.start_page(region.top)
            cursor.y = _draw_header_row(canvas, columns, spec, cursor.y)

        resolved = resolve_row(item)
        for packaging in item.packaging:
            _draw_row(
                canvas,
                columns,
                spec,
                cursor.y,
                _row_cells("", packaging.label, "", resolve_packaging_row(packaging)),
            )
            cursor.y += row_height

        main_y = cursor.y
        first_batch = item.batch_numbers[0] if item.batch_numbers else ""
        _draw_row(
            canvas,
            columns,
            spec,
            main_y,
            _row_cells(item.item_code, item.description, first_batch, resolved),
        )
        for k, batch in enumerate(item.batch_numbers[1:], start=1):
            _draw_row(canvas, columns, spec, main_y + k * row_height, {COLUMN_BATCH: batch})
        cursor.y = main_y + max(1, len(item.batch_numbers)) * row_height

        grand_total += resolved.amount
        cursor.add(resolved.amount)

    totals = compute_totals(grand_total, tax_rate)
    _draw_totals(canvas, region, columns, spec, totals)
    _draw_signatures(canvas, region, spec)
    return FlowResult(
        page_count=canvas.page_count,
        carry_overs=tuple(carry_overs),
        last_page_subtotal=cursor.page_subtotal,
        totals=totals,
    )


def _row_cells(code: str, description: str, batch: str, row: ResolvedRow) -> dict[str, str]:
    return {
        COLUMN_ITEM_CODE: code,
        COLUMN_DESCRIPTION: description,
        COLUMN_BATCH: batch,
        COLUMN_QUANTITY: row.quantity_text,
        COLUMN_UNIT_PRICE: row.unit_price_text,
        COLUMN_LINE_TOTAL: row.line_total_text,
    }


def _draw_header_row(canvas: Canvas, columns: ColumnLayout, spec: TableSpec, y: float) -> float:
    canvas.set_font(spec.font_family, style="B", size=spec.header_font_size)
    canvas.set_text_color(BLACK)
    pad = spec.cell_padding_mm
    for column in columns:
        canvas.text(
            fit_to_width(canvas, column.title, column.width - 2 * pad),
            column.x + pad,
            y,
            width=column.width - 2 * pad,
            height=spec.header_row_height_mm,
            align=column.align,
        )
    bottom = y + spec.header_row_height_mm
    canvas.set_draw_color(BLACK)
    canvas.set_line_width(RULE_WIDTH_MM)
    canvas.line(columns.left, bottom, columns.right, bottom)
    return bottom


def _draw_row(
    canvas: Canvas,
    columns: ColumnLayout,
    spec: TableSpec,
    y: float,
    cells: Mapping[str, str],
    *,
    style: str = "",
) -> None:
    canvas.set_font(spec.font_family, style=style, size=spec.font_size)
    canvas.set_text_color(BLACK)
    pad = spec.cell_padding_mm
    for column in columns:
        value = cells.get(column.key, "")
        if not value:
            continue
        inner = column.width - 2 * pad
        canvas.text(
            fit_to_width(canvas, value, inner),
            column.x + pad,
            y,
            width=inner,
            height=spec.row_height_mm,
            align=column.align,
        )


def _draw_carry_over(
    canvas: Canvas,
    region: PageRegion,
    columns: ColumnLayout,
    spec: TableSpec,
    amount: Decimal,
) -> None:
    y = region.content_bottom
    canvas.set_draw_color(BLACK)
    canvas.set_line_width(RULE_WIDTH_MM)
    canvas.line(columns.left, y, columns.right, y)
    _draw_row(
        canvas,
        columns,
        spec,
        y,
        {COLUMN_DESCRIPTION: spec.carry_over_label, COLUMN_LINE_TOTAL: format_amount(amount)},
        style="B",
    )


def _draw_totals(
    canvas: Canvas,
    region: PageRegion,
    columns: ColumnLayout,
    spec: TableSpec,
    totals: TotalsBlock,
) -> None:
    label_left = columns[COLUMN_QUANTITY].x
    label_width = columns[COLUMN_UNIT_PRICE].right - label_left
    value_column = columns[COLUMN_LINE_TOTAL]
    pad = spec.cell_padding_mm
    line_height = spec.totals_line_height_mm
    y = region.content_bottom + spec.totals_gap_mm

    rows = (
        (f"{spec.net_label} {spec.currency}", totals.net, ""),
        (f"{spec.tax_label} {format_rate(totals.tax_rate)} %", totals.tax, ""),
        (f"{spec.gross_label} {spec.currency}", totals.gross, "B"),
    )
    canvas.set_draw_color(BLACK)
    canvas.set_line_width(RULE_WIDTH_MM)
    canvas.line(label_left, y, columns.right, y)
    for idx, (label, value, style) in enumerate(rows):
        row_y = y + idx * line_height
        if style:
            canvas.set_line_width(HEAVY_RULE_WIDTH_MM)
            canvas.line(label_left, row_y, columns.right, row_y)
        canvas.set_font(spec.font_family, style=style, size=spec.font_size)
        canvas.set_text_color(BLACK)
        canvas.text(
            label,
            label_left + pad,
            row_y,
            width=label_width - 2 * pad,
            height=line_height,
            align="R",
        )
        canvas.text(
            format_amount(value),
            value_column.x + pad,
            row_y,
            width=value_column.width - 2 * pad,
            height=line_height,
            align="R",
        )


def _draw_signatures(canvas: Canvas, region: PageRegion, spec: TableSpec) -> None:
    box_width = (region.width - spec.signature_spacing_mm) / 2
    box_y = region.bottom - spec.signature_label_height_mm - spec.signature_height_mm
    canvas.set_draw_color(BLACK)
    canvas.set_line_width(RULE_WIDTH_MM)
    canvas.set_font(spec.font_family, style="", size=spec.font_size)
    canvas.set_text_color(BLACK)
    for idx, label in enumerate(spec.signature_labels):
        x = region.left + idx * (box_width + spec.signature_spacing_mm)
        canvas.rect(x, box_y, box_width, spec.signature_height_mm)
        canvas.text(
            label,
            x,
            box_y + spec.signature_height_mm,
            width=box_width,
            height=spec.signature_label_height_mm,
            align="C",
        )

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

import unittest
from dataclasses import replace
from decimal import Decimal

from belegwerk.render.flow import break_check_height, item_row_count, render_table
from belegwerk.render.geometry import build_columns, build_region
from belegwerk.render.spec import (
    COLUMN_BATCH,
    COLUMN_LINE_TOTAL,
    COLUMN_QUANTITY,
    DEFAULT_COLUMNS,
    PageSpec,
    TableSpec,
)
from tests.test_support import RecordingCanvas, make_item, make_total_items, rows_per_first_page

HEADER_TITLES = [column.title for column in DEFAULT_COLUMNS]


class FlowTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.spec = TableSpec()
        self.region = build_region(
            PageSpec(),
            header_height=70.0,
            reserved_height=self.spec.reserved_height,
        )
        self.columns = build_columns(self.region, self.spec.columns)
        self.canvas = RecordingCanvas()
        self.canvas.new_page()

    def render(self, items, *, spec: TableSpec | None = None, tax_rate=None):
        return render_table(
            self.canvas,
            self.region,
            self.columns,
            items,
            tax_rate,
            spec=spec or self.spec,
            on_new_page=self.canvas.new_page,
        )

    def texts_at(self, page: int, y: float):
        return [op for op in self.canvas.texts(page) if abs(op.y - y) < 1e-6]


class TestEmptyTable(FlowTestCase):
    def test_zero_items_render_single_page_with_zero_totals(self) -> None:
        result = self.render([])

        self.assertEqual(result.page_count, 1)
        self.assertEqual(self.canvas.page_count, 1)
        self.assertEqual(result.carry_overs, ())
        self.assertEqual(result.totals.net, Decimal("0.00"))
        self.assertEqual(result.totals.gross, Decimal("0.00"))
        page_texts = [op.content for op in self.canvas.texts(1)]
        for title in HEADER_TITLES:
            self.assertIn(title, page_texts)
        self.assertEqual(page_texts.count("0,00"), 3)
        self.assertEqual(len(self.canvas.rects(1)), 2)


class TestRowLayout(FlowTestCase):
    def test_row_with_weight_and_price(self) -> None:
        item = make_item("i-1", price="3.00")
        item = replace(item, net_weight=Decimal("12.5"))

        result = self.render([item])

        self.assertEqual(result.totals.net, Decimal("37.50"))
        first_row_y = self.region.top + self.spec.header_row_height_mm
        contents = {op.content for op in self.texts_at(1, first_row_y)}
        self.assertIn("12,50 kg", contents)
        self.assertIn("3,00", contents)
        self.assertIn("37,50", contents)

    def test_packaging_rows_show_zero_price_and_total(self) -> None:
        item = make_item("i-1", total="20.00", packaging=(("Euro-Palette", "2"), ("E2-Kiste", "5")))

        result = self.render([item])

        first_row_y = self.region.top + self.spec.header_row_height_mm
        pallet_row = [op.content for op in self.texts_at(1, first_row_y)]
        self.assertEqual(pallet_row, ["Euro-Palette", "2,00 Stk", "0,00", "0,00"])
        crate_row = [op.content for op in self.texts_at(1, first_row_y + self.spec.row_height_mm)]
        self.assertEqual(crate_row, ["E2-Kiste", "5,00 Stk", "0,00", "0,00"])
        main_row = [
            op.content for op in self.texts_at(1, first_row_y + 2 * self.spec.row_height_mm)
        ]
        self.assertIn("Rinderhack", main_row)
        self.assertIn("20,00", main_row)
        self.assertEqual(result.totals.net, Decimal("20.00"))

    def test_batch_numbers_continue_below_main_row_in_batch_column(self) -> None:
        item = make_item("i-1", total="5.00", batches=("L-1", "L-2", "L-3"))
        follower = make_item("i-2", total="1.00", description="Lammkeule")

        self.render([item, follower])

        row_h = self.spec.row_height_mm
        main_y = self.region.top + self.spec.header_row_height_mm
        batch_x = self.columns[COLUMN_BATCH].x + self.spec.cell_padding_mm
        self.assertIn("L-1", [op.content for op in self.texts_at(1, main_y)])
        for k, batch in ((1, "L-2"), (2, "L-3")):
            row = self.texts_at(1, main_y + k * row_h)
            self.assertEqual([op.content for op in row], [batch])
            self.assertAlmostEqual(row[0].x, batch_x)
        follower_row = [op.content for op in self.texts_at(1, main_y + 3 * row_h)]
        self.assertIn("Lammkeule", follower_row)

    def test_unresolved_total_is_blank_but_zero_total_is_printed(self) -> None:
        blank = make_item("i-1", description="Ohne Preis")
        zero = make_item("i-2", total="0", description="Gratis")

        result = self.render([blank, zero])

        first_row_y = self.region.top + self.spec.header_row_height_mm
        blank_row = [op.content for op in self.texts_at(1, first_row_y)]
        self.assertEqual(blank_row, ["A-1", "Ohne Preis"])
        zero_row = [op.content for op in self.texts_at(1, first_row_y + self.spec.row_height_mm)]
        self.assertIn("0,00", zero_row)
        self.assertEqual(result.totals.net, Decimal("0.00"))

    def test_long_description_is_truncated_with_ellipsis(self) -> None:
        item = make_item("i-1", total="1.00", description="X" * 200)

        self.render([item])

        texts = [op.content for op in self.canvas.texts(1) if op.content.startswith("XXX")]
        self.assertEqual(len(texts), 1)
        self.assertTrue(texts[0].endswith("..."))
        self.assertLess(len(texts[0]), 200)

    def test_quantity_column_is_right_aligned(self) -> None:
        self.render([make_item("i-1", quantity="4", total="8.00")])

        quantity = self.canvas.find_text("4,00 kg", page=1)
        self.assertEqual(len(quantity), 1)
        self.assertEqual(quantity[0].align, "R")
        self.assertAlmostEqual(
            quantity[0].x, self.columns[COLUMN_QUANTITY].x + self.spec.cell_padding_mm
        )


class TestPagination(FlowTestCase):
    def test_break_carries_subtotal_to_next_page(self) -> None:
        per_page = rows_per_first_page(self.region, self.spec)
        items = make_total_items(per_page + 2)
        expected_carry = sum((item.line_total for item in items[:per_page]), Decimal("0"))

        result = self.render(items)

        self.assertEqual(result.page_count, 2)
        self.assertEqual(self.canvas.page_count, 2)
        self.assertEqual(result.carry_overs, (expected_carry,))
        carry_rows = self.canvas.find_text("Übertrag", page=1)
        self.assertEqual(len(carry_rows), 1)
        self.assertAlmostEqual(carry_rows[0].y, self.region.content_bottom)
        carry_values = [
            op.content
            for op in self.texts_at(1, self.region.content_bottom)
            if op.content != "Übertrag"
        ]
        self.assertEqual(carry_values, [f"{expected_carry:.2f}".replace(".", ",")])

        page_two = self.canvas.texts(2)
        self.assertEqual([op.content for op in page_two[:6]], HEADER_TITLES)
        self.assertAlmostEqual(page_two[0].y, self.region.top)
        first_item_row = self.texts_at(2, self.region.top + self.spec.header_row_height_mm)
        self.assertIn(
            f"{items[per_page].line_total:.2f}".replace(".", ","),
            [op.content for op in first_item_row],
        )

    def test_final_carry_plus_last_page_subtotal_equals_grand_total(self) -> None:
        per_page = rows_per_first_page(self.region, self.spec)
        items = make_total_items(2 * per_page + 5)

        result = self.render(items)

        self.assertEqual(result.page_count, 3)
        self.assertEqual(len(result.carry_overs), 2)
        self.assertEqual(result.carry_overs[-1] + result.last_page_subtotal, result.totals.net)
        self.assertEqual(result.totals.net, sum((item.line_total for item in items), Decimal(0)))
        self.assertLess(result.carry_overs[0], result.carry_overs[1])

    def test_page_count_comes_from_canvas(self) -> None:
        self.canvas.new_page()

        result = self.render(make_total_items(2))

        self.assertEqual(result.carry_overs, ())
        self.assertEqual(result.page_count, 2)
        self.assertEqual(result.page_count, self.canvas.page_count)

    def test_totals_and_signatures_drawn_once_in_reserved_area(self) -> None:
        per_page = rows_per_first_page(self.region, self.spec)
        self.render(make_total_items(per_page + 3))

        for label in ("Nettobetrag EUR", "MwSt. 7 %", "Gesamtbetrag EUR"):
            matches = self.canvas.find_text(label)
            self.assertEqual(len(matches), 1, label)
            self.assertEqual(matches[0].page, 2)
            self.assertGreaterEqual(matches[0].y, self.region.content_bottom)
        self.assertEqual(self.canvas.rects(1), [])
        rects = self.canvas.rects(2)
        self.assertEqual(len(rects), 2)
        for rect in rects:
            self.assertGreaterEqual(rect.y, self.region.content_bottom)
            self.assertLessEqual(rect.y + rect.height, self.region.bottom)

    def test_item_rows_never_enter_reserved_area(self) -> None:
        per_page = rows_per_first_page(self.region, self.spec)
        items = make_total_items(per_page * 2)

        self.render(items)

        for page in (1, 2):
            for op in self.canvas.texts(page):
                if op.content.startswith("Rinderhack"):
                    self.assertLessEqual(
                        op.y + self.spec.row_height_mm, self.region.content_bottom + 1e-6
                    )

    def test_oversize_item_on_fresh_page_is_drawn_without_empty_pages(self) -> None:
        packaging = tuple((f"Kiste {idx}", "1") for idx in range(40))
        item = make_item("i-1", total="3.00", packaging=packaging)

        result = self.render([item])

        self.assertEqual(result.page_count, 1)
        self.assertEqual(self.canvas.page_count, 1)
        self.assertEqual(result.totals.net, Decimal("3.00"))

    def test_packaging_rows_move_with_their_item(self) -> None:
        per_page = rows_per_first_page(self.region, self.spec)
        filler = make_total_items(per_page - 1)
        grouped = make_item(
            "i-x", total="9.00", description="Putenbrust", packaging=(("Euro-Palette", "1"),)
        )

        result = self.render([*filler, grouped])

        self.assertEqual(result.page_count, 2)
        self.assertEqual(self.canvas.find_text("Euro-Palette", page=1), [])
        self.assertEqual(len(self.canvas.find_text("Euro-Palette", page=2)), 1)
        self.assertEqual(len(self.canvas.find_text("Putenbrust", page=2)), 1)


class TestBreakCheckBatchLines(FlowTestCase):
    def _items(self):
        per_page = rows_per_first_page(self.region, self.spec)
        filler = make_total_items(per_page - 1)
        last = make_item("i-x", total="2.00", batches=("L-1", "L-2", "L-3", "L-4"))
        return [*filler, last]

    def test_continuation_lines_ignored_by_default(self) -> None:
        result = self.render(self._items())
        self.assertEqual(result.page_count, 1)

    def test_continuation_lines_counted_when_enabled(self) -> None:
        spec = replace(self.spec, break_check_includes_batch_lines=True)
        result = self.render(self._items(), spec=spec)
        self.assertEqual(result.page_count, 2)
        self.assertEqual(len(self.canvas.find_text("L-4", page=2)), 1)

    def test_row_helpers(self) -> None:
        item = make_item(packaging=(("Kiste", "1"),), batches=("a", "b", "c"))
        self.assertEqual(item_row_count(item), 4)
        self.assertEqual(break_check_height(item, self.spec), 2 * self.spec.row_height_mm)
        spec = replace(self.spec, break_check_includes_batch_lines=True)
        self.assertEqual(break_check_height(item, spec), 4 * self.spec.row_height_mm)
        self.assertEqual(item_row_count(make_item()), 1)


class TestTotalsBlock(FlowTestCase):
    def test_order_rate_is_printed_and_applied(self) -> None:
        result = self.render([make_item("i-1", total="100.00")], tax_rate=Decimal("19"))

        self.assertEqual(result.totals.tax, Decimal("19.00"))
        self.assertEqual(result.totals.gross, Decimal("119.00"))
        self.assertEqual(len(self.canvas.find_text("MwSt. 19 %")), 1)
        value_x = self.columns[COLUMN_LINE_TOTAL].x + self.spec.cell_padding_mm
        values = [
            op.content
            for op in self.canvas.texts(1)
            if abs(op.x - value_x) < 1e-6 and op.y >= self.region.content_bottom
        ]
        self.assertEqual(values, ["100,00", "19,00", "119,00"])


if __name__ == "__main__":
    unittest.main()

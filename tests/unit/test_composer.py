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
from unittest import mock

from belegwerk.core.errors import CanvasError, InvalidIdentifierError, NotFoundError
from belegwerk.core.models import Adjustment
from belegwerk.core.source import InMemoryOrderSource
from belegwerk.render.composer import DocumentComposer, document_filename, sanitize_filename_part
from tests.test_support import (
    TEST_DATE,
    FailingCanvas,
    RecordingCanvas,
    is_valid_pdf,
    make_customer,
    make_item,
    make_order,
    make_source,
    make_total_items,
    pdf_page_count,
)


class RecordingFactory:
    def __init__(self, canvas_cls=RecordingCanvas) -> None:
        self.canvas_cls = canvas_cls
        self.canvases: list[RecordingCanvas] = []

    def __call__(self, page, **kwargs):
        canvas = self.canvas_cls(page, **kwargs)
        self.canvases.append(canvas)
        return canvas


class TestDocumentFilename(unittest.TestCase):
    def test_invoice_number_preferred(self) -> None:
        order = make_order(order_number="A-1001", invoice_number="RE 2024/17")
        customer = make_customer(name="Müller & Söhne GmbH")
        self.assertEqual(
            document_filename("rechnung", order, customer),
            "Rechnung_RE_202417_Mller__Shne_GmbH.pdf",
        )

    def test_falls_back_to_order_number_then_id(self) -> None:
        customer = make_customer(name="Kunde  Eins")
        self.assertEqual(
            document_filename("lieferschein", make_order(order_number="A-7"), customer),
            "Lieferschein_A-7_Kunde_Eins.pdf",
        )
        self.assertEqual(
            document_filename("lieferschein", make_order("o-9", order_number=None), customer),
            "Lieferschein_o-9_Kunde_Eins.pdf",
        )

    def test_sanitize_filename_part(self) -> None:
        self.assertEqual(sanitize_filename_part("  a \t b/c  "), "a_bc")


class TestComposerRender(unittest.TestCase):
    def setUp(self) -> None:
        self.factory = RecordingFactory()

    def composer(self, source) -> DocumentComposer:
        return DocumentComposer(source, canvas_factory=self.factory)

    def test_missing_order_raises_before_drawing(self) -> None:
        factory = mock.Mock(side_effect=RecordingCanvas)
        composer = DocumentComposer(make_source([]), canvas_factory=factory)
        with self.assertRaises(NotFoundError) as ctx:
            composer.render("missing", "lieferschein", document_date=TEST_DATE)
        self.assertEqual(ctx.exception.kind, "order")
        self.assertEqual(ctx.exception.identifier, "missing")
        factory.assert_not_called()

    def test_missing_customer_raises_before_drawing(self) -> None:
        factory = mock.Mock(side_effect=RecordingCanvas)
        source = InMemoryOrderSource(orders=[make_order(customer_id="ghost")])
        composer = DocumentComposer(source, canvas_factory=factory)
        with self.assertRaises(NotFoundError) as ctx:
            composer.render("o-1", "lieferschein", document_date=TEST_DATE)
        self.assertEqual(ctx.exception.kind, "customer")
        factory.assert_not_called()

    def test_unknown_doc_type_raises(self) -> None:
        with self.assertRaises(ValueError):
            self.composer(make_source([])).render("o-1", "angebot", document_date=TEST_DATE)

    def test_invalid_identifier_raises(self) -> None:
        with self.assertRaises(InvalidIdentifierError):
            self.composer(make_source([])).render("  ", "lieferschein", document_date=TEST_DATE)

    def test_render_returns_document(self) -> None:
        items = [make_item("i-1", total="10.00"), make_item("i-2", total="5.50")]
        document = self.composer(make_source(items)).render(
            {"_id": "o-1"}, "Rechnung", document_date=TEST_DATE
        )

        self.assertEqual(document.order_id, "o-1")
        self.assertEqual(document.doc_type, "rechnung")
        self.assertEqual(document.filename, "Rechnung_A-1001_Metzgerei_Beispiel.pdf")
        self.assertEqual(document.page_count, 1)
        self.assertEqual(document.totals.net, Decimal("15.50"))
        self.assertEqual(document.totals.gross, Decimal("16.59"))
        self.assertTrue(document.data.startswith(b"%PDF"))
        canvas = self.factory.canvases[0]
        self.assertEqual(canvas.title, "Rechnung A-1001")
        self.assertEqual(canvas.creation_date.date(), TEST_DATE)
        self.assertEqual(canvas.calls[-1], "output")

    def test_missing_line_items_are_skipped(self) -> None:
        items = [make_item("i-1", total="10.00"), make_item("i-2", total="5.00")]
        order = make_order(item_ids=("i-1", "gone", "i-2"))
        document = self.composer(make_source(items, order=order)).render(
            "o-1", "lieferschein", document_date=TEST_DATE
        )
        self.assertEqual(document.totals.net, Decimal("15.00"))

    def test_order_vat_rate_overrides_default(self) -> None:
        items = [make_item("i-1", total="100.00")]
        order = make_order(item_ids=("i-1",), vat_rate="19")
        document = self.composer(make_source(items, order=order)).render(
            "o-1", "rechnung", document_date=TEST_DATE
        )
        self.assertEqual(document.totals.tax, Decimal("19.00"))

    def test_default_tax_rate_is_configurable(self) -> None:
        items = [make_item("i-1", total="100.00")]
        composer = DocumentComposer(
            make_source(items),
            default_tax_rate=Decimal("19"),
            canvas_factory=self.factory,
        )
        document = composer.render("o-1", "rechnung", document_date=TEST_DATE)
        self.assertEqual(document.totals.tax, Decimal("19.00"))

    def test_letterhead_on_every_page(self) -> None:
        items = make_total_items(40)
        document = self.composer(make_source(items)).render(
            "o-1", "lieferschein", document_date=TEST_DATE
        )

        self.assertEqual(document.page_count, 2)
        canvas = self.factory.canvases[0]
        self.assertEqual(canvas.page_count, 2)
        for page in (1, 2):
            with self.subTest(page=page):
                self.assertEqual(len(canvas.find_text("Firma XYZ", page=page)), 1)
                self.assertEqual(len(canvas.find_text("Metzgerei Beispiel", page=page)), 1)
                self.assertEqual(len(canvas.find_text(f"Seite {page}", page=page)), 1)
        self.assertEqual(len(canvas.find_text("Übertrag", page=1)), 1)
        self.assertEqual(len(canvas.find_text("Gesamtbetrag EUR")), 1)

    def test_credit_note_renders_adjustment_line(self) -> None:
        composer = self.composer(make_source([make_item("i-1", total="99.00")]))
        document = composer.render(
            "o-1",
            "gutschrift",
            document_date=TEST_DATE,
            adjustment=Adjustment(reference_number="RE-12", amount=Decimal("12.5")),
        )

        self.assertEqual(document.totals.net, Decimal("12.50"))
        self.assertEqual(document.filename, "Gutschrift_A-1001_Metzgerei_Beispiel.pdf")
        canvas = self.factory.canvases[0]
        self.assertEqual(len(canvas.find_text("Gutschrift zu Beleg RE-12")), 1)
        self.assertEqual(len(canvas.find_text("Bezug auf Beleg: RE-12")), 1)
        self.assertEqual(canvas.find_text("Rinderhack"), [])

    def test_price_difference_without_reference(self) -> None:
        composer = self.composer(make_source([]))
        document = composer.render(
            "o-1",
            "preisdifferenz",
            document_date=TEST_DATE,
            adjustment=Adjustment(amount=Decimal("-3.20")),
        )
        self.assertEqual(document.totals.net, Decimal("-3.20"))
        self.assertEqual(len(self.factory.canvases[0].find_text("Preisdifferenz")), 2)

    def test_adjustment_types_require_amount(self) -> None:
        composer = self.composer(make_source([]))
        with self.assertRaises(ValueError):
            composer.render("o-1", "gutschrift", document_date=TEST_DATE)
        with self.assertRaises(ValueError):
            composer.render(
                "o-1",
                "gutschrift",
                document_date=TEST_DATE,
                adjustment=Adjustment(reference_number="RE-1"),
            )

    def test_nan_price_raises_instead_of_printing(self) -> None:
        source = make_source([make_item("i-1", price="NaN", quantity="2")])
        with self.assertRaisesRegex(ValueError, "finite"):
            self.composer(source).render("o-1", "rechnung", document_date=TEST_DATE)

    def test_canvas_error_propagates(self) -> None:
        composer = DocumentComposer(make_source([]), canvas_factory=RecordingFactory(FailingCanvas))
        with self.assertRaises(CanvasError):
            composer.render("o-1", "lieferschein", document_date=TEST_DATE)


class TestComposerBatch(unittest.TestCase):
    def setUp(self) -> None:
        customer = make_customer()
        self.source = InMemoryOrderSource(
            orders=[
                make_order("o-1", item_ids=("i-1",), order_number="A-1"),
                make_order("o-2", item_ids=("i-2",), order_number="A-2"),
                make_order("o-3", item_ids=("i-1", "i-2"), order_number="A-3"),
            ],
            customers=[customer],
            line_items=[make_item("i-1", total="1.00"), make_item("i-2", total="2.00")],
        )

    def test_batch_isolates_failures(self) -> None:
        def factory(page, **kwargs):
            if kwargs["title"].endswith("A-2"):
                return FailingCanvas(page, **kwargs)
            return RecordingCanvas(page, **kwargs)

        composer = DocumentComposer(self.source, canvas_factory=factory)
        results = composer.render_batch(
            ["o-1", "missing", "o-2", "o-3"], "lieferschein", document_date=TEST_DATE
        )

        self.assertEqual([result.order_id for result in results], ["o-1", "missing", "o-2", "o-3"])
        self.assertEqual([result.ok for result in results], [True, False, False, True])
        self.assertIn("order not found: missing", results[1].error)
        self.assertIn("disk full", results[2].error)
        self.assertEqual(results[3].document.totals.net, Decimal("3.00"))
        self.assertIsNone(results[0].error)

    def test_batch_isolates_non_finite_amounts(self) -> None:
        source = InMemoryOrderSource(
            orders=[
                make_order("o-1", item_ids=("i-bad",), order_number="A-1"),
                make_order("o-2", item_ids=("i-2",), order_number="A-2"),
            ],
            customers=[make_customer()],
            line_items=[
                make_item("i-bad", price="Infinity", quantity="1"),
                make_item("i-2", total="2.00"),
            ],
        )
        factory = RecordingFactory()
        composer = DocumentComposer(source, canvas_factory=factory)

        results = composer.render_batch(["o-1", "o-2"], "rechnung", document_date=TEST_DATE)

        self.assertEqual([result.ok for result in results], [False, True])
        self.assertIn("finite", results[0].error)
        self.assertEqual(results[1].document.totals.net, Decimal("2.00"))
        self.assertTrue(results[1].document.data.startswith(b"%PDF"))

    def test_each_order_gets_its_own_canvas(self) -> None:
        factory = RecordingFactory()
        composer = DocumentComposer(self.source, canvas_factory=factory)
        results = composer.render_batch(["o-1", "o-3"], "rechnung", document_date=TEST_DATE)
        self.assertEqual(len(factory.canvases), 2)
        self.assertIsNot(factory.canvases[0], factory.canvases[1])
        self.assertEqual(
            [result.document.filename for result in results],
            ["Rechnung_A-1_Metzgerei_Beispiel.pdf", "Rechnung_A-3_Metzgerei_Beispiel.pdf"],
        )

    def test_batch_rejects_adjustment_types(self) -> None:
        composer = DocumentComposer(self.source, canvas_factory=RecordingFactory())
        with self.assertRaises(ValueError):
            composer.render_batch(["o-1"], "gutschrift", document_date=TEST_DATE)


class TestComposerPdf(unittest.TestCase):
    def test_real_pdf_output(self) -> None:
        items = [
            make_item("i-1", total="12.30", batches=("L-1", "L-2"), packaging=(("Kiste", "2"),)),
            replace(make_item("i-2", price="3.00"), net_weight=Decimal("12.5")),
        ]
        document = DocumentComposer(make_source(items)).render(
            "o-1", "lieferschein", document_date=TEST_DATE
        )
        self.assertTrue(is_valid_pdf(document.data))
        self.assertEqual(pdf_page_count(document.data), 1)
        self.assertEqual(document.totals.net, Decimal("49.80"))

    def test_multi_page_pdf(self) -> None:
        document = DocumentComposer(make_source(make_total_items(60))).render(
            "o-1", "rechnung", document_date=TEST_DATE
        )
        self.assertEqual(document.page_count, 3)
        self.assertEqual(pdf_page_count(document.data), 3)

    def test_output_is_deterministic(self) -> None:
        source = make_source(make_total_items(35))
        first = DocumentComposer(source).render("o-1", "rechnung", document_date=TEST_DATE)
        second = DocumentComposer(source).render("o-1", "rechnung", document_date=TEST_DATE)
        self.assertEqual(first.data, second.data)


if __name__ == "__main__":
    unittest.main()

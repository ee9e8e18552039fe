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

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import TYPE_CHECKING

from ..core.errors import CanvasError, NotFoundError
from ..core.ids import normalize_id
from ..core.models import Adjustment, Customer, LineItem, Order
from ..core.source import OrderSource
from .canvas import Canvas, FpdfCanvas
from .doc_types import ADJUSTMENT_DOC_TYPES, doc_type_label, normalize_doc_type
from .flow import render_table
from .geometry import build_columns, build_region
from .letterhead import LetterheadContent, draw_letterhead
from .money import DEFAULT_TAX_RATE, TotalsBlock
from .spec import DocumentSpec, PageSpec

if TYPE_CHECKING:
    from ..config.loader import AppConfig

CanvasFactory = Callable[..., Canvas]

_WHITESPACE_RE = re.compile(r"\s+")
_FILENAME_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_-]")


@dataclass(frozen=True)
class RenderedDocument:
    order_id: str
    doc_type: str
    filename: str
    data: bytes
    page_count: int
    totals: TotalsBlock


@dataclass(frozen=True)
class BatchResult:
    order_id: str
    document: RenderedDocument | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.document is not None


def sanitize_filename_part(value: str) -> str:
    return _FILENAME_UNSAFE_RE.sub("", _WHITESPACE_RE.sub("_", value.strip()))


def document_filename(doc_type: str, order: Order, customer: Customer) -> str:
    label = doc_type_label(doc_type)
    number = sanitize_filename_part(order.document_number())
    return f"{label}_{number}_{sanitize_filename_part(customer.name)}.pdf"


class DocumentComposer:
    """Render one PDF per (order, document type) from an order source."""

    def __init__(
        self,
        source: OrderSource,
        spec: DocumentSpec | None = None,
        *,
        default_tax_rate: Decimal = DEFAULT_TAX_RATE,
        canvas_factory: CanvasFactory = FpdfCanvas,
    ) -> None:
        self._source = source
        self._spec = spec or DocumentSpec()
        self._default_tax_rate = default_tax_rate
        self._canvas_factory = canvas_factory

    @classmethod
    def from_config(
        cls,
        source: OrderSource,
        config: AppConfig,
        *,
        canvas_factory: CanvasFactory = FpdfCanvas,
    ) -> DocumentComposer:
        return cls(
            source,
            config.document_spec(),
            default_tax_rate=config.tax.default_rate,
            canvas_factory=canvas_factory,
        )

    @property
    def spec(self) -> DocumentSpec:
        return self._spec

    def render(
        self,
        order_id: object,
        doc_type: str,
        *,
        document_date: date,
        adjustment: Adjustment | None = None,
    ) -> RenderedDocument:
        doc_type = normalize_doc_type(doc_type)
        order, customer = self._load(order_id)
        items = self._document_items(order, doc_type, adjustment)

        spec = self._spec
        region = build_region(
            spec.page,
            header_height=spec.letterhead.height_mm,
            reserved_height=spec.table.reserved_height,
        )
        columns = build_columns(region, spec.table.columns)
        content = LetterheadContent(
            title=doc_type_label(doc_type),
            number=order.document_number(),
            document_date=document_date,
            recipient_lines=(customer.name, *customer.address_lines()),
            delivery_date=order.delivery_date,
            reference_number=adjustment.reference_number if adjustment else None,
        )
        canvas = self._new_canvas(spec.page, document_date, content.title, content.number)

        page_number = 1
        canvas.new_page()
        draw_letterhead(canvas, spec.page, spec.letterhead, content, page_number=page_number)

        def _next_page() -> None:
            nonlocal page_number
            page_number += 1
            canvas.new_page()
            draw_letterhead(canvas, spec.page, spec.letterhead, content, page_number=page_number)

        tax_rate = order.vat_rate if order.vat_rate is not None else self._default_tax_rate
        result = render_table(
            canvas,
            region,
            columns,
            items,
            tax_rate,
            spec=spec.table,
            on_new_page=_next_page,
        )
        data = canvas.output()
        return RenderedDocument(
            order_id=order.id,
            doc_type=doc_type,
            filename=document_filename(doc_type, order, customer),
            data=data,
            page_count=result.page_count,
            totals=result.totals,
        )

    def render_batch(
        self,
        order_ids: Iterable[object],
        doc_type: str,
        *,
        document_date: date,
    ) -> list[BatchResult]:
        doc_type = normalize_doc_type(doc_type)
        if doc_type in ADJUSTMENT_DOC_TYPES:
            raise ValueError(f"batch generation does not support {doc_type} documents")
        results: list[BatchResult] = []
        for order_id in order_ids:
            try:
                document = self.render(order_id, doc_type, document_date=document_date)
            except (NotFoundError, CanvasError, ValueError) as exc:
                results.append(BatchResult(order_id=str(order_id), error=str(exc)))
                continue
            results.append(BatchResult(order_id=document.order_id, document=document))
        return results

    def _load(self, order_id: object) -> tuple[Order, Customer]:
        key = normalize_id(order_id, label="order id")
        order = self._source.get_order(key)
        if order is None:
            raise NotFoundError("order", key)
        customer = self._source.get_customer(order.customer_id)
        if customer is None:
            raise NotFoundError("customer", order.customer_id)
        return order, customer

    def _document_items(
        self,
        order: Order,
        doc_type: str,
        adjustment: Adjustment | None,
    ) -> list[LineItem]:
        if doc_type in ADJUSTMENT_DOC_TYPES:
            return [_adjustment_item(doc_type, adjustment)]
        items: list[LineItem] = []
        for item_id in order.line_item_ids:
            item = self._source.get_line_item(item_id)
            if item is None:
                continue
            items.append(item)
        return items

    def _new_canvas(self, page: PageSpec, document_date: date, title: str, number: str) -> Canvas:
        creation = datetime.combine(document_date, time(), tzinfo=timezone.utc)
        return self._canvas_factory(page, creation_date=creation, title=f"{title} {number}")


def _adjustment_item(doc_type: str, adjustment: Adjustment | None) -> LineItem:
    label = doc_type_label(doc_type)
    if adjustment is None or adjustment.amount is None:
        raise ValueError(f"{doc_type} requires an adjustment amount")
    description = label
    if adjustment.reference_number:
        description = f"{label} zu Beleg {adjustment.reference_number}"
    return LineItem(description=description, line_total=adjustment.amount)

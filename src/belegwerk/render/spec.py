#!/usr/bin/env python3
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

COLUMN_ITEM_CODE = "item_code"
COLUMN_DESCRIPTION = "description"
COLUMN_BATCH = "batch"
COLUMN_QUANTITY = "quantity"
COLUMN_UNIT_PRICE = "unit_price"
COLUMN_LINE_TOTAL = "line_total"

COLUMN_KEYS = (
    COLUMN_ITEM_CODE,
    COLUMN_DESCRIPTION,
    COLUMN_BATCH,
    COLUMN_QUANTITY,
    COLUMN_UNIT_PRICE,
    COLUMN_LINE_TOTAL,
)


@dataclass(frozen=True)
class ColumnSpec:
    key: str
    title: str
    weight: float
    align: str = "L"


DEFAULT_COLUMNS: tuple[ColumnSpec, ...] = (
    ColumnSpec(COLUMN_ITEM_CODE, "Art.-Nr.", 60.0),
    ColumnSpec(COLUMN_DESCRIPTION, "Bezeichnung", 160.0),
    ColumnSpec(COLUMN_BATCH, "Charge", 80.0),
    ColumnSpec(COLUMN_QUANTITY, "Menge", 70.0, "R"),
    ColumnSpec(COLUMN_UNIT_PRICE, "Einzelpreis", 60.0, "R"),
    ColumnSpec(COLUMN_LINE_TOTAL, "Gesamt", 70.0, "R"),
)


@dataclass(frozen=True)
class PageSpec:
    size: str = "A4"
    width_mm: float | None = None
    height_mm: float | None = None
    margin_top_mm: float = 14.0
    margin_bottom_mm: float = 16.0
    margin_left_mm: float = 18.0
    margin_right_mm: float = 14.0


@dataclass(frozen=True)
class LetterheadSpec:
    company_name: str = "Firma XYZ"
    company_lines: tuple[str, ...] = ()
    footer: str = "Dies ist ein automatisch erstelltes Dokument."
    font_family: str = "Helvetica"
    title_size: float = 18.0
    subtitle_size: float = 12.0
    body_size: float = 9.0
    meta_size: float = 8.0
    line_height_mm: float = 4.5
    height_mm: float = 70.0
    split_left_ratio: float = 0.6
    divider_thickness_mm: float = 0.4


@dataclass(frozen=True)
class TableSpec:
    font_family: str = "Helvetica"
    font_size: float = 8.5
    header_font_size: float = 8.5
    row_height_mm: float = 5.0
    header_row_height_mm: float = 6.5
    cell_padding_mm: float = 1.2
    columns: tuple[ColumnSpec, ...] = DEFAULT_COLUMNS
    carry_over_label: str = "Übertrag"
    net_label: str = "Nettobetrag"
    tax_label: str = "MwSt."
    gross_label: str = "Gesamtbetrag"
    currency: str = "EUR"
    totals_gap_mm: float = 3.0
    totals_line_height_mm: float = 5.0
    signature_gap_mm: float = 6.0
    signature_height_mm: float = 18.0
    signature_label_height_mm: float = 5.0
    signature_spacing_mm: float = 12.0
    signature_labels: tuple[str, str] = ("Unterschrift Fahrer", "Unterschrift Empfänger")
    break_check_includes_batch_lines: bool = False

    @property
    def totals_height(self) -> float:
        return self.totals_gap_mm + 3 * self.totals_line_height_mm

    @property
    def signature_block_height(self) -> float:
        return self.signature_gap_mm + self.signature_height_mm + self.signature_label_height_mm

    @property
    def reserved_height(self) -> float:
        """Space held at the bottom of every page for totals and signatures."""
        return self.totals_height + self.signature_block_height


@dataclass(frozen=True)
class TaxSpec:
    default_rate: Decimal = Decimal("7")


@dataclass(frozen=True)
class ShortDeliverySpec:
    delay_seconds: float = 60 * 60.0
    threshold_percent: Decimal = Decimal("30")
    sender: str = "versand@example.com"


@dataclass(frozen=True)
class DocumentSpec:
    page: PageSpec = field(default_factory=PageSpec)
    letterhead: LetterheadSpec = field(default_factory=LetterheadSpec)
    table: TableSpec = field(default_factory=TableSpec)

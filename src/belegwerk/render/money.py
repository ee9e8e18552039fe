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
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from ..core.models import LineItem, PackagingRow

ZERO = Decimal("0.00")
CENT = Decimal("0.01")
DEFAULT_TAX_RATE = Decimal("7")
WEIGHT_UNIT = "kg"
PACKAGING_UNIT = "Stk"


def round2(value: Decimal) -> Decimal:
    if not value.is_finite():
        raise ValueError(f"amount must be a finite number, got {value}")
    try:
        return value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError(f"amount out of range: {value}") from exc


def format_amount(value: Decimal) -> str:
    """Fixed two-decimal German notation: ``Decimal("1234.5")`` -> ``"1.234,50"``."""
    rounded = round2(value)
    text = f"{rounded:,.2f}"
    return text.replace(",", "\x00").replace(".", ",").replace("\x00", ".")


def format_rate(rate: Decimal) -> str:
    normalized = rate.normalize()
    if normalized == normalized.to_integral_value():
        return format(normalized.to_integral_value(), "f")
    return format(normalized, "f").replace(".", ",")


@dataclass(frozen=True)
class ResolvedRow:
    quantity: Decimal | None = None
    unit: str = ""
    unit_price: Decimal | None = None
    line_total: Decimal | None = None

    @property
    def quantity_text(self) -> str:
        if self.quantity is None:
            return ""
        if not self.unit:
            return format_amount(self.quantity)
        return f"{format_amount(self.quantity)} {self.unit}"

    @property
    def unit_price_text(self) -> str:
        return "" if self.unit_price is None else format_amount(self.unit_price)

    @property
    def line_total_text(self) -> str:
        return "" if self.line_total is None else format_amount(self.line_total)

    @property
    def amount(self) -> Decimal:
        """Contribution to subtotals; blank totals count as zero."""
        return ZERO if self.line_total is None else self.line_total


def resolve_quantity(item: LineItem) -> tuple[Decimal | None, str]:
    if item.net_weight is not None:
        return item.net_weight, WEIGHT_UNIT
    if item.picked_quantity is not None:
        return item.picked_quantity, item.picked_unit or item.ordered_unit or ""
    if item.ordered_quantity is not None:
        return item.ordered_quantity, item.ordered_unit or ""
    return None, ""


def resolve_row(item: LineItem) -> ResolvedRow:
    quantity, unit = resolve_quantity(item)
    unit_price = item.unit_price
    if item.line_total is not None:
        line_total: Decimal | None = round2(item.line_total)
    elif unit_price is not None and quantity is not None:
        line_total = round2(unit_price * quantity)
    else:
        line_total = None
    return ResolvedRow(
        quantity=quantity,
        unit=unit,
        unit_price=unit_price,
        line_total=line_total,
    )


def resolve_packaging_row(row: PackagingRow) -> ResolvedRow:
    return ResolvedRow(quantity=row.count, unit=PACKAGING_UNIT, unit_price=ZERO, line_total=ZERO)


@dataclass(frozen=True)
class TotalsBlock:
    net: Decimal
    tax_rate: Decimal
    tax: Decimal
    gross: Decimal


def compute_totals(net: Decimal, tax_rate: Decimal | None = None) -> TotalsBlock:
    rate = DEFAULT_TAX_RATE if tax_rate is None else tax_rate
    net = round2(net)
    tax = round2(net * rate / Decimal(100))
    return TotalsBlock(net=net, tax_rate=rate, tax=tax, gross=net + tax)

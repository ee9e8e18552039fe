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
from decimal import Decimal


@dataclass(frozen=True)
class PackagingRow:
    """Returnable packaging (pallets, crates) listed with an item, never billed."""

    label: str
    count: Decimal


@dataclass(frozen=True)
class LineItem:
    item_code: str = ""
    description: str = ""
    packaging: tuple[PackagingRow, ...] = ()
    batch_numbers: tuple[str, ...] = ()
    ordered_quantity: Decimal | None = None
    ordered_unit: str | None = None
    picked_quantity: Decimal | None = None
    picked_unit: str | None = None
    net_weight: Decimal | None = None
    unit_price: Decimal | None = None
    line_total: Decimal | None = None
    id: str | None = None


@dataclass(frozen=True)
class Address:
    street: str | None = None
    postal_code: str | None = None
    city: str | None = None

    def lines(self) -> tuple[str, ...]:
        locality = " ".join(part for part in (self.postal_code, self.city) if part)
        return tuple(line for line in (self.street, locality) if line)


@dataclass(frozen=True)
class Customer:
    id: str
    name: str
    email: str | None = None
    address: str | Address | None = None
    short_delivery_notification: bool = False

    def address_lines(self) -> tuple[str, ...]:
        if self.address is None:
            return ()
        if isinstance(self.address, Address):
            return self.address.lines()
        return tuple(line.strip() for line in self.address.splitlines() if line.strip())


@dataclass(frozen=True)
class Order:
    id: str
    customer_id: str
    line_item_ids: tuple[str, ...] = ()
    order_number: str | None = None
    invoice_number: str | None = None
    vat_rate: Decimal | None = None
    delivery_date: date | None = None

    def document_number(self) -> str:
        return self.invoice_number or self.order_number or self.id


@dataclass(frozen=True)
class Adjustment:
    """Input for credit notes and price-difference notes."""

    reference_number: str | None = None
    amount: Decimal | None = None

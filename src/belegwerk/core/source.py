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

import json
from collections.abc import Iterable
from decimal import Decimal
from pathlib import Path
from typing import Protocol

from .ids import normalize_id
from .models import Address, Customer, LineItem, Order, PackagingRow
from .validation import (
    optional_date,
    optional_decimal,
    optional_str,
    require_dict,
    require_list,
)


class OrderSource(Protocol):
    def get_order(self, order_id: str) -> Order | None: ...

    def get_customer(self, customer_id: str) -> Customer | None: ...

    def get_line_item(self, item_id: str) -> LineItem | None: ...


class InMemoryOrderSource:
    def __init__(
        self,
        *,
        orders: Iterable[Order] = (),
        customers: Iterable[Customer] = (),
        line_items: Iterable[LineItem] = (),
    ) -> None:
        self._orders = {order.id: order for order in orders}
        self._customers = {customer.id: customer for customer in customers}
        self._line_items = {item.id: item for item in line_items if item.id is not None}

    def get_order(self, order_id: str) -> Order | None:
        return self._orders.get(order_id)

    def get_customer(self, customer_id: str) -> Customer | None:
        return self._customers.get(customer_id)

    def get_line_item(self, item_id: str) -> LineItem | None:
        return self._line_items.get(item_id)


def load_json_source(path: str | Path) -> InMemoryOrderSource:
    with Path(path).open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    return source_from_dict(require_dict(data, label="data file"))


def source_from_dict(data: dict[str, object]) -> InMemoryOrderSource:
    orders = [
        parse_order(require_dict(entry, label="orders[]"))
        for entry in require_list(data.get("orders", []), label="orders")
    ]
    customers = [
        parse_customer(require_dict(entry, label="customers[]"))
        for entry in require_list(data.get("customers", []), label="customers")
    ]
    line_items = [
        parse_line_item(require_dict(entry, label="line_items[]"))
        for entry in require_list(data.get("line_items", []), label="line_items")
    ]
    return InMemoryOrderSource(orders=orders, customers=customers, line_items=line_items)


def parse_order(data: dict[str, object]) -> Order:
    return Order(
        id=normalize_id(data.get("id"), label="order.id"),
        customer_id=normalize_id(data.get("customer"), label="order.customer"),
        line_item_ids=tuple(
            normalize_id(value, label="order.line_items[]")
            for value in require_list(data.get("line_items", []), label="order.line_items")
        ),
        order_number=optional_str(data.get("order_number"), label="order.order_number"),
        invoice_number=optional_str(data.get("invoice_number"), label="order.invoice_number"),
        vat_rate=optional_decimal(data.get("vat_rate"), label="order.vat_rate"),
        delivery_date=optional_date(data.get("delivery_date"), label="order.delivery_date"),
    )


def parse_customer(data: dict[str, object]) -> Customer:
    raw_address = data.get("address")
    address: str | Address | None
    if isinstance(raw_address, dict):
        address = Address(
            street=optional_str(raw_address.get("street"), label="customer.address.street"),
            postal_code=optional_str(
                raw_address.get("postal_code"), label="customer.address.postal_code"
            ),
            city=optional_str(raw_address.get("city"), label="customer.address.city"),
        )
    else:
        address = optional_str(raw_address, label="customer.address")
    return Customer(
        id=normalize_id(data.get("id"), label="customer.id"),
        name=optional_str(data.get("name"), label="customer.name") or "",
        email=optional_str(data.get("email"), label="customer.email"),
        address=address,
        short_delivery_notification=bool(data.get("short_delivery_notification", False)),
    )


def parse_line_item(data: dict[str, object]) -> LineItem:
    packaging = []
    for entry in require_list(data.get("packaging", []), label="line_item.packaging"):
        row = require_dict(entry, label="line_item.packaging[]")
        count = optional_decimal(row.get("count"), label="line_item.packaging[].count")
        packaging.append(
            PackagingRow(
                label=optional_str(row.get("label"), label="line_item.packaging[].label") or "",
                count=count if count is not None else Decimal(0),
            )
        )
    batch_numbers = tuple(
        str(value).strip()
        for value in require_list(data.get("batch_numbers", []), label="line_item.batch_numbers")
        if str(value).strip()
    )
    raw_id = data.get("id")
    return LineItem(
        id=normalize_id(raw_id, label="line_item.id") if raw_id is not None else None,
        item_code=optional_str(data.get("item_code"), label="line_item.item_code") or "",
        description=optional_str(data.get("description"), label="line_item.description") or "",
        packaging=tuple(packaging),
        batch_numbers=batch_numbers,
        ordered_quantity=optional_decimal(
            data.get("ordered_quantity"), label="line_item.ordered_quantity"
        ),
        ordered_unit=optional_str(data.get("ordered_unit"), label="line_item.ordered_unit"),
        picked_quantity=optional_decimal(
            data.get("picked_quantity"), label="line_item.picked_quantity"
        ),
        picked_unit=optional_str(data.get("picked_unit"), label="line_item.picked_unit"),
        net_weight=optional_decimal(data.get("net_weight"), label="line_item.net_weight"),
        unit_price=optional_decimal(data.get("unit_price"), label="line_item.unit_price"),
        line_total=optional_decimal(data.get("line_total"), label="line_item.line_total"),
    )

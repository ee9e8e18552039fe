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


"""Debounced short-delivery notifications.

Short positions reported for the same order are collected while a delayed
task is pending; every new report restarts the delay. When the task fires the
customer receives one mail with a freshly rendered delivery note attached.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from ..core.ids import normalize_id
from ..core.models import Customer, Order
from ..core.source import OrderSource
from ..render.composer import DocumentComposer
from ..render.doc_types import DOC_TYPE_DELIVERY_NOTE
from .clock import DelayedTaskQueue, TaskHandle
from .mailer import Mailer, ShortDeliveryMail, ShortDeliveryPosition

DEFAULT_DELAY_SECONDS = 60 * 60.0
DEFAULT_THRESHOLD_PERCENT = Decimal("30")

WarnFn = Callable[[str], None]


def has_short_delivery(
    ordered: Decimal | int | float,
    delivered: Decimal | int | float,
    threshold_percent: Decimal | int | float = DEFAULT_THRESHOLD_PERCENT,
) -> bool:
    ordered_value = _to_decimal(ordered)
    if ordered_value <= 0:
        return False
    delivered_value = _to_decimal(delivered)
    shortfall = (ordered_value - delivered_value) / ordered_value * 100
    return shortfall >= _to_decimal(threshold_percent)


def _to_decimal(value: Decimal | int | float) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class PendingNotification:
    positions: tuple[ShortDeliveryPosition, ...]
    handle: TaskHandle
    started_at: float


@dataclass(frozen=True)
class ShortDeliveryStatus:
    pending: bool
    remaining_seconds: float | None = None
    positions: tuple[ShortDeliveryPosition, ...] = ()


class PendingStore:
    """Pending notifications keyed by order id."""

    def __init__(self) -> None:
        self._entries: dict[str, PendingNotification] = {}

    def get(self, order_id: str) -> PendingNotification | None:
        return self._entries.get(order_id)

    def put(self, order_id: str, entry: PendingNotification) -> None:
        self._entries[order_id] = entry

    def pop(self, order_id: str) -> PendingNotification | None:
        return self._entries.pop(order_id, None)

    def clear(self) -> list[PendingNotification]:
        entries = list(self._entries.values())
        self._entries.clear()
        return entries

    def __contains__(self, order_id: object) -> bool:
        return order_id in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


def merge_position(
    positions: tuple[ShortDeliveryPosition, ...],
    position: ShortDeliveryPosition,
) -> tuple[ShortDeliveryPosition, ...]:
    merged = list(positions)
    for idx, existing in enumerate(merged):
        if existing.position_id == position.position_id:
            merged[idx] = position
            return tuple(merged)
    merged.append(position)
    return tuple(merged)


class ShortDeliveryScheduler:
    def __init__(
        self,
        source: OrderSource,
        composer: DocumentComposer,
        mailer: Mailer,
        *,
        queue: DelayedTaskQueue,
        store: PendingStore | None = None,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        warn: WarnFn | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be zero or positive")
        self._source = source
        self._composer = composer
        self._mailer = mailer
        self._queue = queue
        self._store = store if store is not None else PendingStore()
        self._delay = float(delay_seconds)
        self._warn = warn or _ignore_warning
        self._today = today
        self._lock = threading.RLock()

    @property
    def store(self) -> PendingStore:
        return self._store

    def register(self, order_id: object, position: ShortDeliveryPosition) -> bool:
        key = normalize_id(order_id, label="order id")
        recipient = self._lookup(key)
        if recipient is None:
            return False
        order, customer = recipient
        if not customer.short_delivery_notification:
            self._warn(
                f"short delivery for order {order.document_number()} ignored: "
                f"customer {customer.name} has not opted in"
            )
            return False
        with self._lock:
            existing = self._store.get(key)
            positions: tuple[ShortDeliveryPosition, ...] = ()
            if existing is not None:
                self._queue.cancel(existing.handle)
                positions = existing.positions
            handle = self._queue.schedule(self._delay, lambda: self._fire(key))
            self._store.put(
                key,
                PendingNotification(
                    positions=merge_position(positions, position),
                    handle=handle,
                    started_at=self._queue.now(),
                ),
            )
        return True

    def remove(self, order_id: object, position_id: str) -> bool:
        key = normalize_id(order_id, label="order id")
        with self._lock:
            existing = self._store.get(key)
            if existing is None:
                return False
            remaining = tuple(p for p in existing.positions if p.position_id != position_id)
            if remaining:
                self._store.put(
                    key,
                    PendingNotification(
                        positions=remaining,
                        handle=existing.handle,
                        started_at=existing.started_at,
                    ),
                )
            else:
                self._queue.cancel(existing.handle)
                self._store.pop(key)
        return True

    def status(self, order_id: object) -> ShortDeliveryStatus:
        key = normalize_id(order_id, label="order id")
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return ShortDeliveryStatus(pending=False)
            elapsed = self._queue.now() - entry.started_at
            return ShortDeliveryStatus(
                pending=True,
                remaining_seconds=max(0.0, self._delay - elapsed),
                positions=entry.positions,
            )

    def send_now(self, order_id: object) -> bool:
        key = normalize_id(order_id, label="order id")
        with self._lock:
            entry = self._store.get(key)
            if entry is None or not entry.positions:
                return False
            self._queue.cancel(entry.handle)
        self._fire(key)
        return True

    def cancel(self, order_id: object) -> bool:
        key = normalize_id(order_id, label="order id")
        with self._lock:
            entry = self._store.pop(key)
            if entry is None:
                return False
            self._queue.cancel(entry.handle)
        return True

    def clear_all(self) -> None:
        with self._lock:
            for entry in self._store.clear():
                self._queue.cancel(entry.handle)

    def pending_count(self) -> int:
        with self._lock:
            return len(self._store)

    def _lookup(self, key: str) -> tuple[Order, Customer] | None:
        order = self._source.get_order(key)
        if order is None:
            self._warn(f"short delivery ignored: order not found: {key}")
            return None
        customer = self._source.get_customer(order.customer_id)
        if customer is None:
            self._warn(f"short delivery ignored: customer not found: {order.customer_id}")
            return None
        return order, customer

    def _fire(self, key: str) -> None:
        with self._lock:
            entry = self._store.pop(key)
        if entry is None or not entry.positions:
            return
        order = self._source.get_order(key)
        if order is None:
            return
        customer = self._source.get_customer(order.customer_id)
        if customer is None or not customer.email or not customer.short_delivery_notification:
            return
        try:
            document = self._composer.render(
                key,
                DOC_TYPE_DELIVERY_NOTE,
                document_date=self._today(),
            )
            self._mailer.send(
                ShortDeliveryMail(
                    recipient=customer.email,
                    customer_name=customer.name,
                    order_number=order.order_number or order.id,
                    positions=entry.positions,
                    attachment_name=document.filename,
                    attachment=document.data,
                )
            )
        except (LookupError, OSError, RuntimeError, ValueError) as exc:
            self._warn(f"short delivery notification for order {key} failed: {exc}")


def _ignore_warning(message: str) -> None:
    return None

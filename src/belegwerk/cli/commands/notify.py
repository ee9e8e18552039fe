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

import threading
from pathlib import Path

import typer

from ...core.source import load_json_source
from ...notify.clock import DelayedTaskQueue, MonotonicClock
from ...notify.mailer import OutboxMailer, ShortDeliveryPosition
from ...notify.scheduler import ShortDeliveryScheduler, has_short_delivery
from ...render.composer import DocumentComposer
from ..core.common import _ctx_value, _load_config, _parse_decimal_option, _run_cli
from ..core.log import _warn
from ..ui import console, print_completion_panel

_NOTIFY_HELP = (
    "Notify a customer about a short delivery with the delivery note attached.\n\n"
    "The mail is written as an .eml file into the outbox directory once the\n"
    "configured delay has passed without further reports for the order.\n\n"
    "Examples:\n"
    "  belegwerk notify-shortage A-1001 10 6 --data orders.json --article Rinderhack\n"
    "  belegwerk notify-shortage A-1001 10 6 --data orders.json --outbox mails/ --now\n"
)


def register(app: typer.Typer) -> None:
    app.command("notify-shortage", help=_NOTIFY_HELP)(notify_shortage)


def notify_shortage(
    ctx: typer.Context,
    order_id: str = typer.Argument(..., help="Order id as stored in the data file."),
    ordered: str = typer.Argument(..., help="Ordered quantity."),
    delivered: str = typer.Argument(..., help="Delivered quantity."),
    data: Path = typer.Option(
        ...,
        "--data",
        "-d",
        help="JSON file with orders, customers and line_items.",
        rich_help_panel="Inputs",
    ),
    article: str = typer.Option(
        "",
        "--article",
        help="Article name shown in the mail.",
        rich_help_panel="Inputs",
    ),
    position: str = typer.Option(
        "1",
        "--position",
        help="Position id; reports for the same position replace each other.",
        rich_help_panel="Inputs",
    ),
    unit: str = typer.Option(
        "",
        "--unit",
        help="Unit of the quantities (e.g. kg).",
        rich_help_panel="Inputs",
    ),
    threshold: str | None = typer.Option(
        None,
        "--threshold",
        help="Shortfall in percent that triggers a notification (default from config).",
        rich_help_panel="Inputs",
    ),
    outbox: Path = typer.Option(
        Path("outbox"),
        "--outbox",
        help="Directory that receives the generated .eml files.",
        rich_help_panel="Outputs",
    ),
    now: bool = typer.Option(
        False,
        "--now",
        help="Send immediately instead of waiting for the configured delay.",
        rich_help_panel="Outputs",
    ),
) -> None:
    quiet_value = bool(_ctx_value(ctx, "quiet"))
    debug_value = bool(_ctx_value(ctx, "debug"))

    def _run() -> int:
        config = _load_config(ctx)
        ordered_value = _parse_decimal_option(ordered, option="ORDERED")
        delivered_value = _parse_decimal_option(delivered, option="DELIVERED")
        if ordered_value is None or delivered_value is None:
            raise ValueError("ORDERED and DELIVERED must be numbers")
        threshold_value = _parse_decimal_option(threshold, option="--threshold")
        if threshold_value is None:
            threshold_value = config.short_delivery.threshold_percent
        if not has_short_delivery(ordered_value, delivered_value, threshold_value):
            if not quiet_value:
                console.print("No short delivery; nothing to send.")
            return 0

        source = load_json_source(data)
        mailer = OutboxMailer(outbox, sender=config.short_delivery.sender)
        queue = DelayedTaskQueue(MonotonicClock())
        scheduler = ShortDeliveryScheduler(
            source,
            DocumentComposer.from_config(source, config),
            mailer,
            queue=queue,
            delay_seconds=config.short_delivery.delay_seconds,
            warn=lambda message: _warn(message, quiet=quiet_value),
        )
        registered = scheduler.register(
            order_id,
            ShortDeliveryPosition(
                position_id=position,
                article_name=article,
                ordered_quantity=ordered_value,
                delivered_quantity=delivered_value,
                unit=unit,
            ),
        )
        if not registered:
            return 1
        if now:
            scheduler.send_now(order_id)
        else:
            if not quiet_value:
                console.print(
                    f"Waiting {config.short_delivery.delay_seconds:g} s before sending "
                    "(Ctrl+C to abort)."
                )
            _wait_until_sent(queue, scheduler)
        if not mailer.written:
            return 1
        print_completion_panel(
            "Notification written",
            [f"Saved to {path}" for path in mailer.written],
            quiet=quiet_value,
        )
        return 0

    _run_cli(_run, debug=debug_value)


def _wait_until_sent(
    queue: DelayedTaskQueue,
    scheduler: ShortDeliveryScheduler,
    *,
    poll_seconds: float = 1.0,
) -> None:
    idle = threading.Event()
    while True:
        queue.run_due()
        if not scheduler.pending_count():
            return
        idle.wait(poll_seconds)

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

import typer

from ...notify.scheduler import has_short_delivery
from ...render.money import format_amount
from ..core.common import _ctx_value, _load_config, _parse_decimal_option, _run_cli
from ..ui import build_kv_table, console

_SHORTAGE_HELP = (
    "Check whether a delivered quantity counts as a short delivery.\n\n"
    "Examples:\n"
    "  belegwerk check-shortage 10 6.5\n"
    "  belegwerk check-shortage 10 8 --threshold 15\n"
)


def register(app: typer.Typer) -> None:
    app.command("check-shortage", help=_SHORTAGE_HELP)(check_shortage)


def check_shortage(
    ctx: typer.Context,
    ordered: str = typer.Argument(..., help="Ordered quantity."),
    delivered: str = typer.Argument(..., help="Delivered quantity."),
    threshold: str | None = typer.Option(
        None,
        "--threshold",
        help="Shortfall in percent that triggers a notification (default from config).",
    ),
) -> None:
    debug_value = bool(_ctx_value(ctx, "debug"))

    def _run() -> None:
        ordered_value = _parse_decimal_option(ordered, option="ORDERED")
        delivered_value = _parse_decimal_option(delivered, option="DELIVERED")
        if ordered_value is None or delivered_value is None:
            raise ValueError("ORDERED and DELIVERED must be numbers")
        threshold_value = _parse_decimal_option(threshold, option="--threshold")
        if threshold_value is None:
            threshold_value = _load_config(ctx).short_delivery.threshold_percent
        short = has_short_delivery(ordered_value, delivered_value, threshold_value)
        shortfall = "-"
        if ordered_value > 0:
            percent = (ordered_value - delivered_value) / ordered_value * 100
            shortfall = f"{format_amount(percent)} %"
        console.print(
            build_kv_table(
                [
                    ("Ordered", format_amount(ordered_value)),
                    ("Delivered", format_amount(delivered_value)),
                    ("Shortfall", shortfall),
                    ("Threshold", f"{format_amount(threshold_value)} %"),
                    ("Short delivery", "yes" if short else "no"),
                ]
            )
        )

    _run_cli(_run, debug=debug_value)

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

from pathlib import Path

import typer

from ...core.models import Adjustment
from ...core.source import load_json_source
from ...render.composer import DocumentComposer
from ...render.doc_types import DOC_TYPE_DELIVERY_NOTE
from ...render.money import format_amount
from ..core.common import (
    _ctx_value,
    _load_config,
    _parse_date_option,
    _parse_decimal_option,
    _run_cli,
)
from ..ui import print_completion_panel

_RENDER_HELP = (
    "Render one document for an order.\n\n"
    "Examples:\n"
    "  belegwerk render A-1001 --data orders.json\n"
    "  belegwerk render A-1001 --data orders.json --type rechnung -o rechnung.pdf\n"
    "  belegwerk render A-1001 --data orders.json --type gutschrift "
    "--reference R-2024-17 --amount 12,50\n"
)


def register(app: typer.Typer) -> None:
    app.command(help=_RENDER_HELP)(render)


def render(
    ctx: typer.Context,
    order_id: str = typer.Argument(..., help="Order id as stored in the data file."),
    data: Path = typer.Option(
        ...,
        "--data",
        "-d",
        help="JSON file with orders, customers and line_items.",
        rich_help_panel="Inputs",
    ),
    doc_type: str = typer.Option(
        DOC_TYPE_DELIVERY_NOTE,
        "--type",
        "-t",
        help="lieferschein, rechnung, gutschrift or preisdifferenz.",
        rich_help_panel="Inputs",
    ),
    document_date: str | None = typer.Option(
        None,
        "--date",
        help="Document date (YYYY-MM-DD, defaults to today).",
        rich_help_panel="Inputs",
    ),
    reference: str | None = typer.Option(
        None,
        "--reference",
        help="Referenced document number for gutschrift/preisdifferenz.",
        rich_help_panel="Adjustments",
    ),
    amount: str | None = typer.Option(
        None,
        "--amount",
        help="Net amount for gutschrift/preisdifferenz.",
        rich_help_panel="Adjustments",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file path (defaults to the generated document name).",
        rich_help_panel="Outputs",
    ),
) -> None:
    quiet_value = bool(_ctx_value(ctx, "quiet"))
    debug_value = bool(_ctx_value(ctx, "debug"))

    def _run() -> None:
        config = _load_config(ctx)
        composer = DocumentComposer.from_config(load_json_source(data), config)
        adjustment = None
        if reference is not None or amount is not None:
            adjustment = Adjustment(
                reference_number=reference,
                amount=_parse_decimal_option(amount, option="--amount"),
            )
        document = composer.render(
            order_id,
            doc_type,
            document_date=_parse_date_option(document_date),
            adjustment=adjustment,
        )
        output_path = output or Path.cwd() / document.filename
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(document.data)
        print_completion_panel(
            "Document ready",
            [
                f"Saved to {output_path}",
                f"Pages: {document.page_count}",
                f"Total: {format_amount(document.totals.gross)} {config.table.currency}",
            ],
            quiet=quiet_value,
        )

    _run_cli(_run, debug=debug_value)

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
from rich import box
from rich.table import Table

from ...core.source import load_json_source
from ...render.composer import BatchResult, DocumentComposer
from ...render.doc_types import DOC_TYPE_DELIVERY_NOTE
from ..core.common import _ctx_value, _load_config, _parse_date_option, _run_cli
from ..ui import console

_BATCH_HELP = (
    "Render one document per order; failures do not stop the batch.\n\n"
    "Examples:\n"
    "  belegwerk batch A-1001 A-1002 --data orders.json --output-dir out/\n"
    "  belegwerk batch A-1001 A-1002 --data orders.json --type rechnung\n"
)


def register(app: typer.Typer) -> None:
    app.command(help=_BATCH_HELP)(batch)


def batch(
    ctx: typer.Context,
    order_ids: list[str] = typer.Argument(..., help="Order ids to render."),
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
        help="lieferschein or rechnung.",
        rich_help_panel="Inputs",
    ),
    document_date: str | None = typer.Option(
        None,
        "--date",
        help="Document date (YYYY-MM-DD, defaults to today).",
        rich_help_panel="Inputs",
    ),
    output_dir: Path | None = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Directory for the generated PDFs (defaults to the current directory).",
        rich_help_panel="Outputs",
    ),
) -> None:
    quiet_value = bool(_ctx_value(ctx, "quiet"))
    debug_value = bool(_ctx_value(ctx, "debug"))

    def _run() -> int:
        config = _load_config(ctx)
        composer = DocumentComposer.from_config(load_json_source(data), config)
        results = composer.render_batch(
            order_ids,
            doc_type,
            document_date=_parse_date_option(document_date),
        )
        target_dir = output_dir or Path.cwd()
        target_dir.mkdir(parents=True, exist_ok=True)
        written: dict[str, Path] = {}
        for result in results:
            if result.document is None:
                continue
            path = target_dir / result.document.filename
            path.write_bytes(result.document.data)
            written[result.order_id] = path
        failed = [result for result in results if not result.ok]
        if not quiet_value or failed:
            console.print(_results_table(results, written))
        return 1 if failed else 0

    _run_cli(_run, debug=debug_value)


def _results_table(results: list[BatchResult], written: dict[str, Path]) -> Table:
    table = Table(box=box.SIMPLE, show_header=True, header_style="accent")
    table.add_column("Order", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Pages", justify="right", no_wrap=True)
    table.add_column("File / error")
    for result in results:
        if result.document is not None:
            table.add_row(
                result.order_id,
                "[success]ok[/success]",
                str(result.document.page_count),
                str(written[result.order_id]),
            )
        else:
            table.add_row(result.order_id, "[error]failed[/error]", "", result.error or "")
    return table

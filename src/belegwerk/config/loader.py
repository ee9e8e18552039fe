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

import tomllib
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path

from ..render.spec import (
    COLUMN_KEYS,
    ColumnSpec,
    DocumentSpec,
    LetterheadSpec,
    PageSpec,
    ShortDeliverySpec,
    TableSpec,
    TaxSpec,
)
from .installer import resolve_config_path

_ALIGNMENTS = frozenset({"L", "C", "R"})


@dataclass(frozen=True)
class AppConfig:
    page: PageSpec = field(default_factory=PageSpec)
    letterhead: LetterheadSpec = field(default_factory=LetterheadSpec)
    table: TableSpec = field(default_factory=TableSpec)
    tax: TaxSpec = field(default_factory=TaxSpec)
    short_delivery: ShortDeliverySpec = field(default_factory=ShortDeliverySpec)
    source_path: Path | None = None

    def document_spec(self) -> DocumentSpec:
        return DocumentSpec(page=self.page, letterhead=self.letterhead, table=self.table)


def load_app_config(path: str | Path | None = None) -> AppConfig:
    config_path = resolve_config_path(path)
    data = _load_toml(config_path)
    return AppConfig(
        page=_parse_page(_get_dict(data, "page")),
        letterhead=_parse_letterhead(_get_dict(data, "letterhead")),
        table=_parse_table(_get_dict(data, "table")),
        tax=_parse_tax(_get_dict(data, "tax")),
        short_delivery=_parse_short_delivery(_get_dict(data, "short_delivery")),
        source_path=config_path,
    )


def _parse_page(cfg: dict[str, object]) -> PageSpec:
    base = PageSpec()
    width = _parse_optional_float(cfg.get("width_mm"), field="page.width_mm")
    height = _parse_optional_float(cfg.get("height_mm"), field="page.height_mm")
    if (width is None) != (height is None):
        raise ValueError("page.width_mm and page.height_mm must be set together")
    return PageSpec(
        size=_parse_str(cfg.get("size"), field="page.size", default=base.size).upper(),
        width_mm=width,
        height_mm=height,
        margin_top_mm=_parse_float(
            cfg.get("margin_top_mm"), field="page.margin_top_mm", default=base.margin_top_mm
        ),
        margin_bottom_mm=_parse_float(
            cfg.get("margin_bottom_mm"),
            field="page.margin_bottom_mm",
            default=base.margin_bottom_mm,
        ),
        margin_left_mm=_parse_float(
            cfg.get("margin_left_mm"), field="page.margin_left_mm", default=base.margin_left_mm
        ),
        margin_right_mm=_parse_float(
            cfg.get("margin_right_mm"),
            field="page.margin_right_mm",
            default=base.margin_right_mm,
        ),
    )


def _parse_letterhead(cfg: dict[str, object]) -> LetterheadSpec:
    base = LetterheadSpec()
    ratio = _parse_float(
        cfg.get("split_left_ratio"),
        field="letterhead.split_left_ratio",
        default=base.split_left_ratio,
    )
    if not 0 < ratio < 1:
        raise ValueError("letterhead.split_left_ratio must be between 0 and 1")
    return LetterheadSpec(
        company_name=_parse_str(
            cfg.get("company_name"), field="letterhead.company_name", default=base.company_name
        ),
        company_lines=_parse_str_tuple(
            cfg.get("company_lines"),
            field="letterhead.company_lines",
            default=base.company_lines,
        ),
        footer=_parse_str(
            cfg.get("footer"), field="letterhead.footer", default=base.footer, allow_empty=True
        ),
        font_family=_parse_str(
            cfg.get("font_family"), field="letterhead.font_family", default=base.font_family
        ),
        title_size=_parse_float(
            cfg.get("title_size"), field="letterhead.title_size", default=base.title_size
        ),
        subtitle_size=_parse_float(
            cfg.get("subtitle_size"), field="letterhead.subtitle_size", default=base.subtitle_size
        ),
        body_size=_parse_float(
            cfg.get("body_size"), field="letterhead.body_size", default=base.body_size
        ),
        meta_size=_parse_float(
            cfg.get("meta_size"), field="letterhead.meta_size", default=base.meta_size
        ),
        line_height_mm=_parse_float(
            cfg.get("line_height_mm"),
            field="letterhead.line_height_mm",
            default=base.line_height_mm,
        ),
        height_mm=_parse_float(
            cfg.get("height_mm"), field="letterhead.height_mm", default=base.height_mm
        ),
        split_left_ratio=ratio,
        divider_thickness_mm=_parse_float(
            cfg.get("divider_thickness_mm"),
            field="letterhead.divider_thickness_mm",
            default=base.divider_thickness_mm,
        ),
    )


def _parse_table(cfg: dict[str, object]) -> TableSpec:
    base = TableSpec()
    labels = _parse_str_tuple(
        cfg.get("signature_labels"),
        field="table.signature_labels",
        default=base.signature_labels,
    )
    if len(labels) != 2:
        raise ValueError("table.signature_labels must contain exactly two labels")
    return TableSpec(
        font_family=_parse_str(
            cfg.get("font_family"), field="table.font_family", default=base.font_family
        ),
        font_size=_parse_float(
            cfg.get("font_size"), field="table.font_size", default=base.font_size
        ),
        header_font_size=_parse_float(
            cfg.get("header_font_size"),
            field="table.header_font_size",
            default=base.header_font_size,
        ),
        row_height_mm=_parse_float(
            cfg.get("row_height_mm"), field="table.row_height_mm", default=base.row_height_mm
        ),
        header_row_height_mm=_parse_float(
            cfg.get("header_row_height_mm"),
            field="table.header_row_height_mm",
            default=base.header_row_height_mm,
        ),
        cell_padding_mm=_parse_float(
            cfg.get("cell_padding_mm"),
            field="table.cell_padding_mm",
            default=base.cell_padding_mm,
            allow_zero=True,
        ),
        columns=_parse_columns(_get_dict(cfg, "columns"), default=base.columns),
        carry_over_label=_parse_str(
            cfg.get("carry_over_label"),
            field="table.carry_over_label",
            default=base.carry_over_label,
        ),
        net_label=_parse_str(cfg.get("net_label"), field="table.net_label", default=base.net_label),
        tax_label=_parse_str(cfg.get("tax_label"), field="table.tax_label", default=base.tax_label),
        gross_label=_parse_str(
            cfg.get("gross_label"), field="table.gross_label", default=base.gross_label
        ),
        currency=_parse_str(cfg.get("currency"), field="table.currency", default=base.currency),
        totals_gap_mm=_parse_float(
            cfg.get("totals_gap_mm"),
            field="table.totals_gap_mm",
            default=base.totals_gap_mm,
            allow_zero=True,
        ),
        totals_line_height_mm=_parse_float(
            cfg.get("totals_line_height_mm"),
            field="table.totals_line_height_mm",
            default=base.totals_line_height_mm,
        ),
        signature_gap_mm=_parse_float(
            cfg.get("signature_gap_mm"),
            field="table.signature_gap_mm",
            default=base.signature_gap_mm,
            allow_zero=True,
        ),
        signature_height_mm=_parse_float(
            cfg.get("signature_height_mm"),
            field="table.signature_height_mm",
            default=base.signature_height_mm,
        ),
        signature_label_height_mm=_parse_float(
            cfg.get("signature_label_height_mm"),
            field="table.signature_label_height_mm",
            default=base.signature_label_height_mm,
        ),
        signature_spacing_mm=_parse_float(
            cfg.get("signature_spacing_mm"),
            field="table.signature_spacing_mm",
            default=base.signature_spacing_mm,
            allow_zero=True,
        ),
        signature_labels=(labels[0], labels[1]),
        break_check_includes_batch_lines=_parse_bool(
            cfg.get("break_check_includes_batch_lines"),
            field="table.break_check_includes_batch_lines",
            default=base.break_check_includes_batch_lines,
        ),
    )


def _parse_columns(
    cfg: dict[str, object],
    *,
    default: tuple[ColumnSpec, ...],
) -> tuple[ColumnSpec, ...]:
    unknown = sorted(set(cfg) - set(COLUMN_KEYS))
    if unknown:
        raise ValueError(f"table.columns has unknown columns: {', '.join(unknown)}")
    columns: list[ColumnSpec] = []
    for base in default:
        column_cfg = _get_dict(cfg, base.key)
        prefix = f"table.columns.{base.key}"
        align = _parse_str(column_cfg.get("align"), field=f"{prefix}.align", default=base.align)
        align = align.upper()
        if align not in _ALIGNMENTS:
            raise ValueError(f"{prefix}.align must be 'L', 'C', or 'R'")
        columns.append(
            ColumnSpec(
                key=base.key,
                title=_parse_str(
                    column_cfg.get("title"),
                    field=f"{prefix}.title",
                    default=base.title,
                    allow_empty=True,
                ),
                weight=_parse_float(
                    column_cfg.get("weight"), field=f"{prefix}.weight", default=base.weight
                ),
                align=align,
            )
        )
    return tuple(columns)


def _parse_tax(cfg: dict[str, object]) -> TaxSpec:
    rate = _parse_decimal(
        cfg.get("default_rate"), field="tax.default_rate", default=TaxSpec().default_rate
    )
    if rate < 0:
        raise ValueError("tax.default_rate must be zero or positive")
    return TaxSpec(default_rate=rate)


def _parse_short_delivery(cfg: dict[str, object]) -> ShortDeliverySpec:
    base = ShortDeliverySpec()
    threshold = _parse_decimal(
        cfg.get("threshold_percent"),
        field="short_delivery.threshold_percent",
        default=base.threshold_percent,
    )
    if not 0 < threshold <= 100:
        raise ValueError("short_delivery.threshold_percent must be between 0 and 100")
    return ShortDeliverySpec(
        delay_seconds=_parse_float(
            cfg.get("delay_seconds"),
            field="short_delivery.delay_seconds",
            default=base.delay_seconds,
            allow_zero=True,
        ),
        threshold_percent=threshold,
        sender=_parse_str(cfg.get("sender"), field="short_delivery.sender", default=base.sender),
    )


def _load_toml(path: Path) -> dict[str, object]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _get_dict(data: dict[str, object], key: str) -> dict[str, object]:
    value = data.get(key)
    if isinstance(value, dict):
        return value
    return {}


def _parse_str(value: object, *, field: str, default: str, allow_empty: bool = False) -> str:
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a string")
    text = value.strip()
    if not text and not allow_empty:
        raise ValueError(f"{field} must be a non-empty string")
    return text


def _parse_str_tuple(
    value: object,
    *,
    field: str,
    default: tuple[str, ...],
) -> tuple[str, ...]:
    if value is None:
        return default
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"{field} must be a list of strings")
    return tuple(value)


def _parse_bool(value: object, *, field: str, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
        raise ValueError(f"{field} must be a boolean")
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
        raise ValueError(f"{field} must be a boolean")
    raise ValueError(f"{field} must be a boolean")


def _parse_float(
    value: object,
    *,
    field: str,
    default: float,
    allow_zero: bool = False,
) -> float:
    if value is None:
        return default
    parsed = _parse_number(value, field=field)
    if parsed < 0 or (parsed == 0 and not allow_zero):
        qualifier = "zero or positive" if allow_zero else "positive"
        raise ValueError(f"{field} must be {qualifier}")
    return parsed


def _parse_optional_float(value: object, *, field: str) -> float | None:
    if value is None:
        return None
    parsed = _parse_number(value, field=field)
    if parsed <= 0:
        raise ValueError(f"{field} must be positive")
    return parsed


def _parse_number(value: object, *, field: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{field} must be a number")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as exc:
            raise ValueError(f"{field} must be a number") from exc
    raise ValueError(f"{field} must be a number")


def _parse_decimal(value: object, *, field: str, default: Decimal) -> Decimal:
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError(f"{field} must be a number")
    if isinstance(value, (int, float)):
        parsed = Decimal(str(value))
    elif isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation as exc:
            raise ValueError(f"{field} must be a number") from exc
    else:
        raise ValueError(f"{field} must be a number")
    if not parsed.is_finite():
        raise ValueError(f"{field} must be a finite number")
    return parsed

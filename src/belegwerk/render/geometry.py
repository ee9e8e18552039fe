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

from collections.abc import Sequence
from dataclasses import dataclass

from .spec import COLUMN_KEYS, ColumnSpec, PageSpec

PAGE_SIZES_MM: dict[str, tuple[float, float]] = {
    "A4": (210.0, 297.0),
    "A5": (148.0, 210.0),
    "LETTER": (215.9, 279.4),
}

# Tolerance for coordinate comparisons
COORDINATE_EPSILON = 0.01


def page_size_mm(page: PageSpec) -> tuple[float, float]:
    if page.width_mm and page.height_mm:
        return (float(page.width_mm), float(page.height_mm))
    key = page.size.strip().upper()
    if key not in PAGE_SIZES_MM:
        raise ValueError(f"unknown paper size: {page.size}")
    return PAGE_SIZES_MM[key]


def page_format(page: PageSpec) -> str | tuple[float, float]:
    if page.width_mm and page.height_mm:
        return (float(page.width_mm), float(page.height_mm))
    return page.size


@dataclass(frozen=True)
class PageRegion:
    top: float
    left: float
    right: float
    bottom: float
    reserved_height: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def content_bottom(self) -> float:
        """Lowest y item rows may reach; below it sits the trailing block."""
        return self.bottom - self.reserved_height


def build_region(page: PageSpec, *, header_height: float, reserved_height: float) -> PageRegion:
    page_w, page_h = page_size_mm(page)
    region = PageRegion(
        top=page.margin_top_mm + header_height,
        left=page.margin_left_mm,
        right=page_w - page.margin_right_mm,
        bottom=page_h - page.margin_bottom_mm,
        reserved_height=reserved_height,
    )
    if region.width <= 0:
        raise ValueError("page too narrow for the item table")
    if region.content_bottom - region.top <= COORDINATE_EPSILON:
        raise ValueError("page too small for the item table")
    return region


@dataclass(frozen=True)
class Column:
    key: str
    title: str
    x: float
    width: float
    align: str

    @property
    def right(self) -> float:
        return self.x + self.width


@dataclass(frozen=True)
class ColumnLayout:
    columns: tuple[Column, ...]

    def __getitem__(self, key: str) -> Column:
        for column in self.columns:
            if column.key == key:
                return column
        raise KeyError(key)

    def __iter__(self):
        return iter(self.columns)

    @property
    def left(self) -> float:
        return self.columns[0].x

    @property
    def right(self) -> float:
        return self.columns[-1].right


def build_columns(region: PageRegion, specs: Sequence[ColumnSpec]) -> ColumnLayout:
    keys = tuple(spec.key for spec in specs)
    if keys != COLUMN_KEYS:
        raise ValueError(f"columns must be {', '.join(COLUMN_KEYS)} in this order")
    if any(spec.weight <= 0 for spec in specs):
        raise ValueError("column weights must be positive")
    base_width = sum(spec.weight for spec in specs)
    scale = region.width / base_width

    columns: list[Column] = []
    x = region.left
    for idx, spec in enumerate(specs):
        if idx == len(specs) - 1:
            # Last column absorbs float drift so the table ends exactly at the margin.
            width = region.right - x
        else:
            width = spec.weight * scale
        columns.append(Column(key=spec.key, title=spec.title, x=x, width=width, align=spec.align))
        x += width
    return ColumnLayout(columns=tuple(columns))

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

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

# Largest accepted exponent; the product of two such values still rounds to
# cents within the default 28-digit context.
MAX_DECIMAL_ADJUSTED = 9


def require_list(value: object, *, label: str) -> list[Any] | tuple[Any, ...]:
    """Validate that value is a list/tuple."""
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{label} must be a list")
    return value


def require_dict(value: object, *, label: str) -> dict[Any, Any]:
    """Validate that value is a dict."""
    if not isinstance(value, dict):
        raise ValueError(f"{label} must be a dict")
    return value


def optional_str(value: object, *, label: str) -> str | None:
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if not isinstance(value, str):
        raise ValueError(f"{label} must be a string")
    text = value.strip()
    return text or None


def optional_decimal(value: object, *, label: str) -> Decimal | None:
    """Parse a JSON number (or numeric string) into a Decimal without float noise."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"{label} must be a number")
    if isinstance(value, Decimal):
        return _bounded_decimal(value, label=label)
    if isinstance(value, (int, float)):
        return _bounded_decimal(Decimal(str(value)), label=label)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = Decimal(text)
        except InvalidOperation as exc:
            raise ValueError(f"{label} must be a number") from exc
        return _bounded_decimal(parsed, label=label)
    raise ValueError(f"{label} must be a number")


def _bounded_decimal(value: Decimal, *, label: str) -> Decimal:
    if not value.is_finite():
        raise ValueError(f"{label} must be a finite number")
    if value.adjusted() > MAX_DECIMAL_ADJUSTED:
        raise ValueError(f"{label} must be below 10^{MAX_DECIMAL_ADJUSTED + 1}")
    return value


def optional_date(value: object, *, label: str) -> date | None:
    if value is None:
        return None
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError as exc:
            raise ValueError(f"{label} must be an ISO date") from exc
    raise ValueError(f"{label} must be an ISO date")

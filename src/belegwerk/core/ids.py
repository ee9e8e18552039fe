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

from collections.abc import Mapping
from dataclasses import dataclass

from .errors import InvalidIdentifierError

OBJECT_ID_LEN = 12
_NESTED_KEYS = ("id", "_id")


@dataclass(frozen=True)
class Reference:
    """A reference to another record that carries its identifier nested."""

    id: object


def normalize_id(value: object, *, label: str = "identifier") -> str:
    """Collapse the supported identifier shapes to one canonical string.

    Accepted inputs are plain strings, integers, 12-byte binary object ids
    and references (``Reference`` or a mapping with ``id``/``_id``) whose
    nested identifier is itself one of these shapes.
    """
    if isinstance(value, bool):
        raise InvalidIdentifierError(f"{label} must not be a boolean")
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidIdentifierError(f"{label} cannot be empty")
        return text
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
        if len(raw) != OBJECT_ID_LEN:
            raise InvalidIdentifierError(
                f"{label} must be {OBJECT_ID_LEN} bytes, got {len(raw)}"
            )
        return raw.hex()
    if isinstance(value, Reference):
        return normalize_id(value.id, label=label)
    if isinstance(value, Mapping):
        for key in _NESTED_KEYS:
            if key in value:
                return normalize_id(value[key], label=label)
        raise InvalidIdentifierError(f"{label} reference has no id field")
    raise InvalidIdentifierError(f"unsupported {label} type: {type(value).__name__}")

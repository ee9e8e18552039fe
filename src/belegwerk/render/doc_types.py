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

from typing import Final, Literal

DocType = Literal["lieferschein", "rechnung", "gutschrift", "preisdifferenz"]

DOC_TYPE_DELIVERY_NOTE: Final = "lieferschein"
DOC_TYPE_INVOICE: Final = "rechnung"
DOC_TYPE_CREDIT_NOTE: Final = "gutschrift"
DOC_TYPE_PRICE_DIFFERENCE: Final = "preisdifferenz"

DOC_TYPE_LABELS: Final[dict[str, str]] = {
    DOC_TYPE_DELIVERY_NOTE: "Lieferschein",
    DOC_TYPE_INVOICE: "Rechnung",
    DOC_TYPE_CREDIT_NOTE: "Gutschrift",
    DOC_TYPE_PRICE_DIFFERENCE: "Preisdifferenz",
}

DOC_TYPES: Final[frozenset[str]] = frozenset(DOC_TYPE_LABELS)

# Documents built from an adjustment amount rather than the order's items.
ADJUSTMENT_DOC_TYPES: Final[frozenset[str]] = frozenset(
    {DOC_TYPE_CREDIT_NOTE, DOC_TYPE_PRICE_DIFFERENCE}
)


def normalize_doc_type(doc_type: str) -> str:
    normalized = doc_type.strip().lower()
    if normalized not in DOC_TYPES:
        raise ValueError(
            f"unknown document type: {doc_type} (expected one of {', '.join(sorted(DOC_TYPES))})"
        )
    return normalized


def doc_type_label(doc_type: str) -> str:
    return DOC_TYPE_LABELS[normalize_doc_type(doc_type)]

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

from dataclasses import dataclass
from decimal import Decimal
from email.message import EmailMessage
from pathlib import Path
from typing import Protocol

from ..render.money import format_amount

PDF_CONTENT_TYPE = "application/pdf"
DEFAULT_SENDER = "versand@example.com"


@dataclass(frozen=True)
class ShortDeliveryPosition:
    position_id: str
    article_name: str
    ordered_quantity: Decimal
    delivered_quantity: Decimal
    unit: str = ""

    @property
    def difference(self) -> Decimal:
        return self.ordered_quantity - self.delivered_quantity


@dataclass(frozen=True)
class ShortDeliveryMail:
    recipient: str
    customer_name: str
    order_number: str
    positions: tuple[ShortDeliveryPosition, ...]
    attachment_name: str
    attachment: bytes
    attachment_type: str = PDF_CONTENT_TYPE

    @property
    def subject(self) -> str:
        return f"Fehlmenge bei Auftrag {self.order_number} festgestellt"

    def body_text(self) -> str:
        lines = [
            f"Hallo {self.customer_name},",
            (
                f"bei der Kommissionierung Ihres Auftrags {self.order_number} "
                "wurde eine Gewichtsabweichung festgestellt."
            ),
            "",
        ]
        for position in self.positions:
            unit = f" {position.unit}" if position.unit else ""
            ordered = format_amount(position.ordered_quantity)
            delivered = format_amount(position.delivered_quantity)
            lines.append(
                f"- {position.article_name}: bestellt {ordered}{unit}, geliefert {delivered}{unit}"
            )
        lines.extend(
            [
                "",
                "Die Abrechnung erfolgt nach tatsächlich gelieferter Menge.",
                "Den Lieferschein mit allen Details finden Sie im Anhang dieser E-Mail als PDF.",
            ]
        )
        return "\n".join(lines)


class Mailer(Protocol):
    def send(self, mail: ShortDeliveryMail) -> None: ...


def build_message(mail: ShortDeliveryMail, *, sender: str = DEFAULT_SENDER) -> EmailMessage:
    message = EmailMessage()
    message["From"] = sender
    message["To"] = mail.recipient
    message["Subject"] = mail.subject
    message.set_content(mail.body_text())
    maintype, _, subtype = mail.attachment_type.partition("/")
    message.add_attachment(
        mail.attachment,
        maintype=maintype,
        subtype=subtype,
        filename=mail.attachment_name,
    )
    return message


class OutboxMailer:
    """Write each mail as an ``.eml`` file into a directory instead of sending it."""

    def __init__(self, directory: str | Path, *, sender: str = DEFAULT_SENDER) -> None:
        self._directory = Path(directory)
        self._sender = sender
        self.written: list[Path] = []

    def send(self, mail: ShortDeliveryMail) -> None:
        message = build_message(mail, sender=self._sender)
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self._directory / f"{Path(mail.attachment_name).stem}.eml"
        path.write_bytes(message.as_bytes())
        self.written.append(path)

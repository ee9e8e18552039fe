#!/usr/bin/env python3
from __future__ import annotations

import typer

from .commands import (
    batch as batch_command,
    notify as notify_command,
    render as render_command,
    shortage as shortage_command,
)


def register(app: typer.Typer) -> None:
    render_command.register(app)
    batch_command.register(app)
    shortage_command.register(app)
    notify_command.register(app)

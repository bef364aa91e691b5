"""Outlook Delegate Assistant CLI.

Acts on ANOTHER user's mailbox and calendar as their delegate: the assistant
authenticates as itself, and every Graph request is addressed to
``/users/{owner}``.

Usage:
    outlook-delegate mail inbox 5
    outlook-delegate mail read <id-suffix>
    outlook-delegate calendar today
    outlook-delegate token refresh
"""
from __future__ import annotations

from typing import List, Optional

# Command modules register themselves on the app's groups at import time
from . import calendar_commands, mail_commands, token_commands  # noqa: F401
from .app import app


def main(argv: Optional[List[str]] = None) -> int:
    return app.run(argv)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

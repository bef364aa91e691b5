"""CLI application object, command groups and shared helpers."""

from __future__ import annotations

import argparse
import os

from delegate_core.applog import AppLogger
from delegate_core.cli_framework import CLIApp
from delegate_core.config import DelegateConfig, load_config, resolve_config_dir
from delegate_core.constants import LOG_FILENAME
from delegate_core.outlook import OutlookClient

from . import __version__
from .meta import APP_ID, PURPOSE


def _session_log(args: argparse.Namespace) -> AppLogger:
    return AppLogger(os.path.join(resolve_config_dir(getattr(args, "config_dir", None)), LOG_FILENAME))


app = CLIApp(
    APP_ID,
    PURPOSE,
    version=__version__,
    epilog="IDs shown in listings are the last 20 characters of the Graph id; pass them to read/update commands.",
    session_log=_session_log,
)

mail_group = app.group("mail", help="Owner mailbox: list, read, manage and send mail")
calendar_group = app.group("calendar", help="Owner calendar: view, create and manage events")
token_group = app.group("token", help="Stored credential management")


def get_config(args: argparse.Namespace) -> DelegateConfig:
    return load_config(getattr(args, "config_dir", None))


def get_client(args: argparse.Namespace) -> OutlookClient:
    """Build the owner-scoped client; fails before any request without owner or token."""
    return OutlookClient.from_config(get_config(args))

"""Shared constants for the delegate mailbox/calendar assistant."""

from __future__ import annotations

import os
from typing import Tuple

# -----------------------------------------------------------------------------
# Config and credential paths
# -----------------------------------------------------------------------------

CONFIG_DIR_ENV = "OUTLOOK_DELEGATE_CONFIG_DIR"
DEFAULT_CONFIG_DIR = os.path.expanduser("~/.outlook-mcp")
CONFIG_FILENAME = "config.json"
CREDENTIALS_FILENAME = "credentials.json"
LOG_FILENAME = os.path.join("logs", "delegate.jsonl")


# -----------------------------------------------------------------------------
# Microsoft Graph API
# -----------------------------------------------------------------------------

GRAPH_API_URL = "https://graph.microsoft.com/v1.0"
LOGIN_AUTHORITY_URL = "https://login.microsoftonline.com"
DEFAULT_TENANT = "common"

# msal adds offline_access/openid/profile itself and rejects them if passed.
DELEGATE_SCOPES = [
    "User.Read",
    "Mail.ReadWrite.Shared",
    "Mail.Send.Shared",
    "Calendars.ReadWrite.Shared",
]


# -----------------------------------------------------------------------------
# HTTP and timeouts
# -----------------------------------------------------------------------------

# (connect_seconds, read_seconds)
DEFAULT_REQUEST_TIMEOUT: Tuple[int, int] = (10, 30)


# -----------------------------------------------------------------------------
# Partial ID resolution
# -----------------------------------------------------------------------------

DISPLAY_SUFFIX_LENGTH = 20
MESSAGE_RESOLVE_PAGE_SIZE = 100
EVENT_RESOLVE_PAGE_SIZE = 50


# -----------------------------------------------------------------------------
# CLI defaults
# -----------------------------------------------------------------------------

DEFAULT_TIMEZONE = "UTC"
DEFAULT_INBOX_COUNT = 10
DEFAULT_UNREAD_COUNT = 20
DEFAULT_SEARCH_COUNT = 20
DEFAULT_EVENT_COUNT = 10
MESSAGE_BODY_PREVIEW_CHARS = 2000
EVENT_BODY_PREVIEW_CHARS = 500

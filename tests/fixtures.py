"""Shared test fixtures and utilities for the delegate assistant tests."""

from __future__ import annotations

import io
import json
import os
import tempfile
from contextlib import contextmanager, redirect_stderr, redirect_stdout
from typing import Any, Dict, Iterator, Optional, Tuple
from unittest.mock import MagicMock

from delegate_core.config import DelegateContext
from delegate_core.credentials import Credential

OWNER = "owner@contoso.com"
DELEGATE = "assistant@contoso.com"
ACCESS_TOKEN = "eyJ-access-token"
REFRESH_TOKEN = "rt-original"


# -----------------------------------------------------------------------------
# HTTP fakes
# -----------------------------------------------------------------------------


def make_mock_response(json_data=None, status_code=200, text=None):
    """Create a mock HTTP response object."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text if text is not None else (json.dumps(json_data) if json_data is not None else "")
    if json_data is None:
        resp.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        resp.json.return_value = json_data
    return resp


def graph_error(code: str, message: str, status_code: int = 403):
    return make_mock_response({"error": {"code": code, "message": message}}, status_code=status_code)


def page(*ids: str, **extra: Any) -> Dict[str, Any]:
    """A Graph collection page holding items with the given ids."""
    return {"value": [dict({"id": i}, **extra) for i in ids]}


# -----------------------------------------------------------------------------
# Context / credential builders
# -----------------------------------------------------------------------------


def make_context(owner: str = OWNER, timezone: str = "UTC") -> DelegateContext:
    return DelegateContext(delegate_identity=DELEGATE, owner_identity=owner, timezone=timezone)


def make_credential(token: str = ACCESS_TOKEN) -> Credential:
    return Credential(access_token=token, refresh_token=REFRESH_TOKEN, expires_in=3600)


@contextmanager
def config_dir(
    config: Optional[Dict[str, Any]] = None,
    credentials: Optional[Dict[str, Any]] = None,
) -> Iterator[str]:
    """Temp config dir with config.json and (optionally) credentials.json."""
    cfg = {
        "client_id": "11111111-2222-3333-4444-555555555555",
        "client_secret": "s3cret",
        "owner_email": OWNER,
        "delegate_email": DELEGATE,
        "timezone": "UTC",
    }
    if config is not None:
        cfg.update(config)
    with tempfile.TemporaryDirectory() as td:
        with open(os.path.join(td, "config.json"), "w", encoding="utf-8") as fh:
            json.dump({k: v for k, v in cfg.items() if v is not None}, fh)
        if credentials is not None:
            with open(os.path.join(td, "credentials.json"), "w", encoding="utf-8") as fh:
                json.dump(credentials, fh)
        yield td


def default_credentials() -> Dict[str, Any]:
    return {"access_token": ACCESS_TOKEN, "refresh_token": REFRESH_TOKEN, "expires_in": 3600}


@contextmanager
def capture_output() -> Iterator[Tuple[io.StringIO, io.StringIO]]:
    out, err = io.StringIO(), io.StringIO()
    with redirect_stdout(out), redirect_stderr(err):
        yield out, err

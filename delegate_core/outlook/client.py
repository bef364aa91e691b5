"""Base Graph client: owner-scoped URLs, auth headers, timeouts and errors.

Every request this package sends goes through ``OutlookClientBase._request``,
which only accepts a path relative to the owner's namespace
(``/users/{owner}``). There is no way to address ``/me`` through it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from ..cli_errors import ConfigError, NetworkError, RemoteError
from ..config import DelegateContext
from ..constants import DEFAULT_REQUEST_TIMEOUT, DELEGATE_SCOPES, GRAPH_API_URL
from ..credentials import Credential

LOG = logging.getLogger(__name__)

GRAPH = GRAPH_API_URL
SCOPES = DELEGATE_SCOPES
DEFAULT_TIMEOUT = DEFAULT_REQUEST_TIMEOUT


class _TimeoutRequestsWrapper:
    """Proxy for the requests module that applies a default timeout."""

    _METHODS = ("get", "post", "patch", "put", "delete", "head")

    def __init__(self, mod, timeout):
        self._mod = mod
        self._timeout = timeout

    def __getattr__(self, name):
        attr = getattr(self._mod, name)
        if name not in self._METHODS:
            return attr

        def call(*args, **kwargs):
            kwargs.setdefault("timeout", self._timeout)
            return attr(*args, **kwargs)

        return call


def _requests():
    return _TimeoutRequestsWrapper(requests, DEFAULT_TIMEOUT)


def _remote_error(resp) -> RemoteError:
    """Build a RemoteError from a Graph error response, keeping code/message verbatim."""
    status = getattr(resp, "status_code", None)
    try:
        payload = resp.json()
    except ValueError:
        payload = None
    err = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(err, dict):
        return RemoteError(str(err.get("message") or f"HTTP {status}"), remote_code=err.get("code"), status=status)
    if isinstance(err, str):
        # OAuth-style error bodies: {"error": "...", "error_description": "..."}
        return RemoteError(str(payload.get("error_description") or err), remote_code=err, status=status)
    text = (getattr(resp, "text", "") or "").strip()
    return RemoteError(text[:200] or f"HTTP {status}", remote_code=f"HTTP{status}", status=status)


class OutlookClientBase:
    """Owner-scoped Microsoft Graph client.

    Args:
        context: DelegateContext naming the owner whose data is accessed.
        credential: Current bearer credential (see CredentialStore.load).
    """

    GRAPH = GRAPH

    def __init__(self, context: DelegateContext, credential: Credential) -> None:
        if not context.owner_identity:
            raise ConfigError("DelegateContext has no owner identity")
        self.context = context
        self.credential = credential
        self._owner_root = f"{GRAPH}/users/{quote(context.owner_identity, safe='@')}"

    # -------------------- Request building --------------------
    def owner_url(self, path: str = "") -> str:
        """Absolute URL for ``path`` under the owner's namespace."""
        rel = (path or "").strip()
        if "://" in rel or rel.startswith("/"):
            raise ValueError(f"Expected a path relative to the owner namespace, got {path!r}")
        head = rel.split("/", 1)[0].split("?", 1)[0].lower()
        if head in ("me", "users"):
            raise ValueError(f"Path must not re-scope the request: {path!r}")
        return f"{self._owner_root}/{rel}" if rel else self._owner_root

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.credential.access_token}",
            "Content-Type": "application/json",
        }

    def _headers_search(self) -> Dict[str, str]:
        h = self._headers()
        h["ConsistencyLevel"] = "eventual"
        return h

    def _headers_tz(self) -> Dict[str, str]:
        h = self._headers()
        h["Prefer"] = f'outlook.timezone="{self.context.timezone}"'
        return h

    # -------------------- Transport --------------------
    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """Send one request and return the decoded JSON body ({} when empty).

        Raises NetworkError on connection failures or timeouts and RemoteError
        on any non-2xx response. Nothing is retried.
        """
        url = self.owner_url(path)
        method = method.lower()
        LOG.debug("%s %s params=%s", method.upper(), url, params)
        kwargs: Dict[str, Any] = {"headers": headers or self._headers()}
        if params:
            kwargs["params"] = params
        if json is not None:
            kwargs["json"] = json
        try:
            resp = getattr(_requests(), method)(url, **kwargs)
        except requests.Timeout as exc:
            raise NetworkError(f"Request timed out: {method.upper()} {path}") from exc
        except requests.RequestException as exc:
            raise NetworkError(f"Request failed: {method.upper()} {path}: {exc}") from exc

        status = resp.status_code
        LOG.debug("-> %s", status)
        if status >= 400:
            raise _remote_error(resp)
        if status in (202, 204) or not (resp.text or "").strip():
            return {}
        try:
            data = resp.json()
        except ValueError as exc:
            raise RemoteError(f"Invalid JSON from Graph: {exc}", remote_code="InvalidResponse", status=status) from exc
        return data if isinstance(data, dict) else {"value": data}

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        return self._request("GET", path, params=params, headers=headers)

    def _list(self, path: str, params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None) -> List[Dict[str, Any]]:
        """Return the ``value`` array of a single collection page."""
        return list(self._get(path, params=params, headers=headers).get("value") or [])


def path_segment(value: str) -> str:
    """Percent-encode an id or name used as a single URL path segment."""
    return quote(str(value), safe="=")

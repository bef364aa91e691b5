"""Credential store: the on-disk access/refresh token pair.

The file is read at process start and only ever rewritten wholesale by
``refresh``. A failed refresh never touches it, so the previous (possibly
still valid) access token stays usable. Two processes refreshing at the
same time can race; only one writer per config dir is supported.
"""

from __future__ import annotations

import base64
import json
import logging
import os
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import requests

from .cli_errors import AuthError, ConfigError, NetworkError, NotFoundError
from .constants import DEFAULT_REQUEST_TIMEOUT, DEFAULT_TENANT, LOGIN_AUTHORITY_URL

LOG = logging.getLogger(__name__)

_NO_ACCESS_TOKEN = "No access token. Run setup first."
_NO_REFRESH_TOKEN = "No refresh token. Run setup first."


def _msal():
    """Lazy import msal so `--help` works without it installed."""
    import msal  # type: ignore

    return msal


def _present(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    if not text or text == "null":
        return None
    return text


@dataclass(frozen=True)
class Credential:
    """Bearer credential used for every Graph call."""

    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    token_type: str = "Bearer"
    scope: Optional[str] = None
    obtained_at: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Credential":
        access = _present(data.get("access_token"))
        if not access:
            raise NotFoundError(_NO_ACCESS_TOKEN)
        expires = data.get("expires_in")
        obtained = data.get("obtained_at")
        return cls(
            access_token=access,
            refresh_token=_present(data.get("refresh_token")),
            expires_in=int(expires) if expires is not None else None,
            token_type=str(data.get("token_type") or "Bearer"),
            scope=_present(data.get("scope")),
            obtained_at=float(obtained) if obtained is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token_type": self.token_type,
            "scope": self.scope,
            "expires_in": self.expires_in,
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "obtained_at": self.obtained_at,
        }


def decode_token_claims(access_token: str) -> Dict[str, Any]:
    """Return the JWT payload claims of an access token.

    Tokens for personal Microsoft accounts are opaque; those yield ``{}``.
    No signature validation happens here: the claims are display-only.
    """
    parts = access_token.split(".")
    if len(parts) != 3:
        return {}
    payload = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(payload.encode("ascii")))
    except ValueError:
        return {}
    return claims if isinstance(claims, dict) else {}


class CredentialStore:
    """Load, save and refresh the credential persisted at ``path``."""

    def __init__(self, path: str, timeout=DEFAULT_REQUEST_TIMEOUT) -> None:
        self.path = Path(path)
        self.timeout = timeout

    def exists(self) -> bool:
        return self.path.exists()

    def read_raw(self) -> Dict[str, Any]:
        """Return the stored JSON object, or ``{}`` when the file is absent."""
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (ValueError, OSError) as exc:
            raise NotFoundError(
                f"Unable to read credentials file {self.path}: {exc}",
                hint="Re-run setup to recreate it.",
            ) from exc
        return data if isinstance(data, dict) else {}

    def load(self) -> Credential:
        """Return the stored credential; NotFoundError when no access token."""
        return Credential.from_dict(self.read_raw())

    def load_refresh_token(self) -> str:
        token = _present(self.read_raw().get("refresh_token"))
        if not token:
            raise NotFoundError(_NO_REFRESH_TOKEN)
        return token

    def save(self, credential: Credential) -> None:
        """Replace the stored credential in one rename."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".credentials-", suffix=".tmp", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(credential.to_dict(), fh, indent=2)
            os.chmod(tmp, 0o600)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def refresh(
        self,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        scopes: Iterable[str],
        *,
        tenant: str = DEFAULT_TENANT,
    ) -> Credential:
        """Exchange ``refresh_token`` for a new credential and persist it.

        The identity provider's error description is surfaced verbatim as an
        AuthError; the stored file is left unchanged on any failure.
        """
        if not _present(refresh_token):
            raise NotFoundError(_NO_REFRESH_TOKEN)
        scope_list = list(scopes)
        authority = f"{LOGIN_AUTHORITY_URL}/{tenant}"
        LOG.debug("refresh-token grant against %s scopes=%s", authority, " ".join(scope_list))
        msal = _msal()
        try:
            app = msal.ConfidentialClientApplication(
                client_id,
                client_credential=client_secret,
                authority=authority,
                timeout=self.timeout,
            )
            result = app.acquire_token_by_refresh_token(refresh_token, scopes=scope_list)
        except requests.RequestException as exc:
            raise NetworkError(f"Token endpoint unreachable: {exc}") from exc
        except ValueError as exc:
            # msal rejects reserved scopes and malformed authorities this way
            raise ConfigError(str(exc)) from exc

        if not isinstance(result, dict) or not _present(result.get("access_token")):
            result = result if isinstance(result, dict) else {}
            message = result.get("error_description") or result.get("error") or "Token refresh failed"
            raise AuthError(str(message), hint="Re-run setup if the refresh token was revoked.")

        credential = Credential(
            access_token=str(result["access_token"]),
            # Keep the old refresh token only when the provider did not rotate it
            refresh_token=_present(result.get("refresh_token")) or refresh_token,
            expires_in=int(result["expires_in"]) if result.get("expires_in") is not None else None,
            token_type=str(result.get("token_type") or "Bearer"),
            scope=_present(result.get("scope")),
            obtained_at=time.time(),
        )
        self.save(credential)
        LOG.debug("credential refreshed, expires_in=%s", credential.expires_in)
        return credential

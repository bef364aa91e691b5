"""Configuration loading for the delegate assistant.

Resolution order for the config directory: CLI arg > environment > default
(``~/.outlook-mcp``). Values inside ``config.json`` can be overridden by
environment variables, which is handy for CI and containers.
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .cli_errors import ConfigError
from .constants import (
    CONFIG_DIR_ENV,
    CONFIG_FILENAME,
    CREDENTIALS_FILENAME,
    DEFAULT_CONFIG_DIR,
    DEFAULT_TENANT,
    DEFAULT_TIMEZONE,
    DELEGATE_SCOPES,
    EVENT_RESOLVE_PAGE_SIZE,
    LOG_FILENAME,
    MESSAGE_RESOLVE_PAGE_SIZE,
)

_ENV_OVERRIDES = {
    "client_id": "OUTLOOK_DELEGATE_CLIENT_ID",
    "client_secret": "OUTLOOK_DELEGATE_CLIENT_SECRET",
    "owner_email": "OUTLOOK_DELEGATE_OWNER",
    "delegate_email": "OUTLOOK_DELEGATE_DELEGATE",
    "timezone": "OUTLOOK_DELEGATE_TIMEZONE",
    "tenant": "OUTLOOK_DELEGATE_TENANT",
}


@dataclass(frozen=True)
class DelegateContext:
    """Who acts (delegate) on whose mailbox/calendar (owner), and in which timezone."""

    delegate_identity: Optional[str]
    owner_identity: str
    timezone: str = DEFAULT_TIMEZONE


@dataclass(frozen=True)
class ClientSettings:
    """App registration used for the refresh-token grant."""

    client_id: Optional[str]
    client_secret: Optional[str]
    tenant: str = DEFAULT_TENANT
    scopes: List[str] = field(default_factory=lambda: list(DELEGATE_SCOPES))


@dataclass(frozen=True)
class DelegateConfig:
    """Everything loaded once at process start."""

    config_dir: str
    owner_email: Optional[str]
    delegate_email: Optional[str]
    timezone: str
    client: ClientSettings
    message_page_size: int = MESSAGE_RESOLVE_PAGE_SIZE
    event_page_size: int = EVENT_RESOLVE_PAGE_SIZE

    @property
    def credentials_path(self) -> str:
        return os.path.join(self.config_dir, CREDENTIALS_FILENAME)

    @property
    def config_path(self) -> str:
        return os.path.join(self.config_dir, CONFIG_FILENAME)

    @property
    def log_path(self) -> str:
        return os.path.join(self.config_dir, LOG_FILENAME)

    def delegate_context(self) -> DelegateContext:
        """Return the owner-scoped context, failing when no owner is configured."""
        if not self.owner_email:
            raise ConfigError(
                f"No owner_email in config. Set the mailbox owner in {self.config_path}",
                hint=f"Or export {_ENV_OVERRIDES['owner_email']}=owner@example.com",
            )
        return DelegateContext(
            delegate_identity=self.delegate_email,
            owner_identity=self.owner_email,
            timezone=self.timezone,
        )

    def require_client(self) -> ClientSettings:
        if not self.client.client_id:
            raise ConfigError(
                f"No client_id in config. Set client_id in {self.config_path}",
                hint=f"Or export {_ENV_OVERRIDES['client_id']}",
            )
        if not self.client.client_secret:
            raise ConfigError(
                f"No client_secret in config. Set client_secret in {self.config_path}",
                hint=f"Or export {_ENV_OVERRIDES['client_secret']}",
            )
        return self.client


def resolve_config_dir(config_dir: Optional[str] = None) -> str:
    """Return the config directory folded over env/default."""
    resolved = config_dir or os.environ.get(CONFIG_DIR_ENV) or DEFAULT_CONFIG_DIR
    return os.path.expanduser(resolved)


def _clean(value: Any) -> Optional[str]:
    """Treat missing, blank and literal "null" values alike."""
    if value is None:
        return None
    text = str(value).strip()
    if not text or text == "null":
        return None
    return text


def _read_json(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8") or "{}")
    except ValueError as exc:
        raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a JSON object in {path}")
    return data


def _page_size(raw: Dict[str, Any], key: str, default: int) -> int:
    value = raw.get(key)
    if value is None:
        return default
    try:
        size = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from exc
    if size <= 0:
        raise ConfigError(f"{key} must be positive, got {size}")
    return size


def load_config(config_dir: Optional[str] = None) -> DelegateConfig:
    """Load ``config.json`` from the resolved directory and apply env overrides.

    A missing file is not an error here; commands that need a value fail
    with a ConfigError naming it.
    """
    root = resolve_config_dir(config_dir)
    raw = _read_json(Path(root) / CONFIG_FILENAME)
    values: Dict[str, Optional[str]] = {}
    for key, env_name in _ENV_OVERRIDES.items():
        values[key] = _clean(os.environ.get(env_name)) or _clean(raw.get(key))

    scopes = raw.get("scopes")
    if isinstance(scopes, str):
        scopes = [s for s in scopes.replace(",", " ").split() if s]
    if not scopes:
        scopes = list(DELEGATE_SCOPES)

    return DelegateConfig(
        config_dir=root,
        owner_email=values["owner_email"],
        delegate_email=values["delegate_email"],
        timezone=values["timezone"] or DEFAULT_TIMEZONE,
        client=ClientSettings(
            client_id=values["client_id"],
            client_secret=values["client_secret"],
            tenant=values["tenant"] or DEFAULT_TENANT,
            scopes=list(scopes),
        ),
        message_page_size=_page_size(raw, "message_page_size", MESSAGE_RESOLVE_PAGE_SIZE),
        event_page_size=_page_size(raw, "event_page_size", EVENT_RESOLVE_PAGE_SIZE),
    )

"""Owner-scoped Microsoft Graph client for delegate mail and calendar access.

- client.py: owner-rooted URLs, auth headers, timeouts, error mapping
- resolver.py: partial-id (suffix) resolution over one bounded page
- mail.py: messages, folders, send/reply on behalf
- calendar.py: events, calendar view, free/busy
- models.py: typed request payloads

Usage:
    from delegate_core.config import load_config
    from delegate_core.outlook import OutlookClient

    client = OutlookClient.from_config(load_config())
    ref = client.resolve_message("AAMkADk0ZjQ1...")
    client.set_read(ref.full_id)
"""

from __future__ import annotations

from typing import Optional

from ..config import DelegateConfig, DelegateContext
from ..credentials import Credential, CredentialStore
from .calendar import OutlookCalendarMixin
from .client import DEFAULT_TIMEOUT, GRAPH, SCOPES, OutlookClientBase, _requests
from .mail import OutlookMailMixin
from .models import EventTime, EventUpdate, NewEvent, OutgoingMail, ResourceRef, display_suffix
from .resolver import SuffixResolver, match_suffix


class OutlookClient(OutlookClientBase, OutlookMailMixin, OutlookCalendarMixin):
    """Delegate client for the owner's mailbox and calendar."""

    def __init__(
        self,
        context: DelegateContext,
        credential: Credential,
        *,
        message_page_size: Optional[int] = None,
        event_page_size: Optional[int] = None,
    ) -> None:
        super().__init__(context, credential)
        if message_page_size:
            self.message_page_size = int(message_page_size)
        if event_page_size:
            self.event_page_size = int(event_page_size)

    @classmethod
    def from_config(cls, config: DelegateConfig) -> "OutlookClient":
        context = config.delegate_context()
        credential = CredentialStore(config.credentials_path).load()
        return cls(
            context,
            credential,
            message_page_size=config.message_page_size,
            event_page_size=config.event_page_size,
        )


__all__ = [
    "OutlookClient",
    "OutlookClientBase",
    "OutlookCalendarMixin",
    "OutlookMailMixin",
    "SuffixResolver",
    "match_suffix",
    "ResourceRef",
    "display_suffix",
    "OutgoingMail",
    "NewEvent",
    "EventTime",
    "EventUpdate",
    "GRAPH",
    "SCOPES",
    "DEFAULT_TIMEOUT",
    "_requests",
]

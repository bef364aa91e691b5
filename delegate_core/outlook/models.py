"""Typed request objects for Graph writes.

Payloads are plain dicts handed to ``requests(json=...)``, so user text is
JSON-encoded rather than interpolated.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..constants import DISPLAY_SUFFIX_LENGTH


def display_suffix(full_id: Optional[str], length: int = DISPLAY_SUFFIX_LENGTH) -> str:
    """Return the short id fragment shown to humans (last ``length`` chars)."""
    return (full_id or "")[-length:]


@dataclass(frozen=True)
class ResourceRef:
    """Full Graph id plus the suffix shown to the user."""

    full_id: str

    @property
    def display_suffix(self) -> str:
        return display_suffix(self.full_id)


@dataclass
class OutgoingMail:
    """sendMail body sent on behalf of the owner."""

    to: List[str]
    subject: str
    body: str
    owner: str
    content_type: str = "Text"
    save_to_sent_items: bool = True

    def to_payload(self) -> Dict[str, Any]:
        return {
            "message": {
                "subject": self.subject,
                "body": {"contentType": self.content_type, "content": self.body},
                "toRecipients": [{"emailAddress": {"address": addr}} for addr in self.to],
                "from": {"emailAddress": {"address": self.owner}},
            },
            "saveToSentItems": self.save_to_sent_items,
        }


@dataclass
class EventTime:
    """Local wall-clock time plus the timezone it is expressed in."""

    date_time: str
    time_zone: str

    def to_payload(self) -> Dict[str, str]:
        return {"dateTime": self.date_time, "timeZone": self.time_zone}


@dataclass
class NewEvent:
    """Event created on the owner's calendar."""

    subject: str
    start: EventTime
    end: EventTime
    location: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "subject": self.subject,
            "start": self.start.to_payload(),
            "end": self.end.to_payload(),
        }
        if self.location:
            payload["location"] = {"displayName": self.location}
        return payload


EVENT_UPDATE_FIELDS = ("subject", "location", "start", "end")


@dataclass
class EventUpdate:
    """Single-field PATCH for an event."""

    field_name: str
    value: str
    time_zone: str

    def to_payload(self) -> Dict[str, Any]:
        if self.field_name == "subject":
            return {"subject": self.value}
        if self.field_name == "location":
            return {"location": {"displayName": self.value}}
        if self.field_name in ("start", "end"):
            return {self.field_name: EventTime(self.value, self.time_zone).to_payload()}
        raise ValueError(f"Unknown field: {self.field_name}")

"""Reshape Graph JSON into the compact records the CLI prints."""

from __future__ import annotations

import html
import re
from typing import Any, Dict, List, Optional

from delegate_core.constants import EVENT_BODY_PREVIEW_CHARS, MESSAGE_BODY_PREVIEW_CHARS
from delegate_core.outlook import display_suffix

_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"\s+")


def html_to_text(content: Optional[str], limit: Optional[int] = None) -> str:
    """Strip tags and collapse whitespace; entities are decoded."""
    text = _TAG_RE.sub("", content or "")
    text = html.unescape(text.replace("&nbsp;", " "))
    text = _WS_RE.sub(" ", text).strip()
    return text[:limit] if limit is not None else text


def body_text(body: Optional[Dict[str, Any]], limit: int) -> str:
    body = body or {}
    content = body.get("content") or ""
    if str(body.get("contentType") or "").lower() == "html":
        return html_to_text(content, limit)
    return content[:limit]


def _address(entry: Optional[Dict[str, Any]]) -> Optional[str]:
    return ((entry or {}).get("emailAddress") or {}).get("address")


def _when(slot: Optional[Dict[str, Any]], full: bool = False) -> str:
    value = (slot or {}).get("dateTime") or ""
    return value if full else value[:16]


# -------------------- Mail --------------------
def message_summary(n: int, msg: Dict[str, Any]) -> Dict[str, Any]:
    row: Dict[str, Any] = {
        "n": n,
        "subject": msg.get("subject"),
        "from": _address(msg.get("from")),
        "date": (msg.get("receivedDateTime") or "")[:16],
    }
    if "isRead" in msg:
        row["read"] = msg.get("isRead")
    row["id"] = display_suffix(msg.get("id"))
    return row


def message_summaries(messages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [message_summary(i, m) for i, m in enumerate(messages, start=1)]


def message_detail(msg: Dict[str, Any]) -> Dict[str, Any]:
    sender = (msg.get("from") or {}).get("emailAddress") or {}
    return {
        "subject": msg.get("subject"),
        "from": {"name": sender.get("name"), "address": sender.get("address")},
        "to": [a for a in (_address(r) for r in msg.get("toRecipients") or []) if a],
        "date": msg.get("receivedDateTime"),
        "body": body_text(msg.get("body"), MESSAGE_BODY_PREVIEW_CHARS),
    }


def message_status(status: str, msg: Dict[str, Any], **extra: Any) -> Dict[str, Any]:
    row: Dict[str, Any] = {"status": status}
    row.update(extra)
    row["subject"] = msg.get("subject")
    row["id"] = display_suffix(msg.get("id"))
    return row


def attachment_rows(attachments: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {
            "n": i,
            "name": a.get("name"),
            "size": a.get("size"),
            "type": a.get("contentType"),
            "id": display_suffix(a.get("id")),
        }
        for i, a in enumerate(attachments, start=1)
    ]


def folder_rows(folders: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {"name": f.get("displayName"), "total": f.get("totalItemCount"), "unread": f.get("unreadItemCount")}
        for f in folders
    ]


# -------------------- Calendar --------------------
def event_summary(n: int, ev: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "n": n,
        "subject": ev.get("subject"),
        "start": _when(ev.get("start")),
        "end": _when(ev.get("end")),
        "location": (ev.get("location") or {}).get("displayName") or "",
        "id": display_suffix(ev.get("id")),
    }


def event_summaries(events: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [event_summary(i, e) for i, e in enumerate(events, start=1)]


def event_detail(ev: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "subject": ev.get("subject"),
        "start": _when(ev.get("start"), full=True),
        "end": _when(ev.get("end"), full=True),
        "location": (ev.get("location") or {}).get("displayName"),
        "body": body_text(ev.get("body"), EVENT_BODY_PREVIEW_CHARS),
        "attendees": [a for a in (_address(x) for x in ev.get("attendees") or []) if a],
        "isOnline": ev.get("isOnlineMeeting"),
        "link": (ev.get("onlineMeeting") or {}).get("joinUrl"),
        "organizer": _address(ev.get("organizer")),
    }


def event_status(status: str, ev: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "status": status,
        "subject": ev.get("subject"),
        "start": _when(ev.get("start")),
        "end": _when(ev.get("end")),
        "id": display_suffix(ev.get("id")),
    }


def calendar_rows(calendars: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {
            "name": c.get("name"),
            "color": c.get("color"),
            "canEdit": c.get("canEdit"),
            "owner": (c.get("owner") or {}).get("address"),
            "id": display_suffix(c.get("id")),
        }
        for c in calendars
    ]

"""Calendar and event operations on the owner's calendar via Microsoft Graph."""

from __future__ import annotations

import datetime as _dt
from typing import Any, Dict, List, Optional, Tuple

from ..cli_errors import UsageError
from ..constants import EVENT_RESOLVE_PAGE_SIZE
from .client import OutlookClientBase, path_segment
from .models import EventUpdate, NewEvent, ResourceRef
from .resolver import SuffixResolver

INPUT_FORMAT = "%Y-%m-%dT%H:%M"
_UTC_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
_EVENT_SELECT = "id,subject,start,end,location,isAllDay"
_DATE_HINT = "Date format: YYYY-MM-DDTHH:MM (e.g., 2026-01-26T10:00)"


def parse_local(value: str) -> _dt.datetime:
    """Parse a user-supplied ``YYYY-MM-DDTHH:MM`` (seconds allowed)."""
    try:
        return _dt.datetime.fromisoformat((value or "").strip())
    except ValueError as exc:
        raise UsageError(f"Invalid date/time: {value!r}", hint=_DATE_HINT) from exc


def plus_one_hour(start: str) -> str:
    return (parse_local(start) + _dt.timedelta(hours=1)).strftime(INPUT_FORMAT)


def day_range_utc(now: Optional[_dt.datetime] = None) -> Tuple[str, str]:
    """Return [00:00:00Z, 23:59:59Z] of the current UTC day."""
    now = now or _dt.datetime.now(_dt.timezone.utc)
    day = now.strftime("%Y-%m-%d")
    return f"{day}T00:00:00Z", f"{day}T23:59:59Z"


def week_range_utc(now: Optional[_dt.datetime] = None) -> Tuple[str, str]:
    """Return today 00:00:00Z through the end of the day seven days out."""
    now = now or _dt.datetime.now(_dt.timezone.utc)
    end = now + _dt.timedelta(days=7)
    return f"{now.strftime('%Y-%m-%d')}T00:00:00Z", f"{end.strftime('%Y-%m-%d')}T23:59:59Z"


def to_utc_bound(value: str) -> str:
    """Turn ``YYYY-MM-DDTHH:MM`` into a UTC ``...:00Z`` calendarView bound."""
    text = (value or "").strip()
    if text.endswith("Z"):
        return text
    parsed = parse_local(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(_dt.timezone.utc)
    return parsed.strftime(_UTC_FORMAT)


class OutlookCalendarMixin:
    """Mixin providing owner-calendar operations.

    Requires OutlookClientBase methods: _request, _get, _list, _headers_tz
    """

    event_page_size: int = EVENT_RESOLVE_PAGE_SIZE

    def resolve_event(self: OutlookClientBase, suffix: str) -> ResourceRef:
        return SuffixResolver(self).resolve(
            "calendar/events",
            suffix,
            self.event_page_size,
            not_found="Event not found",
            hint="Use the ID shown in events/today/week results.",
        )

    # -------------------- Listing --------------------
    def list_events(self: OutlookClientBase, top: int = 10) -> List[Dict[str, Any]]:
        return self._list(
            "calendar/events",
            params={"$top": int(top), "$orderby": "start/dateTime desc", "$select": _EVENT_SELECT},
            headers=self._headers_tz(),
        )

    def calendar_view(
        self: OutlookClientBase,
        start_iso: str,
        end_iso: str,
        *,
        select: str = _EVENT_SELECT,
        ordered: bool = True,
        local_times: bool = True,
    ) -> List[Dict[str, Any]]:
        """Expanded occurrences between two UTC bounds (single page)."""
        params: Dict[str, Any] = {"startDateTime": start_iso, "endDateTime": end_iso, "$select": select}
        if ordered:
            params["$orderby"] = "start/dateTime"
        headers = self._headers_tz() if local_times else self._headers()
        return self._list("calendarView", params=params, headers=headers)

    def events_today(self, now: Optional[_dt.datetime] = None) -> List[Dict[str, Any]]:
        start, end = day_range_utc(now)
        return self.calendar_view(start, end)

    def events_week(self, now: Optional[_dt.datetime] = None) -> List[Dict[str, Any]]:
        start, end = week_range_utc(now)
        return self.calendar_view(start, end)

    def list_calendars(self: OutlookClientBase) -> List[Dict[str, Any]]:
        return self._list("calendars")

    def get_calendar(self: OutlookClientBase) -> Dict[str, Any]:
        """The owner's default calendar."""
        return self._get("calendar")

    def free_busy(self, start: str, end: str) -> Dict[str, Any]:
        """Report whether the owner has anything booked between two times."""
        events = self.calendar_view(
            to_utc_bound(start),
            to_utc_bound(end),
            select="subject,start,end",
            ordered=False,
            local_times=False,
        )
        owner = self.context.owner_identity
        if not events:
            return {"status": "free", "owner": owner, "start": start, "end": end}
        return {"status": "busy", "owner": owner, "events": [ev.get("subject") for ev in events]}

    # -------------------- Single event --------------------
    def get_event(self: OutlookClientBase, event_id: str) -> Dict[str, Any]:
        return self._get(f"calendar/events/{path_segment(event_id)}", headers=self._headers_tz())

    def create_event(self: OutlookClientBase, event: NewEvent) -> Dict[str, Any]:
        return self._request("POST", "calendar/events", json=event.to_payload())

    def update_event(self: OutlookClientBase, event_id: str, update: EventUpdate) -> Dict[str, Any]:
        return self._request("PATCH", f"calendar/events/{path_segment(event_id)}", json=update.to_payload())

    def delete_event(self: OutlookClientBase, event_id: str) -> None:
        """Delete an event; Graph answers 204."""
        self._request("DELETE", f"calendar/events/{path_segment(event_id)}")

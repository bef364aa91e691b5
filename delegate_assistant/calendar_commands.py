"""calendar commands: owner calendar views, event creation and updates."""

from __future__ import annotations

import datetime as _dt

from delegate_core.cli_errors import ExitCode, UsageError
from delegate_core.constants import DEFAULT_EVENT_COUNT
from delegate_core.outlook import EventTime, EventUpdate, NewEvent
from delegate_core.outlook.calendar import INPUT_FORMAT, parse_local, plus_one_hour
from delegate_core.outlook.models import EVENT_UPDATE_FIELDS

from . import render
from .app import calendar_group, get_client, get_config

DATE_HELP = "YYYY-MM-DDTHH:MM (e.g., 2026-01-26T10:00)"


@calendar_group.command("events", help="List upcoming events")
@calendar_group.argument("count", nargs="?", type=int, default=DEFAULT_EVENT_COUNT, help="How many (default 10)")
def cmd_events(args) -> int:
    if args.count is None or args.count <= 0:
        raise UsageError("count must be a positive integer")
    client = get_client(args)
    rows = render.event_summaries(client.list_events(args.count))
    args._output.print_records(rows, empty="No events")
    return ExitCode.SUCCESS


@calendar_group.command("today", help="Today's events (UTC day)")
def cmd_today(args) -> int:
    client = get_client(args)
    args._output.print_records(render.event_summaries(client.events_today()), empty="No events today")
    return ExitCode.SUCCESS


@calendar_group.command("week", help="This week's events (next 7 days, UTC)")
def cmd_week(args) -> int:
    client = get_client(args)
    args._output.print_records(render.event_summaries(client.events_week()), empty="No events this week")
    return ExitCode.SUCCESS


@calendar_group.command("read", help="Event details")
@calendar_group.argument("id", help="Event id suffix")
def cmd_read(args) -> int:
    client = get_client(args)
    ref = client.resolve_event(args.id)
    args._output.print_data(render.event_detail(client.get_event(ref.full_id)))
    return ExitCode.SUCCESS


@calendar_group.command("create", help="Create event on the owner's calendar")
@calendar_group.argument("subject", help="Event subject")
@calendar_group.argument("start", help=f"Start, {DATE_HELP}")
@calendar_group.argument("end", help=f"End, {DATE_HELP}")
@calendar_group.argument("location", nargs="?", default=None, help="Location display name")
def cmd_create(args) -> int:
    start, end = parse_local(args.start), parse_local(args.end)
    if (start.tzinfo is None) != (end.tzinfo is None):
        raise UsageError("start and end must both carry a UTC offset or neither", hint=f"Date format: {DATE_HELP}")
    if end <= start:
        raise UsageError("end must be after start", hint=f"Date format: {DATE_HELP}")
    client = get_client(args)
    tz = client.context.timezone
    event = NewEvent(
        subject=args.subject,
        start=EventTime(args.start, tz),
        end=EventTime(args.end, tz),
        location=args.location,
    )
    created = client.create_event(event)
    owner = client.context.owner_identity
    args._output.print_data(render.event_status(f"event created on {owner} calendar", created))
    return ExitCode.SUCCESS


@calendar_group.command("quick", help="Quick 1-hour event (starts now unless a time is given)")
@calendar_group.argument("subject", help="Event subject")
@calendar_group.argument("start", nargs="?", default=None, help=f"Start, {DATE_HELP}")
def cmd_quick(args) -> int:
    start = args.start or _dt.datetime.now().strftime(INPUT_FORMAT)
    end = plus_one_hour(start)
    client = get_client(args)
    tz = client.context.timezone
    created = client.create_event(NewEvent(subject=args.subject, start=EventTime(start, tz), end=EventTime(end, tz)))
    owner = client.context.owner_identity
    args._output.print_data(render.event_status(f"quick event created on {owner} calendar", created))
    return ExitCode.SUCCESS


@calendar_group.command("update", help="Update one field of an event")
@calendar_group.argument("id", help="Event id suffix")
@calendar_group.argument("field", help="One of: " + ", ".join(EVENT_UPDATE_FIELDS))
@calendar_group.argument("value", help="New value (dates as YYYY-MM-DDTHH:MM)")
def cmd_update(args) -> int:
    if args.field not in EVENT_UPDATE_FIELDS:
        raise UsageError(f"Unknown field: {args.field}", hint="Valid fields: " + ", ".join(EVENT_UPDATE_FIELDS))
    if args.field in ("start", "end"):
        parse_local(args.value)
    client = get_client(args)
    ref = client.resolve_event(args.id)
    updated = client.update_event(ref.full_id, EventUpdate(args.field, args.value, client.context.timezone))
    args._output.print_data(render.event_status("event updated", updated))
    return ExitCode.SUCCESS


@calendar_group.command("delete", help="Delete event")
@calendar_group.argument("id", help="Event id suffix")
def cmd_delete(args) -> int:
    client = get_client(args)
    ref = client.resolve_event(args.id)
    client.delete_event(ref.full_id)
    args._output.print_data({
        "status": f"event deleted from {client.context.owner_identity} calendar",
        "id": args.id,
    })
    return ExitCode.SUCCESS


@calendar_group.command("calendars", help="List all calendars")
def cmd_calendars(args) -> int:
    client = get_client(args)
    args._output.print_records(render.calendar_rows(client.list_calendars()), empty="No calendars")
    return ExitCode.SUCCESS


@calendar_group.command("free", help="Check availability between two times (UTC)")
@calendar_group.argument("start", help=f"Start, {DATE_HELP}")
@calendar_group.argument("end", help=f"End, {DATE_HELP}")
def cmd_free(args) -> int:
    client = get_client(args)
    args._output.print_data(client.free_busy(args.start, args.end))
    return ExitCode.SUCCESS


@calendar_group.command("whoami", help="Show delegate info")
def cmd_whoami(args) -> int:
    context = get_config(args).delegate_context()
    args._output.print_data({
        "delegate": context.delegate_identity or "unknown",
        "accessing_calendar": context.owner_identity,
        "timezone": context.timezone,
        "mode": "delegate",
    })
    return ExitCode.SUCCESS

"""mail commands: owner inbox listing, reading, management and send-on-behalf."""

from __future__ import annotations

from delegate_core.cli_errors import ExitCode, UsageError
from delegate_core.constants import DEFAULT_INBOX_COUNT, DEFAULT_SEARCH_COUNT, DEFAULT_UNREAD_COUNT
from delegate_core.outlook import OutgoingMail

from . import render
from .app import get_client, get_config, mail_group


def _positive(value: int, name: str = "count") -> int:
    if value is None or int(value) <= 0:
        raise UsageError(f"{name} must be a positive integer")
    return int(value)


# -------------------- Reading --------------------
@mail_group.command("inbox", help="List latest emails")
@mail_group.argument("count", nargs="?", type=int, default=DEFAULT_INBOX_COUNT, help="How many (default 10)")
def cmd_inbox(args) -> int:
    client = get_client(args)
    msgs = client.list_messages(_positive(args.count))
    args._output.print_records(render.message_summaries(msgs), empty="No messages")
    return ExitCode.SUCCESS


@mail_group.command("unread", help="List unread emails")
@mail_group.argument("count", nargs="?", type=int, default=DEFAULT_UNREAD_COUNT, help="How many (default 20)")
def cmd_unread(args) -> int:
    client = get_client(args)
    msgs = client.list_unread(_positive(args.count))
    args._output.print_records(render.message_summaries(msgs), empty="No unread messages")
    return ExitCode.SUCCESS


@mail_group.command("search", help="Search emails")
@mail_group.argument("query", help="Search text")
@mail_group.argument("count", nargs="?", type=int, default=DEFAULT_SEARCH_COUNT, help="How many (default 20)")
def cmd_search(args) -> int:
    client = get_client(args)
    msgs = client.search_messages(args.query, _positive(args.count))
    args._output.print_records(render.message_summaries(msgs), empty="No matches")
    return ExitCode.SUCCESS


@mail_group.command("from", help="Emails from a sender")
@mail_group.argument("sender", help="Sender email address")
@mail_group.argument("count", nargs="?", type=int, default=DEFAULT_SEARCH_COUNT, help="How many (default 20)")
def cmd_from(args) -> int:
    client = get_client(args)
    msgs = client.list_from_sender(args.sender, _positive(args.count))
    args._output.print_records(render.message_summaries(msgs), empty="No messages from sender")
    return ExitCode.SUCCESS


@mail_group.command("read", help="Read email content")
@mail_group.argument("id", help="Message id (or its suffix as shown in listings)")
def cmd_read(args) -> int:
    client = get_client(args)
    ref = client.resolve_message(args.id)
    args._output.print_data(render.message_detail(client.get_message(ref.full_id)))
    return ExitCode.SUCCESS


@mail_group.command("attachments", help="List attachments")
@mail_group.argument("id", help="Message id suffix")
def cmd_attachments(args) -> int:
    client = get_client(args)
    ref = client.resolve_message(args.id)
    rows = render.attachment_rows(client.list_attachments(ref.full_id))
    args._output.print_records(rows, empty="No attachments")
    return ExitCode.SUCCESS


# -------------------- Managing --------------------
def _patch_and_report(args, action: str) -> int:
    client = get_client(args)
    ref = client.resolve_message(args.id)
    if action == "read":
        msg, status = client.set_read(ref.full_id, True), "marked as read"
    elif action == "unread":
        msg, status = client.set_read(ref.full_id, False), "marked as unread"
    elif action == "flag":
        msg, status = client.set_flag(ref.full_id, True), "flagged"
    else:
        msg, status = client.set_flag(ref.full_id, False), "unflagged"
    args._output.print_data(render.message_status(status, msg))
    return ExitCode.SUCCESS


@mail_group.command("mark-read", help="Mark as read")
@mail_group.argument("id", help="Message id suffix")
def cmd_mark_read(args) -> int:
    return _patch_and_report(args, "read")


@mail_group.command("mark-unread", help="Mark as unread")
@mail_group.argument("id", help="Message id suffix")
def cmd_mark_unread(args) -> int:
    return _patch_and_report(args, "unread")


@mail_group.command("flag", help="Flag as important")
@mail_group.argument("id", help="Message id suffix")
def cmd_flag(args) -> int:
    return _patch_and_report(args, "flag")


@mail_group.command("unflag", help="Remove flag")
@mail_group.argument("id", help="Message id suffix")
def cmd_unflag(args) -> int:
    return _patch_and_report(args, "unflag")


@mail_group.command("delete", help="Move to Deleted Items")
@mail_group.argument("id", help="Message id suffix")
def cmd_delete(args) -> int:
    client = get_client(args)
    ref = client.resolve_message(args.id)
    args._output.print_data(render.message_status("moved to trash", client.trash_message(ref.full_id)))
    return ExitCode.SUCCESS


@mail_group.command("archive", help="Move to Archive")
@mail_group.argument("id", help="Message id suffix")
def cmd_archive(args) -> int:
    client = get_client(args)
    ref = client.resolve_message(args.id)
    args._output.print_data(render.message_status("archived", client.archive_message(ref.full_id)))
    return ExitCode.SUCCESS


@mail_group.command("move", help="Move to a folder by display name")
@mail_group.argument("id", help="Message id suffix")
@mail_group.argument("folder", help="Folder display name (case-insensitive)")
def cmd_move(args) -> int:
    client = get_client(args)
    ref = client.resolve_message(args.id)
    folder_id = client.find_folder_id(args.folder)
    moved = client.move_message(ref.full_id, folder_id)
    args._output.print_data(render.message_status("moved", moved, folder=args.folder))
    return ExitCode.SUCCESS


# -------------------- Sending --------------------
@mail_group.command("send", help="Send new email on behalf of the owner")
@mail_group.argument("to", help="Recipient address (comma-separate several)")
@mail_group.argument("subject", help="Subject line")
@mail_group.argument("body", nargs="?", default="", help="Plain-text body")
def cmd_send(args) -> int:
    recipients = [addr.strip() for addr in (args.to or "").split(",") if addr.strip()]
    if not recipients or not (args.subject or "").strip():
        raise UsageError("send needs a recipient and a subject", hint="outlook-delegate mail send <to> <subject> <body>")
    client = get_client(args)
    owner = client.context.owner_identity
    client.send_mail(OutgoingMail(to=recipients, subject=args.subject, body=args.body or "", owner=owner))
    args._output.print_data({
        "status": f"sent on behalf of {owner}",
        "to": ", ".join(recipients),
        "subject": args.subject,
    })
    return ExitCode.SUCCESS


@mail_group.command("reply", help="Reply to email on behalf of the owner")
@mail_group.argument("id", help="Message id suffix")
@mail_group.argument("body", help="Reply text")
def cmd_reply(args) -> int:
    if not (args.body or "").strip():
        raise UsageError("reply needs a body", hint='outlook-delegate mail reply <id> "reply body"')
    client = get_client(args)
    ref = client.resolve_message(args.id)
    client.reply(ref.full_id, args.body)
    args._output.print_data({
        "status": f"replied on behalf of {client.context.owner_identity}",
        "id": ref.display_suffix,
    })
    return ExitCode.SUCCESS


# -------------------- Info --------------------
@mail_group.command("folders", help="List mail folders")
def cmd_folders(args) -> int:
    client = get_client(args)
    args._output.print_records(render.folder_rows(client.list_folders()), empty="No folders")
    return ExitCode.SUCCESS


@mail_group.command("stats", help="Inbox statistics")
def cmd_stats(args) -> int:
    client = get_client(args)
    inbox = client.folder_stats("inbox")
    args._output.print_data({
        "folder": inbox.get("displayName"),
        "total": inbox.get("totalItemCount"),
        "unread": inbox.get("unreadItemCount"),
        "owner": client.context.owner_identity,
    })
    return ExitCode.SUCCESS


@mail_group.command("whoami", help="Show delegate info")
def cmd_whoami(args) -> int:
    context = get_config(args).delegate_context()
    args._output.print_data({
        "delegate": context.delegate_identity or "unknown",
        "accessing_mailbox": context.owner_identity,
        "mode": "delegate",
    })
    return ExitCode.SUCCESS

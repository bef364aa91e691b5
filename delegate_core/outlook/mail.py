"""Mail operations on the owner's mailbox via Microsoft Graph.

Includes listing/search, partial-id targeted reads and updates, folder
moves, and send/reply on behalf of the owner.
"""

from __future__ import annotations

from typing import Any, Dict, List

from ..cli_errors import NotFoundError
from ..constants import MESSAGE_RESOLVE_PAGE_SIZE
from .client import OutlookClientBase, path_segment
from .models import OutgoingMail, ResourceRef
from .resolver import SuffixResolver

# Well-known folder names accepted by /move
DELETED_ITEMS = "deleteditems"
ARCHIVE = "archive"

_SUMMARY_SELECT = "id,subject,from,receivedDateTime,isRead"
_READ_SELECT = "subject,from,receivedDateTime,body,toRecipients"
_NEWEST_FIRST = "receivedDateTime desc"


def odata_string(value: str) -> str:
    """Quote ``value`` as an OData string literal."""
    return "'" + str(value).replace("'", "''") + "'"


def search_phrase(value: str) -> str:
    """Quote ``value`` as a $search phrase."""
    return '"' + str(value).replace("\\", "\\\\").replace('"', '\\"') + '"'


class OutlookMailMixin:
    """Mixin providing owner-mailbox operations.

    Requires OutlookClientBase methods: _request, _get, _list, _headers_search
    """

    message_page_size: int = MESSAGE_RESOLVE_PAGE_SIZE

    # -------------------- Resolution --------------------
    def resolve_message(self: OutlookClientBase, suffix: str) -> ResourceRef:
        return SuffixResolver(self).resolve(
            "messages",
            suffix,
            self.message_page_size,
            not_found="Message not found",
            hint="Use the ID shown in inbox/unread/search results.",
        )

    # -------------------- Listing --------------------
    def list_messages(self: OutlookClientBase, top: int = 10) -> List[Dict[str, Any]]:
        return self._list("messages", params={
            "$top": int(top),
            "$orderby": _NEWEST_FIRST,
            "$select": _SUMMARY_SELECT,
        })

    def list_unread(self: OutlookClientBase, top: int = 20) -> List[Dict[str, Any]]:
        return self._list("messages", params={
            "$filter": "isRead eq false",
            "$top": int(top),
            "$orderby": _NEWEST_FIRST,
            "$select": _SUMMARY_SELECT,
        })

    def search_messages(self: OutlookClientBase, query: str, top: int = 20) -> List[Dict[str, Any]]:
        # $search does not combine with $orderby; results come back by relevance
        return self._list(
            "messages",
            params={"$search": search_phrase(query), "$top": int(top), "$select": _SUMMARY_SELECT},
            headers=self._headers_search(),
        )

    def list_from_sender(self: OutlookClientBase, sender: str, top: int = 20) -> List[Dict[str, Any]]:
        return self._list("messages", params={
            "$filter": f"from/emailAddress/address eq {odata_string(sender)}",
            "$top": int(top),
            "$orderby": _NEWEST_FIRST,
            "$select": _SUMMARY_SELECT,
        })

    # -------------------- Single message --------------------
    def get_message(self: OutlookClientBase, msg_id: str) -> Dict[str, Any]:
        return self._get(f"messages/{path_segment(msg_id)}", params={"$select": _READ_SELECT})

    def list_attachments(self: OutlookClientBase, msg_id: str) -> List[Dict[str, Any]]:
        return self._list(
            f"messages/{path_segment(msg_id)}/attachments",
            params={"$select": "id,name,size,contentType"},
        )

    def set_read(self: OutlookClientBase, msg_id: str, is_read: bool = True) -> Dict[str, Any]:
        return self._request("PATCH", f"messages/{path_segment(msg_id)}", json={"isRead": bool(is_read)})

    def set_flag(self: OutlookClientBase, msg_id: str, flagged: bool = True) -> Dict[str, Any]:
        status = "flagged" if flagged else "notFlagged"
        return self._request("PATCH", f"messages/{path_segment(msg_id)}", json={"flag": {"flagStatus": status}})

    def move_message(self: OutlookClientBase, msg_id: str, destination_id: str) -> Dict[str, Any]:
        """Move a message; returns the moved copy (its id changes)."""
        return self._request(
            "POST",
            f"messages/{path_segment(msg_id)}/move",
            json={"destinationId": destination_id},
        )

    def trash_message(self, msg_id: str) -> Dict[str, Any]:
        return self.move_message(msg_id, DELETED_ITEMS)

    def archive_message(self, msg_id: str) -> Dict[str, Any]:
        return self.move_message(msg_id, ARCHIVE)

    # -------------------- Folders --------------------
    def list_folders(self: OutlookClientBase, top: int = 100) -> List[Dict[str, Any]]:
        return self._list("mailFolders", params={"$top": int(top)})

    def find_folder_id(self, name: str) -> str:
        """Return the id of the top-level folder named ``name`` (case-insensitive)."""
        target = (name or "").strip().lower()
        folders = self.list_folders()
        for folder in folders:
            if (folder.get("displayName") or "").strip().lower() == target and folder.get("id"):
                return str(folder["id"])
        available = [f.get("displayName") for f in folders if f.get("displayName")]
        raise NotFoundError(
            f"Folder not found: {name}",
            hint="Available folders: " + ", ".join(available) if available else None,
        )

    def folder_stats(self: OutlookClientBase, folder: str = "inbox") -> Dict[str, Any]:
        return self._get(f"mailFolders/{path_segment(folder)}")

    # -------------------- Sending --------------------
    def send_mail(self: OutlookClientBase, mail: OutgoingMail) -> None:
        """Send as the owner (send-on-behalf); Graph answers 202 with no body."""
        self._request("POST", "sendMail", json=mail.to_payload())

    def reply(self: OutlookClientBase, msg_id: str, comment: str) -> None:
        self._request("POST", f"messages/{path_segment(msg_id)}/reply", json={"comment": comment})

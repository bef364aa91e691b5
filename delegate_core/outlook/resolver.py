"""Partial-ID resolution.

Graph ids are long opaque strings; the CLI only ever shows their last 20
characters. To act on one, list a single bounded page of ids from the
owner's collection and pick the first whose value ends with the suffix.

Resources outside that first page cannot be resolved. The bound is kept
on purpose (no unbounded pagination) and is configurable.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..cli_errors import NotFoundError, UsageError
from .client import OutlookClientBase
from .models import ResourceRef

LOG = logging.getLogger(__name__)


def match_suffix(ids: Iterable[Optional[str]], suffix: str) -> Optional[str]:
    """Return the first id ending with ``suffix`` in iteration order."""
    for full_id in ids:
        if full_id and full_id.endswith(suffix):
            return full_id
    return None


class SuffixResolver:
    """Resolve displayed id suffixes against one page of an owner collection."""

    def __init__(self, client: OutlookClientBase) -> None:
        self.client = client

    def resolve(
        self,
        collection: str,
        suffix: str,
        page_size: int,
        *,
        not_found: str = "Resource not found",
        hint: Optional[str] = None,
    ) -> ResourceRef:
        suffix = (suffix or "").strip()
        if not suffix:
            raise UsageError("An id is required", hint="Use the id shown in listing output.")
        if page_size <= 0:
            raise ValueError("page_size must be positive")

        # One listing call, default server order, ids only.
        ids = [
            item.get("id")
            for item in self.client._list(collection, params={"$top": int(page_size), "$select": "id"})
        ]
        full_id = match_suffix(ids, suffix)
        if full_id is None:
            LOG.debug("suffix %s not in first %d of %s (%d scanned)", suffix, page_size, collection, len(ids))
            raise NotFoundError(not_found, hint=hint)
        return ResourceRef(full_id)

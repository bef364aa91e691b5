"""Minimal structured session logger used by the CLI.

Writes JSON lines (start/end/error records keyed by a session id) to a
file, creating parent directories as needed.
"""

from __future__ import annotations

import json
import logging
import os
import time
import uuid
from typing import Any, Dict, List, Optional

LOG = logging.getLogger(__name__)


class AppLogger:
    def __init__(self, path: str) -> None:
        self.path = path

    def _write(self, record: Dict[str, Any]) -> None:
        try:
            d = os.path.dirname(self.path)
            if d:
                os.makedirs(d, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as fh:
                fh.write(json.dumps(record, ensure_ascii=False) + "\n")
        except OSError as exc:  # session log must never crash the app
            LOG.debug("session log write failed: %s", exc)

    def start(self, cmd: str, argv: Optional[List[str]] = None) -> str:
        sid = str(uuid.uuid4())
        self._write({
            "ts": time.time(),
            "event": "start",
            "cmd": cmd,
            "argv": argv,
            "pid": os.getpid(),
            "session_id": sid,
        })
        return sid

    def end(
        self,
        session_id: str,
        status: str = "ok",
        duration_ms: Optional[int] = None,
        error: Optional[str] = None,
    ) -> None:
        rec: Dict[str, Any] = {
            "ts": time.time(),
            "event": "end",
            "session_id": session_id,
            "status": status,
        }
        if duration_ms is not None:
            rec["duration_ms"] = int(duration_ms)
        if error:
            rec["error"] = error
        self._write(rec)

    def error(self, session_id: str, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._write({
            "ts": time.time(),
            "event": "error",
            "session_id": session_id,
            "message": message,
            "extra": extra,
        })

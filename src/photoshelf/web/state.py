"""Diagnostics kept in memory for the /api/logs endpoints."""

import threading
from collections import deque
from datetime import datetime, timezone
from typing import Deque, List, Optional

LEVELS = ("call", "result", "info", "warning")


class LogBuffer:
    """Bounded, thread-safe ring of recent log entries; the oldest drop off first."""

    MAX_ENTRIES = 1000

    def __init__(self, max_entries: int = MAX_ENTRIES):
        self._entries: Deque[dict] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    def add(self, level: str, message: str, data: Optional[dict] = None) -> None:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": level,
            "message": message,
            "data": data,
        }
        with self._lock:
            self._entries.append(entry)

    def get_all(self, level: Optional[str] = None) -> List[dict]:
        """Entries oldest first, optionally only those of one level."""
        with self._lock:
            entries = list(self._entries)
        if level:
            entries = [entry for entry in entries if entry["level"] == level]
        return entries

    def clear(self) -> int:
        """Empties the buffer and returns how many entries were dropped."""
        with self._lock:
            dropped = len(self._entries)
            self._entries.clear()
        return dropped

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


log_buffer = LogBuffer()

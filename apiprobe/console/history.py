"""Rolling, newest-first record of console calls."""

from collections import deque
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from apiprobe.common.config import settings


class HistoryEntry(BaseModel):
    action: str
    time: str
    success: bool
    summary: str


def summarize(result: dict[str, Any]) -> str:
    """One-line outcome: status line and latency, else the error text."""

    response = result.get("httpResponse")
    if response:
        return f"{response.get('status')} {response.get('statusText')} ({response.get('time')})"
    return result.get("error") or "Unknown"


class CallHistory:
    """Bounded history; the oldest entry drops off once the limit is reached."""

    def __init__(self, limit: int | None = None) -> None:
        self.limit = settings.history_limit if limit is None else limit
        self._entries: deque[HistoryEntry] = deque(maxlen=self.limit)

    def record(self, action: str, result: dict[str, Any], now: datetime | None = None) -> HistoryEntry:
        entry = HistoryEntry(
            action=action,
            time=(now or datetime.now()).strftime("%H:%M:%S"),
            success=bool(result.get("success")),
            summary=summarize(result),
        )
        self._entries.appendleft(entry)
        return entry

    def entries(self) -> list[HistoryEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

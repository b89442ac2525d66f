from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum, auto


class InputState(Enum):
    IDLE = auto()
    NAVIGATING = auto()  # history cursor points at an entry
    CYCLING = auto()  # completion candidates cached


@dataclass
class HistoryEntry:
    command: str
    timestamp: int  # milliseconds since the epoch
    session_id: str | None = None


def now_ms() -> int:
    return int(time.time() * 1000)

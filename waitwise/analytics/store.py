from __future__ import annotations

import threading
import time
from collections import deque
from typing import Any

from ..config import DEFAULT_ANALYTICS_CONFIG

# Oldest events fall off once the cap is reached
_events: deque[dict[str, Any]] = deque(maxlen=DEFAULT_ANALYTICS_CONFIG.max_events)
_lock = threading.Lock()


def record_event(event_type: str, data: dict[str, Any]) -> None:
    """Append an event of *event_type*; submissions may arrive from many threads."""
    with _lock:
        _events.append({
            "type": event_type,
            "timestamp": time.time(),
            **data,
        })


def get_events() -> list[dict[str, Any]]:
    with _lock:
        return list(_events)


def clear_events() -> None:
    with _lock:
        _events.clear()

"""Call identifiers and timestamps."""

from __future__ import annotations

import time
import uuid

__all__ = [
    'SystemClock',
]


class SystemClock:
    """uuid4 request ids, epoch-millisecond timestamps."""

    def new_request_id(self) -> str:
        return str(uuid.uuid4())

    def now_ms(self) -> int:
        return time.time_ns() // 1_000_000


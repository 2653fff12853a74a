"""Caller-owned response channel with cancellation.

Hand an Emitter to Client.execute to be able to abandon retries: once
closed, the call rethrows its latest failure instead of trying again.
The emitter also works as a simple async channel for posting responses to
a listener.

Usage::

    emitter = Emitter()
    task = asyncio.create_task(client.execute(request, emitter=emitter, retry_count=5))
    ...
    emitter.close()  # user navigated away; stop retrying
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

from rest_client.schemas.models import Response

__all__ = [
    'Emitter',
]


class Emitter:
    def __init__(self) -> None:
        self._queue: asyncio.Queue[Response | None] = asyncio.Queue()
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    def post(self, response: Response) -> None:
        """Deliver a response to the listener.

        Raises:
            RuntimeError: If the emitter is already closed.
        """
        if self._closed:
            raise RuntimeError('Cannot post to a closed emitter')
        self._queue.put_nowait(response)

    def close(self) -> None:
        """Close the channel. Idempotent."""
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(None)

    async def __aiter__(self) -> AsyncIterator[Response]:
        """Yield posted responses until the emitter is closed."""
        while (response := await self._queue.get()) is not None:
            yield response

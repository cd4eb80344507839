import asyncio
from typing import AsyncIterator

from resume_screener.modules.outcomes import BatchOutcome, encode_outcome

_END_OF_STREAM = object()


class StreamingResponseWriter:
    """
    Single-consumer channel between concurrent batch tasks and the HTTP body.
    Producers push settled outcomes with `emit`; `records` drains them in arrival
    order as encoded NDJSON lines and stops once `close` has been called.
    """

    def __init__(self, maxsize: int = 0):
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._closed = False
        self.records_written = 0

    @property
    def closed(self) -> bool:
        return self._closed

    async def emit(self, outcome: BatchOutcome) -> None:
        if self._closed:
            raise RuntimeError("Cannot emit to a closed stream")
        await self._queue.put(outcome)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._queue.put(_END_OF_STREAM)

    async def records(self) -> AsyncIterator[bytes]:
        while True:
            item = await self._queue.get()
            if item is _END_OF_STREAM:
                return
            self.records_written += 1
            yield encode_outcome(item)

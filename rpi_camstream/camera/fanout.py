"""Fan raw capture output out to any number of independent readers."""

from __future__ import annotations

import asyncio
import itertools
from typing import AsyncIterator, List, Optional

from rpi_camstream.core.logging_utils import LoggerLike, ensure_structured_logger

_EOF = None
_stream_ids = itertools.count(1)


class ConsumerStream:
    """A push-fed, async-readable byte stream.

    The producer side calls ``push``/``close`` and never blocks; chunks are
    queued without limit until the consumer reads them. ``read()`` returns
    ``b""`` once the stream is closed and drained.
    """

    def __init__(self, name: Optional[str] = None) -> None:
        self.name = name or f"stream-{next(_stream_ids)}"
        self._queue: asyncio.Queue[Optional[bytes]] = asyncio.Queue()
        self._closed = False
        self._at_eof = False
        self.chunks_received = 0
        self.bytes_received = 0

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"ConsumerStream({self.name!r}, {state}, {self.chunks_received} chunks)"

    @property
    def closed(self) -> bool:
        """True once end-of-stream has been signalled by the producer."""
        return self._closed

    @property
    def at_eof(self) -> bool:
        """True once the consumer has read past the last chunk."""
        return self._at_eof

    def push(self, chunk: bytes) -> bool:
        if self._closed:
            return False
        self._queue.put_nowait(chunk)
        self.chunks_received += 1
        self.bytes_received += len(chunk)
        return True

    def close(self) -> bool:
        """Signal end-of-stream. Returns False if it was already signalled."""
        if self._closed:
            return False
        self._closed = True
        self._queue.put_nowait(_EOF)
        return True

    async def read(self) -> bytes:
        if self._at_eof:
            return b""
        chunk = await self._queue.get()
        if chunk is _EOF:
            self._at_eof = True
            return b""
        return chunk

    async def read_all(self) -> bytes:
        parts = []
        async for chunk in self:
            parts.append(chunk)
        return b"".join(parts)

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self

    async def __anext__(self) -> bytes:
        chunk = await self.read()
        if not chunk and self._at_eof:
            raise StopAsyncIteration
        return chunk


class StreamRegistry:
    """Owns the consumer streams of one camera."""

    def __init__(self, *, logger: LoggerLike = None) -> None:
        self.logger = ensure_structured_logger(logger, fallback_name="StreamRegistry")
        self._streams: List[ConsumerStream] = []

    def __len__(self) -> int:
        return len(self._streams)

    @property
    def streams(self) -> tuple[ConsumerStream, ...]:
        return tuple(self._streams)

    def register(self, name: Optional[str] = None) -> ConsumerStream:
        stream = ConsumerStream(name)
        self._streams.append(stream)
        self.logger.debug("Registered %s (%d active)", stream.name, len(self._streams))
        return stream

    def unregister(self, stream: ConsumerStream) -> bool:
        """Drop ``stream`` from the registry and close it."""
        try:
            self._streams.remove(stream)
        except ValueError:
            return False
        stream.close()
        self.logger.debug("Unregistered %s (%d active)", stream.name, len(self._streams))
        return True

    def dispatch(self, chunk: bytes) -> int:
        """Push ``chunk`` to every registered stream; returns how many got it."""
        delivered = 0
        for stream in tuple(self._streams):
            if stream.closed:
                # Closed by its consumer; nothing more to deliver
                self._discard(stream)
                continue
            try:
                if stream.push(chunk):
                    delivered += 1
            except Exception as e:
                self.logger.error("Dropping chunk for %s: %s", stream.name, e, exc_info=True)
        return delivered

    def close_all(self) -> int:
        streams = tuple(self._streams)
        self._streams.clear()
        closed = 0
        for stream in streams:
            try:
                if stream.close():
                    closed += 1
            except Exception as e:
                self.logger.error("Failed to close %s: %s", stream.name, e, exc_info=True)
        if streams:
            self.logger.debug("Closed %d consumer stream(s)", closed)
        return closed

    def _discard(self, stream: ConsumerStream) -> None:
        try:
            self._streams.remove(stream)
        except ValueError:
            pass


__all__ = ["ConsumerStream", "StreamRegistry"]

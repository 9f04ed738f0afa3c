"""Split a concatenated MJPEG byte stream into individual JPEG frames."""

from __future__ import annotations

from typing import Iterator, Optional

from rpi_camstream.core.errors import FrameBufferOverflowError

DEFAULT_MAX_BUFFER_BYTES = 32 * 1024 * 1024


class FrameDemultiplexer:
    """Rolling-buffer frame boundary detector.

    A frame runs from one occurrence of ``signature`` up to (not including)
    the next one, so a frame is only emitted once the following frame has
    started to arrive. Bytes before the first signature are discarded.

    ``feed`` appends immediately; the returned iterator extracts frames
    lazily, so partially consuming it leaves the remaining frames buffered for
    the next call.
    """

    def __init__(
        self,
        signature: bytes,
        *,
        max_buffer_bytes: Optional[int] = DEFAULT_MAX_BUFFER_BYTES,
    ) -> None:
        if not signature:
            raise ValueError("signature must not be empty")
        if max_buffer_bytes is not None and max_buffer_bytes < len(signature):
            raise ValueError("max_buffer_bytes must be at least the signature length")
        self._signature = bytes(signature)
        self._max_buffer_bytes = max_buffer_bytes
        self._buffer = bytearray()
        # Where the search for the next signature resumes; always >= len(signature)
        self._next_from = len(self._signature)
        self._frame_count = 0

    @property
    def signature(self) -> bytes:
        return self._signature

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    @property
    def frame_count(self) -> int:
        return self._frame_count

    def reset(self) -> None:
        self._buffer.clear()
        self._next_from = len(self._signature)

    def feed(self, chunk: bytes) -> Iterator[bytes]:
        if chunk:
            self._buffer += chunk
        return self._drain()

    def _drain(self) -> Iterator[bytes]:
        signature = self._signature
        sig_len = len(signature)
        buffer = self._buffer

        while True:
            start = buffer.find(signature)
            if start == -1:
                break

            if start > 0:
                del buffer[:start]
                self._next_from = sig_len

            end = buffer.find(signature, max(self._next_from, sig_len))
            if end == -1:
                # A signature split across chunks must still be found next time
                self._next_from = max(sig_len, len(buffer) - sig_len + 1)
                break

            frame = bytes(buffer[:end])
            del buffer[:end]
            self._next_from = sig_len
            self._frame_count += 1
            yield frame

        limit = self._max_buffer_bytes
        if limit is not None and len(buffer) > limit:
            size = len(buffer)
            self.reset()
            raise FrameBufferOverflowError(size, limit)


__all__ = ["DEFAULT_MAX_BUFFER_BYTES", "FrameDemultiplexer"]

"""A thread-safe output buffer that can be read from and streamed."""

from __future__ import annotations

import io
import threading
from typing import Iterator


class Buffer:
    """Accumulates bytes written by a task and lets readers follow them."""

    def __init__(self) -> None:
        self._data = bytearray()
        self._closed = False
        self._cond = threading.Condition()

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, data: bytes) -> int:
        """Append data to the buffer and wake any streamers."""
        with self._cond:
            if self._closed:
                raise ValueError("write to closed buffer")
            self._data.extend(data)
            self._cond.notify_all()
        return len(data)

    def new_reader(self) -> io.BytesIO:
        """Return a reader over a copy of what has been written so far."""
        with self._cond:
            return io.BytesIO(bytes(self._data))

    def stream(self) -> Iterator[bytes]:
        """Yield chunks of the buffer as they are written until it is closed."""
        offset = 0
        while True:
            with self._cond:
                self._cond.wait_for(lambda: len(self._data) > offset or self._closed)
                chunk = bytes(self._data[offset:])
                offset += len(chunk)
                closed = self._closed
            if chunk:
                yield chunk
            elif closed:
                return

    def close(self) -> None:
        """Close the buffer, ending all streams once they are drained."""
        with self._cond:
            if self._closed:
                raise ValueError("buffer already closed")
            self._closed = True
            self._cond.notify_all()
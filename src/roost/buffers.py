"""Reusable scratch buffers for two-pass layout rendering.

Free-threading safety:
    - The free list is guarded by a ``threading.Lock``
    - A borrowed buffer belongs to exactly one render call until it is
      returned; buffers are never shared between concurrent calls
"""

import io
import threading
from collections.abc import Iterator
from contextlib import contextmanager

DEFAULT_POOL_SIZE = 32
DEFAULT_MAX_RETAINED = 1024 * 1024


class BufferPool:
    """A pool of ``io.StringIO`` scratch buffers.

    ``borrow()`` hands out a clean buffer and always takes it back,
    whether the ``with`` body returns or raises::

        with pool.borrow() as buf:
            engine.render(..., buf, ...)
            content = buf.getvalue()

    At most *max_idle* buffers are kept.  A buffer that grew past
    *max_retained* characters is dropped instead of pooled.
    """

    __slots__ = ("_free", "_lock", "max_idle", "max_retained")

    def __init__(
        self,
        max_idle: int = DEFAULT_POOL_SIZE,
        max_retained: int = DEFAULT_MAX_RETAINED,
    ) -> None:
        self._free: list[io.StringIO] = []
        self._lock = threading.Lock()
        self.max_idle = max_idle
        self.max_retained = max_retained

    @contextmanager
    def borrow(self) -> Iterator[io.StringIO]:
        buf = self._acquire()
        try:
            yield buf
        finally:
            self._release(buf)

    def _acquire(self) -> io.StringIO:
        with self._lock:
            if self._free:
                return self._free.pop()
        return io.StringIO()

    def _release(self, buf: io.StringIO) -> None:
        if buf.closed:
            return
        size = buf.seek(0, io.SEEK_END)
        if size > self.max_retained:
            return
        buf.seek(0)
        buf.truncate()
        with self._lock:
            if len(self._free) < self.max_idle:
                self._free.append(buf)

    @property
    def idle(self) -> int:
        """Number of buffers currently waiting in the pool."""
        with self._lock:
            return len(self._free)

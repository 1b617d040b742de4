"""Submission and completion rings for user-space block I/O."""

from __future__ import annotations

import itertools
import queue
import threading
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass
class IoArgs:
    """Parameters of one I/O request."""

    buf_id: int = 0
    buf_off: int = 0
    file_iid: int = 0
    file_off: int = 0
    io_len: int = 0
    userdata: Any = None


@dataclass
class IoSqe:
    """A submission queue entry pointing at stored :class:`IoArgs`."""

    index: int
    reserved: int = 0
    userdata: Any = None


@dataclass
class IoCqe:
    """A completion: bytes transferred when ``result >= 0``, an error code otherwise."""

    index: int
    result: int
    userdata: Any = None


class RingBuffer(Generic[T]):
    """Bounded FIFO ring; one slot stays free to tell full from empty."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1 or capacity & (capacity - 1):
            raise ValueError("ring capacity must be a positive power of two")
        self._size = capacity
        self._mask = capacity - 1
        self._entries: list[T | None] = [None] * capacity
        self._head = 0
        self._tail = 0
        self._lock = threading.Lock()

    def push(self, entry: T) -> bool:
        """Append ``entry``; return False if the ring is full."""
        with self._lock:
            following = (self._tail + 1) & self._mask
            if following == self._head:
                return False
            self._entries[self._tail] = entry
            self._tail = following
            return True

    def pop(self) -> T | None:
        """Remove and return the oldest entry, or None if the ring is empty."""
        with self._lock:
            if self._head == self._tail:
                return None
            entry = self._entries[self._head]
            self._entries[self._head] = None
            self._head = (self._head + 1) & self._mask
            return entry

    def __len__(self) -> int:
        with self._lock:
            return (self._tail - self._head) & self._mask

    def capacity(self) -> int:
        """How many entries the ring can hold at once."""
        return self._size - 1


def _round_up_pow2(value: int) -> int:
    return 1 if value <= 1 else 1 << (value - 1).bit_length()


class IoRing:
    """Pairs a submission ring with a completion ring and a table of request arguments."""

    def __init__(self, entries: int, for_read: bool = True) -> None:
        if entries < 0:
            raise ValueError("entries must not be negative")
        size = _round_up_pow2(entries + 1)
        self._sq: RingBuffer[IoSqe] = RingBuffer(size)
        self._cq: RingBuffer[IoCqe] = RingBuffer(size)
        self._for_read = for_read
        self._io_args = [IoArgs() for _ in range(size)]
        self._next_index = itertools.count()
        self._index_lock = threading.Lock()

    def add_sqe(self, args: IoArgs) -> int:
        """Submit a request and return its index; raise :class:`queue.Full` if the ring is full."""
        with self._index_lock:
            index = next(self._next_index) % len(self._io_args)
        self._io_args[index] = args
        if not self._sq.push(IoSqe(index=index, reserved=0, userdata=args.userdata)):
            raise queue.Full("submission queue is full")
        return index

    def pop_cqe(self) -> IoCqe | None:
        """The oldest completion, or None."""
        return self._cq.pop()

    def complete_sqe(self, index: int, result: int, userdata: Any) -> bool:
        """Post a completion; return False if the completion ring is full."""
        return self._cq.push(IoCqe(index=index, result=result, userdata=userdata))

    def pop_sqe(self) -> IoSqe | None:
        """The oldest pending submission, or None."""
        return self._sq.pop()

    def get_io_args(self, index: int) -> IoArgs:
        return self._io_args[index % len(self._io_args)]

    def sqe_count(self) -> int:
        return len(self._sq)

    def cqe_count(self) -> int:
        return len(self._cq)

    def is_for_read(self) -> bool:
        return self._for_read
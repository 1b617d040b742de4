"""In-memory ordered indexes of inodes and directory entries."""

from __future__ import annotations

import bisect
from typing import Any, Generic, Iterator, TypeVar

from nebulastore.types import Dentry, InodeAttr

K = TypeVar("K")
V = TypeVar("V")


class OrderedIndex(Generic[K, V]):
    """A map that keeps its keys sorted and refuses to overwrite."""

    def __init__(self) -> None:
        self._items: dict[Any, V] = {}
        self._keys: list[Any] = []

    def insert(self, key: K, value: V) -> bool:
        """Add ``key``; return False and change nothing if it is present."""
        if key in self._items:
            return False
        bisect.insort(self._keys, key)
        self._items[key] = value
        return True

    def get(self, key: K) -> V | None:
        """Return the value stored under ``key``, or None."""
        return self._items.get(key)

    def delete(self, key: K) -> bool:
        """Remove ``key``; return whether it was present."""
        if key not in self._items:
            return False
        del self._items[key]
        del self._keys[bisect.bisect_left(self._keys, key)]
        return True

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[K]:
        """Yield keys in ascending order."""
        return iter(list(self._keys))


class BTreeIndex:
    """Inode index keyed by id and entry index keyed by (parent, name)."""

    def __init__(self) -> None:
        self._inodes: OrderedIndex[int, InodeAttr] = OrderedIndex()
        self._dentries: OrderedIndex[tuple[int, str], Dentry] = OrderedIndex()

    def insert_inode(self, inode_id: int, attr: InodeAttr) -> bool:
        return self._inodes.insert(inode_id, attr)

    def get_inode(self, inode_id: int) -> InodeAttr | None:
        return self._inodes.get(inode_id)

    def delete_inode(self, inode_id: int) -> bool:
        return self._inodes.delete(inode_id)

    def insert_dentry(self, parent: int, name: str, dentry: Dentry) -> bool:
        return self._dentries.insert((parent, name), dentry)

    def get_dentry(self, parent: int, name: str) -> Dentry | None:
        return self._dentries.get((parent, name))

    def delete_dentry(self, parent: int, name: str) -> bool:
        return self._dentries.delete((parent, name))

    def inode_count(self) -> int:
        return len(self._inodes)

    def dentry_count(self) -> int:
        return len(self._dentries)
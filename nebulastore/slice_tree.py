"""Binary search tree of file slices where newer writes cut older ones."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from nebulastore.types import SliceInfo


@dataclass(eq=False)
class SliceNode:
    """A used span ``[pos, pos + length)`` of a stored slice."""

    pos: int
    slice_id: int
    size: int
    off: int
    length: int
    left: SliceNode | None = None
    right: SliceNode | None = None

    def end(self) -> int:
        return self.pos + self.length


def _insert_node(node: SliceNode | None, new: SliceNode) -> SliceNode:
    if node is None:
        return new
    if new.pos < node.pos:
        node.left = _insert_node(node.left, new)
    else:
        node.right = _insert_node(node.right, new)
    return node


def _pop_min(node: SliceNode) -> tuple[SliceNode, SliceNode | None]:
    """Detach the smallest node; return it and the remaining subtree."""
    if node.left is None:
        return node, node.right
    smallest, node.left = _pop_min(node.left)
    return smallest, node


def _cut(node: SliceNode | None, pos: int, length: int) -> SliceNode | None:
    if node is None:
        return None
    end = pos + length
    node_end = node.end()
    node.left = _cut(node.left, pos, length)
    node.right = _cut(node.right, pos, length)

    if node_end <= pos or node.pos >= end:
        return node

    if node.pos >= pos and node_end <= end:
        if node.left is None:
            return node.right
        if node.right is None:
            return node.left
        successor, rest = _pop_min(node.right)
        successor.left = node.left
        successor.right = rest
        return successor

    if node.pos < pos and node_end > end:
        right_part = SliceNode(
            pos=end,
            slice_id=node.slice_id,
            size=node.size,
            off=node.off + (end - node.pos),
            length=node_end - end,
        )
        node.length = pos - node.pos
        node.right = _insert_node(node.right, right_part)
    elif node.pos < pos:
        node.length = pos - node.pos
    else:
        cut_len = end - node.pos
        node.off += cut_len
        node.length -= cut_len
        node.pos = end
    return node


def _inorder(node: SliceNode | None) -> Iterator[SliceNode]:
    if node is None:
        return
    yield from _inorder(node.left)
    yield node
    yield from _inorder(node.right)


def _range(node: SliceNode | None, start: int, end: int) -> Iterator[SliceNode]:
    if node is None:
        return
    if node.pos >= end:
        yield from _range(node.left, start, end)
        return
    if node.end() <= start:
        yield from _range(node.right, start, end)
        return
    yield from _range(node.left, start, end)
    yield node
    yield from _range(node.right, start, end)


class SliceTree:
    """The slices of one file, with later writes overriding earlier ones."""

    def __init__(self) -> None:
        self._root: SliceNode | None = None

    def root(self) -> SliceNode | None:
        return self._root

    def insert(self, pos: int, slice_id: int, size: int, off: int, length: int) -> None:
        """Add a slice at ``pos``, trimming whatever it overlaps."""
        self._root = _cut(self._root, pos, length)
        self._root = _insert_node(self._root, SliceNode(pos, slice_id, size, off, length))

    def find(self, pos: int) -> SliceNode | None:
        """The slice covering file position ``pos``, or None."""
        node = self._root
        while node is not None:
            if pos < node.pos:
                node = node.left
            elif pos >= node.end():
                node = node.right
            else:
                return node
        return None

    def get_range(self, start: int, end: int) -> list[SliceNode]:
        """Slices overlapping ``[start, end)`` in file order."""
        return list(_range(self._root, start, end))

    def build(self, key_prefix: str) -> list[SliceInfo]:
        """Slice descriptions in file order, keyed under ``key_prefix``."""
        return [
            SliceInfo(
                slice_id=node.slice_id,
                offset=node.pos,
                size=node.length,
                storage_key=f"{key_prefix}/{node.slice_id}",
            )
            for node in _inorder(self._root)
        ]
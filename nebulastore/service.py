"""Path-level metadata operations routed over a set of partitions."""

from __future__ import annotations

import copy
import enum
import threading
from typing import Iterable

from nebulastore.partition import MetaPartition
from nebulastore.types import (
    DEFAULT_CHUNK_SIZE,
    S_IFDIR,
    AlreadyExistsError,
    Dentry,
    FileLayout,
    FileMode,
    FileType,
    InodeAttr,
    InvalidArgumentError,
    MetadataError,
    NotDirectoryError,
    NotFoundError,
    SliceInfo,
    StoreIOError,
    now_in_seconds,
)

ROOT_INODE = 1


class AttrMask(enum.IntFlag):
    """Which attributes :meth:`MetadataService.set_attr` takes from its argument."""

    MODE = 1 << 0
    UID = 1 << 1
    GID = 1 << 2
    SIZE = 1 << 3
    MTIME = 1 << 4


def split_parent_child(path: str) -> tuple[str, str]:
    """Split ``path`` into its parent path and last component."""
    if path in ("", "/"):
        return "/", ""
    pos = path.rfind("/")
    if pos == 0:
        return "/", path[1:]
    return path[:pos], path[pos + 1 :]


class MetadataService:
    """Stateless front end resolving paths to inodes across partitions."""

    def __init__(self, partitions: Iterable[MetaPartition]) -> None:
        self._partitions = list(partitions)
        self._next_inode = ROOT_INODE + 1
        self._inode_lock = threading.Lock()
        self._layouts: dict[int, FileLayout] = {}
        self._layout_lock = threading.Lock()

    def parse_path(self, path: str) -> list[str]:
        """Split an absolute path into its non-empty components."""
        if not path.startswith("/"):
            raise InvalidArgumentError("Path must start with /")
        return [part for part in path[1:].split("/") if part]

    def generate_inode_id(self) -> int:
        """Hand out the next unused inode id."""
        with self._inode_lock:
            inode = self._next_inode
            self._next_inode += 1
            return inode

    def _locate_partition(self, inode_id: int) -> MetaPartition | None:
        for partition in self._partitions:
            cfg = partition.config
            if cfg.start_inode <= inode_id < cfg.end_inode:
                return partition
        return self._partitions[0] if self._partitions else None

    def _require_partition(self, inode_id: int) -> MetaPartition:
        partition = self._locate_partition(inode_id)
        if partition is None:
            raise StoreIOError("No partition available")
        return partition

    def lookup_path(self, path: str) -> int:
        """Resolve ``path`` to an inode id, starting at the root."""
        current = ROOT_INODE
        for part in self.parse_path(path):
            partition = self._require_partition(current)
            try:
                dentry = partition.lookup_dentry(current, part)
            except MetadataError as exc:
                raise NotFoundError(f"Path not found: {part}") from exc
            current = dentry.inode_id
        return current

    def _lookup_parent(self, parent_path: str) -> int:
        try:
            return self.lookup_path(parent_path)
        except MetadataError as exc:
            raise NotFoundError("Parent directory not found") from exc

    def create(self, path: str, mode: FileMode, uid: int, gid: int) -> None:
        """Create a file or, when ``mode`` says so, a directory."""
        parent_path, name = split_parent_child(path)
        if not name:
            raise AlreadyExistsError("Root already exists")
        parent_inode = self._lookup_parent(parent_path)
        partition = self._require_partition(parent_inode)

        try:
            partition.lookup_dentry(parent_inode, name)
        except MetadataError:
            pass
        else:
            raise AlreadyExistsError("File already exists")

        new_inode = self.generate_inode_id()
        self._require_partition(new_inode).create_inode(new_inode, mode, uid, gid)
        file_type = FileType.DIRECTORY if mode.is_directory() else FileType.REGULAR
        partition.create_dentry(parent_inode, name, new_inode, file_type)

    def get_attr(self, path: str) -> InodeAttr:
        inode_id = self.lookup_path(path)
        return self._require_partition(inode_id).lookup(inode_id)

    def set_attr(self, path: str, attr: InodeAttr, to_set: int) -> None:
        """Merge the masked fields of ``attr`` and rewrite the inode.

        The inode record is recreated, so only mode, uid and gid persist.
        """
        inode_id = self.lookup_path(path)
        partition = self._require_partition(inode_id)
        current = partition.lookup(inode_id)
        mask = AttrMask(to_set & sum(AttrMask))
        if mask & AttrMask.MODE:
            current.mode = attr.mode
        if mask & AttrMask.UID:
            current.uid = attr.uid
        if mask & AttrMask.GID:
            current.gid = attr.gid
        if mask & AttrMask.SIZE:
            current.size = attr.size
        if mask & AttrMask.MTIME:
            current.mtime = attr.mtime
        partition.create_inode(current.inode_id, current.mode, current.uid, current.gid)

    def mkdir(self, path: str, mode: FileMode, uid: int, gid: int) -> None:
        self.create(path, FileMode(mode.mode | S_IFDIR), uid, gid)

    def _lookup_child(self, path: str, root_message: str, missing_message: str) -> tuple[MetaPartition, int, str, Dentry]:
        parent_path, name = split_parent_child(path)
        if not name:
            raise InvalidArgumentError(root_message)
        parent_inode = self.lookup_path(parent_path)
        partition = self._require_partition(parent_inode)
        try:
            dentry = partition.lookup_dentry(parent_inode, name)
        except MetadataError as exc:
            raise NotFoundError(missing_message) from exc
        return partition, parent_inode, name, dentry

    def unlink(self, path: str) -> None:
        """Remove the entry of a non-directory."""
        partition, parent_inode, name, dentry = self._lookup_child(
            path, "Cannot unlink root", "File not found"
        )
        if dentry.type == FileType.DIRECTORY:
            raise InvalidArgumentError("Cannot unlink directory, use rmdir")
        partition.delete_dentry(parent_inode, name)

    def rmdir(self, path: str) -> None:
        """Remove the entry of a directory."""
        partition, parent_inode, name, dentry = self._lookup_child(
            path, "Cannot remove root", "Directory not found"
        )
        if dentry.type != FileType.DIRECTORY:
            raise NotDirectoryError("Not a directory")
        partition.delete_dentry(parent_inode, name)

    def rename(self, oldpath: str, newpath: str) -> None:
        """Bind the inode at ``oldpath`` to ``newpath`` and drop the old entry."""
        old_parent, old_name = split_parent_child(oldpath)
        new_parent, new_name = split_parent_child(newpath)
        if not old_name or not new_name:
            raise InvalidArgumentError("Cannot rename root")

        old_parent_inode = self.lookup_path(old_parent)
        try:
            new_parent_inode = self.lookup_path(new_parent)
        except MetadataError as exc:
            raise NotFoundError("Target directory not found") from exc

        partition = self._require_partition(old_parent_inode)
        try:
            source = partition.lookup_dentry(old_parent_inode, old_name)
        except MetadataError as exc:
            raise NotFoundError("Source not found") from exc

        if old_parent_inode == new_parent_inode and old_name == new_name:
            return
        self._require_partition(new_parent_inode).create_dentry(
            new_parent_inode, new_name, source.inode_id, source.type
        )
        partition.delete_dentry(old_parent_inode, old_name)

    def readdir(self, path: str) -> list[Dentry]:
        """Entries of the directory at ``path``."""
        dir_inode = self.lookup_path(path)
        partition = self._require_partition(dir_inode)
        attr = partition.lookup(dir_inode)
        if not attr.mode.is_directory():
            raise NotDirectoryError("Not a directory")
        return partition.list_dentries(dir_inode)

    def get_layout(self, inode: int) -> FileLayout:
        """The slices recorded for ``inode``; empty for a file never written."""
        self._require_partition(inode)
        with self._layout_lock:
            layout = self._layouts.get(inode)
            if layout is None:
                return FileLayout(inode_id=inode, chunk_size=DEFAULT_CHUNK_SIZE)
            return copy.deepcopy(layout)

    def add_slice(self, inode: int, slice_info: SliceInfo) -> None:
        """Append a slice to the layout of ``inode``."""
        self._require_partition(inode)
        with self._layout_lock:
            layout = self._layouts.setdefault(
                inode, FileLayout(inode_id=inode, chunk_size=DEFAULT_CHUNK_SIZE)
            )
            layout.slices.append(copy.copy(slice_info))

    def update_size(self, inode: int, new_size: int) -> None:
        """Check the inode exists and rewrite its record with a fresh mtime."""
        partition = self._require_partition(inode)
        attr = partition.lookup(inode)
        attr.size = new_size
        attr.mtime = now_in_seconds()
        partition.create_inode(attr.inode_id, attr.mode, attr.uid, attr.gid)
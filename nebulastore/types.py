"""Core metadata types shared by the store, the codecs and the services."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field

S_IFMT = 0o170000
S_IFDIR = 0o040000
S_IFREG = 0o100000

DEFAULT_CHUNK_SIZE = 4 * 1024 * 1024


@dataclass(frozen=True)
class FileMode:
    """POSIX mode bits: file type and permissions."""

    mode: int = 0

    def is_directory(self) -> bool:
        return self.mode & S_IFMT == S_IFDIR


class FileType(enum.IntEnum):
    """Kind of object a directory entry points at."""

    REGULAR = 0
    DIRECTORY = 1
    SYMLINK = 2


@dataclass
class InodeAttr:
    """Attributes stored for one inode."""

    inode_id: int = 0
    mode: FileMode = field(default_factory=FileMode)
    uid: int = 0
    gid: int = 0
    size: int = 0
    mtime: int = 0
    ctime: int = 0
    nlink: int = 0


@dataclass
class Dentry:
    """A directory entry: a name bound to an inode."""

    name: str = ""
    inode_id: int = 0
    type: FileType = FileType.REGULAR


@dataclass
class SliceInfo:
    """A piece of file data kept under one storage key."""

    slice_id: int = 0
    offset: int = 0
    size: int = 0
    storage_key: str = ""


@dataclass
class FileLayout:
    """How a file's bytes are spread over slices."""

    inode_id: int = 0
    chunk_size: int = 0
    slices: list[SliceInfo] = field(default_factory=list)


class MetadataError(Exception):
    """Base class for metadata operation failures."""


class NotFoundError(MetadataError):
    """The requested inode, entry or path does not exist."""


class AlreadyExistsError(MetadataError):
    """The object to be created exists already."""


class InvalidArgumentError(MetadataError):
    """An argument is out of range or malformed."""


class NotDirectoryError(MetadataError):
    """A directory was expected but something else was found."""


class StoreIOError(MetadataError):
    """The underlying store failed or is not available."""


def now_in_seconds() -> int:
    """Current wall-clock time in whole seconds since the epoch."""
    return int(time.time())
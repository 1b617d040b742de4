"""Little-endian key and value encoding used by the metadata store."""

from __future__ import annotations

import struct

from nebulastore.types import (
    Dentry,
    FileLayout,
    FileMode,
    FileType,
    InodeAttr,
    SliceInfo,
)

_U64_MASK = 0xFFFF_FFFF_FFFF_FFFF
_U32_MASK = 0xFFFF_FFFF

_U64 = struct.Struct("<Q")
_DENTRY = struct.Struct("<QI")
_INODE = struct.Struct("<QIIIQQQQ")
_LAYOUT_HEAD = struct.Struct("<QI")
_SLICE_HEAD = struct.Struct("<QQQI")


def _u64(value: int) -> bytes:
    return _U64.pack(value & _U64_MASK)


def encode_dentry_key(parent: int, name: str) -> bytes:
    """Key of a directory entry: ``D`` + parent (8 bytes) + ``/`` + name."""
    return dentry_prefix(parent) + name.encode("utf-8")


def encode_inode_key(inode: int) -> bytes:
    """Key of an inode record: ``I`` + inode id (8 bytes)."""
    return b"I" + _u64(inode)


def encode_layout_key(inode: int) -> bytes:
    """Key of a file layout record: ``L`` + inode id (8 bytes)."""
    return b"L" + _u64(inode)


def dentry_prefix(parent: int) -> bytes:
    """Common prefix of every entry key under ``parent``."""
    return b"D" + _u64(parent) + b"/"


def encode_dentry_value(dentry: Dentry) -> bytes:
    """Encode inode id and type; the name lives in the key."""
    return _DENTRY.pack(dentry.inode_id & _U64_MASK, int(dentry.type) & _U32_MASK)


def decode_dentry_value(value: bytes) -> Dentry:
    """Decode an entry value; the returned name is empty."""
    if len(value) < _DENTRY.size:
        raise ValueError(f"invalid dentry value size: {len(value)}")
    inode_id, file_type = _DENTRY.unpack_from(value)
    return Dentry(name="", inode_id=inode_id, type=FileType(file_type))


def encode_inode_value(attr: InodeAttr) -> bytes:
    """Encode inode attributes into 52 bytes."""
    return _INODE.pack(
        attr.inode_id & _U64_MASK,
        attr.mode.mode & _U32_MASK,
        attr.uid & _U32_MASK,
        attr.gid & _U32_MASK,
        attr.size & _U64_MASK,
        attr.mtime & _U64_MASK,
        attr.ctime & _U64_MASK,
        attr.nlink & _U64_MASK,
    )


def decode_inode_value(value: bytes) -> InodeAttr:
    """Decode inode attributes written by :func:`encode_inode_value`."""
    if len(value) < _INODE.size:
        raise ValueError(f"invalid inode value size: {len(value)}")
    inode_id, mode, uid, gid, size, mtime, ctime, nlink = _INODE.unpack_from(value)
    return InodeAttr(
        inode_id=inode_id,
        mode=FileMode(mode),
        uid=uid,
        gid=gid,
        size=size,
        mtime=mtime,
        ctime=ctime,
        nlink=nlink,
    )


def encode_layout_value(layout: FileLayout) -> bytes:
    """Encode chunk size and slices; the inode id lives in the key."""
    parts = [_LAYOUT_HEAD.pack(layout.chunk_size & _U64_MASK, len(layout.slices))]
    for piece in layout.slices:
        key = piece.storage_key.encode("utf-8")
        parts.append(
            _SLICE_HEAD.pack(
                piece.slice_id & _U64_MASK,
                piece.offset & _U64_MASK,
                piece.size & _U64_MASK,
                len(key),
            )
        )
        parts.append(key)
    return b"".join(parts)


def decode_layout_value(value: bytes) -> FileLayout:
    """Decode a layout value, keeping every slice that is complete."""
    layout = FileLayout()
    if len(value) < _LAYOUT_HEAD.size:
        return layout
    layout.chunk_size, count = _LAYOUT_HEAD.unpack_from(value)
    pos = _LAYOUT_HEAD.size
    for _ in range(count):
        if pos + _SLICE_HEAD.size > len(value):
            break
        slice_id, offset, size, key_len = _SLICE_HEAD.unpack_from(value, pos)
        pos += _SLICE_HEAD.size
        key_end = pos + key_len
        if key_end > len(value):
            break
        layout.slices.append(
            SliceInfo(
                slice_id=slice_id,
                offset=offset,
                size=size,
                storage_key=bytes(value[pos:key_end]).decode("utf-8"),
            )
        )
        pos = key_end
    return layout
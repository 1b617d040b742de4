"""Self-describing big-endian encoding of metadata records."""

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

_NAME_LEN = struct.Struct(">I")
_DENTRY_TAIL = struct.Struct(">QI")
_INODE = struct.Struct(">QIIIQQQQ")
_LAYOUT_HEAD = struct.Struct(">QQI")
_SLICE_HEAD = struct.Struct(">QQQI")


def pack_dentry(dentry: Dentry) -> bytes:
    """Encode name length, name, inode id and type."""
    name = dentry.name.encode("utf-8")
    return (
        _NAME_LEN.pack(len(name))
        + name
        + _DENTRY_TAIL.pack(dentry.inode_id & _U64_MASK, int(dentry.type) & _U32_MASK)
    )


def unpack_dentry(data: bytes) -> Dentry:
    """Decode a record written by :func:`pack_dentry`."""
    if len(data) < _NAME_LEN.size + _DENTRY_TAIL.size:
        raise ValueError(f"dentry record too short: {len(data)} bytes")
    (name_len,) = _NAME_LEN.unpack_from(data)
    start = _NAME_LEN.size
    if len(data) < start + name_len + _DENTRY_TAIL.size:
        raise ValueError("dentry record truncated")
    name = bytes(data[start : start + name_len]).decode("utf-8")
    inode_id, file_type = _DENTRY_TAIL.unpack_from(data, start + name_len)
    return Dentry(name=name, inode_id=inode_id, type=FileType(file_type))


def pack_inode(attr: InodeAttr) -> bytes:
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


def unpack_inode(data: bytes) -> InodeAttr:
    """Decode a record written by :func:`pack_inode`."""
    if len(data) < _INODE.size:
        raise ValueError(f"inode record too short: {len(data)} bytes")
    inode_id, mode, uid, gid, size, mtime, ctime, nlink = _INODE.unpack_from(data)
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


def pack_layout(layout: FileLayout) -> bytes:
    """Encode inode id, chunk size and every slice."""
    parts = [
        _LAYOUT_HEAD.pack(
            layout.inode_id & _U64_MASK,
            layout.chunk_size & _U64_MASK,
            len(layout.slices),
        )
    ]
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


def unpack_layout(data: bytes) -> FileLayout:
    """Decode a record written by :func:`pack_layout`, dropping incomplete slices."""
    if len(data) < _LAYOUT_HEAD.size:
        raise ValueError(f"layout record too short: {len(data)} bytes")
    inode_id, chunk_size, count = _LAYOUT_HEAD.unpack_from(data)
    layout = FileLayout(inode_id=inode_id, chunk_size=chunk_size)
    pos = _LAYOUT_HEAD.size
    for _ in range(count):
        if pos + _SLICE_HEAD.size > len(data):
            break
        slice_id, offset, size, key_len = _SLICE_HEAD.unpack_from(data, pos)
        pos += _SLICE_HEAD.size
        key_end = pos + key_len
        if key_end > len(data):
            break
        layout.slices.append(
            SliceInfo(
                slice_id=slice_id,
                offset=offset,
                size=size,
                storage_key=bytes(data[pos:key_end]).decode("utf-8"),
            )
        )
        pos = key_end
    return layout
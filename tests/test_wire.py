import pytest

from nebulastore.types import Dentry, FileLayout, FileMode, FileType, InodeAttr, SliceInfo
from nebulastore.wire import (
    pack_dentry,
    pack_inode,
    pack_layout,
    unpack_dentry,
    unpack_inode,
    unpack_layout,
)


def test_pack_dentry_bytes():
    data = pack_dentry(Dentry("a", 1, FileType.DIRECTORY))
    assert data == b"\x00\x00\x00\x01a" + b"\x00" * 7 + b"\x01" + b"\x00\x00\x00\x01"


def test_dentry_round_trip():
    dentry = Dentry("test.txt", 100, FileType.REGULAR)
    assert unpack_dentry(pack_dentry(dentry)) == dentry


def test_dentry_too_short():
    with pytest.raises(ValueError):
        unpack_dentry(b"\x00" * 15)


def test_dentry_truncated_name():
    data = pack_dentry(Dentry("test.txt", 100, FileType.REGULAR))
    with pytest.raises(ValueError):
        unpack_dentry(data[:-1])


def test_inode_round_trip():
    attr = InodeAttr(
        inode_id=100,
        mode=FileMode(0o100644),
        uid=1,
        gid=2,
        size=1 << 33,
        mtime=1_700_000_000,
        ctime=1_700_000_000,
        nlink=1,
    )
    data = pack_inode(attr)
    assert len(data) == 52
    assert unpack_inode(data) == attr


def test_inode_is_big_endian():
    data = pack_inode(InodeAttr(inode_id=100))
    assert data[:8] == (100).to_bytes(8, "big")


def test_inode_too_short():
    with pytest.raises(ValueError):
        unpack_inode(b"\x00" * 51)


def test_layout_round_trip_keeps_inode():
    layout = FileLayout(
        inode_id=42,
        chunk_size=4 * 1024 * 1024,
        slices=[SliceInfo(1, 0, 10, "chunks/42/0"), SliceInfo(2, 10, 5, "chunks/42/10")],
    )
    assert unpack_layout(pack_layout(layout)) == layout


def test_layout_too_short():
    with pytest.raises(ValueError):
        unpack_layout(b"\x00" * 19)


def test_layout_truncated_drops_partial_slice():
    layout = FileLayout(
        inode_id=3,
        chunk_size=64,
        slices=[SliceInfo(1, 0, 10, "one"), SliceInfo(2, 10, 10, "two")],
    )
    decoded = unpack_layout(pack_layout(layout)[:-2])
    assert decoded.inode_id == 3
    assert decoded.slices == layout.slices[:1]


def test_empty_layout_round_trip():
    layout = FileLayout(inode_id=9, chunk_size=1)
    assert unpack_layout(pack_layout(layout)) == layout
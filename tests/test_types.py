import time

import pytest

from nebulastore.types import (
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


def test_directory_mode_is_directory():
    assert FileMode(0o040000 | 0o755).is_directory() is True


def test_regular_file_mode_is_not_directory():
    assert FileMode(0o100644).is_directory() is False


def test_permission_bits_alone_are_not_directory():
    assert FileMode(0o755).is_directory() is False


def test_directory_flag_constant_matches_mode():
    assert FileMode(S_IFDIR).is_directory()


def test_default_inode_attr_has_empty_mode():
    attr = InodeAttr()
    assert attr.mode == FileMode()
    assert attr.mode.is_directory() is False


def test_default_dentry_is_regular():
    assert Dentry().type is FileType.REGULAR


def test_layout_slices_not_shared():
    first = FileLayout()
    second = FileLayout()
    first.slices.append(SliceInfo(slice_id=1, storage_key="k"))
    assert second.slices == []
    assert len(first.slices) == 1


@pytest.mark.parametrize(
    "error",
    [NotFoundError, AlreadyExistsError, InvalidArgumentError, NotDirectoryError, StoreIOError],
)
def test_errors_share_base(error):
    err = error("boom")
    assert str(err) == "boom"
    with pytest.raises(MetadataError, match="boom"):
        raise err


def test_now_in_seconds_tracks_wall_clock():
    before = int(time.time())
    value = now_in_seconds()
    after = int(time.time())
    assert before <= value <= after
from nebulastore.btree_index import BTreeIndex, OrderedIndex
from nebulastore.types import Dentry, FileMode, FileType, InodeAttr


def test_insert_refuses_duplicate():
    index = OrderedIndex()
    assert index.insert(5, "a") is True
    assert index.insert(5, "b") is False
    assert index.get(5) == "a"


def test_get_missing_returns_none():
    assert OrderedIndex().get(1) is None


def test_delete_reports_presence():
    index = OrderedIndex()
    index.insert(1, "x")
    assert index.delete(1) is True
    assert index.delete(1) is False
    assert len(index) == 0


def test_iteration_is_sorted():
    index = OrderedIndex()
    for key in (30, 10, 20):
        index.insert(key, str(key))
    assert list(index) == [10, 20, 30]
    index.delete(20)
    assert list(index) == [10, 30]


def test_inode_operations():
    index = BTreeIndex()
    attr = InodeAttr(inode_id=100, mode=FileMode(0o100644))
    assert index.insert_inode(100, attr) is True
    assert index.insert_inode(100, InodeAttr(inode_id=100)) is False
    assert index.get_inode(100) == attr
    assert index.inode_count() == 1
    assert index.delete_inode(100) is True
    assert index.get_inode(100) is None
    assert index.inode_count() == 0


def test_dentry_operations():
    index = BTreeIndex()
    entry = Dentry("test.txt", 100, FileType.REGULAR)
    assert index.insert_dentry(1, "test.txt", entry) is True
    assert index.insert_dentry(1, "test.txt", entry) is False
    assert index.get_dentry(1, "test.txt") == entry
    assert index.get_dentry(2, "test.txt") is None
    assert index.dentry_count() == 1
    assert index.delete_dentry(1, "test.txt") is True
    assert index.delete_dentry(1, "test.txt") is False
    assert index.dentry_count() == 0


def test_same_name_under_different_parents():
    index = BTreeIndex()
    index.insert_dentry(1, "a", Dentry("a", 10))
    index.insert_dentry(2, "a", Dentry("a", 20))
    assert index.get_dentry(1, "a").inode_id == 10
    assert index.get_dentry(2, "a").inode_id == 20
    assert index.dentry_count() == 2
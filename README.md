# nebulastore

A metadata and namespace layer for a file store. It covers inodes, directory
entries, file layouts made of slices, and partitions that each own a range of
inode numbers. It also defines an interface and a registry for storage
backends. It uses only the Python standard library.

## Install

    pip install .

To run the tests:

    pip install ".[test]"
    pytest

## Modules

- `nebulastore.types` holds the core records: `FileMode` (with `is_directory()`),
  `FileType`, `InodeAttr`, `Dentry`, `SliceInfo` and `FileLayout`. It also holds
  `now_in_seconds()` and the error hierarchy rooted at `MetadataError`:
  `NotFoundError`, `AlreadyExistsError`, `InvalidArgumentError`,
  `NotDirectoryError` and `StoreIOError`.
- `nebulastore.codec` holds the little-endian key and value encoding used by the
  store. Entry keys are `D` + parent + `/` + name. Inode keys are `I` + id and
  layout keys are `L` + id.
- `nebulastore.wire` is a big-endian, self-describing record encoding:
  `pack_dentry`/`unpack_dentry`, `pack_inode`/`unpack_inode` and
  `pack_layout`/`unpack_layout`.
- `nebulastore.btree_index` provides `OrderedIndex`, a sorted map that refuses to
  overwrite a key. It also provides `BTreeIndex`, an in-memory index of inodes
  and of `(parent, name)` entries.
- `nebulastore.store` provides `MetadataStore`, an ordered key-value table kept
  in an SQLite file under `StoreConfig.db_path`. It does lookups, deletes and
  prefix listing of a directory's entries. Its `Transaction` buffers writes and
  applies them atomically on `commit()`. Used as a context manager, it commits
  on success and rolls back on an exception.
- `nebulastore.partition` provides `MetaPartition`, which serves one inode range
  `[start_inode, end_inode)` from its own store. It refuses to create inodes
  outside that range.
- `nebulastore.service` provides `MetadataService`, which resolves paths from the
  root inode (1) across partitions. It supports `create`, `mkdir`, `get_attr`,
  `set_attr` (fields chosen with `AttrMask`), `unlink`, `rmdir`, `rename`,
  `readdir`, `get_layout`, `add_slice` and `update_size`. It also provides
  `split_parent_child`.
- `nebulastore.slice_tree` provides `SliceTree`, a binary search tree of a file's
  slices. A newer insert cuts away the parts of older slices that it covers.
- `nebulastore.backend` provides `StorageBackend`, the abstract interface for a
  blob store, and `CapacityInfo`.
- `nebulastore.backend_factory` provides `BackendFactory` and the process-wide
  instance `get_backend_factory()`. It also provides the `register_backend(name)`
  decorator and the `BackendConfig` record.
- `nebulastore.namespace_service` provides `PathConverter`, which translates
  between `s3://bucket/key` and `/key`. It also provides `NamespaceService`,
  which reads and writes file data through a `MetadataService` and a
  `StorageBackend`.
- `nebulastore.logger` provides `Logger` with a gather level per `SubsysID`. It
  also provides `get_logger()` and `dout(level, subsys)`, which builds a log line
  that is written on `commit()` or at the end of a `with` block. Lines have the
  form `timestamp thread [subsystem] level message`.
- `nebulastore.raft` holds the Raft records (`LogEntry`, `RaftConfig`, the state
  records, `RaftRole`, `CmdType`), `ApplyResult` and the abstract
  `StateMachine`.
- `nebulastore.ioring` provides `RingBuffer` and `IoRing`, a pair of submission
  and completion rings with a table of `IoArgs`.

## Example

    from nebulastore.partition import MetaPartition, PartitionConfig
    from nebulastore.service import MetadataService
    from nebulastore.types import FileMode

    partition = MetaPartition(PartitionConfig(start_inode=1, end_inode=1_000_000, data_dir="/tmp/meta"))
    partition.init()
    service = MetadataService([partition])

    service.parse_path("/a/b/c")                  # ['a', 'b', 'c']
    service.mkdir("/data", FileMode(0o755), 0, 0)
    service.create("/data/a.txt", FileMode(0o100644), 0, 0)
    [d.name for d in service.readdir("/data")]    # ['a.txt']

    from nebulastore.logger import dout, get_logger, SubsysID

    get_logger().init("nebula.log")
    with dout(1, SubsysID.METADATA) as line:
        line.write("created ", "/data/a.txt")

Failed operations raise an exception from the `MetadataError` hierarchy. They
do not return a status code.

## What it does not do

- There is no command-line program and no HTTP or S3 server.
- No concrete storage backend ships with the package. `StorageBackend` is
  abstract, and the backend factory starts empty. You register your own
  creators with it.
- The root directory has no inode record of its own. Paths resolve from inode
  1, but `get_attr("/")` and `readdir("/")` raise `NotFoundError`.
- `MetadataService` keeps file layouts (`add_slice`/`get_layout`) in memory
  only. They are not written to the store. `set_attr` and `update_size` rewrite
  the inode record, so only mode, uid and gid persist. Size is reset to 0 and
  the times to the current time.
- `MetaPartition.should_split()` always returns False, and `split()` returns
  `(None, None)`.
- The Raft module holds data types and an interface only. It does not contain a
  consensus implementation.
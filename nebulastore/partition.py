"""A metadata partition owning a contiguous range of inode ids."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from nebulastore.store import MetadataStore, StoreConfig
from nebulastore.types import (
    Dentry,
    FileMode,
    FileType,
    InodeAttr,
    InvalidArgumentError,
    StoreIOError,
)

_log = logging.getLogger(__name__)


@dataclass
class PartitionConfig:
    """Inode range ``[start_inode, end_inode)`` and the store directory."""

    start_inode: int
    end_inode: int
    data_dir: str


class ScaleMode(enum.Enum):
    STANDALONE = "standalone"
    DISTRIBUTED = "distributed"


class MetaPartition:
    """Serves metadata for one inode range from its own store."""

    def __init__(self, config: PartitionConfig) -> None:
        self.config = config
        self._mode = ScaleMode.STANDALONE
        self._store: MetadataStore | None = None

    def init(self) -> None:
        store = MetadataStore(StoreConfig(db_path=self.config.data_dir))
        store.init()
        self._store = store
        _log.info(
            "MetaPartition initialized: range [%d, %d)",
            self.config.start_inode,
            self.config.end_inode,
        )

    def __enter__(self) -> MetaPartition:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._store is not None:
            self._store.close()
            self._store = None

    def scale_mode(self) -> ScaleMode:
        return self._mode

    def _require_store(self) -> MetadataStore:
        if self._store is None:
            raise StoreIOError("Store not initialized")
        return self._store

    def lookup(self, inode_id: int) -> InodeAttr:
        return self._require_store().lookup_inode(inode_id)

    def lookup_dentry(self, parent: int, name: str) -> Dentry:
        return self._require_store().lookup_dentry(parent, name)

    def create_dentry(self, parent: int, name: str, inode: int, file_type: FileType) -> None:
        with self._require_store().begin_transaction() as txn:
            txn.create_dentry(parent, name, inode, file_type)

    def create_inode(self, inode: int, mode: FileMode, uid: int, gid: int) -> None:
        store = self._require_store()
        if not self.config.start_inode <= inode < self.config.end_inode:
            raise InvalidArgumentError("Inode ID out of range")
        with store.begin_transaction() as txn:
            txn.create_inode(inode, mode, uid, gid)

    def delete_dentry(self, parent: int, name: str) -> None:
        self._require_store().delete_dentry(parent, name)

    def delete_inode(self, inode: int) -> None:
        self._require_store().delete_inode(inode)

    def list_dentries(self, parent: int) -> list[Dentry]:
        return self._require_store().list_dentries(parent)

    def should_split(self) -> bool:
        return False

    def split(self) -> tuple[MetaPartition | None, MetaPartition | None]:
        return None, None
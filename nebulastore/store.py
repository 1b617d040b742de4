"""Persistent metadata store keeping inodes, entries and layouts in an ordered KV table."""

from __future__ import annotations

import logging
import sqlite3
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from nebulastore.codec import (
    decode_dentry_value,
    decode_inode_value,
    decode_layout_value,
    dentry_prefix,
    encode_dentry_key,
    encode_dentry_value,
    encode_inode_key,
    encode_inode_value,
    encode_layout_key,
)
from nebulastore.types import (
    DEFAULT_CHUNK_SIZE,
    Dentry,
    FileLayout,
    FileMode,
    FileType,
    InodeAttr,
    NotFoundError,
    StoreIOError,
    now_in_seconds,
)

_log = logging.getLogger(__name__)

_DB_FILE = "metadata.sqlite"
_SCHEMA = "CREATE TABLE IF NOT EXISTS kv (key BLOB PRIMARY KEY, value BLOB NOT NULL) WITHOUT ROWID"


@dataclass
class StoreConfig:
    """Where the store lives and how it is opened."""

    db_path: str
    create_if_missing: bool = True
    cache_size: int = 1 << 30
    max_open_files: int = 100000


class MetadataStore:
    """Ordered key-value store for inode, entry and layout records."""

    def __init__(self, config: StoreConfig) -> None:
        self.config = config
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    def init(self) -> None:
        """Open the store, creating it when the configuration allows."""
        directory = Path(self.config.db_path)
        db_file = directory / _DB_FILE
        if not db_file.exists() and not self.config.create_if_missing:
            raise StoreIOError(f"Failed to open store: {db_file} does not exist")
        try:
            directory.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(
                str(db_file), check_same_thread=False, isolation_level=None
            )
            conn.execute(_SCHEMA)
        except (OSError, sqlite3.Error) as exc:
            raise StoreIOError(f"Failed to open store: {exc}") from exc
        with self._lock:
            if self._conn is not None:
                self._conn.close()
            self._conn = conn
        _log.info("Metadata store initialized: %s", self.config.db_path)

    def close(self) -> None:
        """Close the store; it can be opened again with :meth:`init`."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> MetadataStore:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def begin_transaction(self) -> Transaction:
        """Start a batch of writes applied atomically on commit."""
        self._connection()
        return Transaction(self)

    def lookup_dentry(self, parent: int, name: str) -> Dentry:
        value = self._get(encode_dentry_key(parent, name))
        if value is None:
            raise NotFoundError(f"Dentry not found: {name}")
        dentry = decode_dentry_value(value)
        dentry.name = name
        return dentry

    def lookup_inode(self, inode: int) -> InodeAttr:
        value = self._get(encode_inode_key(inode))
        if value is None:
            raise NotFoundError(f"Inode not found: {inode}")
        return decode_inode_value(value)

    def lookup_layout(self, inode: int) -> FileLayout:
        """Return the layout of ``inode``; a file without one gets an empty layout."""
        value = self._get(encode_layout_key(inode))
        if value is None:
            return FileLayout(inode_id=inode, chunk_size=DEFAULT_CHUNK_SIZE)
        layout = decode_layout_value(value)
        layout.inode_id = inode
        return layout

    def delete_dentry(self, parent: int, name: str) -> None:
        self._delete(encode_dentry_key(parent, name))

    def delete_inode(self, inode: int) -> None:
        self._delete(encode_inode_key(inode))

    def delete_layout(self, inode: int) -> None:
        self._delete(encode_layout_key(inode))

    def list_dentries(self, parent: int) -> list[Dentry]:
        """All entries under ``parent``, ordered by encoded name."""
        prefix = dentry_prefix(parent)
        upper = prefix[:-1] + bytes([prefix[-1] + 1])
        with self._lock:
            conn = self._connection()
            try:
                rows = conn.execute(
                    "SELECT key, value FROM kv WHERE key >= ? AND key < ? ORDER BY key",
                    (prefix, upper),
                ).fetchall()
            except sqlite3.Error as exc:
                raise StoreIOError(f"Failed to list dentries: {exc}") from exc
        entries = []
        for key, value in rows:
            dentry = decode_dentry_value(value)
            dentry.name = bytes(key[len(prefix):]).decode("utf-8")
            entries.append(dentry)
        return entries

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreIOError("Store not initialized")
        return self._conn

    def _get(self, key: bytes) -> bytes | None:
        with self._lock:
            conn = self._connection()
            try:
                row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            except sqlite3.Error as exc:
                raise StoreIOError(f"Failed to read key: {exc}") from exc
        return None if row is None else bytes(row[0])

    def _delete(self, key: bytes) -> None:
        with self._lock:
            conn = self._connection()
            try:
                conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            except sqlite3.Error as exc:
                raise StoreIOError(f"Failed to delete key: {exc}") from exc

    def _write_batch(self, items: Iterable[tuple[bytes, bytes]]) -> None:
        with self._lock:
            conn = self._connection()
            try:
                conn.execute("BEGIN")
                conn.executemany(
                    "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)", list(items)
                )
                conn.execute("COMMIT")
            except sqlite3.Error as exc:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise StoreIOError(f"Transaction commit failed: {exc}") from exc


class Transaction:
    """Buffered writes against a :class:`MetadataStore`."""

    def __init__(self, store: MetadataStore) -> None:
        self._store = store
        self._batch: dict[bytes, bytes] = {}
        self._finished = False

    def create_dentry(self, parent: int, name: str, inode: int, file_type: FileType) -> None:
        dentry = Dentry(name=name, inode_id=inode, type=FileType(file_type))
        self._batch[encode_dentry_key(parent, name)] = encode_dentry_value(dentry)

    def create_inode(self, inode: int, mode: FileMode, uid: int, gid: int) -> None:
        now = now_in_seconds()
        attr = InodeAttr(
            inode_id=inode,
            mode=mode,
            uid=uid,
            gid=gid,
            size=0,
            mtime=now,
            ctime=now,
            nlink=1,
        )
        self._batch[encode_inode_key(inode)] = encode_inode_value(attr)

    def commit(self) -> None:
        """Apply every buffered write at once."""
        self._store._write_batch(self._batch.items())
        self._batch.clear()
        self._finished = True

    def rollback(self) -> None:
        """Discard every buffered write."""
        self._batch.clear()
        self._finished = True

    def __enter__(self) -> Transaction:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._finished:
            return
        if exc_type is None:
            self.commit()
        else:
            self.rollback()
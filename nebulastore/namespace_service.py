"""Unified S3 and POSIX view over metadata and object storage."""

from __future__ import annotations

from dataclasses import dataclass

from nebulastore.backend import StorageBackend
from nebulastore.service import MetadataService
from nebulastore.types import Dentry, FileLayout, InodeAttr, NotFoundError, SliceInfo

_S3_SCHEME = "s3://"


@dataclass
class ParsedPath:
    """A path seen both as a POSIX path and as an S3 bucket and key."""

    posix_path: str = ""
    bucket: str = ""
    key: str = ""
    is_s3: bool = False


class PathConverter:
    """Translates between ``s3://bucket/key`` and ``/key`` paths."""

    def __init__(self, default_bucket: str) -> None:
        self.default_bucket = default_bucket

    def s3_to_posix(self, s3_path: str) -> str:
        if not s3_path.startswith(_S3_SCHEME):
            return s3_path
        pos = s3_path.find("/", len(_S3_SCHEME))
        if pos == -1:
            return "/"
        return s3_path[pos:]

    def posix_to_s3(self, posix_path: str) -> str:
        return f"{_S3_SCHEME}{self.default_bucket}{posix_path}"

    def parse(self, path: str) -> ParsedPath:
        if path.startswith(_S3_SCHEME):
            rest = path[len(_S3_SCHEME):]
            bucket, sep, key = rest.partition("/")
            if not sep:
                return ParsedPath(posix_path="/", bucket=bucket, key="", is_s3=True)
            return ParsedPath(posix_path="/" + key, bucket=bucket, key=key, is_s3=True)
        return ParsedPath(
            posix_path=path,
            bucket=self.default_bucket,
            key=path[1:] if len(path) > 1 else "",
            is_s3=False,
        )


class NamespaceService:
    """File operations on S3 or POSIX paths backed by metadata and storage."""

    def __init__(
        self,
        default_bucket: str,
        metadata_service: MetadataService,
        storage_backend: StorageBackend,
    ) -> None:
        self.converter = PathConverter(default_bucket)
        self._metadata = metadata_service
        self._storage = storage_backend

    def _resolve(self, path: str) -> str:
        return self.converter.parse(path).posix_path

    def get_attr(self, path: str) -> InodeAttr:
        return self._metadata.get_attr(self._resolve(path))

    def get_layout(self, path: str) -> FileLayout:
        inode_id = self._metadata.lookup_path(self._resolve(path))
        return self._metadata.get_layout(inode_id)

    def read(self, path: str, offset: int, size: int) -> bytes:
        """Read up to ``size`` bytes at ``offset`` from the slice covering it."""
        inode_id = self._metadata.lookup_path(self._resolve(path))
        layout = self._metadata.get_layout(inode_id)
        for piece in layout.slices:
            if piece.offset <= offset < piece.offset + piece.size:
                slice_offset = offset - piece.offset
                read_size = min(size, piece.size - slice_offset)
                return self._storage.get_range(piece.storage_key, slice_offset, read_size)
        raise NotFoundError("No slice found for offset")

    def write(self, path: str, data: bytes, offset: int) -> None:
        """Store ``data`` as a new slice at ``offset`` and record it."""
        inode_id = self._metadata.lookup_path(self._resolve(path))
        storage_key = f"chunks/{inode_id}/{offset}"
        self._storage.put(storage_key, data)
        self._metadata.add_slice(
            inode_id,
            SliceInfo(slice_id=0, offset=offset, size=len(data), storage_key=storage_key),
        )
        self._metadata.update_size(inode_id, offset + len(data))

    def readdir(self, path: str) -> list[Dentry]:
        return self._metadata.readdir(self._resolve(path))
"""Interface of object storage backends holding file data."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Iterable


@dataclass
class CapacityInfo:
    """Space figures of a backend, in bytes."""

    total_bytes: int = 0
    used_bytes: int = 0
    available_bytes: int = 0


class StorageBackend(abc.ABC):
    """A key-value store of byte blobs.

    ``get`` raises :class:`nebulastore.types.NotFoundError` for a missing key.
    """

    @abc.abstractmethod
    def put(self, key: str, data: bytes) -> None:
        """Store ``data`` under ``key``, replacing what was there."""

    @abc.abstractmethod
    def get(self, key: str) -> bytes:
        """Return the bytes stored under ``key``."""

    @abc.abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``."""

    @abc.abstractmethod
    def exists(self, key: str) -> bool:
        """Whether ``key`` is stored."""

    def get_range(self, key: str, offset: int, size: int) -> bytes:
        """Return up to ``size`` bytes of ``key`` starting at ``offset``."""
        if offset < 0 or size < 0:
            raise ValueError("offset and size must not be negative")
        return self.get(key)[offset : offset + size]

    def batch_get(self, keys: Iterable[str]) -> list[bytes]:
        """Return the data of every key, in the order given."""
        return [self.get(key) for key in keys]

    @abc.abstractmethod
    def health_check(self) -> None:
        """Raise if the backend cannot serve requests."""

    @abc.abstractmethod
    def get_capacity(self) -> CapacityInfo:
        """Report the backend's space."""
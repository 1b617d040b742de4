"""Registry creating storage backends by driver name."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable

from nebulastore.backend import StorageBackend


@dataclass
class BackendConfig:
    """Settings handed to a backend creator."""

    type: str = ""
    data_dir: str = ""
    endpoint: str = ""
    access_key: str = ""
    secret_key: str = ""
    region: str = ""
    bucket: str = ""


BackendCreator = Callable[[BackendConfig], StorageBackend]


class BackendFactory:
    """Maps driver names to functions that build backends."""

    def __init__(self) -> None:
        self._creators: dict[str, BackendCreator] = {}
        self._lock = threading.Lock()

    def register(self, name: str, creator: BackendCreator) -> None:
        """Register ``creator`` under ``name``, replacing an earlier one."""
        with self._lock:
            self._creators[name] = creator

    def create(self, name: str, config: BackendConfig) -> StorageBackend:
        """Build a backend with the driver ``name``; KeyError if unknown."""
        with self._lock:
            creator = self._creators.get(name)
        if creator is None:
            raise KeyError(f"unknown storage backend: {name}")
        return creator(config)

    def drivers(self) -> list[str]:
        """Names of the registered drivers, sorted."""
        with self._lock:
            return sorted(self._creators)


_FACTORY = BackendFactory()


def get_backend_factory() -> BackendFactory:
    """The process-wide backend factory."""
    return _FACTORY


def register_backend(name: str) -> Callable[[BackendCreator], BackendCreator]:
    """Decorator registering a creator with the process-wide factory."""

    def decorate(creator: BackendCreator) -> BackendCreator:
        _FACTORY.register(name, creator)
        return creator

    return decorate
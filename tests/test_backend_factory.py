import pytest

from nebulastore.backend import CapacityInfo, StorageBackend
from nebulastore.backend_factory import (
    BackendConfig,
    BackendFactory,
    get_backend_factory,
    register_backend,
)


class DirBackend(StorageBackend):
    def __init__(self, data_dir):
        self.data_dir = data_dir

    def put(self, key, data):
        pass

    def get(self, key):
        return b""

    def delete(self, key):
        pass

    def exists(self, key):
        return False

    def health_check(self):
        return None

    def get_capacity(self):
        return CapacityInfo()


def test_create_passes_config():
    factory = BackendFactory()
    factory.register("dir", lambda cfg: DirBackend(cfg.data_dir))
    backend = factory.create("dir", BackendConfig(type="dir", data_dir="/data"))
    assert isinstance(backend, DirBackend)
    assert backend.data_dir == "/data"


def test_unknown_driver_raises():
    with pytest.raises(KeyError):
        BackendFactory().create("nope", BackendConfig())


def test_drivers_lists_registered_names():
    factory = BackendFactory()
    assert factory.drivers() == []
    factory.register("s3", lambda cfg: DirBackend(""))
    factory.register("local", lambda cfg: DirBackend(""))
    assert factory.drivers() == ["local", "s3"]


def test_register_replaces_creator():
    factory = BackendFactory()
    factory.register("dir", lambda cfg: DirBackend("first"))
    factory.register("dir", lambda cfg: DirBackend("second"))
    assert factory.create("dir", BackendConfig()).data_dir == "second"
    assert factory.drivers() == ["dir"]


def test_register_backend_decorator_uses_global_factory():
    @register_backend("decorated-test-driver")
    def make(cfg):
        return DirBackend(cfg.bucket)

    factory = get_backend_factory()
    assert factory is get_backend_factory()
    assert "decorated-test-driver" in factory.drivers()
    assert factory.create("decorated-test-driver", BackendConfig(bucket="b")).data_dir == "b"
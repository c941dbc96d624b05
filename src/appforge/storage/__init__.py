from appforge.config import Settings

from .base import KeyValueStorage
from .file import FileStorage
from .memory import MemoryStorage
from .redis import RedisStorage


def open_storage(settings: Settings) -> KeyValueStorage:
    """Build and open the storage backend selected by configuration."""
    storage: KeyValueStorage
    if settings.storage_backend == "memory":
        storage = MemoryStorage(max_bytes=settings.storage_max_bytes)
    elif settings.storage_backend == "redis":
        storage = RedisStorage(redis_url=settings.redis_url)
    else:
        storage = FileStorage(settings.storage_path, max_bytes=settings.storage_max_bytes)
    storage.open()
    return storage


__all__ = ["FileStorage", "KeyValueStorage", "MemoryStorage", "RedisStorage", "open_storage"]

from appforge.errors import StorageFault


class MemoryStorage:
    """In-memory key-value storage for tests and ephemeral sessions."""

    def __init__(self, max_bytes: int | None = None):
        self.data: dict[str, str] = {}
        self.max_bytes = max_bytes
        self.opened = False

    def open(self) -> None:
        self.opened = True

    def close(self) -> None:
        self.opened = False

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.max_bytes is not None and len(value.encode()) > self.max_bytes:
            raise StorageFault(
                f"Storage capacity exceeded for {key!r}: limit {self.max_bytes} bytes"
            )
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)

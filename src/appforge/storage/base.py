from typing import Protocol


class KeyValueStorage(Protocol):
    """Key-value medium holding serialized project collections.

    Implementations raise ``StorageFault`` when the medium cannot be read
    or written.
    """

    def open(self) -> None:
        """Acquire the underlying medium."""
        ...

    def close(self) -> None:
        """Release the underlying medium."""
        ...

    def get(self, key: str) -> str | None:
        """Return the value stored under ``key`` or None."""
        ...

    def set(self, key: str, value: str) -> None:
        """Replace the value stored under ``key``."""
        ...

    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""
        ...

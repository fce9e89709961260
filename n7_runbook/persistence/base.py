from typing import Optional, Protocol


class KeyValueStore(Protocol):
    """
    Durable key-value collaborator used by the status store.
    read() returns None when nothing has been stored under the key yet.
    """

    def read(self, key: str) -> Optional[bytes]:
        ...

    def write(self, key: str, value: bytes) -> None:
        ...

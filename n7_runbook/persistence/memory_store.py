from typing import Dict, Optional


class InMemoryKeyValueStore:
    """Volatile store for tests and throwaway rehearsal sessions."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self.data: Dict[str, bytes] = dict(initial or {})
        self.writes = 0

    def read(self, key: str) -> Optional[bytes]:
        return self.data.get(key)

    def write(self, key: str, value: bytes) -> None:
        self.data[key] = value
        self.writes += 1

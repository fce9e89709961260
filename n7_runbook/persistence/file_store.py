"""
File-backed key-value store.

Each key maps to one file inside the state directory. Writes go to a temporary
sibling first and are swapped in with os.replace, so a crash mid-write leaves
the previous progress intact. Files are owner-readable only (0600) since they
describe an ongoing incident.
"""
import logging
import os
import re
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger("n7-runbook.file-store")

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class FileKeyValueStore:
    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        return self.directory / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def read(self, key: str) -> Optional[bytes]:
        p = self._path_for(key)
        if not p.exists():
            return None
        return p.read_bytes()

    def write(self, key: str, value: bytes) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        p = self._path_for(key)
        tmp = p.with_name(p.name + ".tmp")
        tmp.write_bytes(value)
        os.chmod(tmp, 0o600)
        os.replace(tmp, p)
        logger.debug(f"Wrote {len(value)} bytes to {p}")

"""Storage backends for cached images.

A store holds at most one file per key. Keys are hex digests; the stored
file name is the key plus an image extension.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class ImageStore(Protocol):
    def has(self, key: str) -> bool: ...

    def find(self, key: str) -> Optional[str]: ...

    def put(self, key: str, data: bytes, ext: str) -> str: ...

    def list_keys(self) -> list[str]: ...

    def delete(self, key: str) -> None: ...


def key_of(filename: str) -> str:
    """Key part of a stored file name ("<key>.<ext>")."""
    return filename.split(".", 1)[0]


class LocalImageStore:
    """Flat directory of <key><ext> files."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _files(self) -> list[Path]:
        if not self.directory.is_dir():
            return []
        return sorted(p for p in self.directory.iterdir() if p.is_file() and not p.name.startswith("."))

    def has(self, key: str) -> bool:
        return self.find(key) is not None

    def find(self, key: str) -> Optional[str]:
        """File name stored under `key`, whatever its extension."""
        for path in self._files():
            if key_of(path.name) == key:
                return path.name
        return None

    def put(self, key: str, data: bytes, ext: str) -> str:
        self.directory.mkdir(parents=True, exist_ok=True)
        filename = f"{key}{ext}"
        # Written under a temporary name so readers never see a partial file
        fd, tmp = tempfile.mkstemp(prefix=".", dir=self.directory)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.chmod(tmp, 0o644)
            os.replace(tmp, self.directory / filename)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        return filename

    def list_keys(self) -> list[str]:
        return sorted({key_of(path.name) for path in self._files()})

    def delete(self, key: str) -> None:
        for path in self._files():
            if key_of(path.name) == key:
                path.unlink(missing_ok=True)
                logger.debug("Deleted cached image %s", path.name)


class MemoryImageStore:
    """In-memory store, for tests and dry runs."""

    def __init__(self):
        self.files: dict[str, tuple[str, bytes]] = {}

    def has(self, key: str) -> bool:
        return key in self.files

    def find(self, key: str) -> Optional[str]:
        if key not in self.files:
            return None
        ext, _ = self.files[key]
        return f"{key}{ext}"

    def put(self, key: str, data: bytes, ext: str) -> str:
        self.files[key] = (ext, data)
        return f"{key}{ext}"

    def list_keys(self) -> list[str]:
        return sorted(self.files)

    def delete(self, key: str) -> None:
        self.files.pop(key, None)

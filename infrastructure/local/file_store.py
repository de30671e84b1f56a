"""
File-backed DeviceStore.

One file per key under a directory on the device. Writes go to a temp file
that is then renamed over the target, so a crash mid-write never leaves a
truncated session behind.
"""
import contextlib
import os
import tempfile
from pathlib import Path
from typing import Optional, Union
from urllib.parse import quote, unquote


def _filename(key: str) -> str:
    # Reversible: distinct keys map to distinct files
    return quote(key, safe="")


class FileDeviceStore:
    """DeviceStore keeping each key as a JSON file in `directory`."""

    def __init__(self, directory: Union[str, Path]):
        self._dir = Path(directory).expanduser()

    def _path(self, key: str) -> Path:
        return self._dir / f"{_filename(key)}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set(self, key: str, blob: str) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        target = self._path(key)
        fd, tmp = tempfile.mkstemp(dir=self._dir, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(blob)
            os.replace(tmp, target)
        except OSError:
            with contextlib.suppress(OSError):
                os.unlink(tmp)
            raise

    def remove(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass

    def keys(self, prefix: str = "") -> list[str]:
        """Stored keys starting with prefix."""
        if not self._dir.exists():
            return []
        stored = (
            unquote(p.stem) for p in self._dir.glob("*.json") if not p.name.startswith(".tmp-")
        )
        return sorted(k for k in stored if k.startswith(prefix))

"""Durable last-known-good snapshots of the cached collections.

Each collection is stored as one JSON document under the cache directory
(``devices.json`` / ``sensors.json``) using the same ``{"device": [...]}`` /
``{"sensor": [...]}`` envelope as the API. Writes land in a temporary file in
the same directory and are renamed into place, so a concurrent reader sees
either the previous or the new document, never a partial one.
"""

from __future__ import annotations

from collections.abc import Mapping
import json
import logging
import os
from pathlib import Path
import tempfile
from typing import Any

from .const import SNAPSHOT_FILE_NAMES
from .exceptions import CacheFileError

_LOGGER = logging.getLogger(__name__)


class SnapshotStore:
    """Read and write collection snapshots under ``cache_dir``."""

    def __init__(self, cache_dir: str | Path) -> None:
        """Remember the directory; it is created on the first write."""

        self._cache_dir = Path(cache_dir)

    @property
    def cache_dir(self) -> Path:
        """Return the snapshot directory."""

        return self._cache_dir

    def path_for(self, collection: str) -> Path:
        """Return the snapshot file path of ``collection``."""

        file_name = SNAPSHOT_FILE_NAMES.get(collection)
        if file_name is None:
            raise ValueError(f"Unknown collection: {collection!r}")
        return self._cache_dir / file_name

    def write(self, collection: str, payload: Mapping[str, Any]) -> None:
        """Replace the snapshot of ``collection`` with ``payload``.

        Raises ``OSError`` when the file cannot be written and ``TypeError``
        when the payload is not JSON serialisable.
        """

        path = self.path_for(collection)
        text = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"

        path.parent.mkdir(parents=True, exist_ok=True)

        fd = None
        tmp_path: str | None = None
        try:
            fd = tempfile.NamedTemporaryFile(
                mode="w",
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
                encoding="utf-8",
            )
            tmp_path = fd.name
            fd.write(text)
            fd.flush()
            os.fsync(fd.fileno())
            fd.close()
            fd = None
            os.replace(tmp_path, path)
        except BaseException:
            if fd is not None:
                fd.close()
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass
            raise
        _LOGGER.debug("Wrote %s snapshot to %s", collection, path)

    def load(self, collection: str) -> dict[str, Any]:
        """Return the stored snapshot of ``collection``.

        Raises ``CacheFileError`` when the file is missing, unreadable or does
        not hold a JSON object.
        """

        path = self.path_for(collection)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as err:
            raise CacheFileError(f"No {collection} snapshot at {path}") from err
        except (OSError, UnicodeDecodeError) as err:
            raise CacheFileError(f"Cannot read {collection} snapshot: {err}") from err
        try:
            data = json.loads(text)
        except ValueError as err:
            raise CacheFileError(f"Malformed {collection} snapshot: {err}") from err
        if not isinstance(data, dict):
            raise CacheFileError(
                f"Unexpected {collection} snapshot type: {type(data).__name__}"
            )
        return data

    def read(self, collection: str) -> dict[str, Any] | None:
        """Return the stored snapshot of ``collection`` or ``None`` when absent."""

        try:
            return self.load(collection)
        except CacheFileError as err:
            _LOGGER.debug("Ignoring %s snapshot: %s", collection, err)
            return None

    def remove(self, collection: str) -> bool:
        """Delete the snapshot of ``collection``; ``False`` when none existed."""

        path = self.path_for(collection)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        _LOGGER.debug("Removed %s snapshot %s", collection, path)
        return True

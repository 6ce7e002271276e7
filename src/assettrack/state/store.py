"""Key-value store backends.

The reconciler only needs ``get``/``set`` over a handful of well-known
keys. Callers own the store lifecycle and pass it in explicitly, which
makes it easy to swap the file-backed store for an in-memory one in tests.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from assettrack.exceptions import StoreError

_logger = logging.getLogger(__name__)


class Store(Protocol):
    """Structural store interface.

    Values are JSON-compatible. ``get`` returns ``None`` for missing keys.
    Writes to different keys are independent; there are no transactions.
    """

    def get(self, key: str) -> Any | None:
        ...

    def set(self, key: str, value: Any) -> None:
        ...


class MemoryStore:
    """In-memory store with JSON copy semantics.

    Values are deep-copied on the way in and out so callers can never
    mutate stored state through a reference they hold.
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str) -> Any | None:
        value = self._data.get(key)
        return copy.deepcopy(value)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def snapshot(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)


class JsonFileStore:
    """Store backed by a single JSON document (``{key: value}``).

    Every ``get`` re-reads the file so changes made by other processes are
    visible. Every ``set`` rewrites the document through a temporary file
    and :func:`os.replace`, so a crash never leaves a half-written file.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_document(self) -> dict[str, Any]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise StoreError(f"Cannot read store {self._path}: {exc}") from exc

        if not text.strip():
            return {}
        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StoreError(f"Store {self._path} is not valid JSON: {exc}") from exc
        if not isinstance(document, dict):
            raise StoreError(f"Store {self._path} must contain a JSON object")
        return document

    def get(self, key: str) -> Any | None:
        return self._read_document().get(key)

    def set(self, key: str, value: Any) -> None:
        document = self._read_document()
        document[key] = value
        try:
            payload = json.dumps(document, separators=(",", ":"))
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Value for {key} is not JSON serializable: {exc}", key=key) from exc

        directory = self._path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StoreError(f"Cannot write {key} to {self._path}: {exc}", key=key) from exc

        _logger.debug("Wrote %s to %s", key, self._path)

"""Credential stores used to persist OAuth tokens."""

from __future__ import annotations

import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from musebridge.errors import TokenStorageError
from musebridge.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CACHE_PATH = Path(".cache/musebridge_tokens.json")


class CredentialStore(ABC):
    """
    Key/value store for secrets.

    Implementations must be safe to share between threads: each call sees a
    consistent snapshot and writes to a key are serialized.
    """

    @abstractmethod
    def store(self, value: str, key: str) -> None:
        """Persist ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def retrieve(self, key: str) -> Optional[str]:
        """Return the value stored under ``key`` or ``None``."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove ``key``. Returns whether something was removed; a missing key is not an error."""

    @abstractmethod
    def delete_all(self) -> None:
        """Remove every key owned by this store."""

    def exists(self, key: str) -> bool:
        return self.retrieve(key) is not None


class MemoryCredentialStore(CredentialStore):
    """Process-local store, handy for tests and short-lived sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._lock = threading.RLock()
        self._values: Dict[str, str] = dict(initial or {})

    def store(self, value: str, key: str) -> None:
        with self._lock:
            self._values[key] = value

    def retrieve(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._values.pop(key, None) is not None

    def delete_all(self) -> None:
        with self._lock:
            self._values.clear()


class FileCredentialStore(CredentialStore):
    """JSON file store with an on-disk cache, one file per store."""

    def __init__(self, cache_path: Path | str | None = None) -> None:
        self.cache_path = Path(cache_path or os.getenv("MUSEBRIDGE_TOKEN_CACHE") or DEFAULT_CACHE_PATH)
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # File helpers
    # ------------------------------------------------------------------

    def _load(self) -> Dict[str, str]:
        if not self.cache_path.exists():
            return {}
        try:
            data = json.loads(self.cache_path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            # Unreadable cache behaves like an empty one
            logger.warning(f"Ignoring unreadable credential cache {self.cache_path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: Dict[str, str]) -> None:
        # mkstemp creates the file with mode 0600; os.replace swaps it in atomically
        tmp_name = None
        try:
            self.cache_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.cache_path.parent, prefix=f".{self.cache_path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w") as f:
                json.dump(data, f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.cache_path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise TokenStorageError(e) from e

    # ------------------------------------------------------------------
    # CredentialStore implementation
    # ------------------------------------------------------------------

    def store(self, value: str, key: str) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._save(data)

    def retrieve(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load().get(key)

    def delete(self, key: str) -> bool:
        with self._lock:
            data = self._load()
            if key not in data:
                return False
            del data[key]
            self._save(data)
            return True

    def delete_all(self) -> None:
        with self._lock:
            try:
                self.cache_path.unlink(missing_ok=True)
            except OSError as e:
                raise TokenStorageError(e) from e

"""Cache store abstraction - allows swapping where timezone payloads are kept."""
import json
import logging
import os
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple


class CacheStoreBase(ABC):
    """Abstract key-value store with per-entry expiration."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """
        Fetch a stored value.

        Returns:
            The value, or None if missing or expired
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any, expiration: int) -> bool:
        """
        Store a value, replacing any existing entry.

        Args:
            key: Cache key
            value: JSON-serializable value
            expiration: Lifetime in seconds (0 or less never expires)

        Returns:
            True if stored successfully
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete one entry. Returns True if an entry was removed."""
        pass

    @abstractmethod
    def delete_by_prefix(self, prefix: str) -> bool:
        """
        Delete every entry whose key starts with prefix.

        Returns:
            True if the operation completed without a storage error
        """
        pass


def _expires_at(expiration: int, now: float) -> Optional[float]:
    return now + expiration if expiration > 0 else None


def _is_expired(expires_at: Optional[float], now: float) -> bool:
    return expires_at is not None and now >= expires_at


class MemoryCacheStore(CacheStoreBase):
    """Process-local store; entries vanish when the process exits."""

    def __init__(self):
        self._entries: Dict[str, Tuple[Any, Optional[float]]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if _is_expired(expires_at, time.time()):
            logging.debug(f"Cache entry expired: {key}")
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any, expiration: int) -> bool:
        self._entries[key] = (value, _expires_at(expiration, time.time()))
        return True

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def delete_by_prefix(self, prefix: str) -> bool:
        keys = [key for key in self._entries if key.startswith(prefix)]
        for key in keys:
            del self._entries[key]
        logging.debug(f"Deleted {len(keys)} cache entries with prefix '{prefix}'")
        return True

    def __len__(self) -> int:
        return len(self._entries)


class FileCacheStore(CacheStoreBase):
    """
    Store backed by a single JSON file, so cached lookups survive restarts.

    File layout: {"<key>": {"value": <payload>, "expires_at": <epoch or null>}}
    """

    def __init__(self, path: str):
        self.path = path

    def _load(self) -> Dict[str, Dict[str, Any]]:
        try:
            with open(self.path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logging.warning(f"Ignoring unreadable cache file {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            logging.warning(f"Ignoring malformed cache file {self.path}")
            return {}
        return data

    def _save(self, entries: Dict[str, Dict[str, Any]]) -> bool:
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = f"{self.path}.tmp"
        try:
            os.makedirs(directory, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as handle:
                json.dump(entries, handle)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            logging.error(f"Failed to write cache file {self.path}: {e}")
            return False
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
        return True

    def get(self, key: str) -> Optional[Any]:
        entry = self._load().get(key)
        if not isinstance(entry, dict):
            return None
        if _is_expired(entry.get("expires_at"), time.time()):
            logging.debug(f"Cache entry expired: {key}")
            return None
        return entry.get("value")

    def set(self, key: str, value: Any, expiration: int) -> bool:
        now = time.time()
        entries = {
            k: v for k, v in self._load().items()
            if isinstance(v, dict) and not _is_expired(v.get("expires_at"), now)
        }
        entries[key] = {"value": value, "expires_at": _expires_at(expiration, now)}
        return self._save(entries)

    def delete(self, key: str) -> bool:
        entries = self._load()
        if key not in entries:
            return False
        del entries[key]
        return self._save(entries)

    def delete_by_prefix(self, prefix: str) -> bool:
        entries = self._load()
        remaining = {k: v for k, v in entries.items() if not k.startswith(prefix)}
        logging.debug(f"Deleting {len(entries) - len(remaining)} cache entries with prefix '{prefix}'")
        if len(remaining) == len(entries) and not os.path.exists(self.path):
            return True
        return self._save(remaining)

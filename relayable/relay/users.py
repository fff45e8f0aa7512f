from typing import Any, Callable, Dict
import threading
import logging

LOGGER = logging.getLogger(__name__)


class StorageNamespace:
    """Key/value entries a single user keeps under one namespace."""

    def __init__(self, name: str, entries: Dict[str, Any], lock: threading.RLock):
        self.name = name
        self._entries = entries
        self._lock = lock

    def get(self, key: str, default=None):
        with self._lock:
            return self._entries.get(key, default)

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = value

    def forget(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def get_or_put(self, key: str, supplier: Callable[[], Any]):
        """
        Returns the stored value for key. When there is none, calls supplier
        once, stores its result and returns it.
        """
        with self._lock:
            if key in self._entries:
                return self._entries[key]
            value = supplier()
            self._entries[key] = value
            LOGGER.debug(f"Stored new value for '{key}' in namespace '{self.name}'")
            return value


class UserStorage:
    """In-memory per-user storage, grouped by namespace."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        self._namespaces: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.RLock()

    def find(self, namespace: str) -> StorageNamespace:
        with self._lock:
            entries = self._namespaces.setdefault(namespace, {})
        return StorageNamespace(namespace, entries, self._lock)

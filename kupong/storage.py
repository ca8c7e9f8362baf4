"""Small key-value stores for per-installation state and change signals."""
import json
import logging
import threading
from typing import Any, Callable, Dict, List, MutableMapping, Optional

logger = logging.getLogger(__name__)

StoreListener = Callable[[str, Optional[str], Any], None]


class KeyValueStore:
    """String key/value store. Values are strings, like browser local storage."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str, origin: Any = None) -> None:
        raise NotImplementedError

    def delete(self, key: str, origin: Any = None) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """In-process store shared by every session of the app.

    Listeners are told about each change together with the origin that
    made it, so a writer can skip its own changes.
    """

    def __init__(self):
        self._data: Dict[str, str] = {}
        self._listeners: List[StoreListener] = []
        self._lock = threading.Lock()

    def get(self, key):
        with self._lock:
            return self._data.get(key)

    def set(self, key, value, origin=None):
        with self._lock:
            self._data[key] = value
        self._emit(key, value, origin)

    def delete(self, key, origin=None):
        with self._lock:
            existed = self._data.pop(key, None) is not None
        if existed:
            self._emit(key, None, origin)

    def clear(self):
        with self._lock:
            self._data.clear()

    def add_listener(self, listener: StoreListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def remove():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return remove

    def _emit(self, key, value, origin):
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(key, value, origin)
            except Exception:
                logger.exception("Storage listener failed for key %s", key)


class MappingStore(KeyValueStore):
    """Store backed by any mutable mapping, e.g. ``st.session_state``."""

    def __init__(self, mapping: MutableMapping, prefix: str = "kv_"):
        self._mapping = mapping
        self._prefix = prefix

    def get(self, key):
        return self._mapping.get(self._prefix + key)

    def set(self, key, value, origin=None):
        self._mapping[self._prefix + key] = value

    def delete(self, key, origin=None):
        if self._prefix + key in self._mapping:
            del self._mapping[self._prefix + key]

    def clear(self):
        for key in [k for k in self._mapping.keys() if str(k).startswith(self._prefix)]:
            del self._mapping[key]


def save_to_storage(store: KeyValueStore, key: str, value):
    store.set(key, json.dumps(value))


def load_from_storage(store: KeyValueStore, key: str, fallback=None):
    raw = store.get(key)
    if raw is None:
        return fallback
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Could not decode stored value for %s", key)
        return fallback

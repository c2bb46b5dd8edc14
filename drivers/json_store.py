import os
import json
import logging
import threading

logger = logging.getLogger(__name__)

STORE_PATH = "/app/data/loyalswap_store.json"


class MemoryStore:
    """Key-value store of raw strings held in a dict. Used in tests and dry runs."""

    def __init__(self, initial=None):
        self._data = dict(initial or {})

    def get_item(self, key):
        return self._data.get(key)

    def set_item(self, key, value):
        if not isinstance(value, str):
            raise TypeError(f"Store values must be str, got {type(value).__name__}")
        self._data[key] = value

    def remove_item(self, key):
        self._data.pop(key, None)

    def keys(self):
        return list(self._data.keys())


class JsonFileStore:
    """
    Key-value store of raw strings persisted as one JSON document.
    Every write goes to a temp file, is fsynced, then atomically replaces the
    previous document.
    """

    def __init__(self, path=STORE_PATH):
        self.path = str(path)
        self._lock = threading.Lock()

    def _load(self):
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Store unreadable, starting empty: {e}", extra={'section': self.path})
            return {}
        if not isinstance(data, dict):
            logger.warning("Store is not a JSON object, starting empty", extra={'section': self.path})
            return {}
        return data

    def _save(self, data):
        tmp_path = f"{self.path}.tmp"
        parent = os.path.dirname(self.path)
        if parent:
            os.makedirs(parent, exist_ok=True)

        with open(tmp_path, "w") as f:
            json.dump(data, f, indent=2)
            f.flush()
            os.fsync(f.fileno())

        os.replace(tmp_path, self.path)

    def get_item(self, key):
        with self._lock:
            return self._load().get(key)

    def set_item(self, key, value):
        if not isinstance(value, str):
            raise TypeError(f"Store values must be str, got {type(value).__name__}")
        with self._lock:
            data = self._load()
            data[key] = value
            self._save(data)

    def remove_item(self, key):
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._save(data)

    def keys(self):
        with self._lock:
            return list(self._load().keys())

"""
Key-value substrate for the report cache: string keys to string values.

Implementations: in-memory (tests, ephemeral servers), JSON file (local),
Firestore (cloud). All have the same shape as browser storage: get/set/remove
plus key enumeration, with an optional byte quota that rejects oversized writes.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Union

from .errors import StorageError, StorageQuotaExceeded

logger = logging.getLogger(__name__)

# Browser localStorage gives each origin roughly this much.
DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024


class KeyValueStore(Protocol):
    """Protocol for string-keyed string storage. Implement for memory, JSON file, or Firestore."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store value under key. Raises StorageError (or StorageQuotaExceeded) on failure."""
        ...

    def remove(self, key: str) -> None:
        """Remove key. Absent keys are a no-op."""
        ...

    def keys(self) -> List[str]:
        """All keys currently stored."""
        ...


def _entry_size(key: str, value: str) -> int:
    """UTF-8 bytes taken by one entry."""
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


class MemoryKeyValueStore:
    """Dict-backed store with an optional quota on total key+value size in UTF-8 bytes."""

    def __init__(self, quota_bytes: Optional[int] = None):
        self._data: Dict[str, str] = {}
        self._quota = quota_bytes

    def _check_quota(self, key: str, value: str) -> None:
        if self._quota is None:
            return
        used = sum(_entry_size(k, v) for k, v in self._data.items() if k != key)
        if used + _entry_size(key, value) > self._quota:
            raise StorageQuotaExceeded(
                f"Writing {key!r} needs {_entry_size(key, value)} bytes; "
                f"{self._quota - used} of {self._quota} left"
            )

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._check_quota(key, value)
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data)


class JsonFileKeyValueStore(MemoryKeyValueStore):
    """Store backed by one JSON object in a file (e.g. data/report_cache.json), rewritten on every change."""

    def __init__(self, path: Union[Path, str], quota_bytes: Optional[int] = None):
        super().__init__(quota_bytes)
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._load()

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            with open(self._path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise StorageError(f"Cannot read {self._path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"{self._path} does not hold a JSON object")
        self._data = {str(k): v for k, v in data.items() if isinstance(v, str)}
        logger.info("[kv_store] loaded %d keys from %s", len(self._data), self._path)

    def _save(self) -> None:
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            with open(tmp, "w") as f:
                json.dump(self._data, f)
            tmp.replace(self._path)
        except OSError as e:
            raise StorageError(f"Cannot write {self._path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        self._check_quota(key, value)
        previous = self._data.get(key)
        self._data[key] = value
        try:
            self._save()
        except StorageError:
            if previous is None:
                self._data.pop(key, None)
            else:
                self._data[key] = previous
            raise

    def remove(self, key: str) -> None:
        if key not in self._data:
            return
        previous = self._data.pop(key)
        try:
            self._save()
        except StorageError:
            self._data[key] = previous
            raise


class FirestoreKeyValueStore:
    """
    Store backed by a Firestore collection: one document per key, body {"value": ...}.

    Document ids cannot contain '/', so keys are stored with '/' escaped.
    """

    def __init__(
        self,
        collection: str = "report_cache",
        project_id: Optional[str] = None,
        credentials_path: Optional[Union[Path, str]] = None,
    ):
        try:
            import firebase_admin
            from firebase_admin import credentials, firestore
        except ImportError:
            raise ImportError(
                "firebase-admin is required for FirestoreKeyValueStore. pip install firebase-admin"
            )
        if not firebase_admin._apps:
            if credentials_path:
                cred = credentials.Certificate(str(Path(credentials_path).resolve()))
                opts = {"projectId": project_id} if project_id else None
                firebase_admin.initialize_app(cred, opts)
            else:
                firebase_admin.initialize_app(options={"projectId": project_id} if project_id else None)
        self._db = firestore.client()
        self._coll = self._db.collection(collection)

    @staticmethod
    def _doc_id(key: str) -> str:
        return key.replace("%", "%25").replace("/", "%2F")

    @staticmethod
    def _key(doc_id: str) -> str:
        return doc_id.replace("%2F", "/").replace("%25", "%")

    def get(self, key: str) -> Optional[str]:
        try:
            doc = self._coll.document(self._doc_id(key)).get()
        except Exception as e:
            raise StorageError(f"Firestore read failed for {key!r}: {e}") from e
        if not doc.exists:
            return None
        value = (doc.to_dict() or {}).get("value")
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            self._coll.document(self._doc_id(key)).set({"value": value})
        except Exception as e:
            raise StorageError(f"Firestore write failed for {key!r}: {e}") from e

    def remove(self, key: str) -> None:
        try:
            self._coll.document(self._doc_id(key)).delete()
        except Exception as e:
            raise StorageError(f"Firestore delete failed for {key!r}: {e}") from e

    def keys(self) -> List[str]:
        try:
            return [self._key(doc.id) for doc in self._coll.list_documents()]
        except Exception as e:
            raise StorageError(f"Firestore list failed: {e}") from e

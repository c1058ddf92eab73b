import json
import logging
import os
import threading
from typing import Dict, Optional, Protocol
from pydantic import ValidationError
from ..errors import ProfileParseError
from ..models import UserProfile

logger = logging.getLogger("examenbuddy")

PROFILE_KEY = "exam_buddy_profile"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...
    def clear(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def clear(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStore:
    """All keys in one JSON object on disk, rewritten through a temp file."""

    def __init__(self, path: str) -> None:
        self.path = os.path.abspath(path)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError:
                logger.warning({"event": "kv_store_corrupt", "path": self.path})
                return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]) -> None:
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        tmp = self.path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)
        os.replace(tmp, self.path)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def clear(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                data.pop(key)
                self._write(data)


class ProfileStore:
    def __init__(self, backend: KeyValueStore) -> None:
        self.backend = backend

    def _decode(self, raw: str) -> UserProfile:
        try:
            return UserProfile.model_validate_json(raw)
        except ValidationError as exc:
            raise ProfileParseError(str(exc)) from exc

    def load(self) -> Optional[UserProfile]:
        """The saved profile, or None when onboarding is needed."""
        raw = self.backend.get(PROFILE_KEY)
        if raw is None:
            return None
        try:
            return self._decode(raw)
        except ProfileParseError:
            logger.warning({"event": "profile_corrupt_cleared"})
            self.backend.clear(PROFILE_KEY)
            return None

    def save(self, profile: UserProfile) -> UserProfile:
        self.backend.set(PROFILE_KEY, profile.model_dump_json())
        logger.debug({"event": "profile_saved", "level": profile.level, "year": profile.year})
        return profile

    def clear(self) -> None:
        self.backend.clear(PROFILE_KEY)
        logger.debug({"event": "profile_cleared"})

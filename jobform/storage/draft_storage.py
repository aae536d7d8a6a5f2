from __future__ import annotations
import json
import logging
import os
import tempfile
from typing import Dict, Optional, Protocol

from pydantic import ValidationError

from ..errors import StorageError
from ..schemas import JobApplicationRecord

logger = logging.getLogger(__name__)

DEFAULT_DRAFT_KEY = "job-application-draft"


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryKeyValueStore:
    """In-process store; contents vanish with the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileKeyValueStore:
    """One UTF-8 file per key under ``directory``."""

    def __init__(self, directory: str):
        self.directory = directory

    def path_for(self, key: str) -> str:
        safe = "".join(ch if ch.isalnum() or ch in "-_." else "_" for ch in key)
        return os.path.join(self.directory, f"{safe}.json")

    def get_item(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as fh:
                return fh.read()
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Could not read {path}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        path = self.path_for(key)
        try:
            os.makedirs(self.directory, exist_ok=True)
            # Write beside the target then swap, so a crash never leaves half a draft
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=".draft-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(value)
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise
        except OSError as e:
            raise StorageError(f"Could not write {path}: {e}") from e

    def remove_item(self, key: str) -> None:
        path = self.path_for(key)
        try:
            if os.path.exists(path):
                os.remove(path)
        except OSError as e:
            raise StorageError(f"Could not remove {path}: {e}") from e


class DraftStore:
    """Load, save and clear the single persisted draft.

    Storage failures are logged and swallowed here: losing a draft must never
    interrupt the edit that triggered the write. Callers fall back to keeping
    the record in memory only.
    """

    def __init__(self, storage: KeyValueStore, key: str = DEFAULT_DRAFT_KEY):
        self.storage = storage
        self.key = key

    def load(self) -> Optional[JobApplicationRecord]:
        try:
            raw = self.storage.get_item(self.key)
        except Exception as e:
            logger.warning("Draft storage unavailable: %s", e)
            return None
        if not raw:
            return None
        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            record = JobApplicationRecord.model_validate(data)
        except (ValueError, ValidationError) as e:
            # json.JSONDecodeError is a ValueError
            logger.warning("Failed to load saved draft, discarding it: %s", e)
            self._remove_quietly()
            return None
        logger.debug("Loaded draft from %s", self.key)
        return record

    def save(self, record: JobApplicationRecord) -> bool:
        try:
            payload = json.dumps(record.to_wire(), ensure_ascii=False)
            self.storage.set_item(self.key, payload)
        except Exception as e:
            logger.warning("Failed to save draft: %s", e)
            return False
        return True

    def clear(self) -> None:
        try:
            self.storage.remove_item(self.key)
        except Exception as e:
            logger.warning("Failed to clear draft: %s", e)

    def has_draft(self) -> bool:
        try:
            return bool(self.storage.get_item(self.key))
        except Exception as e:
            logger.warning("Draft storage unavailable: %s", e)
            return False

    def _remove_quietly(self) -> None:
        try:
            self.storage.remove_item(self.key)
        except Exception as e:
            logger.warning("Failed to remove corrupted draft: %s", e)

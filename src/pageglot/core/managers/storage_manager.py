# src/pageglot/core/managers/storage_manager.py
import abc
import asyncio
import functools
import logging
import threading
from collections import defaultdict
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, TypeVar

from pageglot.core.managers.config_manager import ConfigManager
from pageglot.core.managers.database_manager import DatabaseManager
from pageglot.core.utils.path_utils import PathUtils
from pageglot.model import PreferencesUpdate, TranslationRecord, UserPreferences

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StorageBase(metaclass=abc.ABCMeta):
    """
    Storage contract for preferences and translation records.

    Preferences are a singleton record. Translation records are append-only
    and grouped by source URL; concurrent appends must never lose entries.
    """

    @abc.abstractmethod
    async def get_preferences(self) -> UserPreferences:
        raise NotImplementedError

    @abc.abstractmethod
    async def update_preferences(self, update: PreferencesUpdate) -> UserPreferences:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_translations(self, url: str) -> List[TranslationRecord]:
        raise NotImplementedError

    @abc.abstractmethod
    async def save_translation(self, record: TranslationRecord) -> TranslationRecord:
        raise NotImplementedError

    def close(self) -> None:
        """Releases backend resources. Nothing to do by default."""


class MemoryStorage(StorageBase):
    """In-process reference implementation. Nothing survives a restart."""

    def __init__(self):
        self._preferences = UserPreferences()
        self._translations: Dict[str, List[TranslationRecord]] = defaultdict(list)
        self._current_id = 1
        self._lock = threading.Lock()

    async def get_preferences(self) -> UserPreferences:
        return self._preferences.model_copy()

    async def update_preferences(self, update: PreferencesUpdate) -> UserPreferences:
        with self._lock:
            self._preferences = merge_preferences(self._preferences, update)
            return self._preferences.model_copy()

    async def get_translations(self, url: str) -> List[TranslationRecord]:
        with self._lock:
            return list(self._translations.get(url, []))

    async def save_translation(self, record: TranslationRecord) -> TranslationRecord:
        with self._lock:
            saved = record.model_copy(update={"id": self._current_id})
            self._current_id += 1
            self._translations[saved.url].append(saved)
        return saved


class SqliteStorage(StorageBase):
    """
    Durable implementation on top of DatabaseManager.

    Every DatabaseManager call runs in the loop's default thread pool, off
    the event loop. Each worker thread gets its own connection.
    """

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager
        self.db_manager.init_schema()
        self.db_manager.execute_query("INSERT OR IGNORE INTO preferences (id) VALUES (1)")

    @staticmethod
    async def _offload(func: Callable[..., T], *args: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args))

    async def get_preferences(self) -> UserPreferences:
        row = await self._offload(
            self.db_manager.fetch_one,
            "SELECT id, translation_percentage, last_url, language FROM preferences WHERE id = 1"
        )
        if not row:
            return UserPreferences()
        return UserPreferences(id=row[0], translation_percentage=row[1], last_url=row[2], language=row[3])

    async def update_preferences(self, update: PreferencesUpdate) -> UserPreferences:
        changes = update.model_dump(exclude_unset=True)
        if changes:
            columns = ", ".join(f"{name} = ?" for name in changes)
            await self._offload(
                self.db_manager.execute_query,
                f"UPDATE preferences SET {columns} WHERE id = 1", tuple(changes.values())
            )
        return await self.get_preferences()

    async def get_translations(self, url: str) -> List[TranslationRecord]:
        rows = await self._offload(
            self.db_manager.fetch_all,
            "SELECT id, original_text, translated_text, url, created_at FROM translations "
            "WHERE url = ? ORDER BY id",
            (url,)
        )
        return [
            TranslationRecord(
                id=r[0], original_text=r[1], translated_text=r[2], url=r[3],
                created_at=datetime.fromisoformat(r[4])
            )
            for r in rows
        ]

    async def save_translation(self, record: TranslationRecord) -> TranslationRecord:
        # A single INSERT is atomic, so concurrent appends need no extra locking
        new_id = await self._offload(
            self.db_manager.execute_insert,
            "INSERT INTO translations (original_text, translated_text, url, created_at) VALUES (?, ?, ?, ?)",
            (record.original_text, record.translated_text, record.url, record.created_at.isoformat())
        )
        return record.model_copy(update={"id": new_id})

    def close(self) -> None:
        """Closes every connection and checkpoints the WAL file."""
        self.db_manager.close_connections()


def create_storage(config: ConfigManager) -> StorageBase:
    """Builds the storage backend named by 'storage.backend'."""
    backend = config.get_nested("storage.backend", "memory")
    if backend == "sqlite":
        db_path = PathUtils.get_db_path(config.get_nested("storage.db_path"))
        logger.info("Using SQLite storage at %s", db_path)
        return SqliteStorage(DatabaseManager(db_path))
    if backend != "memory":
        logger.warning("Unknown storage backend '%s'. Falling back to memory.", backend)
    return MemoryStorage()


def merge_preferences(current: UserPreferences, update: Optional[PreferencesUpdate]) -> UserPreferences:
    if update is None:
        return current
    return current.model_copy(update=update.model_dump(exclude_unset=True))

"""Redis-backed persistence for workspace entities.

Provides durable storage shared by every process pointing at the same Redis:
- Folders
- Notes (content stored as the JSON document value)

Architecture (Single DB + Key Prefix Pattern):
- Records: clinote:workspace:folder:{id}, clinote:workspace:note:{id}
- Index sets: clinote:workspace:index:folders, clinote:workspace:index:notes
"""

from typing import TypeVar

from pydantic import BaseModel, ValidationError as ModelValidationError

from clinote.components.workspace.models import Folder, Note
from clinote.db.redis_cache import RedisCache, get_redis_cache
from clinote.db.redis_db import RedisKeyPrefix
from clinote.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


class WorkspaceRedisStorage:
    """Redis-backed storage for workspace data."""

    def __init__(self, cache: RedisCache | None = None):
        """Initialize with optional cache instance (for testing)."""
        self._cache = cache

    @property
    def cache(self) -> RedisCache:
        """Lazy initialization of Redis cache."""
        if self._cache is None:
            self._cache = get_redis_cache()
        return self._cache

    # ==================== Generic helpers ====================

    def _save(self, key: str, index_key: str, entity: BaseModel) -> bool:
        success = self.cache.set(key, entity.model_dump(mode="json"))
        if success:
            # Add to index for listing
            self.cache.client.sadd(index_key, entity.id)
        return success

    def _load(self, key: str, model: type[T]) -> T | None:
        data = self.cache.get(key)
        if not data:
            return None
        try:
            return model.model_validate(data)
        except ModelValidationError as e:
            logger.error(f"Discarding unreadable record {key}: {e}")
            return None

    def _delete(self, key: str, index_key: str, entity_id: str) -> bool:
        deleted = self.cache.delete(key)
        if deleted:
            self.cache.client.srem(index_key, entity_id)
        return deleted

    def _list(self, index_key: str, key_fn, model: type[T]) -> list[T]:
        items = []
        for entity_id in self.cache.client.smembers(index_key):
            item = self._load(key_fn(entity_id), model)
            if item:
                items.append(item)
            else:
                # Clean up stale index entry
                self.cache.client.srem(index_key, entity_id)
        return items

    # ==================== Folder Operations ====================

    def create_folder(self, folder: Folder) -> bool:
        """Save a new folder."""
        success = self._save(RedisKeyPrefix.folder_key(folder.id), RedisKeyPrefix.folder_index_key(), folder)
        if success:
            logger.debug(f"Saved folder: {folder.id}")
        return success

    def update_folder(self, folder: Folder) -> bool:
        """Replace a stored folder."""
        return self._save(RedisKeyPrefix.folder_key(folder.id), RedisKeyPrefix.folder_index_key(), folder)

    def get_folder(self, folder_id: str) -> Folder | None:
        return self._load(RedisKeyPrefix.folder_key(folder_id), Folder)

    def delete_folder(self, folder_id: str) -> bool:
        """Delete a folder. Returns True if deleted, False if not found."""
        deleted = self._delete(RedisKeyPrefix.folder_key(folder_id), RedisKeyPrefix.folder_index_key(), folder_id)
        if deleted:
            logger.debug(f"Deleted folder: {folder_id}")
        return deleted

    # ==================== Note Operations ====================

    def create_note(self, note: Note) -> bool:
        """Save a new note."""
        success = self._save(RedisKeyPrefix.note_key(note.id), RedisKeyPrefix.note_index_key(), note)
        if success:
            logger.debug(f"Saved note: {note.id}")
        return success

    def update_note(self, note: Note) -> bool:
        """Replace a stored note."""
        return self._save(RedisKeyPrefix.note_key(note.id), RedisKeyPrefix.note_index_key(), note)

    def get_note(self, note_id: str) -> Note | None:
        return self._load(RedisKeyPrefix.note_key(note_id), Note)

    def delete_note(self, note_id: str) -> bool:
        """Delete a note. Returns True if deleted, False if not found."""
        deleted = self._delete(RedisKeyPrefix.note_key(note_id), RedisKeyPrefix.note_index_key(), note_id)
        if deleted:
            logger.debug(f"Deleted note: {note_id}")
        return deleted

    def list_folders_and_notes(self) -> tuple[list[Folder], list[Note]]:
        """All folders (sorted by creation time, oldest first) and notes."""
        folders = self._list(RedisKeyPrefix.folder_index_key(), RedisKeyPrefix.folder_key, Folder)
        notes = self._list(RedisKeyPrefix.note_index_key(), RedisKeyPrefix.note_key, Note)
        folders.sort(key=lambda f: (f.createdAt, f.id))
        notes.sort(key=lambda n: (n.createdAt, n.id))
        return folders, notes

    # ==================== Utility ====================

    def clear_all(self) -> None:
        """Clear all workspace data (useful for testing)."""
        indexes = [
            (RedisKeyPrefix.folder_index_key(), RedisKeyPrefix.folder_key),
            (RedisKeyPrefix.note_index_key(), RedisKeyPrefix.note_key),
        ]
        for index_key, key_fn in indexes:
            for entity_id in self.cache.client.smembers(index_key):
                self.cache.delete(key_fn(entity_id))
            self.cache.client.delete(index_key)
        logger.warning("Cleared all workspace data from Redis")


# Singleton instance (lazy initialized)
_workspace_redis_storage: WorkspaceRedisStorage | None = None


def get_workspace_redis_storage() -> WorkspaceRedisStorage:
    """Get singleton instance of WorkspaceRedisStorage."""
    global _workspace_redis_storage
    if _workspace_redis_storage is None:
        _workspace_redis_storage = WorkspaceRedisStorage()
    return _workspace_redis_storage

"""Unified storage provider for workspace persistence.

Selects between in-memory storage (single process, lost on restart) and
Redis storage (durable, shared) from settings.storage_type.

Usage:
    from clinote.components.workspace.storage_provider import get_workspace_storage

    storage = get_workspace_storage()
    storage.create_folder(folder)
    folders, notes = storage.list_folders_and_notes()
"""

from clinote.components.workspace.ports import PersistencePort
from clinote.settings import settings
from clinote.utils.logging import get_logger

logger = get_logger(__name__)

# Singleton storage instance
_workspace_storage: PersistencePort | None = None
_storage_type: str | None = None


def get_workspace_storage() -> PersistencePort:
    """Get the workspace storage selected by configuration.

    Returns:
        MemoryWorkspaceStorage for storage_type="memory"
        WorkspaceRedisStorage for storage_type="redis"

    Raises:
        ValueError: If settings.storage_type is not a known storage
    """
    global _workspace_storage, _storage_type

    if _workspace_storage is not None:
        return _workspace_storage

    storage_type = settings.storage_type.lower()
    if storage_type == "memory":
        from clinote.components.workspace.storage import MemoryWorkspaceStorage

        _workspace_storage = MemoryWorkspaceStorage()
        logger.info("WorkspaceStorage: Using in-memory storage (not persisted)")
    elif storage_type == "redis":
        from clinote.components.workspace.redis_storage import get_workspace_redis_storage

        _workspace_storage = get_workspace_redis_storage()
        logger.info("WorkspaceStorage: Using Redis storage")
    else:
        raise ValueError(f"Unknown storage type: {settings.storage_type}")

    _storage_type = storage_type
    return _workspace_storage


def get_storage_type() -> str:
    """Get the current storage type ('memory' or 'redis')."""
    if _storage_type is None:
        get_workspace_storage()  # Initialize storage
    return _storage_type or "unknown"


def reset_workspace_storage() -> None:
    """Reset the storage singleton (for testing)."""
    global _workspace_storage, _storage_type
    _workspace_storage = None
    _storage_type = None

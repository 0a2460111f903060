"""
Redis Key Prefix Strategy (Single DB + Key Prefix Pattern)

All clinote data lives in one Redis database; entity types are separated by
key prefix. Environments are isolated by pointing at different Redis
instances (or CLINOTE_REDIS_INDEX), never by prefix.

Usage:
    from clinote.db.redis_db import RedisKeyPrefix

    key = RedisKeyPrefix.note_key(note_id)
    # Result: "clinote:workspace:note:note-abc123"
"""

from enum import Enum


class RedisKeyPrefix(str, Enum):
    """Redis key prefixes.

    Key format:
        {prefix}:{entity_id}

    Examples:
        clinote:workspace:folder:folder-kx2j1a-3f9d0c
        clinote:workspace:note:note-6b1e0f2a9c
        clinote:workspace:index:notes
    """

    WORKSPACE_FOLDER = "clinote:workspace:folder"  # Folder data (String/JSON)
    WORKSPACE_NOTE = "clinote:workspace:note"  # Note data (String/JSON)
    WORKSPACE_INDEX = "clinote:workspace:index"  # Id index sets (Set)

    @classmethod
    def folder_key(cls, folder_id: str) -> str:
        return f"{cls.WORKSPACE_FOLDER.value}:{folder_id}"

    @classmethod
    def note_key(cls, note_id: str) -> str:
        return f"{cls.WORKSPACE_NOTE.value}:{note_id}"

    @classmethod
    def folder_index_key(cls) -> str:
        return f"{cls.WORKSPACE_INDEX.value}:folders"

    @classmethod
    def note_index_key(cls) -> str:
        return f"{cls.WORKSPACE_INDEX.value}:notes"

    @classmethod
    def get_description(cls, prefix: "RedisKeyPrefix") -> str:
        """Describe what a key prefix is used for."""
        descriptions = {
            cls.WORKSPACE_FOLDER: "Folder records",
            cls.WORKSPACE_NOTE: "Note records",
            cls.WORKSPACE_INDEX: "Workspace entity id indexes",
        }
        return descriptions.get(prefix, "Undefined")

    @classmethod
    def list_all(cls) -> dict:
        """List all key prefixes with their descriptions."""
        return {member.name: {"prefix": member.value, "description": cls.get_description(member)} for member in cls}

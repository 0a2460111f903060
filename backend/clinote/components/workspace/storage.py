"""Thread-safe in-memory persistence for workspace entities.

Provides storage for:
- Folders
- Notes

Data lives only as long as the process; use the Redis adapter for
durability across restarts.
"""

import threading

from clinote.components.workspace.models import Folder, Note


class MemoryWorkspaceStorage:
    """Thread-safe in-memory storage for workspace data.

    Uses a reentrant lock (RLock) to ensure thread safety for all operations.
    Entities are frozen, so stored values can be shared without copying.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._folders: dict[str, Folder] = {}
        self._notes: dict[str, Note] = {}

    # Folder operations
    def create_folder(self, folder: Folder) -> bool:
        """Save a new folder."""
        with self._lock:
            self._folders[folder.id] = folder
            return True

    def update_folder(self, folder: Folder) -> bool:
        """Replace a stored folder. Returns False if it was never saved."""
        with self._lock:
            if folder.id not in self._folders:
                return False
            self._folders[folder.id] = folder
            return True

    def get_folder(self, folder_id: str) -> Folder | None:
        with self._lock:
            return self._folders.get(folder_id)

    def delete_folder(self, folder_id: str) -> bool:
        """Delete a folder. Returns True if deleted, False if not found."""
        with self._lock:
            return self._folders.pop(folder_id, None) is not None

    # Note operations
    def create_note(self, note: Note) -> bool:
        """Save a new note."""
        with self._lock:
            self._notes[note.id] = note
            return True

    def update_note(self, note: Note) -> bool:
        """Replace a stored note. Returns False if it was never saved."""
        with self._lock:
            if note.id not in self._notes:
                return False
            self._notes[note.id] = note
            return True

    def get_note(self, note_id: str) -> Note | None:
        with self._lock:
            return self._notes.get(note_id)

    def delete_note(self, note_id: str) -> bool:
        """Delete a note. Returns True if deleted, False if not found."""
        with self._lock:
            return self._notes.pop(note_id, None) is not None

    def list_folders_and_notes(self) -> tuple[list[Folder], list[Note]]:
        """All folders (in creation order) and notes."""
        with self._lock:
            return list(self._folders.values()), list(self._notes.values())

    # Utility
    def clear_all(self) -> None:
        """Clear all data (useful for testing)."""
        with self._lock:
            self._folders.clear()
            self._notes.clear()

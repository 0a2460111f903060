"""Workspace Management Module.

This module provides the entity model and state machine for organizing
clinical notes into folders and editor tabs.

Components:
- models.py: Folder, Note, Tab, WorkspaceState and integrity checks
- errors.py: WorkspaceError hierarchy
- ports.py: FilePort, PersistencePort, GeneratorPort protocols
- store.py: WorkspaceStore (observable single source of truth)
- sync.py: FileSyncCoordinator (one-time import of uploaded files)
- storage.py / redis_storage.py / storage_provider.py: persistence adapters
- session.py: WorkspaceSession composition root

Usage:
    from clinote.components.workspace import WorkspaceStore, NoteKind

    store = WorkspaceStore()
    store.hydrate([], [])
    folder_id = store.create_folder("Sessions")
    note_id = store.create_note(folder_id, "Intake", content)
"""

from clinote.components.workspace.errors import (
    FileImportError,
    GenerationError,
    GenerationErrorKind,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
    WorkspaceError,
)
from clinote.components.workspace.models import (
    ChangeKind,
    Folder,
    LifecyclePhase,
    Note,
    NoteKind,
    PendingGeneration,
    Tab,
    TemplateMeta,
    UploadedFile,
    WorkspaceChange,
    WorkspaceState,
    check_integrity,
)
from clinote.components.workspace.ports import FilePort, GeneratorPort, PersistencePort
from clinote.components.workspace.store import WorkspaceStore
from clinote.components.workspace.sync import FileSyncCoordinator, SyncResult

__all__ = [
    # Models
    "Folder",
    "Note",
    "NoteKind",
    "Tab",
    "TemplateMeta",
    "PendingGeneration",
    "UploadedFile",
    "LifecyclePhase",
    "ChangeKind",
    "WorkspaceChange",
    "WorkspaceState",
    "check_integrity",
    # Errors
    "WorkspaceError",
    "ValidationError",
    "NotFoundError",
    "InvalidTransitionError",
    "FileImportError",
    "GenerationError",
    "GenerationErrorKind",
    # Ports
    "FilePort",
    "PersistencePort",
    "GeneratorPort",
    # Store and coordinators
    "WorkspaceStore",
    "FileSyncCoordinator",
    "SyncResult",
]

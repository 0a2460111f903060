"""Workspace data models.

Defines the core entities for workspace organization:
- Folder: Ordered container of note ids
- Note: Plain or templated clinical note with opaque document content
- Tab: Open editor tab, 1:1 with a note
- WorkspaceState: Aggregate root snapshot published by the store
- UploadedFile: File previously uploaded through the File Port

All entities are frozen; the store replaces values instead of mutating them,
so a published WorkspaceState is never changed after observers receive it.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from clinote.components.templates.catalog import TemplateType


class NoteKind(str, Enum):
    """Origin of a note's content."""

    plain = "plain"
    templated = "templated"


class LifecyclePhase(str, Enum):
    """Workspace lifecycle.

    uninitialized -> initialized (rehydrated) -> syncing -> ready
    """

    uninitialized = "uninitialized"
    initialized = "initialized"
    syncing = "syncing"
    ready = "ready"


class Folder(BaseModel):
    """Folder holding an ordered sequence of note ids."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    isExpanded: bool = True
    noteIds: tuple[str, ...] = ()
    createdAt: int
    updatedAt: int


class Note(BaseModel):
    """A clinical note.

    templateType and sourceNoteId are set only for templated notes. The
    source reference is kept even if the source is later deleted.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    content: Any = None
    kind: NoteKind = NoteKind.plain
    folderId: str
    templateType: TemplateType | None = None
    sourceNoteId: str | None = None
    createdAt: int
    updatedAt: int

    @property
    def is_templated(self) -> bool:
        return self.kind == NoteKind.templated


class Tab(BaseModel):
    """Open editor tab. The tab id is the note id."""

    model_config = ConfigDict(frozen=True)

    id: str
    noteId: str
    isRenaming: bool = False


class TemplateMeta(BaseModel):
    """Template metadata required to create a templated note."""

    model_config = ConfigDict(frozen=True)

    templateType: TemplateType
    sourceNoteId: str


class PendingGeneration(BaseModel):
    """Deferred generation request armed before its source is confirmed present."""

    model_config = ConfigDict(frozen=True)

    templateType: TemplateType
    sourceNoteId: str


class UploadedFile(BaseModel):
    """File asset previously uploaded by the user.

    Path is whatever the File Port needs to read the file back.
    """

    id: str
    name: str
    path: str
    size: int | None = None  # File size in bytes
    uploadedAt: int | None = None


class ChangeKind(str, Enum):
    """Kind of committed store mutation, delivered to observers."""

    hydrated = "hydrated"
    folder_created = "folder_created"
    folder_renamed = "folder_renamed"
    folder_updated = "folder_updated"
    folder_deleted = "folder_deleted"
    active_folder_changed = "active_folder_changed"
    note_created = "note_created"
    note_renamed = "note_renamed"
    note_content_updated = "note_content_updated"
    note_deleted = "note_deleted"
    tab_opened = "tab_opened"
    tab_activated = "tab_activated"
    tab_closed = "tab_closed"
    tab_renaming_changed = "tab_renaming_changed"
    phase_changed = "phase_changed"
    pending_generation_changed = "pending_generation_changed"


class WorkspaceChange(BaseModel):
    """A committed mutation: what changed and which entity it touched."""

    model_config = ConfigDict(frozen=True)

    kind: ChangeKind
    entityId: str | None = None


class WorkspaceState(BaseModel):
    """Aggregate root snapshot.

    Notes are keyed by id and referenced from folders, never nested.
    """

    model_config = ConfigDict(frozen=True)

    folders: dict[str, Folder] = Field(default_factory=dict)
    notes: dict[str, Note] = Field(default_factory=dict)
    tabs: tuple[Tab, ...] = ()
    activeTabId: str | None = None
    activeFolderId: str | None = None
    phase: LifecyclePhase = LifecyclePhase.uninitialized
    pendingGeneration: PendingGeneration | None = None

    def get_tab(self, tab_id: str) -> Tab | None:
        return next((t for t in self.tabs if t.id == tab_id), None)

    @property
    def active_note(self) -> Note | None:
        if self.activeTabId is None:
            return None
        tab = self.get_tab(self.activeTabId)
        return self.notes.get(tab.noteId) if tab else None


def check_integrity(state: WorkspaceState) -> list[str]:
    """Return all invariant violations in a workspace state (empty when valid)."""
    problems: list[str] = []

    for folder in state.folders.values():
        if not folder.name.strip():
            problems.append(f"folder {folder.id} has an empty name")
        if len(set(folder.noteIds)) != len(folder.noteIds):
            problems.append(f"folder {folder.id} lists a note more than once")
        for note_id in folder.noteIds:
            note = state.notes.get(note_id)
            if note is None:
                problems.append(f"folder {folder.id} references missing note {note_id}")
            elif note.folderId != folder.id:
                problems.append(f"folder {folder.id} lists note {note_id} owned by {note.folderId}")

    for note in state.notes.values():
        folder = state.folders.get(note.folderId)
        if folder is None:
            problems.append(f"note {note.id} belongs to missing folder {note.folderId}")
        elif note.id not in folder.noteIds:
            problems.append(f"note {note.id} is not listed in folder {note.folderId}")
        if note.is_templated and (note.templateType is None or note.sourceNoteId is None):
            problems.append(f"templated note {note.id} is missing template metadata")
        if not note.is_templated and (note.templateType is not None or note.sourceNoteId is not None):
            problems.append(f"plain note {note.id} carries template metadata")

    seen_tabs: set[str] = set()
    for tab in state.tabs:
        if tab.id in seen_tabs:
            problems.append(f"tab {tab.id} is open more than once")
        seen_tabs.add(tab.id)
        if tab.noteId not in state.notes:
            problems.append(f"tab {tab.id} references missing note {tab.noteId}")

    if state.activeTabId is not None and state.activeTabId not in seen_tabs:
        problems.append(f"active tab {state.activeTabId} is not open")
    if state.activeFolderId is not None and state.activeFolderId not in state.folders:
        problems.append(f"active folder {state.activeFolderId} does not exist")

    return problems

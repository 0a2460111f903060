"""Observable in-memory workspace store.

The store is the single source of truth for folders, notes and tabs. Every
operation is synchronous: it validates, builds a new WorkspaceState (entities
are frozen, so unchanged values are shared), commits it, then notifies
subscribers with the committed snapshot and a WorkspaceChange.

Mutations made by a subscriber while a notification is running are committed
immediately; their notifications are queued behind the current one, so all
subscribers observe changes in commit order.
"""

from collections import deque
from collections.abc import Callable, Iterable
from typing import Any

from clinote.components.templates.catalog import TemplateType
from clinote.components.workspace.errors import NotFoundError, ValidationError
from clinote.components.workspace.models import (
    ChangeKind,
    Folder,
    LifecyclePhase,
    Note,
    NoteKind,
    PendingGeneration,
    Tab,
    TemplateMeta,
    WorkspaceChange,
    WorkspaceState,
    check_integrity,
)
from clinote.settings import DEFAULT_NOTE_TITLE
from clinote.utils import create_empty_document, generate_id, get_logger, get_timestamp_ms

logger = get_logger(__name__)

Listener = Callable[[WorkspaceState, WorkspaceChange], None]


class WorkspaceStore:
    """Single mutable holder of the current WorkspaceState."""

    def __init__(self, state: WorkspaceState | None = None):
        self._state = state or WorkspaceState()
        self._listeners: list[Listener] = []
        self._queue: deque[tuple[WorkspaceState, WorkspaceChange]] = deque()
        self._notifying = False

    @property
    def state(self) -> WorkspaceState:
        """The latest committed snapshot."""
        return self._state

    @property
    def phase(self) -> LifecyclePhase:
        return self._state.phase

    # ==================== Subscription ====================

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, state: WorkspaceState, kind: ChangeKind, entity_id: str | None = None) -> None:
        change = WorkspaceChange(kind=kind, entityId=entity_id)
        self._state = state
        logger.debug(f"Committed {kind.value}" + (f": {entity_id}" if entity_id else ""))

        self._queue.append((state, change))
        if self._notifying:
            return

        self._notifying = True
        try:
            while self._queue:
                snapshot, queued_change = self._queue.popleft()
                for listener in list(self._listeners):
                    try:
                        listener(snapshot, queued_change)
                    except Exception:
                        logger.exception(f"Workspace listener failed on {queued_change.kind.value}")
        finally:
            self._notifying = False

    # ==================== Queries ====================

    def get_folder(self, folder_id: str) -> Folder | None:
        return self._state.folders.get(folder_id)

    def get_note(self, note_id: str) -> Note | None:
        return self._state.notes.get(note_id)

    def has_note(self, note_id: str) -> bool:
        return note_id in self._state.notes

    def list_folders(self) -> list[Folder]:
        """Folders in creation order."""
        return list(self._state.folders.values())

    def notes_in_folder(self, folder_id: str) -> list[Note]:
        """Notes of a folder, in the folder's order."""
        folder = self._require_folder(folder_id)
        return [self._state.notes[note_id] for note_id in folder.noteIds]

    def source_of(self, note_id: str) -> Note | None:
        """Source note of a templated note, or None if it was deleted.

        Deleting a source leaves the templated note's sourceNoteId in place;
        callers treat a None result as a missing-source warning.
        """
        note = self._require_note(note_id)
        if note.sourceNoteId is None:
            return None
        return self._state.notes.get(note.sourceNoteId)

    def check_integrity(self) -> list[str]:
        """Invariant violations of the current state (empty when consistent)."""
        return check_integrity(self._state)

    def _require_folder(self, folder_id: str) -> Folder:
        folder = self._state.folders.get(folder_id)
        if folder is None:
            raise NotFoundError("Folder", folder_id)
        return folder

    def _require_note(self, note_id: str) -> Note:
        note = self._state.notes.get(note_id)
        if note is None:
            raise NotFoundError("Note", note_id)
        return note

    # ==================== Lifecycle ====================

    def hydrate(
        self,
        folders: Iterable[Folder],
        notes: Iterable[Note],
        tabs: Iterable[Tab] = (),
        active_tab_id: str | None = None,
    ) -> None:
        """Load persisted folders/notes and mark the workspace initialized.

        Raises:
            ValidationError: If the workspace was already initialized or the
                loaded data violates referential integrity.
        """
        if self._state.phase != LifecyclePhase.uninitialized:
            raise ValidationError(f"Workspace already initialized (phase={self._state.phase.value})")

        folder_map = {f.id: f for f in folders}
        note_map = {n.id: n for n in notes}
        tab_list = tuple(tabs)

        active_folder_id = next(iter(folder_map), None)
        if active_tab_id is not None:
            active_tab = next((t for t in tab_list if t.id == active_tab_id), None)
            if active_tab is not None and active_tab.noteId in note_map:
                active_folder_id = note_map[active_tab.noteId].folderId

        state = WorkspaceState(
            folders=folder_map,
            notes=note_map,
            tabs=tab_list,
            activeTabId=active_tab_id,
            activeFolderId=active_folder_id,
            phase=LifecyclePhase.initialized,
        )
        problems = check_integrity(state)
        if problems:
            raise ValidationError("Cannot load workspace: " + "; ".join(problems))

        logger.info(f"Workspace hydrated: {len(folder_map)} folders, {len(note_map)} notes")
        self._commit(state, ChangeKind.hydrated)

    def begin_sync(self) -> bool:
        """Move initialized -> syncing. Returns False if sync already ran or cannot run yet."""
        if self._state.phase != LifecyclePhase.initialized:
            return False
        self._set_phase(LifecyclePhase.syncing)
        return True

    def mark_ready(self) -> None:
        """Move to ready (from syncing, or directly from initialized when no sync runs)."""
        if self._state.phase not in (LifecyclePhase.initialized, LifecyclePhase.syncing):
            raise ValidationError(f"Cannot mark ready from phase {self._state.phase.value}")
        self._set_phase(LifecyclePhase.ready)

    def _set_phase(self, phase: LifecyclePhase) -> None:
        logger.info(f"Workspace phase: {self._state.phase.value} -> {phase.value}")
        self._commit(self._state.model_copy(update={"phase": phase}), ChangeKind.phase_changed)

    # ==================== Folders ====================

    def create_folder(self, name: str) -> str:
        """Create a folder and return its id.

        Raises:
            ValidationError: If the name is empty after trimming
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Folder name must not be empty")

        now = get_timestamp_ms()
        folder = Folder(id=generate_id("folder"), name=name, createdAt=now, updatedAt=now)
        state = self._state
        self._commit(
            state.model_copy(
                update={
                    "folders": {**state.folders, folder.id: folder},
                    "activeFolderId": state.activeFolderId or folder.id,
                }
            ),
            ChangeKind.folder_created,
            folder.id,
        )
        return folder.id

    def rename_folder(self, folder_id: str, new_name: str) -> Folder:
        """Rename a folder; a blank name keeps the previous one."""
        folder = self._require_folder(folder_id)
        name = (new_name or "").strip() or folder.name
        renamed = folder.model_copy(update={"name": name, "updatedAt": get_timestamp_ms()})
        self._commit(self._replace_folder(self._state, renamed), ChangeKind.folder_renamed, folder_id)
        return renamed

    def toggle_folder_expanded(self, folder_id: str) -> bool:
        """Flip a folder's expanded flag and return the new value."""
        folder = self._require_folder(folder_id)
        updated = folder.model_copy(update={"isExpanded": not folder.isExpanded})
        self._commit(self._replace_folder(self._state, updated), ChangeKind.folder_updated, folder_id)
        return updated.isExpanded

    def set_active_folder(self, folder_id: str) -> None:
        self._require_folder(folder_id)
        self._commit(
            self._state.model_copy(update={"activeFolderId": folder_id}),
            ChangeKind.active_folder_changed,
            folder_id,
        )

    def delete_folder(self, folder_id: str) -> None:
        """Delete an empty folder.

        Raises:
            NotFoundError: Unknown folder
            ValidationError: The folder still contains notes
        """
        folder = self._require_folder(folder_id)
        if folder.noteIds:
            raise ValidationError(f"Folder {folder_id} is not empty ({len(folder.noteIds)} notes)")

        state = self._state
        folders = {fid: f for fid, f in state.folders.items() if fid != folder_id}
        active_folder_id = state.activeFolderId
        if active_folder_id == folder_id:
            active_folder_id = next(iter(folders), None)
        self._commit(
            state.model_copy(update={"folders": folders, "activeFolderId": active_folder_id}),
            ChangeKind.folder_deleted,
            folder_id,
        )

    # ==================== Notes ====================

    def create_note(
        self,
        folder_id: str,
        title: str,
        content: Any,
        kind: NoteKind = NoteKind.plain,
        template_meta: TemplateMeta | None = None,
        *,
        note_id: str | None = None,
        activate: bool = False,
    ) -> str:
        """Create a note in a folder and return its id.

        Args:
            folder_id: Owning folder
            title: Display title ("Untitled Note" when blank)
            content: Opaque document value
            kind: plain or templated
            template_meta: Required for templated notes, forbidden for plain ones
            note_id: Explicit id (imports derive it from the file id)
            activate: Open and focus a tab for the note in the same commit

        Raises:
            NotFoundError: Unknown folder, or missing source for a templated note
            ValidationError: Duplicate id or inconsistent template metadata
        """
        folder = self._require_folder(folder_id)
        kind = NoteKind(kind)

        if kind == NoteKind.templated and template_meta is None:
            raise ValidationError("Templated notes require a template type and source note")
        if kind == NoteKind.plain and template_meta is not None:
            raise ValidationError("Plain notes cannot carry template metadata")
        if template_meta is not None:
            self._require_note(template_meta.sourceNoteId)

        note_id = note_id or generate_id("note")
        if note_id in self._state.notes:
            raise ValidationError(f"Note already exists: {note_id}")

        now = get_timestamp_ms()
        note = Note(
            id=note_id,
            title=_note_title(title),
            content=content,
            kind=kind,
            folderId=folder_id,
            templateType=template_meta.templateType if template_meta else None,
            sourceNoteId=template_meta.sourceNoteId if template_meta else None,
            createdAt=now,
            updatedAt=now,
        )
        updated_folder = folder.model_copy(
            update={"noteIds": folder.noteIds + (note_id,), "isExpanded": True, "updatedAt": now}
        )

        state = self._replace_folder(self._state, updated_folder)
        state = state.model_copy(update={"notes": {**state.notes, note_id: note}})
        if activate:
            state = _with_tab_activated(state, note)

        self._commit(state, ChangeKind.note_created, note_id)
        return note_id

    def new_note(self, folder_id: str | None = None) -> str:
        """Create an empty "Untitled Note" and activate it.

        Uses the given folder, else the active folder, else the first folder.

        Raises:
            ValidationError: If the workspace has no folder
        """
        target = folder_id or self._state.activeFolderId or next(iter(self._state.folders), None)
        if target is None:
            raise ValidationError("Create a folder before adding notes")
        return self.create_note(target, DEFAULT_NOTE_TITLE, create_empty_document(), activate=True)

    def rename_note(self, note_id: str, new_title: str) -> Note:
        """Rename a note; a blank title becomes "Untitled Note". Ends tab renaming."""
        note = self._require_note(note_id)
        renamed = note.model_copy(update={"title": _note_title(new_title), "updatedAt": get_timestamp_ms()})

        state = self._state
        tabs = tuple(t.model_copy(update={"isRenaming": False}) if t.noteId == note_id else t for t in state.tabs)
        self._commit(
            state.model_copy(update={"notes": {**state.notes, note_id: renamed}, "tabs": tabs}),
            ChangeKind.note_renamed,
            note_id,
        )
        return renamed

    def update_note_content(self, note_id: str, content: Any) -> Note:
        """Replace a note's content; title and kind are untouched."""
        note = self._require_note(note_id)
        updated = note.model_copy(update={"content": content, "updatedAt": get_timestamp_ms()})
        state = self._state
        self._commit(
            state.model_copy(update={"notes": {**state.notes, note_id: updated}}),
            ChangeKind.note_content_updated,
            note_id,
        )
        return updated

    def delete_note(self, note_id: str) -> None:
        """Delete a note, remove it from its folder and close its tab.

        If the note's tab was active, the first remaining tab becomes active
        (or none). A pending generation sourced from this note is dropped.
        Templated notes derived from it keep their sourceNoteId.
        """
        note = self._require_note(note_id)
        state = self._state

        notes = {nid: n for nid, n in state.notes.items() if nid != note_id}
        folder = state.folders.get(note.folderId)
        if folder is not None:
            state = self._replace_folder(
                state,
                folder.model_copy(update={"noteIds": tuple(i for i in folder.noteIds if i != note_id)}),
            )

        pending = state.pendingGeneration
        if pending is not None and pending.sourceNoteId == note_id:
            logger.warning(f"Dropping pending {pending.templateType.value} generation: source {note_id} deleted")
            pending = None

        state = state.model_copy(update={"notes": notes, "pendingGeneration": pending})
        state = _without_tab(state, note_id)
        self._commit(state, ChangeKind.note_deleted, note_id)

    # ==================== Tabs ====================

    def activate_tab(self, note_id: str) -> None:
        """Open (or focus) the tab for a note and make its folder active."""
        note = self._require_note(note_id)
        opened = self._state.get_tab(note_id) is None
        self._commit(
            _with_tab_activated(self._state, note),
            ChangeKind.tab_opened if opened else ChangeKind.tab_activated,
            note_id,
        )

    def close_tab(self, tab_id: str) -> None:
        """Close a tab without deleting its note.

        Raises:
            NotFoundError: No open tab with this id
        """
        if self._state.get_tab(tab_id) is None:
            raise NotFoundError("Tab", tab_id)
        self._commit(_without_tab(self._state, tab_id), ChangeKind.tab_closed, tab_id)

    def set_renaming(self, tab_id: str, is_renaming: bool) -> None:
        """Toggle the transient renaming flag; at most one tab renames at a time."""
        if self._state.get_tab(tab_id) is None:
            raise NotFoundError("Tab", tab_id)
        tabs = tuple(
            t.model_copy(update={"isRenaming": is_renaming if t.id == tab_id else (t.isRenaming and not is_renaming)})
            for t in self._state.tabs
        )
        self._commit(self._state.model_copy(update={"tabs": tabs}), ChangeKind.tab_renaming_changed, tab_id)

    # ==================== Pending generation ====================

    def arm_pending_generation(self, template_type: TemplateType, source_note_id: str) -> PendingGeneration:
        """Record a deferred generation request; replaces any previous one."""
        pending = PendingGeneration(templateType=to_template_type(template_type), sourceNoteId=source_note_id)
        logger.info(f"Armed pending {pending.templateType.value} generation for {source_note_id}")
        self._commit(
            self._state.model_copy(update={"pendingGeneration": pending}),
            ChangeKind.pending_generation_changed,
            source_note_id,
        )
        return pending

    def take_pending_generation(self) -> PendingGeneration | None:
        """Clear and return the pending generation request, if any."""
        pending = self._state.pendingGeneration
        if pending is None:
            return None
        self._commit(
            self._state.model_copy(update={"pendingGeneration": None}),
            ChangeKind.pending_generation_changed,
            pending.sourceNoteId,
        )
        return pending

    # ==================== Helpers ====================

    @staticmethod
    def _replace_folder(state: WorkspaceState, folder: Folder) -> WorkspaceState:
        return state.model_copy(update={"folders": {**state.folders, folder.id: folder}})


def to_template_type(value: TemplateType | str) -> TemplateType:
    """Parse a template type, rejecting unknown values.

    Raises:
        ValidationError: If value is not a known template type
    """
    try:
        return TemplateType(value)
    except ValueError:
        raise ValidationError(f"Unknown template type: {value}") from None


def _note_title(title: str | None) -> str:
    return (title or "").strip() or DEFAULT_NOTE_TITLE


def _with_tab_activated(state: WorkspaceState, note: Note) -> WorkspaceState:
    tabs = state.tabs
    if state.get_tab(note.id) is None:
        tabs = tabs + (Tab(id=note.id, noteId=note.id),)
    return state.model_copy(update={"tabs": tabs, "activeTabId": note.id, "activeFolderId": note.folderId})


def _without_tab(state: WorkspaceState, tab_id: str) -> WorkspaceState:
    """Remove a tab (if open) and pick the successor active tab/folder."""
    remaining = tuple(t for t in state.tabs if t.id != tab_id)
    active_tab_id = state.activeTabId
    active_folder_id = state.activeFolderId

    if active_tab_id == tab_id:
        active_tab_id = remaining[0].id if remaining else None
        if active_tab_id is not None:
            active_folder_id = state.notes[remaining[0].noteId].folderId

    if active_folder_id not in state.folders:
        active_folder_id = next(iter(state.folders), None)

    return state.model_copy(
        update={"tabs": remaining, "activeTabId": active_tab_id, "activeFolderId": active_folder_id}
    )

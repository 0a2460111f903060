"""Workspace session: wires the store, ports and coordinators together.

Lifecycle:
1. load(): rehydrate folders/notes from the Persistence Port (initialized)
2. Write-through: every committed folder/note change is persisted
3. File sync: import uploads once, optionally arming a generation (ready)

Usage:
    session = create_session()
    await session.start(template_type="SOAP")
    session.generation.select_template("DAP")
    await session.generation.confirm()
"""

from collections.abc import Mapping

from clinote.components.templates.catalog import TemplateType
from clinote.components.templates.generation import TemplateGenerationCoordinator
from clinote.components.workspace.models import ChangeKind, Note, WorkspaceChange, WorkspaceState
from clinote.components.workspace.ports import FilePort, GeneratorPort, PersistencePort
from clinote.components.workspace.store import WorkspaceStore
from clinote.components.workspace.sync import FileSyncCoordinator, SyncResult
from clinote.utils import get_logger

logger = get_logger(__name__)


class WorkspaceSession:
    """One open workspace and the coordinators acting on it."""

    def __init__(
        self,
        generator: GeneratorPort,
        file_port: FilePort | None = None,
        persistence: PersistencePort | None = None,
        store: WorkspaceStore | None = None,
        file_folders: Mapping[str, str] | None = None,
    ):
        self.store = store or WorkspaceStore()
        self.persistence = persistence
        self.sync = FileSyncCoordinator(self.store, file_port, file_folders=file_folders) if file_port else None
        self.generation = TemplateGenerationCoordinator(self.store, generator)

        self._persisted: WorkspaceState | None = None
        self._unsubscribe_persistence = None
        self._unsubscribe_warnings = self.store.subscribe(self._warn_on_source_deleted)

    # ==================== Lifecycle ====================

    def load(self) -> None:
        """Rehydrate from persistence and start writing changes through.

        Raises:
            ValidationError: If the persisted data is inconsistent
        """
        folders, notes = self.persistence.list_folders_and_notes() if self.persistence else ([], [])
        self.store.hydrate(folders, notes)

        for note in self.orphaned_templates():
            logger.warning(f"Templated note {note.id} refers to deleted source {note.sourceNoteId}")

        if self.persistence is not None:
            self._persisted = self.store.state
            self._unsubscribe_persistence = self.store.subscribe(self._write_through)

    async def start(self, template_type: TemplateType | str | None = None) -> SyncResult:
        """Load the workspace and run the one-time file sync.

        Args:
            template_type: Template to generate from the first imported note
        """
        self.load()
        if self.sync is None:
            self.store.mark_ready()
            return SyncResult(ran=False)
        return await self.sync.run(template_type)

    async def wait_idle(self) -> None:
        """Wait for generations started in the background."""
        await self.generation.wait_idle()

    def close(self) -> None:
        """Detach every store subscriber owned by the session."""
        self.generation.close()
        self._unsubscribe_warnings()
        if self._unsubscribe_persistence is not None:
            self._unsubscribe_persistence()
            self._unsubscribe_persistence = None

    # ==================== Queries ====================

    def orphaned_templates(self) -> list[Note]:
        """Templated notes whose source note no longer exists."""
        notes = self.store.state.notes
        return [n for n in notes.values() if n.is_templated and n.sourceNoteId not in notes]

    # ==================== Subscribers ====================

    def _warn_on_source_deleted(self, state: WorkspaceState, change: WorkspaceChange) -> None:
        if change.kind != ChangeKind.note_deleted:
            return
        for note in state.notes.values():
            if note.is_templated and note.sourceNoteId == change.entityId:
                logger.warning(f"Source of templated note {note.id} was deleted ({change.entityId})")

    def _write_through(self, state: WorkspaceState, change: WorkspaceChange) -> None:
        """Persist folder/note differences between the last persisted and the new snapshot."""
        previous = self._persisted
        self._persisted = state
        if previous is None or (state.folders is previous.folders and state.notes is previous.notes):
            return

        storage = self.persistence
        for folder_id, folder in state.folders.items():
            old = previous.folders.get(folder_id)
            saved = storage.create_folder(folder) if old is None else (old is folder or storage.update_folder(folder))
            if saved is False:
                logger.warning(f"Failed to persist folder {folder_id}")

        for note_id, note in state.notes.items():
            old = previous.notes.get(note_id)
            saved = storage.create_note(note) if old is None else (old is note or storage.update_note(note))
            if saved is False:
                logger.warning(f"Failed to persist note {note_id}")

        for note_id in previous.notes.keys() - state.notes.keys():
            storage.delete_note(note_id)
        for folder_id in previous.folders.keys() - state.folders.keys():
            storage.delete_folder(folder_id)

        logger.debug(f"Persisted {change.kind.value}")


def create_session(file_folders: Mapping[str, str] | None = None) -> WorkspaceSession:
    """Session wired to the configured uploads directory, storage and generator."""
    from clinote.components.templates.provider import get_template_generator
    from clinote.components.workspace.storage_provider import get_workspace_storage
    from clinote.services.filesystem import LocalFileService

    file_service = LocalFileService()
    file_service.initialize()
    return WorkspaceSession(
        generator=get_template_generator(),
        file_port=file_service,
        persistence=get_workspace_storage(),
        file_folders=file_folders,
    )

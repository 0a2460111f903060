"""File-sync coordinator.

Turns previously uploaded files into notes, exactly once per file:

1. Runs once per workspace lifetime: the initialized -> syncing -> ready
   phase transition is the latch, so a second run() is a no-op.
2. Lists uploaded files from the File Port.
3. Skips files whose derived note id ("note-" + file id) already exists.
4. Reads the remaining files concurrently; failures are collected per file.
5. Creates notes in file-list order and activates the first one.
6. If a template was pre-selected, arms a pending generation request on the
   store; the generation coordinator fires it once the note is visible.
"""

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field

from clinote.components.templates.catalog import TemplateType
from clinote.components.workspace.errors import FileImportError, ValidationError, WorkspaceError
from clinote.components.workspace.models import LifecyclePhase, PendingGeneration, UploadedFile
from clinote.components.workspace.ports import FilePort
from clinote.components.workspace.store import WorkspaceStore, to_template_type
from clinote.settings import settings
from clinote.utils import get_logger, imported_note_id, text_to_document

logger = get_logger(__name__)


@dataclass
class SyncResult:
    """Outcome of a sync pass."""

    ran: bool
    imported: list[str] = field(default_factory=list)  # note ids, file-list order
    skipped: list[str] = field(default_factory=list)  # file ids already imported
    failed: list[FileImportError] = field(default_factory=list)
    pending: PendingGeneration | None = None


class FileSyncCoordinator:
    """Reconciles the workspace with the uploaded-file list."""

    def __init__(
        self,
        store: WorkspaceStore,
        file_port: FilePort,
        *,
        file_folders: Mapping[str, str] | None = None,
        default_folder_name: str | None = None,
        max_concurrency: int | None = None,
    ):
        """
        Args:
            store: Workspace store to import into
            file_port: Source of uploaded files
            file_folders: Optional file id -> folder id associations
            default_folder_name: Name of the fallback folder created when none exists
            max_concurrency: Upper bound on concurrent file reads
        """
        self._store = store
        self._file_port = file_port
        self._file_folders = dict(file_folders or {})
        self._default_folder_name = default_folder_name or settings.default_folder_name
        self._max_concurrency = max(1, max_concurrency or settings.max_concurrent_imports)

    async def run(self, template_type: TemplateType | str | None = None) -> SyncResult:
        """Initial sync; only the first call after initialization does anything.

        Args:
            template_type: Template pre-selected by the caller. When set and at
                least one note is imported, a pending generation is armed for
                the first imported note.

        Raises:
            ValidationError: If template_type is unknown; nothing is imported
        """
        if template_type is not None:
            template_type = to_template_type(template_type)

        if not self._store.begin_sync():
            logger.info(f"File sync skipped (phase={self._store.phase.value})")
            return SyncResult(ran=False)

        try:
            result = await self._sync()
            if template_type is not None and result.imported:
                result.pending = self._store.arm_pending_generation(template_type, result.imported[0])
        finally:
            self._store.mark_ready()

        return result

    async def resync(self) -> SyncResult:
        """Explicit later sync (e.g. after new uploads). Never arms generation.

        Raises:
            ValidationError: If the workspace is not ready yet
        """
        if self._store.phase != LifecyclePhase.ready:
            raise ValidationError(f"Cannot resync in phase {self._store.phase.value}")
        return await self._sync()

    def associate_file(self, file_id: str, folder_id: str) -> None:
        """Import a given file into a specific folder."""
        self._file_folders[file_id] = folder_id

    async def _sync(self) -> SyncResult:
        result = SyncResult(ran=True)
        files = await self._file_port.list_uploaded_files()

        to_import: list[UploadedFile] = []
        queued: set[str] = set()
        for uploaded in files:
            note_id = imported_note_id(uploaded.id)
            if self._store.has_note(note_id) or note_id in queued:
                result.skipped.append(uploaded.id)
                continue
            queued.add(note_id)
            to_import.append(uploaded)

        logger.info(f"File sync: {len(files)} uploaded, {len(to_import)} to import, {len(result.skipped)} present")
        if not to_import:
            return result

        semaphore = asyncio.Semaphore(self._max_concurrency)
        contents = await asyncio.gather(
            *(self._read(uploaded, semaphore) for uploaded in to_import),
            return_exceptions=True,
        )

        for uploaded, content in zip(to_import, contents):
            if isinstance(content, FileImportError):
                result.failed.append(content)
                continue
            if isinstance(content, BaseException):
                raise content

            note_id = self._create_note(uploaded, content, result)
            if note_id is not None:
                result.imported.append(note_id)

        for failure in result.failed:
            logger.error(str(failure))

        if result.imported:
            self._store.activate_tab(result.imported[0])

        logger.info(f"File sync done: imported={len(result.imported)}, failed={len(result.failed)}")
        return result

    async def _read(self, uploaded: UploadedFile, semaphore: asyncio.Semaphore) -> str:
        async with semaphore:
            try:
                return await self._file_port.read_file_as_text(uploaded.path)
            except Exception as e:
                raise FileImportError(uploaded.id, uploaded.name, str(e) or type(e).__name__) from e

    def _create_note(self, uploaded: UploadedFile, content: str, result: SyncResult) -> str | None:
        note_id = imported_note_id(uploaded.id)
        if self._store.has_note(note_id):
            # Created elsewhere while the read was suspended
            result.skipped.append(uploaded.id)
            return None

        try:
            self._store.create_note(
                self._target_folder(uploaded),
                uploaded.name,
                text_to_document(content),
                note_id=note_id,
            )
        except WorkspaceError as e:
            result.failed.append(FileImportError(uploaded.id, uploaded.name, str(e)))
            return None

        logger.debug(f"Imported {uploaded.name} as {note_id}")
        return note_id

    def _target_folder(self, uploaded: UploadedFile) -> str:
        """Associated folder, else active, else first, else a new default folder."""
        state = self._store.state
        associated = self._file_folders.get(uploaded.id)
        if associated in state.folders:
            return associated
        if state.activeFolderId in state.folders:
            return state.activeFolderId
        first = next(iter(state.folders), None)
        if first is not None:
            return first

        logger.info(f"No folder available, creating default folder '{self._default_folder_name}'")
        return self._store.create_folder(self._default_folder_name)

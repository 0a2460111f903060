"""Tests for FileSyncCoordinator.

Covers the one-time latch, idempotent import, target folder selection,
per-file failures and arming of the deferred generation.
"""

import pytest

from clinote.components.templates.catalog import TemplateType
from clinote.components.workspace.errors import ValidationError
from clinote.components.workspace.models import LifecyclePhase
from clinote.components.workspace.store import WorkspaceStore
from clinote.components.workspace.sync import FileSyncCoordinator
from clinote.utils import document_to_plain_text


class TestInitialSync:
    """First sync after initialization."""

    @pytest.mark.asyncio
    async def test_imports_files_in_order(self, store: WorkspaceStore, file_port):
        """Each file becomes a note named after it, in file-list order."""
        file_port.add("a.txt", "alpha", delay=0.02)
        file_port.add("b.txt", "beta")
        coordinator = FileSyncCoordinator(store, file_port)

        result = await coordinator.run()

        assert result.ran is True
        assert result.imported == ["note-file-a.txt", "note-file-b.txt"]
        folder = store.list_folders()[0]
        assert folder.name == "My Notes"
        assert folder.noteIds == ("note-file-a.txt", "note-file-b.txt")
        assert document_to_plain_text(store.get_note("note-file-a.txt").content) == "alpha"
        assert store.phase == LifecyclePhase.ready

    @pytest.mark.asyncio
    async def test_activates_first_imported_note(self, store: WorkspaceStore, file_port):
        """Only the first imported note gets a tab, and it is active."""
        file_port.add("a.txt", "alpha")
        file_port.add("b.txt", "beta")

        await FileSyncCoordinator(store, file_port).run()

        assert [t.id for t in store.state.tabs] == ["note-file-a.txt"]
        assert store.state.activeTabId == "note-file-a.txt"

    @pytest.mark.asyncio
    async def test_runs_once(self, store: WorkspaceStore, file_port):
        """A second run is a no-op."""
        file_port.add("a.txt", "alpha")
        coordinator = FileSyncCoordinator(store, file_port)

        await coordinator.run()
        second = await coordinator.run()

        assert second.ran is False
        assert file_port.list_calls == 1
        assert len(store.state.notes) == 1

    @pytest.mark.asyncio
    async def test_requires_initialized_store(self, file_port):
        """No sync happens before the store is hydrated."""
        store = WorkspaceStore()

        result = await FileSyncCoordinator(store, file_port).run()

        assert result.ran is False
        assert store.phase == LifecyclePhase.uninitialized

    @pytest.mark.asyncio
    async def test_no_files(self, store: WorkspaceStore, file_port):
        """With nothing uploaded the workspace still becomes ready, without folders."""
        result = await FileSyncCoordinator(store, file_port).run(TemplateType.SOAP)

        assert result.imported == []
        assert result.pending is None
        assert store.list_folders() == []
        assert store.phase == LifecyclePhase.ready


class TestTargetFolder:
    """Folder selection for imported notes."""

    @pytest.mark.asyncio
    async def test_uses_active_folder(self, store: WorkspaceStore, file_port):
        """Imports go to the active folder when there is one."""
        store.create_folder("First")
        second = store.create_folder("Second")
        store.set_active_folder(second)
        file_port.add("a.txt", "alpha")

        await FileSyncCoordinator(store, file_port).run()

        assert store.get_note("note-file-a.txt").folderId == second

    @pytest.mark.asyncio
    async def test_uses_associated_folder(self, store: WorkspaceStore, file_port):
        """A file associated with a folder is imported there."""
        first = store.create_folder("First")
        second = store.create_folder("Second")
        uploaded = file_port.add("a.txt", "alpha")
        file_port.add("b.txt", "beta")
        coordinator = FileSyncCoordinator(store, file_port)
        coordinator.associate_file(uploaded.id, second)

        await coordinator.run()

        assert store.get_note("note-file-a.txt").folderId == second
        assert store.get_note("note-file-b.txt").folderId == first


class TestFailuresAndIdempotency:
    """Per-file failures and re-sync behaviour."""

    @pytest.mark.asyncio
    async def test_failed_file_does_not_block_siblings(self, store: WorkspaceStore, file_port):
        """One unreadable file is reported; the others are imported."""
        file_port.add("a.txt", "alpha")
        file_port.add("broken.txt", "", fail=UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte"))
        file_port.add("c.txt", "gamma")

        result = await FileSyncCoordinator(store, file_port).run()

        assert result.imported == ["note-file-a.txt", "note-file-c.txt"]
        assert len(result.failed) == 1
        assert result.failed[0].file_name == "broken.txt"
        assert store.phase == LifecyclePhase.ready

    @pytest.mark.asyncio
    async def test_resync_skips_existing_notes(self, store: WorkspaceStore, file_port):
        """Files already represented as notes are never imported twice."""
        file_port.add("a.txt", "alpha")
        coordinator = FileSyncCoordinator(store, file_port)
        await coordinator.run()

        file_port.add("b.txt", "beta")
        result = await coordinator.resync()

        assert result.imported == ["note-file-b.txt"]
        assert result.skipped == ["file-a.txt"]
        assert len(store.state.notes) == 2
        assert store.check_integrity() == []

    @pytest.mark.asyncio
    async def test_duplicate_listing_imported_once(self, store: WorkspaceStore, file_port):
        """The same file listed twice produces one note."""
        file_port.add("a.txt", "alpha")
        file_port.files.append(file_port.files[0])

        result = await FileSyncCoordinator(store, file_port).run()

        assert result.imported == ["note-file-a.txt"]
        assert result.skipped == ["file-a.txt"]

    @pytest.mark.asyncio
    async def test_resync_before_ready(self, store: WorkspaceStore, file_port):
        """resync is only allowed once the workspace is ready."""
        with pytest.raises(ValidationError):
            await FileSyncCoordinator(store, file_port).resync()


class TestPendingGeneration:
    """Arming the deferred generation request."""

    @pytest.mark.asyncio
    async def test_arms_pending_for_first_note(self, store: WorkspaceStore, file_port):
        """A pre-selected template arms exactly one request, for the first note."""
        file_port.add("a.txt", "alpha")
        file_port.add("b.txt", "beta")

        result = await FileSyncCoordinator(store, file_port).run("DAP")

        assert result.pending.templateType == TemplateType.DAP
        assert result.pending.sourceNoteId == "note-file-a.txt"
        assert store.state.pendingGeneration == result.pending

    @pytest.mark.asyncio
    async def test_resync_never_arms(self, store: WorkspaceStore, file_port):
        """Later syncs do not arm a generation."""
        coordinator = FileSyncCoordinator(store, file_port)
        await coordinator.run()
        file_port.add("a.txt", "alpha")

        result = await coordinator.resync()

        assert result.pending is None
        assert store.state.pendingGeneration is None

    @pytest.mark.asyncio
    async def test_unknown_template_rejected_before_import(self, store: WorkspaceStore, file_port):
        """An unknown template type fails the run without importing anything."""
        file_port.add("a.txt", "alpha")

        with pytest.raises(ValidationError, match="Unknown template type: BOGUS"):
            await FileSyncCoordinator(store, file_port).run("BOGUS")

        assert store.state.notes == {}
        assert store.state.pendingGeneration is None
        assert store.phase == LifecyclePhase.initialized

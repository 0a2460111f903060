"""Tests for LocalFileService.

Covers listing, stable ids, text reads, atomic saves and path containment.
"""

import pytest

from clinote.services.filesystem import LocalFileService, file_id_for


@pytest.fixture
def file_service(tmp_path) -> LocalFileService:
    service = LocalFileService(uploads_root=tmp_path / "uploads")
    service.initialize()
    return service


class TestLocalFileServiceInit:
    """Directory initialization."""

    def test_initialize_creates_uploads_dir(self, tmp_path):
        """Initialization creates the uploads directory."""
        service = LocalFileService(uploads_root=tmp_path / "uploads")

        service.initialize()

        assert service.is_initialized
        assert (tmp_path / "uploads").is_dir()

    def test_initialize_is_idempotent(self, file_service: LocalFileService):
        """Multiple initialize calls don't cause errors."""
        file_service.initialize()

        assert file_service.is_initialized


class TestListing:
    """list_uploaded_files()."""

    @pytest.mark.asyncio
    async def test_lists_files_by_relative_path(self, file_service: LocalFileService):
        """Files (including nested ones) are listed by relative path with stable ids."""
        (file_service.uploads_root / "b.txt").write_text("beta")
        (file_service.uploads_root / "2024").mkdir()
        (file_service.uploads_root / "2024" / "a.txt").write_text("alpha")

        files = await file_service.list_uploaded_files()

        assert [f.path for f in files] == ["2024/a.txt", "b.txt"]
        assert files[0].name == "a.txt"
        assert files[0].id == file_id_for("2024/a.txt")
        assert files[1].size == 4

    @pytest.mark.asyncio
    async def test_ids_are_stable(self, file_service: LocalFileService):
        """Listing twice yields the same ids."""
        (file_service.uploads_root / "a.txt").write_text("alpha")

        first = await file_service.list_uploaded_files()
        second = await file_service.list_uploaded_files()

        assert first[0].id == second[0].id

    @pytest.mark.asyncio
    async def test_skips_hidden_and_temp_files(self, file_service: LocalFileService):
        """In-flight temp files and dotfiles are not uploads."""
        (file_service.uploads_root / ".a.txt.abc.tmp").write_text("partial")
        (file_service.uploads_root / "notes.tmp").write_text("partial")
        (file_service.uploads_root / "a.txt").write_text("alpha")

        files = await file_service.list_uploaded_files()

        assert [f.name for f in files] == ["a.txt"]

    @pytest.mark.asyncio
    async def test_missing_root(self, tmp_path):
        """A missing uploads directory lists nothing."""
        service = LocalFileService(uploads_root=tmp_path / "absent")

        assert await service.list_uploaded_files() == []


class TestReadAndSave:
    """read_file_as_text(), save_upload(), delete_upload()."""

    @pytest.mark.asyncio
    async def test_save_then_read(self, file_service: LocalFileService):
        """A saved upload is listed and readable."""
        uploaded = file_service.save_upload("intake.txt", "Patient reports poor sleep.")

        files = await file_service.list_uploaded_files()
        text = await file_service.read_file_as_text(uploaded.path)

        assert files == [uploaded]
        assert text == "Patient reports poor sleep."
        assert list(file_service.uploads_root.glob("*.tmp")) == []

    def test_save_strips_directories(self, file_service: LocalFileService):
        """Only the file name of an upload is used."""
        uploaded = file_service.save_upload("../../etc/intake.txt", b"bytes")

        assert uploaded.path == "intake.txt"
        assert (file_service.uploads_root / "intake.txt").read_bytes() == b"bytes"

    def test_save_overwrites(self, file_service: LocalFileService):
        """Saving the same name replaces the content, keeping the id."""
        first = file_service.save_upload("a.txt", "one")
        second = file_service.save_upload("a.txt", "two!")

        assert first.id == second.id
        assert second.size == 4

    def test_save_rejects_empty_name(self, file_service: LocalFileService):
        with pytest.raises(ValueError):
            file_service.save_upload("", "x")

    @pytest.mark.asyncio
    async def test_read_missing_file(self, file_service: LocalFileService):
        with pytest.raises(FileNotFoundError):
            await file_service.read_file_as_text("missing.txt")

    @pytest.mark.asyncio
    async def test_read_outside_root(self, file_service: LocalFileService):
        """Paths escaping the uploads directory are refused."""
        with pytest.raises(ValueError):
            await file_service.read_file_as_text("../secret.txt")

    @pytest.mark.asyncio
    async def test_read_binary_file(self, file_service: LocalFileService):
        """Undecodable files raise UnicodeDecodeError."""
        uploaded = file_service.save_upload("scan.bin", b"\xff\xfe\x00\x81")

        with pytest.raises(UnicodeDecodeError):
            await file_service.read_file_as_text(uploaded.path)

    def test_delete_upload(self, file_service: LocalFileService):
        uploaded = file_service.save_upload("a.txt", "alpha")

        assert file_service.delete_upload(uploaded.path) is True
        assert file_service.delete_upload(uploaded.path) is False

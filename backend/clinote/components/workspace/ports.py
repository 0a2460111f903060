"""Ports consumed by the workspace core.

Implementations live outside the core:
- FilePort: clinote.services.filesystem.LocalFileService
- PersistencePort: storage.MemoryWorkspaceStorage, redis_storage.WorkspaceRedisStorage
- GeneratorPort: clinote.components.templates.mock / client
"""

from typing import Protocol

from clinote.components.templates.catalog import TemplateType
from clinote.components.workspace.models import Folder, Note, UploadedFile


class FilePort(Protocol):
    """Read-only access to previously uploaded files."""

    async def list_uploaded_files(self) -> list[UploadedFile]: ...
    async def read_file_as_text(self, path: str) -> str: ...


class PersistencePort(Protocol):
    """Optional durability layer the workspace is rehydrated from."""

    def create_folder(self, folder: Folder) -> bool | None: ...
    def update_folder(self, folder: Folder) -> bool | None: ...
    def delete_folder(self, folder_id: str) -> bool: ...

    def create_note(self, note: Note) -> bool | None: ...
    def update_note(self, note: Note) -> bool | None: ...
    def delete_note(self, note_id: str) -> bool: ...

    def list_folders_and_notes(self) -> tuple[list[Folder], list[Note]]: ...

    def clear_all(self) -> None: ...


class GeneratorPort(Protocol):
    """Request/response template generator.

    Failures are raised as GenerationError with a classified kind.
    """

    async def generate_template(self, plain_text: str, template_type: TemplateType) -> str: ...

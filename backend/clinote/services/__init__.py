"""Infrastructure services."""

from clinote.services.filesystem import LocalFileService, file_id_for

__all__ = ["LocalFileService", "file_id_for"]

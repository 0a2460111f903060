"""Workspace error taxonomy.

- ValidationError: bad input (empty name, missing field); store unchanged
- NotFoundError: stale id; store unchanged
- FileImportError: one uploaded file failed to import; siblings continue
- GenerationError: generator failure, classified for the UI
- InvalidTransitionError: generation state machine misuse
"""

from enum import Enum


class WorkspaceError(Exception):
    """Base class for all workspace errors."""


class ValidationError(WorkspaceError):
    """Operation rejected because its input is invalid."""


class NotFoundError(WorkspaceError):
    """Operation referenced an entity that does not exist."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class InvalidTransitionError(WorkspaceError):
    """Operation not allowed in the current generation phase."""


class FileImportError(WorkspaceError):
    """Importing one uploaded file into a note failed."""

    def __init__(self, file_id: str, file_name: str, reason: str):
        self.file_id = file_id
        self.file_name = file_name
        self.reason = reason
        super().__init__(f"Failed to import {file_name} ({file_id}): {reason}")


class GenerationErrorKind(str, Enum):
    """Cause of a generation failure."""

    network = "network"
    quota = "quota"
    malformed_response = "malformed_response"
    service = "service"
    input = "input"


# User-facing remediation text per cause
_USER_MESSAGES = {
    GenerationErrorKind.network: "Could not reach the template service. Check your connection and try again.",
    GenerationErrorKind.quota: "The template service is busy or your usage limit was reached. Try again later.",
    GenerationErrorKind.malformed_response: "The template service returned an unexpected response. Try again.",
    GenerationErrorKind.service: "The template service failed to generate this note.",
    GenerationErrorKind.input: "This note cannot be used to generate a template.",
}


class GenerationError(WorkspaceError):
    """Template generation failed.

    Attributes:
        kind: Classified cause (network, quota, malformed_response, service, input)
        detail: Technical detail for logs
    """

    def __init__(self, kind: GenerationErrorKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)

    @property
    def user_message(self) -> str:
        """Message suitable for display, chosen by cause."""
        return _USER_MESSAGES[self.kind]

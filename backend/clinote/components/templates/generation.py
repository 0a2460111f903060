"""Template-generation coordinator.

State machine::

    idle -> awaiting_confirmation -> generating -> success -> idle
                  |                        \\-> failed  -> idle
                  \\-> (cancel) -> idle

- request_generation(): user picks a template for a plain source note
- confirm(): runs the generator and adds the templated note
- cancel(): only while awaiting confirmation; a running generation always
  completes or fails
- trigger_pending_if_ready(): system-initiated path for a pending request
  armed on the store (e.g. by the file sync); runs without confirmation once
  the source note is present

At most one generation is in flight per workspace. Requests made while
generating are rejected, not queued.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from clinote.components.templates.catalog import TemplateType
from clinote.components.workspace.errors import (
    GenerationError,
    GenerationErrorKind,
    InvalidTransitionError,
    WorkspaceError,
)
from clinote.components.workspace.models import (
    Note,
    NoteKind,
    PendingGeneration,
    TemplateMeta,
    WorkspaceChange,
    WorkspaceState,
)
from clinote.components.workspace.ports import GeneratorPort
from clinote.components.workspace.store import WorkspaceStore, to_template_type
from clinote.utils import document_to_plain_text, generate_id, get_logger, text_to_document

logger = get_logger(__name__)


class GenerationPhase(str, Enum):
    """Generation coordinator states."""

    idle = "idle"
    awaiting_confirmation = "awaiting_confirmation"
    generating = "generating"
    success = "success"
    failed = "failed"


class RequestOutcome(str, Enum):
    """Result of request_generation()."""

    accepted = "accepted"
    in_progress = "in_progress"
    invalid_source = "invalid_source"

    @property
    def message(self) -> str:
        return {
            RequestOutcome.accepted: "Template generation requested",
            RequestOutcome.in_progress: "Generation already in progress",
            RequestOutcome.invalid_source: "Select a plain note to generate a template from",
        }[self]


@dataclass
class GenerationOutcome:
    """Result of a generation run: the new note, or the classified error."""

    note: Note | None = None
    error: GenerationError | None = None

    @property
    def ok(self) -> bool:
        return self.note is not None


PhaseListener = Callable[[GenerationPhase, GenerationPhase], None]


class TemplateGenerationCoordinator:
    """Drives template generation against a shared generator."""

    def __init__(self, store: WorkspaceStore, generator: GeneratorPort):
        self._store = store
        self._generator = generator
        self._phase = GenerationPhase.idle
        self._selection: PendingGeneration | None = None
        self._last_error: GenerationError | None = None
        self._listeners: list[PhaseListener] = []
        self._tasks: set[asyncio.Task] = set()
        self._unsubscribe = store.subscribe(self._on_store_change)

    @property
    def phase(self) -> GenerationPhase:
        return self._phase

    @property
    def is_generating(self) -> bool:
        return self._phase == GenerationPhase.generating

    @property
    def selection(self) -> PendingGeneration | None:
        """Template/source awaiting confirmation, if any."""
        return self._selection

    @property
    def last_error(self) -> GenerationError | None:
        """Latest classified failure; cleared by the next accepted request."""
        return self._last_error

    def subscribe(self, listener: PhaseListener) -> Callable[[], None]:
        """Listen to phase transitions as (previous, current)."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """Stop watching the store."""
        self._unsubscribe()

    # ==================== User-initiated flow ====================

    def request_generation(self, source_note_id: str, template_type: TemplateType | str) -> RequestOutcome:
        """Ask to generate a template from a plain note; awaits confirm()/cancel().

        A new request while awaiting confirmation replaces the previous one.

        Raises:
            ValidationError: If template_type is unknown
        """
        template_type = to_template_type(template_type)
        if self._phase == GenerationPhase.generating:
            logger.warning(f"Rejected generation request for {source_note_id}: generation already in progress")
            return RequestOutcome.in_progress

        source = self._store.get_note(source_note_id)
        if source is None or source.kind != NoteKind.plain:
            logger.warning(f"Cannot generate template: {source_note_id} is not a plain note")
            return RequestOutcome.invalid_source

        self._selection = PendingGeneration(templateType=template_type, sourceNoteId=source_note_id)
        self._last_error = None
        self._transition(GenerationPhase.awaiting_confirmation)
        return RequestOutcome.accepted

    def select_template(self, template_type: TemplateType | str) -> RequestOutcome:
        """Request generation from the note in the active tab."""
        active = self._store.state.active_note
        if active is None:
            logger.warning("Cannot generate template: no active note")
            return RequestOutcome.invalid_source
        return self.request_generation(active.id, template_type)

    async def confirm(self) -> GenerationOutcome:
        """Run the confirmed generation.

        Raises:
            InvalidTransitionError: If nothing is awaiting confirmation
        """
        if self._phase != GenerationPhase.awaiting_confirmation or self._selection is None:
            raise InvalidTransitionError(f"Nothing to confirm (phase={self._phase.value})")

        selection = self._selection
        self._selection = None
        self._transition(GenerationPhase.generating)
        return await self._generate(selection.sourceNoteId, selection.templateType)

    def cancel(self) -> bool:
        """Discard the request awaiting confirmation.

        Returns:
            True if a request was discarded, False if there was none

        Raises:
            InvalidTransitionError: While a generation is running
        """
        if self._phase == GenerationPhase.generating:
            raise InvalidTransitionError("A running generation cannot be cancelled")
        if self._phase != GenerationPhase.awaiting_confirmation:
            return False

        self._selection = None
        self._return_to_idle()
        return True

    # ==================== Deferred (system-initiated) flow ====================

    def trigger_pending_if_ready(self) -> asyncio.Task | None:
        """Start the store's pending generation once its source note exists.

        The pending request is cleared before the generator is called, so
        later change notifications cannot fire it twice. While another
        generation runs (or a user request awaits confirmation) it stays
        armed and is re-evaluated when the coordinator returns to idle.

        Returns:
            The started generation task, or None if nothing was started
        """
        pending = self._store.state.pendingGeneration
        if pending is None:
            return None
        source = self._store.get_note(pending.sourceNoteId)
        if source is None or self._phase != GenerationPhase.idle:
            return None

        if source.kind != NoteKind.plain:
            logger.warning(f"Dropping pending generation: {pending.sourceNoteId} is not a plain note")
            self._store.take_pending_generation()
            return None

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; pending generation stays armed")
            return None

        if self._has_template_for(pending):
            logger.info(
                f"Skipping pending {pending.templateType.value} generation: "
                f"template already exists for {pending.sourceNoteId}"
            )
            self._store.take_pending_generation()
            return None

        self._transition(GenerationPhase.generating)
        self._store.take_pending_generation()
        logger.info(f"Firing pending {pending.templateType.value} generation for {pending.sourceNoteId}")

        task = loop.create_task(self._generate(pending.sourceNoteId, pending.templateType))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_idle(self) -> None:
        """Wait for every generation started by the deferred path."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def _on_store_change(self, state: WorkspaceState, change: WorkspaceChange) -> None:
        if state.pendingGeneration is not None:
            self.trigger_pending_if_ready()

    def _has_template_for(self, pending: PendingGeneration) -> bool:
        return any(
            note.is_templated
            and note.sourceNoteId == pending.sourceNoteId
            and note.templateType == pending.templateType
            for note in self._store.state.notes.values()
        )

    # ==================== Generation ====================

    async def _generate(self, source_note_id: str, template_type: TemplateType) -> GenerationOutcome:
        """Call the generator and add the templated note. Phase is already generating."""
        try:
            source = self._store.get_note(source_note_id)
            if source is None:
                raise GenerationError(GenerationErrorKind.input, f"Source note {source_note_id} no longer exists")

            plain_text = document_to_plain_text(source.content)
            if not plain_text.strip():
                raise GenerationError(GenerationErrorKind.input, f"Source note {source_note_id} is empty")

            logger.info(f"Generating {template_type.value} template from {source_note_id}")
            generated = await self._generator.generate_template(plain_text, template_type)
            if not generated or not generated.strip():
                raise GenerationError(GenerationErrorKind.malformed_response, "Generator returned no content")

            # Re-read: the source may have been renamed or deleted while generating
            source = self._store.get_note(source_note_id)
            if source is None:
                raise GenerationError(GenerationErrorKind.input, f"Source note {source_note_id} was deleted")

            note_id = self._store.create_note(
                source.folderId,
                f"{template_type.value} for {source.title}",
                text_to_document(generated),
                NoteKind.templated,
                TemplateMeta(templateType=template_type, sourceNoteId=source_note_id),
                note_id=generate_id("template"),
                activate=True,
            )
        except GenerationError as e:
            return self._fail(e)
        except WorkspaceError as e:
            return self._fail(GenerationError(GenerationErrorKind.input, str(e)))
        except asyncio.CancelledError:
            self._transition(GenerationPhase.idle)
            raise
        except Exception as e:
            logger.exception(f"Unexpected generator failure for {source_note_id}")
            return self._fail(GenerationError(GenerationErrorKind.service, str(e) or type(e).__name__))

        note = self._store.get_note(note_id)
        logger.info(f"Generated {template_type.value} note {note_id} from {source_note_id}")
        self._transition(GenerationPhase.success)
        self._return_to_idle()
        return GenerationOutcome(note=note)

    def _fail(self, error: GenerationError) -> GenerationOutcome:
        logger.error(f"Template generation failed ({error.kind.value}): {error.detail}")
        self._last_error = error
        self._transition(GenerationPhase.failed)
        self._return_to_idle()
        return GenerationOutcome(error=error)

    def _return_to_idle(self) -> None:
        self._transition(GenerationPhase.idle)
        self.trigger_pending_if_ready()

    def _transition(self, phase: GenerationPhase) -> None:
        previous = self._phase
        self._phase = phase
        logger.debug(f"Generation phase: {previous.value} -> {phase.value}")
        for listener in list(self._listeners):
            try:
                listener(previous, phase)
            except Exception:
                logger.exception("Generation phase listener failed")

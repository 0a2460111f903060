#!/usr/bin/env python
"""
pytest configuration file

This file contains shared fixtures for all tests.
"""

import asyncio

import fakeredis
import pytest

from clinote.components.templates.generation import TemplateGenerationCoordinator
from clinote.components.templates.mock import MockTemplateGenerator
from clinote.components.templates.provider import reset_template_generator
from clinote.components.workspace.models import UploadedFile
from clinote.components.workspace.storage_provider import reset_workspace_storage
from clinote.components.workspace.store import WorkspaceStore
from clinote.utils import text_to_document


class InMemoryFilePort:
    """File Port double holding uploads in memory.

    Reads can be delayed or made to fail per file, and every read is recorded.
    """

    def __init__(self):
        self.files: list[UploadedFile] = []
        self.contents: dict[str, str] = {}
        self.failures: dict[str, Exception] = {}
        self.delays: dict[str, float] = {}
        self.reads: list[str] = []
        self.list_calls = 0

    def add(self, name: str, text: str, fail: Exception | None = None, delay: float = 0.0) -> UploadedFile:
        uploaded = UploadedFile(id=f"file-{name}", name=name, path=f"uploads/{name}", size=len(text))
        self.files.append(uploaded)
        self.contents[uploaded.path] = text
        if fail is not None:
            self.failures[uploaded.path] = fail
        if delay:
            self.delays[uploaded.path] = delay
        return uploaded

    async def list_uploaded_files(self) -> list[UploadedFile]:
        self.list_calls += 1
        return list(self.files)

    async def read_file_as_text(self, path: str) -> str:
        self.reads.append(path)
        await asyncio.sleep(self.delays.get(path, 0))
        if path in self.failures:
            raise self.failures[path]
        return self.contents[path]


@pytest.fixture(autouse=True)
def reset_providers():
    """Reset storage/generator singletons between tests."""
    reset_workspace_storage()
    reset_template_generator()
    yield
    reset_workspace_storage()
    reset_template_generator()


@pytest.fixture
def store() -> WorkspaceStore:
    """Hydrated, empty workspace store."""
    store = WorkspaceStore()
    store.hydrate([], [])
    return store


@pytest.fixture
def sessions_store(store: WorkspaceStore) -> WorkspaceStore:
    """Store with folder "Sessions" holding plain note "Intake" (active)."""
    folder_id = store.create_folder("Sessions")
    store.create_note(
        folder_id,
        "Intake",
        text_to_document("Patient reports poor sleep for two weeks.\nBP 120/80."),
        note_id="note-intake",
        activate=True,
    )
    return store


@pytest.fixture
def generator() -> MockTemplateGenerator:
    return MockTemplateGenerator()


@pytest.fixture
def coordinator(sessions_store: WorkspaceStore, generator: MockTemplateGenerator):
    coordinator = TemplateGenerationCoordinator(sessions_store, generator)
    yield coordinator
    coordinator.close()


@pytest.fixture
def file_port() -> InMemoryFilePort:
    return InMemoryFilePort()


@pytest.fixture
def fake_redis_client():
    """
    Create a fakeredis client for unit tests.

    This provides an in-memory Redis implementation that allows
    unit tests to run without a real Redis server.
    """
    server = fakeredis.FakeServer()
    client = fakeredis.FakeRedis(server=server, decode_responses=True)
    yield client
    client.close()

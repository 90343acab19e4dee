import tempfile
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from guidebook.api import create_app
from guidebook.config import Settings
from guidebook.domain.document import GuidelineDocument, Heading
from guidebook.loading.path_resolver import LinkResolver
from guidebook.rendering.renderer import SiteRenderer
from guidebook.store.base import KnowledgeStore
from tests.fakes import FakeKnowledgeStore


@pytest.fixture
def test_documents() -> dict[str, GuidelineDocument]:
    return {
        "doc1": GuidelineDocument(
            id="doc1",
            title="Testing Guideline",
            path="/kb/guidelines/testing.md",
            relative_path="guidelines/testing.md",
            folder_path="guidelines",
            content="# Testing Guideline\n\nWrite unit tests first.\n",
            headings=[
                Heading(level=1, text="Testing Guideline", anchor="testing-guideline", line=1)
            ],
            outbound_links=["doc2"],
        ),
        "doc2": GuidelineDocument(
            id="doc2",
            title="API Design",
            path="/kb/guidelines/api-design.md",
            relative_path="guidelines/api-design.md",
            folder_path="guidelines",
            content="# API Design\n\nVersion every endpoint.\n",
            headings=[Heading(level=1, text="API Design", anchor="api-design", line=1)],
            inbound_links=["doc1"],
        ),
    }


@pytest.fixture
def fake_store(test_documents: dict[str, GuidelineDocument]) -> KnowledgeStore:
    return FakeKnowledgeStore(test_documents)


@pytest.fixture
def test_client(fake_store: KnowledgeStore, temp_kb_base: Path) -> TestClient:
    """Create test client with fake implementations."""
    app = create_app(store=fake_store, renderer=SiteRenderer(base_path=temp_kb_base))
    return TestClient(app)


@pytest.fixture
def temp_kb_base() -> Generator[Path, None, None]:
    """Create a temporary directory used when testing loading and linting of a knowledge base."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def kb_directory(temp_kb_base: Path) -> Path:
    """Create knowledge base subdirectory."""
    kb_dir = temp_kb_base / "knowledge"
    kb_dir.mkdir()
    return kb_dir


@pytest.fixture
def sample_kb(kb_directory: Path) -> Path:
    """A small, valid knowledge base with nested folders and cross-references."""
    guidelines = kb_directory / "guidelines"
    guidelines.mkdir()
    how_to = kb_directory / "how-to"
    how_to.mkdir()

    (kb_directory / "README.md").write_text(
        "# Knowledge Base\n\n"
        "Start with [testing](guidelines/testing.md) and "
        "[versioning](guidelines/api-design.md#versioning).\n"
    )
    (guidelines / "testing.md").write_text(
        "# Testing\n\n"
        "## Unit tests\n\n"
        "See [API design](api-design.md) before writing endpoint tests.\n\n"
        "```python\n"
        "def test_health():\n"
        "    assert client.get('/health').status_code == 200\n"
        "```\n"
    )
    (guidelines / "api-design.md").write_text(
        "---\n"
        "title: API Design\n"
        "---\n"
        "# API design guideline\n\n"
        "## Versioning\n\n"
        "Back to [home](../README.md).\n\n"
        "```json\n"
        '{"version": "v1"}\n'
        "```\n"
    )
    (how_to / "setup.md").write_text(
        "# Setup\n\nFollow [unit tests](../guidelines/testing.md#unit-tests).\n"
    )
    return kb_directory


@pytest.fixture
def kb_settings() -> Settings:
    """Settings with defaults, independent of the environment."""
    return Settings(errors_path=None, strict=False, required_paths=[])


@pytest.fixture
def link_resolver(sample_kb: Path) -> LinkResolver:
    """LinkResolver initialised using the sample knowledge base."""
    return LinkResolver(base_path=sample_kb)


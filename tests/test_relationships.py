#!/usr/bin/env python3
"""Test suite for link resolution and link graph building."""

from pathlib import Path

import pytest

from guidebook.domain.document import GuidelineDocument
from guidebook.linking import LinkGraphBuilder, ReferenceResolver
from guidebook.linking.analyzer import calculate_link_strength, extract_link_context
from guidebook.loading.loader import KnowledgeBaseLoader
from guidebook.loading.path_resolver import LinkResolver


@pytest.fixture
def sample_documents(sample_kb: Path) -> dict[str, GuidelineDocument]:
    documents = KnowledgeBaseLoader().load(sample_kb)
    return {document.id: document for document in documents}


def by_path(documents: dict[str, GuidelineDocument], relative_path: str) -> GuidelineDocument:
    return next(d for d in documents.values() if d.relative_path == relative_path)


def test_reference_resolution() -> None:
    """Test document reference resolution."""
    document_mapping = {
        "Pensieve": "doc_id_1",
        "Another Note.md": "doc_id_2",
        "guides/Test File.md": "doc_id_3",
    }
    resolver = ReferenceResolver(document_mapping)

    assert resolver.resolve("Pensieve") == "doc_id_1"
    assert resolver.resolve("Another Note") == "doc_id_2"
    assert resolver.resolve("Test File") == "doc_id_3"
    assert resolver.resolve("Nonexistent") is None


def test_reference_resolution_is_lenient() -> None:
    resolver = ReferenceResolver({"guides/Error Handling.md": "doc_id_1"})

    assert resolver.resolve("error handling") == "doc_id_1"
    assert resolver.resolve("Error Handling#Retries") == "doc_id_1"
    assert resolver.resolve("#only-anchor") is None


def test_reference_resolver_from_documents(sample_documents) -> None:
    resolver = ReferenceResolver.from_documents(list(sample_documents.values()))
    testing = by_path(sample_documents, "guidelines/testing.md")

    assert resolver.resolve("testing") == testing.id
    assert resolver.resolve("testing.md") == testing.id
    assert resolver.resolve("guidelines/testing.md") == testing.id


def test_build_link_graph(sample_kb: Path, sample_documents) -> None:
    graph = LinkGraphBuilder().build(sample_documents, LinkResolver(base_path=sample_kb))

    readme = by_path(sample_documents, "README.md")
    testing = by_path(sample_documents, "guidelines/testing.md")
    api_design = by_path(sample_documents, "guidelines/api-design.md")
    setup = by_path(sample_documents, "how-to/setup.md")

    edges = {(link.source_document_id, link.target_document_id) for link in graph.links}
    assert edges == {
        (readme.id, testing.id),
        (readme.id, api_design.id),
        (testing.id, api_design.id),
        (api_design.id, readme.id),
        (setup.id, testing.id),
    }

    assert sorted(readme.outbound_links) == sorted([testing.id, api_design.id])
    assert sorted(testing.inbound_links) == sorted([readme.id, setup.id])
    assert setup.inbound_links == []
    assert graph.orphans == ["how-to/setup.md"]

    assert graph.folder_clusters[""] == [readme.id]
    assert sorted(graph.folder_clusters["guidelines"]) == sorted([testing.id, api_design.id])
    assert graph.folder_clusters["how-to"] == [setup.id]


def test_link_keeps_anchor_and_context(sample_kb: Path, sample_documents) -> None:
    graph = LinkGraphBuilder().build(sample_documents, LinkResolver(base_path=sample_kb))
    setup = by_path(sample_documents, "how-to/setup.md")

    link = next(link for link in graph.links if link.source_document_id == setup.id)
    assert link.link_type == "markdown"
    assert link.anchor == "unit-tests"
    assert "Follow [unit tests]" in link.context
    assert 0.0 < link.strength <= 1.0


def test_repeated_links_collapse_into_one(kb_directory: Path) -> None:
    (kb_directory / "a.md").write_text("# A\n[b](b.md) and again [B again](b.md#top) and [[b]]\n")
    (kb_directory / "b.md").write_text("# B\n")
    documents = {d.id: d for d in KnowledgeBaseLoader().load(kb_directory)}

    graph = LinkGraphBuilder().build(documents, LinkResolver(base_path=kb_directory))

    assert len(graph.links) == 1
    assert graph.orphans == ["a.md"]


def test_self_links_and_externals_are_not_edges(kb_directory: Path) -> None:
    (kb_directory / "a.md").write_text(
        "# A\n[top](#a) [me](a.md) [web](https://example.com) ![img](missing.png)\n"
    )
    documents = {d.id: d for d in KnowledgeBaseLoader().load(kb_directory)}

    graph = LinkGraphBuilder().build(documents, LinkResolver(base_path=kb_directory))

    assert graph.links == []


def test_calculate_link_strength() -> None:
    content = "# About Testing\nTesting matters. See [Testing](testing.md)."

    # two text mentions plus one link, plus a heading mention
    assert calculate_link_strength(content, "Testing", link_count=1) == 1.0
    assert calculate_link_strength("no mention", "Testing", link_count=1) == pytest.approx(0.3)


def test_extract_link_context() -> None:
    content = "first line\n\nsecond   line with [link](target.md) in it\n"
    start = content.index("target.md")

    context = extract_link_context(content, start, start + len("target.md"), context_chars=20)

    assert "\n" not in context
    assert "[link](target.md)" in context

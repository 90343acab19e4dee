"""Tests for the individual lint rules."""

from pathlib import Path

import httpx
import pytest

from guidebook.checks import (
    BadLinkFormatCheck,
    BrokenLinkCheck,
    CheckContext,
    CodeLanguageCheck,
    DuplicateHeadingCheck,
    ExternalLinkCheck,
    FrontmatterCheck,
    PlaceholderCheck,
    StructureCheck,
    WikilinkCheck,
)
from guidebook.config import Settings
from guidebook.domain.document import GuidelineDocument
from guidebook.loading.loader import KnowledgeBaseLoader
from guidebook.loading.path_resolver import LinkResolver


def make_context(
    root: Path, settings: Settings, http_client: httpx.Client | None = None
) -> tuple[dict[str, GuidelineDocument], CheckContext]:
    documents = KnowledgeBaseLoader().load(root)
    context = CheckContext(
        root=root.resolve(),
        documents=documents,
        settings=settings,
        link_resolver=LinkResolver(base_path=root),
        http_client=http_client,
    )
    return {d.relative_path: d for d in documents}, context


def test_valid_links_have_no_issues(sample_kb: Path, kb_settings: Settings) -> None:
    documents, context = make_context(sample_kb, kb_settings)

    issues = [
        issue
        for document in documents.values()
        for issue in BrokenLinkCheck().run(document, context)
    ]

    assert issues == []


def test_broken_link_with_suggestion(sample_kb: Path, kb_settings: Settings) -> None:
    (sample_kb / "how-to" / "deploy.md").write_text(
        "# Deploy\n\n"
        "Read [testing](../../guidelines/testing.md#unit-tests) "
        "and [api](../guidelines/api-desing.md).\n"
        "Also [nothing](./nowhere.md).\n"
    )
    documents, context = make_context(sample_kb, kb_settings)

    issues = BrokenLinkCheck().run(documents["how-to/deploy.md"], context)

    assert [(i.rule, i.line, i.suggestion) for i in issues] == [
        ("broken-link", 3, "../guidelines/testing.md#unit-tests"),
        ("broken-link", 3, "../guidelines/api-design.md"),
        ("broken-link", 4, None),
    ]
    assert all(i.severity == "error" for i in issues)
    assert issues[2].message == "Broken internal link: ./nowhere.md"


def test_broken_anchor(sample_kb: Path, kb_settings: Settings) -> None:
    (sample_kb / "how-to" / "anchors.md").write_text(
        "# Anchors\n\n"
        "## Local part\n\n"
        "[ok](#local-part) [case](#Local-Part) [bad](#missing)\n"
        "[ok](../guidelines/api-design.md#versioning) [bad](../guidelines/api-design.md#nope)\n"
    )
    documents, context = make_context(sample_kb, kb_settings)

    issues = BrokenLinkCheck().run(documents["how-to/anchors.md"], context)

    assert [(i.rule, i.line) for i in issues] == [("broken-anchor", 5), ("broken-anchor", 6)]
    assert "no heading #missing in this document" in issues[0].message
    assert "guidelines/api-design.md" in issues[1].message


def test_broken_image_inside_linked_badge(kb_directory: Path, kb_settings: Settings) -> None:
    (kb_directory / "target.md").write_text("# Target\n")
    (kb_directory / "a.md").write_text("# A\n\n[![badge](missing.png)](target.md)\n")
    documents, context = make_context(kb_directory, kb_settings)

    issues = BrokenLinkCheck().run(documents["a.md"], context)

    assert [(i.rule, i.line, i.message) for i in issues] == [
        ("broken-link", 3, "Broken internal link: missing.png")
    ]


def test_excluded_and_non_file_links_are_skipped(kb_directory: Path) -> None:
    (kb_directory / "a.md").write_text(
        "# A\n"
        "[tpl](templates/{{name}}.md) [mail](mailto:team@example.com) "
        "[web](https://example.com/missing) [dir](./)\n"
    )
    settings = Settings(exclusion_list=["templates/"])
    documents, context = make_context(kb_directory, settings)

    assert BrokenLinkCheck().run(documents["a.md"], context) == []


def test_bad_link_format(kb_directory: Path, kb_settings: Settings) -> None:
    (kb_directory / "a.md").write_text(
        "# A\n\nSee :guidelines/testing.md: for details.\n\n```text\n:ignored.md:\n```\n"
    )
    documents, context = make_context(kb_directory, kb_settings)

    issues = BadLinkFormatCheck().run(documents["a.md"], context)

    assert [(i.line, i.message) for i in issues] == [
        (3, "Bad link format: :guidelines/testing.md:")
    ]


def test_unresolved_wikilink(kb_directory: Path, kb_settings: Settings) -> None:
    (kb_directory / "a.md").write_text("# A\n[[b]] [[b#Intro]] [[missing]] [[diagram.png]]\n")
    (kb_directory / "b.md").write_text("# B\n")
    (kb_directory / "diagram.png").write_bytes(b"png")
    documents, context = make_context(kb_directory, kb_settings)

    issues = WikilinkCheck().run(documents["a.md"], context)

    assert [(i.severity, i.message) for i in issues] == [
        ("warning", "Unresolved wikilink: [[missing]]")
    ]


def test_code_language(kb_directory: Path, kb_settings: Settings) -> None:
    (kb_directory / "a.md").write_text(
        "# A\n\n```\nno tag\n```\n\n```Python\nok\n```\n\n```brainfudge\n+++\n```\n"
    )
    documents, context = make_context(kb_directory, kb_settings)

    issues = CodeLanguageCheck().run(documents["a.md"], context)

    assert [(i.severity, i.line, i.message) for i in issues] == [
        ("error", 3, "Fenced code block without language tag"),
        ("warning", 11, "Unrecognized code block language: brainfudge"),
    ]


def test_duplicate_heading(kb_directory: Path, kb_settings: Settings) -> None:
    (kb_directory / "a.md").write_text(
        "# Guide\n\n## Setup\n\n```bash\n## Setup\n```\n\n### Setup\n## Usage\n"
    )
    documents, context = make_context(kb_directory, kb_settings)

    issues = DuplicateHeadingCheck().run(documents["a.md"], context)

    assert [(i.line, i.message) for i in issues] == [
        (9, "Duplicate heading 'Setup' (first defined on line 3)")
    ]


def test_heading_colliding_with_suffixed_anchor(
    kb_directory: Path, kb_settings: Settings
) -> None:
    (kb_directory / "a.md").write_text("# Doc\n## Setup\n## Setup\n## Setup 1\n")
    documents, context = make_context(kb_directory, kb_settings)

    issues = DuplicateHeadingCheck().run(documents["a.md"], context)

    assert [(i.line, i.message) for i in issues] == [
        (3, "Duplicate heading 'Setup' (first defined on line 2)"),
        (
            4,
            "Heading 'Setup 1' collides with anchor '#setup-1' "
            "of the repeated heading on line 3",
        ),
    ]


def test_frontmatter_on_skill_files(kb_directory: Path, kb_settings: Settings) -> None:
    (kb_directory / "complete").mkdir()
    (kb_directory / "complete" / "SKILL.md").write_text(
        "---\nname: review\ndescription: Code review\nversion: 1\nauthor: team\n---\n# Review\n"
    )
    (kb_directory / "partial").mkdir()
    (kb_directory / "partial" / "SKILL.md").write_text("---\nname: partial\n---\n# Partial\n")
    (kb_directory / "bare").mkdir()
    (kb_directory / "bare" / "SKILL.md").write_text("# Bare\n")
    documents, context = make_context(kb_directory, kb_settings)
    check = FrontmatterCheck()

    assert check.run(documents["complete/SKILL.md"], context) == []
    assert [(i.severity, i.message) for i in check.run(documents["partial/SKILL.md"], context)] == [
        ("error", "Missing required frontmatter field: description"),
        ("warning", "Missing recommended frontmatter field: version"),
        ("warning", "Missing recommended frontmatter field: author"),
    ]
    assert [i.message for i in check.run(documents["bare/SKILL.md"], context)] == [
        "Missing frontmatter section"
    ]


def test_malformed_frontmatter(kb_directory: Path, kb_settings: Settings) -> None:
    (kb_directory / "SKILL.md").write_text("---\nname: [broken\n---\n# Skill\n")
    (kb_directory / "notes.md").write_text("---\ntitle: [broken\n---\n# Notes\n")
    documents, context = make_context(kb_directory, kb_settings)
    check = FrontmatterCheck()

    assert [i.severity for i in check.run(documents["SKILL.md"], context)] == ["error"]
    assert [i.severity for i in check.run(documents["notes.md"], context)] == ["warning"]


def test_placeholders_only_in_adoption_dirs(kb_directory: Path, kb_settings: Settings) -> None:
    (kb_directory / "adoption").mkdir()
    (kb_directory / "adoption" / "team.md").write_text(
        "# Team\n\nOwner: [placeholder]\nRepo: [placeholder]\n"
    )
    (kb_directory / "template.md").write_text("# Template\n\nOwner: [placeholder]\n")
    documents, context = make_context(kb_directory, kb_settings)

    issues = PlaceholderCheck().run(documents["adoption/team.md"], context)

    assert [(i.severity, i.line, i.message) for i in issues] == [
        ("warning", 3, "Contains 2 unpopulated placeholder(s)")
    ]
    assert PlaceholderCheck().run(documents["template.md"], context) == []


def test_structure(sample_kb: Path) -> None:
    (sample_kb / "empty-dir").mkdir()
    (sample_kb / "empty.md").write_text("")
    settings = Settings(required_paths=["guidelines", "missing", "empty-dir", "empty.md"])
    _, context = make_context(sample_kb, settings)

    issues = StructureCheck().run(context)

    assert [(i.severity, i.message) for i in issues] == [
        ("error", "Path does not exist: missing"),
        ("warning", "Directory is empty: empty-dir"),
        ("warning", "File is empty: empty.md"),
    ]


@pytest.fixture
def external_kb(kb_directory: Path) -> Path:
    (kb_directory / "a.md").write_text(
        "# A\n"
        "[ok](https://ok.example.com/page)\n"
        "[head not allowed](https://get-only.example.com)\n"
        "[down](https://down.example.com)\n"
        "[again](https://down.example.com#section)\n"
    )
    return kb_directory


def test_external_links_in_strict_mode(external_kb: Path) -> None:
    requests: list[tuple[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append((request.method, request.url.host))
        if request.url.host == "down.example.com":
            raise httpx.ConnectError("connection refused", request=request)
        if request.url.host == "get-only.example.com" and request.method == "HEAD":
            return httpx.Response(405)
        return httpx.Response(404 if request.url.path == "/page" else 200)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    documents, context = make_context(external_kb, Settings(strict=True), http_client=client)

    issues = ExternalLinkCheck().run(documents["a.md"], context)

    assert [(i.severity, i.line) for i in issues] == [("warning", 4), ("warning", 5)]
    assert issues[0].message == "Unreachable external link: https://down.example.com"
    # the second down.example.com link is answered from the cache
    assert requests.count(("HEAD", "down.example.com")) == 1
    assert ("GET", "get-only.example.com") in requests


def test_external_links_skipped_without_strict(external_kb: Path, kb_settings: Settings) -> None:
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    documents, context = make_context(external_kb, kb_settings, http_client=client)

    assert ExternalLinkCheck().run(documents["a.md"], context) == []

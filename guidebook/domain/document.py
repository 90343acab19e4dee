"""Guideline document domain models."""

from pydantic import BaseModel

from guidebook.domain.links import CrossReference


class Heading(BaseModel):
    """An ATX heading of a guideline document.

    Attributes:
        level: Heading depth, 1 to 6
        text: Heading text without the leading hashes
        anchor: Slug used as the HTML id, unique within the document
        line: 1-based line number
    """

    level: int
    text: str
    anchor: str
    line: int


class CodeSnippet(BaseModel):
    """An embedded, never executed, fenced code example."""

    language: str = ""
    content: str
    line: int
    fence: str = "```"


class GuidelineDocument(BaseModel):
    """Represents a markdown guideline document of the knowledge base.

    Attributes:
        id: Unique identifier (MD5 hash of relative file path)
        title: Frontmatter title, first level-1 header or filename
        path: Absolute file path
        relative_path: Path relative to the knowledge base root, "/" separated
        folder_path: Relative folder path for folder clusters
        frontmatter: Parsed YAML frontmatter, empty when absent
        frontmatter_error: YAML error message when the frontmatter is malformed
        content: Full markdown content
        headings: Headings outside of fenced code blocks
        code_snippets: Fenced code blocks
        links: Cross-references found outside of code
        outbound_links: Document IDs this document links to
        inbound_links: Document IDs that link to this document
        modified: File modification timestamp (seconds since epoch)
    """

    id: str
    title: str
    path: str
    relative_path: str
    folder_path: str = ""
    frontmatter: dict = {}
    frontmatter_error: str | None = None
    content: str
    headings: list[Heading] = []
    code_snippets: list[CodeSnippet] = []
    links: list[CrossReference] = []
    outbound_links: list[str] = []
    inbound_links: list[str] = []
    modified: float = 0.0

    @property
    def anchors(self) -> set[str]:
        return {heading.anchor for heading in self.headings}

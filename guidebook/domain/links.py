"""Cross-reference and link graph domain models."""

from typing import Literal
from urllib.parse import unquote

from pydantic import BaseModel

EXTERNAL_SCHEMES = ("http://", "https://")
IGNORED_SCHEMES = ("mailto:", "tel:", "ftp://", "data:", "javascript:")


class CrossReference(BaseModel):
    """A link found in a guideline document.

    Attributes:
        href: Link target exactly as written in the markdown source
        text: Link text, alt text or wikilink display text
        line: 1-based line number of the link
        start: Offset of the first character of ``href`` in the content
        end: Offset just past the last character of ``href``
        kind: Syntax the link was written in
    """

    href: str
    text: str = ""
    line: int
    start: int
    end: int
    kind: Literal["markdown", "image", "reference", "wikilink"] = "markdown"

    @property
    def is_external(self) -> bool:
        return self.href.startswith(EXTERNAL_SCHEMES)

    @property
    def is_ignored_scheme(self) -> bool:
        return self.href.lower().startswith(IGNORED_SCHEMES)

    @property
    def is_anchor_only(self) -> bool:
        return self.href.startswith("#")

    @property
    def path_part(self) -> str:
        """Target path without the anchor, URL decoded."""
        return unquote(self.href.split("#", 1)[0])

    @property
    def anchor(self) -> str | None:
        if "#" not in self.href:
            return None
        return unquote(self.href.split("#", 1)[1])


class DocumentLink(BaseModel):
    """Represents a resolved link between two guideline documents."""

    source_document_id: str
    target_document_id: str
    link_type: Literal["markdown", "wikilink", "reference"]
    anchor: str | None = None
    context: str = ""  # surrounding text where link appears
    strength: float = 1.0  # relationship weight/frequency


class LinkGraph(BaseModel):
    """Represents the complete link graph for all documents."""

    links: list[DocumentLink] = []
    folder_clusters: dict[str, list[str]] = {}  # folder-based groupings
    orphans: list[str] = []  # documents nobody links to

"""Reference resolution for converting wikilink names/paths to document IDs."""

from pathlib import Path

from loguru import logger

from guidebook.domain.document import GuidelineDocument


class ReferenceResolver:
    """Handles resolution of document references from wikilinks to document IDs."""

    def __init__(self, document_mapping: dict[str, str]):
        """Initialize resolver with a document mapping.

        Args:
            document_mapping: Dictionary mapping document names/stems/paths to document IDs
        """
        self.document_mapping = document_mapping

    @classmethod
    def from_documents(cls, documents: list[GuidelineDocument]) -> "ReferenceResolver":
        """Create mapping from file names/paths to IDs for reference resolution."""
        mapping = {}
        for document in documents:
            relative_path = Path(document.relative_path)
            mapping[relative_path.stem] = document.id
            mapping[relative_path.name] = document.id
            mapping[document.relative_path] = document.id
        return cls(mapping)

    def resolve(self, link: str) -> str | None:
        """Resolve a single reference to a document ID.

        Args:
            link: Document name or path from a wikilink, optionally with "#anchor"

        Returns:
            Resolved document ID or None if not found
        """
        link = link.split("#", 1)[0].strip()
        if not link:
            return None

        # Try exact match first
        if link in self.document_mapping:
            return self.document_mapping[link]

        # Try with .md extension
        md_link = f"{link}.md"
        if md_link in self.document_mapping:
            return self.document_mapping[md_link]

        # Try as filename stem
        for path, document_id in self.document_mapping.items():
            if Path(path).stem == link:
                return document_id

        # Be lenient about casing
        link_lower = link.lower()
        for path, document_id in self.document_mapping.items():
            if (
                path.lower() in (link_lower, f"{link_lower}.md")
                or Path(path).stem.lower() == link_lower
            ):
                return document_id

        logger.warning(f"Could not resolve wikilink: {link}")
        return None

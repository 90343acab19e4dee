"""Loading guideline documents from a knowledge base directory."""

from hashlib import md5
from pathlib import Path

from loguru import logger

from guidebook.domain.document import GuidelineDocument

from .content_extractor import ContentExtractor


class KnowledgeBaseLoader:
    """Walks a knowledge base tree and parses its markdown documents."""

    def __init__(self, excluded_dirs: list[str] | None = None):
        """Initialize the loader.

        Args:
            excluded_dirs: Directory names never descended into
        """
        self.excluded_dirs = set(excluded_dirs if excluded_dirs is not None else [".git"])
        self.content_extractor = ContentExtractor()

    def load(self, root: Path) -> list[GuidelineDocument]:
        """Load every markdown document below root.

        Args:
            root: Knowledge base root directory

        Returns:
            Documents sorted by relative path

        Raises:
            FileNotFoundError: If root is not a directory
        """
        root = Path(root).resolve()
        if not root.is_dir():
            raise FileNotFoundError(f"Knowledge base not found: {root}")

        documents = []
        for file in self.get_markdown_files(root):
            document = self.load_file(file, root)
            if document is not None:
                documents.append(document)

        logger.info(f"Loaded {len(documents)} documents from {root}")
        return documents

    def get_markdown_files(self, root: Path) -> list[Path]:
        """Get all markdown files below root, skipping excluded directories."""
        files = []
        for file in Path(root).rglob("*.md"):
            relative_parts = file.relative_to(root).parts[:-1]
            if any(part in self.excluded_dirs for part in relative_parts):
                continue
            if file.is_file():
                files.append(file)
        return sorted(files)

    def load_file(self, file: Path, root: Path) -> GuidelineDocument | None:
        """Parse a single markdown file, None if it cannot be decoded."""
        logger.debug(f"Loading {file}")

        try:
            content = file.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            logger.warning(f"Skipping non UTF-8 file: {file}")
            return None

        frontmatter, frontmatter_error = self.content_extractor.extract_frontmatter(content)
        headings = self.content_extractor.extract_headings(content)

        relative_path = file.relative_to(root)
        folder_path = relative_path.parent.as_posix() if relative_path.parent != Path(".") else ""

        return GuidelineDocument(
            id=self.generate_document_id(file, root),
            title=self.content_extractor.extract_title(headings, frontmatter, default=file.stem),
            path=str(file),
            relative_path=relative_path.as_posix(),
            folder_path=folder_path,
            frontmatter=frontmatter,
            frontmatter_error=frontmatter_error,
            content=content,
            headings=headings,
            code_snippets=self.content_extractor.extract_code_snippets(content),
            links=self.content_extractor.extract_links(content),
            modified=file.stat().st_mtime,
        )

    @staticmethod
    def generate_document_id(file: Path, root: Path) -> str:
        """Generate a unique document ID from file path."""
        return md5(file.relative_to(root).as_posix().encode()).hexdigest()

"""Path resolution for cross-references between guideline documents."""

import difflib
import os
from pathlib import Path
from typing import Iterable, Optional
from urllib.parse import unquote

from loguru import logger

SUGGESTION_CUTOFF = 0.85


class LinkResolver:
    """Resolve relative link targets with clear precedence rules."""

    def __init__(self, base_path: Path, docs_folders: list[str] | None = None):
        """
        Initialize LinkResolver.

        Args:
            base_path: Root directory of the knowledge base (e.g., knowledge/)
            docs_folders: Top-level folder names that links may start from
                (e.g., ["guidelines", "how-to"]). Detected from base_path if omitted.
        """
        self.base_path = Path(base_path).resolve()
        if docs_folders is None:
            docs_folders = (
                [entry.name for entry in self.base_path.iterdir() if entry.is_dir()]
                if self.base_path.is_dir()
                else []
            )
        self.docs_folders = docs_folders

    def resolve_link_path(self, source_file: Path, link_path: str) -> Optional[Path]:
        """
        Resolve a link target with clear precedence rules.

        Priority:
        1. Relative to the source document (most specific)
        2. From the knowledge base root when the first segment is a top-level folder
        3. From the knowledge base root when the link starts with "/"

        Args:
            source_file: Path to the document containing the link
            link_path: Link target without anchor, as found in the document

        Returns:
            Resolved path if found (file or directory), None otherwise
        """
        logger.debug(f"Attempting to resolve link path: {link_path}")

        clean_path = unquote(link_path.split("#", 1)[0])
        if not clean_path:
            return source_file

        resolution_strategies = [
            ("relative to document", self._resolve_relative_to_document),
            ("in top-level folder", self._resolve_in_docs_folder),
            ("absolute in base", self._resolve_absolute),
        ]

        for strategy_name, resolver_func in resolution_strategies:
            candidate = resolver_func(source_file, clean_path)
            logger.debug(f"Trying {strategy_name}: {candidate}")

            if candidate and candidate.exists():
                logger.debug(f"Resolved successfully: {link_path} -> {candidate}")
                return candidate

        logger.debug(f"Failed to resolve link path: {link_path}")
        return None

    def _resolve_relative_to_document(self, source_file: Path, link_path: str) -> Optional[Path]:
        """Try relative to the document directory."""
        if link_path.startswith("/"):
            return None
        return Path(os.path.normpath(source_file.parent / link_path))

    def _resolve_in_docs_folder(self, source_file: Path, link_path: str) -> Optional[Path]:
        """Try from the base when the link starts with a top-level folder."""
        first_segment = link_path.lstrip("/").split("/", 1)[0]
        if first_segment not in self.docs_folders:
            return None
        return Path(os.path.normpath(self.base_path / link_path.lstrip("/")))

    def _resolve_absolute(self, source_file: Path, link_path: str) -> Optional[Path]:
        """Try absolute path in base directory."""
        if not link_path.startswith("/"):
            return None
        return Path(os.path.normpath(self.base_path / link_path.lstrip("/")))

    def find_path_variant(self, source_file: Path, link_path: str) -> Optional[str]:
        """Find a shorter "../" variant of a broken link that resolves.

        Links copied between folders of different depth often carry one "../"
        too many. Leading "../" segments are dropped one at a time.

        Args:
            source_file: Path to the document containing the link
            link_path: Broken link target without anchor

        Returns:
            The first resolving variant, e.g. "./guidelines/testing.md", or None
        """
        if not link_path.startswith("../"):
            return None

        segments = link_path.split("/")
        max_back_steps = sum(1 for segment in segments if segment == "..")

        for i in range(1, max_back_steps + 1):
            candidate = "/".join(segments[i:])
            if not candidate.startswith("."):
                candidate = f"./{candidate}"
            if self.resolve_link_path(source_file, candidate):
                return candidate

        return None

    def suggest(
        self, source_file: Path, link_path: str, known_files: Iterable[Path]
    ) -> Optional[str]:
        """Suggest the existing document a broken link most likely meant.

        Layered matching: same directory, then unique basename anywhere, then
        fuzzy basename match, in the same directory first.

        Returns:
            Link target relative to the source document, or None
        """
        wanted = Path(unquote(link_path.split("#", 1)[0]))
        known = list(known_files)
        if not wanted.name:
            return None

        same_dir = [f for f in known if f.parent == source_file.parent and f.name == wanted.name]
        if same_dir:
            return self._relative_href(source_file, same_dir[0])

        by_name = [f for f in known if f.name == wanted.name]
        if len(by_name) == 1:
            return self._relative_href(source_file, by_name[0])

        same_dir_files = [f for f in known if f.parent == source_file.parent]
        for pool in (same_dir_files, known):
            names = sorted({f.name for f in pool})
            close = difflib.get_close_matches(wanted.name, names, n=1, cutoff=SUGGESTION_CUTOFF)
            if close:
                matches = sorted(f for f in pool if f.name == close[0])
                return self._relative_href(source_file, matches[0])

        return None

    @staticmethod
    def _relative_href(source_file: Path, target: Path) -> str:
        return Path(os.path.relpath(target, source_file.parent)).as_posix()

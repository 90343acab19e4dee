"""Rewriting fixable link targets in place."""

import os
from pathlib import Path
from urllib.parse import quote, unquote

from loguru import logger

from guidebook.checks.links import BAD_LINK_FORMAT_PATTERN, is_excluded
from guidebook.domain.document import GuidelineDocument
from guidebook.domain.links import CrossReference
from guidebook.domain.report import Replacement
from guidebook.loading.path_resolver import LinkResolver


class LinkFixer:
    """Plans and applies link rewrites for a document.

    Three kinds of rewrites are produced:
    - patched: a broken "../" link whose shorter variant resolves
    - normalized_rel: a working relative link with redundant segments ("./a.md")
    - normalized_full: a link that only resolves from the knowledge base root,
      rewritten relative to the document so plain markdown viewers follow it
    """

    def __init__(self, link_resolver: LinkResolver, exclusion_list: list[str] | None = None):
        self.link_resolver = link_resolver
        self.exclusion_list = exclusion_list or []

    def plan(self, document: GuidelineDocument) -> list[Replacement]:
        """Collect replacements for every fixable link of the document."""
        replacements = []
        source = Path(document.path)

        for link in document.links:
            if link.kind == "wikilink" or link.is_external or link.is_ignored_scheme:
                continue
            if link.is_anchor_only or is_excluded(link.href, self.exclusion_list):
                continue
            if BAD_LINK_FORMAT_PATTERN.fullmatch(link.href):
                continue

            raw_path, _, anchor = link.href.partition("#")
            anchor_suffix = f"#{anchor}" if anchor else ""

            target = self.link_resolver.resolve_link_path(source, raw_path)
            if target is None:
                variant = self.link_resolver.find_path_variant(source, raw_path)
                if variant:
                    replacements.append(
                        self._replacement(link, f"{variant}{anchor_suffix}", "patched")
                    )
                continue

            relative = Path(os.path.relpath(target, source.parent)).as_posix()
            if raw_path.endswith("/"):
                relative = f"{relative}/"
            if unquote(raw_path) == relative:
                continue

            direct = Path(os.path.normpath(source.parent / unquote(raw_path)))
            kind = "normalized_rel" if direct == target else "normalized_full"
            replacements.append(self._replacement(link, f"{quote(relative)}{anchor_suffix}", kind))

        return replacements

    @staticmethod
    def _replacement(link: CrossReference, new_href: str, kind: str) -> Replacement:
        return Replacement(
            start=link.start,
            end=link.end,
            line=link.line,
            old_href=link.href,
            new_href=new_href,
            kind=kind,
        )

    @staticmethod
    def apply(content: str, replacements: list[Replacement]) -> str:
        """Apply replacements back to front so earlier offsets stay valid."""
        for replacement in sorted(replacements, key=lambda r: r.start, reverse=True):
            if content[replacement.start : replacement.end] != replacement.old_href:
                logger.warning(
                    f"Skipping stale replacement on line {replacement.line}: {replacement.old_href}"
                )
                continue
            content = (
                content[: replacement.start] + replacement.new_href + content[replacement.end :]
            )
        return content

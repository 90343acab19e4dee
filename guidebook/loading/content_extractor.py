"""Content extraction service for markdown guideline documents."""

import re
from typing import Iterator, List, NamedTuple, Optional, Tuple

import yaml
from loguru import logger

from guidebook.domain.document import CodeSnippet, Heading
from guidebook.domain.links import CrossReference

FENCE_OPEN_PATTERN = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
FRONTMATTER_PATTERN = re.compile(r"\A---[ \t]*\r?\n(.*?\r?\n)?---[ \t]*(?:\r?\n|\Z)", re.DOTALL)
HEADING_PATTERN = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?(?:[ \t]+#+)?[ \t]*$")
INLINE_CODE_PATTERN = re.compile(r"(`+)(?!`)(.+?)(?<!`)\1(?!`)")
PLACEHOLDER_PATTERN = re.compile(r"\[placeholder\]", re.IGNORECASE)

# ![alt](href "title") and [text](href "title"), with <href> and one level of nesting
INLINE_LINK_PATTERN = re.compile(
    r"(?P<bang>!?)\[(?P<text>(?:[^\[\]]|\[[^\[\]]*\])*)\]"
    r"\(\s*(?P<href><[^<>\n]*>|[^\s()]*(?:\([^\s()]*\)[^\s()]*)*)"
    r"(?:\s+(?:\"[^\"\n]*\"|'[^'\n]*'|\([^()\n]*\)))?\s*\)"
)
# [label]: href
REFERENCE_DEFINITION_PATTERN = re.compile(
    r"^ {0,3}\[(?P<label>[^\]^][^\]]*)\]:[ \t]*(?P<href><[^<>\n]*>|\S+)", re.MULTILINE
)
# [[target#anchor|display]] and ![[embed]]
WIKILINK_PATTERN = re.compile(r"!?\[\[(?P<target>[^\]|\n]+)(?:\|(?P<display>[^\]\n]*))?\]\]")


class FencedBlock(NamedTuple):
    """Line span of a fenced code block, end line included."""

    start_line: int
    end_line: int
    fence: str
    info: str
    body: str


class ContentExtractor:
    """Service for extracting structure and references from markdown text."""

    @staticmethod
    def iter_fenced_blocks(content: str) -> Iterator[FencedBlock]:
        """Yield fenced code blocks of markdown content.

        A block opens with three or more backticks or tildes and closes with a
        fence of the same character that is at least as long. An unclosed
        block runs to the end of the content.

        Args:
            content: Markdown content

        Returns:
            Iterator of fenced blocks with 0-based line indexes.
        """
        lines = content.split("\n")
        i = 0
        while i < len(lines):
            match = FENCE_OPEN_PATTERN.match(lines[i].rstrip("\r"))
            if not match or (match.group("fence")[0] == "`" and "`" in match.group("info")):
                i += 1
                continue

            fence = match.group("fence")
            close_pattern = re.compile(rf"^ {{0,3}}{re.escape(fence[0])}{{{len(fence)},}}[ \t]*$")
            end = i + 1
            while end < len(lines) and not close_pattern.match(lines[end].rstrip("\r")):
                end += 1

            body_end = min(end, len(lines))
            body = "\n".join(line.rstrip("\r") for line in lines[i + 1 : body_end])
            yield FencedBlock(
                start_line=i,
                end_line=min(end, len(lines) - 1),
                fence=fence,
                info=match.group("info").strip(),
                body=body,
            )
            i = end + 1

    @staticmethod
    def _blank(text: str) -> str:
        return re.sub(r"[^\r\n]", " ", text)

    @classmethod
    def strip_fenced_code_blocks(cls, content: str) -> str:
        """Blank out fenced code blocks, preserving line numbers and offsets."""
        lines = content.split("\n")
        for block in cls.iter_fenced_blocks(content):
            for idx in range(block.start_line, block.end_line + 1):
                lines[idx] = cls._blank(lines[idx])
        return "\n".join(lines)

    @classmethod
    def strip_frontmatter(cls, content: str) -> str:
        """Blank out a leading YAML frontmatter block, preserving offsets."""
        match = FRONTMATTER_PATTERN.match(content)
        if not match:
            return content
        return cls._blank(match.group(0)) + content[match.end() :]

    @classmethod
    def strip_inline_code(cls, content: str) -> str:
        return INLINE_CODE_PATTERN.sub(lambda m: cls._blank(m.group(0)), content)

    @classmethod
    def prose_only(cls, content: str) -> str:
        """Content with frontmatter and fenced code blanked out."""
        return cls.strip_fenced_code_blocks(cls.strip_frontmatter(content))

    @staticmethod
    def extract_frontmatter(content: str) -> Tuple[dict, Optional[str]]:
        """Parse the YAML frontmatter of a document.

        Args:
            content: Markdown content, frontmatter must start on the first line

        Returns:
            Tuple of (frontmatter mapping, error message). The mapping is empty
            when there is no frontmatter or it cannot be parsed.
        """
        match = FRONTMATTER_PATTERN.match(content)
        if not match:
            return {}, None

        try:
            data = yaml.safe_load(match.group(1) or "")
        except yaml.YAMLError as e:
            logger.debug(f"Malformed frontmatter: {e}")
            return {}, f"Malformed frontmatter: {str(e).splitlines()[0]}"

        if data is None:
            return {}, None
        if not isinstance(data, dict):
            return {}, "Frontmatter is not a key/value mapping"
        return data, None

    @staticmethod
    def slugify(text: str) -> str:
        """Turn heading text into a GitHub style anchor."""
        text = re.sub(r"!?\[([^\]]*)\]\([^)]*\)", r"\1", text)
        text = re.sub(r"<[^>]+>", "", text)
        slug = text.strip().lower()
        slug = re.sub(r"[^\w\- ]", "", slug)
        return slug.replace(" ", "-")

    @classmethod
    def extract_headings(cls, content: str) -> List[Heading]:
        """Extract ATX headings outside of frontmatter and fenced code.

        Anchors are made unique the way GitHub does it: the second "Setup"
        heading gets "setup-1", the third "setup-2". A suffix already taken by
        another heading, such as a literal "Setup 1", is skipped.
        """
        headings = []
        seen: dict[str, int] = {}
        used: set[str] = set()

        for idx, line in enumerate(cls.prose_only(content).split("\n")):
            match = HEADING_PATTERN.match(line.rstrip("\r"))
            if not match or not match.group(2):
                continue

            text = match.group(2).strip()
            base = cls.slugify(text)
            anchor = base
            if anchor in used:
                suffix = seen.get(base, 0)
                while anchor in used:
                    suffix += 1
                    anchor = f"{base}-{suffix}"
                seen[base] = suffix
            used.add(anchor)

            headings.append(
                Heading(level=len(match.group(1)), text=text, anchor=anchor, line=idx + 1)
            )

        return headings

    @staticmethod
    def extract_title(headings: List[Heading], frontmatter: dict, default: str) -> str:
        title = frontmatter.get("title")
        if isinstance(title, str) and title.strip():
            return title.strip()

        for heading in headings:
            if heading.level == 1:
                return heading.text

        return default

    @classmethod
    def extract_code_snippets(cls, content: str) -> List[CodeSnippet]:
        """Extract fenced code blocks with their language hints."""
        snippets = []
        for block in cls.iter_fenced_blocks(content):
            language = block.info.split()[0] if block.info else ""
            # ```{.python} and ```js{1,3} style info strings
            language = re.split(r"[{}]", language.lstrip("{."), maxsplit=1)[0]
            snippets.append(
                CodeSnippet(
                    language=language,
                    content=block.body,
                    line=block.start_line + 1,
                    fence=block.fence,
                )
            )
        return snippets

    @staticmethod
    def _line_of(content: str, offset: int) -> int:
        return content.count("\n", 0, offset) + 1

    @classmethod
    def extract_links(cls, content: str) -> List[CrossReference]:
        """Extract cross-references from markdown content.

        Finds inline links and images, reference definitions and Obsidian style
        wikilinks. Anything inside frontmatter, fenced code blocks or inline
        code spans is ignored since those are illustrative, not navigation.

        Args:
            content: Markdown content

        Returns:
            List of cross-references ordered by position.
        """
        scan = cls.strip_inline_code(cls.prose_only(content))
        links = []

        for match in cls._iter_inline_links(scan):
            href, start, end = cls._unwrap_href(match, "href")
            if not href:
                continue
            links.append(
                CrossReference(
                    href=href,
                    text=match.group("text").strip(),
                    line=cls._line_of(content, match.start()),
                    start=start,
                    end=end,
                    kind="image" if match.group("bang") else "markdown",
                )
            )

        for match in REFERENCE_DEFINITION_PATTERN.finditer(scan):
            href, start, end = cls._unwrap_href(match, "href")
            if not href:
                continue
            links.append(
                CrossReference(
                    href=href,
                    text=match.group("label").strip(),
                    line=cls._line_of(content, match.start()),
                    start=start,
                    end=end,
                    kind="reference",
                )
            )

        for match in WIKILINK_PATTERN.finditer(scan):
            target = match.group("target").strip()
            links.append(
                CrossReference(
                    href=target,
                    text=(match.group("display") or target).strip(),
                    line=cls._line_of(content, match.start()),
                    start=match.start("target"),
                    end=match.end("target"),
                    kind="wikilink",
                )
            )

        return sorted(links, key=lambda link: link.start)

    @classmethod
    def _iter_inline_links(
        cls, scan: str, pos: int = 0, endpos: Optional[int] = None
    ) -> Iterator[re.Match[str]]:
        """Yield inline links, including images nested in a link's text like badges."""
        endpos = len(scan) if endpos is None else endpos
        for match in INLINE_LINK_PATTERN.finditer(scan, pos, endpos):
            yield match
            yield from cls._iter_inline_links(scan, match.start("text"), match.end("text"))

    @staticmethod
    def _unwrap_href(match: re.Match[str], group: str) -> Tuple[str, int, int]:
        href = match.group(group)
        start, end = match.start(group), match.end(group)
        if href.startswith("<") and href.endswith(">"):
            return href[1:-1].strip(), start + 1, end - 1
        return href, start, end

    @staticmethod
    def extract_placeholders(content: str) -> List[int]:
        """Return the line numbers of unpopulated [placeholder] markers."""
        return [
            content.count("\n", 0, match.start()) + 1
            for match in PLACEHOLDER_PATTERN.finditer(content)
        ]

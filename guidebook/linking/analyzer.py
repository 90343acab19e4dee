"""Analysis functions for link strength and context extraction."""

import re


def calculate_link_strength(source_content: str, target_title: str, link_count: int) -> float:
    """Calculate link strength based on frequency and context.

    Args:
        source_content: Full content of the source document
        target_title: Title of the target document
        link_count: Number of links from the source to the target

    Returns:
        Link strength between 0.0 and 1.0
    """
    mentions = len(re.findall(re.escape(target_title), source_content, re.IGNORECASE))

    # Base strength on frequency, capped at 1.0
    base_strength = min((link_count + mentions) * 0.3, 1.0)

    # Boost if mentioned in headers
    header_mentions = len(
        re.findall(
            rf"^#{{1,6}}[ \t].*{re.escape(target_title)}",
            source_content,
            re.IGNORECASE | re.MULTILINE,
        )
    )
    header_boost = header_mentions * 0.2

    return min(base_strength + header_boost, 1.0)


def extract_link_context(content: str, start: int, end: int, context_chars: int = 100) -> str:
    """Extract surrounding context for a link.

    Args:
        content: Full content of the document
        start: Offset where the link target starts
        end: Offset where the link target ends
        context_chars: Number of characters before/after to include

    Returns:
        Context string around the link
    """
    context = content[max(0, start - context_chars) : min(len(content), end + context_chars)]

    # Clean up context - remove newlines, extra spaces
    return re.sub(r"\s+", " ", context).strip()

"""Lint rules applied to a knowledge base."""

from guidebook.checks.base import Check, CheckContext, KnowledgeBaseCheck
from guidebook.checks.code_blocks import CodeLanguageCheck
from guidebook.checks.external import ExternalLinkCheck
from guidebook.checks.headings import DuplicateHeadingCheck
from guidebook.checks.links import BadLinkFormatCheck, BrokenLinkCheck, WikilinkCheck
from guidebook.checks.metadata import FrontmatterCheck, PlaceholderCheck
from guidebook.checks.structure import StructureCheck


def default_checks() -> list[Check]:
    return [
        BrokenLinkCheck(),
        BadLinkFormatCheck(),
        WikilinkCheck(),
        ExternalLinkCheck(),
        CodeLanguageCheck(),
        DuplicateHeadingCheck(),
        FrontmatterCheck(),
        PlaceholderCheck(),
    ]


__all__ = [
    "BadLinkFormatCheck",
    "BrokenLinkCheck",
    "Check",
    "CheckContext",
    "CodeLanguageCheck",
    "DuplicateHeadingCheck",
    "ExternalLinkCheck",
    "FrontmatterCheck",
    "KnowledgeBaseCheck",
    "PlaceholderCheck",
    "StructureCheck",
    "WikilinkCheck",
    "default_checks",
]

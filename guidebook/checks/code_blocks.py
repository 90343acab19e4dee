"""Fenced code blocks must say what language they illustrate."""

from guidebook.domain.document import GuidelineDocument
from guidebook.domain.report import Issue

from .base import CheckContext


class CodeLanguageCheck:
    rule = "code-language"

    def run(self, document: GuidelineDocument, context: CheckContext) -> list[Issue]:
        known_languages = {language.lower() for language in context.settings.known_languages}
        issues = []

        for snippet in document.code_snippets:
            if not snippet.language:
                issues.append(
                    Issue(
                        rule=self.rule,
                        severity="error",
                        file=document.relative_path,
                        line=snippet.line,
                        message="Fenced code block without language tag",
                    )
                )
            elif snippet.language.lower() not in known_languages:
                issues.append(
                    Issue(
                        rule=self.rule,
                        severity="warning",
                        file=document.relative_path,
                        line=snippet.line,
                        message=f"Unrecognized code block language: {snippet.language}",
                    )
                )

        return issues

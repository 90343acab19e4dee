"""Knowledge base layout check."""

from loguru import logger

from guidebook.domain.report import Issue

from .base import CheckContext


class StructureCheck:
    """Required paths must exist and must not be empty."""

    rule = "structure"

    def run(self, context: CheckContext) -> list[Issue]:
        issues = []

        for required in context.settings.required_paths:
            path = context.root / required
            logger.debug(f"Checking required path: {path}")

            if not path.exists():
                issues.append(self._issue("error", f"Path does not exist: {required}"))
            elif path.is_dir() and not any(path.iterdir()):
                issues.append(self._issue("warning", f"Directory is empty: {required}"))
            elif path.is_file() and path.stat().st_size == 0:
                issues.append(self._issue("warning", f"File is empty: {required}"))

        return issues

    def _issue(self, severity: str, message: str) -> Issue:
        return Issue(rule=self.rule, severity=severity, message=message)

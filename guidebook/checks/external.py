"""Reachability check for external links, only run in strict mode."""

import httpx
from loguru import logger

from guidebook.domain.document import GuidelineDocument
from guidebook.domain.report import Issue

from .base import CheckContext


class ExternalLinkCheck:
    """External http(s) links should answer within the configured timeout."""

    rule = "external-link"

    def run(self, document: GuidelineDocument, context: CheckContext) -> list[Issue]:
        if not context.settings.strict or context.http_client is None:
            return []

        issues = []
        for link in document.links:
            if not link.is_external:
                continue

            url = link.href.split("#", 1)[0]
            if url not in context.external_results:
                context.external_results[url] = self.is_reachable(url, context)

            if not context.external_results[url]:
                issues.append(
                    Issue(
                        rule=self.rule,
                        severity="warning",
                        file=document.relative_path,
                        line=link.line,
                        message=f"Unreachable external link: {link.href}",
                    )
                )
        return issues

    @staticmethod
    def is_reachable(url: str, context: CheckContext) -> bool:
        """Any HTTP response, even 4xx/5xx, means the link is reachable."""
        timeout = context.settings.external_link_timeout
        try:
            response = context.http_client.head(url, timeout=timeout, follow_redirects=True)
            if response.status_code in (405, 501):
                response = context.http_client.get(url, timeout=timeout, follow_redirects=True)
        except httpx.HTTPError as e:
            logger.warning(f"External link unreachable: {url} ({e.__class__.__name__})")
            return False

        logger.debug(f"External link {url} answered {response.status_code}")
        return True

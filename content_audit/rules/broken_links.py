"""
Broken links rule.

Checks:
- Problematic URLs (suspicious / deprecated domains, malformed structure,
  insecure scheme, unencoded spaces, doubled path slashes, excessive length)
- Raw URLs that should be formatted as links
- Non-descriptive link text
- The same URL used more than once
"""

from collections import Counter
from typing import Any, List, Mapping, Optional, Sequence
from urllib.parse import urlsplit

from ..core.base_rule import BaseRule, is_number, is_string_list
from ..core.consolidation import consolidate
from ..core.context import ExecutionContext
from ..core.models import Category, Issue, Severity
from ..core.text import Link, extract_links

GENERIC_LINK_TEXT = {"here", "click here", "link", "this", "read more"}
LOCAL_HOSTS = {"localhost", "127.0.0.1"}
RELATIVE_PREFIXES = ("/", "./", "../", "#", "?")


def is_relative(url: str) -> bool:
    return url.startswith(RELATIVE_PREFIXES) and not url.startswith("//")


class BrokenLinksRule(BaseRule):
    """Поиск битых и проблемных ссылок."""

    def __init__(self):
        super().__init__(
            rule_id="broken-links",
            name="Broken Links Detection",
            description="Identifies potentially broken links, malformed URLs, and link-related issues",
            category=Category.TECHNICAL,
            severity=Severity.HIGH,
            version="1.0.0",
            tags=["links", "urls", "navigation", "technical"],
            configurable=True,
            default_config={
                "check_link_formatting": True,
                "suspicious_domains": [
                    "localhost", "127.0.0.1", "192.168.", "10.0.0.",
                    "staging.", "test.", "dev.", "demo.",
                ],
                "deprecated_domains": ["example.com", "test.com", "localhost.com"],
                "max_url_length": 2000,
            },
        )

    def execute(self, context: ExecutionContext) -> Optional[Issue]:
        config = self.config
        content = context.content
        if not content:
            return None

        links = extract_links(content)
        if not links:
            return None

        issues: List[Issue] = []
        issues.extend(self.check_urls(links, config))

        if config["check_link_formatting"]:
            issues.extend(self.check_link_formatting(links))

        issues.extend(self.check_duplicate_links(links))

        return consolidate(
            issues,
            max_suggestions=6,
            extra_metadata={"total_links_found": len(links)},
        )

    def analyze_url(self, url: str, config: Mapping[str, Any]) -> List[str]:
        """List every problem found in one URL (empty when the URL looks fine)."""
        problems = []
        url_lower = url.lower()

        for domain in config["suspicious_domains"]:
            if domain.lower() in url_lower:
                problems.append(f"Contains suspicious domain: {domain}")

        for domain in config["deprecated_domains"]:
            if domain.lower() in url_lower:
                problems.append(f"Uses deprecated domain: {domain}")

        if " " in url:
            problems.append("Contains unencoded spaces")

        hostname = ""
        if is_relative(url):
            path = url.split("?", 1)[0].split("#", 1)[0]
            if "//" in path:
                problems.append("Contains double slashes in path")
        else:
            try:
                parts = urlsplit(url)
                parts.port  # raises ValueError on an invalid port
            except ValueError:
                problems.append("Malformed URL structure")
            else:
                hostname = (parts.hostname or "").lower()
                if not parts.scheme:
                    problems.append("Malformed URL structure")
                elif parts.scheme.lower() not in ("http", "https"):
                    problems.append(f"Unsupported protocol: {parts.scheme.lower()}:")
                elif not hostname:
                    problems.append("Empty hostname")

                if "//" in parts.path:
                    problems.append("Contains double slashes in path")

        if url_lower.startswith("http://") and hostname not in LOCAL_HOSTS:
            problems.append("Uses insecure HTTP protocol")

        if len(url) > config["max_url_length"]:
            problems.append("URL is extremely long")

        return problems

    def check_urls(self, links: Sequence[Link], config: Mapping[str, Any]) -> List[Issue]:
        problematic = []
        for link in links:
            problems = self.analyze_url(link.url, config)
            if problems:
                problematic.append({"url": link.url, "problems": problems})

        if not problematic:
            return []

        return [self.create_issue(
            "Problematic URLs detected",
            f"Found {len(problematic)} links that may be broken or problematic.",
            [
                "Review and update problematic URLs",
                "Test all external links for accessibility",
                "Replace development/staging URLs with production URLs",
                "Remove or fix malformed URLs",
                "Consider using relative paths for internal links",
            ],
            Severity.HIGH,
            problematic_count=len(problematic),
            examples=problematic[:3],
        )]

    def check_link_formatting(self, links: Sequence[Link]) -> List[Issue]:
        issues = []

        raw_urls = [link for link in links if link.type == "raw"]
        if raw_urls:
            issues.append(self.create_issue(
                "Unformatted URLs",
                f"Found {len(raw_urls)} raw URLs that should be formatted as proper links.",
                [
                    "Convert raw URLs to markdown links with descriptive text",
                    "Use meaningful link text instead of displaying URLs",
                    "Follow accessibility guidelines for link text",
                    "Consider shortening very long URLs",
                ],
                Severity.MEDIUM,
                raw_url_count=len(raw_urls),
                raw_url_examples=[link.url for link in raw_urls[:3]],
            ))

        poor_text = [link for link in links if link.type != "raw" and self.is_poor_link_text(link)]
        if poor_text:
            issues.append(self.create_issue(
                "Poor link text",
                f"Found {len(poor_text)} links with non-descriptive text.",
                [
                    "Use descriptive text that indicates link destination",
                    'Avoid generic phrases like "click here" or "read more"',
                    "Make link text meaningful out of context",
                    "Follow accessibility best practices for link text",
                ],
                Severity.MEDIUM,
                poor_link_count=len(poor_text),
                poor_link_examples=[{"text": link.text, "url": link.url} for link in poor_text[:3]],
            ))

        return issues

    @staticmethod
    def is_poor_link_text(link: Link) -> bool:
        link_text = link.text.lower().strip()
        return (
            link_text in GENERIC_LINK_TEXT
            or link_text == link.url.lower()
            or len(link_text) < 3
        )

    def check_duplicate_links(self, links: Sequence[Link]) -> List[Issue]:
        counts = Counter(link.url.lower() for link in links)
        duplicates = [{"url": url, "count": count} for url, count in counts.items() if count > 1]
        if not duplicates:
            return []

        return [self.create_issue(
            "Duplicate links detected",
            f"Found {len(duplicates)} URLs that appear multiple times in the content.",
            [
                "Review duplicate links for necessity",
                "Consider consolidating repetitive links",
                "Use internal references instead of repeating URLs",
                "Ensure duplicate links serve different purposes",
            ],
            Severity.LOW,
            duplicate_count=len(duplicates),
            duplicate_examples=duplicates[:3],
        )]

    def validate_config(self, config: Mapping[str, Any]) -> bool:
        max_length = config.get("max_url_length")
        return (
            is_string_list(config.get("suspicious_domains"))
            and is_string_list(config.get("deprecated_domains"))
            and is_number(max_length)
            and max_length > 0
        )

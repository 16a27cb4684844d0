"""
SEO rule: content length, heading hierarchy, keyword density, meta elements,
image alt text and internal linking.
"""

import re
from typing import Any, List, Mapping, Optional, Sequence

from ..core.base_rule import BaseRule, is_number
from ..core.consolidation import consolidate
from ..core.context import ExecutionContext
from ..core.models import Article, Category, Issue, Severity
from ..core import text

STOP_WORDS = {
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
    "with", "by", "is", "are", "was", "were", "how", "what", "when", "where", "why",
}
GENERIC_ALT_TEXT = {"image", "img", "picture", "photo", "screenshot"}
IMAGE_FILENAME_PATTERN = re.compile(r"\.(png|jpe?g|gif|svg|webp|bmp)$", re.IGNORECASE)
MIN_KEYWORD_LENGTH = 3
KEYWORDS_CHECKED = 3


def extract_keywords(title: Optional[str], tags: Sequence[str]) -> List[str]:
    """Title words (minus stop words, at least 3 chars) followed by tags, deduplicated."""
    keywords = []
    if title:
        cleaned = re.sub(r"[^\w\s]", "", title.lower())
        keywords.extend(
            word for word in cleaned.split()
            if len(word) >= MIN_KEYWORD_LENGTH and word not in STOP_WORDS
        )
    keywords.extend(tag.lower() for tag in tags if tag)

    unique = []
    for keyword in keywords:
        if keyword not in unique:
            unique.append(keyword)
    return unique


def has_proper_hierarchy(levels: Sequence[int]) -> bool:
    """
    False when headings are missing, or a heading sits two or more levels below
    the one before it (H1 then H4). The first heading may be H1 or H2.
    """
    if not levels:
        return False

    expected = 1
    for level in levels:
        if level > expected + 1:
            return False
        expected = min(level + 1, 6)
    return True


class SEORule(BaseRule):
    """Анализ SEO-оптимизации статьи."""

    def __init__(self):
        super().__init__(
            rule_id="seo-optimization",
            name="SEO Optimization Analysis",
            description=(
                "Evaluates content for search engine optimization including keywords, "
                "structure, and meta information"
            ),
            category=Category.SEO,
            severity=Severity.LOW,
            version="1.0.0",
            tags=["seo", "keywords", "optimization", "structure"],
            configurable=True,
            default_config={
                "check_keyword_density": True,
                "min_keyword_density": 0.005,  # 0.5%
                "max_keyword_density": 0.03,  # 3%
                "check_heading_structure": True,
                "check_meta_elements": True,
                "check_internal_links": True,
                "check_image_alt_text": True,
                "min_content_length": 300,  # words
                "max_content_length": 2500,
                "min_title_length": 30,  # characters
                "max_title_length": 60,
            },
        )

    def execute(self, context: ExecutionContext) -> Optional[Issue]:
        config = self.config
        article = context.article
        content = context.content
        if not content:
            return None

        keywords = extract_keywords(article.title, article.tags)
        issues: List[Issue] = []

        length_issue = self.check_content_length(context.metadata.word_count, config)
        if length_issue:
            issues.append(length_issue)

        if config["check_heading_structure"]:
            heading_issue = self.check_heading_structure(content)
            if heading_issue:
                issues.append(heading_issue)

        if config["check_keyword_density"] and keywords:
            issues.extend(self.check_keyword_density(content, keywords, config))

        if config["check_meta_elements"]:
            issues.extend(self.check_meta_elements(article, config))

        if config["check_image_alt_text"]:
            image_issue = self.check_image_alt_text(content)
            if image_issue:
                issues.append(image_issue)

        if config["check_internal_links"]:
            link_issue = self.check_internal_linking(content)
            if link_issue:
                issues.append(link_issue)

        return consolidate(
            issues,
            max_suggestions=8,
            default_severity=Severity.LOW,
            extra_metadata={"target_keywords": keywords[:KEYWORDS_CHECKED]},
        )

    def check_content_length(self, word_count: int, config: Mapping[str, Any]) -> Optional[Issue]:
        if word_count < config["min_content_length"]:
            return self.create_issue(
                "Content too short for SEO",
                f"Content has {word_count} words. SEO typically favors longer, more comprehensive content.",
                [
                    f"Expand content to at least {config['min_content_length']} words",
                    "Add more detailed explanations and examples",
                    "Include relevant background information",
                    "Add FAQ or troubleshooting sections",
                ],
                Severity.LOW,
                word_count=word_count,
            )
        if word_count > config["max_content_length"]:
            return self.create_issue(
                "Content may be too long",
                f"Very long content ({word_count} words) may affect user engagement and SEO.",
                [
                    "Consider breaking into multiple focused articles",
                    "Use clear headings to improve scanability",
                    "Add a table of contents for navigation",
                    "Ensure content density remains high throughout",
                ],
                Severity.LOW,
                word_count=word_count,
            )
        return None

    def check_heading_structure(self, content: str) -> Optional[Issue]:
        headings = text.find_headings(content)
        if not headings:
            return self.create_issue(
                "Missing heading structure",
                "Content lacks heading structure, which is important for SEO and readability.",
                [
                    "Add H2 and H3 headings to structure content",
                    "Use headings to break up long sections",
                    "Include target keywords in headings where appropriate",
                    "Create a logical hierarchy of information",
                ],
                Severity.LOW,
                heading_count=0,
            )

        levels = [level for level, _ in headings]
        if not has_proper_hierarchy(levels):
            return self.create_issue(
                "Poor heading hierarchy",
                "Heading structure doesn't follow proper hierarchy (H1 → H2 → H3, etc.).",
                [
                    "Organize headings in proper hierarchy",
                    "Use H1 for main title, H2 for sections, H3 for subsections",
                    "Avoid skipping heading levels",
                    "Ensure logical content flow",
                ],
                Severity.LOW,
                heading_count=len(headings),
                has_h1=1 in levels,
            )
        return None

    def check_keyword_density(
        self,
        content: str,
        keywords: Sequence[str],
        config: Mapping[str, Any],
    ) -> List[Issue]:
        words = text.words_lower(content)
        total_words = len(words)
        if total_words == 0:
            return []

        issues = []
        for keyword in keywords[:KEYWORDS_CHECKED]:
            occurrences = sum(1 for word in words if keyword in word)
            density = occurrences / total_words
            percent = density * 100

            if density < config["min_keyword_density"]:
                issues.append(self.create_issue(
                    "Low keyword density",
                    f'Keyword "{keyword}" appears only {occurrences} times ({percent:.1f}% density).',
                    [
                        "Include target keywords more naturally in content",
                        "Use keywords in headings and subheadings",
                        "Add keyword variations and synonyms",
                        "Ensure keywords appear in the first paragraph",
                    ],
                    Severity.LOW,
                    keyword=keyword,
                    occurrences=occurrences,
                    density=round(percent, 1),
                ))
            elif density > config["max_keyword_density"]:
                issues.append(self.create_issue(
                    "Keyword over-optimization",
                    f'Keyword "{keyword}" appears {occurrences} times ({percent:.1f}% density), '
                    "which may be excessive.",
                    [
                        "Reduce keyword repetition to avoid over-optimization",
                        "Use natural language and keyword variations",
                        "Focus on content quality over keyword density",
                        "Consider using synonyms and related terms",
                    ],
                    Severity.LOW,
                    keyword=keyword,
                    occurrences=occurrences,
                    density=round(percent, 1),
                ))
        return issues

    def check_meta_elements(self, article: Article, config: Mapping[str, Any]) -> List[Issue]:
        issues = []

        if article.title:
            title_length = len(article.title)
            min_length = config["min_title_length"]
            max_length = config["max_title_length"]
            if title_length < min_length:
                issues.append(self.create_issue(
                    "Title too short",
                    f"Title is shorter than recommended for SEO ({min_length}-{max_length} characters).",
                    [
                        f"Expand title to {min_length}-{max_length} characters",
                        "Include primary keywords in title",
                        "Make title descriptive and compelling",
                        "Consider user search intent",
                    ],
                    Severity.LOW,
                    title_length=title_length,
                ))
            elif title_length > max_length:
                issues.append(self.create_issue(
                    "Title too long",
                    f"Title may be truncated in search results (over {max_length} characters).",
                    [
                        f"Shorten title to under {max_length} characters",
                        "Place important keywords at the beginning",
                        "Remove unnecessary words and phrases",
                        "Maintain clarity and relevance",
                    ],
                    Severity.LOW,
                    title_length=title_length,
                ))

        if not (article.description or article.excerpt):
            issues.append(self.create_issue(
                "Missing meta description",
                "Article lacks a meta description, which is important for search results.",
                [
                    "Add a compelling meta description (150-160 characters)",
                    "Include primary keywords naturally",
                    "Summarize the article's value proposition",
                    "Make it actionable and click-worthy",
                ],
                Severity.HIGH,
            ))

        return issues

    @staticmethod
    def is_descriptive_alt(alt: str) -> bool:
        alt = alt.strip()
        return bool(alt) and alt.lower() not in GENERIC_ALT_TEXT and not IMAGE_FILENAME_PATTERN.search(alt)

    def check_image_alt_text(self, content: str) -> Optional[Issue]:
        images = text.find_images(content)
        if not images:
            return None

        missing = [src for alt, src in images if not self.is_descriptive_alt(alt)]
        if not missing:
            return None

        return self.create_issue(
            "Images missing alt text",
            f"Found {len(missing)} images without descriptive alt text.",
            [
                "Add descriptive alt text to all images",
                "Include relevant keywords in alt text naturally",
                "Describe image content for accessibility",
                "Keep alt text concise but informative",
            ],
            Severity.LOW,
            total_images=len(images),
            missing_alt=len(missing),
        )

    def check_internal_linking(self, content: str) -> Optional[Issue]:
        links = [link for link in text.extract_links(content) if link.type == "markdown"]
        if not links:
            return None

        internal = [link for link in links if not link.url.lower().startswith("http")]
        if internal:
            return None

        return self.create_issue(
            "No internal links found",
            "Content has external links but no internal links to other articles.",
            [
                "Add links to related articles in your knowledge base",
                "Link to relevant documentation or guides",
                "Use descriptive anchor text for internal links",
                "Create content clusters through strategic linking",
            ],
            Severity.LOW,
            total_links=len(links),
        )

    def validate_config(self, config: Mapping[str, Any]) -> bool:
        numeric_keys = (
            "min_keyword_density", "max_keyword_density", "min_content_length",
            "max_content_length", "min_title_length", "max_title_length",
        )
        if not all(is_number(config.get(key)) for key in numeric_keys):
            return False
        return (
            0 <= config["min_keyword_density"] < config["max_keyword_density"] <= 1
            and 0 < config["min_content_length"] < config["max_content_length"]
            and 0 < config["min_title_length"] < config["max_title_length"]
        )

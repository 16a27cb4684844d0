"""
Content quality rule: length, readability, grammar, structure and formatting.
"""

import re
from typing import Any, List, Mapping, Optional

from ..core.base_rule import BaseRule, is_number
from ..core.consolidation import consolidate
from ..core.context import ExecutionContext
from ..core.models import Category, Issue, Severity
from ..core import text

CODE_CONTENT_PATTERN = re.compile(r"```|`[^`]+`|\$\(|\$\{|function\s*\(|class\s+\w+|def\s+\w+")
CODE_BLOCK_PATTERN = re.compile(r"```[\s\S]*?```|`[^`\n]+`")
URL_TEXT_PATTERN = re.compile(r"https?://[^\s)]+")
FORMATTED_LINK_PATTERN = re.compile(r"\[([^\]]+)\]\([^)]+\)")
LIST_CONTENT_PATTERN = re.compile(r"^\s*[-*+]\s+|\d+\.\s+", re.MULTILINE)
BULLET_LIST_PATTERN = re.compile(r"^[-*+]\s+.+$", re.MULTILINE)
NUMBERED_LIST_PATTERN = re.compile(r"^\d+\.\s+.+$", re.MULTILINE)


class QualityRule(BaseRule):
    """Оценка качества контента."""

    def __init__(self):
        super().__init__(
            rule_id="content-quality",
            name="Content Quality Assessment",
            description="Evaluates content for readability, structure, grammar, and overall quality",
            category=Category.CONTENT_QUALITY,
            severity=Severity.MEDIUM,
            version="1.1.0",
            tags=["quality", "readability", "grammar", "structure"],
            configurable=True,
            default_config={
                "min_word_count": 50,
                "max_word_count": 5000,
                "min_readability_score": 30,  # Flesch Reading Ease
                "max_readability_score": 90,
                "check_grammar": True,
                "check_structure": True,
                "check_formatting": True,
                "require_headers": True,
                "min_header_count": 1,
                "max_sentence_length": 25,  # words per sentence
            },
        )

    def execute(self, context: ExecutionContext) -> Optional[Issue]:
        config = self.config
        content = context.content
        issues: List[Issue] = []

        length_issue = self.check_content_length(context.metadata.word_count, config)
        if length_issue:
            issues.append(length_issue)

        if content:
            readability_issue = self.check_readability(content, config)
            if readability_issue:
                issues.append(readability_issue)

            if config["check_grammar"]:
                issues.extend(self.check_grammar(content, config))

            if config["check_structure"]:
                structure_issue = self.check_structure(content, config)
                if structure_issue:
                    issues.append(structure_issue)

            if config["check_formatting"]:
                issues.extend(self.check_formatting(content))

        return consolidate(
            issues,
            max_suggestions=8,
            extra_metadata={
                "word_count": context.metadata.word_count,
                "content_length": context.metadata.content_length,
            },
        )

    def check_content_length(self, word_count: int, config: Mapping[str, Any]) -> Optional[Issue]:
        if word_count < config["min_word_count"]:
            return self.create_issue(
                "Content too short",
                f"Article contains only {word_count} words, which may not provide sufficient detail.",
                [
                    "Expand the content with more detailed explanations",
                    "Add examples and use cases",
                    "Include troubleshooting steps if applicable",
                    "Consider merging with related content",
                ],
                Severity.MEDIUM,
                word_count=word_count,
            )
        if word_count > config["max_word_count"]:
            return self.create_issue(
                "Content very lengthy",
                f"Article contains {word_count} words, which may overwhelm readers.",
                [
                    "Consider breaking into multiple articles",
                    "Use headers to improve scanability",
                    "Remove redundant information",
                    "Create a summary or overview section",
                ],
                Severity.LOW,
                word_count=word_count,
            )
        return None

    def check_readability(self, content: str, config: Mapping[str, Any]) -> Optional[Issue]:
        score = text.calculate_readability_score(content)
        rounded = text.round_half_up(score)

        if score < config["min_readability_score"]:
            return self.create_issue(
                "Poor readability",
                f"Content has a low readability score ({rounded}), indicating it may be difficult to read.",
                [
                    "Use shorter sentences and simpler words",
                    "Break up long paragraphs",
                    "Add bullet points and lists",
                    "Use active voice instead of passive",
                    "Define technical terms",
                ],
                Severity.HIGH,
                readability_score=rounded,
            )
        if score > config["max_readability_score"]:
            return self.create_issue(
                "Content may be too simple",
                f"Content has a very high readability score ({rounded}), which might lack necessary detail.",
                [
                    "Add more detailed explanations",
                    "Include technical specifics where appropriate",
                    "Ensure content depth matches user needs",
                    "Consider adding advanced sections",
                ],
                Severity.LOW,
                readability_score=rounded,
            )
        return None

    def check_grammar(self, content: str, config: Mapping[str, Any]) -> List[Issue]:
        issues = []

        problems = text.check_basic_grammar(content)
        if problems:
            issues.append(self.create_issue(
                "Grammar and formatting issues",
                "Content contains potential grammar or formatting problems.",
                [
                    "Review content for grammar errors",
                    "Check punctuation and capitalization",
                    "Use consistent formatting throughout",
                    "Consider using a grammar checking tool",
                ],
                Severity.MEDIUM,
                problems=problems[:3],
            ))

        long_sentences = [
            sentence for sentence in text.split_sentences(content)
            if len(sentence.split()) > config["max_sentence_length"]
        ]
        if long_sentences:
            issues.append(self.create_issue(
                "Overly long sentences",
                f"Found {len(long_sentences)} sentences that may be too long for easy reading.",
                [
                    "Break long sentences into shorter ones",
                    "Use conjunctions to separate ideas",
                    "Consider using bullet points for lists",
                    "Aim for 15-20 words per sentence",
                ],
                Severity.MEDIUM,
                long_sentence_count=len(long_sentences),
            ))

        return issues

    def check_structure(self, content: str, config: Mapping[str, Any]) -> Optional[Issue]:
        header_count = len(text.find_heading_texts(content))
        paragraph_count = len(text.split_paragraphs(content))

        problems = []
        if config["require_headers"] and header_count < config["min_header_count"]:
            problems.append("Content lacks proper header structure for easy navigation")
        if paragraph_count < 2:
            problems.append("Content appears to be a single block without paragraph breaks")

        if not problems:
            return None

        return self.create_issue(
            "Lacks proper structure",
            "; ".join(problems) + ".",
            [
                "Add descriptive headers to organize content",
                "Break content into logical paragraphs",
                "Use H2 and H3 tags for main sections",
                "Add an introduction paragraph",
                "Include a conclusion or summary",
                "Use white space for better readability",
            ],
            Severity.HIGH,
            header_count=header_count,
            paragraph_count=paragraph_count,
            structure_problems=problems,
        )

    def check_formatting(self, content: str) -> List[Issue]:
        issues = []

        if CODE_CONTENT_PATTERN.search(content) and not CODE_BLOCK_PATTERN.search(content):
            issues.append(self.create_issue(
                "Unformatted code content",
                "Content appears to contain code that is not properly formatted.",
                [
                    "Use code blocks (```) for multi-line code",
                    "Use inline code (`) for short code snippets",
                    "Add syntax highlighting where appropriate",
                    "Ensure code examples are properly indented",
                ],
                Severity.MEDIUM,
            ))

        if URL_TEXT_PATTERN.search(content) and not FORMATTED_LINK_PATTERN.search(content):
            issues.append(self.create_issue(
                "Unformatted URLs",
                "Content contains raw URLs that should be formatted as links.",
                [
                    "Format URLs as proper markdown links",
                    "Use descriptive link text instead of raw URLs",
                    "Ensure all external links work correctly",
                    "Consider using relative links for internal content",
                ],
                Severity.LOW,
            ))

        well_formatted = BULLET_LIST_PATTERN.search(content) or NUMBERED_LIST_PATTERN.search(content)
        if LIST_CONTENT_PATTERN.search(content) and not well_formatted:
            issues.append(self.create_issue(
                "Poor list formatting",
                "Lists in the content may not be properly formatted.",
                [
                    "Use consistent list formatting (- or *)",
                    "Ensure proper spacing after list markers",
                    "Use numbered lists for sequential steps",
                    "Use bullet points for non-sequential items",
                ],
                Severity.LOW,
            ))

        return issues

    def validate_config(self, config: Mapping[str, Any]) -> bool:
        numeric_keys = (
            "min_word_count", "max_word_count", "min_readability_score",
            "max_readability_score", "max_sentence_length", "min_header_count",
        )
        if not all(is_number(config.get(key)) for key in numeric_keys):
            return False
        return (
            config["min_word_count"] > 0
            and config["max_word_count"] > config["min_word_count"]
            and 0 <= config["min_readability_score"] < config["max_readability_score"] <= 100
            and config["max_sentence_length"] > 5
            and config["min_header_count"] >= 0
        )

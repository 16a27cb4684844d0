"""
Duplicate content rule.

Checks:
- Repeated headings
- Near-identical paragraphs (Jaccard similarity over unique words)
- Exactly repeated sentences
- Frequently repeated 3-word phrases
"""

import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..core.base_rule import BaseRule, is_number, is_string_list
from ..core.consolidation import consolidate
from ..core.context import ExecutionContext
from ..core.models import Category, Issue, Severity
from ..core import text

MIN_CONTENT_LENGTH = 100
MIN_SENTENCE_LENGTH = 20
PHRASE_SIZE = 3
MIN_PHRASE_OCCURRENCES = 3

_PUNCTUATION_PATTERN = re.compile(r"[^\w\s]")


def _snippet(value: str, length: int) -> str:
    return value[:length] + "..."


class DuplicateContentRule(BaseRule):
    """Поиск повторяющегося контента внутри статьи."""

    def __init__(self):
        super().__init__(
            rule_id="duplicate-content",
            name="Duplicate Content Detection",
            description=(
                "Identifies repeated content sections, similar text blocks, and redundant information"
            ),
            category=Category.CONTENT_QUALITY,
            severity=Severity.MEDIUM,
            version="1.0.0",
            tags=["duplicate", "repetition", "redundancy", "content"],
            configurable=True,
            default_config={
                "min_similarity_threshold": 0.8,
                "min_text_length": 50,
                "check_headers": True,
                "check_paragraphs": True,
                "check_sentences": True,
                "ignore_common_phrases": True,
                "common_phrases": [
                    "thank you", "please note", "for more information",
                    "if you have questions", "contact support", "getting started",
                ],
            },
        )

    def execute(self, context: ExecutionContext) -> Optional[Issue]:
        config = self.config
        content = context.content

        if len(content) < MIN_CONTENT_LENGTH:
            return None

        issues: List[Issue] = []

        if config["check_headers"]:
            header_issue = self.check_duplicate_headers(content)
            if header_issue:
                issues.append(header_issue)

        if config["check_paragraphs"]:
            issues.extend(self.check_similar_paragraphs(content, config))

        if config["check_sentences"]:
            issues.extend(self.check_duplicate_sentences(content))

        issues.extend(self.check_repetitive_phrases(content, config))

        return consolidate(issues, max_suggestions=6)

    def check_duplicate_headers(self, content: str) -> Optional[Issue]:
        headers = [header.lower().strip() for header in text.find_heading_texts(content)]
        if len(headers) < 2:
            return None

        duplicates = text.find_repeats(headers)
        if not duplicates:
            return None

        return self.create_issue(
            "Duplicate headers detected",
            f"Found {len(duplicates)} headers that are identical or very similar.",
            [
                "Review header names for uniqueness",
                "Use more specific header text",
                "Combine sections with similar headers",
                "Create a clear content hierarchy",
            ],
            Severity.MEDIUM,
            duplicate_headers=[{"text": header, "count": count} for header, count in duplicates[:3]],
        )

    def find_similar_texts(self, texts: Sequence[str], threshold: float) -> List[Dict[str, Any]]:
        similarities = []
        for i in range(len(texts)):
            for j in range(i + 1, len(texts)):
                similarity = text.text_similarity(texts[i], texts[j])
                if similarity >= threshold:
                    similarities.append({
                        "text1": texts[i],
                        "text2": texts[j],
                        "similarity": similarity,
                    })
        return similarities

    def check_similar_paragraphs(self, content: str, config: Mapping[str, Any]) -> List[Issue]:
        paragraphs = [
            paragraph for paragraph in text.split_paragraphs(content)
            if len(paragraph) >= config["min_text_length"]
        ]
        if len(paragraphs) < 2:
            return []

        similarities = self.find_similar_texts(paragraphs, config["min_similarity_threshold"])
        if not similarities:
            return []

        return [self.create_issue(
            "Similar paragraphs detected",
            f"Found {len(similarities)} pairs of paragraphs with high similarity.",
            [
                "Review similar paragraphs for redundancy",
                "Combine or consolidate repetitive content",
                "Ensure each paragraph adds unique value",
                "Consider creating reusable content blocks",
            ],
            Severity.MEDIUM,
            similar_paragraph_pairs=len(similarities),
            similar_paragraphs=[
                {
                    "similarity": text.round_half_up(pair["similarity"] * 100),
                    "text1": _snippet(pair["text1"], 100),
                    "text2": _snippet(pair["text2"], 100),
                }
                for pair in similarities[:2]
            ],
        )]

    def check_duplicate_sentences(self, content: str) -> List[Issue]:
        sentences = [
            sentence for sentence in text.split_sentences(content)
            if len(sentence) > MIN_SENTENCE_LENGTH
        ]
        if len(sentences) < 2:
            return []

        normalized = [_PUNCTUATION_PATTERN.sub("", sentence.lower()).strip() for sentence in sentences]
        duplicates = [
            (sentence, count) for sentence, count in text.find_repeats(normalized)
            if len(sentence) > MIN_SENTENCE_LENGTH
        ]
        if not duplicates:
            return []

        return [self.create_issue(
            "Duplicate sentences found",
            f"Found {len(duplicates)} sentences that are repeated exactly.",
            [
                "Remove duplicate sentences",
                "Vary sentence structure when conveying similar information",
                "Use references instead of repeating information",
                "Check for copy-paste errors",
            ],
            Severity.HIGH,
            duplicate_sentences=[
                {"sentence": _snippet(sentence, 80), "occurrences": count}
                for sentence, count in duplicates[:3]
            ],
        )]

    def is_common_phrase(self, phrase: str, common_phrases: Sequence[str]) -> bool:
        return any(common.lower() in phrase for common in common_phrases)

    def check_repetitive_phrases(self, content: str, config: Mapping[str, Any]) -> List[Issue]:
        words = text.words_lower(content)
        phrases = []
        for i in range(len(words) - PHRASE_SIZE + 1):
            phrase = " ".join(words[i:i + PHRASE_SIZE])
            if len(phrase) > 10:
                phrases.append(phrase)

        repeated = text.find_repeats(phrases, min_count=MIN_PHRASE_OCCURRENCES)
        if config["ignore_common_phrases"]:
            repeated = [
                (phrase, count) for phrase, count in repeated
                if not self.is_common_phrase(phrase, config["common_phrases"])
            ]
        if not repeated:
            return []

        return [self.create_issue(
            "Repetitive phrases detected",
            f"Found {len(repeated)} phrases that are repeated frequently.",
            [
                "Vary language to avoid repetitive phrasing",
                "Use synonyms and alternative expressions",
                "Review content for necessary repetition",
                "Consider creating a glossary for repeated terms",
            ],
            Severity.LOW,
            repetitive_phrases=[
                {"phrase": phrase, "occurrences": count} for phrase, count in repeated[:3]
            ],
        )]

    def validate_config(self, config: Mapping[str, Any]) -> bool:
        threshold = config.get("min_similarity_threshold")
        min_length = config.get("min_text_length")
        return (
            is_number(threshold)
            and is_number(min_length)
            and 0 < threshold <= 1
            and min_length > 0
            and is_string_list(config.get("common_phrases"))
        )

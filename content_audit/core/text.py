"""
Text analysis helpers shared by the audit rules.

Contains:
- Readability (simplified Flesch Reading Ease) and syllable counting
- Heading, sentence and paragraph splitting for markdown content
- Link extraction (markdown, HTML anchors, raw URLs)
- Jaccard similarity over unique words
- Basic grammar heuristics
"""

import math
import re
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Tuple

HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+)$", re.MULTILINE)
ANY_HEADING_PATTERN = re.compile(r"^#+\s+(.+)$", re.MULTILINE)
SENTENCE_SPLIT_PATTERN = re.compile(r"[.!?]+")
PARAGRAPH_SPLIT_PATTERN = re.compile(r"\n\s*\n")
WHITESPACE_PATTERN = re.compile(r"\s+")
WORD_PATTERN = re.compile(r"\b\w+\b")
ASCII_WORD_PATTERN = re.compile(r"\b[a-z]+\b", re.ASCII)
VOWEL_GROUP_PATTERN = re.compile(r"[aeiouy]+")

MARKDOWN_LINK_PATTERN = re.compile(r"(?<!!)\[([^\]]*)\]\(([^)]+)\)")
MARKDOWN_IMAGE_PATTERN = re.compile(r"!\[([^\]]*)\]\(([^)]+)\)")
HTML_LINK_PATTERN = re.compile(
    r"<a\s+(?:[^>]*?\s+)?href=([\"'])(.*?)\1[^>]*>(.*?)</a>",
    re.IGNORECASE | re.DOTALL,
)
RAW_URL_PATTERN = re.compile(r"https?://[^\s<>\[\]()\"'`]+", re.IGNORECASE)
HTML_TAG_PATTERN = re.compile(r"<[^>]+>")

_TRAILING_URL_PUNCTUATION = ".,;:!?"


# ---------------------------------------------------------------------------
# Readability
# ---------------------------------------------------------------------------


def count_syllables(text: str) -> int:
    """Approximate syllables: vowel-group runs per word, silent trailing 'e', min 1."""
    if not text:
        return 0

    total = 0
    for word in ASCII_WORD_PATTERN.findall(text.lower()):
        syllables = len(VOWEL_GROUP_PATTERN.findall(word))
        if word.endswith("e") and syllables > 1:
            syllables -= 1
        total += max(1, syllables)
    return total


def calculate_readability_score(content: str) -> float:
    """
    Simplified Flesch Reading Ease score.

    Words and sentences are counted as raw split pieces (empty leading or
    trailing pieces included); thresholds downstream are tuned to that.
    """
    if not content:
        return 0.0

    words = len(WHITESPACE_PATTERN.split(content))
    sentences = len(SENTENCE_SPLIT_PATTERN.split(content))
    syllables = count_syllables(content)

    if sentences == 0 or words == 0:
        return 0.0

    avg_words_per_sentence = words / sentences
    avg_syllables_per_word = syllables / words
    return 206.835 - (1.015 * avg_words_per_sentence) - (84.6 * avg_syllables_per_word)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ---------------------------------------------------------------------------
# Structure
# ---------------------------------------------------------------------------


def count_words(content: str) -> int:
    return len(content.split()) if content else 0


def find_headings(content: str) -> List[Tuple[int, str]]:
    """Markdown headings as (level, text) pairs, H1-H6."""
    if not content:
        return []
    return [(len(hashes), text.strip()) for hashes, text in HEADING_PATTERN.findall(content)]


def find_heading_texts(content: str) -> List[str]:
    """Text of every '#' heading regardless of depth."""
    if not content:
        return []
    return [text.strip() for text in ANY_HEADING_PATTERN.findall(content)]


def split_sentences(content: str) -> List[str]:
    if not content:
        return []
    pieces = (piece.strip() for piece in SENTENCE_SPLIT_PATTERN.split(content))
    return [piece for piece in pieces if piece]


def split_paragraphs(content: str) -> List[str]:
    if not content:
        return []
    pieces = (piece.strip() for piece in PARAGRAPH_SPLIT_PATTERN.split(content))
    return [piece for piece in pieces if piece]


def words_lower(text: str) -> List[str]:
    return WORD_PATTERN.findall(text.lower()) if text else []


# ---------------------------------------------------------------------------
# Similarity
# ---------------------------------------------------------------------------


def text_similarity(text1: str, text2: str) -> float:
    """Jaccard similarity of the unique lowercase word sets of two texts."""
    words1 = set(words_lower(text1))
    words2 = set(words_lower(text2))
    union = words1 | words2
    if not union:
        return 0.0
    return len(words1 & words2) / len(union)


def find_repeats(items: Iterable[str], min_count: int = 2) -> List[Tuple[str, int]]:
    """Items seen at least ``min_count`` times, most frequent first (stable)."""
    counts = Counter(items)
    repeated = [(item, count) for item, count in counts.items() if count >= min_count]
    return sorted(repeated, key=lambda pair: -pair[1])


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Link:
    """Ссылка, найденная в тексте статьи."""

    type: str  # markdown | html | raw
    text: str
    url: str
    start: int
    end: int


def _strip_url(url: str) -> str:
    return url.rstrip(_TRAILING_URL_PUNCTUATION)


def extract_links(content: str) -> List[Link]:
    """
    Extract markdown links, HTML anchors and raw URLs.

    Raw URLs inside a markdown link or an anchor are not counted twice.
    Markdown images are not links.
    """
    if not content:
        return []

    markdown = [
        Link("markdown", match.group(1), match.group(2).strip(), match.start(), match.end())
        for match in MARKDOWN_LINK_PATTERN.finditer(content)
    ]
    html = [
        Link(
            "html",
            HTML_TAG_PATTERN.sub("", match.group(3)).strip(),
            match.group(2).strip(),
            match.start(),
            match.end(),
        )
        for match in HTML_LINK_PATTERN.finditer(content)
    ]
    images = [(match.start(), match.end()) for match in MARKDOWN_IMAGE_PATTERN.finditer(content)]
    covered = [(link.start, link.end) for link in markdown + html] + images

    raw = []
    for match in RAW_URL_PATTERN.finditer(content):
        if any(start <= match.start() < end for start, end in covered):
            continue
        url = _strip_url(match.group(0))
        raw.append(Link("raw", url, url, match.start(), match.start() + len(url)))

    return markdown + raw + html


def find_images(content: str) -> List[Tuple[str, str]]:
    """Markdown images as (alt, src) pairs."""
    if not content:
        return []
    return [(alt, src.strip()) for alt, src in MARKDOWN_IMAGE_PATTERN.findall(content)]


# ---------------------------------------------------------------------------
# Grammar
# ---------------------------------------------------------------------------


def check_basic_grammar(content: str) -> List[str]:
    """Double spaces, missing final punctuation and all-lowercase headers."""
    if not content:
        return []

    problems = []

    if "  " in content:
        problems.append("Multiple consecutive spaces found")

    sentences = SENTENCE_SPLIT_PATTERN.split(content)
    if len(sentences) > 1 and not re.search(r"[.!?]$", content.strip()):
        problems.append("Content may be missing punctuation at the end")

    for title in ANY_HEADING_PATTERN.findall(content):
        if title.lower() == title and len(title) > 3:
            problems.append(f'Header "{title}" may need proper capitalization')

    return problems

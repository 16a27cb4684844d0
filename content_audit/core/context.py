"""
Execution context: per-article metadata computed once and shared by all rules.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from .models import Article
from .text import count_words

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ContextMetadata:
    word_count: int
    content_length: int
    age_days: int


@dataclass(frozen=True)
class ExecutionContext:
    """Статья плюс заранее вычисленные метрики (только для чтения)."""

    article: Article
    metadata: ContextMetadata
    built_at: datetime

    @property
    def content(self) -> str:
        return self.article.content or ""


def calculate_age_days(last_modified: datetime, now: datetime) -> int:
    """Whole days between two instants, rounded up (absolute value)."""
    if last_modified.tzinfo is None:
        last_modified = last_modified.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    seconds = abs((now - last_modified).total_seconds())
    return int(math.ceil(seconds / 86400))


class ExecutionContextBuilder:
    """Builds an ExecutionContext per article against an injectable clock."""

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or utc_now

    def build(self, article: Article) -> ExecutionContext:
        content = article.content or ""
        now = self.clock()
        metadata = ContextMetadata(
            word_count=count_words(content),
            content_length=len(content),
            age_days=calculate_age_days(article.last_modified, now),
        )
        return ExecutionContext(article=article, metadata=metadata, built_at=now)

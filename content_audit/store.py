"""
Article store: the source of articles for audits.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Union

from .core.errors import ArticleNotFoundError, InvalidArticleError
from .core.models import Article

logger = logging.getLogger(__name__)


class ArticleStore(Protocol):
    """Асинхронный источник статей."""

    async def get_article(self, article_id: str) -> Article:
        ...

    async def list_articles(
        self,
        category: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Article]:
        ...


class InMemoryArticleStore:
    """Хранилище статей в памяти (для CLI, тестов и демо-сервера)."""

    def __init__(self, articles: Optional[Iterable[Article]] = None):
        self._articles: Dict[str, Article] = {}
        for article in articles or ():
            self.add(article)

    def __len__(self) -> int:
        return len(self._articles)

    def add(self, article: Article) -> None:
        if article.id in self._articles:
            logger.debug(f"Replacing stored article {article.id}")
        self._articles[article.id] = article

    async def get_article(self, article_id: str) -> Article:
        try:
            return self._articles[article_id]
        except KeyError:
            raise ArticleNotFoundError(article_id) from None

    async def list_articles(
        self,
        category: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Article]:
        articles = [
            article for article in self._articles.values()
            if category is None or article.category == category
        ]
        if limit is not None:
            articles = articles[:max(limit, 0)]
        return articles


def parse_articles(data: Any) -> List[Article]:
    """Articles from a JSON payload: a list, or an object with an ``articles`` list."""
    if isinstance(data, dict):
        data = data.get("articles")
    if not isinstance(data, list):
        raise InvalidArticleError("Expected a list of articles or an object with an 'articles' list")

    articles = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise InvalidArticleError(f"Article #{index} is not an object")
        articles.append(Article.from_dict(item))
    return articles


def load_articles(path: Union[str, Path]) -> List[Article]:
    """Загрузить статьи из JSON файла."""
    path = Path(path)
    with path.open(encoding="utf-8") as handle:
        data = json.load(handle)

    articles = parse_articles(data)
    logger.info(f"Loaded {len(articles)} articles from {path}")
    return articles

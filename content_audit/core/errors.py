"""
Exceptions raised by the content audit engine.
"""


class ContentAuditError(Exception):
    """Базовое исключение движка аудита."""


class RuleNotFoundError(ContentAuditError, KeyError):
    """Rule id is not registered."""

    def __init__(self, rule_id: str):
        self.rule_id = rule_id
        super().__init__(f"Rule '{rule_id}' not found")

    def __str__(self) -> str:
        return f"Rule '{self.rule_id}' not found"


class RuleRegistrationError(ContentAuditError, ValueError):
    """Rule cannot be registered (invalid object or duplicate id)."""


class ArticleNotFoundError(ContentAuditError, LookupError):
    """Article store has no article with the requested id."""

    def __init__(self, article_id: str):
        self.article_id = article_id
        super().__init__(f"Article '{article_id}' not found")


class InvalidArticleError(ContentAuditError, ValueError):
    """Article payload cannot be turned into an Article."""

"""
Base class for content audit rules.
"""

import logging
import threading
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .context import ExecutionContext
from .models import Category, Issue, RuleMetadata, Severity


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_string_list(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value)


class BaseRule(ABC):
    """
    Базовый класс для всех правил аудита.

    Предоставляет:
    - Метаданные правила
    - Неизменяемый снимок конфигурации (замена целиком при обновлении)
    - Создание Issue
    - Логирование
    """

    def __init__(
        self,
        rule_id: str,
        name: str,
        description: str,
        category: Category,
        severity: Severity,
        version: str = "1.0.0",
        author: str = "System",
        tags: Sequence[str] = (),
        configurable: bool = False,
        enabled: bool = True,
        default_config: Optional[Mapping[str, Any]] = None,
    ):
        self.id = rule_id
        self.name = name
        self.description = description
        self.category = category
        self.severity = severity
        self.version = version
        self.author = author
        self.tags = list(tags)
        self.configurable = configurable
        self.enabled = enabled
        self.logger = logging.getLogger(f"content_audit.rules.{rule_id}")

        self._config_lock = threading.Lock()
        self._config: Mapping[str, Any] = MappingProxyType(dict(default_config or {}))

    @property
    def config(self) -> Mapping[str, Any]:
        """Current configuration snapshot (read-only)."""
        return self._config

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Optional[Issue]:
        """
        Проверить статью (должен быть реализован в подклассах).

        Returns:
            Одна консолидированная проблема или None
        """

    def merged_config(self, partial: Mapping[str, Any]) -> Dict[str, Any]:
        """Config as it would look after ``update_config(partial)``."""
        return {**self._config, **partial}

    def update_config(self, partial: Mapping[str, Any]) -> bool:
        """
        Shallow-merge ``partial`` into a new snapshot and swap it in.

        Merge, validation and swap all happen under the config lock, so
        concurrent updates apply one after another and each is validated
        against the snapshot it replaces.

        Returns:
            False если правило не настраиваемое или новая конфигурация невалидна
        """
        if not self.configurable:
            return False

        with self._config_lock:
            candidate = self.merged_config(partial)
            if not self.validate_config(candidate):
                return False
            self._config = MappingProxyType(candidate)

        self.logger.info(f"Configuration updated for {self.id}: {sorted(partial)}")
        return True

    def validate_config(self, config: Mapping[str, Any]) -> bool:
        return True

    def get_metadata(self) -> RuleMetadata:
        return RuleMetadata(
            id=self.id,
            name=self.name,
            description=self.description,
            category=self.category,
            severity=self.severity,
            enabled=self.enabled,
            configurable=self.configurable,
            version=self.version,
            author=self.author,
            tags=list(self.tags),
            config=dict(self._config),
        )

    def create_issue(
        self,
        title: str,
        description: str,
        suggestions: List[str],
        severity: Severity,
        **metadata: Any
    ) -> Issue:
        """
        Удобный метод для создания Issue.

        Args:
            title: Заголовок проблемы
            description: Описание
            suggestions: Рекомендации по исправлению (по порядку)
            severity: Серьёзность этой находки
            **metadata: Дополнительные метаданные правила

        Returns:
            Issue instance
        """
        return Issue(
            issue=title,
            description=description,
            suggestions=list(suggestions),
            metadata={**metadata, "severity": severity.value, "rule_version": self.version},
            rule_id=self.id,
            rule_name=self.name,
            category=self.category,
        )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} id={self.id!r} enabled={self.enabled}>"

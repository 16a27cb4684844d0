"""
Rule registry: owns rule instances, their enabled state and configuration.
"""

import logging
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .core.base_rule import BaseRule
from .core.errors import RuleNotFoundError, RuleRegistrationError
from .core.models import Category, RuleMetadata
from .rules import create_builtin_rules

logger = logging.getLogger(__name__)


class RuleRegistry:
    """Реестр правил (создаётся явно и передаётся в движок)."""

    def __init__(self, rules: Optional[Iterable[BaseRule]] = None):
        self._rules: "OrderedDict[str, BaseRule]" = OrderedDict()
        for rule in rules or ():
            self.register(rule)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __iter__(self):
        return iter(list(self._rules.values()))

    def register(self, rule: BaseRule, replace: bool = False) -> None:
        """
        Зарегистрировать правило.

        Raises:
            RuleRegistrationError: объект не является правилом или id уже занят
        """
        if not isinstance(rule, BaseRule) or not getattr(rule, "id", None):
            raise RuleRegistrationError("Invalid rule: must be a BaseRule with an id")
        if rule.id in self._rules and not replace:
            raise RuleRegistrationError(f"Rule '{rule.id}' is already registered")

        self._rules[rule.id] = rule
        logger.debug(f"Registered rule {rule.id} ({rule.__class__.__name__})")

    def unregister(self, rule_id: str) -> BaseRule:
        rule = self.get_rule(rule_id)
        del self._rules[rule_id]
        return rule

    def get_rule(self, rule_id: str) -> BaseRule:
        try:
            return self._rules[rule_id]
        except KeyError:
            raise RuleNotFoundError(rule_id) from None

    def list_rules(
        self,
        category: Optional[Union[Category, str]] = None,
        enabled: Optional[bool] = None,
        tag: Optional[str] = None,
    ) -> List[BaseRule]:
        """Rules in registration order, optionally filtered by category, enabled state and tag."""
        if category is not None:
            category = Category(category)

        rules = []
        for rule in self._rules.values():
            if category is not None and rule.category != category:
                continue
            if enabled is not None and rule.enabled != enabled:
                continue
            if tag is not None and tag not in rule.tags:
                continue
            rules.append(rule)
        return rules

    def list_metadata(self, **filters: Any) -> List[RuleMetadata]:
        return [rule.get_metadata() for rule in self.list_rules(**filters)]

    def rules_by_category(self) -> Dict[str, List[RuleMetadata]]:
        categories: Dict[str, List[RuleMetadata]] = {}
        for rule in self._rules.values():
            categories.setdefault(rule.category.value, []).append(rule.get_metadata())
        return categories

    def enable_rule(self, rule_id: str) -> None:
        self.get_rule(rule_id).enabled = True
        logger.info(f"Rule {rule_id} enabled")

    def disable_rule(self, rule_id: str) -> None:
        self.get_rule(rule_id).enabled = False
        logger.info(f"Rule {rule_id} disabled")

    def update_rule_config(self, rule_id: str, partial: Mapping[str, Any]) -> bool:
        """
        Обновить конфигурацию правила.

        Returns:
            False если правило не настраиваемое или новая конфигурация невалидна

        Raises:
            RuleNotFoundError: правило не зарегистрировано
        """
        rule = self.get_rule(rule_id)

        if not rule.configurable:
            logger.warning(f"Rejected config update for {rule_id}: rule is not configurable")
            return False

        if not rule.update_config(partial):
            logger.warning(f"Rejected config update for {rule_id}: validation failed for {dict(partial)}")
            return False
        return True

    def apply_overrides(self, overrides: Mapping[str, Mapping[str, Any]]) -> Dict[str, bool]:
        """
        Apply per-rule overrides of the form ``{rule_id: {"enabled": bool, "config": {...}}}``.

        Unknown rule ids are skipped with a warning. Returns the config update
        outcome per rule id.
        """
        outcomes = {}
        for rule_id, override in overrides.items():
            if rule_id not in self._rules:
                logger.warning(f"Ignoring overrides for unknown rule {rule_id}")
                continue

            if "enabled" in override:
                if override["enabled"]:
                    self.enable_rule(rule_id)
                else:
                    self.disable_rule(rule_id)

            if override.get("config"):
                outcomes[rule_id] = self.update_rule_config(rule_id, override["config"])
        return outcomes


def create_default_registry() -> RuleRegistry:
    """New registry holding fresh instances of the built-in rules."""
    return RuleRegistry(create_builtin_rules())

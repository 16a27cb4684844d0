"""
Configuration for the content audit engine.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    if value.strip().lower() in ("none", "off", "0"):
        return None
    return float(value)


@dataclass
class EngineConfig:
    """Конфигурация движка аудита."""

    # === Execution Settings ===
    max_concurrency: int = field(
        default_factory=lambda: int(os.getenv("CONTENT_AUDIT_MAX_CONCURRENCY", "4"))
    )
    audit_timeout_seconds: Optional[float] = field(
        default_factory=lambda: _env_float("CONTENT_AUDIT_TIMEOUT_SECONDS", 30.0)
    )

    # === Stats ===
    stats_sample_size: int = field(
        default_factory=lambda: int(os.getenv("CONTENT_AUDIT_STATS_SAMPLE_SIZE", "10"))
    )
    most_common_issues_limit: int = 5

    def __post_init__(self):
        """Validate configuration."""
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        if self.audit_timeout_seconds is not None and self.audit_timeout_seconds <= 0:
            raise ValueError("audit_timeout_seconds must be positive or None")
        if self.stats_sample_size < 0:
            raise ValueError("stats_sample_size must not be negative")


def load_rule_overrides(path: Union[str, Path]) -> Dict[str, Dict[str, Any]]:
    """
    Загрузить переопределения правил из JSON файла.

    Формат::

        {
          "stale-content": {"config": {"max_age_months": 6}},
          "seo-optimization": {"enabled": false}
        }
    """
    path = Path(path)
    with path.open(encoding="utf-8") as handle:
        data = json.load(handle)

    if not isinstance(data, dict):
        raise ValueError(f"Rule overrides in {path} must be a JSON object")

    overrides = {}
    for rule_id, override in data.items():
        if not isinstance(override, dict):
            logger.warning(f"Skipping malformed override for {rule_id} in {path}")
            continue
        overrides[rule_id] = override
    return overrides

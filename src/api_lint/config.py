"""Rules configuration.

Options are validated and compiled once, when the configuration is
loaded, so a bad regex fails before any document is checked.

Example rules file::

    SecureAllEndpointsWithScopesRule:
      scope_regex: "^(uid)|(([a-z-]+\\.){1,2}(read|write))$"
      path_whitelist:
        - "^/health$"
        - "/internal/"
"""

import logging
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from api_lint.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_SCOPE_REGEX = r"^(uid)|(([a-z-]+\.){1,2}(read|write))$"


def _compile(value: Any, option: str) -> re.Pattern:
    if isinstance(value, re.Pattern):
        return value
    if not isinstance(value, str):
        raise ValueError(f"{option}: expected a regular expression string, got {value!r}")
    try:
        return re.compile(value)
    except re.error as e:
        raise ValueError(f"{option}: invalid regular expression {value!r}: {e}") from e


class ScopeRuleConfig(BaseModel):
    """Options of the secure-all-endpoints-with-scopes rule."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    scope_regex: re.Pattern = re.compile(DEFAULT_SCOPE_REGEX)
    path_whitelist: tuple[re.Pattern, ...] = ()

    @field_validator("scope_regex", mode="before")
    @classmethod
    def _compile_scope_regex(cls, value: Any) -> re.Pattern:
        return _compile(value, "scope_regex")

    @field_validator("path_whitelist", mode="before")
    @classmethod
    def _compile_path_whitelist(cls, value: Any) -> tuple[re.Pattern, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        return tuple(_compile(v, "path_whitelist") for v in value)

    def is_whitelisted(self, path: str) -> bool:
        return any(pattern.search(path) for pattern in self.path_whitelist)


class RulesConfig(BaseModel):
    """Per-rule options, keyed by rule class name in the rules file."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    secure_all_endpoints_with_scopes: ScopeRuleConfig = Field(
        default_factory=ScopeRuleConfig, alias="SecureAllEndpointsWithScopesRule"
    )


def parse_rules_config(options: dict | None) -> RulesConfig:
    """Validate a rules mapping; raises ConfigError on bad options."""
    if options is None:
        options = {}
    if not isinstance(options, dict):
        raise ConfigError("Rules configuration must be a mapping of rule name to options")

    known = {field.alias or name for name, field in RulesConfig.model_fields.items()}
    for section in options:
        if section not in known:
            logger.warning("Ignoring options for unknown or unconfigurable rule %r", section)
    options = {k: v for k, v in options.items() if k in known}

    try:
        return RulesConfig.model_validate(options)
    except ValidationError as e:
        raise ConfigError(f"Invalid rules configuration: {e}") from e


def load_rules_config(file_path: Path) -> RulesConfig:
    """Load a YAML rules file."""
    try:
        text = file_path.read_text(encoding="utf-8")
        options = yaml.safe_load(text)
    except OSError as e:
        raise ConfigError(f"Cannot read rules configuration {file_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot parse rules configuration {file_path}: {e}") from e
    logger.debug("Loaded rules configuration from %s", file_path)
    return parse_rules_config(options)

"""Loads the ordered payee/category mapping rules."""

import json
import logging
import os
import re
from typing import Any, Dict, List

import yaml

from ..models.core import MappingRule
from .error_handler import ConfigError


logger = logging.getLogger(__name__)


class RuleLoader:
    """Loads mapping rules from a JSON or YAML file.

    Rules are kept in file order, which is their priority order. Two shapes
    are accepted. A mapping keyed by pattern:

        {"AMZN|AMAZON": {"payee": "Amazon", "category": "Shopping"},
         ".*PAYROLL.*": {"payee": "Employer", "category": "Salary"}}

    or a list of entries:

        - pattern: "AMZN|AMAZON"
          payee: Amazon
          category: Shopping

    Any invalid entry or pattern raises ConfigError; the loader never skips
    a rule.
    """

    def __init__(self, mappings_path: str):
        self.mappings_path = os.path.expanduser(mappings_path)

    def load(self) -> List[MappingRule]:
        """Read the rule file and return rules in priority order

        Raises:
            ConfigError: If the file is missing, unreadable or holds an invalid rule
        """
        if not os.path.exists(self.mappings_path):
            raise ConfigError(f"Mappings file not found: {self.mappings_path}", "CONFIG_FILE_NOT_FOUND")

        try:
            with open(self.mappings_path, 'r', encoding='utf-8') as f:
                if self.mappings_path.endswith(('.yml', '.yaml')):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigError(f"Invalid syntax in {self.mappings_path}: {e}", "INVALID_CONFIG_FORMAT") from e
        except OSError as e:
            raise ConfigError(
                f"Error reading mappings file {self.mappings_path}: {e}", "INVALID_CONFIG_FORMAT"
            ) from e

        rules = parse_rules(data)
        logger.info(f"Loaded {len(rules)} mapping rule(s) from {self.mappings_path}")
        return rules


def parse_rules(data: Any) -> List[MappingRule]:
    """Turn already-parsed rule data into an ordered list of rules

    Raises:
        ConfigError: If an entry or pattern is invalid
    """
    if data is None:
        logger.warning("Mapping rules are empty")
        return []

    if isinstance(data, dict):
        entries = [(pattern, properties) for pattern, properties in data.items()]
    elif isinstance(data, list):
        entries = []
        for index, item in enumerate(data):
            if not isinstance(item, dict) or 'pattern' not in item:
                raise ConfigError(f"Rule #{index + 1} must be a mapping with a 'pattern' key")
            entries.append((item['pattern'], item))
    else:
        raise ConfigError(
            f"Mapping rules must be a dictionary or a list, got {type(data).__name__}"
        )

    return [_build_rule(pattern, properties) for pattern, properties in entries]


def _build_rule(pattern: Any, properties: Dict[str, Any]) -> MappingRule:
    if not isinstance(pattern, str) or not pattern:
        raise ConfigError(f"Rule pattern must be a non-empty string, got {pattern!r}")

    if not isinstance(properties, dict):
        raise ConfigError(f"Rule '{pattern}': properties must be a dictionary")

    for key in ('payee', 'category'):
        value = properties.get(key)
        if not isinstance(value, str):
            raise ConfigError(f"Rule '{pattern}': '{key}' must be a string")

    try:
        rule = MappingRule(
            pattern=pattern,
            payee=properties['payee'],
            category=properties['category'],
        )
    except re.error as e:
        raise ConfigError(f"Rule '{pattern}': invalid regular expression: {e}") from e

    logger.debug(f"Loaded rule: {pattern} -> {rule.payee} ({rule.category})")
    return rule

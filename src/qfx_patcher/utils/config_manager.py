"""Configuration management for the QFX patcher."""

import json
import logging
import os
from typing import Dict, Any, Optional

import yaml

from ..models.core import PatcherConfig


logger = logging.getLogger(__name__)

LEGACY_HEADER_MODES = ('preserve', 'upgrade')


class ConfigManager:
    """Manages loading and validation of patcher configuration"""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager

        Args:
            config_path: Path to configuration file. If None, searches for default locations.
        """
        self.config_path = config_path
        self._config_cache: Optional[PatcherConfig] = None

    def load_config(self, force_reload: bool = False) -> PatcherConfig:
        """Load patcher configuration from file or return default

        Args:
            force_reload: Force reload from file even if cached

        Returns:
            PatcherConfig instance with loaded or default configuration
        """
        if self._config_cache is not None and not force_reload:
            return self._config_cache

        config_data = self._load_config_file()

        try:
            self._config_cache = PatcherConfig(
                input_directory=config_data.get('input_directory', '~/Downloads'),
                mappings_file=config_data.get(
                    'mappings_file', '~/Documents/Financial/transaction-mappings.json'
                ),
                output_directory=config_data.get('output_directory'),
                extensions=config_data.get('extensions'),
                processed_marker=config_data.get('processed_marker', 'patched'),
                output_suffix=config_data.get('output_suffix', '-patched'),
                institution_aliases=config_data.get('institution_aliases'),
                legacy_header=config_data.get('legacy_header', 'preserve'),
                verify_output=config_data.get('verify_output', False),
                log_directory=config_data.get('log_directory'),
                pretty_print=config_data.get('pretty_print', True)
            )

            logger.info(f"Configuration loaded successfully from {self.config_path or 'defaults'}")
            return self._config_cache

        except Exception as e:
            logger.warning(f"Error loading configuration: {e}. Using defaults.")
            self._config_cache = PatcherConfig()
            return self._config_cache

    def _load_config_file(self) -> Dict[str, Any]:
        """Load configuration from file

        Returns:
            Dictionary with configuration data or empty dict if no file found
        """
        config_file = self._find_config_file()

        if not config_file or not os.path.exists(config_file):
            logger.info("No configuration file found, using defaults")
            return {}

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                if config_file.endswith('.json'):
                    data = json.load(f)
                elif config_file.endswith(('.yml', '.yaml')):
                    data = yaml.safe_load(f)
                else:
                    logger.warning(f"Unsupported config file format: {config_file}")
                    return {}

            self._validate_config_data(data)
            logger.info(f"Configuration loaded from {config_file}")
            return data

        except Exception as e:
            logger.error(f"Error reading configuration file {config_file}: {e}")
            return {}

    def _find_config_file(self) -> Optional[str]:
        """Find configuration file in standard locations

        Returns:
            Path to configuration file or None if not found
        """
        if self.config_path:
            return self.config_path

        search_paths = [
            'qfx_patcher.json',
            'qfx_patcher.yml',
            'qfx_patcher.yaml',
            'config/qfx_patcher.json',
            'config/qfx_patcher.yml',
            'config/qfx_patcher.yaml',
            os.path.expanduser('~/.qfx_patcher/config.json'),
            os.path.expanduser('~/.qfx_patcher/config.yml'),
        ]

        for path in search_paths:
            if os.path.exists(path):
                return path

        return None

    def _validate_config_data(self, data: Dict[str, Any]) -> None:
        """Validate configuration data structure

        Args:
            data: Configuration data to validate

        Raises:
            ValueError: If configuration data is invalid
        """
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a dictionary")

        for str_key in ['input_directory', 'mappings_file', 'processed_marker']:
            if str_key in data:
                if not isinstance(data[str_key], str):
                    raise ValueError(f"{str_key} must be a string")
                if not data[str_key].strip():
                    raise ValueError(f"{str_key} cannot be empty")

        for optional_key in ['output_directory', 'log_directory', 'output_suffix']:
            if data.get(optional_key) is not None and not isinstance(data[optional_key], str):
                raise ValueError(f"{optional_key} must be a string")

        for bool_key in ['verify_output', 'pretty_print']:
            if bool_key in data and not isinstance(data[bool_key], bool):
                raise ValueError(f"{bool_key} must be a boolean")

        if 'extensions' in data:
            if not isinstance(data['extensions'], list):
                raise ValueError("extensions must be a list")
            for ext in data['extensions']:
                if not isinstance(ext, str) or not ext.startswith('.'):
                    raise ValueError("All extensions must be strings starting with '.'")

        if 'institution_aliases' in data:
            if not isinstance(data['institution_aliases'], dict):
                raise ValueError("institution_aliases must be a dictionary")
            for code, name in data['institution_aliases'].items():
                if not isinstance(name, str):
                    raise ValueError(f"Alias for {code} must be a string")

        if 'legacy_header' in data and data['legacy_header'] not in LEGACY_HEADER_MODES:
            raise ValueError(
                f"legacy_header must be one of {', '.join(LEGACY_HEADER_MODES)}"
            )

    def save_config_template(self, output_path: str) -> None:
        """Generate and save a configuration file template

        Args:
            output_path: Path where to save the template
        """
        template = {
            "input_directory": "~/Downloads",
            "mappings_file": "~/Documents/Financial/transaction-mappings.json",
            "output_directory": None,
            "extensions": [".qfx"],
            "processed_marker": "patched",
            "output_suffix": "-patched",
            "institution_aliases": {
                "B1": "CHASE"
            },
            "legacy_header": "preserve",
            "verify_output": False,
            "log_directory": None,
            "pretty_print": True
        }

        try:
            output_dir = os.path.dirname(output_path)
            if output_dir:
                os.makedirs(output_dir, exist_ok=True)

            with open(output_path, 'w', encoding='utf-8') as f:
                if output_path.endswith(('.yml', '.yaml')):
                    yaml.dump(template, f, default_flow_style=False, indent=2, sort_keys=False)
                else:
                    json.dump(template, f, indent=2)

            logger.info(f"Configuration template saved to {output_path}")

        except Exception as e:
            logger.error(f"Error saving configuration template: {e}")
            raise

    def update_config(self, updates: Dict[str, Any]) -> None:
        """Update configuration with new values

        Args:
            updates: Dictionary of configuration updates
        """
        if self._config_cache is None:
            self.load_config()

        for key, value in updates.items():
            if hasattr(self._config_cache, key):
                setattr(self._config_cache, key, value)
                logger.debug(f"Updated configuration: {key} = {value}")
            else:
                logger.warning(f"Unknown configuration key: {key}")

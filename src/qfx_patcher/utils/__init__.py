"""Utility functions and helpers"""

from .error_handler import (
    ConfigError,
    ErrorCategory,
    ErrorHandler,
    ErrorSeverity,
    FormatError,
    PatcherError,
    SchemaError,
    handle_file_access_error,
    handle_config_error,
    handle_format_error,
)
from .config_manager import ConfigManager
from .rule_loader import RuleLoader, parse_rules
from .file_scanner import FileScanner
from .output_writer import OutputWriter
from .verifier import OutputVerifier

__all__ = [
    'ConfigError',
    'ErrorCategory',
    'ErrorHandler',
    'ErrorSeverity',
    'FormatError',
    'PatcherError',
    'SchemaError',
    'handle_file_access_error',
    'handle_config_error',
    'handle_format_error',
    'ConfigManager',
    'RuleLoader',
    'parse_rules',
    'FileScanner',
    'OutputWriter',
    'OutputVerifier',
]

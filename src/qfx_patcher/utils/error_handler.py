"""Error taxonomy and structured logging for the QFX patcher."""

import json
import logging
import sys
import traceback
from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Any


class PatcherError(Exception):
    """Base class for patcher errors.

    ``error_type`` names the ErrorHandler code logged for the error; a raise
    site may pass a more specific code than the class default.
    """
    error_type = "UNEXPECTED_ERROR"

    def __init__(self, message: str, error_type: Optional[str] = None):
        super().__init__(message)
        if error_type is not None:
            self.error_type = error_type


class FormatError(PatcherError):
    """Input does not have the expected markup or date shape.

    Fatal for the file being processed; the batch skips it and continues.
    """
    error_type = "FORMAT_ERROR"


class SchemaError(PatcherError):
    """An expected signon, statement or account block is missing.

    Handled like FormatError: fatal for the file only.
    """
    error_type = "SCHEMA_ERROR"


class ConfigError(PatcherError):
    """A mapping rule or configuration entry is invalid.

    Fatal for the whole run.
    """
    error_type = "INVALID_RULE"


class ErrorSeverity(Enum):
    """Error severity levels"""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification"""
    FILE_ACCESS = "file_access"
    FILE_FORMAT = "file_format"
    DATA_PARSING = "data_parsing"
    SCHEMA = "schema"
    CONFIGURATION = "configuration"
    SYSTEM = "system"


@dataclass
class ErrorDetail:
    """Detailed error information"""
    timestamp: str
    severity: str
    category: str
    error_code: str
    message: str
    file_path: Optional[str] = None
    stack_trace: Optional[str] = None
    context: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return asdict(self)


class JSONFormatter(logging.Formatter):
    """One JSON object per log record"""

    def format(self, record):
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        # Add extra fields if present
        for key in ('error_code', 'file_path', 'category', 'context'):
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        return json.dumps(log_entry, default=str)


class ErrorHandler:
    """Collects per-file errors and writes them to structured logs"""

    def __init__(self, log_directory: Optional[str] = None, enable_console: bool = True):
        self.log_directory = Path(log_directory) if log_directory else None
        if self.log_directory is not None:
            self.log_directory.mkdir(parents=True, exist_ok=True)

        self.errors: List[ErrorDetail] = []
        self.warnings: List[ErrorDetail] = []

        self._setup_logging(enable_console)

        self.error_codes = {
            # File access errors
            "FILE_NOT_FOUND": "F001",
            "FILE_PERMISSION_DENIED": "F002",
            "DIRECTORY_NOT_FOUND": "F004",

            # Format errors
            "FORMAT_ERROR": "F102",
            "MISSING_ROOT_TAG": "F103",
            "DATE_PARSE_ERROR": "D001",

            # Schema errors
            "SCHEMA_ERROR": "V010",

            # Configuration errors
            "CONFIG_FILE_NOT_FOUND": "C001",
            "INVALID_CONFIG_FORMAT": "C002",
            "INVALID_RULE": "C005",

            # Output
            "OUTPUT_COLLISION": "O001",
            "VERIFY_FAILED": "O002",

            "UNEXPECTED_ERROR": "S999"
        }

    def _setup_logging(self, enable_console: bool):
        """Set up console and JSON-lines logging"""
        self.logger = logging.getLogger('qfx_patcher.errors')
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False

        # Clear existing handlers
        for handler in list(self.logger.handlers):
            handler.close()
        self.logger.handlers.clear()

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(logging.INFO)
            console_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(levelname)s - %(message)s'
            ))
            self.logger.addHandler(console_handler)

        if self.log_directory is None:
            return

        log_file = self.log_directory / f"patcher_{datetime.now().strftime('%Y%m%d')}.jsonl"
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JSONFormatter())
        self.logger.addHandler(file_handler)

        error_file = self.log_directory / f"errors_{datetime.now().strftime('%Y%m%d')}.jsonl"
        error_handler = logging.FileHandler(error_file)
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(JSONFormatter())
        self.logger.addHandler(error_handler)

    def log_error(self,
                  message: str,
                  error_type: str,
                  category: ErrorCategory = ErrorCategory.SYSTEM,
                  file_path: Optional[str] = None,
                  exception: Optional[BaseException] = None,
                  context: Optional[Dict[str, Any]] = None) -> ErrorDetail:
        """Log an error with detailed information"""

        error_code = self.error_codes.get(error_type, "S999")
        stack_trace = None

        if exception is not None:
            stack_trace = ''.join(traceback.format_exception(
                type(exception), exception, exception.__traceback__
            ))

        error_detail = ErrorDetail(
            timestamp=datetime.now().isoformat(),
            severity=ErrorSeverity.ERROR.value,
            category=category.value,
            error_code=error_code,
            message=message,
            file_path=file_path,
            stack_trace=stack_trace,
            context=context or {}
        )

        self.errors.append(error_detail)

        self.logger.error(
            message,
            extra={
                'error_code': error_code,
                'category': category.value,
                'file_path': file_path,
                'context': context or {}
            }
        )

        return error_detail

    def log_warning(self,
                    message: str,
                    warning_type: str,
                    category: ErrorCategory = ErrorCategory.SYSTEM,
                    file_path: Optional[str] = None,
                    context: Optional[Dict[str, Any]] = None) -> ErrorDetail:
        """Log a warning with detailed information"""

        warning_code = self.error_codes.get(warning_type, "W999")

        warning_detail = ErrorDetail(
            timestamp=datetime.now().isoformat(),
            severity=ErrorSeverity.WARNING.value,
            category=category.value,
            error_code=warning_code,
            message=message,
            file_path=file_path,
            context=context or {}
        )

        self.warnings.append(warning_detail)

        self.logger.warning(
            message,
            extra={
                'error_code': warning_code,
                'category': category.value,
                'file_path': file_path,
                'context': context or {}
            }
        )

        return warning_detail

    def log_info(self, message: str, context: Optional[Dict[str, Any]] = None):
        """Log informational message"""
        self.logger.info(message, extra={'context': context or {}})

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of all errors and warnings"""
        errors_by_category: Dict[str, int] = {}
        warnings_by_category: Dict[str, int] = {}

        for error in self.errors:
            errors_by_category[error.category] = errors_by_category.get(error.category, 0) + 1

        for warning in self.warnings:
            warnings_by_category[warning.category] = warnings_by_category.get(warning.category, 0) + 1

        return {
            'total_errors': len(self.errors),
            'total_warnings': len(self.warnings),
            'errors_by_category': errors_by_category,
            'warnings_by_category': warnings_by_category,
            'files_with_errors': sorted(set(e.file_path for e in self.errors if e.file_path)),
        }

    def generate_error_report(self, output_file: str) -> str:
        """Write all errors and warnings to a JSON report"""
        report = {
            'report_timestamp': datetime.now().isoformat(),
            'summary': self.get_error_summary(),
            'all_errors': [error.to_dict() for error in self.errors],
            'all_warnings': [warning.to_dict() for warning in self.warnings]
        }

        with open(output_file, 'w', encoding='utf-8') as f:
            json.dump(report, f, indent=2, default=str)

        self.log_info(f"Error report generated: {output_file}")
        return output_file

    def get_errors_for_file(self, file_path: str) -> List[ErrorDetail]:
        """Get all errors for a specific file"""
        return [error for error in self.errors if error.file_path == file_path]


# Convenience functions for common error scenarios
def handle_file_access_error(error_handler: ErrorHandler,
                             file_path: str,
                             exception: Exception) -> ErrorDetail:
    """Handle common file access errors"""
    if isinstance(exception, FileNotFoundError):
        return error_handler.log_error(
            f"File not found: {file_path}",
            "FILE_NOT_FOUND",
            ErrorCategory.FILE_ACCESS,
            file_path=file_path,
            exception=exception
        )
    elif isinstance(exception, PermissionError):
        return error_handler.log_error(
            f"Permission denied accessing file: {file_path}",
            "FILE_PERMISSION_DENIED",
            ErrorCategory.FILE_ACCESS,
            file_path=file_path,
            exception=exception
        )
    else:
        return error_handler.log_error(
            f"File access error: {str(exception)}",
            "UNEXPECTED_ERROR",
            ErrorCategory.FILE_ACCESS,
            file_path=file_path,
            exception=exception
        )


def handle_format_error(error_handler: ErrorHandler,
                        file_path: str,
                        exception: PatcherError) -> ErrorDetail:
    """Handle FormatError and SchemaError raised while patching a file"""
    if isinstance(exception, SchemaError):
        category = ErrorCategory.SCHEMA
    elif exception.error_type == "DATE_PARSE_ERROR":
        category = ErrorCategory.DATA_PARSING
    else:
        category = ErrorCategory.FILE_FORMAT

    return error_handler.log_error(
        f"{type(exception).__name__} in {file_path}: {exception}",
        exception.error_type,
        category,
        file_path=file_path,
        exception=exception
    )


def handle_config_error(error_handler: ErrorHandler,
                        exception: ConfigError,
                        file_path: Optional[str] = None) -> ErrorDetail:
    """Handle a ConfigError that aborts the run"""
    return error_handler.log_error(
        f"Configuration error: {exception}",
        exception.error_type,
        ErrorCategory.CONFIGURATION,
        file_path=file_path,
        exception=exception
    )

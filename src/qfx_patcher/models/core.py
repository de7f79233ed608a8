"""Core data models for the QFX patcher."""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Dict, Any, Optional


# Root tag -> node. Containers are dicts of tag -> list of values, leaves are text.
MarkupTree = Dict[str, Any]


class HeaderDialect(Enum):
    """Header dialect of an export file"""
    LEGACY_V1 = "legacy_v1"
    MODERN_V2 = "modern_v2"


class AccountType(Enum):
    """Statement kind found in the export"""
    CHECKING = "Checking"
    CREDIT_CARD = "Credit Card"


@dataclass
class SplitDocument:
    """Raw export text separated into header and markup body"""
    dialect: HeaderDialect
    header_text: str
    body_text: str


@dataclass
class ExportDocument:
    """A decoded export owned by a single pipeline run.

    Attributes:
        dialect: Header dialect detected on input
        raw_header_text: Header to reattach on output. The byte-exact original
            header for preserved legacy output, the canonical modern preamble
            otherwise.
        tree: Decoded markup, mutated in place by the rewriter
    """
    dialect: HeaderDialect
    raw_header_text: str
    tree: MarkupTree


@dataclass(frozen=True)
class AccountContext:
    """Account and statement period information for one document"""
    account_type: AccountType
    institution: str
    account_id: str
    period_start: datetime
    period_end: datetime


@dataclass
class TransactionRecord:
    """View of one STMTTRN node taken before it is rewritten"""
    type: str
    raw_payee: str
    raw_memo: Optional[List[str]] = None


@dataclass(frozen=True)
class MappingRule:
    """A payee/category rule keyed by a regular expression.

    Attributes:
        pattern: Regular expression source, searched anywhere in the text
        payee: Payee written when the rule matches
        category: Category assigned when the rule matches
    """
    pattern: str
    payee: str
    category: str
    regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # re.error propagates; RuleLoader turns it into a ConfigError
        object.__setattr__(self, 'regex', re.compile(self.pattern))

    def matches(self, text: str) -> bool:
        return self.regex.search(text) is not None


@dataclass
class RewriteResult:
    """Values computed for one transaction"""
    payee: str
    memo: str
    category: str
    rule: Optional[MappingRule] = None


@dataclass
class PatchResult:
    """Result of patching a single export"""
    source_name: str
    output_name: str
    text: str
    context: AccountContext
    dialect: HeaderDialect
    transaction_count: int
    matched_count: int
    categories: Dict[str, int] = field(default_factory=dict)
    output_path: Optional[str] = None


@dataclass
class FileFailure:
    """A file that could not be converted"""
    file_path: str
    error_kind: str
    message: str


@dataclass
class BatchSummary:
    """Summary of a batch run"""
    start_time: str
    end_time: str = ""
    total_duration: float = 0.0
    skipped_files: List[str] = field(default_factory=list)
    converted: List[PatchResult] = field(default_factory=list)
    failures: List[FileFailure] = field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped_files)

    @property
    def converted_count(self) -> int:
        return len(self.converted)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    @property
    def failures_by_kind(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for failure in self.failures:
            counts[failure.error_kind] = counts.get(failure.error_kind, 0) + 1
        return counts

    @property
    def total_transactions(self) -> int:
        return sum(result.transaction_count for result in self.converted)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            'start_time': self.start_time,
            'end_time': self.end_time,
            'total_duration': self.total_duration,
            'skipped_count': self.skipped_count,
            'converted_count': self.converted_count,
            'failed_count': self.failed_count,
            'failures_by_kind': self.failures_by_kind,
            'total_transactions': self.total_transactions,
            'skipped_files': list(self.skipped_files),
            'converted': [
                {
                    'source': result.source_name,
                    'output': result.output_path or result.output_name,
                    'institution': result.context.institution,
                    'account_type': result.context.account_type.value,
                    'transactions': result.transaction_count,
                    'matched': result.matched_count,
                    'categories': dict(result.categories),
                }
                for result in self.converted
            ],
            'failures': [
                {
                    'file_path': failure.file_path,
                    'error_kind': failure.error_kind,
                    'message': failure.message,
                }
                for failure in self.failures
            ],
        }


@dataclass
class PatcherConfig:
    """Configuration for patcher behavior"""
    input_directory: str = "~/Downloads"
    mappings_file: str = "~/Documents/Financial/transaction-mappings.json"
    output_directory: Optional[str] = None
    extensions: Optional[List[str]] = None
    processed_marker: str = "patched"
    output_suffix: str = "-patched"
    institution_aliases: Optional[Dict[str, str]] = None
    legacy_header: str = "preserve"  # "preserve" or "upgrade"
    verify_output: bool = False
    log_directory: Optional[str] = None
    pretty_print: bool = True

    def __post_init__(self):
        if self.extensions is None:
            self.extensions = [".qfx"]
        if self.institution_aliases is None:
            self.institution_aliases = {}

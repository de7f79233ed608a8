"""Data models and structures"""

from .core import (
    AccountContext,
    AccountType,
    BatchSummary,
    ExportDocument,
    FileFailure,
    HeaderDialect,
    MappingRule,
    MarkupTree,
    PatchResult,
    PatcherConfig,
    RewriteResult,
    SplitDocument,
    TransactionRecord,
)

__all__ = [
    'AccountContext',
    'AccountType',
    'BatchSummary',
    'ExportDocument',
    'FileFailure',
    'HeaderDialect',
    'MappingRule',
    'MarkupTree',
    'PatchResult',
    'PatcherConfig',
    'RewriteResult',
    'SplitDocument',
    'TransactionRecord',
]

"""Per-file patch pipeline and batch processing."""

import logging
import os
import time
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .models.core import (
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
)
from .parsers.codec import CANONICAL_MODERN_HEADER, decode, encode, reattach_header
from .parsers.dates import parse_ofx_date
from .parsers.markup import normalize_markup, split_document
from .rewriter import TransactionRewriter
from .utils.error_handler import (
    ConfigError,
    ErrorCategory,
    ErrorHandler,
    FormatError,
    SchemaError,
    handle_file_access_error,
    handle_format_error,
)
from .utils.output_writer import OutputWriter
from .utils.verifier import OutputVerifier


logger = logging.getLogger(__name__)

INSTITUTION_ALIASES = {
    'B1': 'CHASE',
}

INPUT_ENCODINGS = ('utf-8', 'cp1252')


def _first(node: Any, *path: str) -> Any:
    """Follow the first entry of each tag in ``path``; None when a step is missing"""
    for tag in path:
        if not isinstance(node, dict):
            return None
        values = node.get(tag)
        if not values:
            return None
        node = values[0]
    return node


def _require(node: Any, *path: str) -> Any:
    value = _first(node, *path)
    if value is None:
        raise SchemaError(f"Missing {'/'.join(path)} block")
    return value


class QFXPatcher:
    """Normalizes exports and rewrites their transactions.

    One instance holds the rule list for a run; every document it patches
    gets its own tree, so nothing is shared between files except the
    read-only rules.
    """

    def __init__(self,
                 rules: Sequence[MappingRule],
                 config: Optional[PatcherConfig] = None,
                 error_handler: Optional[ErrorHandler] = None):
        self.config = config or PatcherConfig()
        self.rewriter = TransactionRewriter(rules)
        self.error_handler = error_handler or ErrorHandler(
            log_directory=self.config.log_directory, enable_console=False
        )
        self.writer = OutputWriter(self.config)
        self.verifier = OutputVerifier()

        self.aliases: Dict[str, str] = dict(INSTITUTION_ALIASES)
        for code, name in self.config.institution_aliases.items():
            self.aliases[str(code).upper()] = name

    def compute_institution(self, org: str) -> str:
        """Map an FI/ORG code to its institution name, case-insensitively"""
        return self.aliases.get(str(org).upper(), org)

    def load_document(self, text: str) -> ExportDocument:
        """Split, normalize when legacy, and decode an export"""
        split = split_document(text)

        body = split.body_text
        if split.dialect == HeaderDialect.LEGACY_V1:
            body = normalize_markup(body)

        if split.dialect == HeaderDialect.LEGACY_V1 and self.config.legacy_header == 'preserve':
            header = split.header_text
        else:
            header = CANONICAL_MODERN_HEADER

        return ExportDocument(dialect=split.dialect, raw_header_text=header, tree=decode(body))

    def extract_account_context(self, tree: MarkupTree) -> Tuple[AccountContext, Dict[str, Any]]:
        """Locate the statement block and read account and period details

        Returns:
            The account context and the statement node it was read from

        Raises:
            SchemaError: If a required block is missing
            FormatError: If a period timestamp is malformed
        """
        ofx = tree.get('OFX')
        if not isinstance(ofx, dict):
            raise SchemaError("Missing OFX root block")

        org = _require(ofx, 'SIGNONMSGSRSV1', 'SONRS', 'FI', 'ORG')
        institution = self.compute_institution(org)

        if 'BANKMSGSRSV1' in ofx:
            account_type = AccountType.CHECKING
            statement = _require(ofx, 'BANKMSGSRSV1', 'STMTTRNRS', 'STMTRS')
            account_block = 'BANKACCTFROM'
        elif 'CREDITCARDMSGSRSV1' in ofx:
            account_type = AccountType.CREDIT_CARD
            statement = _require(ofx, 'CREDITCARDMSGSRSV1', 'CCSTMTTRNRS', 'CCSTMTRS')
            account_block = 'CCACCTFROM'
        else:
            raise SchemaError("No BANKMSGSRSV1 or CREDITCARDMSGSRSV1 statement block")

        account_id = _first(statement, account_block, 'ACCTID')
        if account_id is None:
            # Legacy exports written as <BANKACCTFROM.ACCTID> collapse into one leaf
            account_id = _require(statement, account_block + 'ACCTID')

        period_start = parse_ofx_date(_require(statement, 'BANKTRANLIST', 'DTSTART'))
        period_end = parse_ofx_date(_require(statement, 'BANKTRANLIST', 'DTEND'))

        context = AccountContext(
            account_type=account_type,
            institution=institution,
            account_id=account_id,
            period_start=period_start,
            period_end=period_end,
        )
        return context, statement

    @staticmethod
    def output_name(context: AccountContext) -> str:
        """Suggested identifier: institution plus the statement period"""
        return (
            f"{context.institution}-"
            f"{context.period_start.strftime('%Y%m%d')}-"
            f"{context.period_end.strftime('%Y%m%d')}"
        )

    def patch_text(self, text: str, source_name: str = '<memory>') -> PatchResult:
        """Run the full pipeline over one export and return the patched text

        Raises:
            FormatError: If the text or a timestamp is malformed
            SchemaError: If an expected block is missing
        """
        document = self.load_document(text)
        context, statement = self.extract_account_context(document.tree)

        transactions = statement['BANKTRANLIST'][0].get('STMTTRN', [])
        if not all(isinstance(node, dict) for node in transactions):
            raise SchemaError("STMTTRN entries must be aggregates")

        results = self.rewriter.rewrite_all(transactions, context.account_type)

        patched = reattach_header(
            encode(document.tree, pretty=self.config.pretty_print),
            document.raw_header_text
        )

        result = PatchResult(
            source_name=source_name,
            output_name=self.output_name(context),
            text=patched,
            context=context,
            dialect=document.dialect,
            transaction_count=len(results),
            matched_count=sum(1 for r in results if r.rule is not None),
            categories=dict(Counter(r.category for r in results)),
        )

        logger.info(
            f"Patched {source_name}: {result.transaction_count} transaction(s), "
            f"{result.matched_count} matched a rule ({context.institution}, "
            f"{context.account_type.value})"
        )
        return result

    def patch_file(self, file_path: str, dry_run: bool = False) -> PatchResult:
        """Read, patch and (unless ``dry_run``) write one file"""
        text, encoding = self._read_text(file_path)
        result = self.patch_text(text, source_name=file_path)

        if self.config.verify_output:
            self.verifier.verify(result.text, source_name=file_path)

        output_path = self.writer.output_path(file_path, result.output_name)
        if self.writer.was_written(output_path):
            self.error_handler.log_warning(
                f"{file_path} overwrites output already written in this run: {output_path}",
                "OUTPUT_COLLISION",
                ErrorCategory.FILE_ACCESS,
                file_path=file_path
            )

        if not dry_run:
            self.writer.write(output_path, result.text, encoding=encoding)
        result.output_path = output_path
        return result

    def process_files(self,
                      file_paths: Sequence[str],
                      skipped_files: Optional[List[str]] = None,
                      dry_run: bool = False) -> BatchSummary:
        """Patch files one at a time, isolating failures per file.

        FormatError, SchemaError and I/O problems are recorded against the
        failing file and the batch moves on. ConfigError aborts the run.
        """
        started = time.time()
        summary = BatchSummary(
            start_time=datetime.now().isoformat(),
            skipped_files=list(skipped_files or []),
        )

        total = len(file_paths)
        for i, file_path in enumerate(file_paths, 1):
            logger.info(f"[{i}/{total}] Processing {os.path.basename(file_path)}")
            try:
                summary.converted.append(self.patch_file(file_path, dry_run=dry_run))
            except ConfigError:
                raise
            except (FormatError, SchemaError) as e:
                handle_format_error(self.error_handler, file_path, e)
                summary.failures.append(FileFailure(file_path, type(e).__name__, str(e)))
            except OSError as e:
                handle_file_access_error(self.error_handler, file_path, e)
                summary.failures.append(FileFailure(file_path, type(e).__name__, str(e)))

        summary.end_time = datetime.now().isoformat()
        summary.total_duration = time.time() - started

        logger.info(
            f"Batch finished: {summary.converted_count} converted, "
            f"{summary.failed_count} failed, {summary.skipped_count} skipped"
        )
        return summary

    @staticmethod
    def _read_text(file_path: str) -> Tuple[str, str]:
        with open(file_path, 'rb') as f:
            raw = f.read()

        for encoding in INPUT_ENCODINGS:
            try:
                return raw.decode(encoding), encoding
            except UnicodeDecodeError:
                continue

        # cp1252 leaves a few bytes undefined
        return raw.decode('latin-1'), 'latin-1'

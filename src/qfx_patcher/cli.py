"""Command-line interface for the QFX patcher."""

import json
import logging
import os
import sys
from typing import Dict, List, Optional

import click

from .models.core import BatchSummary, MappingRule
from .pipeline import QFXPatcher
from .utils.config_manager import ConfigManager
from .utils.error_handler import (
    ConfigError,
    ErrorCategory,
    ErrorHandler,
    FormatError,
    handle_config_error,
)
from .utils.file_scanner import FileScanner
from .utils.rule_loader import RuleLoader
from .utils.verifier import OutputVerifier


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class QFXPatcherCLI:
    """Wires configuration, rule loading and file discovery to the pipeline"""

    def __init__(self, config_path: Optional[str] = None):
        self.config_manager = ConfigManager(config_path)
        self.config = self.config_manager.load_config()
        self.error_handler = ErrorHandler(log_directory=self.config.log_directory)
        self.file_scanner = FileScanner(self.config)

    def load_rules(self, mappings_file: Optional[str] = None) -> List[MappingRule]:
        """Load mapping rules; raises ConfigError on any invalid rule"""
        return RuleLoader(mappings_file or self.config.mappings_file).load()

    def collect_files(self,
                      file_paths: Optional[List[str]] = None,
                      directory: Optional[str] = None) -> Dict[str, List[str]]:
        """Resolve explicit files or a directory into candidates and skipped files"""
        if file_paths:
            candidates, skipped = self.file_scanner.partition(list(file_paths))
        else:
            directory = os.path.expanduser(directory or self.config.input_directory)
            try:
                candidates, skipped = self.file_scanner.scan_directory(directory)
            except FileNotFoundError as e:
                self.error_handler.log_error(
                    f"Input directory not found: {directory}",
                    "DIRECTORY_NOT_FOUND",
                    ErrorCategory.FILE_ACCESS,
                    file_path=directory,
                    exception=e
                )
                raise

        return {'candidates': candidates, 'skipped': skipped}

    def patch(self,
              file_paths: Optional[List[str]] = None,
              directory: Optional[str] = None,
              mappings_file: Optional[str] = None,
              output_directory: Optional[str] = None,
              dry_run: bool = False) -> BatchSummary:
        """Patch every candidate file; ConfigError propagates"""
        if output_directory:
            self.config_manager.update_config({'output_directory': output_directory})

        try:
            rules = self.load_rules(mappings_file)
        except ConfigError as e:
            handle_config_error(self.error_handler, e, file_path=mappings_file or self.config.mappings_file)
            raise

        files = self.collect_files(file_paths, directory)

        if not files['candidates']:
            self.error_handler.log_info("No files found to process")

        patcher = QFXPatcher(rules, self.config, self.error_handler)
        return patcher.process_files(files['candidates'], files['skipped'], dry_run=dry_run)


def _print_summary(summary: BatchSummary) -> None:
    click.echo(f"  Files converted: {summary.converted_count}")
    click.echo(f"  Files failed: {summary.failed_count}")
    click.echo(f"  Files skipped: {summary.skipped_count}")
    click.echo(f"  Total transactions: {summary.total_transactions}")

    for result in summary.converted:
        click.echo(f"  ✓ {os.path.basename(result.source_name)} -> {result.output_path}")

    for kind, count in sorted(summary.failures_by_kind.items()):
        click.echo(f"  {kind}: {count}")
    for failure in summary.failures:
        click.echo(f"  ✗ {failure.file_path}: {failure.error_kind}: {failure.message}")


def _save_error_report(error_handler: ErrorHandler, output_file: Optional[str]) -> None:
    if not output_file:
        return

    summary = error_handler.get_error_summary()
    error_handler.generate_error_report(output_file)
    click.echo(
        f"  Error report saved: {output_file} "
        f"({summary['total_errors']} error(s), {summary['total_warnings']} warning(s))"
    )


# CLI Commands using Click
@click.group()
@click.option('--config', '-c', help='Path to configuration file')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(ctx, config, verbose):
    """QFX Patcher - normalize OFX/QFX exports and remap payees and categories"""

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    ctx.ensure_object(dict)
    ctx.obj['cli'] = QFXPatcherCLI(config)


@cli.command()
@click.option('--files', '-f', multiple=True, help='Specific files to process')
@click.option('--directory', '-d', help='Directory to scan (default: configured input directory)')
@click.option('--mappings', '-m', help='Mapping rules file (JSON or YAML)')
@click.option('--output-dir', '-o', help='Directory for patched files')
@click.option('--dry-run', is_flag=True, help='Patch in memory without writing output files')
@click.option('--report', '-r', help='Save processing report to specified file')
@click.option('--error-report', '-e', help='Save logged errors and warnings to specified file')
@click.pass_context
def patch(ctx, files, directory, mappings, output_dir, dry_run, report, error_report):
    """Patch export files with the mapping rules"""

    cli_instance = ctx.obj['cli']
    click.echo("Starting file processing...")

    try:
        summary = cli_instance.patch(
            file_paths=list(files) if files else None,
            directory=directory,
            mappings_file=mappings,
            output_directory=output_dir,
            dry_run=dry_run
        )
    except ConfigError as e:
        click.echo(f"✗ Configuration error: {e}")
        _save_error_report(cli_instance.error_handler, error_report)
        sys.exit(1)
    except (FileNotFoundError, ValueError) as e:
        click.echo(f"✗ Error during processing: {e}")
        _save_error_report(cli_instance.error_handler, error_report)
        sys.exit(1)

    _print_summary(summary)
    _save_error_report(cli_instance.error_handler, error_report)

    if report:
        with open(report, 'w', encoding='utf-8') as f:
            json.dump(summary.to_dict(), f, indent=2, default=str)
        click.echo(f"  Report saved: {report}")

    if summary.failed_count:
        sys.exit(2)


@cli.command()
@click.argument('files', nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
def verify(files):
    """Check that files parse as OFX and count their transactions"""

    verifier = OutputVerifier()
    failed = 0
    for file_path in files:
        with open(file_path, 'r', encoding='utf-8', errors='replace') as f:
            text = f.read()
        try:
            count = verifier.verify(text, source_name=file_path)
            click.echo(f"✓ {file_path}: {count} transaction(s)")
        except FormatError as e:
            failed += 1
            click.echo(f"✗ {e}")

    if failed:
        sys.exit(2)


@cli.command()
@click.option('--mappings', '-m', help='Mapping rules file (JSON or YAML)')
@click.pass_context
def rules(ctx, mappings):
    """List mapping rules in priority order"""

    cli_instance = ctx.obj['cli']
    try:
        loaded = cli_instance.load_rules(mappings)
    except ConfigError as e:
        click.echo(f"✗ Configuration error: {e}")
        sys.exit(1)

    if not loaded:
        click.echo("No mapping rules defined")
        return

    for position, rule in enumerate(loaded, 1):
        click.echo(f"{position:3d}. {rule.pattern} -> {rule.payee} ({rule.category})")


@cli.command()
@click.argument('output_path', default='qfx_patcher.json')
@click.option('--format', type=click.Choice(['json', 'yaml']), default='json', help='Configuration file format')
@click.pass_context
def init_config(ctx, output_path, format):
    """Generate configuration template file"""

    cli_instance = ctx.obj['cli']

    if format == 'yaml' and not output_path.endswith(('.yml', '.yaml')):
        output_path = output_path.replace('.json', '.yml')
    elif format == 'json' and not output_path.endswith('.json'):
        output_path = output_path.replace('.yml', '.json').replace('.yaml', '.json')

    try:
        cli_instance.config_manager.save_config_template(output_path)
    except OSError as e:
        click.echo(f"✗ Error generating config template: {str(e)}")
        sys.exit(1)

    click.echo(f"✓ Configuration template generated: {output_path}")


def main():
    """Main entry point"""
    cli()


if __name__ == '__main__':
    main()

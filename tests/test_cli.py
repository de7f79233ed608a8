"""Tests for the command-line interface."""

import json
import os

from click.testing import CliRunner

from qfx_patcher.cli import cli


class TestCLI:
    """Test cases for the click commands"""

    def setup_method(self):
        self.runner = CliRunner()

    def _setup(self, tmp_path, legacy_checking_export, mappings=None):
        inbox = tmp_path / 'inbox'
        inbox.mkdir()
        (inbox / 'Activity.qfx').write_text(legacy_checking_export, encoding='utf-8')
        (inbox / 'broken.qfx').write_text('garbage', encoding='utf-8')
        (inbox / 'readme.txt').write_text('hello', encoding='utf-8')

        mappings_file = tmp_path / 'mappings.json'
        mappings_file.write_text(json.dumps(mappings or {
            "AMZN": {"payee": "Amazon", "category": "Shopping"},
        }), encoding='utf-8')

        config_file = tmp_path / 'config.json'
        config_file.write_text(json.dumps({
            "input_directory": str(inbox),
            "mappings_file": str(mappings_file),
        }), encoding='utf-8')
        return inbox, config_file

    def test_patch_directory(self, tmp_path, legacy_checking_export):
        inbox, config_file = self._setup(tmp_path, legacy_checking_export)
        report = tmp_path / 'report.json'

        result = self.runner.invoke(cli, ['-c', str(config_file), 'patch', '-r', str(report)])

        assert result.exit_code == 2
        assert "Files converted: 1" in result.output
        assert "Files failed: 1" in result.output
        assert "Files skipped: 1" in result.output
        assert "FormatError: 1" in result.output
        assert os.path.exists(inbox / 'CHASE-20220901-20221001-patched.qfx')

        data = json.loads(report.read_text(encoding='utf-8'))
        assert data['converted_count'] == 1
        assert data['failures'][0]['error_kind'] == 'FormatError'

    def test_patch_single_file(self, tmp_path, legacy_checking_export):
        inbox, config_file = self._setup(tmp_path, legacy_checking_export)
        out_dir = tmp_path / 'out'

        result = self.runner.invoke(cli, [
            '-c', str(config_file), 'patch',
            '-f', str(inbox / 'Activity.qfx'), '-o', str(out_dir)
        ])

        assert result.exit_code == 0
        assert os.listdir(out_dir) == ['CHASE-20220901-20221001-patched.qfx']

    def test_invalid_rule_aborts_run(self, tmp_path, legacy_checking_export):
        inbox, config_file = self._setup(
            tmp_path, legacy_checking_export,
            mappings={"(": {"payee": "Broken", "category": "Misc"}}
        )

        result = self.runner.invoke(cli, ['-c', str(config_file), 'patch'])

        assert result.exit_code == 1
        assert "Configuration error" in result.output
        assert sorted(os.listdir(inbox)) == ['Activity.qfx', 'broken.qfx', 'readme.txt']

    def test_error_report_records_invalid_rule(self, tmp_path, legacy_checking_export):
        _, config_file = self._setup(
            tmp_path, legacy_checking_export,
            mappings={"(": {"payee": "Broken", "category": "Misc"}}
        )
        error_report = tmp_path / 'errors.json'

        result = self.runner.invoke(cli, ['-c', str(config_file), 'patch', '-e', str(error_report)])

        assert result.exit_code == 1
        data = json.loads(error_report.read_text(encoding='utf-8'))
        assert [e['error_code'] for e in data['all_errors']] == ['C005']
        assert data['all_errors'][0]['category'] == 'configuration'

    def test_error_report_records_file_failures(self, tmp_path, legacy_checking_export):
        _, config_file = self._setup(tmp_path, legacy_checking_export)
        error_report = tmp_path / 'errors.json'

        result = self.runner.invoke(cli, ['-c', str(config_file), 'patch', '--error-report', str(error_report)])

        assert result.exit_code == 2
        assert "1 error(s)" in result.output
        data = json.loads(error_report.read_text(encoding='utf-8'))
        assert data['summary']['total_errors'] == 1
        assert data['all_errors'][0]['error_code'] == 'F103'
        assert data['all_errors'][0]['file_path'].endswith('broken.qfx')

    def test_missing_input_directory(self, tmp_path, legacy_checking_export):
        _, config_file = self._setup(tmp_path, legacy_checking_export)
        error_report = tmp_path / 'errors.json'

        result = self.runner.invoke(cli, [
            '-c', str(config_file), 'patch', '-d', str(tmp_path / 'missing'), '-e', str(error_report)
        ])

        assert result.exit_code == 1
        assert "Error during processing" in result.output
        data = json.loads(error_report.read_text(encoding='utf-8'))
        assert data['all_errors'][0]['error_code'] == 'F004'

    def test_rules_listing(self, tmp_path, legacy_checking_export):
        _, config_file = self._setup(tmp_path, legacy_checking_export, mappings={
            "ZELLE": {"payee": "Zelle", "category": "Transfer"},
            "AMZN": {"payee": "Amazon", "category": "Shopping"},
        })

        result = self.runner.invoke(cli, ['-c', str(config_file), 'rules'])

        assert result.exit_code == 0
        lines = [line.strip() for line in result.output.splitlines() if line.strip()]
        assert lines == ["1. ZELLE -> Zelle (Transfer)", "2. AMZN -> Amazon (Shopping)"]

    def test_verify(self, tmp_path, legacy_checking_export):
        inbox, config_file = self._setup(tmp_path, legacy_checking_export)

        result = self.runner.invoke(cli, ['-c', str(config_file), 'verify', str(inbox / 'Activity.qfx')])

        assert result.exit_code == 0
        assert "3 transaction(s)" in result.output

    def test_init_config(self, tmp_path):
        target = tmp_path / 'settings.yml'

        result = self.runner.invoke(cli, [
            '-c', str(tmp_path / 'none.json'), 'init-config', str(target), '--format', 'yaml'
        ])

        assert result.exit_code == 0
        assert target.exists()

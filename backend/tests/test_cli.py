"""
Tests for the construction-pipeline CLI.
"""

import os

import pytest
from click.testing import CliRunner

from cli import cli
from services import excel_loader
from services.excel_loader import write_excel_file


@pytest.fixture
def runner(monkeypatch):
    for name in ('PIPELINE_CHUNK_SIZE', 'PIPELINE_COMPLETION_OFFSET_DAYS',
                 'PIPELINE_MIN_CONTRACT_AMOUNT', 'PIPELINE_EXCLUDED_TYPES',
                 'PIPELINE_EXCLUDED_KEYWORDS'):
        monkeypatch.delenv(name, raising=False)
    return CliRunner()


@pytest.fixture
def narajang_file(tmp_path, narajang_row):
    path = tmp_path / 'nj.xlsx'
    write_excel_file([narajang_row, dict(narajang_row, 계약명='별관 신축공사')], str(path))
    return str(path)


class TestRunCommand:
    """Tests for `run`."""

    def test_requires_a_source(self, runner, tmp_path):
        result = runner.invoke(cli, ['run', '--output-dir', str(tmp_path)])
        assert result.exit_code == 2
        assert "At least one Whobuilds or Narajang file is required" in result.output

    def test_exports(self, runner, tmp_path, narajang_file):
        out = tmp_path / 'out'
        result = runner.invoke(cli, [
            'run', '--narajang', narajang_file, '--output-dir', str(out),
            '--today', '2024-06-01', '--chunk-size', '1',
        ])

        assert result.exit_code == 0, result.output
        assert "Final Master size: 2." in result.output
        assert "RUN SUMMARY" in result.output
        assert sorted(os.listdir(out)) == sorted([
            '잠재기회_업로드양식_20240601.xlsx',
            '잠재기회_통합파일_20240601.xlsx',
            '잠재기회_데이터_01.xlsx',
            '잠재기회_데이터_02.xlsx',
        ])

    def test_dry_run_writes_nothing(self, runner, tmp_path, narajang_file):
        out = tmp_path / 'out'
        result = runner.invoke(cli, [
            'run', '-n', narajang_file, '-o', str(out), '--today', '2024-06-01', '--dry-run',
        ])
        assert result.exit_code == 0, result.output
        assert "DRY RUN" in result.output
        assert not out.exists()

    def test_filter_override(self, runner, tmp_path, narajang_file):
        result = runner.invoke(cli, [
            'run', '-n', narajang_file, '--today', '2024-06-01',
            '--excluded-keywords', '별관', '--dry-run',
        ])
        assert result.exit_code == 0, result.output
        assert "Narajang post-filter (Min Amount: 10,000,000): 1 records." in result.output

    def test_json_output(self, runner, narajang_file):
        result = runner.invoke(cli, ['run', '-n', narajang_file, '--today', '2024-06-01', '--dry-run', '--json'])
        assert result.exit_code == 0, result.output
        assert '"status": "completed"' in result.output
        assert '"date_tag": "20240601"' in result.output

    def test_invalid_config(self, runner, narajang_file):
        result = runner.invoke(cli, ['run', '-n', narajang_file, '--chunk-size', '0', '--dry-run'])
        assert result.exit_code == 1
        assert "Invalid pipeline config" in result.output

    def test_unreadable_master(self, runner, tmp_path, narajang_file):
        master = tmp_path / 'master.xlsx'
        master.write_bytes(b'not a workbook')
        result = runner.invoke(cli, ['run', '-n', narajang_file, '-m', str(master), '--dry-run'])
        assert result.exit_code == 1
        assert "Could not read master.xlsx" in result.output

    def test_missing_input_path(self, runner, tmp_path):
        result = runner.invoke(cli, ['run', '-w', str(tmp_path / 'nope.xlsx')])
        assert result.exit_code == 2

    def test_export_failure(self, runner, tmp_path, narajang_file, monkeypatch):
        out = tmp_path / 'out'
        real_write = excel_loader.write_excel_file

        def failing_write(records, path):
            if '데이터_02' in path:
                raise OSError("No space left on device")
            return real_write(records, path)

        monkeypatch.setattr(excel_loader, 'write_excel_file', failing_write)
        result = runner.invoke(cli, [
            'run', '-n', narajang_file, '-o', str(out), '--today', '2024-06-01', '--chunk-size', '1',
        ])

        assert result.exit_code == 1
        assert "Could not write exports: No space left on device" in result.output
        assert os.listdir(out) == []


class TestRulesCommand:
    """Tests for `rules`."""

    def test_lists_stages(self, runner):
        result = runner.invoke(cli, ['rules'])
        assert result.exit_code == 0
        for name in ('whobuilds:', 'narajang:', 'merged:', 'structural_bounds', 'min_contract_amount'):
            assert name in result.output


def test_version(runner):
    result = runner.invoke(cli, ['--version'])
    assert result.exit_code == 0
    assert "1.0.0" in result.output

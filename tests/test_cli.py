"""
Tests for the CLI entry point.

Uses typer's CliRunner; the sync itself is patched out.
"""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from docmirror.cli.main import app
from docmirror.exceptions import ConfigurationError, ListingError
from docmirror.sync.types import SyncSummary

runner = CliRunner()


@pytest.fixture(autouse=True)
def project_dir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestHelp:
    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "mirror" in result.output.lower()


class TestSync:
    def test_success_prints_summary(self):
        summary = SyncSummary(files_scanned=2, files_changed=1, files_skipped=1)
        with patch("docmirror.cli.main.run_sync", return_value=summary) as mock_run:
            result = runner.invoke(app, [])

        assert result.exit_code == 0
        assert "Scanned 2, updated 1, skipped 1, failed 0" in result.output
        mock_run.assert_called_once()

    def test_per_file_failures_still_exit_zero(self):
        summary = SyncSummary(files_scanned=5, files_changed=4, files_failed=1)
        with patch("docmirror.cli.main.run_sync", return_value=summary):
            result = runner.invoke(app, [])

        assert result.exit_code == 0
        assert "failed 1" in result.output

    def test_fatal_error_exits_one(self):
        with patch("docmirror.cli.main.run_sync", side_effect=ListingError("root", "HTTP 500")):
            result = runner.invoke(app, [])

        assert result.exit_code == 1
        assert "HTTP 500" in result.output

    def test_unexpected_error_exits_one(self):
        with patch("docmirror.cli.main.run_sync", side_effect=RuntimeError("boom")):
            result = runner.invoke(app, [])

        assert result.exit_code == 1

    def test_configuration_error_exits_one(self):
        with patch("docmirror.cli.main.run_sync", side_effect=ConfigurationError("source.root_folder_id is missing")):
            result = runner.invoke(app, [])

        assert result.exit_code == 1
        assert "root_folder_id" in result.output

    def test_invalid_config_file(self, project_dir):
        (project_dir / "config.yaml").write_text("sync: [unclosed\n")
        with patch("docmirror.cli.main.run_sync") as mock_run:
            result = runner.invoke(app, [])

        assert result.exit_code == 1
        mock_run.assert_not_called()

    def test_missing_settings_fail_before_io(self, project_dir, monkeypatch):
        monkeypatch.delenv("DRIVE_ROOT_FOLDER_ID", raising=False)
        monkeypatch.delenv("GOOGLE_SERVICE_ACCOUNT_JSON", raising=False)
        (project_dir / "config.yaml").write_text(
            "storage:\n  type: filesystem\n  config:\n    root_path: mirror\ncatalog:\n  type: duckdb\n  path: ':memory:'\n"
        )

        result = runner.invoke(app, [])

        assert result.exit_code == 1
        assert "root_folder_id" in result.output
        assert not (project_dir / "mirror").exists()

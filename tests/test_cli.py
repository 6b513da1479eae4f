"""Tests for the hubdb-sync CLI.

Operations and client construction are patched, so these tests only check
argument parsing, account resolution, output, and exit codes.
"""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from hubdb_sync.cli import build_parser, cmd_accounts, main
from hubdb_sync.errors import SchemaSyncError
from hubdb_sync.table.models import CreateTableResult, ReconciliationReport, RowError

TOML = """\
default_account = "prod"

[accounts.prod]
account_id = 111
access_token = "pat-prod"
description = "Production portal"
"""


@pytest.fixture(autouse=True)
def _no_account_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("HUBDB_ACCOUNT", raising=False)


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "hubdb.toml"
    path.write_text(TOML)
    return path


@pytest.fixture
def client() -> MagicMock:
    """Client returned by the patched ``get_client``."""
    mock = MagicMock()
    mock.close = AsyncMock()
    with patch("hubdb_sync.cli.get_client", return_value=mock):
        yield mock


class TestParser:

    def test_upload_arguments(self) -> None:
        args = build_parser().parse_args(
            ["--account", "prod", "upload", "456", "events.json"]
        )

        assert args.command == "upload"
        assert args.account == "prod"
        assert args.table_id == "456"
        assert args.src == "events.json"

    def test_fetch_dest_optional(self) -> None:
        args = build_parser().parse_args(["fetch", "456"])

        assert args.dest is None

    def test_clear_publish_flag(self) -> None:
        args = build_parser().parse_args(["clear", "456", "--publish"])

        assert args.publish is True

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestAccounts:

    def test_lists_accounts(self, config_path: Path, capsys: pytest.CaptureFixture) -> None:
        args = build_parser().parse_args(["--config", str(config_path), "accounts"])

        assert cmd_accounts(args) == 0
        out = capsys.readouterr().out
        assert "prod" in out
        assert "111" in out

    def test_missing_config(self, tmp_path: Path) -> None:
        args = build_parser().parse_args(
            ["--config", str(tmp_path / "missing.toml"), "accounts"]
        )

        assert cmd_accounts(args) == 1

    def test_use_env_without_credentials(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("HUBSPOT_ACCESS_TOKEN", "HUBSPOT_API_KEY", "HUBSPOT_PORTAL_ID"):
            monkeypatch.delenv(name, raising=False)
        args = build_parser().parse_args(["--use-env", "accounts"])

        assert cmd_accounts(args) == 1


class TestCommands:

    def test_upload_success(self, config_path: Path, client: MagicMock) -> None:
        report = ReconciliationReport(
            table_id="456", planned_updates=1, update_count=1, row_count=1
        )
        with patch("hubdb_sync.cli.update_table", AsyncMock(return_value=report)) as op:
            code = main(["--config", str(config_path), "upload", "456", "t.json"])

        assert code == 0
        op.assert_awaited_once_with(client, 111, "456", "t.json")
        client.close.assert_awaited_once()

    def test_upload_row_errors_exit_1(self, config_path: Path, client: MagicMock) -> None:
        report = ReconciliationReport(
            table_id="456",
            planned_deletions=1,
            errors=[RowError(operation="delete", message="row not found")],
        )
        with patch("hubdb_sync.cli.update_table", AsyncMock(return_value=report)):
            code = main(["--config", str(config_path), "upload", "456", "t.json"])

        assert code == 1

    def test_create_row_errors_exit_1(self, config_path: Path, client: MagicMock) -> None:
        result = CreateTableResult(
            table_id="456",
            errors=[RowError(operation="create", message="row 0 rejected")],
        )
        with patch("hubdb_sync.cli.create_table", AsyncMock(return_value=result)):
            code = main(["--config", str(config_path), "create", "t.json"])

        assert code == 1
        client.close.assert_awaited_once()

    def test_create_success(self, config_path: Path, client: MagicMock) -> None:
        result = CreateTableResult(table_id="456", row_count=2)
        with patch("hubdb_sync.cli.create_table", AsyncMock(return_value=result)) as op:
            code = main(["--config", str(config_path), "create", "t.json"])

        assert code == 0
        op.assert_awaited_once_with(client, 111, "t.json")

    def test_operation_error_exit_1(self, config_path: Path, client: MagicMock) -> None:
        failing = AsyncMock(side_effect=SchemaSyncError("Failed to create table 't'"))
        with patch("hubdb_sync.cli.create_table", failing):
            code = main(["--config", str(config_path), "create", "t.json"])

        assert code == 1
        client.close.assert_awaited_once()

    def test_unknown_account_exit_1(self, config_path: Path, client: MagicMock) -> None:
        code = main(["--config", str(config_path), "--account", "nope", "publish", "456"])

        assert code == 1
        client.close.assert_not_awaited()

    def test_clear_with_publish(self, config_path: Path, client: MagicMock) -> None:
        clear = AsyncMock(return_value=MagicMock(deleted_row_count=3))
        publish = AsyncMock()
        with patch("hubdb_sync.cli.clear_table_rows", clear), \
                patch("hubdb_sync.cli.publish_table", publish):
            code = main(["--config", str(config_path), "clear", "456", "--publish"])

        assert code == 0
        clear.assert_awaited_once_with(client, 111, "456")
        publish.assert_awaited_once_with(client, 111, "456")

    def test_delete_requires_confirm(self, config_path: Path, client: MagicMock) -> None:
        delete = AsyncMock()
        with patch("hubdb_sync.cli.delete_table", delete):
            code = main(["--config", str(config_path), "delete", "456"])

        assert code == 0
        delete.assert_not_awaited()

    def test_delete_confirmed(self, config_path: Path, client: MagicMock) -> None:
        delete = AsyncMock()
        with patch("hubdb_sync.cli.delete_table", delete):
            code = main(["--config", str(config_path), "delete", "456", "--confirm"])

        assert code == 0
        delete.assert_awaited_once_with(client, 111, "456")

    def test_use_env_account(self, monkeypatch: pytest.MonkeyPatch, client: MagicMock) -> None:
        monkeypatch.setenv("HUBSPOT_PORTAL_ID", "333")
        monkeypatch.setenv("HUBSPOT_ACCESS_TOKEN", "pat-env")
        monkeypatch.delenv("HUBDB_ACCOUNT", raising=False)
        fetch = AsyncMock(return_value=MagicMock(file_path="/tmp/t.json"))
        with patch("hubdb_sync.cli.download_table", fetch):
            code = main(["--use-env", "fetch", "456"])

        assert code == 0
        fetch.assert_awaited_once_with(client, 333, "456", None)

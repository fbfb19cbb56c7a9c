from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

import ob_cli.upgrade
from ob_cli import app as cli_app
from ob_cli.core.paths import impl_dir
from ob_cli.migration import GraphInconsistencyError, Hash
from ob_cli.upgrade import UpgradeResult

runner = CliRunner()


@pytest.fixture()
def captured(monkeypatch) -> dict[str, object]:
    calls: dict[str, object] = {}

    def fake_upgrade_tool(project, branch, migrate_only_from_hash=None, *, handoff=True, settings=None, **_kw):
        calls.update(
            project=project,
            branch=branch,
            from_hash=migrate_only_from_hash,
            handoff=handoff,
            settings=settings,
        )
        return UpgradeResult(Hash("A"), Hash("A"))

    monkeypatch.setattr(ob_cli.upgrade, "upgrade_tool", fake_upgrade_tool)
    return calls


@pytest.fixture()
def in_project(tmp_path: Path, monkeypatch) -> Path:
    impl_dir(tmp_path).mkdir(parents=True)
    monkeypatch.chdir(tmp_path)
    for name in ("OB_AMBIENT_DIR", "OB_EXECUTABLE", "OB_HANDOFF_MODE", "OB_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


def test_help_lists_upgrade() -> None:
    result = runner.invoke(cli_app, ["--help"])
    assert result.exit_code == 0
    assert "upgrade" in result.stdout
    assert "--no-handoff" in result.stdout


def test_version_flag() -> None:
    result = runner.invoke(cli_app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.startswith("ob ")


def test_module_entry_point_runs_cli() -> None:
    result = subprocess.run(
        [sys.executable, "-m", "ob_cli", "--version"],
        capture_output=True,
        text=True,
        check=False,
    )
    assert result.returncode == 0, result.stderr
    assert result.stdout.startswith("ob ")


def test_user_invocation_enables_handoff(in_project: Path, captured) -> None:
    result = runner.invoke(cli_app, ["upgrade", "develop"])
    assert result.exit_code == 0, result.stdout
    assert captured["project"] == in_project.resolve()
    assert captured["branch"] == "develop"
    assert captured["from_hash"] is None
    assert captured["handoff"] is True


def test_reexec_arguments_select_migration_only(in_project: Path, captured) -> None:
    result = runner.invoke(
        cli_app,
        ["--no-handoff", "upgrade", "--migrate-only-from-hash", "abc123", "develop"],
    )
    assert result.exit_code == 0, result.stdout
    assert captured["from_hash"] == "abc123"
    assert captured["handoff"] is False
    assert captured["branch"] == "develop"


def test_runs_from_project_subdirectory(in_project: Path, captured, monkeypatch) -> None:
    nested = in_project / "backend"
    nested.mkdir()
    monkeypatch.chdir(nested)
    result = runner.invoke(cli_app, ["upgrade", "master"])
    assert result.exit_code == 0, result.stdout
    assert captured["project"] == in_project.resolve()


def test_outside_project_fails(tmp_path: Path, monkeypatch, captured) -> None:
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(cli_app, ["upgrade", "develop"])
    assert result.exit_code == 1
    assert "Not an ob project" in result.stdout
    assert captured == {}


def test_failure_is_reported_with_exit_code(in_project: Path, monkeypatch) -> None:
    def failing(*_a, **_kw):
        raise GraphInconsistencyError("New ob hash X missing in its migration graph")

    monkeypatch.setattr(ob_cli.upgrade, "upgrade_tool", failing)
    result = runner.invoke(cli_app, ["upgrade", "develop"])
    assert result.exit_code == 1
    assert "New ob hash X missing in its migration graph" in result.stdout


def test_invalid_config_fails(in_project: Path, captured) -> None:
    (in_project / ".obelisk" / "config.yaml").write_text(
        "upgrade:\n  handoff_mode: fork\n", encoding="utf-8"
    )
    result = runner.invoke(cli_app, ["upgrade", "develop"])
    assert result.exit_code == 1
    assert "handoff_mode" in result.stdout
    assert captured == {}

"""Tests for the voxlock CLI."""

import json
import os
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

from voxlock.cli import app
from voxlock.models import LockRecord


@pytest.fixture
def cli_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, lock_dir: Path) -> list[str]:
    """Point the CLI at a private lock dir and a nonexistent config file."""
    monkeypatch.setenv("VOXLOCK_LOCK_DIR", str(lock_dir))
    monkeypatch.delenv("VOXLOCK_SEQUENTIAL", raising=False)
    monkeypatch.setenv("COLUMNS", "250")  # Keep long paths on one line
    monkeypatch.delenv("VOXLOCK_SUPPRESS_SPEAKING_OUTPUT", raising=False)
    return ["--no-color", "--config", str(tmp_path / "none.toml")]


def plant_lock(lock_dir: Path, pid: int) -> None:
    lock_dir.mkdir()
    (lock_dir / "content.json").write_text(LockRecord(pid=pid).model_dump_json())


class TestVersionAndHelp:
    """Tests for the top-level app."""

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "voxlock" in result.stdout
        assert "0.1.0" in result.stdout

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("run", "say", "status", "unlock", "config"):
            assert command in result.stdout

    def test_bad_config_exits(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[coordinator\n")
        result = runner.invoke(app, ["--no-color", "--config", str(path), "status"])
        assert result.exit_code == 3
        assert "Invalid TOML" in result.output


class TestStatus:
    """Tests for the status command."""

    def test_free(self, runner: CliRunner, cli_env: list[str]) -> None:
        result = runner.invoke(app, [*cli_env, "status"])
        assert result.exit_code == 0
        assert "Status: free" in result.output

    def test_held_json(self, runner: CliRunner, cli_env: list[str], lock_dir: Path) -> None:
        plant_lock(lock_dir, os.getpid())
        result = runner.invoke(app, [*cli_env, "--json", "-q", "status"])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert data["locked"] is True
        assert data["pid"] == os.getpid()
        assert data["alive"] is True
        assert data["stale"] is False
        assert data["sequential"] is True

    def test_stale_text(
        self, runner: CliRunner, cli_env: list[str], lock_dir: Path, dead_pid: int
    ) -> None:
        plant_lock(lock_dir, dead_pid)
        result = runner.invoke(app, [*cli_env, "status"])
        assert result.exit_code == 0
        assert "Status: stale" in result.output


class TestUnlock:
    """Tests for the unlock command."""

    def test_free(self, runner: CliRunner, cli_env: list[str]) -> None:
        result = runner.invoke(app, [*cli_env, "unlock"])
        assert result.exit_code == 0
        assert "Lock is free" in result.output

    def test_stale_cleared(
        self, runner: CliRunner, cli_env: list[str], lock_dir: Path, dead_pid: int
    ) -> None:
        plant_lock(lock_dir, dead_pid)
        result = runner.invoke(app, [*cli_env, "unlock"])
        assert result.exit_code == 0
        assert "Lock cleared" in result.output
        assert not lock_dir.exists()

    def test_live_holder_refused(
        self, runner: CliRunner, cli_env: list[str], lock_dir: Path
    ) -> None:
        plant_lock(lock_dir, os.getpid())
        result = runner.invoke(app, [*cli_env, "unlock"])
        assert result.exit_code == 1
        assert "--force" in result.output
        assert lock_dir.is_dir()

    def test_force(self, runner: CliRunner, cli_env: list[str], lock_dir: Path) -> None:
        plant_lock(lock_dir, os.getpid())
        result = runner.invoke(app, [*cli_env, "unlock", "--force"])
        assert result.exit_code == 0
        assert not lock_dir.exists()


class TestConfigInit:
    """Tests for config init."""

    def test_writes_template(self, runner: CliRunner, cli_env: list[str], tmp_path: Path) -> None:
        path = tmp_path / "out" / "config.toml"
        result = runner.invoke(app, [*cli_env, "config", "init", "--path", str(path)])
        assert result.exit_code == 0
        assert path.exists()

    def test_existing_refused(
        self, runner: CliRunner, cli_env: list[str], tmp_path: Path
    ) -> None:
        path = tmp_path / "config.toml"
        path.write_text("# mine\n")
        result = runner.invoke(app, [*cli_env, "config", "init", "--path", str(path)])
        assert result.exit_code == 1
        assert "already exists" in result.output
        assert path.read_text() == "# mine\n"

        result = runner.invoke(app, [*cli_env, "config", "init", "--path", str(path), "--force"])
        assert result.exit_code == 0
        assert "# mine" not in path.read_text()


class TestSpeechCommands:
    """Tests for run and say."""

    def test_run_success(self, runner: CliRunner, cli_env: list[str], lock_dir: Path) -> None:
        result = runner.invoke(app, [*cli_env, "run", "--", sys.executable, "-c", "pass"])
        assert result.exit_code == 0
        assert "Command completed" in result.output
        assert not lock_dir.exists()

    def test_run_failure(self, runner: CliRunner, cli_env: list[str], lock_dir: Path) -> None:
        cmd = [sys.executable, "-c", "import sys; sys.exit(4)"]
        result = runner.invoke(app, [*cli_env, "run", "--", *cmd])
        assert result.exit_code == 1
        assert "exited with code 4" in result.output
        assert not lock_dir.exists()

    def test_run_json(self, runner: CliRunner, cli_env: list[str]) -> None:
        result = runner.invoke(
            app,
            [*cli_env, "--json", "-q", "run", "--id", "job-7", "--", sys.executable, "-c", "pass"],
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["request_id"] == "job-7"
        assert data["status"] == "completed"
        assert data["message"] == "Command completed"

    def test_say_empty_text(self, runner: CliRunner, cli_env: list[str]) -> None:
        result = runner.invoke(app, [*cli_env, "say", "   "])
        assert result.exit_code == 1
        assert "Empty text" in result.output

    def test_say_uses_configured_command(
        self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, lock_dir: Path
    ) -> None:
        config = tmp_path / "config.toml"
        command = json.dumps([sys.executable, "-c", "import sys"])
        config.write_text(f"[speech]\ncommand = {command}\n")
        monkeypatch.setenv("VOXLOCK_LOCK_DIR", str(lock_dir))
        monkeypatch.delenv("VOXLOCK_SUPPRESS_SPEAKING_OUTPUT", raising=False)

        result = runner.invoke(app, ["--no-color", "--config", str(config), "say", "hello"])
        assert result.exit_code == 0
        assert "Speaking: hello" in result.output

    def test_say_suppressed_output(
        self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, lock_dir: Path
    ) -> None:
        config = tmp_path / "config.toml"
        command = json.dumps([sys.executable, "-c", "import sys"])
        config.write_text(f"[speech]\ncommand = {command}\n")
        monkeypatch.setenv("VOXLOCK_LOCK_DIR", str(lock_dir))
        monkeypatch.setenv("VOXLOCK_SUPPRESS_SPEAKING_OUTPUT", "true")

        result = runner.invoke(app, ["--no-color", "--config", str(config), "say", "secret"])
        assert result.exit_code == 0
        assert "Speech completed" in result.output
        assert "secret" not in result.output

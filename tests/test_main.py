import pytest

from krtools.config.logger import logging_setup
from krtools.config.settings import global_settings, LogLevel, update_global_settings
from krtools.errors import ConfigError, InvalidCommand, InvalidInput, InvalidParam
from krtools.exec.process_runner import RecordingRunner
from krtools.main import run_command


@pytest.fixture
def kr_env(monkeypatch, tmp_path):
    monkeypatch.setenv("KNOWLEDGE_REPO", str(tmp_path / "kr"))
    return tmp_path / "kr"


def test_repo_from_environment(kr_env):
    runner = RecordingRunner()
    assert run_command(["status"], runner) == 0
    assert runner.last.argv() == ["knowledge_repo", "--repo", str(kr_env), "status"]


def test_explicit_repo_overrides_environment(kr_env):
    runner = RecordingRunner()
    run_command(["status", "--repo=/other/repo", "--noupdate"], runner)
    assert runner.last.argv() == ["knowledge_repo", "--repo", "/other/repo", "--noupdate", "status"]


def test_no_repo(monkeypatch):
    monkeypatch.delenv("KNOWLEDGE_REPO", raising=False)
    runner = RecordingRunner()
    with pytest.raises(ConfigError, match="KNOWLEDGE_REPO"):
        run_command(["status"], runner)
    assert runner.commands == []


def test_options_from_args(kr_env, tmp_path):
    runner = RecordingRunner()
    run_command(["deploy", "--port=8080", "--engine=flask", "--quiet"], runner)
    assert runner.last.argv()[3:] == ["deploy", "--port", "8080", "--engine", "flask"]

    run_command(["init", "new_repo", "--tooling-embed"], runner)
    assert runner.last.argv() == [
        "knowledge_repo",
        "--repo",
        "new_repo",
        "init",
        "--tooling-embed",
    ]

    run_command(["create", "post.ipynb"], runner)
    assert runner.last.argv()[3:] == ["create", "ipynb", "post.ipynb"]


def test_command_help_passes_through(kr_env):
    runner = RecordingRunner()
    run_command(["command", "add", "--help"], runner)
    assert runner.last.argv() == ["knowledge_repo", "--repo", str(kr_env), "add", "--help"]

    run_command(["command", "--help"], runner)
    assert runner.last.argv() == ["knowledge_repo", "--repo", str(kr_env), "--help"]


def test_subcommand_help_skips_validation(monkeypatch):
    monkeypatch.delenv("KNOWLEDGE_REPO", raising=False)
    runner = RecordingRunner()
    for name in ("add", "create", "submit", "preview", "deploy"):
        assert run_command([name, "--help"], runner) == 0
        assert runner.last.argv() == ["knowledge_repo", name, "--help"]


def test_log_level_option(kr_env):
    runner = RecordingRunner()
    old_level = global_settings().console_log_level
    try:
        run_command(["status", "--log-level=debug"], runner)
        assert global_settings().console_log_level == LogLevel.debug
        assert runner.last.argv() == ["knowledge_repo", "--repo", str(kr_env), "status"]
    finally:
        with update_global_settings() as settings:
            settings.console_log_level = old_level
        logging_setup()

    with pytest.raises(InvalidParam, match="loud"):
        run_command(["status", "--log-level=loud"], runner)


def test_bad_input(kr_env):
    runner = RecordingRunner()
    with pytest.raises(InvalidCommand):
        run_command(["publish"], runner)
    with pytest.raises(InvalidParam, match="colour"):
        run_command(["status", "--colour=red"], runner)
    with pytest.raises(InvalidInput, match="Too many"):
        run_command(["submit", "a", "b"], runner)
    with pytest.raises(InvalidInput):
        run_command(["submit"], runner)
    with pytest.raises(InvalidInput):
        run_command(["deploy", "--port=abc"], runner)
    assert runner.commands == []


def test_help_and_version(capsys):
    assert run_command([]) == 0
    assert "submit" in capsys.readouterr().out
    assert run_command(["--version"]) == 0
    assert "krtools" in capsys.readouterr().out

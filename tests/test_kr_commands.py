import logging
from pathlib import Path

import pytest

from krtools.commands import kr_commands
from krtools.commands.kr_commands import (
    add,
    command,
    create,
    deploy,
    init,
    post_format,
    preview,
    runserver,
    status,
    submit,
)
from krtools.errors import ConfigError, InvalidParam, UnrecognizedFileFormat
from krtools.exec.kr_dispatch import KrContext
from krtools.exec.process_runner import RecordingRunner
from krtools.model.options_model import (
    AddOptions,
    CreateOptions,
    DeployOptions,
    GlobalOptions,
    InitOptions,
    PreviewOptions,
    RawCommandOptions,
    RunserverOptions,
    StatusOptions,
    SubmitOptions,
)


def make_ctx(repo="/tmp/kr", returncode=0, **global_flags):
    runner = RecordingRunner(returncode=returncode)
    ctx = KrContext(global_options=GlobalOptions(repo=repo, **global_flags), runner=runner)
    return ctx, runner


def write_post(tmp_path: Path, name="test.Rmd", header="title: Test Post\npath: ex/test\n"):
    post = tmp_path / name
    post.write_text(f"---\n{header}---\n\nSome text.\n")
    return post


def test_post_format():
    assert post_format("test.Rmd") == "Rmd"
    assert post_format("TEST.RMD") == "Rmd"
    assert post_format("nb.ipynb") == "ipynb"
    assert post_format("notes.md") == "md"
    assert post_format("anything.txt", "MD") == "md"
    with pytest.raises(UnrecognizedFileFormat, match="'txt'"):
        post_format("test.txt")
    with pytest.raises(UnrecognizedFileFormat, match="'docx'"):
        post_format("test.Rmd", "docx")


def test_create():
    ctx, runner = make_ctx()
    assert create(CreateOptions(filename="example.Rmd"), ctx) == 0
    assert runner.last.argv() == ["knowledge_repo", "--repo", "/tmp/kr", "create", "Rmd", "example.Rmd"]

    create(CreateOptions(filename="example.md", template="tmpl.md"), ctx)
    assert runner.last.shell_str() == (
        "knowledge_repo --repo '/tmp/kr' create --template 'tmpl.md' 'md' 'example.md'"
    )


def test_create_unrecognized_extension():
    ctx, runner = make_ctx()
    with pytest.raises(UnrecognizedFileFormat):
        create(CreateOptions(filename="test.txt"), ctx)
    assert runner.commands == []


def test_add_with_path(tmp_path):
    post = write_post(tmp_path)
    ctx, runner = make_ctx()
    assert add(AddOptions(filename=str(post), path="ex/test"), ctx) == 0

    shell_str = runner.last.shell_str()
    assert shell_str.endswith(f"--path 'ex/test' '{post}'")
    assert "--message 'Adding post: Test Post'" in shell_str
    assert "--update" not in shell_str
    assert "--submit" not in shell_str


def test_add_flags(tmp_path):
    post = write_post(tmp_path)
    ctx, runner = make_ctx(noupdate=True)
    add(
        AddOptions(
            filename=str(post),
            message="Committing a new post",
            update=True,
            squash=False,
            branch="my-branch",
        ),
        ctx,
    )
    assert runner.last.argv() == [
        "knowledge_repo",
        "--repo",
        "/tmp/kr",
        "--noupdate",
        "add",
        "--message",
        "Committing a new post",
        "--branch",
        "my-branch",
        "--update",
        str(post),
    ]


def test_add_without_title_warns(tmp_path, caplog):
    post = write_post(tmp_path, header="path: ex/untitled\n")
    ctx, runner = make_ctx()
    with caplog.at_level(logging.WARNING):
        assert add(AddOptions(filename=str(post)), ctx) == 0

    assert "No title found" in caplog.text
    assert len(runner.commands) == 1
    assert f"--message 'Adding {post}'" in runner.last.shell_str()


def test_add_missing_file(tmp_path, monkeypatch, caplog):
    monkeypatch.chdir(tmp_path)
    ctx, runner = make_ctx()
    with caplog.at_level(logging.WARNING):
        assert add(AddOptions(filename="test.Rmd", path="ex/test"), ctx) == 0

    assert "Could not read the header of test.Rmd" in caplog.text
    shell_str = runner.last.shell_str()
    assert "--message 'Adding test.Rmd'" in shell_str
    assert shell_str.endswith("--path 'ex/test' 'test.Rmd'")


def test_add_submit_links_pr(tmp_path, monkeypatch):
    post = write_post(tmp_path)
    calls = []
    monkeypatch.setattr(
        kr_commands, "after_submit", lambda repo, path, browse_pr: calls.append((repo, path, browse_pr))
    )
    ctx, runner = make_ctx()
    add(AddOptions(filename=str(post), submit=True, browse_pr=True), ctx)

    assert "--submit" in runner.last.argv()
    assert "--path" not in runner.last.argv()
    assert calls == [(Path("/tmp/kr"), "ex/test", True)]


def test_add_submit_failure_skips_pr(tmp_path, monkeypatch):
    post = write_post(tmp_path)
    calls = []
    monkeypatch.setattr(kr_commands, "after_submit", lambda *args: calls.append(args))
    ctx, runner = make_ctx(returncode=1)
    assert add(AddOptions(filename=str(post), submit=True), ctx) == 1
    assert calls == []


def test_missing_repo():
    runner = RecordingRunner()
    ctx = KrContext(global_options=GlobalOptions(), runner=runner)
    with pytest.raises(ConfigError, match="KNOWLEDGE_REPO"):
        status(StatusOptions(), ctx)
    assert runner.commands == []

    # Version and help don't need a repository.
    ctx = KrContext(global_options=GlobalOptions(version=True), runner=runner)
    status(StatusOptions(), ctx)
    assert runner.last.argv() == ["knowledge_repo", "--version", "status"]


def test_init():
    runner = RecordingRunner()
    ctx = KrContext(global_options=GlobalOptions(), runner=runner)
    init(InitOptions(repo="example_repository", tooling_embed=True, tooling_branch="main"), ctx)
    assert runner.last.argv() == [
        "knowledge_repo",
        "--repo",
        "example_repository",
        "init",
        "--tooling-embed",
        "--tooling-branch",
        "main",
    ]
    # The caller's context is unchanged.
    assert ctx.global_options.repo is None


def test_submit(monkeypatch):
    calls = []
    monkeypatch.setattr(
        kr_commands, "after_submit", lambda repo, path, browse_pr: calls.append((repo, path, browse_pr))
    )
    ctx, runner = make_ctx()
    assert submit(SubmitOptions(path="examples/test"), ctx) == 0
    assert runner.last.shell_str() == "knowledge_repo --repo '/tmp/kr' submit 'examples/test'"
    assert calls == [(Path("/tmp/kr"), "examples/test", False)]


def test_submit_direct(monkeypatch):
    calls = []
    monkeypatch.setattr(kr_commands, "direct_submit", lambda repo, path: calls.append((repo, path)))
    ctx, runner = make_ctx()
    assert submit(SubmitOptions(path="examples/test", direct=True), ctx) == 0
    assert runner.commands == []
    assert calls == [(Path("/tmp/kr"), "examples/test")]


def test_server_commands():
    ctx, runner = make_ctx()

    preview(PreviewOptions(path="ex/test", port=7000), ctx)
    assert runner.last.argv()[3:] == ["preview", "--port", "7000", "ex/test"]

    deploy(DeployOptions(workers=4, engine="gunicorn", timeout=60), ctx)
    assert runner.last.argv()[3:] == [
        "deploy",
        "--workers",
        "4",
        "--timeout",
        "60",
        "--engine",
        "gunicorn",
    ]

    runserver(RunserverOptions(config="server_config.py"), ctx)
    assert runner.last.argv()[3:] == ["runserver", "--config", "server_config.py"]

    with pytest.raises(InvalidParam, match="engine"):
        deploy(DeployOptions(engine="apache"), ctx)


def test_raw_command():
    ctx, runner = make_ctx()
    command(RawCommandOptions(subcommand="add", args=[], options={"help": True}), ctx)
    assert runner.last.argv() == ["knowledge_repo", "--repo", "/tmp/kr", "add", "--help"]


def test_exit_status_passed_through():
    ctx, runner = make_ctx(returncode=7)
    assert status(StatusOptions(), ctx) == 7

"""
Minimal git access for a local knowledge repository, via the `git` command.
"""

import subprocess
from pathlib import Path
from typing import List, Optional

from krtools.config.logger import get_logger
from krtools.errors import GitCommandError, SetupError

log = get_logger(__name__)

DEFAULT_REMOTE = "origin"


def _git(repo: Path, args: List[str], capture: bool) -> subprocess.CompletedProcess:
    command = ["git", "-C", str(repo), *args]
    log.info("Running git: %s", command)
    try:
        return subprocess.run(command, capture_output=capture, text=True, check=True)
    except FileNotFoundError as e:
        raise SetupError("The `git` command was not found; is git installed?") from e
    except subprocess.CalledProcessError as e:
        detail = (e.stderr or "").strip() if capture else ""
        raise GitCommandError(
            f"`git {' '.join(args)}` failed in {repo} (status {e.returncode})"
            + (f": {detail}" if detail else "")
        ) from e


def git_output(repo: Path, *args: str) -> str:
    """
    Run a git command in `repo` and return its stripped stdout.
    """
    return _git(repo, list(args), capture=True).stdout.strip()


def git_run(repo: Path, *args: str) -> None:
    """
    Run a git command in `repo` with output going to the terminal.
    """
    _git(repo, list(args), capture=False)


def git_remote_name(repo: Path) -> Optional[str]:
    """
    The remote to use: `origin` if there is one, otherwise the first remote.
    None if there are no remotes.
    """
    remotes = git_output(repo, "remote").splitlines()
    if not remotes:
        return None
    return DEFAULT_REMOTE if DEFAULT_REMOTE in remotes else remotes[0]


def git_remote_url(repo: Path) -> Optional[str]:
    """
    The URL of the repository's remote, or None if no remote is configured.
    """
    remote = git_remote_name(repo)
    if not remote:
        return None
    return git_output(repo, "remote", "get-url", remote) or None

"""
Steps after a post is submitted: finding the hosting page for the repository and
pointing the user at a pull request. Also the direct (no review) submission.
"""

import re
import webbrowser
from functools import cache
from pathlib import Path
from typing import Optional, Sequence, Tuple

from krtools.config.logger import get_logger
from krtools.config.settings import global_settings
from krtools.errors import RemoteError
from krtools.shell_tools.git_tools import git_remote_name, git_remote_url, git_run

log = get_logger(__name__)

POST_BRANCH_SUFFIX = ".kp"


@cache
def _remote_re(hosts: Tuple[str, ...]) -> re.Pattern:
    host_pat = "|".join(re.escape(host) for host in hosts)
    # scheme and user are optional: `git@host:org/repo.git`, `https://host/org/repo.git`,
    # `ssh://git@host/org/repo.git`
    return re.compile(
        rf"^(?:[a-z][a-z0-9+.-]*://)?(?:[^@/\s]+@)?(?P<host>{host_pat})[:/](?P<name>[^\s]+?)\.git/?$",
        re.IGNORECASE,
    )


def remote_link_from_url(remote_url: str, hosts: Optional[Sequence[str]] = None) -> str:
    """
    The HTTPS page for a repository, from its git remote URL. Raises `RemoteError`
    if the URL isn't a `.git` URL on a recognized host.

    git@github.com:org/repo.git -> https://github.com/org/repo
    """
    hosts = tuple(hosts or global_settings().remote_hosts)
    match = _remote_re(hosts).match(remote_url.strip())
    if not match:
        raise RemoteError(f"Does not appear to be a GitHub remote: {remote_url}")
    return f"https://{match.group('host').lower()}/{match.group('name').strip('/')}"


def get_remote_link(repo: Path) -> Optional[str]:
    """
    The HTTPS page for the repository's remote, or None if it has no remote.
    """
    remote_url = git_remote_url(repo)
    if not remote_url:
        return None
    return remote_link_from_url(remote_url)


def post_branch(path: str) -> str:
    return f"{path.strip('/')}{POST_BRANCH_SUFFIX}"


def compare_url(remote_link: str, path: str) -> str:
    return f"{remote_link}/compare/{post_branch(path)}?expand=1"


def after_submit(repo: Path, path: str, browse_pr: bool = False) -> str:
    """
    Tell the user where to open a pull request for a submitted post, and open
    it in a browser if `browse_pr` is set. Returns the pull request URL.
    """
    remote_link = get_remote_link(repo)
    if remote_link is None:
        raise RemoteError("Appears to have no remote repository; cannot submit")

    pr_url = compare_url(remote_link, path)

    log.message(
        "You've pushed the post to the %s branch, you can now submit a PR for review at %s",
        post_branch(path),
        pr_url,
    )

    if browse_pr:
        log.info("Opening URL in browser: %s", pr_url)
        webbrowser.open(pr_url)

    return pr_url


def direct_submit(repo: Path, path: str, main_branch: Optional[str] = None) -> None:
    """
    Merge a post's branch straight into the main branch and push it, skipping
    review entirely. The knowledge repo tool doesn't support this, so it only
    works with push rights to the main branch and a clean working copy.
    """
    main_branch = main_branch or global_settings().main_branch
    remote = git_remote_name(repo)
    if not remote:
        raise RemoteError("Appears to have no remote repository; cannot submit")

    branch = post_branch(path)
    log.warning("Submitting %s directly to %s, skipping review", branch, main_branch)

    git_run(repo, "checkout", main_branch)
    git_run(repo, "merge", branch)
    git_run(repo, "push", remote, main_branch)

    log.message("Merged %s into %s and pushed to %s", branch, main_branch, remote)


## Tests


def test_remote_link_from_url():
    hosts = ("github.com",)
    assert remote_link_from_url("git@github.com:org/repo.git", hosts) == "https://github.com/org/repo"
    assert (
        remote_link_from_url("https://github.com/org/repo.git", hosts)
        == "https://github.com/org/repo"
    )
    assert (
        remote_link_from_url("ssh://git@github.com/org/repo.git", hosts)
        == "https://github.com/org/repo"
    )
    for bad_url in ["https://github.com/org/repo", "git@gitlab.com:org/repo.git", ""]:
        try:
            remote_link_from_url(bad_url, hosts)
            assert False, bad_url
        except RemoteError as e:
            assert "GitHub remote" in str(e)


def test_compare_url():
    remote_link = remote_link_from_url("git@github.com:org/repo.git", ("github.com",))
    assert (
        compare_url(remote_link, "examples/test")
        == "https://github.com/org/repo/compare/examples/test.kp?expand=1"
    )

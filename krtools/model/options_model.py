"""
Explicit options for each knowledge repo operation. Every flag the external tool
accepts for a subcommand is a field here.

Flags are tri-state: `None` (absent, the tool's default applies), `False`
(explicitly off) or a value. Absent and off both omit the flag from the
command line.
"""

from dataclasses import fields
from pathlib import Path
from typing import ClassVar, Dict, List, Optional, Tuple

from pydantic.dataclasses import dataclass

from krtools.exec.command_line import Options, OptionValue


POST_FORMATS = {
    "rmd": "Rmd",
    "ipynb": "ipynb",
    "md": "md",
}
"""Post formats the knowledge repo can create, keyed by lowercase extension."""

DEPLOY_ENGINES = ("flask", "gunicorn", "uwsgi")


class KrOptions:
    """
    Base for operation options.
    """

    cli_args: ClassVar[Tuple[str, ...]] = ()
    """Fields that are filled from positional command line args, in order."""

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]  # type: ignore

    def as_options(self, *names: str) -> Options:
        """
        The named fields as tool options, in the given order.
        """
        return {name: getattr(self, name) for name in names}


@dataclass
class GlobalOptions(KrOptions):
    """
    Global flags accepted by every knowledge repo subcommand.
    """

    repo: Optional[Path] = None
    """Path to the knowledge repository."""

    dev: Optional[bool] = None
    """Skip passing control to the version of the tooling checked out in the repository."""

    debug: Optional[bool] = None
    """Enable debug mode."""

    noupdate: Optional[bool] = None
    """Don't update the repository before performing actions."""

    version: Optional[bool] = None
    """Show version and exit."""

    help: Optional[bool] = None
    """Show help and exit."""

    def to_options(self) -> Options:
        repo: OptionValue = str(self.repo) if self.repo is not None else None
        return {
            "repo": repo,
            "dev": self.dev,
            "debug": self.debug,
            "noupdate": self.noupdate,
            "version": self.version,
            "help": self.help,
        }

    @property
    def needs_repo(self) -> bool:
        return not (self.version or self.help)


@dataclass
class CreateOptions(KrOptions):
    """
    Create a new post from the built-in template.
    """

    cli_args: ClassVar[Tuple[str, ...]] = ("filename",)

    filename: str
    """Where the new post file should be created."""

    format: Optional[str] = None
    """One of `Rmd`, `ipynb` or `md`. By default, taken from the filename extension."""

    template: Optional[str] = None
    """A template to create the post from."""


@dataclass
class AddOptions(KrOptions):
    """
    Add a post to the knowledge repository.
    """

    cli_args: ClassVar[Tuple[str, ...]] = ("filename",)

    filename: str
    """The post file to add."""

    message: Optional[str] = None
    """Commit message. Defaults to one built from the post title."""

    branch: Optional[str] = None
    """Branch to use, if not the default (the path of the post)."""

    src: Optional[str] = None
    """An additional source file to add to `<knowledge_post>/orig_src`."""

    update: Optional[bool] = None
    """Update an existing post of the same name."""

    squash: Optional[bool] = None
    """Replace all previous commits with this version."""

    submit: Optional[bool] = None
    """Submit the post for review after adding it."""

    path: Optional[str] = None
    """Destination path in the repository. Required if the post header has no `path`."""

    browse_pr: bool = False
    """After submitting, open the pull request page in a browser."""


@dataclass
class InitOptions(KrOptions):
    """
    Initialize a new knowledge repository.
    """

    cli_args: ClassVar[Tuple[str, ...]] = ("repo",)

    repo: Optional[Path] = None
    """Folder of the repository to create. Defaults to the global `repo`."""

    tooling_embed: Optional[bool] = None
    """Embed a reference version of the knowledge_repo tooling in the repository."""

    tooling_repo: Optional[str] = None
    """The tooling repository to use, if not the default."""

    tooling_branch: Optional[str] = None
    """The branch to use when embedding the tooling as a submodule."""


@dataclass
class SubmitOptions(KrOptions):
    """
    Submit a post for review.
    """

    cli_args: ClassVar[Tuple[str, ...]] = ("path",)

    path: str
    """The path of the post to submit."""

    browse_pr: bool = False
    """Open the pull request page in a browser after submitting."""

    direct: bool = False
    """
    Merge the post branch straight into the main branch and push, skipping review.
    Only works with push rights to the main branch.
    """


@dataclass
class StatusOptions(KrOptions):
    """
    Show the status of the knowledge repository.
    """


@dataclass
class PreviewOptions(KrOptions):
    """
    Preview a post on a local server.
    """

    cli_args: ClassVar[Tuple[str, ...]] = ("path",)

    path: str
    """The path of the post to preview."""

    port: Optional[int] = None
    """Port for the web server."""

    dburi: Optional[str] = None
    """The SQLAlchemy database URI."""

    config: Optional[str] = None
    """Server configuration file."""


@dataclass
class DeployOptions(KrOptions):
    """
    Deploy a server for the knowledge repository.
    """

    port: Optional[int] = None
    """Port for the web server."""

    dburi: Optional[str] = None
    """The SQLAlchemy database URI."""

    workers: Optional[int] = None
    """Number of gunicorn worker threads."""

    timeout: Optional[int] = None
    """Timeout in seconds for the gunicorn web server."""

    config: Optional[str] = None
    """Server configuration file."""

    engine: Optional[str] = None
    """Server engine: `flask`, `gunicorn` (the tool's default) or `uwsgi`."""


@dataclass
class RunserverOptions(KrOptions):
    """
    Run a development server for the knowledge repository.
    """

    port: Optional[int] = None
    """Port for the web server."""

    dburi: Optional[str] = None
    """The SQLAlchemy database URI."""

    config: Optional[str] = None
    """Server configuration file."""


@dataclass
class RawCommandOptions(KrOptions):
    """
    Any knowledge repo subcommand, with arbitrary args and options.
    """

    subcommand: str
    args: List[str]
    options: Dict[str, OptionValue]

"""
Operations wrapping the knowledge repo command line. Each takes its own options
and a `KrContext`, runs at most one `knowledge_repo` process, and returns that
process's exit status.
"""

from dataclasses import replace
from pathlib import Path
from typing import Optional

from krtools.commands.command_registry import kr_command
from krtools.config.logger import get_logger
from krtools.errors import FileFormatError, FileNotFound, InvalidParam, UnrecognizedFileFormat
from krtools.exec.kr_dispatch import KrContext, kr_run, require_repo
from krtools.model.options_model import (
    AddOptions,
    CreateOptions,
    DEPLOY_ENGINES,
    DeployOptions,
    InitOptions,
    POST_FORMATS,
    PreviewOptions,
    RawCommandOptions,
    RunserverOptions,
    StatusOptions,
    SubmitOptions,
)
from krtools.posts.post_header import read_post_header
from krtools.posts.submission import after_submit, direct_submit

log = get_logger(__name__)


def post_format(filename: str, format: Optional[str] = None) -> str:
    """
    Canonical post format, from `format` if given or else the filename extension.
    Case insensitive.
    """
    if format is not None:
        canonical = POST_FORMATS.get(format.strip().lower())
        if not canonical:
            raise UnrecognizedFileFormat(f"Format '{format}' not recognized")
        return canonical

    ext = Path(filename).suffix.lstrip(".")
    canonical = POST_FORMATS.get(ext.lower())
    if not canonical:
        raise UnrecognizedFileFormat(f"Extension '{ext}' not recognized")
    return canonical


def default_commit_message(filename: str, title: Optional[str]) -> str:
    if title:
        return f"Adding post: {title}"
    log.warning("No title found in the header of %s; using a generic commit message", filename)
    return f"Adding {filename}"


@kr_command(CreateOptions)
def create(opts: CreateOptions, ctx: KrContext) -> int:
    """
    Create a new post from the built-in template, as R Markdown, a notebook
    or Markdown. The format defaults to the one matching the filename extension.
    """
    format = post_format(opts.filename, opts.format)
    return kr_run(ctx, "create", opts.as_options("template"), [format, opts.filename])


@kr_command(AddOptions)
def add(opts: AddOptions, ctx: KrContext) -> int:
    """
    Add a post to the knowledge repository. Without a message, the commit message
    is built from the post's title. With `submit`, also prints the pull request
    link (and opens it with `browse_pr`).
    """
    message = opts.message
    path = opts.path
    if message is None or (path is None and opts.submit):
        title = None
        # knowledge_repo reports a missing or broken post itself.
        try:
            header = read_post_header(opts.filename)
            title = header.title
            path = path or header.path
        except (FileNotFound, FileFormatError) as e:
            log.warning("Could not read the header of %s: %s", opts.filename, e)
        if message is None:
            message = default_commit_message(opts.filename, title)

    options = opts.as_options("branch", "src", "update", "squash", "submit", "path")
    result = kr_run(ctx, "add", {"message": message, **options}, [opts.filename])

    if result == 0 and opts.submit:
        if path:
            after_submit(require_repo(ctx.global_options), path, opts.browse_pr)
        else:
            log.warning("No post path known for %s; can't link to a pull request", opts.filename)
    return result


@kr_command(InitOptions)
def init(opts: InitOptions, ctx: KrContext) -> int:
    """
    Initialize a new knowledge repository.
    """
    if opts.repo is not None:
        ctx = replace(ctx, global_options=replace(ctx.global_options, repo=opts.repo))
    return kr_run(
        ctx, "init", opts.as_options("tooling_embed", "tooling_repo", "tooling_branch")
    )


@kr_command(SubmitOptions)
def submit(opts: SubmitOptions, ctx: KrContext) -> int:
    """
    Submit a post for review, after adding it. Prints the pull request link (and
    opens it with `browse_pr`). With `direct`, merges and pushes straight to
    the main branch instead, without review.
    """
    repo = require_repo(ctx.global_options)
    if opts.direct:
        direct_submit(repo, opts.path)
        return 0

    result = kr_run(ctx, "submit", args=[opts.path])
    if result == 0:
        after_submit(repo, opts.path, opts.browse_pr)
    return result


@kr_command(StatusOptions)
def status(opts: StatusOptions, ctx: KrContext) -> int:
    """
    Show the status of the knowledge repository.
    """
    return kr_run(ctx, "status")


@kr_command(PreviewOptions)
def preview(opts: PreviewOptions, ctx: KrContext) -> int:
    """
    Preview a post on a local web server.
    """
    return kr_run(ctx, "preview", opts.as_options("port", "dburi", "config"), [opts.path])


@kr_command(DeployOptions)
def deploy(opts: DeployOptions, ctx: KrContext) -> int:
    """
    Deploy a web server for the knowledge repository.
    """
    if opts.engine is not None and opts.engine not in DEPLOY_ENGINES:
        raise InvalidParam("engine", f"expected one of {', '.join(DEPLOY_ENGINES)}")
    return kr_run(
        ctx,
        "deploy",
        opts.as_options("port", "dburi", "workers", "timeout", "config", "engine"),
    )


@kr_command(RunserverOptions)
def runserver(opts: RunserverOptions, ctx: KrContext) -> int:
    """
    Run a development web server for the knowledge repository.
    """
    return kr_run(ctx, "runserver", opts.as_options("port", "dburi", "config"))


@kr_command(RawCommandOptions)
def command(opts: RawCommandOptions, ctx: KrContext) -> int:
    """
    Run any knowledge repo subcommand. Positional args are passed in order and
    options become `--name value` flags (or `--name` for flags).
    """
    return kr_run(ctx, opts.subcommand or None, opts.options, opts.args)

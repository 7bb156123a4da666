from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from krtools.config.logger import get_logger
from krtools.config.settings import global_settings
from krtools.errors import ConfigError
from krtools.exec.command_line import CommandLine, Options
from krtools.exec.process_runner import ProcessRunner, ShellRunner
from krtools.model.options_model import GlobalOptions

log = get_logger(__name__)


@dataclass
class KrContext:
    """
    Everything an operation needs besides its own options: the global flags
    (including the already resolved repository path), the process runner and
    whether to log each command line.
    """

    global_options: GlobalOptions = field(default_factory=GlobalOptions)
    runner: ProcessRunner = field(default_factory=ShellRunner)
    verbose: bool = True


def require_repo(global_options: GlobalOptions) -> Path:
    """
    The repository path, or a `ConfigError` if there is none.
    """
    if global_options.repo is None:
        raise ConfigError(
            f"No knowledge repository given: pass `repo` or set "
            f"the {global_settings().repo_env_var} environment variable"
        )
    return global_options.repo


def kr_command_line(
    global_options: GlobalOptions,
    subcommand: Optional[str],
    options: Optional[Options] = None,
    args: Sequence[str] = (),
) -> CommandLine:
    return CommandLine(
        tool=global_settings().tool_name,
        global_options=global_options.to_options(),
        subcommand=subcommand,
        options=dict(options or {}),
        args=[str(arg) for arg in args],
    )


def kr_dispatch(command: CommandLine, ctx: KrContext) -> int:
    """
    Run one command, logging it first if `ctx.verbose` is set. Returns the exit
    status of the external process unchanged.
    """
    if ctx.verbose:
        log.message("Running '%s'", command.shell_str())
    else:
        log.info("Running '%s'", command.shell_str())

    status = ctx.runner.run(command)
    if status != 0:
        log.info("Command exited with status %s: %s", status, command.argv())
    return status


def kr_run(
    ctx: KrContext,
    subcommand: Optional[str],
    options: Optional[Options] = None,
    args: Sequence[str] = (),
) -> int:
    """
    Build and run a knowledge repo command. Fails with a `ConfigError` before
    anything runs if no repository is set (unless only asking for help or version).
    """
    asks_help = bool(options and options.get("help") is True)
    if ctx.global_options.needs_repo and not asks_help:
        require_repo(ctx.global_options)

    command = kr_command_line(ctx.global_options, subcommand, options, args)
    return kr_dispatch(command, ctx)

"""
Command line entry point. This is the only place the environment is consulted
for the default repository path; operations get it passed in explicitly.

Usage: krtools <command> [args] [--option=value] [--flag]
"""

import sys
from dataclasses import fields, replace
from typing import List, Optional

import pydantic
from rich import print as rprint
from rich.markup import escape

from krtools.commands import kr_commands  # noqa: F401
from krtools.commands.command_registry import all_commands, KrCommand, look_up_command
from krtools.config.logger import get_logger, logging_setup
from krtools.config.settings import (
    APP_NAME,
    global_settings,
    LogLevel,
    repo_from_env,
    update_global_settings,
)
from krtools.config.setup import setup
from krtools.config.text_styles import COLOR_EMPH, COLOR_HINT
from krtools.errors import InvalidInput, InvalidParam
from krtools.exec.kr_dispatch import KrContext, kr_run
from krtools.exec.process_runner import ProcessRunner, ShellRunner
from krtools.model.options_model import GlobalOptions, KrOptions, RawCommandOptions
from krtools.shell_tools.exception_printing import wrap_with_exception_printing
from krtools.util.parse_shell_args import parse_shell_args, ShellArgs
from krtools.version import get_version

log = get_logger(__name__)

GLOBAL_FLAGS = ("repo", "dev", "debug", "noupdate", "version")

QUIET_FLAG = "quiet"

LOG_LEVEL_FLAG = "log_level"

LOCAL_FLAGS = (QUIET_FLAG, LOG_LEVEL_FLAG)


def print_help():
    rprint(f"[{COLOR_EMPH}]{APP_NAME}[/{COLOR_EMPH}]: run {global_settings().tool_name} commands")
    usage = escape(f"Usage: {APP_NAME} <command> [args] [--option=value] [--flag]")
    rprint(f"[{COLOR_HINT}]{usage}[/{COLOR_HINT}]")
    rprint()
    for name, cmd in all_commands().items():
        args = " ".join(f"<{arg}>" for arg in cmd.options_class.cli_args)
        opts = " ".join(
            f"--{f.name.replace('_', '-')}"
            for f in fields(cmd.options_class)  # type: ignore
            if f.name not in cmd.options_class.cli_args
        )
        if cmd.options_class is RawCommandOptions:
            args, opts = "<subcommand> [args]", "[--option=value]..."
        rprint(f"[{COLOR_EMPH}]{name}[/{COLOR_EMPH}] {escape(args)} {escape(opts)}".rstrip())
        rprint(f"    {escape(' '.join(cmd.description.split()))}")
        rprint()
    rprint(
        f"Global options: {' '.join('--' + flag for flag in GLOBAL_FLAGS)} --help --{QUIET_FLAG} "
        "--log-level=<level>"
    )
    rprint(f"The repository defaults to ${global_settings().repo_env_var}.")


def build_global_options(shell_args: ShellArgs) -> GlobalOptions:
    global_kwargs = {
        key: shell_args.options[key] for key in GLOBAL_FLAGS if key in shell_args.options
    }
    if not global_kwargs.get("repo"):
        global_kwargs["repo"] = repo_from_env()
    try:
        return GlobalOptions(**global_kwargs)
    except pydantic.ValidationError as e:
        raise InvalidInput(f"Invalid global options: {e}") from e


def build_options(cmd: KrCommand, shell_args: ShellArgs) -> KrOptions:
    """
    Fill a command's options from command line args. Positional args map to
    the options' `cli_args` fields in order.
    """
    args = shell_args.args[1:]
    options = {
        key: value
        for key, value in shell_args.options.items()
        if key not in GLOBAL_FLAGS and key not in LOCAL_FLAGS
    }

    if cmd.options_class is RawCommandOptions:
        return RawCommandOptions(
            subcommand=args[0] if args else "", args=args[1:], options=dict(options)
        )

    cli_args = cmd.options_class.cli_args
    if len(args) > len(cli_args):
        raise InvalidInput(f"Too many arguments for `{cmd.name}`: {args[len(cli_args):]}")
    field_names = cmd.options_class.field_names()
    for key in options:
        if key not in field_names:
            raise InvalidParam(key, f"not an option for `{cmd.name}`")

    kwargs = {**dict(zip(cli_args, args)), **options}
    try:
        return cmd.options_class(**kwargs)  # type: ignore
    except pydantic.ValidationError as e:
        raise InvalidInput(f"Invalid arguments for `{cmd.name}`: {e}") from e


def set_console_log_level(level_str: str):
    try:
        level = LogLevel.parse(level_str)
    except ValueError as e:
        raise InvalidParam(LOG_LEVEL_FLAG, str(e)) from e
    with update_global_settings() as settings:
        settings.console_log_level = level
    logging_setup()


def command_help(cmd: KrCommand, shell_args: ShellArgs, ctx: KrContext) -> int:
    """
    Show knowledge_repo's own help for a command, as `<subcommand> --help`. The
    command's other args aren't validated.
    """
    subcommand: Optional[str] = cmd.name
    if cmd.options_class is RawCommandOptions:
        subcommand = shell_args.args[1] if len(shell_args.args) > 1 else None
    if subcommand is None:
        ctx = replace(ctx, global_options=replace(ctx.global_options, help=True))
        return kr_run(ctx, None)
    return kr_run(ctx, subcommand, {"help": True})


def run_command(argv: List[str], runner: Optional[ProcessRunner] = None) -> int:
    shell_args = parse_shell_args(argv)

    if not shell_args.args:
        if shell_args.options == {"version": True}:
            rprint(f"{APP_NAME} {get_version()}")
        elif shell_args.options:
            raise InvalidInput(f"Missing command (see `{APP_NAME} --help`)")
        else:
            print_help()
        return 0

    if shell_args.options.get(LOG_LEVEL_FLAG):
        set_console_log_level(str(shell_args.options[LOG_LEVEL_FLAG]))

    cmd = look_up_command(shell_args.args[0])
    ctx = KrContext(
        global_options=build_global_options(shell_args),
        runner=runner or ShellRunner(),
        verbose=shell_args.options.get(QUIET_FLAG) is not True,
    )
    if shell_args.show_help:
        return command_help(cmd, shell_args, ctx)
    return cmd.func(build_options(cmd, shell_args), ctx)


def main():
    setup()
    status = wrap_with_exception_printing(run_command)(sys.argv[1:])
    sys.exit(1 if status is None else status)


if __name__ == "__main__":
    main()

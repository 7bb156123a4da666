"""
Tiny parsing library for parsing shell arguments and quoting values for the
shell, using simplified conventions for options (`--key=value` or `--flag`).
"""

import ast
import re
from dataclasses import dataclass
from typing import Dict, List, Tuple

# Same unsafe chars as shlex.quote(), but also allowing `~`.
_shell_unsafe_re = re.compile(r"[^\w@%+=:,./~-]", re.ASCII)


def shell_quote(arg: str, always: bool = False) -> str:
    """
    Quote a string for POSIX shell usage. Simple words without special characters
    are left unquoted unless `always` is set. Single quotes are used, with any
    embedded single quotes written as `'"'"'`, so the result is always safe
    for `sh -c`.
    """
    if arg and not always and not _shell_unsafe_re.search(arg):
        return arg
    return "'" + arg.replace("'", "'\"'\"'") + "'"


def shell_unquote(arg: str) -> str:
    """
    Unquote a string using Python conventions, but allow unquoted strings to
    pass through.

    Note this is Pythonic style so *not* as complex as shlex.unquote().
    """
    if len(arg) >= 2 and arg.startswith(("'", '"')) and arg.endswith(arg[0]):
        try:
            return ast.literal_eval(arg)
        except (SyntaxError, ValueError):
            pass
    return arg


StrBoolOptions = Dict[str, str | bool]
"""
A dict of options, where keys are option names and values are either strings or
boolean flags.
"""


def parse_option(key_value_str: str) -> Tuple[str, str | bool]:
    """
    Parse a key-value string like `--foo=123` or `--bar="some value"` into a `(key, value)`
    tuple. Hyphens in the key become underscores.
    """
    # Allow -foo or --foo.
    key_value_str = key_value_str.lstrip("-")
    key, sep, value_str = key_value_str.partition("=")
    key = key.strip().replace("-", "_")
    value_str = value_str.strip()
    if sep:
        value: str | bool = shell_unquote(value_str)
    else:
        value = True

    return key, value


@dataclass(frozen=True)
class ShellArgs:
    """
    Immutable record of parsed command line arguments and options.
    """

    args: List[str]
    options: StrBoolOptions
    show_help: bool = False


def parse_shell_args(args_and_opts: List[str]) -> ShellArgs:
    """
    Parse pre-split raw shell input arguments into plain args and options
    (shell arguments starting with `-`).

    All plain args are strings. All options are string values (if they have
    a value) or boolean flags with a True value (indicating they were
    present on the command line with no value provided).

    ["foo", "--opt1", "--opt2='bar baz'"]
      -> ShellArgs(args=["foo"], options={"opt1": True, "opt2": "bar baz"}, show_help=False)

    ["foo", "--help"]
      -> ShellArgs(args=["foo"], options={}, show_help=True)

    A bare `--` ends option parsing, so later args may start with `-`.
    """
    args: List[str] = []
    options: StrBoolOptions = {}
    show_help: bool = False

    i = 0
    while i < len(args_and_opts):
        token = args_and_opts[i]
        if token == "--":
            args.extend(args_and_opts[i + 1 :])
            break
        elif token.startswith("-") and token != "-":
            key, value = parse_option(token)
            if key == "help":
                show_help = True
            else:
                options[key] = value
        else:
            args.append(token)
        i += 1

    return ShellArgs(args=args, options=options, show_help=show_help)


## Tests


def test_shell_quote():
    assert shell_quote("simple") == "simple"
    assert shell_quote("ex/test") == "ex/test"
    assert shell_quote("ex/test", always=True) == "'ex/test'"
    assert shell_quote("two words") == "'two words'"
    assert shell_quote("") == "''"
    assert shell_quote("it's") == "'it'\"'\"'s'"


def test_parse_shell_args():
    args = [
        "pos1",
        "pos2",
        "--key1=value1",
        "--key2",
        "pos3",
        "-k3=value3",
        "--key4='two words'",
        "--tooling-embed",
        "--empty=",
        "--help",
    ]
    shell_args = parse_shell_args(args)

    assert shell_args.args == [
        "pos1",
        "pos2",
        "pos3",
    ]
    assert shell_args.options == {
        "key1": "value1",
        "key2": True,
        "k3": "value3",
        "key4": "two words",
        "tooling_embed": True,
        "empty": "",
    }
    assert shell_args.show_help == True


def test_parse_shell_args_double_dash():
    shell_args = parse_shell_args(["submit", "--", "-odd/path"])
    assert shell_args.args == ["submit", "-odd/path"]
    assert shell_args.options == {}

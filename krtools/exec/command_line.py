"""
Serialization of knowledge repo invocations into argument lists and shell strings.

Rules for named options:
- `None` (absent) and `False` values are dropped entirely.
- `True` values become a bare flag, `--name`.
- Any other value becomes `--name value`.
- Underscores in names become hyphens, so `tooling_embed` is `--tooling-embed`.

Values (named and positional) are always single-quoted in the shell string.
Positional args always follow all named flags.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, Union

from krtools.util.parse_shell_args import shell_quote

OptionValue = Union[bool, int, str, None]
"""
Value of a named option. `None` means absent and `False` means explicitly off;
both omit the flag.
"""

Options = Dict[str, OptionValue]


def flag_name(name: str) -> str:
    return "--" + name.replace("_", "-")


def option_tokens(options: Options) -> List[Tuple[str, bool]]:
    """
    Tokens for named options, in order, each paired with whether it is a value
    (and so should be quoted).
    """
    tokens: List[Tuple[str, bool]] = []
    for name, value in options.items():
        if value is None or value is False:
            continue
        tokens.append((flag_name(name), False))
        if value is not True:
            tokens.append((str(value), True))
    return tokens


@dataclass(frozen=True)
class CommandLine:
    """
    A single invocation of the external tool:

    `<tool> [global flags] [subcommand] [--flag [value]]... [positional]...`
    """

    tool: str
    global_options: Options = field(default_factory=dict)
    subcommand: Optional[str] = None
    options: Options = field(default_factory=dict)
    args: List[str] = field(default_factory=list)

    def _tokens(self) -> Iterable[Tuple[str, bool]]:
        yield self.tool, False
        yield from option_tokens(self.global_options)
        if self.subcommand:
            yield self.subcommand, False
        yield from option_tokens(self.options)
        for arg in self.args:
            yield str(arg), True

    def argv(self) -> List[str]:
        """
        Raw argument list, unquoted.
        """
        return [token for token, _ in self._tokens()]

    def shell_str(self) -> str:
        """
        The command as a single string for the system shell.
        """
        return " ".join(
            shell_quote(token, always=is_value) for token, is_value in self._tokens()
        )

    def __str__(self) -> str:
        return self.shell_str()


## Tests


def test_empty_command():
    command = CommandLine("knowledge_repo")
    assert command.argv() == ["knowledge_repo"]
    assert command.shell_str() == "knowledge_repo"


def test_flag_rules():
    command = CommandLine(
        "knowledge_repo",
        subcommand="init",
        options={
            "tooling_embed": True,
            "tooling_repo": None,
            "tooling_branch": False,
            "port": 0,
            "message": "",
        },
    )
    assert command.argv() == [
        "knowledge_repo",
        "init",
        "--tooling-embed",
        "--port",
        "0",
        "--message",
        "",
    ]
    assert command.shell_str() == "knowledge_repo init --tooling-embed --port '0' --message ''"


def test_positional_args_after_flags():
    command = CommandLine(
        "knowledge_repo",
        global_options={"repo": "/tmp/my repo", "noupdate": True, "dev": False},
        subcommand="add",
        options={"path": "ex/test"},
        args=["test.Rmd"],
    )
    assert command.shell_str() == (
        "knowledge_repo --repo '/tmp/my repo' --noupdate add --path 'ex/test' 'test.Rmd'"
    )
    assert command.shell_str().endswith("--path 'ex/test' 'test.Rmd'")


def test_quotes_in_values():
    command = CommandLine("knowledge_repo", subcommand="add", options={"message": "Bob's post"})
    assert command.argv()[-1] == "Bob's post"
    assert command.shell_str() == "knowledge_repo add --message 'Bob'\"'\"'s post'"

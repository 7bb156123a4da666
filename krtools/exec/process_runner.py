"""
Process execution for knowledge repo commands. Anything with a `run()` that takes
a `CommandLine` and returns an exit status can stand in for the real shell.
"""

import subprocess
from typing import List, Protocol

from krtools.exec.command_line import CommandLine


class ProcessRunner(Protocol):
    def run(self, command: CommandLine) -> int: ...


class ShellRunner:
    """
    Runs the command through the system shell, inheriting stdout and stderr.
    Blocks until the command exits. No timeout.
    """

    def run(self, command: CommandLine) -> int:
        result = subprocess.run(command.shell_str(), shell=True)
        return result.returncode


class RecordingRunner:
    """
    Records commands instead of running them. Returns a fixed exit status.
    """

    def __init__(self, returncode: int = 0):
        self.returncode = returncode
        self.commands: List[CommandLine] = []

    def run(self, command: CommandLine) -> int:
        self.commands.append(command)
        return self.returncode

    @property
    def last(self) -> CommandLine:
        return self.commands[-1]


## Tests


def test_shell_runner_status():
    runner = ShellRunner()
    assert runner.run(CommandLine("true")) == 0
    assert runner.run(CommandLine("sh", args=["-c", "exit 3"])) == 3


def test_recording_runner():
    runner = RecordingRunner(returncode=2)
    command = CommandLine("knowledge_repo", subcommand="status")
    assert runner.run(command) == 2
    assert runner.commands == [command]
    assert runner.last.argv() == ["knowledge_repo", "status"]

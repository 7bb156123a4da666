from dataclasses import dataclass
from typing import Callable, Dict, Type

from krtools.errors import InvalidCommand
from krtools.exec.kr_dispatch import KrContext
from krtools.model.options_model import KrOptions

CommandFunction = Callable[[KrOptions, KrContext], int]


@dataclass(frozen=True)
class KrCommand:
    name: str
    func: CommandFunction
    options_class: Type[KrOptions]

    @property
    def description(self) -> str:
        return (self.func.__doc__ or "").strip()


_commands: Dict[str, KrCommand] = {}


def kr_command(options_class: Type[KrOptions]) -> Callable[[CommandFunction], CommandFunction]:
    """
    Register an operation under its function name, along with the options it takes.
    """

    def decorator(func: CommandFunction) -> CommandFunction:
        _commands[func.__name__] = KrCommand(func.__name__, func, options_class)
        return func

    return decorator


def all_commands() -> Dict[str, KrCommand]:
    """
    All commands, sorted by name.
    """
    return dict(sorted(_commands.items()))


def look_up_command(name: str) -> KrCommand:
    cmd = _commands.get(name)
    if not cmd:
        raise InvalidCommand(f"Command `{name}` not found")
    return cmd

"""
Unified hierarchy of error types. These inherit from standard errors like
ValueError and FileNotFoundError but are more fine-grained.
"""

from typing import Tuple, Type


class KrRuntimeError(ValueError):
    """Base class for krtools runtime errors."""

    pass


class SelfExplanatoryError(KrRuntimeError):
    """Common errors that arise from 'normal' problems that are largely self-explanatory,
    i.e., no stack trace should be necessary when reporting to the user."""

    pass


class InvalidInput(SelfExplanatoryError):
    """Raised when the wrong kind of input is given to a command."""

    pass


class InvalidParam(InvalidInput):
    """Raised when a parameter is invalid."""

    def __init__(self, param_name: str, detail: str = ""):
        message = f"Invalid parameter: {repr(param_name)}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class InvalidCommand(InvalidInput):
    """Raised when a command is not valid."""

    pass


class FileNotFound(InvalidInput, FileNotFoundError):
    """Raised when a file is not found."""

    pass


class UnrecognizedFileFormat(InvalidInput):
    """Raised when a post file has an unrecognized format or extension."""

    pass


class FileFormatError(InvalidInput):
    """Raised when a post file's header can't be parsed."""

    pass


class InvalidState(SelfExplanatoryError):
    """Raised when the local repository is not in a valid state for an operation."""

    pass


class RemoteError(InvalidState):
    """Raised when the repository has no remote or the remote isn't a recognized host."""

    pass


class GitCommandError(InvalidState):
    """Raised when a git step of a direct submission fails."""

    pass


class SetupError(SelfExplanatoryError):
    """Raised when something in the environment isn't set up right."""

    pass


class ConfigError(SetupError):
    """Raised when required configuration, like the repository path, is missing."""

    pass


NONFATAL_EXCEPTIONS: Tuple[Type[Exception], ...] = (
    SelfExplanatoryError,
    FileNotFoundError,
    IOError,
)
"""Exceptions that are not fatal and usually don't merit a full stack trace."""


def is_fatal(exception: Exception) -> bool:
    for e in NONFATAL_EXCEPTIONS:
        if isinstance(exception, e):
            return False
    return True


## Tests


def test_is_fatal():
    assert not is_fatal(ConfigError("no repo"))
    assert not is_fatal(FileNotFound("missing.Rmd"))
    assert not is_fatal(FileNotFoundError("missing.Rmd"))
    assert is_fatal(KeyError("boom"))

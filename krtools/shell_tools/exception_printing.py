from typing import Callable, Optional, TypeVar

from krtools.config.logger import get_logger
from krtools.errors import is_fatal

log = get_logger(__name__)


def summarize_traceback(exception: Exception) -> str:
    exception_str = str(exception)
    lines = exception_str.splitlines()
    exc_type = type(exception).__name__
    return f"{exc_type}: " + "\n".join(
        [
            line
            for line in lines
            if line.strip()
            and not line.lstrip().startswith("Traceback")
            and not line.lstrip().startswith("The above exception")
            and not line.startswith("    ")
        ]
    )


R = TypeVar("R")


def wrap_with_exception_printing(func: Callable[..., R]) -> Callable[..., Optional[R]]:
    """
    Report non-fatal errors as a one-line summary and return None instead of
    raising. Anything else propagates with its full stack trace.
    """

    def command(*args, **kwargs) -> Optional[R]:
        try:
            log.info("Command function call: %s(%s)", func.__name__, args)
            return func(*args, **kwargs)
        except Exception as e:
            if is_fatal(e):
                raise
            log.error("Command error: %s", summarize_traceback(e))
            log.info("Command error details: %s", e, exc_info=True)
            return None

    command.__name__ = func.__name__
    command.__doc__ = func.__doc__
    command.__wrapped__ = func.__wrapped__ if hasattr(func, "__wrapped__") else func  # type: ignore
    return command


## Tests


def test_summarize_traceback():
    from krtools.errors import RemoteError

    summary = summarize_traceback(RemoteError("Appears to have no remote repository"))
    assert summary == "RemoteError: Appears to have no remote repository"


def test_wrap_with_exception_printing():
    from krtools.errors import ConfigError

    def fails():
        raise ConfigError("no repo")

    def fatal():
        raise KeyError("boom")

    assert wrap_with_exception_printing(fails)() is None
    assert wrap_with_exception_printing(lambda: 3)() == 3
    try:
        wrap_with_exception_printing(fatal)()
        assert False
    except KeyError:
        pass

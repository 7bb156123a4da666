import os
import threading
from contextlib import contextmanager
from enum import Enum
from logging import DEBUG, ERROR, INFO, WARNING
from pathlib import Path
from typing import Optional, Tuple

from pydantic.dataclasses import dataclass


APP_NAME = "krtools"

DOT_DIR = ".krtools"

KR_TOOL_NAME = "knowledge_repo"
"""The external command line tool all operations are forwarded to."""

KR_REPO_ENV_VAR = "KNOWLEDGE_REPO"
"""Environment variable holding the default knowledge repository path."""

DEFAULT_MAIN_BRANCH = "master"

DEFAULT_REMOTE_HOSTS = ("github.com",)


class LogLevel(Enum):
    debug = DEBUG
    info = INFO
    warning = WARNING
    message = WARNING  # Same as warning, just for important console messages.
    error = ERROR

    @classmethod
    def parse(cls, level_str: str):
        canon_name = level_str.strip().lower()
        if canon_name == "warn":
            canon_name = "warning"
        try:
            return cls[canon_name]
        except KeyError:
            raise ValueError(
                f"Invalid log level: `{level_str}`. Valid options are: {', '.join(f'`{name}`' for name in cls.__members__)}"
            )

    def __str__(self):
        return self.name


@dataclass
class Settings:
    tool_name: str
    """Name of the knowledge repo executable."""

    repo_env_var: str
    """Environment variable consulted for the default repository path."""

    main_branch: str
    """Branch that direct submissions merge into and push."""

    remote_hosts: Tuple[str, ...]
    """Hosting domains recognized when building pull request links."""

    console_log_level: LogLevel
    """The log level for console-based logging."""

    file_log_level: LogLevel
    """The log level for file-based logging."""

    log_to_file: bool
    """If true, also log to a file in the `.krtools/logs` directory."""


# Initial default settings.
_settings = Settings(
    tool_name=KR_TOOL_NAME,
    repo_env_var=KR_REPO_ENV_VAR,
    main_branch=DEFAULT_MAIN_BRANCH,
    remote_hosts=DEFAULT_REMOTE_HOSTS,
    console_log_level=LogLevel.warning,
    file_log_level=LogLevel.info,
    log_to_file=False,
)


def global_settings() -> Settings:
    """
    Read access to global settings.
    """
    return _settings


_settings_lock = threading.RLock()


@contextmanager
def update_global_settings():
    """
    Context manager for thread-safe updates to global settings.
    """
    with _settings_lock:
        yield _settings


def repo_from_env() -> Optional[Path]:
    """
    Default repository path from the environment, if set. Only the CLI layer
    should call this; operations take the repo path explicitly.
    """
    value = os.environ.get(global_settings().repo_env_var, "").strip()
    if value:
        return Path(value).expanduser()
    return None


## Tests


def test_log_level_parse():
    assert LogLevel.parse("warn") == LogLevel.warning
    assert LogLevel.parse(" INFO ") == LogLevel.info
    try:
        LogLevel.parse("loud")
        assert False
    except ValueError as e:
        assert "loud" in str(e)

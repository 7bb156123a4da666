import logging
import os
from functools import cache
from logging import Formatter
from pathlib import Path
from typing import Optional

import rich
from rich import reconfigure
from rich.logging import RichHandler
from rich.theme import Theme

from krtools.config.settings import DOT_DIR, global_settings
from krtools.config.text_styles import EMOJI_ERROR, EMOJI_WARN, KrHighlighter, RICH_STYLES

LOG_DIR_NAME = f"{DOT_DIR}/logs"
LOG_FILE_NAME = "krtools.log"

_log_root = Path(".")


def log_dir() -> Path:
    return _log_root / LOG_DIR_NAME


def log_file_path() -> Path:
    return log_dir() / LOG_FILE_NAME


@cache
def get_highlighter():
    return KrHighlighter()


@cache
def get_theme():
    return Theme(RICH_STYLES)


reconfigure(theme=get_theme(), highlighter=get_highlighter())


_file_handler: Optional[logging.FileHandler] = None
_console_handler: Optional[RichHandler] = None


def logging_setup():
    """
    Set up or reset logging setup. Replaces all previous handlers on the root
    logger. Can be called again to reset with different settings.
    """
    global _file_handler, _console_handler

    settings = global_settings()

    # Important logging to console, verbose logging to file if enabled.
    _console_handler = RichHandler(
        console=rich.get_console(),
        level=settings.console_log_level.value,
        show_time=False,
        show_path=False,
        show_level=False,
        highlighter=get_highlighter(),
        markup=False,
    )
    _console_handler.setLevel(settings.console_log_level.value)
    _console_handler.setFormatter(Formatter("%(message)s"))

    _file_handler = None
    if settings.log_to_file:
        os.makedirs(log_dir(), exist_ok=True)
        _file_handler = logging.FileHandler(log_file_path())
        _file_handler.setLevel(settings.file_log_level.value)
        _file_handler.setFormatter(
            Formatter("%(asctime)s %(levelname).1s %(name)s - %(message)s")
        )

    root = logging.getLogger()
    root.setLevel(min(settings.console_log_level.value, settings.file_log_level.value))
    root.propagate = True
    # Remove any existing handlers.
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.addHandler(_console_handler)
    if _file_handler:
        root.addHandler(_file_handler)


def prefix(line, warn_emoji: str = ""):
    return " ".join(filter(None, [warn_emoji, str(line)]))


def prefix_args(args, warn_emoji: str = ""):
    if len(args) > 0:
        args = (prefix(args[0], warn_emoji),) + args[1:]
    return args


class CustomLogger:
    """
    Custom logger to be clearer about user messages vs warnings.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def debug(self, *args, **kwargs):
        self.logger.debug(*args, **kwargs)

    def info(self, *args, **kwargs):
        self.logger.info(*args, **kwargs)

    def message(self, *args, **kwargs):
        self.logger.warning(*args, **kwargs)

    def warning(self, *args, **kwargs):
        self.logger.warning(*prefix_args(args, warn_emoji=EMOJI_WARN), **kwargs)

    def error(self, *args, **kwargs):
        self.logger.error(*prefix_args(args, warn_emoji=EMOJI_ERROR), **kwargs)

    # Fallback for other attributes/methods.
    def __getattr__(self, attr):
        return getattr(self.logger, attr)


def get_logger(name: str):
    return CustomLogger(name)

from cachetools import cached
from dotenv import find_dotenv, load_dotenv

from krtools.config.logger import logging_setup


@cached(cache={})
def setup():
    """
    One-time setup of logging and environment. Idempotent.
    """

    logging_setup()

    env_setup()


def env_setup() -> str | None:
    """
    Load a `.env` file from the current directory or its parents, if there is one.
    This is how a default `KNOWLEDGE_REPO` can be set per project. Existing
    environment variables take precedence.
    """
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path)
    return dotenv_path

"""
Reading the metadata header of a knowledge post.

Markdown and R Markdown posts carry YAML front matter between `---` lines at the
top of the file. Notebook posts keep the same block at the top of their first cell.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from frontmatter_format import fmf_read
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from krtools.config.logger import get_logger
from krtools.errors import FileFormatError, FileNotFound

log = get_logger(__name__)

FM_DELIMITER = "---"


@dataclass(frozen=True)
class PostHeader:
    title: Optional[str] = None
    path: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_metadata(cls, metadata: Optional[Dict[str, Any]]) -> "PostHeader":
        metadata = metadata or {}

        def str_field(key: str) -> Optional[str]:
            value = metadata.get(key)
            return str(value).strip() or None if value is not None else None

        return cls(title=str_field("title"), path=str_field("path"), metadata=dict(metadata))


def _notebook_metadata(path: Path) -> Optional[Dict[str, Any]]:
    try:
        notebook = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise FileFormatError(f"Not a valid notebook: `{path}`: {e}") from e

    cells = notebook.get("cells") or []
    if not cells:
        return None
    source = cells[0].get("source", "")
    if isinstance(source, list):
        source = "".join(source)

    lines = source.strip().splitlines()
    if not lines or lines[0].strip() != FM_DELIMITER:
        return None
    try:
        end = next(i for i, line in enumerate(lines[1:], 1) if line.strip() == FM_DELIMITER)
    except StopIteration:
        raise FileFormatError(f"Delimiter `{FM_DELIMITER}` for end of header not found: `{path}`")

    try:
        metadata = YAML(typ="safe").load("\n".join(lines[1:end]))
    except YAMLError as e:
        raise FileFormatError(f"Error parsing notebook header: `{path}`: {e}") from e
    if metadata is not None and not isinstance(metadata, dict):
        raise FileFormatError(f"Invalid header type in `{path}`: {type(metadata).__name__}")
    return metadata


def read_post_header(filename: str | Path) -> PostHeader:
    """
    Read the header of a post file. Returns an empty header if the file has none.
    The file is read fresh on every call.
    """
    path = Path(filename)
    if not path.is_file():
        raise FileNotFound(f"Post file not found: `{path}`")

    if path.suffix.lower() == ".ipynb":
        metadata = _notebook_metadata(path)
    else:
        try:
            _content, metadata = fmf_read(path)
        except (YAMLError, ValueError) as e:
            raise FileFormatError(f"Error parsing post header: `{path}`: {e}") from e

    header = PostHeader.from_metadata(metadata)
    log.debug("Read post header from %s: title=%r path=%r", path, header.title, header.path)
    return header


## Tests


def test_header_from_markdown():
    import tempfile

    with tempfile.TemporaryDirectory() as tmp:
        post = Path(tmp) / "test.Rmd"
        post.write_text(
            "---\ntitle: My Post\npath: examples/test\ntags:\n  - r\n---\n\nBody text.\n"
        )
        header = read_post_header(post)
        assert header.title == "My Post"
        assert header.path == "examples/test"
        assert header.metadata["tags"] == ["r"]

        plain = Path(tmp) / "plain.md"
        plain.write_text("No header here.\n")
        assert read_post_header(plain) == PostHeader()


def test_header_from_notebook():
    import tempfile

    notebook = {
        "cells": [
            {
                "cell_type": "raw",
                "source": ["---\n", "title: Notebook Post\n", "path: nb/post\n", "---\n"],
            }
        ],
        "metadata": {},
        "nbformat": 4,
        "nbformat_minor": 2,
    }
    with tempfile.TemporaryDirectory() as tmp:
        post = Path(tmp) / "post.ipynb"
        post.write_text(json.dumps(notebook))
        header = read_post_header(post)
        assert header.title == "Notebook Post"
        assert header.path == "nb/post"


def test_header_missing_file():
    try:
        read_post_header("/nonexistent/post.Rmd")
        assert False
    except FileNotFound as e:
        assert "post.Rmd" in str(e)

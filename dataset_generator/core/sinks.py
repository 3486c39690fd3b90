"""
Output sinks for generated code.

A sink accepts the ordered lines of one generation call: kept in memory,
written to a file (all-or-nothing) or copied to the system clipboard.
"""

import os
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence, Union

import pyperclip

from ..logging_config import get_logger

logger = get_logger(__name__)

# Delphi reads source files without a byte order mark in the ANSI code page
DEFAULT_ENCODING = "utf-8-sig"


class SinkError(OSError):
    """The destination could not be written."""

    pass


def join_lines(lines: Sequence[str], line_ending: str = "\n") -> str:
    """Join lines with a terminating line ending (empty output stays empty)."""
    if not lines:
        return ""
    return line_ending.join(lines) + line_ending


class MemorySink:
    """Keeps the written lines."""

    def __init__(self):
        self.lines: List[str] = []

    def write(self, lines: Sequence[str]):
        self.lines = list(lines)

    @property
    def text(self) -> str:
        return join_lines(self.lines)


class FileSink:
    """
    Writes lines to a file, replacing any existing content.

    The text goes to a temporary file in the destination directory first and
    is moved into place only once fully written, so a failed write leaves the
    previous file untouched.
    """

    def __init__(
        self,
        path: Union[str, Path],
        line_ending: str = "\n",
        encoding: str = DEFAULT_ENCODING,
    ):
        self.path = Path(path)
        self.line_ending = line_ending
        self.encoding = encoding

    def write(self, lines: Sequence[str]):
        text = join_lines(lines, self.line_ending)
        temp_path: Optional[str] = None
        try:
            fd, temp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
            )
            with os.fdopen(fd, "w", encoding=self.encoding, newline="") as f:
                f.write(text)
            os.replace(temp_path, self.path)
            temp_path = None
        except (OSError, UnicodeEncodeError) as e:
            logger.error("Failed to write %s: %s", self.path, e)
            raise SinkError(f"Cannot write to {self.path}: {e}") from e
        finally:
            if temp_path is not None and os.path.exists(temp_path):
                os.unlink(temp_path)
        logger.info("Wrote %d lines to %s", len(lines), self.path)


class ClipboardSink:
    """Copies the text to the system clipboard."""

    def __init__(self, line_ending: str = "\n"):
        self.line_ending = line_ending

    def write(self, lines: Sequence[str]):
        try:
            pyperclip.copy(join_lines(lines, self.line_ending))
        except pyperclip.PyperclipException as e:
            logger.error("Clipboard unavailable: %s", e)
            raise SinkError(f"Cannot copy to clipboard: {e}") from e
        logger.info("Copied %d lines to clipboard", len(lines))

"""Helpers for reading study material from disk or stdin."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Sequence, TextIO

__all__ = [
    "STDIN_MARKER",
    "read_text_file",
    "read_sources",
]

STDIN_MARKER = "-"


def read_text_file(path: Path) -> str:
    """Read a text file as UTF-8 with replacement for decode errors."""
    with Path(path).open("r", encoding="utf-8", errors="replace") as fh:
        return fh.read()


def read_sources(
    paths: Sequence[str | Path],
    *,
    stdin: TextIO | None = None,
) -> str:
    """Concatenate study text from ``paths`` in the order given.

    ``-`` reads from ``stdin`` (defaults to ``sys.stdin``). Directories are
    rejected; missing files raise :class:`FileNotFoundError`. Blank sources are
    skipped and the remaining texts are joined with a blank line.
    """
    parts: List[str] = []
    for raw in paths:
        if str(raw) == STDIN_MARKER:
            stream = stdin if stdin is not None else sys.stdin
            text = stream.read()
        else:
            path = Path(raw).expanduser()
            if not path.exists():
                raise FileNotFoundError(f"Input not found: {path}")
            if path.is_dir():
                raise IsADirectoryError(f"Expected a file, got directory: {path}")
            text = read_text_file(path)
        if text.strip():
            parts.append(text.strip())
    return "\n\n".join(parts)

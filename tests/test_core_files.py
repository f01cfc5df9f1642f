from __future__ import annotations

import io
from pathlib import Path

import pytest

from infinite_practice.core.files import read_sources, read_text_file


def test_read_sources_joins_in_order(workspace) -> None:
    first = workspace.write("a.md", "\n# Chapter 1\nCells.\n")
    second = workspace.write("b.txt", "Genes.\n")
    blank = workspace.write("c.txt", "   \n")

    text = read_sources([second, blank, first])

    assert text == "Genes.\n\n# Chapter 1\nCells."


def test_read_sources_reads_stdin_marker(workspace) -> None:
    notes = workspace.write("notes.md", "From disk.")

    text = read_sources(["-", notes], stdin=io.StringIO("From stdin.\n"))

    assert text == "From stdin.\n\nFrom disk."


def test_read_sources_rejects_missing_and_directories(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="Input not found"):
        read_sources([tmp_path / "missing.md"])
    with pytest.raises(IsADirectoryError):
        read_sources([tmp_path])


def test_read_text_file_replaces_invalid_bytes(tmp_path: Path) -> None:
    path = tmp_path / "latin1.txt"
    path.write_bytes(b"caf\xe9")

    assert read_text_file(path) == "caf�"

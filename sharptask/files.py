"""Rewriting task lines inside markdown files."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from sharptask.model import ObsidianTask


@dataclass
class UpdateContext:
    """A task together with the zero-based line of the file it lives on."""

    line: int
    task: ObsidianTask


def _split_lines(text: str) -> list[str]:
    """Split at '\\n' or '\\r\\n'; a trailing line ending yields no empty line."""
    pieces = text.split("\n")
    last = pieces.pop()
    lines = [piece[:-1] if piece.endswith("\r") else piece for piece in pieces]
    if last:
        lines.append(last)
    return lines


def update_obsidian_tasks(
    path: str | os.PathLike[str], updates: list[UpdateContext]
) -> None:
    """Replace the given lines of a file with the tasks, keeping their indentation.

    The file is written to a temporary sibling first and then moved into place.
    Every line of the result ends with a newline.
    """
    path = Path(path)
    temp_path = path.with_suffix(".temp")
    if temp_path.exists():
        temp_path.unlink()

    lines = _split_lines(path.read_bytes().decode("utf-8"))

    replacements: dict[int, str] = {}
    for update in updates:
        if not 0 <= update.line < len(lines):
            raise IndexError(f"line {update.line} is outside {path}")
        original = lines[update.line]
        indent = original[: len(original) - len(original.lstrip())]
        replacements[update.line] = f"{indent}{update.task}"
    for index, text in replacements.items():
        lines[index] = text

    with temp_path.open("w", encoding="utf-8", newline="") as handle:
        handle.writelines(f"{line}\n" for line in lines)

    path.unlink()
    temp_path.rename(path)
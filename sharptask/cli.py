"""The sharptask command: sync markdown task lines with the task database."""

from __future__ import annotations

import os
import re
import sys
from datetime import tzinfo
from pathlib import Path

from termcolor import colored

from sharptask.config import Config, Direction, load
from sharptask.files import UpdateContext, update_obsidian_tasks
from sharptask.parser import parse
from sharptask.replica import ReplicaError
from sharptask.sync import TaskWarriorSync

MARKDOWN_SUFFIXES = (".markdown", ".md", ".mdown", ".mdwn", ".mkd", ".mkdn", ".mdx")

_TASK_LINE = re.compile(r"- \[(?: |-|x)\] .*")


def _is_markdown(name: str) -> bool:
    return name.endswith(MARKDOWN_SUFFIXES)


def find_markdown_files(vault: str | os.PathLike[str]) -> list[Path]:
    """Markdown files under the vault, skipping hidden files and directories."""
    root = Path(vault)
    if root.is_file():
        return [root]
    found: list[Path] = []
    for directory, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if not name.startswith("."))
        for name in sorted(filenames):
            candidate = Path(directory) / name
            if name.startswith(".") or not _is_markdown(name):
                continue
            if candidate.is_symlink() or not candidate.is_file():
                continue
            found.append(candidate)
    return found


def scan_file(path: str | os.PathLike[str], tz: tzinfo) -> list[UpdateContext]:
    """Parse every task line of a file, remembering the zero-based line number."""
    text = Path(path).read_bytes().decode("utf-8")
    contexts: list[UpdateContext] = []
    for number, line in enumerate(text.split("\n")):
        line = line.removesuffix("\r")
        if _TASK_LINE.search(line) is None:
            continue
        task = parse(line, tz)
        if task is None:
            print("  " + colored(f"Failed to parse: {line}", "red"))
            continue
        contexts.append(UpdateContext(line=number, task=task))
    return contexts


def _target_paths(cfg: Config) -> list[Path]:
    if cfg.file_path is not None:
        return [cfg.file_path]
    if cfg.vault_path is None:
        raise ValueError("No vault set")
    return find_markdown_files(cfg.vault_path)


def _sync_lines(cfg: Config, path: Path, lines: list[UpdateContext]) -> list[UpdateContext]:
    if not lines:
        return []
    sync = TaskWarriorSync.open(cfg.task_path, cfg.tz)
    updates: list[UpdateContext] = []
    try:
        for context in lines:
            if cfg.direction is Direction.MD_TO_TC:
                try:
                    changed = sync.md_to_tc(context.task, path, cfg.vault_path)
                except ReplicaError:
                    continue
                if changed:
                    updates.append(UpdateContext(line=context.line, task=context.task))
            else:
                task = sync.tc_to_md(context.task, cfg.tz)
                if task is not None:
                    updates.append(UpdateContext(line=context.line, task=task))
    finally:
        sync.replica.close()
    return updates


def _run(cfg: Config) -> int:
    failures = 0
    for path in _target_paths(cfg):
        print(colored(f"Processing: {path}", "blue"))
        try:
            lines = scan_file(path, cfg.tz)
        except (OSError, UnicodeDecodeError) as exc:
            raise OSError(f"Failed during search: {exc}") from exc
        updates = _sync_lines(cfg, path, lines)
        try:
            update_obsidian_tasks(path, updates)
        except (OSError, IndexError, UnicodeDecodeError):
            failures += 1
    return failures


def main(argv: list[str] | None = None) -> int:
    """Run the command; returns the process exit status."""
    try:
        cfg = load(argv)
        failures = _run(cfg)
    except (ReplicaError, OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if failures:
        print(f"Error: {failures} files failed to update", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
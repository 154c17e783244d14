"""Parsing of task lines written by the Obsidian tasks plugin."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from enum import Enum
from itertools import takewhile
from uuid import UUID

import regex

from sharptask.model import UTC, ObsidianTask, Priority, Status

DUE = "\U0001f4c5"
SCHEDULED = "\u23f3"
START = "\U0001f6eb"
CREATED = "\u2795"
DONE = "\u2705"
CANCELED = "\u274c"
PROJECT = "\U0001f528"

SIGNIFICANT_EMOJI = frozenset(
    {
        DUE,
        SCHEDULED,
        START,
        CREATED,
        DONE,
        CANCELED,
        "\U0001f53a",
        "\u23eb",
        "\U0001f53c",
        "\U0001f53d",
        "\u23ec",
        "\U0001f501",
        "\U0001f194",
        "\u26d4",
        PROJECT,
    }
)

_UUID_RE = regex.compile(r"\[\[uuid: (?P<uuid>.*)\|" + "\u2694\ufe0f?\ufe0f?" + r"\]\]")
_PREAMBLE_RE = regex.compile(r"\s*- \[(?P<status>[x\- ])\] (?P<remaining>.*)")
_GRAPHEME_RE = regex.compile(r"\X")
_DATE_LENGTH = 11

_STATUS_MARKS = {"x": Status.COMPLETE, "-": Status.CANCELED, " ": Status.PENDING}


class MetadataKind(Enum):
    """Kinds of metadata; each value names the task field it sets."""

    DUE = "due"
    SCHEDULED = "scheduled"
    START = "start"
    CREATED = "created"
    DONE = "done"
    CANCELED = "canceled"
    PRIORITY = "priority"
    PROJECT = "project"


@dataclass(frozen=True)
class Metadata:
    kind: MetadataKind
    value: date | Priority | str


class MetadataError(ValueError):
    """A piece of task metadata that could not be read."""


_DATE_KINDS = {
    DUE: MetadataKind.DUE,
    SCHEDULED: MetadataKind.SCHEDULED,
    START: MetadataKind.START,
    CREATED: MetadataKind.CREATED,
    DONE: MetadataKind.DONE,
    CANCELED: MetadataKind.CANCELED,
}

_PRIORITIES = {
    "\U0001f53a": Priority.HIGHEST,
    "\u23eb": Priority.HIGH,
    "\U0001f53c": Priority.MEDIUM,
    "\U0001f53d": Priority.LOW,
    "\u23ec": Priority.LOWEST,
}


def _graphemes(text: str) -> list[str]:
    return _GRAPHEME_RE.findall(text)


def _symbol(grapheme: str) -> str:
    """The grapheme without emoji variation selectors."""
    return grapheme.rstrip("\ufe0f")


def _is_significant(grapheme: str) -> bool:
    return _symbol(grapheme) in SIGNIFICANT_EMOJI


def parse_metadata(metadata: str) -> Iterator[Metadata | MetadataError]:
    """Yield each piece of metadata in order; unreadable pieces come as MetadataError."""
    pending = deque(_graphemes(metadata))
    while pending:
        symbol = _symbol(pending.popleft())
        if symbol in _DATE_KINDS:
            taken = [pending.popleft() for _ in range(min(_DATE_LENGTH, len(pending)))]
            text = "".join(taken).strip()
            try:
                value = datetime.strptime(text, "%Y-%m-%d").date()
            except ValueError as exc:
                yield MetadataError(f"Failed to parse date: {text} with error: {exc}")
            else:
                yield Metadata(_DATE_KINDS[symbol], value)
        elif symbol in _PRIORITIES:
            yield Metadata(MetadataKind.PRIORITY, _PRIORITIES[symbol])
        elif symbol == PROJECT:
            parts = []
            while pending and not _is_significant(pending[0]):
                parts.append(pending.popleft())
            yield Metadata(MetadataKind.PROJECT, "".join(parts).strip())


def extract_task_parts(task: str) -> tuple[str, str | None, UUID | None]:
    """Split a task body into its description, its metadata text and its uuid.

    The uuid is None when the link is missing or does not hold a valid uuid.
    """
    uuid = None
    match = _UUID_RE.search(task)
    if match is not None:
        try:
            uuid = UUID(match["uuid"])
        except ValueError:
            uuid = None
        task = task.replace(match[0], "").strip()

    graphemes = _graphemes(task)
    description_parts = list(takewhile(lambda g: not _is_significant(g), graphemes))
    description = "".join(description_parts)
    metadata = None
    if len(description_parts) < len(graphemes):
        metadata = task.replace(description, "").strip()
    return description.strip(), metadata, uuid


def parse_preamble(task_string: str) -> tuple[Status, str] | None:
    """Read the "- [ ] " marker; return the status and the text after it."""
    match = _PREAMBLE_RE.search(task_string)
    if match is None:
        return None
    return _STATUS_MARKS[match["status"]], match["remaining"]


def parse_tags(task_string: str) -> list[str]:
    """Tags written inline as #tag; nested tags #a/b give each part."""
    graphemes = _graphemes(task_string)
    tags: list[str] = []
    for position, grapheme in enumerate(graphemes):
        if grapheme == "#":
            word = "".join(takewhile(lambda g: g != " ", graphemes[position + 1 :]))
            tags.extend(word.split("/"))
    return tags


def parse(task_string: str, tz: tzinfo = UTC) -> ObsidianTask | None:
    """Parse one task line; None when it is not a task or has no description."""
    preamble = parse_preamble(task_string)
    if preamble is None:
        return None
    status, remaining = preamble

    description, metadata, uuid = extract_task_parts(remaining)
    if not description:
        return None

    task = ObsidianTask(
        uuid=uuid,
        status=status,
        description=description,
        tags=parse_tags(description),
        tz=tz,
    )
    if metadata is not None:
        for item in parse_metadata(metadata):
            if isinstance(item, Metadata):
                setattr(task, item.kind.value, item.value)
    return task
"""Tasks as written by the Obsidian tasks plugin, and how they relate to stored tasks."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date, datetime, timezone, tzinfo
from enum import Enum
from uuid import UUID
from zoneinfo import ZoneInfo

from sharptask.replica import Task, TaskStatus

UTC = ZoneInfo("UTC")
SWORDS = "\u2694\ufe0f"


class Status(Enum):
    PENDING = "[ ]"
    COMPLETE = "[x]"
    CANCELED = "[-]"

    @classmethod
    def from_tc(cls, tc_status: TaskStatus) -> Status:
        """Map a stored status; anything but completed or deleted counts as pending."""
        if tc_status is TaskStatus.COMPLETED:
            return cls.COMPLETE
        if tc_status is TaskStatus.DELETED:
            return cls.CANCELED
        return cls.PENDING

    def to_tc(self) -> TaskStatus:
        return _STATUS_TO_TC[self]

    def matches(self, tc_status: TaskStatus) -> bool:
        return _STATUS_TO_TC[self] is tc_status

    def __str__(self) -> str:
        return self.value


_STATUS_TO_TC = {
    Status.PENDING: TaskStatus.PENDING,
    Status.COMPLETE: TaskStatus.COMPLETED,
    Status.CANCELED: TaskStatus.DELETED,
}


class Priority(Enum):
    LOWEST = "\u23ec"
    LOW = "\U0001f53d"
    NORMAL = ""
    MEDIUM = "\U0001f53c"
    HIGH = "\u23eb"
    HIGHEST = "\U0001f53a"

    def to_tc(self) -> str | None:
        """The stored priority letter; normal priority is stored as no value."""
        return _PRIORITY_TO_TC[self]

    def __str__(self) -> str:
        return self.value


_PRIORITY_TO_TC = {
    Priority.LOWEST: "L",
    Priority.LOW: "L",
    Priority.NORMAL: None,
    Priority.MEDIUM: "M",
    Priority.HIGH: "H",
    Priority.HIGHEST: "H",
}


def _timestamp_date(tc: Task, key: str) -> date | None:
    raw = tc.get_value(key)
    if raw is None:
        return None
    return datetime.fromtimestamp(int(raw), tz=timezone.utc).date()


@dataclass
class ObsidianTask:
    uuid: UUID | None = None
    status: Status = Status.PENDING
    description: str = ""
    tags: list[str] = field(default_factory=list)
    due: date | None = None
    scheduled: date | None = None
    start: date | None = None
    created: date | None = None
    done: date | None = None
    canceled: date | None = None
    priority: Priority = Priority.NORMAL
    project: str | None = None
    tz: tzinfo = UTC

    @classmethod
    def from_tc(cls, tc: Task) -> ObsidianTask:
        """Build the markdown form of a stored task; its tags are appended inline."""
        tags = [tag.replace("tag_", "") for tag in tc.tags]
        tc_priority = tc.priority
        if tc_priority == "L":
            priority = Priority.LOW
        elif tc_priority == "H":
            priority = Priority.HIGHEST if "next" in tags else Priority.HIGH
        else:
            priority = Priority.NORMAL
        tc_status = tc.status
        return cls(
            uuid=tc.uuid,
            status=Status.from_tc(tc_status),
            priority=priority,
            tags=tags,
            description=tc.description + "".join(f" #{tag}" for tag in tags),
            due=_timestamp_date(tc, "due"),
            scheduled=_timestamp_date(tc, "scheduled"),
            start=_timestamp_date(tc, "wait"),
            created=_timestamp_date(tc, "created"),
            done=_timestamp_date(tc, "end") if tc_status is TaskStatus.COMPLETED else None,
            canceled=_timestamp_date(tc, "end") if tc_status is TaskStatus.DELETED else None,
            project=tc.get_value("project"),
        )

    def with_tz(self, tz: tzinfo) -> ObsidianTask:
        """A copy of this task whose dates are read in the given timezone."""
        return dataclasses.replace(self, tz=tz, tags=list(self.tags))

    def _compare_date(self, value: date | None, other: Task, key: str) -> bool:
        return value == _timestamp_date(other, key)

    def compare_due(self, other: Task) -> bool:
        return self._compare_date(self.due, other, "due")

    def compare_schedule(self, other: Task) -> bool:
        return self._compare_date(self.scheduled, other, "scheduled")

    def compare_start(self, other: Task) -> bool:
        return self._compare_date(self.start, other, "wait")

    def compare_created(self, other: Task) -> bool:
        return self._compare_date(self.created, other, "created")

    def compare_done(self, other: Task) -> bool:
        return self._compare_date(self.done, other, "end")

    def compare_canceled(self, other: Task) -> bool:
        return self._compare_date(self.canceled, other, "end")

    def compare_uuid(self, other: Task) -> bool:
        return self.uuid is not None and self.uuid == other.uuid

    def compare_status(self, other: Task) -> bool:
        return self.status.matches(other.status)

    def compare_description(self, other: Task) -> bool:
        return self.description == other.description

    def compare_tags(self, other: Task) -> bool:
        tc_tags = other.tags
        return len(self.tags) == len(tc_tags) and all(tag in tc_tags for tag in self.tags)

    def compare_priority(self, other: Task) -> bool:
        if self.priority is Priority.HIGHEST:
            return "next" in other.tags
        tc_priority = other.get_value("priority") or ""
        return tc_priority == (self.priority.to_tc() or "")

    def compare_project(self, other: Task) -> bool:
        return self.project == other.get_value("project")

    def matches(self, other: Task) -> bool:
        """True when every field agrees with the stored task."""
        return (
            self.compare_due(other)
            and self.compare_schedule(other)
            and self.compare_start(other)
            and self.compare_created(other)
            and self.compare_done(other)
            and self.compare_canceled(other)
            and self.compare_uuid(other)
            and self.compare_status(other)
            and self.compare_description(other)
            and self.compare_tags(other)
            and self.compare_priority(other)
            and self.compare_project(other)
        )

    def __str__(self) -> str:
        parts = [f"- {self.status} {self.description}"]
        if self.project is not None:
            parts.append(f" \U0001f528 {self.project}")
        for symbol, value in (
            ("\U0001f4c5", self.due),
            ("\u23f3", self.scheduled),
            ("\U0001f6eb", self.start),
            ("\u2795", self.created),
            ("\u2705", self.done),
            ("\u274c", self.canceled),
        ):
            if value is not None:
                parts.append(f" {symbol} {value.strftime('%Y-%m-%d')}")
        if self.priority is not Priority.NORMAL:
            parts.append(f" {self.priority}")
        if self.uuid is not None:
            parts.append(f" [[uuid: {self.uuid}|{SWORDS}]]")
        return "".join(parts)
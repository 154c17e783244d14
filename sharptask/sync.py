"""Synchronisation between markdown tasks and the task database."""

from __future__ import annotations

import os
import time
from datetime import date, datetime, time as dt_time, timezone, tzinfo
from pathlib import Path
from uuid import UUID, uuid4

from termcolor import colored

from sharptask.model import ObsidianTask, Priority, Status
from sharptask.replica import TAG_PREFIX, Replica, ReplicaError, Task

_INDENT = "      "


def _local_midnight(value: date, tz: tzinfo) -> datetime:
    return datetime.combine(value, dt_time(0, 0), tzinfo=tz)


def _timestamp_string(value: date | None, tz: tzinfo) -> str | None:
    """Seconds since the epoch of local midnight on the given date, as stored."""
    if value is None:
        return None
    return str(int(_local_midnight(value, tz).timestamp()))


def _stored_datetime(tc: Task, key: str, tz: tzinfo) -> datetime | None:
    raw = tc.get_value(key)
    if raw is None:
        return None
    try:
        return datetime.fromtimestamp(int(raw), tz=timezone.utc).astimezone(tz)
    except (ValueError, OverflowError, OSError) as exc:
        raise ReplicaError(f"invalid timestamp for {key!r}: {raw!r}") from exc


def _task_datetime(value: date | None, tz: tzinfo) -> datetime | None:
    return None if value is None else _local_midnight(value, tz)


def _report(message: str, color: str, indent: str = _INDENT) -> None:
    print(indent + colored(message, color))


class TaskWarriorSync:
    """Applies markdown task changes to a replica, or reads stored changes back."""

    def __init__(self, replica: Replica, tz: tzinfo):
        self.replica = replica
        self.tz = tz

    @classmethod
    def open(cls, path: str | os.PathLike[str], tz: tzinfo) -> TaskWarriorSync:
        """Open an existing on-disk task database."""
        try:
            replica = Replica.on_disk(path, create_if_missing=False)
        except ReplicaError as exc:
            raise ReplicaError(f"Failed to build storage context: {exc}") from exc
        return cls(replica, tz)

    def md_to_tc(
        self,
        task: ObsidianTask,
        file: str | os.PathLike[str],
        vault_path: str | os.PathLike[str] | None = None,
    ) -> bool:
        """Bring the stored copy of the task in line with the markdown.

        A task without a uuid is created and given one; True is returned
        then, meaning the markdown line must be rewritten.
        """
        print("  " + colored(str(task), "blue" if task.uuid is not None else "green"))

        if task.uuid is None:
            self._create(task, file, vault_path)
            return True

        tc = self.replica.get_task(task.uuid)
        if tc is None:
            return False
        if task.matches(tc):
            print(colored(_INDENT + "No changes", "yellow"))
            return False

        original = tc.data
        self._update(task, tc)
        if tc.data != original:
            self.replica.commit(tc)
        return False

    def _update(self, task: ObsidianTask, tc: Task) -> None:
        if not task.compare_status(tc):
            _report(f"Status: {tc.status} -> {task.status}", "red")
            tc.status = task.status.to_tc()

        if not task.compare_description(tc):
            _report(f"Desc: {tc.description} -> {task.description}", "red")
            tc.description = task.description

        if not task.compare_due(tc):
            before = tc.due.astimezone(self.tz) if tc.due is not None else None
            _report(f"Due: {before} -> {_task_datetime(task.due, task.tz)}", "yellow")
            tc.due = _task_datetime(task.due, self.tz)

        if not task.compare_start(tc):
            before = tc.wait.astimezone(self.tz) if tc.wait is not None else None
            _report(f"Wait: {before} -> {_task_datetime(task.start, task.tz)}", "red")
            tc.wait = _task_datetime(task.start, self.tz)

        if not task.compare_tags(tc):
            _report(f"Tags: {tc.tags} -> {task.tags}", "red")
            for tag in tc.tags:
                tc.remove_tag(tag)
            for tag in task.tags:
                tc.set_value(TAG_PREFIX + tag, "")

        if task.status is Status.COMPLETE and not task.compare_done(tc):
            _report(
                f"Complete Date: {_stored_datetime(tc, 'end', self.tz)} -> "
                f"{_task_datetime(task.done, task.tz)}",
                "red",
            )
            tc.set_value("end", _timestamp_string(task.done, self.tz))

        if task.status is Status.CANCELED and not task.compare_canceled(tc):
            _report(
                f"Canceled Date: {_stored_datetime(tc, 'end', self.tz)} -> "
                f"{_task_datetime(task.canceled, task.tz)}",
                "red",
                "    ",
            )
            tc.set_value("end", _timestamp_string(task.canceled, self.tz))

        if not task.compare_schedule(tc):
            _report(
                f"Start Date: {_stored_datetime(tc, 'scheduled', self.tz)} -> "
                f"{_task_datetime(task.start, task.tz)}",
                "red",
                "    ",
            )
            tc.set_value("scheduled", _timestamp_string(task.scheduled, self.tz))

        if not task.compare_priority(tc):
            _report(f"Priority: {tc.priority} -> {task.priority}", "red")
            tc.set_value("priority", task.priority.to_tc())
            if task.priority is Priority.HIGHEST:
                tc.set_value(TAG_PREFIX + "next", "")

        if not task.compare_project(tc):
            _report(
                f"Project: {tc.get_value('project')!r} -> {task.project!r}", "red", "    "
            )
            tc.set_value("project", task.project)

    def _create(
        self,
        task: ObsidianTask,
        file: str | os.PathLike[str],
        vault_path: str | os.PathLike[str] | None,
    ) -> None:
        uuid: UUID = uuid4()
        task.uuid = uuid
        tc = self.replica.create_task(uuid)
        tc.status = task.status.to_tc()
        tc.description = task.description
        tc.set_value("due", _timestamp_string(task.due, self.tz))
        tc.set_value("wait", _timestamp_string(task.start, self.tz))
        tc.set_value("scheduled", _timestamp_string(task.scheduled, self.tz))
        tc.set_value("created", _timestamp_string(task.created, self.tz))
        tc.set_value("end", _timestamp_string(task.done, self.tz))
        tc.set_value("end", _timestamp_string(task.canceled, self.tz))

        tc.set_value("priority", task.priority.to_tc())
        if task.priority is Priority.HIGHEST:
            tc.set_value(TAG_PREFIX + "next", "")

        tc.set_value("project", task.project)

        for tag in task.tags:
            tc.set_value(TAG_PREFIX + tag, "")

        file_name = Path(file).stem
        if file_name and vault_path is not None:
            vault_name = Path(vault_path).name
            if vault_name:
                tc.set_value(
                    f"annotation_{int(time.time())}",
                    f"obsidian://open?vault={vault_name}&file={file_name}",
                )

        self.replica.commit(tc)

    def tc_to_md(self, task: ObsidianTask, tz: tzinfo) -> ObsidianTask | None:
        """The stored version of the task when it differs from the markdown, else None."""
        if task.uuid is None:
            return None
        tc = self.replica.get_task(task.uuid)
        if tc is None or task.matches(tc):
            return None

        for compare, value, key in (
            (task.compare_due, task.due, "due"),
            (task.compare_schedule, task.scheduled, "scheduled"),
            (task.compare_start, task.start, "wait"),
            (task.compare_created, task.created, "created"),
            (task.compare_done, task.done, "end"),
            (task.compare_canceled, task.canceled, "end"),
        ):
            if not compare(tc):
                print(
                    colored(
                        f"{_INDENT}{_task_datetime(value, task.tz)} -> "
                        f"{_stored_datetime(tc, key, tz)}",
                        "yellow",
                    )
                )
        if not task.compare_status(tc):
            print(colored(f"{_INDENT}{task.status} -> {tc.status}", "yellow"))
        if not task.compare_description(tc):
            print(colored(f"{_INDENT}{task.description} -> {tc.description}", "yellow"))
        if not task.compare_priority(tc):
            print(colored(f"{_INDENT}{task.priority} -> {tc.priority}", "yellow"))
        if not task.compare_project(tc):
            print(
                colored(f"{_INDENT}{task.project!r} -> {tc.get_value('project')!r}", "yellow")
            )

        return ObsidianTask.from_tc(tc).with_tz(self.tz)
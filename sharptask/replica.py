"""Task storage: tasks are string key/value maps kept in memory or in SQLite."""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from uuid import UUID

DB_FILENAME = "taskchampion.sqlite3"
TAG_PREFIX = "tag_"


class ReplicaError(Exception):
    """Raised when the task database cannot be opened, read or written."""


class TaskStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    DELETED = "deleted"
    RECURRING = "recurring"
    UNKNOWN = "unknown"

    @classmethod
    def from_value(cls, value: str | None) -> TaskStatus:
        """Map a stored status string to a status; a missing value means pending."""
        if value is None:
            return cls.PENDING
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    def __str__(self) -> str:
        return self.value.capitalize()


def _as_uuid(value: UUID | str) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))


class Task:
    """A single task: a uuid and a map of string keys to string values."""

    def __init__(self, uuid: UUID | str, data: Mapping[str, str] | None = None):
        self.uuid = _as_uuid(uuid)
        self._data: dict[str, str] = dict(data or {})

    def __repr__(self) -> str:
        return f"Task(uuid={self.uuid!s}, data={self._data!r})"

    @property
    def data(self) -> dict[str, str]:
        """A copy of the task's raw key/value data."""
        return dict(self._data)

    def get_value(self, key: str) -> str | None:
        return self._data.get(key)

    def set_value(self, key: str, value: str | None) -> None:
        """Set a value; None removes the key."""
        if value is None:
            self._data.pop(key, None)
            return
        if not isinstance(value, str):
            raise TypeError(f"task values must be strings, not {type(value).__name__}")
        self._data[key] = value

    @property
    def status(self) -> TaskStatus:
        return TaskStatus.from_value(self._data.get("status"))

    @status.setter
    def status(self, value: TaskStatus) -> None:
        if value is TaskStatus.UNKNOWN:
            raise ValueError("cannot store an unknown status")
        self.set_value("status", value.value)

    @property
    def description(self) -> str:
        return self._data.get("description", "")

    @description.setter
    def description(self, value: str) -> None:
        self.set_value("description", value)

    @property
    def priority(self) -> str:
        return self._data.get("priority", "")

    @priority.setter
    def priority(self, value: str) -> None:
        self.set_value("priority", value)

    @property
    def tags(self) -> list[str]:
        """User tags, in the order they were added."""
        return [key[len(TAG_PREFIX):] for key in self._data if key.startswith(TAG_PREFIX)]

    def add_tag(self, tag: str) -> None:
        if not tag or any(ch.isspace() for ch in tag):
            raise ValueError(f"invalid tag: {tag!r}")
        self.set_value(TAG_PREFIX + tag, "")

    def remove_tag(self, tag: str) -> None:
        self.set_value(TAG_PREFIX + tag, None)

    @property
    def due(self) -> datetime | None:
        return self._get_timestamp("due")

    @due.setter
    def due(self, value: datetime | None) -> None:
        self._set_timestamp("due", value)

    @property
    def wait(self) -> datetime | None:
        return self._get_timestamp("wait")

    @wait.setter
    def wait(self, value: datetime | None) -> None:
        self._set_timestamp("wait", value)

    def _get_timestamp(self, key: str) -> datetime | None:
        raw = self._data.get(key)
        if raw is None:
            return None
        try:
            return datetime.fromtimestamp(int(raw), tz=timezone.utc)
        except (ValueError, OverflowError, OSError) as exc:
            raise ReplicaError(f"invalid timestamp for {key!r}: {raw!r}") from exc

    def _set_timestamp(self, key: str, value: datetime | None) -> None:
        if value is None:
            self.set_value(key, None)
            return
        if value.tzinfo is None:
            raise ValueError("timestamps must carry a timezone")
        self.set_value(key, str(int(value.timestamp())))


class _MemoryStorage:
    def __init__(self) -> None:
        self._tasks: dict[UUID, dict[str, str]] = {}

    def get(self, uuid: UUID) -> dict[str, str] | None:
        data = self._tasks.get(uuid)
        return None if data is None else dict(data)

    def write(self, tasks: Mapping[UUID, Mapping[str, str]]) -> None:
        for uuid, data in tasks.items():
            self._tasks[uuid] = dict(data)

    def uuids(self) -> list[UUID]:
        return list(self._tasks)

    def close(self) -> None:
        pass


class _SqliteStorage:
    def __init__(self, connection: sqlite3.Connection) -> None:
        self._conn = connection

    def get(self, uuid: UUID) -> dict[str, str] | None:
        try:
            row = self._conn.execute(
                "SELECT data FROM tasks WHERE uuid = ?", (str(uuid),)
            ).fetchone()
        except sqlite3.Error as exc:
            raise ReplicaError(f"failed reading task {uuid}: {exc}") from exc
        if row is None:
            return None
        try:
            data = json.loads(row[0])
        except json.JSONDecodeError as exc:
            raise ReplicaError(f"corrupt data for task {uuid}") from exc
        if not isinstance(data, dict):
            raise ReplicaError(f"corrupt data for task {uuid}")
        return data

    def write(self, tasks: Mapping[UUID, Mapping[str, str]]) -> None:
        rows = [(str(uuid), json.dumps(dict(data))) for uuid, data in tasks.items()]
        try:
            with self._conn:
                self._conn.executemany(
                    "INSERT OR REPLACE INTO tasks (uuid, data) VALUES (?, ?)", rows
                )
        except sqlite3.Error as exc:
            raise ReplicaError(f"failed committing tasks: {exc}") from exc

    def uuids(self) -> list[UUID]:
        try:
            rows = self._conn.execute("SELECT uuid FROM tasks ORDER BY rowid").fetchall()
        except sqlite3.Error as exc:
            raise ReplicaError(f"failed listing tasks: {exc}") from exc
        return [UUID(row[0]) for row in rows]

    def close(self) -> None:
        self._conn.close()


class Replica:
    """A collection of tasks. Changes to a Task are stored by commit()."""

    def __init__(self, storage: _MemoryStorage | _SqliteStorage):
        self._storage = storage

    @classmethod
    def in_memory(cls) -> Replica:
        return cls(_MemoryStorage())

    @classmethod
    def on_disk(cls, path: str | Path, create_if_missing: bool = False) -> Replica:
        directory = Path(path)
        db_path = directory / DB_FILENAME
        if not db_path.exists():
            if not create_if_missing:
                raise ReplicaError(f"no task database in {directory}")
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise ReplicaError(f"cannot create {directory}: {exc}") from exc
        try:
            connection = sqlite3.connect(db_path)
            with connection:
                connection.execute(
                    "CREATE TABLE IF NOT EXISTS tasks (uuid STRING PRIMARY KEY, data STRING)"
                )
        except sqlite3.Error as exc:
            raise ReplicaError(f"cannot open task database {db_path}: {exc}") from exc
        return cls(_SqliteStorage(connection))

    def __enter__(self) -> Replica:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def create_task(self, uuid: UUID | str) -> Task:
        """Store a new, empty task and return it."""
        uuid = _as_uuid(uuid)
        if self._storage.get(uuid) is not None:
            raise ReplicaError(f"task {uuid} already exists")
        self._storage.write({uuid: {}})
        return Task(uuid)

    def get_task(self, uuid: UUID | str) -> Task | None:
        uuid = _as_uuid(uuid)
        data = self._storage.get(uuid)
        return None if data is None else Task(uuid, data)

    def all_task_uuids(self) -> list[UUID]:
        return self._storage.uuids()

    def all_tasks(self) -> dict[UUID, Task]:
        tasks = {}
        for uuid in self._storage.uuids():
            data = self._storage.get(uuid)
            if data is not None:
                tasks[uuid] = Task(uuid, data)
        return tasks

    def commit(self, *args: Task) -> None:
        """Store the current data of the given tasks in one step."""
        tasks: Iterable[Task] = args
        self._storage.write({task.uuid: task.data for task in tasks})

    def close(self) -> None:
        self._storage.close()
from datetime import date
from uuid import UUID
from zoneinfo import ZoneInfo

import pytest

from sharptask.model import SWORDS, ObsidianTask, Priority, Status
from sharptask.parser import (
    Metadata,
    MetadataError,
    MetadataKind,
    extract_task_parts,
    parse,
    parse_metadata,
    parse_preamble,
    parse_tags,
)

UTC = ZoneInfo("UTC")
LOWEST_WITH_SELECTOR = "\u23ec\ufe0f"


@pytest.mark.parametrize(
    "line, expected",
    [
        (
            "- [ ] This is some simple text",
            ObsidianTask(status=Status.PENDING, description="This is some simple text"),
        ),
        (
            "- [ ] Task with due date 📅 2025-05-19",
            ObsidianTask(description="Task with due date", due=date(2025, 5, 19)),
        ),
        (
            "- [x] Task with due date and creation date 📅 2025-05-27 ➕ 2025-05-19",
            ObsidianTask(
                status=Status.COMPLETE,
                description="Task with due date and creation date",
                due=date(2025, 5, 27),
                created=date(2025, 5, 19),
            ),
        ),
        (
            f"- [ ] Task with existing uuid [[uuid: a80c42ce-dd29-4dc7-8582-34f36fcf8b80|{SWORDS}]]",
            ObsidianTask(
                uuid=UUID("a80c42ce-dd29-4dc7-8582-34f36fcf8b80"),
                description="Task with existing uuid",
            ),
        ),
        (
            f"- [ ] Task with invalid uuid [[uuid: uh-oh|{SWORDS}]]",
            ObsidianTask(description="Task with invalid uuid"),
        ),
        (
            "- [ ] Task with #some/tags",
            ObsidianTask(description="Task with #some/tags", tags=["some", "tags"]),
        ),
        (
            " - [-] Task with a project 🔨 Project text 🙂",
            ObsidianTask(
                status=Status.CANCELED,
                description="Task with a project",
                project="Project text 🙂",
            ),
        ),
        (
            "- [ ] Test task stuff 📅 2025-05-19 ⏳ 2025-05-20 🛫 2025-05-21 ➕ 2025-05-22 "
            f"✅ 2025-05-23 ❌ 2025-05-24 [[uuid: 96bb3816-aedd-4033-8ff6-4746a700aac8|{SWORDS}]]",
            ObsidianTask(
                description="Test task stuff",
                due=date(2025, 5, 19),
                scheduled=date(2025, 5, 20),
                start=date(2025, 5, 21),
                created=date(2025, 5, 22),
                done=date(2025, 5, 23),
                canceled=date(2025, 5, 24),
                uuid=UUID("96bb3816-aedd-4033-8ff6-4746a700aac8"),
            ),
        ),
    ],
)
def test_task_bank(line, expected):
    assert parse(line, UTC) == expected


def test_priority():
    task = (
        f"Test task stuff 🔺⏫🔼🔽{LOWEST_WITH_SELECTOR} "
        f"[[uuid: 96bb3816-aedd-4033-8ff6-4746a700aac8|{SWORDS}]]"
    )
    description, metadata, uuid = extract_task_parts(task)
    assert metadata == f"🔺⏫🔼🔽{LOWEST_WITH_SELECTOR}"
    assert uuid == UUID("96bb3816-aedd-4033-8ff6-4746a700aac8")
    assert description == "Test task stuff"

    assert list(parse_metadata(metadata)) == [
        Metadata(MetadataKind.PRIORITY, Priority.HIGHEST),
        Metadata(MetadataKind.PRIORITY, Priority.HIGH),
        Metadata(MetadataKind.PRIORITY, Priority.MEDIUM),
        Metadata(MetadataKind.PRIORITY, Priority.LOW),
        Metadata(MetadataKind.PRIORITY, Priority.LOWEST),
    ]


def test_all():
    task = (
        "Test #task stuff #project/tag 📅 2025-05-19 ⏳ 2025-05-19 🛫 2025-05-19 "
        "➕ 2025-05-19 ✅ 2025-05-19 ❌ 2025-05-19 🔨 This is a project "
        f"🔺⏫🔼🔽{LOWEST_WITH_SELECTOR} [[uuid: 96bb3816-aedd-4033-8ff6-4746a700aac8|{SWORDS}]]"
    )
    description, metadata, uuid = extract_task_parts(task)
    assert metadata == (
        "📅 2025-05-19 ⏳ 2025-05-19 🛫 2025-05-19 ➕ 2025-05-19 ✅ 2025-05-19 "
        f"❌ 2025-05-19 🔨 This is a project 🔺⏫🔼🔽{LOWEST_WITH_SELECTOR}"
    )
    assert uuid == UUID("96bb3816-aedd-4033-8ff6-4746a700aac8")
    assert description == "Test #task stuff #project/tag"

    day = date(2025, 5, 19)
    assert list(parse_metadata(metadata)) == [
        Metadata(MetadataKind.DUE, day),
        Metadata(MetadataKind.SCHEDULED, day),
        Metadata(MetadataKind.START, day),
        Metadata(MetadataKind.CREATED, day),
        Metadata(MetadataKind.DONE, day),
        Metadata(MetadataKind.CANCELED, day),
        Metadata(MetadataKind.PROJECT, "This is a project"),
        Metadata(MetadataKind.PRIORITY, Priority.HIGHEST),
        Metadata(MetadataKind.PRIORITY, Priority.HIGH),
        Metadata(MetadataKind.PRIORITY, Priority.MEDIUM),
        Metadata(MetadataKind.PRIORITY, Priority.LOW),
        Metadata(MetadataKind.PRIORITY, Priority.LOWEST),
    ]

    assert parse_tags(description) == ["task", "project", "tag"]


def test_date_parse_fail():
    task = f"Test task stuff 📅25 [[uuid: 96bb3816-aedd-4033-8ff6-4746a700aac8|{SWORDS}]]"
    _, metadata, _ = extract_task_parts(task)
    first = next(parse_metadata(metadata))
    assert isinstance(first, MetadataError)
    assert "25" in str(first)


def test_display_round_trip():
    line = (
        "- [ ] Test 🔨 Test project 📅 2025-05-10 ⏫ "
        f"[[uuid: 25287dfa-c5b5-4772-8788-d64a41abf352|{SWORDS}]]"
    )
    task = parse(line, UTC)
    assert task.project == "Test project"
    assert task.priority is Priority.HIGH
    assert task.due == date(2025, 5, 10)
    assert str(task) == line


def test_plain_lowest_priority_symbol():
    assert list(parse_metadata("\u23ec")) == [Metadata(MetadataKind.PRIORITY, Priority.LOWEST)]


def test_project_stops_at_next_emoji():
    assert list(parse_metadata("🔨 Proj 📅 2025-01-02")) == [
        Metadata(MetadataKind.PROJECT, "Proj"),
        Metadata(MetadataKind.DUE, date(2025, 1, 2)),
    ]


def test_invalid_date_is_skipped_by_parse():
    task = parse("- [ ] Thing 📅 soon ⏫", UTC)
    assert task.due is None
    assert task.description == "Thing"


def test_no_metadata():
    assert extract_task_parts("Just words") == ("Just words", None, None)


@pytest.mark.parametrize(
    "line, expected",
    [
        ("- [x] done", (Status.COMPLETE, "done")),
        ("- [-] gone", (Status.CANCELED, "gone")),
        ("   - [ ] open\n", (Status.PENDING, "open")),
    ],
)
def test_parse_preamble(line, expected):
    assert parse_preamble(line) == expected


@pytest.mark.parametrize("line", ["- [y] nope", "plain text", "- [] empty"])
def test_parse_preamble_rejects(line):
    assert parse_preamble(line) is None


def test_parse_rejects_non_task():
    assert parse("Just a line of text", UTC) is None


def test_parse_rejects_empty_description():
    assert parse("- [ ] 📅 2025-05-19", UTC) is None


def test_parse_keeps_timezone():
    chicago = ZoneInfo("America/Chicago")
    task = parse("- [ ] Zoned 📅 2025-06-07", chicago)
    assert task.tz == chicago
    assert task.due == date(2025, 6, 7)


def test_parse_tags_without_tags():
    assert parse_tags("no tags here") == []
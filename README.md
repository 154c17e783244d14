# sharptask

Keep the checklist tasks in an Obsidian vault and a task database in step.

sharptask reads task lines written in the Obsidian Tasks plugin format:

```
- [ ] Write report #urgent 🔨 Work 📅 2025-05-19 ⏫
```

It recognises the status box (`[ ]` pending, `[x]` complete, `[-]` canceled),
inline tags (`#tag`; a nested tag `#a/b` yields `a` and `b`), and the plugin's
metadata emoji, which follow the description:

| Emoji | Meaning           |
|-------|-------------------|
| 📅    | due date          |
| ⏳    | scheduled date    |
| 🛫    | start (wait) date |
| ➕    | created date      |
| ✅    | done date         |
| ❌    | canceled date     |
| 🔨    | project           |
| 🔺 ⏫ 🔼 🔽 ⏬ | priority (highest … lowest) |

Dates are written as `YYYY-MM-DD`. A date that cannot be read is ignored.
Lines that look like tasks but have no description are reported as
"Failed to parse" and left alone.

Once a task has been stored, sharptask appends a link of the form
`[[uuid: <uuid>|⚔️]]` to its line so the two copies stay paired.

## Installation

```
pip install .
```

## Usage

Push markdown tasks into the task database:

```
sharptask --task-db ~/.task --vault ~/MyVault md-to-tc
```

Tasks without a uuid link are created in the database and their lines are
rewritten with the link. Tasks that already have a link update the stored
task (status, description, dates, tags, priority, project); their lines are
not rewritten. New tasks created while a vault is set carry an annotation
pointing back to the note: `obsidian://open?vault=<vault>&file=<note>`.

Pull changes made in the database back into the markdown:

```
sharptask --task-db ~/.task --vault ~/MyVault tc-to-md
```

Every linked line whose stored task differs is replaced by the stored
version; stored tags are appended to the description as `#tag`.

Options:

- `-v`, `--vault PATH` – process every markdown file under the vault
  (`.md`, `.markdown`, `.mdown`, `.mdwn`, `.mkd`, `.mkdn`, `.mdx`); hidden
  files and directories and symbolic links are skipped.
- `-f`, `--file PATH` – process a single file instead. `--vault` and `--file`
  cannot be given together.
- `-t`, `--task-db PATH` – directory of the task database.
- `-c`, `--config PATH` – configuration file to read.
- `--tz NAME` – IANA timezone (for example `America/Chicago`); a date is
  stored as midnight of that day in this zone.

Rewritten lines keep their indentation. A file is written to a `.temp`
sibling and then moved into place. The command exits with status 1 when
the task database cannot be opened or any file could not be rewritten.

Priorities are stored as follows: lowest and low become `L`, medium `M`,
high `H`, and highest becomes `H` together with the `next` tag.

## Configuration

Defaults are read from `~/.sharptask/config.toml`, or from the file passed
with `--config` (`~` and `$VAR` in its path are expanded):

```toml
vault_path = "~/MyVault"
task_path = "~/.task"
timezone = "Europe/Berlin"
```

Command-line options take precedence over the file. A file that is missing
or cannot be read is ignored. Without a timezone the local zone is used
(from `TZ`, `/etc/timezone` or `/etc/localtime`), falling back to UTC;
without a task path, `~/.task`.

## Storage

The task database is a directory holding `taskchampion.sqlite3`, a SQLite
file with one table `tasks` of task uuids and their key/value data as JSON.
sharptask does not create the database: it must already exist in the
directory given by `--task-db`. It keeps no operation log or undo history
and does not synchronise with a task server.

## Library use

```python
from sharptask.parser import parse
from sharptask.replica import Replica
from sharptask.sync import TaskWarriorSync
from sharptask.model import UTC

task = parse("- [ ] Buy milk 📅 2025-06-07", UTC)
sync = TaskWarriorSync(Replica.in_memory(), UTC)
sync.md_to_tc(task, "shopping.md", None)   # True: the task was created
print(task)  # the line with its [[uuid: …|⚔️]] link
```

`sharptask.files.update_obsidian_tasks(path, updates)` rewrites the lines
named by a list of `UpdateContext(line, task)`.

## Development

```
pip install -e .[test]
pytest
```
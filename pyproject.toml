[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sharptask"
version = "0.1.0"
description = "Sync Obsidian Tasks plugin checklists with a task database"
requires-python = ">=3.11"
dependencies = [
    "regex",
    "termcolor",
]
keywords = ["obsidian", "taskwarrior", "tasks", "markdown", "sync", "todo"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Scheduling",
    "Topic :: Text Processing :: Markup :: Markdown",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
sharptask = "sharptask.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["sharptask"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

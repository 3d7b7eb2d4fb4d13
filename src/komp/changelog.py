"""CHANGELOG.md updates."""

from __future__ import annotations

import datetime as dt
from pathlib import Path

from loguru import logger

from .git import GitRepo

CHANGELOG_FILENAME = "CHANGELOG.md"
CHANGELOG_HEADING = "# Changelog\n\n"


class ChangelogError(Exception):
    """The changelog file could not be read or written."""

    pass


def format_entry(summary: str, today: dt.date) -> str:
    """Format a dated changelog section."""
    return f"\n## {today.isoformat()}\n\n{summary}\n"


def insert_entry(content: str, entry: str) -> str:
    """Insert an entry below the changelog heading, or at the top without one."""
    index = content.find(CHANGELOG_HEADING)
    if index == -1:
        return entry + content
    cut = index + len(CHANGELOG_HEADING)
    return content[:cut] + entry + content[cut:]


def write_changelog_entry(
    summary: str,
    path: Path,
    create: bool = False,
    today: dt.date | None = None,
) -> bool:
    """Add a summary to the changelog.

    Args:
        summary: The generated changelog text
        path: Path of the changelog file
        create: Create the file when it does not exist
        today: Date for the section heading (defaults to today)

    Returns:
        False if the file is missing and create is not set, True otherwise

    Raises:
        ChangelogError: If the file cannot be read or written
    """
    today = today or dt.date.today()
    entry = format_entry(summary, today)

    try:
        if not path.exists():
            if not create:
                logger.debug(f"{path} does not exist and create is off")
                return False
            path.write_text(CHANGELOG_HEADING + entry, encoding="utf-8")
            return True

        content = path.read_text(encoding="utf-8")
        path.write_text(insert_entry(content, entry), encoding="utf-8")
    except OSError as e:
        raise ChangelogError(f"Failed to write {path.name}: {e}") from e
    return True


def commit_and_push_changelog(
    repo: GitRepo,
    path: Path,
    today: dt.date | None = None,
) -> str:
    """Commit the changelog on its own and push the current branch.

    Returns:
        The branch that was pushed

    Raises:
        GitError: If any git step fails
    """
    today = today or dt.date.today()
    branch = repo.current_branch()
    repo.add(path)
    repo.commit(f"chore(changelog): update {today.isoformat()}")
    repo.push(branch)
    return branch

"""AI-written commit messages, summaries and changelog entries from staged changes."""

__version__ = "1.0.0"

from loguru import logger

from .config import Settings
from .generator import (
    GenerationError,
    MessageGenerator,
    generate_changelog_entry,
    generate_commit_message,
    generate_summary,
)
from .git import DiffSource

logger.disable(__name__)

__all__ = [
    "DiffSource",
    "GenerationError",
    "MessageGenerator",
    "Settings",
    "generate_changelog_entry",
    "generate_commit_message",
    "generate_summary",
    "__version__",
]

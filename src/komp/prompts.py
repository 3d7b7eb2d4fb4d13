"""Prompt templates for commit message and summary generation."""

from __future__ import annotations

from dataclasses import dataclass

COMMIT_TYPES = (
    "feat",
    "fix",
    "docs",
    "style",
    "refactor",
    "perf",
    "test",
    "build",
    "ci",
    "chore",
    "revert",
)

# System prompt for single-line commit messages
COMMIT_SYSTEM_PROMPT = f"""
You are an expert developer using the Conventional Commits specification.
Review the provided git diff and generate a commit message.

STRICT RULES:
1. Output MUST be a SINGLE LINE. No body, no bullets, no explanations.
2. Format: <type>(<optional scope>): <description>
3. Types must be one of: {", ".join(COMMIT_TYPES)}.
4. Subject MUST be under 150 characters.
5. No markdown formatting. No code blocks. No quotes. No multi-line output.
6. Be brutally concise. Summarize the core change only.

Example output:
feat(auth): add google login
"""

# System prompt for summaries and changelog entries
SUMMARY_SYSTEM_PROMPT = (
    "You are an expert developer. Summarize the staged git diff into a concise "
    "multi-line summary suitable for a changelog. Use bullets or short paragraphs. "
    "Be factual and list key changes, affected files and summary lines."
)


@dataclass(frozen=True)
class PromptMessage:
    """A single role-tagged message in a completion request."""

    role: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


def build_commit_messages(diff: str) -> list[PromptMessage]:
    """Build the request for a conventional commit message.

    Args:
        diff: The staged diff

    Returns:
        System instruction followed by the diff payload
    """
    return [
        PromptMessage("system", COMMIT_SYSTEM_PROMPT),
        PromptMessage("user", f"Here is the git diff to analyze:\n{diff}"),
    ]


def build_summary_messages(diff: str) -> list[PromptMessage]:
    """Build the request for a multi-line summary of the diff."""
    return [
        PromptMessage("system", SUMMARY_SYSTEM_PROMPT),
        PromptMessage(
            "user",
            f"Here is the git diff:\n{diff}\n\n"
            "Just give me a pull request description, ready to copy and paste, "
            "with no extra commentary.",
        ),
    ]

"""Commit message, summary and changelog generation from a staged diff."""

from __future__ import annotations

from collections.abc import Callable

from .config import DEFAULT_BASE_URL
from .prompts import build_commit_messages, build_summary_messages
from .providers import CompletionService, OpenRouterProvider

COMMIT_MAX_TOKENS = 300
SUMMARY_MAX_TOKENS = 800


class GenerationError(Exception):
    """Generating text from the diff failed."""

    pass


class MessageGenerator:
    """Thin prompt builders on top of a single completion service."""

    def __init__(self, service: CompletionService) -> None:
        self.service = service

    def commit_message(self, diff: str) -> str:
        """Generate a single-line conventional commit message.

        Raises:
            GenerationError: If the completion call fails
        """
        try:
            return self.service.complete(build_commit_messages(diff), COMMIT_MAX_TOKENS)
        except Exception as e:
            raise GenerationError(f"AI generation failed: {e}") from e

    def summary(self, diff: str) -> str:
        """Generate a multi-line, changelog-ready summary.

        Raises:
            GenerationError: If the completion call fails
        """
        try:
            return self.service.complete(build_summary_messages(diff), SUMMARY_MAX_TOKENS)
        except Exception as e:
            raise GenerationError(f"AI summary failed: {e}") from e

    def changelog_entry(self, diff: str) -> str:
        """Generate a changelog entry. Same text as the summary."""
        return self.summary(diff)


def _generate(
    action: Callable[[MessageGenerator, str], str],
    api_key: str,
    model: str,
    diff: str,
    service: CompletionService | None,
    base_url: str,
) -> str:
    if service is not None:
        return action(MessageGenerator(service), diff)

    try:
        provider = OpenRouterProvider(api_key=api_key, model=model, base_url=base_url)
    except ValueError as e:
        raise GenerationError(f"AI generation failed: {e}") from e
    with provider:
        return action(MessageGenerator(provider), diff)


def generate_commit_message(
    api_key: str,
    model: str,
    diff: str,
    service: CompletionService | None = None,
    base_url: str = DEFAULT_BASE_URL,
) -> str:
    """Generate a commit message for a diff.

    Args:
        api_key: Credential for the completion service
        model: Model identifier
        diff: The staged diff
        service: Completion service to use instead of OpenRouter
        base_url: API base URL when no service is given

    Returns:
        The trimmed commit message

    Raises:
        GenerationError: If generation fails for any reason
    """
    return _generate(MessageGenerator.commit_message, api_key, model, diff, service, base_url)


def generate_summary(
    api_key: str,
    model: str,
    diff: str,
    service: CompletionService | None = None,
    base_url: str = DEFAULT_BASE_URL,
) -> str:
    """Generate a pull-request style summary for a diff."""
    return _generate(MessageGenerator.summary, api_key, model, diff, service, base_url)


def generate_changelog_entry(
    api_key: str,
    model: str,
    diff: str,
    service: CompletionService | None = None,
    base_url: str = DEFAULT_BASE_URL,
) -> str:
    """Generate a changelog entry for a diff."""
    return generate_summary(api_key, model, diff, service=service, base_url=base_url)

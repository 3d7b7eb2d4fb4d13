"""Base class and errors for completion services."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from ..prompts import PromptMessage


class ProviderError(Exception):
    """The completion call failed or returned something unusable."""

    pass


class CompletionService(ABC):
    """Abstract base class for the remote text-completion call."""

    @abstractmethod
    def complete(self, messages: Sequence[PromptMessage], max_tokens: int) -> str:
        """Run one completion request.

        Args:
            messages: Ordered role-tagged messages
            max_tokens: Upper bound on the completion length

        Returns:
            The generated text, stripped of surrounding whitespace

        Raises:
            ProviderError: If the request fails or the response is malformed
        """
        ...

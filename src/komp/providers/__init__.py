"""Completion service implementations."""

from .base import CompletionService, ProviderError
from .openrouter import OpenRouterProvider

__all__ = [
    "CompletionService",
    "ProviderError",
    "OpenRouterProvider",
]

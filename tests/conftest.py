"""Shared test fixtures."""

import json
import shutil
import subprocess
from pathlib import Path

import httpx
import pytest

from komp.git import CommandRunner
from komp.providers import CompletionService, OpenRouterProvider


class FakeRunner(CommandRunner):
    """Answers git commands from a table keyed by subcommand."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    def run(self, args):
        self.calls.append(list(args))
        return self.responses.get(args[0], ("", 0))


class FakeService(CompletionService):
    """Records completion requests and returns a canned reply."""

    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error
        self.calls = []
        self.closed = False

    def complete(self, messages, max_tokens):
        self.calls.append((list(messages), max_tokens))
        if self.error is not None:
            raise self.error
        return self.reply.strip()

    def close(self):
        self.closed = True


def git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=repo, check=True, capture_output=True, text=True
    )
    return result.stdout


@pytest.fixture
def make_runner():
    return FakeRunner


@pytest.fixture
def make_service():
    return FakeService


@pytest.fixture
def make_provider():
    """Build an OpenRouterProvider whose HTTP traffic goes to a handler."""

    def factory(handler, api_key="sk-test", model="openai/gpt-4o-mini"):
        client = httpx.Client(transport=httpx.MockTransport(handler))
        return OpenRouterProvider(api_key=api_key, model=model, client=client)

    return factory


@pytest.fixture
def completion_reply():
    """Build a chat completions response carrying the given content."""

    def factory(content, status_code=200):
        body = {"choices": [{"message": {"role": "assistant", "content": content}}]}
        return httpx.Response(status_code, content=json.dumps(body))

    return factory


@pytest.fixture
def git_repo(tmp_path):
    """A git repository with one commit and nothing staged."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "config", "user.email", "dev@example.com")
    git(repo, "config", "user.name", "Dev")
    git(repo, "config", "commit.gpgsign", "false")
    (repo / "README.md").write_text("# demo\n")
    git(repo, "add", "README.md")
    git(repo, "commit", "-q", "-m", "initial")
    return repo

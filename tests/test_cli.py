"""Tests for the komp command line."""

import pyperclip
import pytest
from click.testing import CliRunner

from komp import __version__, commands
from komp.cli import main

from conftest import git


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-test")
    monkeypatch.delenv("OPENROUTER_MODEL", raising=False)
    monkeypatch.delenv("OPENROUTER_BASE_URL", raising=False)


@pytest.fixture
def fake_provider(monkeypatch, make_service):
    """Replace the OpenRouter provider with a canned reply."""
    service = make_service("feat: add debug log")
    created = []

    def factory(**kwargs):
        created.append(kwargs)
        return service

    monkeypatch.setattr(commands, "OpenRouterProvider", factory)
    monkeypatch.setattr(pyperclip, "copy", lambda text: None)
    service.created = created
    return service


def test_version(runner):
    result = runner.invoke(main, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_generate_outside_repository(runner, tmp_path, monkeypatch, api_key):
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(main, ["generate", "commit"])

    assert result.exit_code == 1
    assert "Not a git repository" in result.output


def test_generate_without_api_key(runner, git_repo, monkeypatch):
    monkeypatch.chdir(git_repo)
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)

    result = runner.invoke(main, ["generate", "summary"])

    assert result.exit_code == 1
    assert "OPENROUTER_API_KEY missing" in result.output


def test_generate_with_nothing_staged(runner, git_repo, monkeypatch, api_key, fake_provider):
    monkeypatch.chdir(git_repo)

    result = runner.invoke(main, ["generate", "commit"])

    assert result.exit_code == 0
    assert "No staged changes" in result.output
    assert fake_provider.calls == []


def test_generate_commit_and_commit(runner, git_repo, monkeypatch, api_key, fake_provider):
    monkeypatch.chdir(git_repo)
    (git_repo / "app.js").write_text("console.log('hi')\n")
    git(git_repo, "add", "app.js")

    result = runner.invoke(main, ["-m", "test/model", "generate", "commit", "--commit"])

    assert result.exit_code == 0, result.output
    assert "feat: add debug log" in result.output
    assert git(git_repo, "log", "-1", "--format=%s").strip() == "feat: add debug log"
    assert fake_provider.created[0]["model"] == "test/model"
    assert fake_provider.created[0]["api_key"] == "sk-test"
    ((messages, _),) = fake_provider.calls
    assert "+console.log('hi')" in messages[1].content
    assert fake_provider.closed


def test_generate_commit_declined(runner, git_repo, monkeypatch, api_key, fake_provider):
    monkeypatch.chdir(git_repo)
    (git_repo / "app.js").write_text("console.log('hi')\n")
    git(git_repo, "add", "app.js")

    result = runner.invoke(main, ["generate", "commit"], input="n\n")

    assert result.exit_code == 0, result.output
    assert git(git_repo, "log", "-1", "--format=%s").strip() == "initial"


def test_generation_error_exits_nonzero(runner, git_repo, monkeypatch, api_key, fake_provider):
    from komp.providers import ProviderError

    monkeypatch.chdir(git_repo)
    (git_repo / "app.js").write_text("console.log('hi')\n")
    git(git_repo, "add", "app.js")
    fake_provider.error = ProviderError("OpenRouter API error (500): quota exceeded")

    result = runner.invoke(main, ["generate", "summary"])

    assert result.exit_code == 1
    assert "quota exceeded" in result.output


def test_init_writes_rc_file(runner, tmp_path, monkeypatch):
    answers = iter(["sk-or-new", "openai/gpt-4o"])
    monkeypatch.setattr(commands.Prompt, "ask", lambda *args, **kwargs: next(answers))
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("SHELL", "/bin/zsh")
    monkeypatch.setattr("sys.platform", "linux")

    result = runner.invoke(main, ["init"])

    assert result.exit_code == 0, result.output
    content = (tmp_path / ".zshrc").read_text()
    assert "export OPENROUTER_API_KEY=sk-or-new" in content
    assert "export OPENROUTER_MODEL=openai/gpt-4o" in content


def test_interactive_without_key_declined(runner, monkeypatch):
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)

    result = runner.invoke(main, [], input="n\n")

    assert result.exit_code == 1
    assert "No API key" in result.output


def test_interactive_summary(runner, git_repo, monkeypatch, api_key, fake_provider):
    monkeypatch.chdir(git_repo)
    (git_repo / "app.js").write_text("console.log('hi')\n")
    git(git_repo, "add", "app.js")

    result = runner.invoke(main, [], input="summary\n")

    assert result.exit_code == 0, result.output
    assert "Summary generated" in result.output
    assert "Done." in result.output

"""Tests for persisting credentials in the shell environment."""

import shutil
import subprocess
from pathlib import Path

import pytest

from komp import shell_env
from komp.shell_env import RC_MARKER, ShellEnvError, detect_rc_file, persist_credentials


@pytest.mark.parametrize(
    ("shell", "platform", "expected"),
    [
        ("/bin/zsh", "darwin", ".zshrc"),
        ("/usr/bin/zsh", "linux", ".zshrc"),
        ("/bin/bash", "darwin", ".bash_profile"),
        ("/bin/bash", "linux", ".bashrc"),
        ("/usr/bin/fish", "linux", ".bashrc"),
    ],
)
def test_detect_rc_file(shell, platform, expected):
    home = Path("/home/dev")
    assert detect_rc_file(shell, platform, home) == home / expected


def test_appends_exports(tmp_path, monkeypatch):
    monkeypatch.setenv("SHELL", "/bin/zsh")
    rc = tmp_path / ".zshrc"
    rc.write_text("alias ll='ls -l'\n")

    path = persist_credentials("sk-or-123", "openai/gpt-4o", platform="linux", home=tmp_path)

    assert path == rc
    assert rc.read_text() == (
        "alias ll='ls -l'\n"
        f"\n{RC_MARKER}\n"
        "export OPENROUTER_API_KEY=sk-or-123\n"
        "export OPENROUTER_MODEL=openai/gpt-4o\n"
    )


def test_creates_missing_rc_file(tmp_path, monkeypatch):
    monkeypatch.setenv("SHELL", "/bin/bash")

    path = persist_credentials("sk-or-123", "m", platform="linux", home=tmp_path)

    assert path == tmp_path / ".bashrc"
    assert "export OPENROUTER_API_KEY=sk-or-123" in path.read_text()


def test_export_block_quotes_shell_metacharacters():
    block = shell_env.export_block('sk"$(rm -rf ~)`x`', "it's/model")

    assert "export OPENROUTER_API_KEY='sk\"$(rm -rf ~)`x`'\n" in block
    assert "export OPENROUTER_MODEL='it'\"'\"'s/model'\n" in block


def test_sourced_block_restores_exact_values(tmp_path):
    bash = shutil.which("bash")
    if bash is None:
        pytest.skip("bash is not installed")
    api_key = 'sk"$HOME`id`\\ end'
    model = "it's a model"
    rc = tmp_path / "rc"
    rc.write_text(shell_env.export_block(api_key, model))

    result = subprocess.run(
        [bash, "-c", f'. "{rc}"; printf "%s\\n%s" "$OPENROUTER_API_KEY" "$OPENROUTER_MODEL"'],
        capture_output=True,
        text=True,
        check=True,
        env={"PATH": "/usr/bin:/bin"},
    )

    assert result.stdout == f"{api_key}\n{model}"


def test_unwritable_rc_file(tmp_path, monkeypatch):
    monkeypatch.setenv("SHELL", "/bin/bash")
    (tmp_path / ".bashrc").mkdir()

    with pytest.raises(ShellEnvError):
        persist_credentials("sk-or-123", "m", platform="linux", home=tmp_path)


def test_windows_uses_setx(monkeypatch):
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, "", "")

    monkeypatch.setattr(shell_env.subprocess, "run", fake_run)

    assert persist_credentials("sk-or-123", "m", platform="win32") is None
    assert calls == [
        ["setx", "OPENROUTER_API_KEY", "sk-or-123"],
        ["setx", "OPENROUTER_MODEL", "m"],
    ]


def test_windows_failure(monkeypatch):
    def fake_run(cmd, **kwargs):
        raise subprocess.CalledProcessError(1, cmd)

    monkeypatch.setattr(shell_env.subprocess, "run", fake_run)

    with pytest.raises(ShellEnvError, match="OPENROUTER_API_KEY"):
        persist_credentials("sk-or-123", "m", platform="win32")

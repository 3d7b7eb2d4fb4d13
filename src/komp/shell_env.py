"""Persist the API key and model in the user's shell environment."""

from __future__ import annotations

import os
import shlex
import subprocess
import sys
from pathlib import Path

from loguru import logger

from .config import API_KEY_ENV_VAR, MODEL_ENV_VAR

RC_MARKER = "# Added by komp"


class ShellEnvError(Exception):
    """The environment variables could not be persisted."""

    pass


def detect_rc_file(shell: str, platform: str, home: Path) -> Path:
    """Pick the startup file for a shell.

    Args:
        shell: Value of $SHELL
        platform: sys.platform value
        home: Home directory

    Returns:
        Path of the rc file to append to
    """
    if "zsh" in shell:
        return home / ".zshrc"
    if "bash" in shell and platform == "darwin":
        return home / ".bash_profile"
    return home / ".bashrc"


def export_block(api_key: str, model: str) -> str:
    return (
        f"\n{RC_MARKER}\n"
        f"export {API_KEY_ENV_VAR}={shlex.quote(api_key)}\n"
        f"export {MODEL_ENV_VAR}={shlex.quote(model)}\n"
    )


def _set_windows_env(api_key: str, model: str) -> None:
    for name, value in ((API_KEY_ENV_VAR, api_key), (MODEL_ENV_VAR, model)):
        try:
            subprocess.run(["setx", name, value], check=True, capture_output=True, text=True)
        except (subprocess.CalledProcessError, OSError) as e:
            raise ShellEnvError(f"Failed to set {name} on Windows: {e}") from e


def _set_unix_env(api_key: str, model: str, rc_path: Path) -> None:
    if not rc_path.exists():
        logger.debug(f"Creating {rc_path}")
    try:
        with rc_path.open("a", encoding="utf-8") as f:
            f.write(export_block(api_key, model))
    except OSError as e:
        raise ShellEnvError(f"Failed to update {rc_path.name}: {e}") from e


def persist_credentials(
    api_key: str,
    model: str,
    platform: str | None = None,
    home: Path | None = None,
) -> Path | None:
    """Store the API key and model for future shells.

    Args:
        api_key: API key to store
        model: Model identifier to store
        platform: sys.platform override
        home: Home directory override

    Returns:
        The rc file that was updated, or None on Windows (registry via setx)

    Raises:
        ShellEnvError: If the variables could not be written
    """
    platform = platform or sys.platform
    if platform == "win32":
        _set_windows_env(api_key, model)
        return None

    rc_path = detect_rc_file(os.environ.get("SHELL", "/bin/bash"), platform, home or Path.home())
    _set_unix_env(api_key, model, rc_path)
    return rc_path

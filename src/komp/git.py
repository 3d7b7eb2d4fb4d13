"""Git operations wrapper using subprocess."""

from __future__ import annotations

import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from loguru import logger

# Generated, binary and lock artifacts that never belong in a prompt
DIFF_EXCLUDE_PATTERNS: tuple[str, ...] = (
    # Lockfiles
    "package-lock.json",
    "npm-shrinkwrap.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "bun.lockb",
    "bun.lock",
    "poetry.lock",
    "Pipfile.lock",
    "uv.lock",
    "pdm.lock",
    "Cargo.lock",
    "Gemfile.lock",
    "composer.lock",
    "go.sum",
    "mix.lock",
    "pubspec.lock",
    "Podfile.lock",
    # Build output
    "dist/**",
    "build/**",
    "out/**",
    "target/**",
    ".next/**",
    "node_modules/**",
    "*.min.js",
    "*.min.css",
    "*.map",
    # Compiled objects and binaries
    "*.pyc",
    "*.pyo",
    "*.o",
    "*.obj",
    "*.a",
    "*.so",
    "*.dylib",
    "*.dll",
    "*.exe",
    "*.class",
    "*.jar",
    "*.wasm",
    # Virtual environments and caches
    ".venv/**",
    "venv/**",
    "__pycache__/**",
    ".mypy_cache/**",
    ".pytest_cache/**",
    ".ruff_cache/**",
    ".tox/**",
    ".cache/**",
    ".gradle/**",
)


def exclude_pathspecs(patterns: tuple[str, ...] = DIFF_EXCLUDE_PATTERNS) -> list[str]:
    """Turn denylist patterns into git exclude pathspecs.

    Uses the long magic form so each pattern matches at any depth below the
    repository top level, whatever directory git is run from.
    """
    return [f":(top,exclude,glob)**/{pattern}" for pattern in patterns]


STAGED_DIFF_ARGS: tuple[str, ...] = (
    "diff",
    "--cached",
    "--unified=0",
    "--minimal",
    "--ignore-all-space",
    "--",
    ":/",
    *exclude_pathspecs(),
)


class GitError(Exception):
    """Error during git operations."""

    pass


class CommandRunner(ABC):
    """Runs read-only git commands and reports their outcome."""

    @abstractmethod
    def run(self, args: list[str]) -> tuple[str, int]:
        """Run git with the given arguments.

        Args:
            args: Git command arguments (without the leading "git")

        Returns:
            Tuple of (stdout, exit code)
        """
        ...


class SubprocessRunner(CommandRunner):
    """Runs git in a working directory through subprocess."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path else Path.cwd()

    def run(self, args: list[str]) -> tuple[str, int]:
        cmd = ["git", *args]
        try:
            result = subprocess.run(
                cmd,
                cwd=self.path,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            # git missing or cwd unusable
            logger.debug(f"Could not run git {args[0] if args else ''}: {e}")
            return "", 127

        logger.debug(f"git {args[0] if args else ''} exited with {result.returncode}")
        if result.returncode != 0 and result.stderr:
            logger.debug(f"git stderr: {result.stderr.strip()}")
        return result.stdout, result.returncode


class DiffSource:
    """Read-only view of the staged changes in a repository."""

    def __init__(self, runner: CommandRunner | None = None) -> None:
        """Initialize the diff source.

        Args:
            runner: Command runner to use (defaults to git in the current directory)
        """
        self.runner = runner or SubprocessRunner()

    def get_staged_diff(self) -> str | None:
        """Get a minimized diff of staged changes.

        Zero context lines, minimal algorithm, whitespace-only edits ignored and
        DIFF_EXCLUDE_PATTERNS left out.

        Returns:
            The trimmed diff, or None when there is nothing to show or git failed
        """
        stdout, code = self.runner.run(list(STAGED_DIFF_ARGS))
        if code != 0:
            return None

        diff = stdout.strip()
        logger.debug(f"Staged diff is {len(diff)} characters")
        return diff or None

    def has_staged_changes(self) -> bool:
        """Check if there are staged changes worth describing."""
        diff = self.get_staged_diff()
        return diff is not None and len(diff) > 0

    def is_git_repo(self) -> bool:
        """Check if the working directory is inside a git work tree."""
        stdout, code = self.runner.run(["rev-parse", "--is-inside-work-tree"])
        return code == 0 and stdout.strip() == "true"


class GitRepo:
    """Write-side git operations, used once a message has been generated."""

    def __init__(self, path: str | Path | None = None) -> None:
        """Initialize git repository wrapper.

        Args:
            path: Path to the repository (defaults to current directory)
        """
        self.path = Path(path) if path else Path.cwd()

    def _run(self, *args: str) -> subprocess.CompletedProcess[str]:
        """Run a git command.

        Args:
            *args: Git command arguments

        Returns:
            CompletedProcess result

        Raises:
            GitError: If the command fails
        """
        cmd = ["git", *args]
        logger.debug(f"Running git {args[0] if args else ''}")
        try:
            return subprocess.run(
                cmd,
                cwd=self.path,
                check=True,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except subprocess.CalledProcessError as e:
            raise GitError(
                f"Command failed: {' '.join(cmd)}\nExit code: {e.returncode}\nStderr: {e.stderr}"
            ) from e
        except OSError as e:
            raise GitError(f"Could not run git: {e}") from e

    def current_branch(self) -> str:
        """Get the current branch name.

        Raises:
            GitError: If the branch cannot be determined
        """
        branch = self._run("rev-parse", "--abbrev-ref", "HEAD").stdout.strip()
        if not branch:
            raise GitError("Unable to determine current branch")
        return branch

    def add(self, *paths: str | Path) -> None:
        """Stage the given paths."""
        self._run("add", "--", *(str(p) for p in paths))

    def commit(self, message: str) -> None:
        """Commit the staged changes with the given message."""
        self._run("commit", "-m", message)

    def push(self, branch: str, remote: str = "origin") -> None:
        """Push a branch to a remote."""
        self._run("push", remote, branch)

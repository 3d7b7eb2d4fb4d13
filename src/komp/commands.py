"""The commit, summary and changelog workflows behind the CLI."""

from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import pyperclip
from rich.console import Console
from rich.prompt import Confirm, Prompt

from .changelog import (
    CHANGELOG_FILENAME,
    ChangelogError,
    commit_and_push_changelog,
    write_changelog_entry,
)
from .config import DEFAULT_MODEL, Settings
from .generator import MessageGenerator
from .git import DiffSource, GitError, GitRepo
from .providers import CompletionService, OpenRouterProvider
from .shell_env import persist_credentials


def _ask(question: str) -> bool:
    return Confirm.ask(question, default=False)


@dataclass
class CommandContext:
    """Everything a command needs, resolved once by the CLI."""

    settings: Settings
    console: Console = field(default_factory=Console)
    diff_source: DiffSource = field(default_factory=DiffSource)
    repo: GitRepo = field(default_factory=GitRepo)
    service: CompletionService | None = None
    confirm: Callable[[str], bool] = field(default=_ask)
    _owned: OpenRouterProvider | None = field(default=None, init=False, repr=False)

    def generator(self) -> MessageGenerator:
        """Build a generator over the configured completion service."""
        if self.service is None:
            self.service = OpenRouterProvider(
                api_key=self.settings.require_api_key(),
                model=self.settings.model,
                base_url=self.settings.base_url,
            )
            self._owned = self.service
        return MessageGenerator(self.service)

    def close(self) -> None:
        """Close the provider this context created, if any."""
        if self._owned is not None:
            self._owned.close()
            self.service = self._owned = None


def ensure_git_repo(ctx: CommandContext) -> None:
    """Exit unless the working directory is inside a git repository."""
    if not ctx.diff_source.is_git_repo():
        ctx.console.print(
            "[red]✖ Not a git repository. This tool must be run inside a git repo.[/]"
        )
        sys.exit(1)


def read_diff_or_exit(ctx: CommandContext) -> str:
    """Return the staged diff, exiting when there is nothing to describe."""
    if not ctx.diff_source.has_staged_changes():
        ctx.console.print("[red]✖ No staged changes.[/]")
        ctx.console.print("[yellow]Run `git add <files>` before running this tool.[/]")
        sys.exit(0)

    diff = ctx.diff_source.get_staged_diff()
    if not diff:
        ctx.console.print("[red]✖ Failed to read diff.[/]")
        sys.exit(1)
    return diff


def copy_to_clipboard(ctx: CommandContext, text: str) -> bool:
    """Copy text to the clipboard, warning instead of failing."""
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException:
        ctx.console.print("[yellow]⚠ Could not copy to clipboard[/]")
        return False
    return True


def run_generate_commit(ctx: CommandContext, commit: bool = False, push: bool = False) -> str:
    """Generate a commit message, then optionally commit and push.

    Args:
        ctx: Command context
        commit: Commit without asking
        push: Push the current branch after committing

    Returns:
        The generated commit message
    """
    with ctx.console.status("Reading git diff..."):
        diff = read_diff_or_exit(ctx)

    generator = ctx.generator()
    with ctx.console.status(f"Analyzing changes with {ctx.settings.model}..."):
        message = generator.commit_message(diff)

    if copy_to_clipboard(ctx, message):
        ctx.console.print("[green]✔ Commit message generated and copied to clipboard![/]")
    else:
        ctx.console.print("[green]✔ Commit message generated.[/]")

    ctx.console.print()
    ctx.console.rule(style="green")
    ctx.console.print(message, markup=False, highlight=False)
    ctx.console.rule(style="green")
    ctx.console.print()

    if not commit and not ctx.confirm("Create commit with this message now?"):
        return message

    try:
        with ctx.console.status("Creating git commit..."):
            ctx.repo.commit(message)
    except GitError as e:
        ctx.console.print("[red]✖ Failed to create git commit.[/]")
        ctx.console.print(str(e), style="red", markup=False)
        sys.exit(1)
    ctx.console.print("[green]✔ Committed staged changes.[/]")

    if push:
        try:
            with ctx.console.status("Pushing current branch to origin..."):
                branch = ctx.repo.current_branch()
                ctx.repo.push(branch)
        except GitError as e:
            ctx.console.print("[red]✖ Failed to push to origin.[/]")
            ctx.console.print(str(e), style="red", markup=False)
            sys.exit(1)
        ctx.console.print(f"[green]✔ Pushed {branch} to origin.[/]")

    return message


def run_generate_summary(ctx: CommandContext) -> str:
    """Generate and print a summary of the staged changes."""
    with ctx.console.status("Reading git diff..."):
        diff = read_diff_or_exit(ctx)

    generator = ctx.generator()
    with ctx.console.status(f"Summarizing changes with {ctx.settings.model}..."):
        summary = generator.summary(diff)
    ctx.console.print("[green]✔ Summary generated.[/]")

    ctx.console.print()
    ctx.console.rule("Summary", style="green")
    ctx.console.print(summary, markup=False, highlight=False)
    ctx.console.rule(style="green")
    ctx.console.print()
    return summary


def run_generate_changelog(ctx: CommandContext, new: bool = False, push: bool = False) -> bool:
    """Generate a changelog entry and add it to CHANGELOG.md.

    Args:
        ctx: Command context
        new: Create CHANGELOG.md when it does not exist
        push: Commit the changelog and push the current branch

    Returns:
        True if the changelog was updated
    """
    with ctx.console.status("Reading git diff..."):
        diff = read_diff_or_exit(ctx)

    generator = ctx.generator()
    with ctx.console.status("Generating changelog entry..."):
        entry = generator.changelog_entry(diff)
    ctx.console.print("[green]✔ Changelog entry created.[/]")

    path = Path(ctx.repo.path) / CHANGELOG_FILENAME
    ctx.console.print("[magenta]➜[/] Checking for existing changelog...")
    existed = path.exists()
    try:
        written = write_changelog_entry(entry, path, create=new)
    except ChangelogError as e:
        ctx.console.print("[red]✖ Failed to write changelog.[/]")
        ctx.console.print(str(e), style="red", markup=False)
        sys.exit(1)

    if not written:
        ctx.console.print(
            f"[yellow]⚠ {CHANGELOG_FILENAME} not found. "
            "Use --new if you actually want one created.[/]"
        )
        return False

    if existed:
        ctx.console.print("[green]✔ Changelog entry added.[/]")
    else:
        ctx.console.print(f"[green]✔ Created {CHANGELOG_FILENAME} and added first entry.[/]")

    if push:
        try:
            with ctx.console.status("Committing and pushing changelog..."):
                branch = commit_and_push_changelog(ctx.repo, path)
        except GitError as e:
            ctx.console.print("[red]✖ Failed to commit or push changelog.[/]")
            ctx.console.print(str(e), style="red", markup=False)
            sys.exit(1)
        ctx.console.print(f"[green]✔ Changelog committed and pushed to origin/{branch}.[/]")

    return True


def run_init(console: Console) -> Path | None:
    """Ask for the API key and model and persist them in the shell environment.

    Returns:
        The rc file that was updated, or None on Windows
    """
    console.print("[bold blue]komp initialization (global mode)[/]")
    console.print(
        "[dim]This will store your keys permanently in your system environment variables.[/]"
    )

    api_key = ""
    while not api_key:
        api_key = Prompt.ask("Enter your OpenRouter API Key", password=True).strip()
        if not api_key:
            console.print("[red]API Key is required.[/]")
    model = Prompt.ask(
        f"Enter the Model Name (e.g., {DEFAULT_MODEL})",
        default=DEFAULT_MODEL,
    ).strip()

    rc_path = persist_credentials(api_key, model or DEFAULT_MODEL)
    if rc_path is None:
        console.print("\n[green]Success! ✔[/]")
        console.print(
            "[bold yellow]IMPORTANT: You must restart your command prompt/terminal "
            "for these changes to take effect.[/]"
        )
    else:
        console.print(f"\n[green]Success! Appended variables to {rc_path} ✔[/]")
        console.print(
            f"[bold yellow]IMPORTANT: Run 'source {rc_path}' or restart your terminal "
            "to apply changes.[/]"
        )
    return rc_path


def run_update(console: Console) -> bool:
    """Offer to rerun init, which overwrites the stored values.

    Returns:
        True if init ran
    """
    console.print("[yellow]To update, simply run 'komp init' again to overwrite the values.[/]")
    if not Confirm.ask("Run init now?", default=True):
        return False
    run_init(console)
    return True

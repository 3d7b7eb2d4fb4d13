"""CLI interface for komp."""

from __future__ import annotations

import dataclasses
import sys
from collections.abc import Callable
from typing import Any

import click
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt

from . import __version__
from .commands import (
    CommandContext,
    ensure_git_repo,
    run_generate_changelog,
    run_generate_commit,
    run_generate_summary,
    run_init,
    run_update,
)
from .config import API_KEY_ENV_VAR, Settings
from .log import setup_logging

console = Console()

ACTIONS = {
    "commit": "Generate commit message",
    "summary": "Generate summary",
    "changelog": "Generate changelog entry",
    "update": "Update configuration",
}


def _handle_errors(
    obj: CommandContext,
    verbose: bool,
    func: Callable[..., Any],
    *args: Any,
) -> None:
    """Run a command, turning any error into a message and exit code 1."""
    try:
        func(*args)
    except Exception as e:
        if verbose:
            obj.console.print_exception()
        else:
            obj.console.print(f"\n[red]✖ Error: {escape(str(e))}[/]")
        sys.exit(1)
    finally:
        obj.close()


def _require_api_key(obj: CommandContext) -> None:
    if not obj.settings.api_key:
        obj.console.print(f"[red]✖ {API_KEY_ENV_VAR} missing. Run `komp init`.[/]")
        sys.exit(1)


@click.group(invoke_without_command=True)
@click.option(
    "-k",
    "--api-key",
    help=f"OpenRouter API key (defaults to {API_KEY_ENV_VAR} env var)",
)
@click.option(
    "-m",
    "--model",
    help="Model to use (defaults to OPENROUTER_MODEL env var or openai/gpt-3.5-turbo)",
)
@click.option(
    "--base-url",
    help="OpenAI-compatible API base URL (defaults to OpenRouter)",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Show debug logs and full tracebacks",
)
@click.version_option(__version__)
@click.pass_context
def main(
    ctx: click.Context,
    api_key: str | None,
    model: str | None,
    base_url: str | None,
    verbose: bool,
) -> None:
    """Easy AI commit helper.

    \b
    Examples:
      # Store your OpenRouter key and model
      komp init

      # Generate a commit message for the staged changes and commit it
      komp generate commit --commit

      # Summarize the staged changes for a pull request
      komp generate summary

      # Prepend an entry to CHANGELOG.md, creating it if needed
      komp generate changelog --new

      # Pick an action interactively
      komp
    """
    setup_logging(verbose)

    overrides = {
        name: value
        for name, value in (("api_key", api_key), ("model", model), ("base_url", base_url))
        if value
    }
    settings = dataclasses.replace(Settings.from_env(), **overrides)
    ctx.obj = CommandContext(settings=settings, console=console)
    ctx.meta["verbose"] = verbose

    console.print("\n[bold blue]Komp CLI[/]")
    console.print("[cyan]ℹ[/] Easy ai commit helper!\n")

    if ctx.invoked_subcommand is None:
        _handle_errors(ctx.obj, verbose, interactive, ctx.obj)


@main.command()
@click.pass_obj
def init(obj: CommandContext) -> None:
    """Store the API key and model in your shell environment."""
    obj.console.print("[magenta]➜[/] Running initialization...")
    _handle_errors(obj, click.get_current_context().meta["verbose"], run_init, obj.console)
    obj.console.print("[green]✔[/] Initialization complete.")


@main.command()
@click.pass_obj
def update(obj: CommandContext) -> None:
    """Update the stored API key and model."""
    obj.console.print("[magenta]➜[/] Updating configuration...")
    _handle_errors(obj, click.get_current_context().meta["verbose"], run_update, obj.console)
    obj.console.print("[green]✔[/] Configuration updated.")


@main.group()
@click.pass_obj
def generate(obj: CommandContext) -> None:
    """Generate text from the staged changes."""
    obj.console.print("[magenta]➜[/] Validating git repository...")
    ensure_git_repo(obj)
    _require_api_key(obj)


@generate.command()
@click.option("-c", "--commit", is_flag=True, help="Create the commit without asking")
@click.option("-p", "--push", is_flag=True, help="Push the current branch after committing")
@click.pass_obj
def commit(obj: CommandContext, commit: bool, push: bool) -> None:
    """Generate a conventional commit message."""
    verbose = click.get_current_context().meta["verbose"]
    _handle_errors(obj, verbose, run_generate_commit, obj, commit, push)


@generate.command()
@click.pass_obj
def summary(obj: CommandContext) -> None:
    """Generate a pull request style summary."""
    verbose = click.get_current_context().meta["verbose"]
    _handle_errors(obj, verbose, run_generate_summary, obj)


@generate.command()
@click.option("-n", "--new", is_flag=True, help="Create CHANGELOG.md if it is missing")
@click.option("-p", "--push", is_flag=True, help="Commit the changelog and push")
@click.pass_obj
def changelog(obj: CommandContext, new: bool, push: bool) -> None:
    """Add a generated entry to CHANGELOG.md."""
    verbose = click.get_current_context().meta["verbose"]
    _handle_errors(obj, verbose, run_generate_changelog, obj, new, push)


def interactive(obj: CommandContext) -> None:
    """Ask what to do, then run it."""
    out = obj.console

    if not obj.settings.api_key:
        out.print("[yellow]⚠[/] API key not found.")
        out.print("[dim]Looks like first run. You need to initialize.[/]")
        if Confirm.ask("Run initialization now?", default=True):
            run_init(out)
            out.print("[green]✔[/] Setup complete. Run the command again.")
            sys.exit(0)
        out.print("[red]✖[/] No API key. Exiting.")
        sys.exit(1)

    out.print("[magenta]➜[/] Entering interactive mode.")
    out.print(f"[dim]Using model: {obj.settings.model}[/]")
    for key, label in ACTIONS.items():
        out.print(f"  [bold]{key}[/] - {label}")
    action = Prompt.ask("What do you want to do?", choices=list(ACTIONS), default="commit")

    if action == "update":
        run_update(out)
        out.print("[green]✔[/] Configuration updated.")
        return

    out.print("[magenta]➜[/] Validating git repository...")
    ensure_git_repo(obj)
    out.print("[green]✔[/] Git repo confirmed.")

    if action == "commit":
        commit_now = Confirm.ask("Create commit automatically?", default=False)
        push = Confirm.ask("Push after commit?", default=False)
        run_generate_commit(obj, commit=commit_now, push=push)
    elif action == "summary":
        run_generate_summary(obj)
    elif action == "changelog":
        new = Confirm.ask("Create CHANGELOG.md if missing?", default=False)
        push = Confirm.ask("Commit & push changelog?", default=False)
        run_generate_changelog(obj, new=new, push=push)

    out.print("[green]✔[/] Done.")


if __name__ == "__main__":
    main()

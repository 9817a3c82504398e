"""gitpanel CLI — Typer application over the repository facade and watcher."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from gitpanel import __version__

app = typer.Typer(
    name="gitpanel",
    help="Git status, diffs and change watching for a working tree.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)
out = Console()


@dataclass
class _Options:
    repo: Optional[str] = None
    config: Optional[str] = None
    format: Optional[str] = None


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _opts(ctx: typer.Context) -> _Options:
    return ctx.obj if isinstance(ctx.obj, _Options) else _Options()


def _discover_root(opts: _Options) -> Path:
    """Find the working-tree root, exit 2 on failure.

    Runs before the config file is read, so only GITPANEL_GIT_BINARY can
    choose the git binary here.
    """
    from gitpanel.git.errors import GitError
    from gitpanel.git.repository import Repository
    from gitpanel.git.runner import CommandRunner

    start = Path(opts.repo) if opts.repo else Path.cwd()
    runner = CommandRunner(git_binary=os.environ.get("GITPANEL_GIT_BINARY") or "git")
    try:
        return Repository.discover(start, runner)
    except GitError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc


def _open(ctx: typer.Context):
    """Resolve repo root + config, exit 2 on failure. Returns (repo, cfg)."""
    from gitpanel.config.loader import ConfigError, load_config
    from gitpanel.config.schema import OUTPUT_FORMATS
    from gitpanel.git.repository import Repository

    opts = _opts(ctx)
    root = _discover_root(opts)

    try:
        cfg = load_config(root, opts.config)
    except ConfigError as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc

    if opts.format:
        if opts.format not in OUTPUT_FORMATS:
            console.print(f"[bold red]Invalid format:[/bold red] {opts.format}")
            raise typer.Exit(code=2)
        cfg.output.format = opts.format  # type: ignore[assignment]

    return Repository.from_config(root, cfg), cfg


def _emit(document: Any, fmt: str) -> None:
    from gitpanel.output import json_report, yaml_report

    if fmt == "yaml":
        print(yaml_report.render(document), end="")
    else:
        print(json_report.render(document))


def _mutate(action: str, operation) -> None:
    """Run a mutating facade call; git failures exit 1."""
    from gitpanel.git.errors import GitError

    try:
        operation()
    except GitError as exc:
        console.print(f"[red]✗[/red] {action} failed: {exc}")
        raise typer.Exit(code=1) from exc
    console.print(f"[green]✓[/green] {action}")


# ── status ────────────────────────────────────────────────────────────────────


@app.command()
def status(ctx: typer.Context) -> None:
    """Show branch tracking info and changed files."""
    from gitpanel.output import json_report, terminal

    repo, cfg = _open(ctx)
    snapshot = repo.status()
    if cfg.output.format == "terminal":
        terminal.render_status(snapshot, console=out, show_summary=cfg.output.show_summary)
    else:
        _emit(json_report.status_to_dict(snapshot), cfg.output.format)


@app.command()
def clean(ctx: typer.Context) -> None:
    """Exit 0 if the working tree is clean, 1 otherwise."""
    repo, _ = _open(ctx)
    if repo.is_clean():
        console.print("[green]✓[/green] Working tree clean.")
        raise typer.Exit(code=0)
    console.print("[yellow]⚠[/yellow]  Working tree has changes.")
    raise typer.Exit(code=1)


# ── diff / stats ──────────────────────────────────────────────────────────────


@app.command()
def diff(
    ctx: typer.Context,
    path: Optional[str] = typer.Argument(None, help="Limit the diff to one path"),
    staged: bool = typer.Option(False, "--staged", "-s", help="Show staged changes"),
) -> None:
    """Show the unstaged (or staged) diff."""
    from gitpanel.output import json_report, terminal

    repo, cfg = _open(ctx)
    diffs = repo.diff(path, staged=staged)
    if cfg.output.format == "terminal":
        terminal.render_diffs(diffs, console=out)
    else:
        _emit([json_report.diff_to_dict(d) for d in diffs], cfg.output.format)


@app.command()
def stats(
    ctx: typer.Context,
    staged: bool = typer.Option(False, "--staged", "-s", help="Count staged changes"),
    untracked: bool = typer.Option(True, "--untracked/--no-untracked", help="Include untracked files"),
) -> None:
    """Show insertion / deletion totals."""
    from gitpanel.output import json_report, terminal

    repo, cfg = _open(ctx)
    totals = repo.diff_stats(staged=staged, include_untracked=untracked)
    if cfg.output.format == "terminal":
        terminal.render_stats(totals, console=out)
    else:
        _emit(json_report.stats_to_dict(totals), cfg.output.format)


# ── staging / commit ──────────────────────────────────────────────────────────


@app.command()
def stage(
    ctx: typer.Context,
    paths: Optional[List[str]] = typer.Argument(None, help="Paths to stage"),
    all_: bool = typer.Option(False, "--all", "-A", help="Stage every change"),
) -> None:
    """Add paths (or everything) to the index."""
    repo, _ = _open(ctx)
    if all_:
        _mutate("Staged all changes", repo.stage_all)
    else:
        _mutate(f"Staged {len(paths or [])} path(s)", lambda: repo.stage(paths or []))


@app.command()
def unstage(
    ctx: typer.Context,
    paths: Optional[List[str]] = typer.Argument(None, help="Paths to unstage"),
    all_: bool = typer.Option(False, "--all", "-A", help="Unstage everything"),
) -> None:
    """Remove paths (or everything) from the index, keeping changes."""
    repo, _ = _open(ctx)
    if all_:
        _mutate("Unstaged all changes", repo.unstage_all)
    else:
        _mutate(f"Unstaged {len(paths or [])} path(s)", lambda: repo.unstage(paths or []))


@app.command()
def discard(
    ctx: typer.Context,
    paths: List[str] = typer.Argument(..., help="Paths whose working-tree changes are dropped"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Discard working-tree changes to paths."""
    repo, _ = _open(ctx)
    if not yes and not typer.confirm(f"Discard changes to {len(paths)} path(s)?"):
        raise typer.Exit(code=1)
    _mutate(f"Discarded changes to {len(paths)} path(s)", lambda: repo.discard_changes(paths))


@app.command()
def commit(
    ctx: typer.Context,
    message: str = typer.Option(..., "--message", "-m", help="Commit message"),
) -> None:
    """Commit the staged changes."""
    repo, _ = _open(ctx)
    if not message.strip():
        console.print("[bold red]Error:[/bold red] commit message is empty")
        raise typer.Exit(code=2)
    _mutate("Committed", lambda: repo.commit(message))


# ── branch ────────────────────────────────────────────────────────────────────


@app.command()
def branch(ctx: typer.Context) -> None:
    """Show the current branch and its distance from upstream."""
    repo, cfg = _open(ctx)
    name = repo.current_branch()
    counts = repo.ahead_behind()
    unpushed = repo.has_unpushed_commits()

    if cfg.output.format != "terminal":
        _emit(
            {"branch": name, "ahead": counts.ahead, "behind": counts.behind, "unpushed": unpushed},
            cfg.output.format,
        )
        return

    out.print(f"[bold cyan]{name or '(detached)'}[/bold cyan]  ↑{counts.ahead} ↓{counts.behind}")
    if unpushed:
        out.print("[yellow]Unpushed commits present.[/yellow]")


# ── watch ─────────────────────────────────────────────────────────────────────


@app.command()
def watch(ctx: typer.Context) -> None:
    """Print the status again whenever the working tree changes (Ctrl-C to stop)."""
    from gitpanel.output import terminal
    from gitpanel.session import RepositorySession

    repo, cfg = _open(ctx)

    def _show(snapshot) -> None:
        out.rule(f"[dim]{repo.path}[/dim]")
        terminal.render_status(snapshot, console=out, show_summary=cfg.output.show_summary)

    session = RepositorySession(repo, on_refresh=_show, watcher_config=cfg.watcher)
    stop = threading.Event()
    with session:
        console.print(f"[dim]Watching {repo.path} — press Ctrl-C to stop.[/dim]")
        try:
            stop.wait()
        except KeyboardInterrupt:
            pass


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init(ctx: typer.Context) -> None:
    """Generate a starter .gitpanel.toml in the repo root."""
    from gitpanel.config.defaults import DEFAULT_TOML
    from gitpanel.config.loader import CONFIG_FILENAME

    root = _discover_root(_opts(ctx))

    config_path = root / CONFIG_FILENAME
    if config_path.exists():
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILENAME} already exists at {config_path}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {config_path}")


# ── version / globals ─────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"gitpanel {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    repo: Optional[str] = typer.Option(None, "--repo", "-C", help="Run as if started in this directory"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .gitpanel.toml"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: terminal | json | yaml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log git commands"),
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """gitpanel — git status, diffs and change watching."""
    _configure_logging(verbose)
    ctx.obj = _Options(repo=repo, config=config, format=format)

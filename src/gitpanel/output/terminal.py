"""Rich terminal reporter."""

from __future__ import annotations

from typing import Iterable, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from gitpanel.git.models import (
    DiffLineKind,
    DiffStats,
    FileDiff,
    FileStatus,
    FileStatusKind,
    RepositoryStatus,
)

_KIND_STYLE = {
    FileStatusKind.MODIFIED: "yellow",
    FileStatusKind.ADDED: "green",
    FileStatusKind.DELETED: "red",
    FileStatusKind.RENAMED: "cyan",
    FileStatusKind.COPIED: "cyan",
    FileStatusKind.UNMERGED: "bold red",
    FileStatusKind.UNTRACKED: "magenta",
    FileStatusKind.IGNORED: "dim",
    FileStatusKind.UNKNOWN: "bold white on red",
}

_LINE_STYLE = {
    DiffLineKind.ADDITION: "green",
    DiffLineKind.DELETION: "red",
    DiffLineKind.HUNK_HEADER: "cyan",
    DiffLineKind.HEADER: "bold",
    DiffLineKind.CONTEXT: "",
}


def _code(kind: Optional[FileStatusKind]) -> Text:
    if kind is None:
        return Text("·", style="dim")
    return Text(kind.symbol, style=_KIND_STYLE.get(kind, ""))


def _branch_line(status: RepositoryStatus) -> Text:
    text = Text()
    text.append("On branch ", style="dim")
    text.append(status.branch or "(unknown)", style="bold cyan")
    if status.upstream:
        text.append(" → ", style="dim")
        text.append(status.upstream, style="cyan")
    if status.ahead or status.behind:
        text.append(f"  ↑{status.ahead} ↓{status.behind}", style="yellow")
    return text


def _path_cell(entry: FileStatus) -> Text:
    if entry.original_path:
        return Text(f"{entry.original_path} → {entry.path}")
    return Text(entry.path)


def render_status(status: RepositoryStatus, *, console: Optional[Console] = None, show_summary: bool = True) -> None:
    """Print a status snapshot as a table."""
    console = console or Console()
    console.print(_branch_line(status))

    if status.is_clean:
        console.print("[bold green]✓ Working tree clean.[/bold green]")
        return

    table = Table(show_header=True, header_style="bold", border_style="dim")
    table.add_column("Index", justify="center", width=5)
    table.add_column("Tree", justify="center", width=5)
    table.add_column("Path", style="magenta")
    for entry in status.files:
        table.add_row(_code(entry.staged_status), _code(entry.unstaged_status), _path_cell(entry))
    console.print(table)

    if show_summary:
        console.print(
            f"[dim]{len(status.staged_files)} staged · "
            f"{len(status.modified_files)} modified · "
            f"{len(status.untracked_files)} untracked · "
            f"{len(status.conflicted_files)} conflicted[/dim]"
        )


def _number(value: Optional[int]) -> str:
    return "" if value is None else str(value)


def render_diffs(diffs: Iterable[FileDiff], *, console: Optional[Console] = None) -> None:
    """Print file diffs with old/new line number gutters."""
    console = console or Console()
    shown = False
    for file_diff in diffs:
        shown = True
        title = file_diff.path
        if file_diff.old_path:
            title = f"{file_diff.old_path} → {file_diff.path}"
        console.print(
            Text.assemble(
                (title, "bold"),
                (f"  +{file_diff.additions}", "green"),
                (f" -{file_diff.deletions}", "red"),
            )
        )
        if file_diff.is_binary:
            console.print("[dim]  Binary file not shown[/dim]")
            continue
        for hunk in file_diff.hunks:
            for line in hunk.lines:
                gutter = f"{_number(line.old_line_number):>5} {_number(line.new_line_number):>5} "
                body = Text(gutter, style="dim")
                body.append(line.kind.prefix + line.content, style=_LINE_STYLE[line.kind])
                console.print(body, soft_wrap=True)
        console.print()
    if not shown:
        console.print("[dim]No changes.[/dim]")


def render_stats(stats: DiffStats, *, console: Optional[Console] = None) -> None:
    console = console or Console()
    noun = "file" if stats.files == 1 else "files"
    console.print(
        Text.assemble(
            (f"{stats.files} {noun} changed, ", ""),
            (f"{stats.insertions} insertions(+)", "green"),
            (", ", ""),
            (f"{stats.deletions} deletions(-)", "red"),
        )
    )

"""Main CLI interface for Ticket Changesets."""

import contextlib
import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ticket_changesets.core.config import load_settings
from ticket_changesets.core.errors import (
    ContentRetrievalFailure,
    NoMatchingRevisions,
    TicketChangesetsError,
)
from ticket_changesets.core.log_config import configure_logging
from ticket_changesets.core.rendering import (
    DIFF_LINE_STYLES,
    change_type_style,
    classify_diff_line,
    comparison_diff_lines,
    render_summary,
)
from ticket_changesets.core.svn_client import SvnClient
from ticket_changesets.core.unified_diff import collect_unique_files
from ticket_changesets.core.viewer import ChangesetViewer, validate_ticket_id
from ticket_changesets.models.changeset import Changeset
from ticket_changesets.models.comparison import FileComparison

console = Console()


def get_viewer_or_exit(ctx: click.Context) -> ChangesetViewer:
    """Build a viewer for the selected working copy or exit with an error message."""
    options = ctx.obj
    client = SvnClient(
        options["working_copy"], options["settings"].svn_path, options["logger"]
    )
    try:
        client.ensure_working_copy()
    except TicketChangesetsError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        console.print("[red]Please run from a folder that is an SVN working copy[/red]")
        raise click.Abort() from e
    options["logger"].debug("Using SVN working directory: %s", client.working_dir)
    return ChangesetViewer(client, options["logger"])


@click.group()
@click.version_option(package_name="ticket-changesets")
@click.option(
    "--working-copy",
    "-C",
    type=click.Path(file_okay=False),
    default=".",
    help="Path to the SVN working copy",
)
@click.option("--svn-path", help="svn executable to run (default: svn on PATH)")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    help="Path to a JSON config file",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.option("--log-file", type=click.Path(dir_okay=False), help="Write debug log to file")
@click.pass_context
def main(
    ctx: click.Context,
    working_copy: str,
    svn_path: Optional[str],
    config_file: Optional[str],
    verbose: bool,
    log_file: Optional[str],
):
    """Ticket Changesets - browse SVN revisions that reference a ticket."""
    logger = configure_logging(verbose, Path(log_file) if log_file else None)
    try:
        settings = load_settings(Path(config_file) if config_file else None, svn_path)
    except TicketChangesetsError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise click.Abort() from e

    logger.debug("Using SVN path: %s", settings.svn_path)
    ctx.obj = {
        "working_copy": Path(working_copy).resolve(),
        "settings": settings,
        "logger": logger,
    }


@main.command()
@click.argument("ticket_id")
@click.option(
    "--markdown",
    "markdown_file",
    type=click.Path(dir_okay=False),
    help="Also write a Markdown summary to this file",
)
@click.option("--diffs", is_flag=True, help="Show the diff of every revision")
@click.pass_context
def show(ctx: click.Context, ticket_id: str, markdown_file: Optional[str], diffs: bool):
    """Show the changesets that reference TICKET_ID."""
    viewer = get_viewer_or_exit(ctx)
    changesets = _find_changesets_or_exit(viewer, ticket_id)
    ticket_id = validate_ticket_id(ticket_id)
    if not changesets:
        console.print(f"[yellow]No changesets found for ticket #{ticket_id}[/yellow]")
        return

    console.print(
        f"[bold]Found {len(changesets)} changesets for ticket #{ticket_id}[/bold]"
    )
    _display_changesets_table(changesets)
    for changeset in changesets:
        _display_changeset(changeset)

    if markdown_file:
        Path(markdown_file).write_text(
            render_summary(ticket_id, changesets), encoding="utf-8"
        )
        console.print(f"[green]✅ Wrote summary to {escape(markdown_file)}[/green]")

    if diffs:
        for index, changeset in enumerate(changesets):
            loaded = viewer.load_diff(changeset.revision, index)
            console.rule(f"Revision {loaded.revision}")
            if loaded.ok:
                _print_diff(loaded.diff)
            else:
                console.print(f"[red]{escape(loaded.diff)}[/red]")


@main.command()
@click.argument("revision", type=click.IntRange(min=1))
@click.pass_context
def diff(ctx: click.Context, revision: int):
    """Show the diff introduced by REVISION."""
    viewer = get_viewer_or_exit(ctx)
    loaded = viewer.load_diff(revision, 0)
    if not loaded.ok:
        console.print(f"[red]{escape(loaded.diff)}[/red]")
        raise click.Abort()
    _print_diff(loaded.diff)


@main.command()
@click.argument("revision", type=click.IntRange(min=1))
@click.option("--file", "file_path", help="File to compare (prompted if several changed)")
@click.option("--tool", "-t", help="External diff tool to open both versions with")
@click.pass_context
def compare(
    ctx: click.Context, revision: int, file_path: Optional[str], tool: Optional[str]
):
    """Compare one file before and after REVISION."""
    viewer = get_viewer_or_exit(ctx)

    if file_path is None:
        try:
            changed_files = viewer.changed_files(revision)
        except TicketChangesetsError as e:
            console.print(f"[red]Error opening diff: {escape(str(e))}[/red]")
            raise click.Abort() from e

        if not changed_files:
            console.print(
                f"[yellow]No changed files found in revision {revision}[/yellow]"
            )
            return
        file_path = _choose_file(changed_files, f"Select file from revision {revision}")

    try:
        comparison = viewer.compare_revision(revision, file_path)
    except ContentRetrievalFailure as e:
        console.print(
            f"[red]Error getting revision {revision} of file: {escape(str(e))}[/red]"
        )
        raise click.Abort() from e
    except TicketChangesetsError as e:
        console.print(f"[red]Error opening diff: {escape(str(e))}[/red]")
        raise click.Abort() from e

    _show_comparison(comparison, tool)


@main.command()
@click.argument("ticket_id")
@click.option("--file", "file_path", help="File to compare (prompted if several changed)")
@click.option("--tool", "-t", help="External diff tool to open both versions with")
@click.pass_context
def unified(
    ctx: click.Context, ticket_id: str, file_path: Optional[str], tool: Optional[str]
):
    """Compare one file across every revision of TICKET_ID that touched it."""
    viewer = get_viewer_or_exit(ctx)
    changesets = _find_changesets_or_exit(viewer, ticket_id)
    ticket_id = validate_ticket_id(ticket_id)
    if not changesets:
        console.print(f"[yellow]No changesets found for ticket #{ticket_id}[/yellow]")
        return

    if file_path is None:
        unique_files = collect_unique_files(changesets)
        if not unique_files:
            console.print(
                f"[yellow]No files found across revisions for ticket #{ticket_id}[/yellow]"
            )
            return
        file_path = _choose_file(
            unique_files, f"Select file for unified diff across ticket #{ticket_id}"
        )

    try:
        comparison = viewer.compare_unified(changesets, file_path)
    except NoMatchingRevisions as e:
        console.print(f"[yellow]{escape(str(e))}[/yellow]")
        return
    except TicketChangesetsError as e:
        console.print(f"[red]Error creating unified diff: {escape(str(e))}[/red]")
        raise click.Abort() from e

    _show_comparison(comparison, tool)


def _find_changesets_or_exit(
    viewer: ChangesetViewer, ticket_id: str
) -> List[Changeset]:
    try:
        return viewer.find_changesets(ticket_id)
    except TicketChangesetsError as e:
        console.print(f"[red]Error searching for commits: {escape(str(e))}[/red]")
        raise click.Abort() from e


def _choose_file(files: List[str], title: str) -> str:
    """Let the user pick one of several files."""
    if len(files) == 1:
        return files[0]

    console.print(f"[bold]{title}[/bold]")
    for number, path in enumerate(files, start=1):
        console.print(f"  {number}. {escape(path)}")
    choice = click.prompt(
        "Select a file", type=click.IntRange(1, len(files)), default=1
    )
    return files[choice - 1]


def _display_changesets_table(changesets: List[Changeset]) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Revision", justify="right")
    table.add_column("Author")
    table.add_column("Date")
    table.add_column("Files", justify="right")
    table.add_column("Message")
    for changeset in changesets:
        table.add_row(
            f"r{changeset.revision}",
            Text(changeset.author),
            Text(changeset.date),
            str(len(changeset.files)),
            Text(changeset.message.splitlines()[0]),
        )
    console.print(table)


def _display_changeset(changeset: Changeset) -> None:
    body = Text(changeset.message + "\n")
    for file in changeset.files:
        body.append(f"\n{file}", style=change_type_style(file.change_type))
    console.print(
        Panel(
            body,
            title=f"Revision {changeset.revision}",
            subtitle=Text(f"{changeset.author} · {changeset.date}"),
            border_style="blue",
        )
    )


def _print_diff(diff_text: str) -> None:
    """Print diff text with +/-/@@ lines coloured."""
    for line in diff_text.splitlines():
        style = DIFF_LINE_STYLES[classify_diff_line(line)]
        console.print(Text(line, style=style))


def _show_comparison(comparison: FileComparison, tool: Optional[str]) -> None:
    if tool and _open_in_diff_tool(comparison, tool):
        return

    console.print(f"[bold]{escape(comparison.title)}[/bold]")
    if comparison.before_missing:
        console.print(
            f"[dim]r{comparison.from_revision} not found, compared against an empty file[/dim]"
        )
    lines = comparison_diff_lines(comparison)
    if not lines:
        console.print("[dim]No differences[/dim]")
        return
    _print_diff("\n".join(lines))


def _open_in_diff_tool(comparison: FileComparison, tool: str) -> bool:
    """Write both sides to temporary files and launch ``tool`` on them.

    The files are removed once the tool exits. Nothing is written when the
    tool cannot be found.
    """
    name = os.path.basename(comparison.path)
    temp_dir = Path(tempfile.gettempdir())
    before_path = temp_dir / f"r{comparison.from_revision}_{name}"
    after_path = temp_dir / f"r{comparison.to_revision}_{name}"

    cmd = _build_diff_command(tool, str(before_path), str(after_path))
    if cmd is None:
        console.print(
            f"[yellow]Warning: diff tool {escape(repr(tool))} not found, showing inline diff[/yellow]"
        )
        return False

    try:
        before_path.write_text(comparison.before, encoding="utf-8")
        after_path.write_text(comparison.after, encoding="utf-8")
        subprocess.run(cmd, check=False)  # noqa: S603
    finally:
        # Clean up temp files
        for path in (before_path, after_path):
            with contextlib.suppress(OSError):
                os.unlink(path)

    console.print(f"[green]Opened {escape(comparison.title)} in {escape(tool)}[/green]")
    return True


def _build_diff_command(
    diff_tool: str, before_path: str, after_path: str
) -> Optional[List[str]]:
    """Build the command for the external diff tool."""
    diff_commands = {
        "vimdiff": ["vim", "-d", before_path, after_path],
        "code": ["code", "--wait", "--diff", before_path, after_path],
        "meld": ["meld", before_path, after_path],
        "kdiff3": ["kdiff3", before_path, after_path],
        "bc": ["bcomp", before_path, after_path],  # Beyond Compare
    }

    cmd = diff_commands.get(diff_tool)
    if cmd and shutil.which(cmd[0]):
        return cmd

    if shutil.which(diff_tool):
        return [diff_tool, before_path, after_path]

    return None


if __name__ == "__main__":
    main()

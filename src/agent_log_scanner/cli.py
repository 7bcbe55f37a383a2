"""CLI entry point for agent-log-scanner."""

import asyncio
import logging
from pathlib import Path

import click

from . import __version__
from .analysis import build_analysis_prompt, decode_suggestions, render_transcript
from .cache import AnalysisCache
from .catalog import SessionCatalog
from .core import Session, SessionSummary
from .errors import AnalysisCacheError, AnalysisDecodeError, SessionLoadError
from .export import session_to_json, session_to_markdown
from .notes import NoteFiles
from .parser import load_messages, summary_id_for

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

log_path_argument = click.argument("path", type=click.Path(dir_okay=False, path_type=Path))


@click.group()
@click.version_option(__version__, prog_name="agent-log-scanner")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Log root (defaults to ~/.claude/projects).",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, root: Path | None, verbose: bool):
    """Browse and analyse AI coding agent transcript logs."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)
    ctx.obj = {"root": root}


@main.command("list")
@click.option("--project", default=None, help="Only show sessions for this project name.")
@click.option("--pages", default=1, show_default=True, type=click.IntRange(min=1), help="Pages to load.")
@click.option("--all", "load_all", is_flag=True, help="Load every page.")
@click.pass_obj
def list_sessions(obj: dict, project: str | None, pages: int, load_all: bool):
    """List sessions, newest first."""
    catalog = SessionCatalog(root=obj["root"])
    asyncio.run(_fill_catalog(catalog, pages, load_all))

    if catalog.error:
        raise click.ClickException(f"Failed to scan {catalog.root}: {catalog.error}")

    summaries = catalog.filtered_by_project(project)
    if not summaries:
        click.echo("No sessions found.")
        return

    for summary in summaries:
        click.echo(_format_summary(summary))

    if catalog.has_more:
        remaining = catalog.total_files - catalog.loaded_count
        click.echo(f"... {remaining} more files not loaded (use --pages or --all)")


@main.command()
@log_path_argument
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["text", "md", "json"]),
    default="text",
    show_default=True,
)
def show(path: Path, fmt: str):
    """Print a full session transcript."""
    session = _load_session(path)
    if fmt == "json":
        click.echo(session_to_json(session))
    elif fmt == "md":
        click.echo(session_to_markdown(session))
    else:
        click.echo(render_transcript(session))


@main.command()
@log_path_argument
def stats(path: Path):
    """Print statistics for a session."""
    session = _load_session(path)
    s = session.stats
    click.echo(f"Project:         {session.project_name}")
    click.echo(f"Turns:           {s.turn_count}")
    click.echo(f"Human messages:  {s.human_message_count}")
    click.echo(f"Agent messages:  {s.agent_message_count}")
    click.echo(f"Tool calls:      {s.tool_call_count}")
    click.echo(f"Errors:          {s.error_count}")
    click.echo(f"Duration:        {s.formatted_duration or 'n/a'}")
    for name, count in sorted(s.tool_calls_by_name.items(), key=lambda item: item[1], reverse=True):
        click.echo(f"  {name}: {count}")


@main.command()
@log_path_argument
def prompt(path: Path):
    """Print the analysis prompt for a session, for piping into a provider."""
    session = _load_session(path)
    notes = NoteFiles()
    click.echo(
        build_analysis_prompt(
            session,
            global_notes=notes.read_global(),
            project_notes=notes.read_project(session.project_path),
        )
    )


@main.group()
def analysis():
    """Inspect and manage stored analysis results."""
    pass


@analysis.command("show")
@log_path_argument
def analysis_show(path: Path):
    """Show the stored analysis for a log file."""
    record = AnalysisCache().load(path)
    if record is None:
        click.echo(f"No analysis stored for {path}")
        return

    click.echo(f"Analyzed at {record.analyzed_at.isoformat()} ({len(record.suggestions)} suggestions)")
    for index, s in enumerate(record.suggestions, 1):
        click.echo("")
        click.echo(f"{index}. [{s.category.display_name} -> {s.target.display_name}] {s.suggestion}")
        click.echo(f"   Reasoning: {s.reasoning}")
        click.echo(f"   Evidence: {s.evidence}")


@analysis.command("import")
@log_path_argument
@click.option(
    "--response",
    type=click.File("r", encoding="utf-8"),
    default="-",
    help="Provider output to decode (defaults to stdin).",
)
def analysis_import(path: Path, response):
    """Decode a provider response and store it for a log file."""
    try:
        suggestions = decode_suggestions(response.read())
        AnalysisCache().save(suggestions, path)
    except (AnalysisDecodeError, AnalysisCacheError) as e:
        raise click.ClickException(str(e))
    click.echo(f"Saved {len(suggestions)} suggestions for {path}")


@analysis.command("apply")
@log_path_argument
@click.argument("index", type=click.IntRange(min=1))
def analysis_apply(path: Path, index: int):
    """Append stored suggestion INDEX to the note file it targets."""
    record = AnalysisCache().load(path)
    if record is None:
        raise click.ClickException(f"No analysis stored for {path}")
    if index > len(record.suggestions):
        raise click.ClickException(f"Only {len(record.suggestions)} suggestions stored")

    target = NoteFiles().apply(record.suggestions[index - 1], path.resolve().parent.name)
    click.echo(f"Appended suggestion {index} to {target}")


@analysis.command("clear")
@log_path_argument
def analysis_clear(path: Path):
    """Delete the stored analysis for a log file."""
    try:
        AnalysisCache().delete(path)
    except AnalysisCacheError as e:
        raise click.ClickException(str(e))
    click.echo(f"Cleared analysis for {path}")


# ── Helpers ──────────────────────────────────────────────────────


async def _fill_catalog(catalog: SessionCatalog, pages: int, load_all: bool) -> None:
    await catalog.refresh()
    loaded = 1
    while catalog.has_more and (load_all or loaded < pages):
        await catalog.load_more()
        loaded += 1


def _load_session(path: Path) -> Session:
    path = path.resolve()
    try:
        messages = load_messages(path)
    except SessionLoadError as e:
        raise click.ClickException(str(e))
    return Session(id=summary_id_for(path), project_path=path.parent.name, messages=messages)


def _format_summary(summary: SessionSummary) -> str:
    timestamp = summary.timestamp.strftime("%Y-%m-%d %H:%M")
    return f"{timestamp} | {summary.project_name} | {summary.turn_count} turns | {summary.source_path}"

"""CLI for org-outline (render outlines, list tags, shift repeating timestamps)."""

from datetime import datetime, timedelta
from enum import StrEnum
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from org_outline.config import RepeatConfig
from org_outline.core.importer.json_reader import load_outline_file
from org_outline.core.temporal.agenda import planning_in_window
from org_outline.core.temporal.repeat import shift, shift_n, shift_until, shift_until_after
from org_outline.core.tree.render import render_document
from org_outline.document import Document
from org_outline.errors import OrgOutlineError
from org_outline.logging_config import configure_logging
from org_outline.models.timestamp import Repeat, Timestamp

app = typer.Typer(help="org-outline: inspect outline documents and repeating timestamps.")


class MonthPolicy(StrEnum):
    FIXED_DATE = "fixed-date"
    SHIFT_BY_DAYS = "shift-by-days"
    END_OF_MONTH = "end-of-month"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


def _load(path: Path) -> Document:
    """Load an outline file, exiting with an error message on failure."""
    if not path.exists():
        logger.error("Outline file not found: {}", path)
        raise typer.Exit(1)
    try:
        return load_outline_file(path)
    except (OrgOutlineError, KeyError, ValueError) as exc:
        logger.error("Cannot read {}: {}", path, exc)
        raise typer.Exit(1) from exc


def _parse_when(value: str, option: str) -> tuple[datetime, bool]:
    try:
        return datetime.fromisoformat(value), len(value) == len("2020-01-01")
    except ValueError:
        logger.error("{} is not an ISO date or date-time: {}", option, value)
        raise typer.Exit(1) from None


def _repeat_config(policy: MonthPolicy, clamp: bool) -> RepeatConfig:
    match policy:
        case MonthPolicy.SHIFT_BY_DAYS:
            return RepeatConfig(clamp_to_end_of_month=clamp, shift_by_days=True, fixed_date=False)
        case MonthPolicy.END_OF_MONTH:
            return RepeatConfig(clamp_to_end_of_month=True, fixed_date=False)
        case _:
            return RepeatConfig(clamp_to_end_of_month=clamp, fixed_date=True)


@app.command()
def render(
    path: Path = typer.Argument(..., help="JSON outline file"),
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max tree levels to render"),
    ] = None,
) -> None:
    """Render an outline file as outline text."""
    document = _load(path)
    typer.echo(render_document(document, max_depth=max_depth), nl=False)


@app.command()
def tags(
    path: Path = typer.Argument(..., help="JSON outline file"),
    inherit: bool = typer.Option(True, "--inherit/--no-inherit", help="Include inherited tags"),
) -> None:
    """List every heading with the tags that apply to it."""
    document = _load(path)
    for node in document.nodes():
        indent = "  " * (node.level - 1)
        applied = document.tags_for(node, inherit=inherit)
        suffix = f"  :{':'.join(applied)}:" if applied else ""
        typer.echo(f"{indent}{node.heading.text}{suffix}")  # type: ignore[union-attr]


@app.command()
def agenda(
    path: Path = typer.Argument(..., help="JSON outline file"),
    start: Annotated[
        str | None,
        typer.Option("--from", "-f", help="Window start (ISO date/time, default today)"),
    ] = None,
    days: int = typer.Option(7, "--days", "-n", help="Window length in days"),
) -> None:
    """List planning entries that fall within a window, repeats included."""
    document = _load(path)
    if start is None:
        window_start = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
    else:
        window_start, _ = _parse_when(start, "--from")
    window_end = window_start + timedelta(days=days)

    config = document.settings.repeat_config
    for node in document.nodes():
        if document.is_commented(node):
            continue
        for planning in planning_in_window(node, window_start, window_end, config=config):
            typer.echo(f"{planning.render():<50} {node.heading.text}")  # type: ignore[union-attr]


@app.command(name="shift")
def shift_cmd(
    start: Annotated[str, typer.Argument(help="Timestamp start (ISO date or date-time)")],
    repeat: Annotated[
        str,
        typer.Option("--repeat", "-r", help="Repeat cookie, e.g. +1m, ++1w, .+2d"),
    ],
    times: Annotated[
        int | None,
        typer.Option("--times", "-n", help="Apply the interval N times"),
    ] = None,
    until: Annotated[
        str | None,
        typer.Option("--until", help="Latest occurrence starting no later than this"),
    ] = None,
    after: Annotated[
        str | None,
        typer.Option("--after", help="First occurrence starting after this"),
    ] = None,
    reference: Annotated[
        str | None,
        typer.Option("--reference", help="Reference time for ++ and .+ repeats (default now)"),
    ] = None,
    policy: MonthPolicy = typer.Option(
        MonthPolicy.FIXED_DATE, "--policy", "-p", help="Month shift policy"
    ),
    clamp: bool = typer.Option(False, "--clamp", help="Clamp month shifts to the month's end"),
) -> None:
    """Shift a repeating timestamp and print the result."""
    if sum(option is not None for option in (times, until, after)) > 1:
        logger.error("Use only one of --times, --until and --after")
        raise typer.Exit(1)

    when, date_only = _parse_when(start, "START")
    config = _repeat_config(policy, clamp)
    try:
        stamp = Timestamp(when, date_only=date_only, repeat=Repeat.from_cookie(repeat))
        if times is not None:
            result = shift_n(stamp, times, config=config)
        elif until is not None:
            result = shift_until(stamp, _parse_when(until, "--until")[0], config=config)
        elif after is not None:
            result = shift_until_after(stamp, _parse_when(after, "--after")[0], config=config)
        else:
            ref = _parse_when(reference, "--reference")[0] if reference else None
            result = shift(stamp, ref, config=config)
    except (OrgOutlineError, ValueError) as exc:
        logger.error("Cannot shift {}: {}", start, exc)
        raise typer.Exit(1) from exc

    typer.echo(result.render())

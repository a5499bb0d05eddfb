"""CLI interface for cleansys."""

from __future__ import annotations

import json
import logging
import sys
import time

import click

from cleansys.core.catalog import Catalog, EntryRef
from cleansys.core.loader import load_cleaners
from cleansys.core.registry import CleanerRegistry
from cleansys.core.results import SortMode
from cleansys.core.session import CleanupSession
from cleansys.core.tracker import PERIODS, Tracker
from cleansys.models.run_state import StatusKind
from cleansys.settings import Settings
from cleansys.utils import bytes_to_human, format_relative_time, format_size

_TICK_SECONDS = 0.1


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _build_registry() -> CleanerRegistry:
    registry = CleanerRegistry()
    load_cleaners(registry, Settings.instance())
    return registry


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
def main(verbose: int) -> None:
    """cleansys: select, run and review disk cleanup tasks."""
    _setup_logging(verbose)


# ── list ─────────────────────────────────────────────────────────────────

@main.command("list")
@click.option("--category", "-c", default=None, help="Only show this category (user, system)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_cmd(category: str | None, as_json: bool) -> None:
    """List available cleaners by category."""
    catalog = Catalog.from_registry(_build_registry())
    categories = [c for c in catalog if category is None or c.key == category]

    if as_json:
        data = [
            {
                "category": c.key,
                "name": c.name,
                "cleaners": [
                    {
                        "id": cleaner.id,
                        "name": cleaner.name,
                        "description": cleaner.description,
                        "requires_root": cleaner.requires_root,
                    }
                    for cleaner in c.cleaners
                ],
            }
            for c in categories
        ]
        click.echo(json.dumps(data, indent=2))
        return

    if not categories:
        click.echo("No cleaners available.")
        return

    for c in categories:
        click.echo(f"\n  {click.style(c.name, fg='blue', bold=True)}  {c.description}")
        for cleaner in c.cleaners:
            root_tag = click.style(" [requires root]", fg="yellow") if cleaner.requires_root else ""
            click.echo(f"    {click.style(cleaner.id, fg='cyan', bold=True):30s}  {cleaner.name}{root_tag}")
            click.echo(f"      {cleaner.description}")
    click.echo()


# ── run ──────────────────────────────────────────────────────────────────

@main.command()
@click.argument("cleaner_ids", nargs=-1)
@click.option("--all", "select_all", is_flag=True, help="Select every available cleaner")
@click.option("--category", "-c", default=None, help="Select every cleaner in this category")
@click.option("--simulate", is_flag=True, help="Pretend to clean; nothing is deleted")
@click.option("--search", "-s", default="", help="Only show reclaimed items matching this text")
@click.option("--filter", "-f", "category_filter", default="", help="Only show reclaimed items of this category")
@click.option(
    "--sort",
    "sort",
    default=SortMode.CATEGORY.value,
    type=click.Choice([m.value for m in SortMode]),
    help="Order of the reclaimed items list",
)
def run(
    cleaner_ids: tuple[str, ...],
    select_all: bool,
    category: str | None,
    simulate: bool,
    search: str,
    category_filter: str,
    sort: str,
) -> None:
    """Run the selected cleaners and show what was reclaimed."""
    settings = Settings.instance()
    catalog = Catalog.from_registry(_build_registry())
    session = CleanupSession.from_settings(catalog, settings, simulate=simulate)
    session.sort_mode = SortMode(sort)
    session.search_query = search
    session.category_filter = category_filter

    _apply_selection(session, cleaner_ids, select_all, category)

    shown = 0
    session.run_selected()
    shown = _flush_messages(session, shown)

    while session.awaiting_credential:
        try:
            secret = click.prompt("[sudo] password", hide_input=True, default="", show_default=False)
        except click.Abort:
            secret = ""
        if not secret:
            session.cancel_credential()
            # Whatever is still selected needs no elevation
            if session.selection.has_any_selected():
                session.run_selected()
            break
        if not session.submit_credential(secret) and session.gate.error_message:
            click.echo(click.style(session.gate.error_message, fg="red"), err=True)
        del secret
    shown = _flush_messages(session, shown)

    if not session.is_running:
        _print_statuses(session)
        if session.selected_count == 0 and session.operation_count == 0:
            sys.exit(1)
        return

    mode = "simulating" if simulate else "cleaning"
    click.echo(f"\n{click.style('🧹', bold=True)} {mode.capitalize()} {len(session.scheduler.dispatched)} cleaners...\n")
    try:
        shown = _drive(session, shown)
    except KeyboardInterrupt:
        session.cancel_run()
        click.echo()
    _flush_messages(session, shown)
    _print_report(session)


def _apply_selection(
    session: CleanupSession,
    cleaner_ids: tuple[str, ...],
    select_all: bool,
    category: str | None,
) -> None:
    catalog = session.catalog
    for index, cat in enumerate(catalog):
        if select_all or category in (cat.key, cat.name):
            session.selection.select_all(index)

    for cleaner_id in cleaner_ids:
        ref = catalog.find(cleaner_id)
        if ref is None:
            click.echo(f"Cleaner '{cleaner_id}' not found or not available, skipping.", err=True)
        elif not session.selection.state(ref).selected:
            session.selection.toggle(*ref)


def _flush_messages(session: CleanupSession, shown: int) -> int:
    for message in session.messages[shown:]:
        click.echo(message)
    return len(session.messages)


def _drive(session: CleanupSession, shown: int) -> int:
    """Tick the session until the run finishes, echoing status changes."""
    seen: dict[EntryRef, StatusKind | None] = {}
    while session.is_running:
        session.tick()
        for ref, state in session.selection.states():
            kind = state.status.kind if state.status else None
            if seen.get(ref) is kind:
                continue
            seen[ref] = kind
            _echo_status(session, ref)
        shown = _flush_messages(session, shown)
        if session.is_running:
            time.sleep(_TICK_SECONDS)
    return shown


def _echo_status(session: CleanupSession, ref: EntryRef) -> None:
    cleaner = session.catalog.entry(ref)
    status = session.selection.state(ref).status
    if status is None or status.kind is StatusKind.PENDING:
        return
    match status.kind:
        case StatusKind.RUNNING:
            click.echo(f"  {click.style(status.symbol(), fg='cyan')} {cleaner.name:35s} - running")
        case StatusKind.SUCCESS:
            click.echo(f"  {click.style(status.symbol(), fg='green')} {status.message}")
        case StatusKind.ERROR:
            click.echo(f"  {click.style(status.symbol(), fg='red')} {cleaner.name:35s} - {status.message}")


def _print_statuses(session: CleanupSession) -> None:
    for ref, state in session.selection.states():
        if state.status is not None and state.status.is_terminal:
            _echo_status(session, ref)


def _print_report(session: CleanupSession) -> None:
    items = session.get_filtered_items()
    click.echo(
        f"\n{click.style('📋', bold=True)} Reclaimed items "
        f"({len(items)} shown, sorted by {session.sort_mode.label.lower()})\n"
    )
    for item in items:
        click.echo(
            f"  {format_size(item.size_bytes):>12s}  {item.kind.value:9s}  "
            f"{click.style(item.category, fg='blue')}  {item.path}"
        )

    totals = session.category_totals()
    if totals:
        click.echo(f"\n  {click.style('Per category:', bold=True)}")
        for name, (count, size) in totals.items():
            click.echo(f"    {name:25s} {bytes_to_human(size):>10s}  ({count:,} items)")

    click.echo(
        f"\nCompleted {session.completed_count}, failed {session.error_count}, "
        f"elapsed {session.elapsed_time()}"
    )
    click.echo(f"Total freed: {click.style(format_size(session.total_bytes), fg='green', bold=True)}\n")


# ── stats ────────────────────────────────────────────────────────────────

@main.command()
@click.option("--period", "-p", default="all", type=click.Choice(PERIODS))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def stats(period: str, as_json: bool) -> None:
    """Show space freed statistics."""
    tracker = Tracker()
    data = tracker.get_stats(period)

    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"\n{click.style('📊', bold=True)} Statistics ({period})\n")
    click.echo(f"  Bytes freed:    {click.style(bytes_to_human(data['bytes_freed']), fg='green', bold=True)}")
    click.echo(f"  Failures:       {data['failures']:,}")
    click.echo(f"  Sessions:       {data['session_count']}")
    click.echo(f"  Lifetime total: {click.style(bytes_to_human(data['lifetime_bytes_freed']), fg='cyan', bold=True)}")

    last = tracker.get_last_clean_time()
    if last:
        click.echo(f"  Last cleaned:   {format_relative_time(last)}")

    if data["per_cleaner"]:
        click.echo("\n  Per-cleaner breakdown:")
        for cid, cstats in sorted(data["per_cleaner"].items(), key=lambda x: x[1]["bytes_freed"], reverse=True):
            click.echo(f"    {cid:25s} {bytes_to_human(cstats['bytes_freed']):>10s}  ({cstats['runs']:,} runs)")
    click.echo()


# ── cleaners ─────────────────────────────────────────────────────────────

@main.group()
def cleaners() -> None:
    """Cleaner management commands."""


@cleaners.command("list")
def cleaners_list() -> None:
    """List all installed cleaners with status."""
    for cleaner in _build_registry():
        available = cleaner.is_available()
        status = click.style("available", fg="green") if available else click.style("not available", fg="bright_black")
        root_tag = click.style(" [root]", fg="yellow") if cleaner.requires_root else ""
        click.echo(f"  {cleaner.id:25s} {cleaner.category:10s} {status}{root_tag}")


@cleaners.command("info")
@click.argument("cleaner_id")
def cleaners_info(cleaner_id: str) -> None:
    """Show detailed info about a cleaner."""
    cleaner = _build_registry().get(cleaner_id)
    if cleaner is None:
        click.echo(f"Cleaner '{cleaner_id}' not found.", err=True)
        sys.exit(1)

    click.echo(f"\n  {click.style('ID:', bold=True)}            {cleaner.id}")
    click.echo(f"  {click.style('Name:', bold=True)}          {cleaner.name}")
    click.echo(f"  {click.style('Category:', bold=True)}      {cleaner.category}")
    click.echo(f"  {click.style('Description:', bold=True)}   {cleaner.description}")
    click.echo(f"  {click.style('Requires Root:', bold=True)} {cleaner.requires_root}")
    click.echo(f"  {click.style('Available:', bold=True)}     {cleaner.is_available()}")
    reason = cleaner.unavailable_reason
    if reason:
        click.echo(f"  {click.style('Reason:', bold=True)}        {reason}")
    click.echo()

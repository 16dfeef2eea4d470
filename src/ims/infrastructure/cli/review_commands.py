"""CLI commands for reconciliations ("revisão").

``review start`` walks the catalog one item at a time. At each prompt the
operator types the counted quantity, or one of:

    n  next item         p  previous item
    f  finish and save   q  quit without saving
"""

from __future__ import annotations

from datetime import datetime, timezone

import click

from ims.domain.exceptions import DomainException
from ims.domain.model.reconciliation import ReconciliationSession
from ims.domain.model.value_objects import format_quantity
from ims.infrastructure.cli.common import CliState, pass_state, unwrap

_LABELS = {"certo": "CORRECT", "errado": "DISCREPANT"}


def _walk(session: ReconciliationSession) -> bool:
    """Drive the session cursor from prompts; True when the operator finishes."""
    total = len(session.entries)
    while True:
        entry = session.current
        counted = "-" if entry.counted_quantity is None else format_quantity(entry.counted_quantity)
        click.echo(
            f"[{session.cursor + 1}/{total}] {entry.item_name}  "
            f"system={format_quantity(entry.system_quantity)}  counted={counted}"
        )
        answer = click.prompt("Count (n/p/f/q)", default="n", show_default=False).strip().lower()

        if answer == "q":
            return False
        if answer == "f":
            return True
        if answer == "p":
            if not session.retreat():
                click.echo("Already at the first item.")
            continue
        if answer == "n":
            if not session.advance():
                click.echo("Last item reached; type f to finish.")
            continue

        try:
            label = session.submit_count(answer)
        except DomainException as exc:
            click.echo(f"  {exc.message}")
            continue
        click.echo(f"  -> {_LABELS[label.value]}")
        if session.at_end:
            click.echo("Last item reached; type f to finish.")
        else:
            session.advance()


@click.command("start")
@click.option(
    "--month", type=click.IntRange(1, 12), default=None, help="Reporting month (default: current)."
)
@click.option(
    "--year",
    type=click.IntRange(1900, 2100),
    default=None,
    help="Reporting year (default: current).",
)
@pass_state
def review_start(state: CliState, month: int | None, year: int | None) -> None:
    """Start an interactive recount of every item."""
    session = unwrap(state.container.start_reconciliation().handle(state.actor))
    if not session.entries:
        click.echo("No items to review.")
        return

    click.echo(f"Reviewing {len(session.entries)} item(s). Enter counts, or n/p/f/q.")
    if not _walk(session):
        click.echo("Review abandoned; nothing saved.")
        return

    today = datetime.now(timezone.utc)
    report = unwrap(
        state.container.finalize_reconciliation().handle(
            session, month or today.month, year or today.year
        )
    )

    click.echo(
        f"Reconciliation {report.id} saved: {report.correct} correct, "
        f"{report.discrepant} discrepant ({report.accuracy_rate}% accuracy)"
    )


@click.command("list")
@pass_state
def review_list(state: CliState) -> None:
    """List reconciliations, most recent period first."""
    reports = unwrap(state.container.list_reconciliations().handle(state.actor))
    if not reports:
        click.echo("No reconciliations recorded.")
        return

    click.echo(f"{'ID':<34} {'Period':<8} {'Operator':<20} {'Correct':>8} {'Discrepant':>11}")
    click.echo("-" * 85)
    for r in reports:
        period = f"{r.month:02d}/{r.year}"
        click.echo(f"{r.id:<34} {period:<8} {r.operator:<20} {r.correct:>8} {r.discrepant:>11}")


@click.command("show")
@click.argument("report_id")
@pass_state
def review_show(state: CliState, report_id: str) -> None:
    """Show one reconciliation with its entries."""
    report = unwrap(state.container.show_reconciliation().handle(state.actor, report_id))
    click.echo(f"Reconciliation {report.id}  ({report.month:02d}/{report.year}, {report.status})")
    click.echo(f"Operator: {report.operator}")
    click.echo(f"Started:  {report.started_at}")
    click.echo(f"Ended:    {report.ended_at}")
    click.echo()
    click.echo(f"{'Item':<24} {'System':>10} {'Counted':>10}  Result")
    click.echo("-" * 60)
    for e in report.entries:
        click.echo(
            f"{e.item_name:<24} {e.system_quantity:>10} {e.counted_quantity or '-':>10}  "
            f"{_LABELS.get(e.classification or '', '-')}"
        )
    click.echo()
    click.echo(f"Accuracy: {report.accuracy_rate}%")


@click.command("stats")
@pass_state
def review_stats(state: CliState) -> None:
    """Summarize every reconciliation."""
    stats = unwrap(state.container.reconciliation_stats().handle(state.actor))
    click.echo(f"Reports:     {stats.total_reports}")
    click.echo(f"Entries:     {stats.total_entries}")
    click.echo(f"Correct:     {stats.correct}")
    click.echo(f"Discrepant:  {stats.discrepant}")
    click.echo(f"Accuracy:    {stats.accuracy_rate}%")

"""CLI commands for stock movements."""

from __future__ import annotations

import click

from ims.application.dto import MovementRequest
from ims.domain.model.movement import MovementType
from ims.infrastructure.cli.common import CliState, pass_state, unwrap


def _record(state: CliState, request: MovementRequest) -> None:
    dto = unwrap(state.container.record_movement().handle(state.actor, request))
    verb = "received into" if dto.type == MovementType.INFLOW.value else "issued from"
    click.echo(f"{dto.quantity} {verb} '{dto.item_name}'  (movement {dto.id})")


@click.command("in")
@click.argument("item_id")
@click.argument("quantity")
@click.option("--minimum", default=None, help="New low-stock threshold.")
@click.option("--notes", default=None, help="Free-text notes.")
@pass_state
def movement_in(
    state: CliState, item_id: str, quantity: str, minimum: str | None, notes: str | None
) -> None:
    """Record an inflow (entrada)."""
    _record(
        state,
        MovementRequest(
            type=MovementType.INFLOW,
            item_id=item_id,
            quantity=quantity,
            minimum_quantity=minimum,
            notes=notes,
        ),
    )


@click.command("out")
@click.argument("item_id")
@click.argument("quantity")
@click.option("--responsible", default=None, help="Person receiving the goods.")
@click.option("--sector", default=None, help="Requesting sector.")
@click.option("--ticket", "ticket_number", default=None, help="Request ticket number.")
@click.option("--notes", default=None, help="Free-text notes.")
@pass_state
def movement_out(
    state: CliState,
    item_id: str,
    quantity: str,
    responsible: str | None,
    sector: str | None,
    ticket_number: str | None,
    notes: str | None,
) -> None:
    """Record an outflow (saida)."""
    _record(
        state,
        MovementRequest(
            type=MovementType.OUTFLOW,
            item_id=item_id,
            quantity=quantity,
            responsible=responsible,
            sector=sector,
            ticket_number=ticket_number,
            notes=notes,
        ),
    )


@click.command("list")
@pass_state
def movement_list(state: CliState) -> None:
    """Show recent movements, newest first."""
    movements = unwrap(state.container.list_movements().handle(state.actor))
    if not movements:
        click.echo("No movements recorded.")
        return

    click.echo(f"{'When':<26} {'Type':<8} {'Item':<24} {'Qty':>10}  {'By'}")
    click.echo("-" * 86)
    for m in movements:
        click.echo(
            f"{m.occurred_at[:25]:<26} {m.type:<8} {m.item_name:<24} {m.quantity:>10}  {m.actor_name}"
        )

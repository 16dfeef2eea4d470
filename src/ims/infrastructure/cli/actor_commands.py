"""CLI commands for actors (operator tooling)."""

from __future__ import annotations

import click

from ims.domain.model.actor import Capability
from ims.infrastructure.cli.common import CliState, pass_state, unwrap


@click.command("add")
@click.argument("actor_id")
@click.option("--name", "display_name", required=True, help="Display name.")
@click.option(
    "--capability",
    "capabilities",
    multiple=True,
    type=click.Choice([c.value for c in Capability]),
    help="Capability to grant (repeatable).",
)
@pass_state
def actor_add(state: CliState, actor_id: str, display_name: str, capabilities: tuple[str, ...]) -> None:
    """Create or replace an actor."""
    actor = unwrap(state.container.add_actor().handle(actor_id, display_name, list(capabilities)))
    granted = ", ".join(sorted(c.value for c in actor.capabilities)) or "none"
    click.echo(f"Actor '{actor.id}' saved  (capabilities: {granted})")


@click.command("show")
@click.argument("actor_id")
@pass_state
def actor_show(state: CliState, actor_id: str) -> None:
    """Show an actor's capabilities."""
    actor = state.container.actors.get_by_id(actor_id)
    if actor is None:
        raise click.ClickException(f"Actor '{actor_id}' not found")
    click.echo(f"{actor.display_name}  ({actor.id})")
    for capability in sorted(c.value for c in actor.capabilities):
        click.echo(f"  - {capability}")

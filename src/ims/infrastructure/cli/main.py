import click

from ims.infrastructure.bootstrap import Container, build_container
from ims.infrastructure.cli.actor_commands import actor_add, actor_show
from ims.infrastructure.cli.common import CliState, pass_state, unwrap
from ims.infrastructure.cli.item_commands import (
    item_create,
    item_list,
    item_register,
    item_show,
)
from ims.infrastructure.cli.movement_commands import (
    movement_in,
    movement_list,
    movement_out,
)
from ims.infrastructure.cli.review_commands import (
    review_list,
    review_show,
    review_start,
    review_stats,
)
from ims.infrastructure.config import Settings
from ims.infrastructure.logging_config import configure_logging


@click.group()
@click.option(
    "--actor",
    envvar="IMS_ACTOR",
    default=None,
    help="Actor ID performing the operation (env: IMS_ACTOR).",
)
@click.pass_context
def cli(ctx: click.Context, actor: str | None) -> None:
    """IMS: inventory movement ledger and stock reconciliation."""
    container = ctx.obj if isinstance(ctx.obj, Container) else None
    if container is None:
        try:
            settings = Settings.from_env()
        except ValueError as exc:
            raise click.ClickException(f"Invalid configuration: {exc}")
        configure_logging(settings.log_level)
        container = build_container(settings)
    ctx.obj = CliState(container=container, actor=actor)


@cli.group()
def item() -> None:
    """Manage the item catalog."""


@cli.group()
def movement() -> None:
    """Record and list stock movements."""


@cli.group()
def review() -> None:
    """Run and inspect reconciliations (physical recounts)."""


@cli.group()
def actor() -> None:
    """Manage actors and their capabilities."""


@cli.command("audit")
@pass_state
def audit(state: CliState) -> None:
    """Check every item's quantity against its movement ledger."""
    report = unwrap(state.container.audit_ledger().handle(state.actor))
    click.echo(
        f"Checked {report.items_checked} item(s) and {report.movements_checked} movement(s)."
    )
    if report.ok:
        click.echo("Ledger is consistent.")
        return
    for issue in report.issues:
        click.echo(f"  {issue.code}: {issue.item_name} ({issue.item_id}): {issue.detail}")
    raise click.ClickException(f"{len(report.issues)} issue(s) found")


@cli.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@pass_state
def serve(state: CliState, host: str, port: int) -> None:
    """Serve the HTTP API."""
    import uvicorn

    from ims.infrastructure.http.app import create_app

    uvicorn.run(create_app(state.container), host=host, port=port)


# Register subcommands
item.add_command(item_create)
item.add_command(item_list)
item.add_command(item_register)
item.add_command(item_show)
movement.add_command(movement_in)
movement.add_command(movement_list)
movement.add_command(movement_out)
review.add_command(review_list)
review.add_command(review_show)
review.add_command(review_start)
review.add_command(review_stats)
actor.add_command(actor_add)
actor.add_command(actor_show)

"""CLI commands for the item catalog."""

from __future__ import annotations

import click

from ims.application.dto import NewItemSpec, StockItemDTO
from ims.infrastructure.cli.common import CliState, pass_state, unwrap


def _print_items(items: list[StockItemDTO]) -> None:
    click.echo(f"{'ID':<34} {'Name':<24} {'Qty':>10} {'Min':>8} {'Unit':<6}")
    click.echo("-" * 86)
    for item in items:
        minimum = item.minimum_quantity if item.minimum_quantity is not None else "-"
        flag = "  LOW" if item.low_stock else ""
        click.echo(
            f"{item.id:<34} {item.name:<24} {item.quantity:>10} {minimum:>8} {item.unit:<6}{flag}"
        )


@click.command("list")
@click.option("--low", is_flag=True, help="Only items at or below their minimum.")
@pass_state
def item_list(state: CliState, low: bool) -> None:
    """List catalogued items."""
    items = unwrap(state.container.list_items().handle(state.actor, low_stock_only=low))
    if not items:
        click.echo("No items found.")
        return
    _print_items(items)


@click.command("show")
@click.argument("item_id")
@pass_state
def item_show(state: CliState, item_id: str) -> None:
    """Show one item."""
    item = unwrap(state.container.show_item().handle(state.actor, item_id))
    click.echo(f"{item.name}  ({item.id})")
    click.echo(f"  Category:  {item.category or '-'}")
    click.echo(f"  Quantity:  {item.quantity} {item.unit}")
    click.echo(f"  Minimum:   {item.minimum_quantity or '-'}")
    if item.low_stock:
        click.echo("  Status:    LOW STOCK")
    if item.location:
        click.echo(f"  Location:  {item.location}")
    if item.supplier:
        click.echo(f"  Supplier:  {item.supplier}")
    click.echo(f"  Price:     {item.price}")


@click.command("create")
@click.option("--name", required=True, help="Item name (must be unique).")
@click.option("--category", default="", help="Category.")
@click.option("--unit", default=None, help="Unit of measure (default 'un').")
@click.option("--quantity", default="0", help="Opening quantity.")
@click.option("--minimum", default=None, help="Low-stock threshold.")
@click.option("--description", default="", help="Free-text description.")
@click.option("--supplier", default="", help="Supplier name.")
@click.option("--price", default="0", help="Unit price.")
@click.option("--location", default="", help="Storage location.")
@pass_state
def item_create(
    state: CliState,
    name: str,
    category: str,
    unit: str | None,
    quantity: str,
    minimum: str | None,
    description: str,
    supplier: str,
    price: str,
    location: str,
) -> None:
    """Catalogue an item with an opening quantity (no movement recorded)."""
    spec = NewItemSpec(
        name=name,
        category=category,
        unit=unit,
        quantity=quantity,
        minimum_quantity=minimum,
        description=description,
        supplier=supplier,
        price=price,
        location=location,
    )
    item = unwrap(state.container.create_item().handle(state.actor, spec))
    click.echo(f"Item '{item.name}' created  (id={item.id}, quantity={item.quantity})")


@click.command("register")
@click.option("--name", required=True, help="Item name (must be unique).")
@click.option("--category", required=True, help="Category.")
@click.option("--unit", required=True, help="Unit of measure.")
@click.option("--quantity", required=True, help="Quantity received.")
@click.option("--minimum", default=None, help="Low-stock threshold.")
@click.option("--notes", default=None, help="Notes for the inflow.")
@pass_state
def item_register(
    state: CliState,
    name: str,
    category: str,
    unit: str,
    quantity: str,
    minimum: str | None,
    notes: str | None,
) -> None:
    """Catalogue a new item and record its first inflow."""
    spec = NewItemSpec(
        name=name,
        category=category,
        unit=unit,
        quantity=quantity,
        minimum_quantity=minimum,
        notes=notes,
    )
    registered = unwrap(state.container.register_item().handle(state.actor, spec))
    click.echo(
        f"Item '{registered.item.name}' registered  "
        f"(id={registered.item.id}, quantity={registered.item.quantity} {registered.item.unit})"
    )
    click.echo(f"Inflow {registered.movement.id} recorded")

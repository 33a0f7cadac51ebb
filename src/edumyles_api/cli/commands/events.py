"""Event bus commands: publish events and manage subscription registrations."""

import asyncio
import json

import typer
from rich.console import Console
from rich.table import Table

from edumyles_api.event_bus import EventInput, RegisteredSubscription, create_event_bus
from edumyles_api.event_bus.sql_store import SqlSubscriptionRegistry
from edumyles_api.settings import get_settings

app = typer.Typer(help="Event bus operations")
console = Console()


def _parse_data(data: str) -> dict:
    try:
        parsed = json.loads(data)
    except json.JSONDecodeError as e:
        console.print(f"[red]--data is not valid JSON: {e}[/red]")
        raise typer.Exit(1) from None
    if not isinstance(parsed, dict):
        console.print("[red]--data must be a JSON object[/red]")
        raise typer.Exit(1)
    return parsed


def _print_subscriptions(module_id: str, subscriptions: list[RegisteredSubscription]) -> None:
    if not subscriptions:
        console.print(f"[yellow]No active subscriptions for module '{module_id}'[/yellow]")
        return

    table = Table(title=f"Subscriptions of {module_id}")
    table.add_column("Priority", justify="right")
    table.add_column("Event type")
    table.add_column("Handler")
    table.add_column("Id", style="dim")
    for subscription in subscriptions:
        table.add_row(str(subscription.priority), subscription.event_type, subscription.handler, subscription.id)
    console.print(table)


async def _publish(event: EventInput):
    bus = create_event_bus(get_settings())
    await bus.connect()
    try:
        return await bus.publish(event)
    finally:
        await bus.disconnect()


@app.command()
def publish(
    tenant_id: str = typer.Argument(..., help="Tenant the event belongs to"),
    event_type: str = typer.Argument(..., help="Event type, e.g. student.profile.updated"),
    source: str = typer.Option("cli", help="Module publishing the event"),
    data: str = typer.Option("{}", help="Event payload as a JSON object"),
):
    """Publish an event on the configured bus.

    Examples:
        edumyles-api-cli events publish t-42 academic.year.created --data '{"yearId": "2026"}'
    """
    event_input = EventInput(type=event_type, source=source, tenant_id=tenant_id, data=_parse_data(data))

    try:
        event = asyncio.run(_publish(event_input))
    except Exception as e:
        console.print(f"[red]Publish failed: {e}[/red]")
        raise typer.Exit(1) from None

    console.print(f"[green]Published {event.type} as {event.id}[/green]")
    console.print_json(event.to_json())


@app.command()
def subscriptions(module_id: str = typer.Argument(..., help="Module whose registrations to list")):
    """List the active subscription registrations of a module, highest priority first."""
    bus = create_event_bus(get_settings())
    try:
        result = asyncio.run(bus.get_subscriptions(module_id))
    except Exception as e:
        console.print(f"[red]Cannot read subscriptions: {e}[/red]")
        raise typer.Exit(1) from None
    _print_subscriptions(module_id, result)


@app.command()
def register(
    module_id: str = typer.Argument(..., help="Module owning the handler"),
    event_type: str = typer.Argument(..., help="Event type to register for"),
    handler: str = typer.Argument(..., help="Handler name"),
    priority: int = typer.Option(0, help="Higher priority registrations are listed first"),
    inactive: bool = typer.Option(False, "--inactive", help="Store the registration as inactive"),
):
    """Persist a subscription registration in the database.

    Examples:
        edumyles-api-cli events register attendance student.profile.created on_student_created --priority 10
    """
    if not get_settings().database_url:
        console.print("[red]Database URL missing: set EDUMYLES_API_DATABASE_URL or pass --database-url[/red]")
        raise typer.Exit(1)

    try:
        registration = asyncio.run(
            SqlSubscriptionRegistry().register(event_type, module_id, handler, priority=priority, active=not inactive)
        )
    except Exception as e:
        console.print(f"[red]Registration failed: {e}[/red]")
        raise typer.Exit(1) from None

    console.print(f"[green]Registered {registration.handler} for {registration.event_type} ({registration.id})[/green]")

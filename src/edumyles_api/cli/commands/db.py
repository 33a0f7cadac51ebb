"""Database management commands."""

import typer
from rich.console import Console

from edumyles_api.database import AlembicManager, SchemaState, borrow_db_session, is_healthy
from edumyles_api.settings import get_settings

app = typer.Typer(help="Database operations")
console = Console()


def _require_database() -> None:
    """Exit unless a database is configured and answers ``SELECT 1``."""
    if not get_settings().database_url:
        console.print("[red]Database URL missing: set EDUMYLES_API_DATABASE_URL or pass --database-url[/red]")
        raise typer.Exit(1)

    try:
        with borrow_db_session() as session:
            health = is_healthy(session)
    except Exception as e:
        console.print(f"[red]Cannot connect to database: {e}[/red]")
        raise typer.Exit(1) from None

    if health.get("status") != "healthy":
        console.print(f"[red]Database is unhealthy: {health.get('error', 'unknown error')}[/red]")
        raise typer.Exit(1)


def _print_schema_state(state: SchemaState) -> None:
    console.print(f"[dim]Current revision: {state.current_revision or 'None'}[/dim]")
    console.print(f"[dim]Head revision: {state.head_revision or 'Unknown'}[/dim]")
    if state.missing_tables:
        console.print(f"[dim]Missing tables: {', '.join(state.missing_tables)}[/dim]")


@app.command()
def check():
    """Check database connection, health, and event store schema.

    Examples:
        edumyles-api-cli db check
    """
    console.print("[bold]Checking database connection, health, and schema...[/bold]\n")

    _require_database()
    console.print("[green]Database connection is healthy[/green]")

    state = AlembicManager().validate_schema_state()
    _print_schema_state(state)
    if not state.is_latest:
        console.print(f"[red]{state.message}[/red]")
        console.print("[yellow]Run 'edumyles-api-cli db upgrade' to migrate[/yellow]")
        raise typer.Exit(1)

    console.print("[green]Database is healthy, accessible, and schema is up to date![/green]")


@app.command()
def upgrade(
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip confirmation prompt and proceed with migration automatically",
    ),
):
    """Upgrade database to latest schema version.

    Examples:
        edumyles-api-cli db upgrade
        edumyles-api-cli db upgrade --yes
    """
    console.print("[bold]Upgrading database to latest version...[/bold]\n")

    console.print("[bold]Step 1: Running basic database checks...[/bold]")
    _require_database()
    console.print("[green]Basic database checks passed[/green]\n")

    console.print("[bold]Step 2: Checking if migration is needed...[/bold]")
    alembic_manager = AlembicManager()
    state = alembic_manager.validate_schema_state()

    if state.is_latest:
        console.print("[green]Database is already at latest version[/green]")
        console.print(f"[dim]Current revision: {state.current_revision}[/dim]")
        return

    console.print("[yellow]Database upgrade needed:[/yellow]")
    console.print(f"[dim]{state.message}[/dim]")
    _print_schema_state(state)
    console.print()

    if not yes:
        console.print("[yellow]This will create or alter the event store tables.[/yellow]")
        if not typer.confirm("Proceed with database upgrade?"):
            console.print("[yellow]Upgrade cancelled.[/yellow]")
            raise typer.Exit(0)

    console.print("[bold]Step 3: Performing database upgrade...[/bold]")
    if not alembic_manager.perform_migration():
        console.print("[red]Database upgrade failed[/red]")
        raise typer.Exit(1)
    console.print("[green]Database upgrade completed successfully[/green]\n")

    console.print("[bold]Step 4: Validating schema after upgrade...[/bold]")
    state = alembic_manager.validate_schema_state()
    if not state.is_latest:
        console.print(f"[red]Post-upgrade validation failed: {state.message}[/red]")
        raise typer.Exit(1)
    console.print("[bold green]Database upgrade completed successfully![/bold green]")

"""Main CLI application."""

import typer

from edumyles_api.cli.commands import db, events
from edumyles_api.settings import get_settings

app = typer.Typer(
    name="edumyles-api-cli",
    help="EduMyles API CLI - Administrative tools",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    database_url: str = typer.Option(
        None,
        help="Database URL (overrides EDUMYLES_API_DATABASE_URL)",
        metavar="<dsn>",
    ),
    redis_url: str = typer.Option(
        None,
        help="Redis URL (overrides EDUMYLES_API_REDIS_URL)",
        metavar="<url>",
    ),
):
    """Global options for all commands."""
    settings = get_settings()
    if database_url is not None:
        settings.database_url = database_url
    if redis_url is not None:
        settings.redis_url = redis_url


# Register command groups
app.add_typer(db.app, name="db")
app.add_typer(events.app, name="events")

"""Alembic environment for the event store tables.

The database URL comes from ``EDUMYLES_API_DATABASE_URL`` (or ``.env``), the
same setting the API uses; ``sqlalchemy.url`` in ``alembic.ini`` is ignored.
"""

from alembic import context
from dotenv import load_dotenv
from loguru import logger
from sqlalchemy import engine_from_config, pool
from sqlmodel import SQLModel

load_dotenv()

from edumyles_api.logging import setup_logging, setup_sqlalchemy_logging  # noqa: E402

# Registers the tables on SQLModel.metadata
from edumyles_api.models import db_model  # noqa: F401, E402
from edumyles_api.settings import get_settings  # noqa: E402

settings = get_settings()
setup_logging(settings.log_level)
setup_sqlalchemy_logging()

config = context.config
if not settings.database_url:
    raise SystemExit("EDUMYLES_API_DATABASE_URL is not set")
config.set_main_option("sqlalchemy.url", settings.database_url.replace("%", "%%"))

target_metadata = SQLModel.metadata


def run_migrations_offline() -> None:
    """Emit the migration SQL to the script output without connecting."""
    logger.info(f"Generating offline migration SQL for {settings.database_url.split('@')[-1]}")
    context.configure(
        url=settings.database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply the migrations over a live connection."""
    engine_config = config.get_section(config.config_ini_section, {})
    engine_config["sqlalchemy.echo"] = str(settings.sql_log).lower()
    connectable = engine_from_config(engine_config, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)

        with context.begin_transaction():
            context.run_migrations()
    logger.success("Event store migrations applied")


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

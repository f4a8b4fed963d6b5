import os
import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import create_engine, engine_from_config, pool

# Make the src/ package importable without installing it
project_root = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(project_root / "src"))

from movie_match.config.settings import get_settings  # noqa: E402
from movie_match.models import Base  # noqa: E402

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    """ALEMBIC_DATABASE_URL wins, then MOVIE_MATCH_DATABASE_URL_SYNC, then alembic.ini."""
    override = os.environ.get("ALEMBIC_DATABASE_URL")
    if override:
        return override
    if os.environ.get("MOVIE_MATCH_DATABASE_URL_SYNC"):
        return get_settings().database_url_sync
    return config.get_main_option("sqlalchemy.url")


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    url = _database_url()
    if url != config.get_main_option("sqlalchemy.url"):
        connectable = create_engine(url, poolclass=pool.NullPool)
    else:
        connectable = engine_from_config(
            config.get_section(config.config_ini_section, {}),
            prefix="sqlalchemy.",
            poolclass=pool.NullPool,
        )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

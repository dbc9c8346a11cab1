from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool, text
from alembic import context
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from campjournal.core.config import settings
from campjournal.core.database import Base
import campjournal.models  # noqa: F401  registers all tables on Base.metadata

# Alembic Config object
config = context.config

# Interpret the config file for Python logging
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Alembic runs synchronously; use the sync drivers.
# Escape % characters for ConfigParser (% becomes %%)
db_url = (
    settings.DATABASE_URL
    .replace('+asyncpg', '')
    .replace('+aiosqlite', '')
    .replace('postgres://', 'postgresql://', 1)
    .replace('%', '%%')
)
config.set_main_option('sqlalchemy.url', db_url)

target_metadata = Base.metadata


def include_object(object, name, type_, reflected, compare_to):
    if type_ == "table":
        return getattr(object, "schema", None) == settings.db_schema
    if type_ in ("index", "foreign_key_constraint"):
        table = getattr(object, "table", None)
        return table is None or table.schema == settings.db_schema
    return True


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        version_table_schema=settings.db_schema,
        include_schemas=False,
        include_object=include_object
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        # The version table lives inside the schema, so it must exist first
        if settings.db_schema and connection.dialect.name == "postgresql":
            connection.execution_options(isolation_level="AUTOCOMMIT").execute(
                text(f'CREATE SCHEMA IF NOT EXISTS "{settings.db_schema}"')
            )

        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            version_table_schema=settings.db_schema,
            include_schemas=bool(settings.db_schema),
            include_object=include_object
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

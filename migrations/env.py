from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool

from alembic import context

# Alembic Config object
config = context.config

# URL from the application settings (DATABASE_URL or POSTGRES_*)
from app.config import settings
config.set_main_option("sqlalchemy.url", settings.database_url.replace("%", "%%"))

# Configure logging
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Clusters, namespaces, apps, deployments, templates, publish status/history
from app.models import BaseModel
target_metadata = BaseModel.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
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
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

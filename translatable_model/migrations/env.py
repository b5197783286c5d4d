from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from translatable_model.app.core.config import settings
from translatable_model.app.core.database import Base
from translatable_model.app.models.translation import ModelTranslation  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Translations may live in their own database
config.set_main_option(
    "sqlalchemy.url", settings.TRANSLATIONS_DATABASE_URL or settings.DATABASE_URL
)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
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

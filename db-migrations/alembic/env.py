from logging.config import fileConfig
from alembic import context
import logging
from dotenv import load_dotenv
import os
import sys
from sqlalchemy import create_engine
from sqlalchemy import pool

default_dotenv_path = '../.env'
dotenv_path = default_dotenv_path
db_url = None

# Use Alembic's x-arguments
for x_arg in context.get_x_argument(as_dictionary=False):
    if x_arg.lower().strip().startswith('db-url='):
        db_url = x_arg.split('=', 1)[1].strip()
    elif x_arg.lower().strip().startswith('dotenv-path='):
        dotenv_path = x_arg.split('=', 1)[1].strip()
    else:
        print(f"ERROR: Unrecognized Alembic -x argument: '{x_arg}' Valid arguments are: db-url, dotenv-path", file=sys.stderr)
        sys.exit(1)

load_dotenv(dotenv_path=dotenv_path)
db_url = db_url or os.getenv("DATABASE_URL", "sqlite:///./reservations.db")

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Migrations are written by hand, no autogenerate
target_metadata = None

log = logging.getLogger('alembic.env')


def run_migrations_offline() -> None:
    """Emit the migration SQL without connecting to the database."""
    context.configure(
        url=db_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = create_engine(db_url, poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        log.info("Starting migrations...")
        try:
            with context.begin_transaction():
                context.run_migrations()
            log.info("Migrations completed successfully")
        except Exception as e:
            log.error(f"Migration failed with error: {e}", exc_info=True)
            raise


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

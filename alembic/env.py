import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

# Import models so Base.metadata is fully populated for autogenerate
from taskforms.models.audit_event import AuditEvent  # noqa: F401
from taskforms.models.form_definition import FormDefinition  # noqa: F401
from taskforms.models.form_definition_version import FormDefinitionVersion  # noqa: F401
from taskforms.models.form_field import FormField  # noqa: F401
from taskforms.models.form_submission import FormSubmission  # noqa: F401
from taskforms.models.master import FixedMasterEntry, MasterList  # noqa: F401
from taskforms.models.rbac import Role, UserRole  # noqa: F401
from taskforms.models.task import Task, TaskFormAttachment  # noqa: F401
from taskforms.models.user import User  # noqa: F401

from logging.config import fileConfig

from sqlalchemy import engine_from_config
from sqlalchemy import pool

from alembic import context

from taskforms.core.config import settings
from taskforms.db.base import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# DATABASE_URL from the environment / .env wins over alembic.ini
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
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
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            compare_server_default=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

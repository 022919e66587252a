from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context

from dotenv import load_dotenv

# -------------------------------------------------------------------
# Load environment variables (.env in apps/api/)
# -------------------------------------------------------------------
load_dotenv()

# -------------------------------------------------------------------
# Alembic Config object
# -------------------------------------------------------------------
config = context.config

# -------------------------------------------------------------------
# Override sqlalchemy.url from DATABASE_URL
# (avoids alembic.ini interpolation issues)
# -------------------------------------------------------------------
from app.core.config import settings  # noqa: E402

config.set_main_option("sqlalchemy.url", settings.database_url)

# -------------------------------------------------------------------
# Logging configuration
# -------------------------------------------------------------------
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# -------------------------------------------------------------------
# Import models & metadata for autogenerate
# -------------------------------------------------------------------
from app.core.database import Base  # noqa: E402
from app.models.employee import Employee  # noqa: F401,E402
from app.models.skill import Skill  # noqa: F401,E402
from app.models.employee_skill import EmployeeSkill  # noqa: F401,E402
from app.models.schedule_preference import SchedulePreference  # noqa: F401,E402
from app.models.status import Status  # noqa: F401,E402
from app.models.daily_schedule import DailySchedule  # noqa: F401,E402
from app.models.daily_schedule_skill import DailyScheduleSkill  # noqa: F401,E402

target_metadata = Base.metadata

# -------------------------------------------------------------------
# Offline migrations
# -------------------------------------------------------------------
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

# -------------------------------------------------------------------
# Online migrations
# -------------------------------------------------------------------
def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
        )

        with context.begin_transaction():
            context.run_migrations()

# -------------------------------------------------------------------
# Entrypoint
# -------------------------------------------------------------------
if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker
from app.config import get_settings
from app.log import get_logger

logger = get_logger(__name__)

settings = get_settings()

# SQLite needs check_same_thread=False for the threaded FastAPI workers
connect_args = {}
if settings.database_url.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

MISSION_SLOT_INDEX = "idx_missions_user_slot_date"


def get_db():
    """Database session dependency"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create all tables and apply the schema fixups"""
    from app import models  # noqa: F401
    bind = bind or engine
    Base.metadata.create_all(bind=bind, checkfirst=True)
    run_migrations(bind)


def index_exists(bind, name: str) -> bool:
    """Catalog lookup; the inspector skips expression indexes on SQLite"""
    if bind.dialect.name == "postgresql":
        sql = "SELECT 1 FROM pg_indexes WHERE indexname = :name"
    else:
        sql = "SELECT 1 FROM sqlite_master WHERE type = 'index' AND name = :name"
    with bind.connect() as conn:
        return conn.execute(text(sql), {"name": name}).first() is not None


def run_migrations(bind=None):
    """
    Enforce one mission per (user, slot, UTC day) at the schema level.

    Duplicates are removed first (the oldest row of each group is kept), then
    a unique expression index is created. PostgreSQL needs an IMMUTABLE
    function to index on the UTC date of a timestamptz.
    """
    bind = bind or engine
    inspector = inspect(bind)
    if "missions" not in inspector.get_table_names():
        return
    if index_exists(bind, MISSION_SLOT_INDEX):
        return

    is_postgres = bind.dialect.name == "postgresql"
    day_expr = "mission_date(assigned_at)" if is_postgres else "date(assigned_at)"

    with bind.begin() as conn:
        if is_postgres:
            conn.execute(text(
                "CREATE OR REPLACE FUNCTION mission_date(ts timestamptz) "
                "RETURNS date AS $$ SELECT (ts AT TIME ZONE 'UTC')::date; $$ "
                "LANGUAGE sql IMMUTABLE PARALLEL SAFE"
            ))
        deleted = conn.execute(text(
            "DELETE FROM missions WHERE id NOT IN ("
            f"SELECT MIN(id) FROM missions GROUP BY user_id, slot_number, {day_expr})"
        )).rowcount
        if deleted:
            logger.warning("event=migration.duplicate_missions_deleted | count=%s", deleted)
        conn.execute(text(
            f"CREATE UNIQUE INDEX IF NOT EXISTS {MISSION_SLOT_INDEX} "
            f"ON missions (user_id, slot_number, {day_expr})"
        ))
    logger.info("event=migration.mission_slot_index_created")

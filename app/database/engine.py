import logging
import sqlite3

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.pool import StaticPool

from app.config import Settings, get_settings


app_settings: Settings = get_settings()
logger = logging.getLogger(__name__)

_SQLITE_BUSY_TIMEOUT_SECONDS = 30
_SQLITE_BUSY_TIMEOUT_MS = _SQLITE_BUSY_TIMEOUT_SECONDS * 1000

_db_url = make_url(app_settings.DATABASE_URL)
is_sqlite = _db_url.get_backend_name() == "sqlite"
is_sqlite_memory = False
if is_sqlite:
    sqlite_db = _db_url.database
    is_sqlite_memory = sqlite_db in (None, "", ":memory:")
    if not is_sqlite_memory and _db_url.query.get("mode") == "memory":
        is_sqlite_memory = True

connect_args = {}
engine_kwargs: dict[str, object] = dict(pool_pre_ping=True)
if is_sqlite:
    connect_args = {"check_same_thread": False, "timeout": _SQLITE_BUSY_TIMEOUT_SECONDS}
    if is_sqlite_memory:
        engine_kwargs.update(poolclass=StaticPool)

engine = create_engine(
    app_settings.DATABASE_URL,
    connect_args=connect_args,
    **engine_kwargs,
)


def set_sqlite_pragmas(dbapi_connection, _connection_record, *, use_wal: bool = True):
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute(f"PRAGMA busy_timeout={_SQLITE_BUSY_TIMEOUT_MS}")
        if use_wal:
            try:
                cursor.execute("PRAGMA journal_mode=WAL")
                cursor.execute("PRAGMA synchronous=NORMAL")
            except sqlite3.DatabaseError:
                pass
    finally:
        cursor.close()


if is_sqlite:
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragmas(dbapi_connection, connection_record):
        set_sqlite_pragmas(
            dbapi_connection,
            connection_record,
            use_wal=not is_sqlite_memory,
        )


# Columns added after the first catalog release; older SQLite files get them
# through ALTER TABLE since create_all never touches existing tables.
_SQLITE_COLUMN_DEFAULTS = {
    "products": {
        "thumbnail_photo_file_name": "TEXT",
        "version_id": "INTEGER NOT NULL DEFAULT 1",
    },
}


def _escape_sqlite_identifier(value: str) -> str:
    return value.replace('"', '""')


def _get_sqlite_columns(conn, table_name: str):
    escaped_table = _escape_sqlite_identifier(table_name)
    # noinspection SqlNoDataSourceInspection
    result = conn.exec_driver_sql(
        f'PRAGMA table_info("{escaped_table}")'
    ).mappings()
    return {row["name"] for row in result}


def ensure_sqlite_schema(bind=None):
    bind = bind if bind is not None else engine
    if bind.dialect.name != "sqlite":
        return
    with bind.begin() as conn:
        for table_name, columns in _SQLITE_COLUMN_DEFAULTS.items():
            existing = _get_sqlite_columns(conn, table_name)
            if not existing:
                continue
            for column_name, ddl in columns.items():
                if column_name in existing:
                    continue
                escaped_table = _escape_sqlite_identifier(table_name)
                escaped_column = _escape_sqlite_identifier(column_name)
                # noinspection SqlNoDataSourceInspection
                conn.exec_driver_sql(
                    f'ALTER TABLE "{escaped_table}" ADD COLUMN "{escaped_column}" {ddl}'
                )
                logger.info("Added column %s.%s", table_name, column_name)

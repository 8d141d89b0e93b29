from typing import Iterator

from psycopg import Connection
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from .settings import settings

# Opened by the app lifespan; scripts open it themselves.
pool = ConnectionPool(
    conninfo=settings.DATABASE_URL,
    min_size=settings.DB_POOL_MIN_SIZE,
    max_size=settings.DB_POOL_MAX_SIZE,
    timeout=settings.DB_POOL_TIMEOUT,
    kwargs={"row_factory": dict_row},
    open=False,
)

def get_conn() -> Iterator[Connection]:
    """
    FastAPI dependency: borrow a pooled connection for one request.

    The pool commits when the request finishes cleanly and rolls back if the
    handler raised, so every request runs in its own transaction.
    """
    with pool.connection() as conn:
        yield conn

def db_ok() -> bool:
    try:
        with pool.connection() as conn, conn.cursor() as cur:
            cur.execute('select 1;')
            cur.fetchone()
        return True
    except Exception:
        return False

"""
core/db.py -- Engine construction shared by UserStore and AssetStore.

Any SQLAlchemy URL works. For SQLite three extras apply:
  - check_same_thread=False, since FastAPI runs sync handlers in a thread pool
  - PRAGMA journal_mode=WAL on every new pooled connection
  - in-memory databases (":memory:" or "mode=memory" URIs) get an explicit
    SingletonThreadPool, one connection per thread

Layer rule: core/ is the kernel. No imports from api/, auth/ or inventory/.
"""

from datetime import datetime, timezone

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import SingletonThreadPool

# Largest value an INTEGER column holds (signed 64-bit). Ids and quantities
# above it are rejected before they reach the driver.
MAX_DB_INT = 2**63 - 1


def _enable_wal(dbapi_conn, connection_record) -> None:
    # PRAGMAs are per connection; the pool does not carry them over.
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _is_memory_url(db_url: str) -> bool:
    return ":memory:" in db_url or "mode=memory" in db_url


def make_engine(db_url: str) -> Engine:
    if not db_url.startswith("sqlite"):
        return create_engine(db_url)
    kwargs: dict = {"connect_args": {"check_same_thread": False}}
    if _is_memory_url(db_url):
        kwargs["poolclass"] = SingletonThreadPool
    engine = create_engine(db_url, **kwargs)
    event.listen(engine, "connect", _enable_wal)
    return engine


def utc_now() -> str:
    """Current time as an ISO 8601 UTC string, the format every timestamp column uses."""
    return datetime.now(timezone.utc).isoformat()

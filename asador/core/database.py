"""
Database connection and schema management
Wraps a single DuckDB connection behind a re-entrant lock and provides
the transaction context used by every multi-statement write.

Tables:
- menu: the editable menu stored as one JSON document
- sales_active: saved sales waiting for payment
- sales_closed: paid sales with payment breakdown and tip
- expenses: operating expenses
- logs: audit trail of sale transitions and system errors
"""

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

import duckdb

from .exceptions import BaseApplicationError, ConcurrencyError, PersistenceError
from ..config.settings import settings

logger = logging.getLogger(__name__)

SCHEMA_SQL = r"""
CREATE TABLE IF NOT EXISTS menu (
  id TEXT PRIMARY KEY,
  data TEXT NOT NULL,
  updated_at TIMESTAMP DEFAULT now()
);

CREATE TABLE IF NOT EXISTS sales_active (
  id TEXT PRIMARY KEY,
  items TEXT NOT NULL,
  total_cents BIGINT NOT NULL,
  delivery_fee_cents BIGINT DEFAULT 0,
  created_at TIMESTAMP NOT NULL
);

CREATE TABLE IF NOT EXISTS sales_closed (
  id TEXT PRIMARY KEY,
  items TEXT NOT NULL,
  total_cents BIGINT NOT NULL,
  delivery_fee_cents BIGINT DEFAULT 0,
  payment_method TEXT CHECK(payment_method IN ('Cash','Transfer','Other')) NOT NULL,
  payment_breakdown TEXT,
  tip_cents BIGINT DEFAULT 0,
  created_at TIMESTAMP NOT NULL,
  closed_at TIMESTAMP NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_sales_closed_closed_at ON sales_closed(closed_at);

CREATE TABLE IF NOT EXISTS expenses (
  id TEXT PRIMARY KEY,
  date DATE NOT NULL,
  description TEXT NOT NULL,
  amount_cents BIGINT NOT NULL,
  category TEXT NOT NULL,
  created_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_expenses_date ON expenses(date);

CREATE SEQUENCE IF NOT EXISTS logs_id_seq;
CREATE TABLE IF NOT EXISTS logs (
  log_id INTEGER DEFAULT nextval('logs_id_seq') PRIMARY KEY,
  action TEXT NOT NULL,
  detail_json TEXT,
  created_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_logs_action ON logs(action);
"""


def db_path_from_url(db_url: str) -> str:
    """Strip the duckdb:// scheme from a database URL"""
    if db_url.startswith("duckdb://"):
        return db_url[len("duckdb://"):]
    return db_url


class DatabaseManager:
    """Database manager, owner of the shared connection"""

    def __init__(self, db_path: Optional[str] = None):
        self._connection: Optional[duckdb.DuckDBPyConnection] = None
        self._lock = threading.RLock()
        self.db_path = db_path or db_path_from_url(settings.database_url)

    @property
    def connection(self) -> duckdb.DuckDBPyConnection:
        """Open the connection on first use"""
        with self._lock:
            if self._connection is None:
                if self.db_path != ":memory:":
                    Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
                try:
                    self._connection = duckdb.connect(self.db_path)
                    self._connection.execute(SCHEMA_SQL)
                except duckdb.Error as e:
                    self._connection = None
                    raise PersistenceError(f"Failed to open database: {e}")
                logger.info("Opened database at %s", self.db_path)
            return self._connection

    def get_connection(self) -> duckdb.DuckDBPyConnection:
        return self.connection

    def init_database(self):
        """Create tables if missing"""
        with self._lock:
            self.connection.execute(SCHEMA_SQL)

    def close(self):
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None

    @contextmanager
    def transaction(self) -> Generator[duckdb.DuckDBPyConnection, None, None]:
        """
        Transaction context manager

        Application errors raised inside the block roll back and propagate
        unchanged; driver errors roll back and surface as PersistenceError
        (or ConcurrencyError for write conflicts).
        """
        with self._lock:
            conn = self.connection
            conn.execute("BEGIN TRANSACTION")
            try:
                yield conn
                conn.execute("COMMIT")
            except BaseApplicationError:
                self._rollback(conn)
                raise
            except duckdb.Error as e:
                self._rollback(conn)
                if "conflict" in str(e).lower():
                    raise ConcurrencyError()
                raise PersistenceError(f"Database operation failed: {e}")
            except Exception:
                self._rollback(conn)
                raise

    def _rollback(self, conn: duckdb.DuckDBPyConnection):
        try:
            conn.execute("ROLLBACK")
        except duckdb.Error as e:
            logger.warning("Rollback failed: %s", e)

    def execute_query(self, query: str, params: list = None) -> List[tuple]:
        """Run a query and return all rows"""
        with self._lock:
            try:
                return self.connection.execute(query, params or []).fetchall()
            except duckdb.Error as e:
                raise PersistenceError(f"Query execution failed: {e}")

    def execute_one(self, query: str, params: list = None) -> Optional[tuple]:
        """Run a query and return the first row"""
        with self._lock:
            try:
                return self.connection.execute(query, params or []).fetchone()
            except duckdb.Error as e:
                raise PersistenceError(f"Query execution failed: {e}")

    def query_dicts(self, query: str, params: list = None) -> List[Dict[str, Any]]:
        """Run a query and return rows keyed by column name"""
        with self._lock:
            try:
                cursor = self.connection.execute(query, params or [])
                return rows_to_dicts(cursor, cursor.fetchall())
            except duckdb.Error as e:
                raise PersistenceError(f"Query execution failed: {e}")


def rows_to_dicts(cursor: duckdb.DuckDBPyConnection, rows: List[tuple]) -> List[Dict[str, Any]]:
    columns = [col[0] for col in cursor.description]
    return [dict(zip(columns, row)) for row in rows]


# Global database manager
db_manager = DatabaseManager()


def get_db() -> DatabaseManager:
    """FastAPI dependency returning the shared manager"""
    return db_manager

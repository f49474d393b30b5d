# src/pageglot/core/managers/database_manager.py
import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from pageglot.core.utils.path_utils import PathUtils
from pageglot.database_schema import DEFAULT_SCHEMA_SCRIPT

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Low-level SQLite access for the storage layer.

    One database file, one connection per thread (opened lazily, in WAL
    mode). Holds no business logic; failures are logged and re-raised.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """
        Args:
            db_path (Optional[Path]): The SQLite file. Defaults to ~/.pageglot/pageglot.db.
        """
        self.db_path = Path(db_path) if db_path else PathUtils.get_db_path()
        self._local = threading.local()
        self._open_connections: List[sqlite3.Connection] = []
        self._conn_lock = threading.Lock()
        logger.debug("DatabaseManager initialized at: %s", self.db_path)

    # --- CONNECTIONS ---

    def get_connection(self) -> sqlite3.Connection:
        """Returns the calling thread's connection, reopening it if it went stale."""
        conn = getattr(self._local, "conn", None)
        if conn is not None:
            try:
                conn.execute("SELECT 1;")
                return conn
            except sqlite3.Error:
                self._local.conn = None

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = sqlite3.connect(str(self.db_path), isolation_level=None, check_same_thread=False)
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA synchronous=NORMAL;")
        except sqlite3.Error as e:
            logger.error("Cannot open database %s: %s", self.db_path, e, exc_info=True)
            raise

        self._local.conn = conn
        with self._conn_lock:
            self._open_connections.append(conn)
        return conn

    def close_connections(self) -> None:
        """Closes every connection opened by this manager and truncates the WAL file."""
        with self._conn_lock:
            connections, self._open_connections = self._open_connections, []
        for conn in connections:
            try:
                conn.execute("PRAGMA wal_checkpoint(TRUNCATE);")
                conn.close()
            except sqlite3.Error as e:
                logger.debug("Could not checkpoint/close connection: %s", e)
        self._local.conn = None

    @contextmanager
    def transaction(self, action: str) -> Iterator[sqlite3.Connection]:
        """Runs a block in one transaction; logs and re-raises SQLite errors."""
        conn = self.get_connection()
        try:
            with conn:
                yield conn
        except sqlite3.Error as e:
            logger.error("%s failed on %s: %s", action, self.db_path, e)
            raise

    # --- WRITES ---

    def execute_query(self, query: str, params: tuple = ()) -> None:
        """Runs a statement that returns no rows (UPDATE, DELETE, ...)."""
        with self.transaction("Query") as conn:
            conn.execute(query, params)

    def execute_insert(self, query: str, params: tuple = ()) -> int:
        """Runs an INSERT and returns the new row id."""
        with self.transaction("Insert") as conn:
            return conn.execute(query, params).lastrowid

    def execute_script(self, script: str) -> None:
        with self.transaction("Script") as conn:
            conn.executescript(script)

    # --- READS ---

    def fetch_all(self, query: str, params: tuple = ()) -> List[tuple]:
        return self.get_connection().execute(query, params).fetchall()

    def fetch_one(self, query: str, params: tuple = ()) -> Optional[tuple]:
        return self.get_connection().execute(query, params).fetchone()

    # --- SCHEMA ---

    def init_schema(self) -> None:
        """Creates the tables from DEFAULT_SCHEMA_SCRIPT if they do not exist."""
        self.execute_script(DEFAULT_SCHEMA_SCRIPT)

# -*- coding: utf-8 -*-
"""
Unified Database Adapter - Backend-agnostic database abstraction layer.

Provides a consistent interface for SQLite (embedded store, development and
fallback) and PostgreSQL (durable multi-tenant store).

This module is the ONLY place that should import sqlite3 or psycopg2.
Queries are written with ``?`` placeholders; the PostgreSQL adapter converts
them to ``%s``.
"""

import os
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from qos_et.services.exceptions import StorageUnavailableException
from qos_et.utils.logger import get_logger

logger = get_logger(__name__)


class DatabaseType(Enum):
    """Supported database backends."""
    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"


@dataclass
class DatabaseConfig:
    """Database configuration."""
    db_type: DatabaseType = DatabaseType.SQLITE
    # PostgreSQL settings
    pg_dsn: str = ""
    pg_host: str = "localhost"
    pg_port: int = 5432
    pg_database: str = "qos_et"
    pg_user: str = "qos_et"
    pg_password: str = ""
    pg_pool_min: int = 1
    pg_pool_max: int = 10
    pg_connect_timeout: int = 5
    # SQLite settings
    sqlite_path: Optional[Path] = None

    @classmethod
    def from_env(cls) -> 'DatabaseConfig':
        """Load configuration from environment variables."""
        from qos_et.app.config import Config

        db_type = DatabaseType.POSTGRESQL if Config.DATA_BACKEND == "postgres" else DatabaseType.SQLITE
        sqlite_path = os.getenv("QOS_SQLITE_PATH")

        return cls(
            db_type=db_type,
            pg_dsn=os.getenv("DATABASE_URL", ""),
            pg_host=os.getenv("QOS_DB_HOST", "localhost"),
            pg_port=int(os.getenv("QOS_DB_PORT", "5432")),
            pg_database=os.getenv("QOS_DB_NAME", "qos_et"),
            pg_user=os.getenv("QOS_DB_USER", "qos_et"),
            pg_password=os.getenv("QOS_DB_PASSWORD", ""),
            pg_pool_min=int(os.getenv("QOS_DB_POOL_MIN", "1")),
            pg_pool_max=int(os.getenv("QOS_DB_POOL_MAX", "10")),
            pg_connect_timeout=int(os.getenv("QOS_DB_CONNECT_TIMEOUT", "5")),
            sqlite_path=Path(sqlite_path) if sqlite_path else None
        )

    @property
    def pg_target(self) -> str:
        """Printable connection target without credentials."""
        if self.pg_dsn:
            return self.pg_dsn.split("@")[-1]
        return f"{self.pg_host}:{self.pg_port}/{self.pg_database}"


class RowProxy:
    """
    A dict-like row proxy that supports both dict access and attribute access.
    Provides consistent interface regardless of backend.
    """

    def __init__(self, data: Dict[str, Any], columns: Optional[List[str]] = None):
        self._data = data
        self._columns = columns or list(data.keys())

    def __getitem__(self, key):
        if isinstance(key, int):
            return self._data[self._columns[key]]
        return self._data[key]

    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(f"'{type(self).__name__}' has no attribute '{name}'")

    def __contains__(self, key):
        return key in self._data

    def __iter__(self):
        return iter(self._data.values())

    def __len__(self):
        return len(self._data)

    def get(self, key, default=None):
        return self._data.get(key, default)

    def keys(self):
        return self._data.keys()

    def items(self):
        return self._data.items()

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)

    def __repr__(self):
        return f"RowProxy({self._data})"


class DatabaseAdapter(ABC):
    """
    Abstract base class for database adapters.
    Defines the interface that all database backends must implement.
    """

    @abstractmethod
    def connect(self) -> bool:
        """Establish database connection."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close database connection."""
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        """Check if database is connected."""
        pass

    @abstractmethod
    def execute(self, query: str, params: Optional[Tuple] = None) -> List[RowProxy]:
        """Execute a query and return results."""
        pass

    @abstractmethod
    def execute_write(self, query: str, params: Optional[Tuple] = None) -> int:
        """Execute a write statement and return the number of affected rows."""
        pass

    @abstractmethod
    def execute_batches(self, query: str, params_list: Sequence[Tuple], chunk_size: int) -> int:
        """
        Execute a statement for every parameter set inside ONE transaction,
        in slices of ``chunk_size``. Either every row is written or none.
        Returns the number of rows the statements affected.
        """
        pass

    @abstractmethod
    def fetch_one(self, query: str, params: Optional[Tuple] = None) -> Optional[RowProxy]:
        """Execute query and fetch single row."""
        pass

    @abstractmethod
    def fetch_all(self, query: str, params: Optional[Tuple] = None) -> List[RowProxy]:
        """Execute query and fetch all rows."""
        pass

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator[Any]:
        """Transaction context manager with auto-commit/rollback."""
        pass

    @abstractmethod
    def is_integrity_error(self, error: Exception) -> bool:
        """True when ``error`` is the driver's unique/primary-key violation."""
        pass

    @abstractmethod
    def initialize(self) -> None:
        """Initialize database schema."""
        pass

    @property
    @abstractmethod
    def db_type(self) -> DatabaseType:
        """Return the database type."""
        pass

    @property
    def stores_timestamps_as_text(self) -> bool:
        """SQLite keeps timestamps as ISO text; PostgreSQL has native types."""
        return self.db_type == DatabaseType.SQLITE

    def is_empty(self) -> bool:
        """Check if database has no complaints in either store."""
        relational = self.fetch_one("SELECT COUNT(*) as count FROM complaints")
        embedded = self.fetch_one("SELECT COUNT(*) as count FROM complaint_documents")
        return (relational["count"] if relational else 0) + (embedded["count"] if embedded else 0) == 0


class SQLiteAdapter(DatabaseAdapter):
    """SQLite database adapter."""

    def __init__(self, db_path: Optional[Path] = None):
        """Initialize SQLite adapter."""
        # Import sqlite3 only here
        import sqlite3 as _sqlite3
        self._sqlite3 = _sqlite3

        if db_path is None:
            from qos_et.app.config import Config
            db_path = Config.DB_PATH

        self._db_path = Path(db_path)
        self._connection = None

        # Ensure directory exists
        if str(self._db_path) != ":memory:":
            self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def db_type(self) -> DatabaseType:
        return DatabaseType.SQLITE

    @property
    def db_path(self) -> Path:
        """Get database file path."""
        return self._db_path

    def connect(self) -> bool:
        """Establish SQLite connection."""
        try:
            if self._connection is None:
                self._connection = self._sqlite3.connect(
                    str(self._db_path),
                    check_same_thread=False
                )
                # Use dict-like row factory
                self._connection.row_factory = self._dict_factory
            return True
        except Exception as e:
            logger.error(f"SQLite connection error: {e}")
            return False

    def _dict_factory(self, cursor, row):
        """Convert row to dictionary."""
        columns = [col[0] for col in cursor.description]
        return {col: row[idx] for idx, col in enumerate(columns)}

    def close(self) -> None:
        """Close SQLite connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
            logger.info("SQLite connection closed")

    def is_connected(self) -> bool:
        """Check if connected."""
        return self._connection is not None

    def _get_connection(self):
        """Get connection, connecting if needed."""
        if not self._connection and not self.connect():
            raise StorageUnavailableException(f"Cannot open SQLite database at {self._db_path}")
        return self._connection

    def execute(self, query: str, params: Optional[Tuple] = None) -> List[RowProxy]:
        """Execute query and return results."""
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(query, params or ())
            conn.commit()

            if cursor.description:
                columns = [col[0] for col in cursor.description]
                return [RowProxy(row, columns) for row in cursor.fetchall()]
            return []
        except Exception as e:
            conn.rollback()
            logger.error(f"SQLite execute error: {e}\nQuery: {query}")
            raise
        finally:
            cursor.close()

    def execute_write(self, query: str, params: Optional[Tuple] = None) -> int:
        """Execute a write statement and return affected row count."""
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(query, params or ())
            conn.commit()
            return cursor.rowcount
        except Exception as e:
            conn.rollback()
            if not self.is_integrity_error(e):
                logger.error(f"SQLite execute error: {e}\nQuery: {query}")
            raise
        finally:
            cursor.close()

    def execute_batches(self, query: str, params_list: Sequence[Tuple], chunk_size: int) -> int:
        """Execute query for many parameter sets in one transaction."""
        if not params_list:
            return 0
        written = 0
        with self.transaction() as conn:
            for start in range(0, len(params_list), chunk_size):
                chunk = params_list[start:start + chunk_size]
                cursor = conn.executemany(query, chunk)
                written += max(cursor.rowcount, 0)
                logger.debug(f"SQLite batch write: {start + len(chunk)}/{len(params_list)} rows")
        return written

    def fetch_one(self, query: str, params: Optional[Tuple] = None) -> Optional[RowProxy]:
        """Fetch single row."""
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(query, params or ())
            row = cursor.fetchone()
            if row and cursor.description:
                columns = [col[0] for col in cursor.description]
                return RowProxy(row, columns)
            return None
        except Exception as e:
            logger.error(f"SQLite fetch_one error: {e}\nQuery: {query}")
            raise
        finally:
            cursor.close()

    def fetch_all(self, query: str, params: Optional[Tuple] = None) -> List[RowProxy]:
        """Fetch all rows."""
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(query, params or ())
            if cursor.description:
                columns = [col[0] for col in cursor.description]
                return [RowProxy(row, columns) for row in cursor.fetchall()]
            return []
        except Exception as e:
            logger.error(f"SQLite fetch_all error: {e}\nQuery: {query}")
            raise
        finally:
            cursor.close()

    @contextmanager
    def transaction(self) -> Iterator[Any]:
        """Transaction context manager."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"SQLite transaction error: {e}")
            raise

    def is_integrity_error(self, error: Exception) -> bool:
        return isinstance(error, self._sqlite3.IntegrityError)

    def initialize(self) -> None:
        """Initialize SQLite schema."""
        logger.info(f"Initializing SQLite database at: {self._db_path}")
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            self._create_tables(cursor)
            conn.commit()
        finally:
            cursor.close()
        logger.info("SQLite database initialized successfully")

    def _create_tables(self, cursor) -> None:
        """Create all database tables."""
        # Relational store
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS complaints (
                id TEXT NOT NULL,
                user_id TEXT NOT NULL,
                tenant_id TEXT NOT NULL DEFAULT '',
                notification_number TEXT NOT NULL,
                notification_type TEXT NOT NULL,
                category TEXT NOT NULL,
                plant TEXT NOT NULL,
                site_code TEXT NOT NULL,
                site_name TEXT,
                created_on TEXT NOT NULL,
                defective_parts REAL NOT NULL,
                source TEXT NOT NULL,
                unit_of_measure TEXT,
                material_description TEXT,
                material_number TEXT,
                conversion_json TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                PRIMARY KEY (user_id, tenant_id, id)
            )
        """)

        # Embedded store: one JSON document per complaint id
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS complaint_documents (
                id TEXT PRIMARY KEY,
                payload TEXT NOT NULL,
                created_on TEXT,
                created_at TEXT,
                updated_at TEXT
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS upload_history (
                id TEXT PRIMARY KEY,
                section TEXT NOT NULL,
                uploaded_at_iso TEXT,
                success INTEGER NOT NULL DEFAULT 0,
                payload TEXT NOT NULL,
                recorded_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS change_history (
                id TEXT PRIMARY KEY,
                record_id TEXT NOT NULL,
                record_type TEXT NOT NULL,
                change_type TEXT,
                payload TEXT NOT NULL,
                changed_at TEXT
            )
        """)

        cursor.execute("CREATE INDEX IF NOT EXISTS idx_complaints_scope ON complaints(user_id, tenant_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_complaints_notification ON complaints(notification_number)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_complaints_site ON complaints(site_code)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_complaints_created_on ON complaints(created_on)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_upload_history_section ON upload_history(section)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_change_history_record ON change_history(record_id, record_type)")


class PostgreSQLAdapter(DatabaseAdapter):
    """PostgreSQL database adapter with connection pooling."""

    def __init__(self, config: DatabaseConfig):
        """Initialize PostgreSQL adapter."""
        self._config = config
        self._pool = None

        # Check for psycopg2
        try:
            import psycopg2
            from psycopg2 import pool as pg_pool
            from psycopg2.extras import RealDictCursor
            self._psycopg2 = psycopg2
            self._pg_pool = pg_pool
            self._RealDictCursor = RealDictCursor
            self._available = True
        except ImportError:
            logger.warning("psycopg2 not installed. PostgreSQL support unavailable.")
            self._available = False

    @property
    def db_type(self) -> DatabaseType:
        return DatabaseType.POSTGRESQL

    @property
    def is_available(self) -> bool:
        """Check if PostgreSQL driver is available."""
        return self._available

    def connect(self) -> bool:
        """Establish PostgreSQL connection pool."""
        if not self._available:
            return False

        try:
            if self._config.pg_dsn:
                self._pool = self._pg_pool.ThreadedConnectionPool(
                    self._config.pg_pool_min,
                    self._config.pg_pool_max,
                    dsn=self._config.pg_dsn,
                    connect_timeout=self._config.pg_connect_timeout
                )
            else:
                self._pool = self._pg_pool.ThreadedConnectionPool(
                    minconn=self._config.pg_pool_min,
                    maxconn=self._config.pg_pool_max,
                    host=self._config.pg_host,
                    port=self._config.pg_port,
                    database=self._config.pg_database,
                    user=self._config.pg_user,
                    password=self._config.pg_password,
                    connect_timeout=self._config.pg_connect_timeout
                )
            logger.info(f"PostgreSQL connection pool established: {self._config.pg_target}")
            return True
        except Exception as e:
            logger.error(f"PostgreSQL connection error: {e}")
            return False

    def close(self) -> None:
        """Close PostgreSQL connection pool."""
        if self._pool:
            self._pool.closeall()
            self._pool = None
            logger.info("PostgreSQL connection pool closed")

    def is_connected(self) -> bool:
        """Check if pool is active."""
        return self._pool is not None

    def _get_connection(self):
        """Get connection from pool."""
        if not self._pool and not self.connect():
            raise StorageUnavailableException(
                f"Could not connect to PostgreSQL at {self._config.pg_target}"
            )
        try:
            return self._pool.getconn()
        except self._psycopg2.Error as e:
            raise StorageUnavailableException("PostgreSQL connection pool exhausted or closed", e)

    def _put_connection(self, conn):
        """Return connection to pool."""
        if self._pool and conn:
            self._pool.putconn(conn)

    def _translate(self, error: Exception) -> Exception:
        """Connection-level driver errors become StorageUnavailableException."""
        if isinstance(error, (self._psycopg2.OperationalError, self._psycopg2.InterfaceError)):
            return StorageUnavailableException(f"PostgreSQL unavailable: {error}", error)
        return error

    def execute(self, query: str, params: Optional[Tuple] = None) -> List[RowProxy]:
        """Execute query and return results."""
        # Convert ? to %s for PostgreSQL
        query = self._convert_placeholders(query)

        conn = self._get_connection()
        try:
            with conn.cursor(cursor_factory=self._RealDictCursor) as cursor:
                cursor.execute(query, params)
                conn.commit()

                if cursor.description:
                    columns = [col.name for col in cursor.description]
                    return [RowProxy(dict(row), columns) for row in cursor.fetchall()]
                return []
        except Exception as e:
            conn.rollback()
            logger.error(f"PostgreSQL execute error: {e}\nQuery: {query}")
            translated = self._translate(e)
            if translated is e:
                raise
            raise translated from e
        finally:
            self._put_connection(conn)

    def execute_write(self, query: str, params: Optional[Tuple] = None) -> int:
        """Execute a write statement and return affected row count."""
        query = self._convert_placeholders(query)

        conn = self._get_connection()
        try:
            with conn.cursor() as cursor:
                cursor.execute(query, params)
                conn.commit()
                return cursor.rowcount
        except Exception as e:
            conn.rollback()
            if not self.is_integrity_error(e):
                logger.error(f"PostgreSQL execute error: {e}\nQuery: {query}")
            translated = self._translate(e)
            if translated is e:
                raise
            raise translated from e
        finally:
            self._put_connection(conn)

    def execute_batches(self, query: str, params_list: Sequence[Tuple], chunk_size: int) -> int:
        """Execute query for many parameter sets in one transaction."""
        if not params_list:
            return 0
        query = self._convert_placeholders(query)
        written = 0
        with self.transaction() as conn:
            with conn.cursor() as cursor:
                for start in range(0, len(params_list), chunk_size):
                    chunk = params_list[start:start + chunk_size]
                    cursor.executemany(query, chunk)
                    written += max(cursor.rowcount, 0)
        return written

    def fetch_one(self, query: str, params: Optional[Tuple] = None) -> Optional[RowProxy]:
        """Fetch single row."""
        query = self._convert_placeholders(query)

        conn = self._get_connection()
        try:
            with conn.cursor(cursor_factory=self._RealDictCursor) as cursor:
                cursor.execute(query, params)
                row = cursor.fetchone()
                if row and cursor.description:
                    columns = [col.name for col in cursor.description]
                    return RowProxy(dict(row), columns)
                return None
        except Exception as e:
            logger.error(f"PostgreSQL fetch_one error: {e}\nQuery: {query}")
            translated = self._translate(e)
            if translated is e:
                raise
            raise translated from e
        finally:
            self._put_connection(conn)

    def fetch_all(self, query: str, params: Optional[Tuple] = None) -> List[RowProxy]:
        """Fetch all rows."""
        query = self._convert_placeholders(query)

        conn = self._get_connection()
        try:
            with conn.cursor(cursor_factory=self._RealDictCursor) as cursor:
                cursor.execute(query, params)
                if cursor.description:
                    columns = [col.name for col in cursor.description]
                    return [RowProxy(dict(row), columns) for row in cursor.fetchall()]
                return []
        except Exception as e:
            logger.error(f"PostgreSQL fetch_all error: {e}\nQuery: {query}")
            translated = self._translate(e)
            if translated is e:
                raise
            raise translated from e
        finally:
            self._put_connection(conn)

    @contextmanager
    def transaction(self) -> Iterator[Any]:
        """Transaction context manager."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"PostgreSQL transaction error: {e}")
            raise
        finally:
            self._put_connection(conn)

    def is_integrity_error(self, error: Exception) -> bool:
        return self._available and isinstance(error, self._psycopg2.IntegrityError)

    def _convert_placeholders(self, query: str) -> str:
        """Convert ? placeholders to %s for PostgreSQL."""
        # Simple replacement - queries never contain literal question marks
        return query.replace("?", "%s")

    def initialize(self) -> None:
        """Initialize PostgreSQL schema."""
        logger.info(f"Initializing PostgreSQL database: {self._config.pg_target}")

        conn = self._get_connection()
        try:
            with conn.cursor() as cursor:
                self._create_tables(cursor)
                conn.commit()
                logger.info("PostgreSQL database initialized")
        except Exception:
            conn.rollback()
            raise
        finally:
            self._put_connection(conn)

    def _create_tables(self, cursor) -> None:
        """Create all database tables."""
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS complaints (
                id TEXT NOT NULL,
                user_id TEXT NOT NULL,
                tenant_id TEXT NOT NULL DEFAULT '',
                notification_number TEXT NOT NULL,
                notification_type TEXT NOT NULL,
                category TEXT NOT NULL,
                plant TEXT NOT NULL,
                site_code TEXT NOT NULL,
                site_name TEXT,
                created_on TIMESTAMPTZ NOT NULL,
                defective_parts DOUBLE PRECISION NOT NULL CHECK (defective_parts >= 0),
                source TEXT NOT NULL,
                unit_of_measure TEXT,
                material_description TEXT,
                material_number TEXT,
                conversion_json TEXT,
                created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                PRIMARY KEY (user_id, tenant_id, id)
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS complaint_documents (
                id TEXT PRIMARY KEY,
                payload TEXT NOT NULL,
                created_on TEXT,
                created_at TEXT,
                updated_at TEXT
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS upload_history (
                id TEXT PRIMARY KEY,
                section TEXT NOT NULL,
                uploaded_at_iso TEXT,
                success BOOLEAN NOT NULL DEFAULT FALSE,
                payload TEXT NOT NULL,
                recorded_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS change_history (
                id TEXT PRIMARY KEY,
                record_id TEXT NOT NULL,
                record_type TEXT NOT NULL,
                change_type TEXT,
                payload TEXT NOT NULL,
                changed_at TEXT
            )
        """)

        cursor.execute("CREATE INDEX IF NOT EXISTS idx_complaints_scope ON complaints(user_id, tenant_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_complaints_notification ON complaints(notification_number)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_complaints_site ON complaints(site_code)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_complaints_created_on ON complaints(created_on)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_upload_history_section ON upload_history(section)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_change_history_record ON change_history(record_id, record_type)")

        logger.debug("All PostgreSQL tables created successfully")


class DatabaseFactory:
    """
    Factory for creating database adapters.

    Creates a fresh adapter on every call; the caller owns it. The process's
    top-level wiring creates one and hands it to repositories and services.
    """

    @classmethod
    def create(cls, config: Optional[DatabaseConfig] = None,
               allow_fallback: bool = True) -> DatabaseAdapter:
        """
        Create and connect a database adapter.

        Args:
            config: Database configuration. If None, loads from environment.
            allow_fallback: Fall back to SQLite when PostgreSQL is unreachable.

        Returns:
            Connected DatabaseAdapter instance

        Raises:
            StorageUnavailableException: when no backend can be opened
        """
        if config is None:
            config = DatabaseConfig.from_env()

        if config.db_type == DatabaseType.POSTGRESQL:
            adapter = PostgreSQLAdapter(config)
            if adapter.is_available and adapter.connect():
                logger.info(f"Using PostgreSQL database: {config.pg_target}")
                return adapter
            if not allow_fallback:
                raise StorageUnavailableException(
                    f"PostgreSQL unavailable at {config.pg_target}"
                )
            logger.warning("PostgreSQL unavailable, falling back to SQLite")

        adapter = SQLiteAdapter(config.sqlite_path)
        if not adapter.connect():
            raise StorageUnavailableException(f"Cannot open SQLite database at {adapter.db_path}")
        logger.info(f"Using SQLite database: {adapter.db_path}")
        return adapter

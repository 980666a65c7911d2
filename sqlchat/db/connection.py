from sqlalchemy import text
from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool
from sqlchat.core.config import settings
from sqlchat.core.exceptions import ConfigurationError, DatabaseConnectionError
from sqlchat.core.logging import get_logger
from sqlchat.db.models import ConnectionConfig, SchemaInfo
from sqlchat.db.schema_inspect import SchemaInspector
from typing import Any, Dict, List, Mapping, Optional
import ssl

logger = get_logger(__name__)


# ============================================================
# 🧩 BACKENDS: one per SQL dialect
# ============================================================
class DatabaseBackend:
    """Dialect-specific knowledge: driver, URL, connect args and catalog queries."""

    name: str = ""
    label: str = ""
    driver: str = ""
    default_port: Optional[int] = None
    requires_server: bool = True
    tables_query: str = ""
    columns_query: str = ""

    def validate(self, config: ConnectionConfig) -> None:
        required = ["host", "user", "database"] if self.requires_server else ["database"]
        missing = [field for field in required if not getattr(config, field)]
        if missing:
            raise ConfigurationError(f"Missing required connection fields: {', '.join(missing)}")

    def url(self, config: ConnectionConfig) -> URL:
        return URL.create(
            self.driver,
            username=config.user or None,
            password=config.password or None,
            host=config.host or None,
            port=config.port or self.default_port,
            database=config.database,
        )

    def connect_args(self, config: ConnectionConfig) -> Dict[str, Any]:
        return {}


class PostgresBackend(DatabaseBackend):
    name = "postgresql"
    label = "PostgreSQL"
    driver = "postgresql+asyncpg"
    default_port = 5432
    tables_query = """
        SELECT table_name, table_schema
        FROM information_schema.tables
        WHERE table_catalog = :database
        AND table_type = 'BASE TABLE'
        AND table_schema NOT IN ('pg_catalog', 'information_schema')
        ORDER BY table_schema, table_name
    """
    columns_query = """
        SELECT c.table_name, c.table_schema, c.column_name, c.data_type
        FROM information_schema.columns AS c
        JOIN information_schema.tables AS t
          ON t.table_catalog = c.table_catalog
         AND t.table_schema = c.table_schema
         AND t.table_name = c.table_name
        WHERE c.table_catalog = :database
        AND t.table_type = 'BASE TABLE'
        AND c.table_schema NOT IN ('pg_catalog', 'information_schema')
        ORDER BY c.table_schema, c.table_name, c.ordinal_position
    """

    def connect_args(self, config):
        return {"ssl": "require"} if config.encrypt else {}


class MySQLBackend(DatabaseBackend):
    name = "mysql"
    label = "MySQL"
    driver = "mysql+aiomysql"
    default_port = 3306
    tables_query = """
        SELECT TABLE_NAME AS table_name, TABLE_SCHEMA AS table_schema
        FROM information_schema.TABLES
        WHERE TABLE_SCHEMA = :database
        ORDER BY TABLE_NAME
    """
    columns_query = """
        SELECT TABLE_NAME AS table_name, TABLE_SCHEMA AS table_schema,
               COLUMN_NAME AS column_name, DATA_TYPE AS data_type
        FROM information_schema.COLUMNS
        WHERE TABLE_SCHEMA = :database
        ORDER BY TABLE_NAME, ORDINAL_POSITION
    """

    def connect_args(self, config):
        return {"ssl": ssl.create_default_context()} if config.encrypt else {}


class SQLServerBackend(DatabaseBackend):
    name = "mssql"
    label = "SQL Server"
    driver = "mssql+aioodbc"
    default_port = 1433
    tables_query = """
        SELECT TABLE_NAME AS table_name, TABLE_SCHEMA AS table_schema
        FROM INFORMATION_SCHEMA.TABLES
        WHERE TABLE_TYPE = 'BASE TABLE' AND TABLE_CATALOG = :database
        ORDER BY TABLE_SCHEMA, TABLE_NAME
    """
    columns_query = """
        SELECT c.TABLE_NAME AS table_name, c.TABLE_SCHEMA AS table_schema,
               c.COLUMN_NAME AS column_name, c.DATA_TYPE AS data_type
        FROM INFORMATION_SCHEMA.COLUMNS AS c
        JOIN INFORMATION_SCHEMA.TABLES AS t
          ON t.TABLE_CATALOG = c.TABLE_CATALOG
         AND t.TABLE_SCHEMA = c.TABLE_SCHEMA
         AND t.TABLE_NAME = c.TABLE_NAME
        WHERE t.TABLE_TYPE = 'BASE TABLE' AND c.TABLE_CATALOG = :database
        ORDER BY c.TABLE_SCHEMA, c.TABLE_NAME, c.ORDINAL_POSITION
    """

    def url(self, config):
        return super().url(config).update_query_dict({
            "driver": settings.MSSQL_ODBC_DRIVER,
            "Encrypt": "yes" if config.encrypt else "no",
            "TrustServerCertificate": "yes",
        })


class SQLiteBackend(DatabaseBackend):
    """File-backed SQLite; `database` is the path of an existing file.

    Opened read-only through a SQLite URI, so a missing path fails to
    connect instead of creating an empty database.
    """

    name = "sqlite"
    label = "SQLite"
    driver = "sqlite+aiosqlite"
    requires_server = False
    tables_query = """
        SELECT name AS table_name, 'main' AS table_schema
        FROM sqlite_master
        WHERE type = 'table' AND name NOT LIKE 'sqlite_%'
        ORDER BY name
    """
    columns_query = """
        SELECT m.name AS table_name, 'main' AS table_schema,
               p.name AS column_name, p.type AS data_type
        FROM sqlite_master AS m
        JOIN pragma_table_info(m.name) AS p
        WHERE m.type = 'table' AND m.name NOT LIKE 'sqlite_%'
        ORDER BY m.name, p.cid
    """

    def url(self, config):
        return URL.create(
            self.driver,
            database=f"file:{config.database}",
            query={"mode": "ro", "uri": "true"},
        )


BACKENDS: Dict[str, DatabaseBackend] = {
    backend.name: backend
    for backend in (PostgresBackend(), MySQLBackend(), SQLServerBackend(), SQLiteBackend())
}
BACKENDS["postgres"] = BACKENDS["postgresql"]
BACKENDS["sqlserver"] = BACKENDS["mssql"]


def get_backend(name: str) -> DatabaseBackend:
    try:
        return BACKENDS[name]
    except KeyError:
        supported = ", ".join(sorted(BACKENDS))
        raise ConfigurationError(f"Unsupported database backend '{name}' (expected one of: {supported})")


# ============================================================
# 🔗 DATABASE: connect / introspect / execute / close
# ============================================================
class Database:
    """A single connection to the configured database.

    Use as an async context manager so the connection and its engine are
    released whether the request succeeds or fails::

        async with Database(config) as db:
            schema = await db.get_schema()
            rows = await db.execute("SELECT 1 AS one")
    """

    def __init__(self, config: ConnectionConfig):
        self.config = config
        self.backend = get_backend(config.backend)
        self.backend.validate(config)
        self._engine: Optional[AsyncEngine] = None
        self._conn: Optional[AsyncConnection] = None

    async def __aenter__(self) -> "Database":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def connect(self) -> "Database":
        if self._conn is not None:
            return self

        try:
            self._engine = create_async_engine(
                self.backend.url(self.config),
                poolclass=NullPool,
                isolation_level="AUTOCOMMIT",
                connect_args=self.backend.connect_args(self.config),
            )
            self._conn = await self._engine.connect()
        except Exception as e:
            logger.error(f"Database connection error ({self.backend.label}): {e}")
            await self.close()
            raise DatabaseConnectionError(f"Failed to connect to database: {e}") from e

        logger.info(f"Connected to {self.backend.label} database '{self.config.database}'")
        return self

    def _connection(self) -> AsyncConnection:
        if self._conn is None:
            raise DatabaseConnectionError("Database is not connected")
        return self._conn

    async def get_schema(self) -> SchemaInfo:
        inspector = SchemaInspector(self._connection(), self.backend, self.config.database)
        return await inspector.get_schema()

    async def execute(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """Run `sql` as given and return the rows as column -> value records.

        Without `params` every colon is escaped so the text reaches the
        driver unchanged instead of being read as bind parameters.
        """
        statement = text(sql) if params else text(sql.replace(":", "\\:"))
        result = await self._connection().execute(statement, dict(params or {}))
        if not result.returns_rows:
            return []
        return [dict(row._mapping) for row in result]

    async def close(self):
        try:
            if self._conn is not None:
                await self._conn.close()
            if self._engine is not None:
                await self._engine.dispose()
        except Exception as e:
            logger.warning(f"Error closing database connection: {e}")
        finally:
            self._conn = None
            self._engine = None

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection
from sqlchat.core.logging import get_logger
from sqlchat.db.models import ColumnInfo, SchemaInfo, TableInfo
from typing import Dict, List

logger = get_logger(__name__)

class SchemaInspector:
    def __init__(self, connection: AsyncConnection, backend, database: str):
        self.connection = connection
        self.backend = backend
        self.database = database

    async def get_tables(self) -> List[TableInfo]:
        result = await self.connection.execute(
            text(self.backend.tables_query), {"database": self.database}
        )
        return [TableInfo(**row._mapping) for row in result]

    async def get_columns(self) -> List[ColumnInfo]:
        result = await self.connection.execute(
            text(self.backend.columns_query), {"database": self.database}
        )
        return [ColumnInfo(**row._mapping) for row in result]

    async def get_schema(self) -> SchemaInfo:
        """Read table and column metadata for the configured database"""
        try:
            schema = SchemaInfo(tables=await self.get_tables(), columns=await self.get_columns())
        except Exception as e:
            logger.error(f"Error fetching database schema: {e}")
            raise

        logger.info(f"Schema loaded: {len(schema.tables)} tables, {len(schema.columns)} columns")
        return schema


def group_columns_by_table(schema: SchemaInfo) -> Dict[str, List[ColumnInfo]]:
    """Columns keyed by fully-qualified table name, in catalog order."""
    grouped: Dict[str, List[ColumnInfo]] = {}
    for column in schema.columns:
        grouped.setdefault(column.qualified_name, []).append(column)
    return grouped


def format_schema_for_prompt(schema: SchemaInfo) -> str:
    """Render the schema as the text block embedded in the LLM prompt.

    One block per table, ``column (type)`` lines, blank line between
    tables. Tables with no columns get an empty body.
    """
    grouped = group_columns_by_table(schema)

    description = ""
    for table in schema.tables:
        description += f"Table: {table.qualified_name}\n"
        for column in grouped.get(table.qualified_name, []):
            description += f"  - {column.column_name} ({column.data_type})\n"
        description += "\n"

    return description


def table_column_names(schema: SchemaInfo) -> Dict[str, List[str]]:
    grouped = group_columns_by_table(schema)
    return {
        table.qualified_name: [column.column_name for column in grouped.get(table.qualified_name, [])]
        for table in schema.tables
    }

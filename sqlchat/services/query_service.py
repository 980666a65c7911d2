from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlchat.api.models import QueryResult
from sqlchat.core.config import settings
from sqlchat.core.logging import get_logger
from sqlchat.db.connection import Database
from sqlchat.db.models import ConnectionConfig
from sqlchat.llm.sql_agent import SQLAgent
from sqlchat.llm.validator import SQLValidator
from sqlchat.services.formatting import format_result, format_sql
from typing import Optional
import time

logger = get_logger(__name__)


class QueryService:
    """One chat turn: schema → SQL → policy check → execution → display rows.

    Query failures (policy rejection or a driver error) are an expected
    outcome and come back as a QueryResult with `error` set. Connection and
    generation failures propagate to the caller.
    """

    def __init__(self, config: ConnectionConfig, sql_agent: SQLAgent, validator: Optional[SQLValidator] = None):
        self.config = config
        self.sql_agent = sql_agent
        self.validator = validator or SQLValidator(read_only=settings.ENFORCE_READ_ONLY)

    async def process_message(self, message: str) -> QueryResult:
        async with Database(self.config) as db:
            schema = await db.get_schema()

            start_time = time.perf_counter()
            sql = await self.sql_agent.generate_sql(message, schema, dialect=db.backend.label)

            is_valid, error = self.validator.validate(sql)
            if not is_valid:
                logger.warning(f"Generated SQL rejected: {error}")
                return self._failed(sql, error, start_time)

            try:
                data = await db.execute(sql)
            except SQLAlchemyError as e:
                logger.error(f"Query execution error: {e}")
                cause = e.orig if isinstance(e, DBAPIError) and e.orig is not None else e
                return self._failed(sql, str(cause) or "Query execution failed", start_time)

        exec_time = self._elapsed_ms(start_time)
        columns, rows = format_result(data)
        logger.info(f"Query executed successfully | rows={len(data)} | time={exec_time}ms")
        return QueryResult(
            sql=sql,
            formatted_sql=format_sql(sql),
            data=data,
            columns=columns,
            rows=rows,
            execution_time=exec_time,
        )

    def _failed(self, sql: str, error: str, start_time: float) -> QueryResult:
        return QueryResult(
            sql=sql,
            formatted_sql=format_sql(sql),
            error=error,
            execution_time=self._elapsed_ms(start_time),
        )

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return max(0, int((time.perf_counter() - start_time) * 1000))

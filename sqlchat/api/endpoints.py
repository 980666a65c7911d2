from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlchat.api.deps import (
    clear_connection_cookies, get_connection_config, get_sql_agent,
    is_connected, store_connection_cookies,
)
from sqlchat.api.models import (
    ApiResponse, ChatMessage, ChatRequest, ChatResponse,
    ConnectionState, HealthResponse,
)
from sqlchat.core.config import settings
from sqlchat.core.exceptions import SQLChatError
from sqlchat.core.logging import get_logger
from sqlchat.db.connection import Database
from sqlchat.db.models import ConnectionConfig
from sqlchat.db.schema_inspect import table_column_names
from sqlchat.llm.sql_agent import SQLAgent
from sqlchat.services.query_service import QueryService
from typing import Any, Optional

logger = get_logger(__name__)
router = APIRouter(prefix="/api", tags=["SQL Chat"])

NOT_CONNECTED = "Not connected to any database. Please connect first."


def envelope(data: Any = None, error: Optional[str] = None, status_code: int = 200) -> JSONResponse:
    body = ApiResponse(success=error is None, data=data, error=error)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))


@router.post("/database/connect")
async def connect_database(config: ConnectionConfig):
    """Connect, introspect, and remember the non-secret parameters in cookies."""
    logger.info(f"Connecting to {config.backend} database '{config.database}'")
    try:
        async with Database(config) as db:
            schema = await db.get_schema()
    except SQLChatError:
        raise
    except Exception as e:
        logger.error(f"Database connection error: {e}")
        return envelope(error=str(e) or "Failed to connect to database", status_code=500)

    response = envelope(schema)
    store_connection_cookies(response, config)
    return response


@router.get("/database/connect")
async def connection_status(request: Request):
    """Report whether the cookie parameters still allow a connection."""
    if not is_connected(request):
        return envelope(ConnectionState(is_connected=False))

    config = get_connection_config(request)
    if config is None:
        return envelope(ConnectionState(is_connected=False, error="Connection information not found"))

    try:
        async with Database(config) as db:
            schema = await db.get_schema()
    except Exception as e:
        logger.warning(f"Connection status check failed: {e}")
        return envelope(ConnectionState(is_connected=False, error="Database connection failed, please reconnect"))

    return envelope(ConnectionState(is_connected=True, connection=config.masked(), db_schema=schema))


@router.post("/database/disconnect")
async def disconnect_database():
    response = envelope({"message": "Successfully disconnected from database"})
    clear_connection_cookies(response)
    logger.info("Cleared database connection cookies")
    return response


@router.get("/database/schema")
async def get_schema(config: Optional[ConnectionConfig] = Depends(get_connection_config)):
    """Fully-qualified table name → column names."""
    if config is None:
        return envelope(error=NOT_CONNECTED, status_code=400)

    try:
        async with Database(config) as db:
            schema = await db.get_schema()
    except Exception as e:
        logger.error(f"Schema fetch error: {e}")
        return envelope(error="Failed to fetch schema", status_code=500)

    return envelope(table_column_names(schema))


@router.post("/chat")
async def chat(
    request: ChatRequest,
    config: Optional[ConnectionConfig] = Depends(get_connection_config),
    sql_agent: SQLAgent = Depends(get_sql_agent),
):
    """Natural language → SQL → rows. A failing query is still a successful turn."""
    if config is None:
        return envelope(error=NOT_CONNECTED, status_code=400)

    service = QueryService(config, sql_agent)
    try:
        result = await service.process_message(request.message)
    except Exception as e:
        logger.error(f"Error processing chat request: {e}")
        return envelope(error=str(e) or "Failed to process request", status_code=500)

    return envelope(ChatResponse(**result.model_dump(), message=ChatMessage.from_result(result)))


@router.get("/health")
async def health_check():
    return envelope(HealthResponse(status="ok", backend=settings.DB_BACKEND, model=settings.DEFAULT_MODEL))

from fastapi import Request, Response
from pydantic import ValidationError
from sqlchat.core.config import settings
from sqlchat.core.exceptions import ConfigurationError
from sqlchat.core.logging import get_logger
from sqlchat.db.connection import get_backend
from sqlchat.db.models import ConnectionConfig
from sqlchat.llm.sql_agent import SQLAgent
from typing import Optional

logger = get_logger(__name__)

CONNECTED_COOKIE = "db_connected"
CONNECTION_COOKIES = ("db_backend", "db_host", "db_port", "db_user", "db_database", "db_encrypt")


def is_connected(request: Request) -> bool:
    return request.cookies.get(CONNECTED_COOKIE) == "true"


def get_connection_config(request: Request) -> Optional[ConnectionConfig]:
    """Rebuild the connection config from cookies, or None when not connected.

    The password never travels in cookies; it comes from DB_PASSWORD.
    """
    if not is_connected(request):
        return None

    cookies = request.cookies
    try:
        config = ConnectionConfig(
            backend=cookies.get("db_backend") or settings.DB_BACKEND,
            host=cookies.get("db_host", ""),
            port=cookies.get("db_port") or None,
            user=cookies.get("db_user", ""),
            password=settings.DB_PASSWORD,
            database=cookies.get("db_database", ""),
            encrypt=cookies.get("db_encrypt") == "true",
        )
        get_backend(config.backend).validate(config)
    except (ValidationError, ConfigurationError) as e:
        logger.warning(f"Connection cookies are incomplete: {e}")
        return None
    return config


def store_connection_cookies(response: Response, config: ConnectionConfig):
    values = {
        "db_backend": config.backend,
        "db_host": config.host,
        "db_port": str(config.port) if config.port else "",
        "db_user": config.user,
        "db_database": config.database,
        "db_encrypt": "true" if config.encrypt else "false",
        CONNECTED_COOKIE: "true",
    }
    for key, value in values.items():
        response.set_cookie(
            key=key,
            value=value,
            httponly=True,
            samesite="lax",
            secure=settings.COOKIE_SECURE,
            path="/",
            max_age=settings.COOKIE_MAX_AGE,
        )


def clear_connection_cookies(response: Response):
    for key in (CONNECTED_COOKIE,) + CONNECTION_COOKIES:
        response.delete_cookie(key, path="/")


def get_sql_agent() -> SQLAgent:
    return SQLAgent()

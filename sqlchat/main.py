from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from sqlchat.api import endpoints
from sqlchat.api.models import ApiResponse

from sqlchat.core.config import settings
from sqlchat.core.exceptions import SQLChatError
from sqlchat.core.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f" Starting SQL Chat API (backend={settings.DB_BACKEND}, model={settings.DEFAULT_MODEL})...")
    if not settings.OPENAI_API_KEY:
        logger.warning(" OPENAI_API_KEY is not set; chat requests will fail until it is")

    yield

    logger.info(" Shutting down SQL Chat API...")


app = FastAPI(
    title="SQL Chat",
    description="Ask questions about a relational database in natural language",
    version="1.0.0",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(','),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SQLChatError)
async def sqlchat_error_handler(request: Request, exc: SQLChatError):
    logger.error(f"{type(exc).__name__} on {request.url.path}: {exc}")
    body = ApiResponse(success=False, error=str(exc))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'] if part != 'body')}: {err['msg']}"
        for err in exc.errors()
    )
    logger.warning(f"Invalid request to {request.url.path}: {errors}")
    body = ApiResponse(success=False, error=f"Invalid request: {errors}")
    return JSONResponse(status_code=422, content=body.model_dump())


app.include_router(endpoints.router)


@app.get("/")
async def root():
    return {
        "service": "Natural Language SQL Chat",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/health",
        "chat": "/api/chat",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8001)

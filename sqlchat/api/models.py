from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, field_serializer
from sqlchat.db.models import SchemaInfo
from sqlchat.services.formatting import format_value
from typing import Any, Dict, Generic, List, Literal, Optional, TypeVar
import uuid

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope wrapped around every API reply"""
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, description="Natural language question")


class QueryResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sql: str
    formatted_sql: Optional[str] = Field(None, serialization_alias="formattedSql")
    data: Optional[List[Dict[str, Any]]] = None
    columns: Optional[List[str]] = None
    rows: Optional[List[List[str]]] = None
    error: Optional[str] = None
    execution_time: int = Field(0, ge=0, serialization_alias="executionTime", description="Milliseconds")

    @field_serializer("data", when_used="json")
    def _json_safe_data(self, data: Optional[List[Dict[str, Any]]]):
        # Binary columns are not valid UTF-8 text
        if data is None:
            return None
        return [
            {key: format_value(value) if isinstance(value, (bytes, bytearray, memoryview)) else value
             for key, value in record.items()}
            for record in data
        ]


class ChatMessage(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:9])
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    sql: Optional[str] = None
    data: Optional[List[Dict[str, Any]]] = None
    error: Optional[str] = None

    @classmethod
    def from_result(cls, result: QueryResult) -> "ChatMessage":
        """Assistant turn for a chat result; rows stay on the result itself."""
        if result.error:
            content = "I encountered an error while executing your query. Please check the error message and try again."
        else:
            content = "Here are the results for your query:"
        return cls(role="assistant", content=content, sql=result.sql, error=result.error)


class ChatResponse(QueryResult):
    message: ChatMessage


class ConnectionState(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_connected: bool = Field(..., serialization_alias="isConnected")
    connection: Optional[Dict[str, Any]] = None
    db_schema: Optional[SchemaInfo] = Field(None, serialization_alias="schema")
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    backend: str
    model: str

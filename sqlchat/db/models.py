from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from sqlchat.core.config import settings
from typing import List, Optional


# ============================================================
# 🔌 CONNECTION CONFIG: explicit, passed through every call
# ============================================================
class ConnectionConfig(BaseModel):
    """Parameters for one database connection.

    Built per request (from the connect body or from cookies) and handed
    down explicitly; nothing here is written to process-wide state.
    """
    model_config = ConfigDict(populate_by_name=True)

    backend: str = Field(default_factory=lambda: settings.DB_BACKEND, validate_default=True)
    host: str = Field("", validation_alias=AliasChoices("host", "server"))
    port: Optional[int] = None
    user: str = ""
    password: str = ""
    database: str = ""
    encrypt: bool = False

    @field_validator("backend", mode="before")
    @classmethod
    def _normalize_backend(cls, value):
        return str(value or settings.DB_BACKEND).strip().lower()

    @field_validator("port", mode="before")
    @classmethod
    def _blank_port(cls, value):
        if value in ("", None):
            return None
        return value

    def masked(self) -> dict:
        """Connection info safe to echo back to a client."""
        data = self.model_dump(exclude={"password"})
        data["server"] = self.host
        data["password"] = "******"
        return data


# ============================================================
# 🗂️ SCHEMA: catalog snapshot of the connected database
# ============================================================
class TableInfo(BaseModel):
    table_name: str
    table_schema: str

    @property
    def qualified_name(self) -> str:
        return f"{self.table_schema}.{self.table_name}"


class ColumnInfo(BaseModel):
    table_name: str
    table_schema: str
    column_name: str
    data_type: str

    @property
    def qualified_name(self) -> str:
        return f"{self.table_schema}.{self.table_name}"


class SchemaInfo(BaseModel):
    tables: List[TableInfo] = Field(default_factory=list)
    columns: List[ColumnInfo] = Field(default_factory=list)

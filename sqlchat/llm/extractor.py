"""Pull the SQL statement out of a completion reply.

Models do not always honour the requested JSON shape, so extraction is an
ordered chain of parsers. Each parser returns an :class:`ExtractionResult`
instead of raising; :func:`extract_sql` returns the first successful one.

1. JSON object with a ``sql`` (or ``sql_query``) string
2. a fenced ```` ```sql ```` block anywhere in the text
3. the raw text itself
"""
from enum import Enum
from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator
from sqlchat.core.logging import get_logger
from typing import Callable, Optional, Sequence
import re

logger = get_logger(__name__)

FENCED_SQL_PATTERN = re.compile(r"```sql\s*(.*?)\s*```", re.IGNORECASE | re.DOTALL)


class GeneratedQuery(BaseModel):
    sql: str = Field(..., validation_alias=AliasChoices("sql", "sql_query"))

    @field_validator("sql")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("sql must not be empty")
        return value


class ExtractionMethod(str, Enum):
    JSON = "json"
    FENCED = "fenced"
    RAW = "raw"
    NONE = "none"


class ExtractionResult(BaseModel):
    ok: bool
    method: ExtractionMethod
    sql: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, method: ExtractionMethod, sql: str) -> "ExtractionResult":
        return cls(ok=True, method=method, sql=sql)

    @classmethod
    def failure(cls, method: ExtractionMethod, reason: str) -> "ExtractionResult":
        return cls(ok=False, method=method, reason=reason)


def parse_json(text: str) -> ExtractionResult:
    try:
        query = GeneratedQuery.model_validate_json(text)
    except ValidationError as e:
        return ExtractionResult.failure(ExtractionMethod.JSON, f"not a JSON object with a sql string ({e.error_count()} errors)")
    return ExtractionResult.success(ExtractionMethod.JSON, query.sql)


def parse_fenced_block(text: str) -> ExtractionResult:
    match = FENCED_SQL_PATTERN.search(text)
    if not match:
        return ExtractionResult.failure(ExtractionMethod.FENCED, "no ```sql block found")
    sql = match.group(1).strip()
    if not sql:
        return ExtractionResult.failure(ExtractionMethod.FENCED, "```sql block is empty")
    return ExtractionResult.success(ExtractionMethod.FENCED, sql)


def parse_raw_text(text: str) -> ExtractionResult:
    sql = text.strip()
    if not sql:
        return ExtractionResult.failure(ExtractionMethod.RAW, "completion is empty")
    return ExtractionResult.success(ExtractionMethod.RAW, sql)


PARSERS: Sequence[Callable[[str], ExtractionResult]] = (parse_json, parse_fenced_block, parse_raw_text)


def extract_sql(text: Optional[str], parsers: Sequence[Callable[[str], ExtractionResult]] = PARSERS) -> ExtractionResult:
    text = text or ""
    for parser in parsers:
        result = parser(text)
        if result.ok:
            if result.method is ExtractionMethod.RAW:
                logger.warning("Completion was neither JSON nor fenced SQL, using raw text")
            return result
        logger.debug(f"{result.method.value} extraction failed: {result.reason}")

    return ExtractionResult.failure(ExtractionMethod.NONE, "no SQL found in completion")

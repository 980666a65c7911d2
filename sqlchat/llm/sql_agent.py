from sqlchat.llm.provider import LLMProvider
from sqlchat.llm.extractor import extract_sql
from sqlchat.db.models import SchemaInfo
from sqlchat.db.schema_inspect import format_schema_for_prompt
from sqlchat.core.exceptions import SQLGenerationError
from sqlchat.core.logging import get_logger
from typing import Optional

logger = get_logger(__name__)

SQL_SYSTEM_PROMPT = """You are an expert database engineer who translates natural language questions into SQL.

Given the database schema and a question, you will:
1. Study the schema to understand how the tables relate.
2. Work out what the user is asking for.
3. Write one valid SQL query that answers the question.

Rules:
- Only use tables and columns that exist in the schema.
- Name the columns you need instead of using SELECT *.
- Never write statements that modify data or structure (INSERT, UPDATE, DELETE, DROP, ...).
- Use table aliases when joining.
- Keep the query efficient: filter, join and aggregate in SQL.

The query will be executed against a {dialect} database."""


class SQLAgent:
    """Turns a question plus the database schema into one SQL statement"""

    def __init__(self, llm_provider: Optional[LLMProvider] = None):
        self._llm_provider = llm_provider

    @property
    def llm_provider(self) -> LLMProvider:
        if self._llm_provider is None:
            self._llm_provider = LLMProvider()
        return self._llm_provider

    def build_prompt(self, question: str, schema: SchemaInfo) -> str:
        schema_text = format_schema_for_prompt(schema)
        return f"""DATABASE SCHEMA:
{schema_text}
NATURAL LANGUAGE QUERY: {question}

Respond with a JSON object holding the SQL query in a field called "sql". Write the query on a single line. Example: {{"sql": "SELECT id, name FROM users;"}}"""

    async def generate_sql(self, question: str, schema: SchemaInfo, dialect: str = "SQL") -> str:
        """Generate SQL from natural language using the LLM"""
        prompt = self.build_prompt(question, schema)

        try:
            self.llm_provider.system_message = SQL_SYSTEM_PROMPT.format(dialect=dialect)
            response = await self.llm_provider.generate_response(prompt)
        except Exception as e:
            logger.error(f"SQL generation failed: {e}")
            raise SQLGenerationError() from e

        result = extract_sql(response)
        if not result.ok:
            logger.error(f"SQL generation failed: {result.reason}")
            raise SQLGenerationError()

        logger.info(f"Generated SQL ({result.method.value}): {result.sql}")
        return result.sql

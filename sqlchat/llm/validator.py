import sqlparse
from sqlparse import tokens as T
from sqlchat.core.logging import get_logger
from typing import Tuple, Optional

logger = get_logger(__name__)

class SQLValidator:
    """Read-only statement policy applied to generated SQL before execution"""

    DANGEROUS_KEYWORDS = [
        'INSERT', 'UPDATE', 'DELETE', 'DROP', 'ALTER', 'CREATE',
        'TRUNCATE', 'GRANT', 'REVOKE', 'EXEC', 'EXECUTE', 'MERGE',
        'CALL', 'INTO', 'ATTACH', 'DETACH', 'PRAGMA',
    ]

    READ_ONLY_TYPES = ('SELECT',)

    def __init__(self, read_only: bool = True):
        self.read_only = read_only

    def validate(self, sql: str) -> Tuple[bool, Optional[str]]:
        """Validate SQL query against the statement policy

        Returns:
            Tuple[bool, Optional[str]]: (is_valid, error_message)
        """
        if not sql or not sql.strip():
            return False, "SQL query is empty"

        if not self.read_only:
            return True, None

        sql_clean = sqlparse.format(sql, strip_comments=True).strip()
        if not sql_clean:
            return False, "SQL query is empty"

        statements = [stmt for stmt in sqlparse.split(sql_clean) if stmt.strip().rstrip(';').strip()]
        if len(statements) > 1:
            return False, "Multiple SQL statements not allowed"

        try:
            parsed = sqlparse.parse(sql_clean)[0]
        except Exception as e:
            return False, f"SQL parsing error: {str(e)}"

        # Keyword tokens only, so string literals such as 'DELETE' pass
        for token in parsed.flatten():
            if token.ttype in T.Keyword and token.normalized in self.DANGEROUS_KEYWORDS:
                logger.warning(f"Rejected generated SQL containing {token.normalized}")
                return False, f"Dangerous keyword detected: {token.normalized}"

        statement_type = parsed.get_type()
        if statement_type == 'UNKNOWN' and sql_clean.startswith('('):
            # Parenthesised compound query, e.g. (SELECT ...) UNION (SELECT ...)
            statement_type = next(
                (token.normalized for token in parsed.flatten()
                 if token.ttype in (T.Keyword.DML, T.Keyword.DDL)),
                statement_type,
            )
        if statement_type not in self.READ_ONLY_TYPES:
            return False, f"Only read-only SELECT queries are allowed (got {statement_type})"

        return True, None

class SQLChatError(Exception):
    """Base class for errors raised by the chat pipeline."""

    status_code = 500


class ConfigurationError(SQLChatError):
    """Connection parameters are missing or invalid. Raised before any network call."""

    status_code = 400


class DatabaseConnectionError(SQLChatError):
    """The database could not be reached or rejected the credentials."""


class SQLGenerationError(SQLChatError):
    """The completion endpoint failed or returned nothing usable."""

    def __init__(self, message: str = "Failed to generate SQL query"):
        super().__init__(message)

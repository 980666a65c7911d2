from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path
from dotenv import load_dotenv

ROOT_DIR = Path(__file__).parent.parent.parent
load_dotenv(ROOT_DIR / '.env')

class Settings(BaseSettings):
    # Database
    DB_BACKEND: str = 'postgresql'
    # Password for requests after /connect; never read from cookies
    DB_PASSWORD: str = ''
    MSSQL_ODBC_DRIVER: str = 'ODBC Driver 18 for SQL Server'

    # LLM
    OPENAI_API_KEY: str = ''
    LLM_BASE_URL: str = ''
    DEFAULT_MODEL: str = 'gpt-4o-mini'
    LLM_TEMPERATURE: float = 0.2
    LLM_MAX_TOKENS: int = 1024

    # Query Settings
    ENFORCE_READ_ONLY: bool = True

    # Cookies
    COOKIE_MAX_AGE: int = 60 * 60 * 24
    COOKIE_SECURE: bool = False

    # CORS
    CORS_ORIGINS: str = '*'

    # Logging
    LOG_LEVEL: str = 'INFO'
    LOG_DIR: str = 'logs'

    model_config = SettingsConfigDict(env_file='.env', case_sensitive=True, extra='ignore')

settings = Settings()

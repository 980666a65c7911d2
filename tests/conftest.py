import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from sqlchat.api.deps import get_sql_agent
from sqlchat.db.models import ConnectionConfig
from sqlchat.llm.sql_agent import SQLAgent
from sqlchat.main import app
from sqlchat.scripts.seed_demo_db import seed_database


class FakeLLMProvider:
    """Stands in for LLMProvider: returns a canned reply or raises it."""

    def __init__(self, reply):
        self.reply = reply
        self.system_message = ""
        self.prompts = []

    async def generate_response(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


# SQLite file seeded with customers / products / orders
@pytest_asyncio.fixture(scope="function")
async def demo_db(tmp_path):
    path = tmp_path / "demo.db"
    await seed_database(str(path))
    return str(path)


@pytest.fixture
def sqlite_config(demo_db):
    return ConnectionConfig(backend="sqlite", database=demo_db)


@pytest.fixture
def connection_cookies(demo_db):
    """Cookie header equivalent to a prior successful /connect."""
    return {"Cookie": f"db_connected=true; db_backend=sqlite; db_database={demo_db}; db_encrypt=false"}


# Client
@pytest_asyncio.fixture(scope="function")
async def client():
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def llm_reply():
    """Make the chat endpoint's agent answer with `reply`."""
    def _use(reply) -> FakeLLMProvider:
        provider = FakeLLMProvider(reply)
        app.dependency_overrides[get_sql_agent] = lambda: SQLAgent(llm_provider=provider)
        return provider
    return _use


@pytest.fixture
def make_provider():
    return FakeLLMProvider

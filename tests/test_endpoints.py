import pytest
from httpx import AsyncClient


def _set_cookie_names(response):
    return {header.split("=", 1)[0] for header in response.headers.get_list("set-cookie")}


@pytest.mark.asyncio
async def test_health_endpoint(client: AsyncClient):
    response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "ok"

@pytest.mark.asyncio
async def test_chat_requires_connection(client: AsyncClient, llm_reply):
    llm_reply('{"sql": "SELECT 1;"}')

    response = await client.post("/api/chat", json={"message": "how many orders?"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "Not connected" in body["error"]

@pytest.mark.asyncio
async def test_chat_returns_rows(client: AsyncClient, llm_reply, connection_cookies):
    llm_reply('{"sql": "SELECT name, country FROM customers ORDER BY id;"}')

    response = await client.post("/api/chat", json={"message": "list customers"}, headers=connection_cookies)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    data = body["data"]
    assert data["sql"] == "SELECT name, country FROM customers ORDER BY id;"
    assert data["data"][0] == {"name": "Ada Lovelace", "country": "UK"}
    assert data["columns"] == ["name", "country"]
    assert data["rows"][1] == ["Grace Hopper", "US"]
    assert data["error"] is None
    assert data["executionTime"] >= 0
    assert data["message"]["role"] == "assistant"
    assert data["message"]["content"] == "Here are the results for your query:"

@pytest.mark.asyncio
async def test_chat_query_error_is_still_success(client: AsyncClient, llm_reply, connection_cookies):
    llm_reply('{"sql": "SELECT nope FROM missing_table;"}')

    response = await client.post("/api/chat", json={"message": "broken"}, headers=connection_cookies)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["error"]
    assert body["data"]["executionTime"] >= 0
    assert body["data"]["message"]["error"] == body["data"]["error"]

@pytest.mark.asyncio
async def test_chat_binary_column_is_json_safe(client: AsyncClient, llm_reply, connection_cookies):
    llm_reply('{"sql": "SELECT X\'01FF\' AS payload;"}')

    response = await client.post("/api/chat", json={"message": "show a blob"}, headers=connection_cookies)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["error"] is None
    assert data["data"] == [{"payload": "0x01ff"}]
    assert data["rows"] == [["0x01ff"]]

@pytest.mark.asyncio
async def test_chat_generation_failure_is_500(client: AsyncClient, llm_reply, connection_cookies):
    llm_reply(RuntimeError("connection reset"))

    response = await client.post("/api/chat", json={"message": "anything"}, headers=connection_cookies)

    assert response.status_code == 500
    assert response.json() == {"success": False, "data": None, "error": "Failed to generate SQL query"}

@pytest.mark.asyncio
async def test_chat_rejects_empty_message(client: AsyncClient, connection_cookies):
    response = await client.post("/api/chat", json={"message": ""}, headers=connection_cookies)

    assert response.status_code == 422
    assert response.json()["success"] is False

@pytest.mark.asyncio
async def test_connect_stores_cookies_without_password(client: AsyncClient, demo_db):
    response = await client.post(
        "/api/database/connect",
        json={"backend": "sqlite", "database": demo_db, "password": "hunter2"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert [t["table_name"] for t in body["data"]["tables"]] == ["customers", "orders", "products"]
    assert {"db_connected", "db_backend", "db_database"} <= _set_cookie_names(response)
    assert "hunter2" not in " ".join(response.headers.get_list("set-cookie"))

@pytest.mark.asyncio
async def test_connect_rejects_missing_fields(client: AsyncClient):
    response = await client.post("/api/database/connect", json={"backend": "postgresql", "user": "app", "database": "shop"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "host" in body["error"]

@pytest.mark.asyncio
async def test_connect_failure_is_500(client: AsyncClient, tmp_path):
    response = await client.post(
        "/api/database/connect",
        json={"backend": "sqlite", "database": str(tmp_path / "no" / "such" / "dir.db")},
    )

    assert response.status_code == 500
    assert response.json()["success"] is False
    assert "db_connected" not in _set_cookie_names(response)

@pytest.mark.asyncio
async def test_connect_to_missing_sqlite_file_creates_nothing(client: AsyncClient, tmp_path):
    path = tmp_path / "typo.db"

    response = await client.post("/api/database/connect", json={"backend": "sqlite", "database": str(path)})

    assert response.status_code == 500
    assert response.json()["success"] is False
    assert "db_connected" not in _set_cookie_names(response)
    assert not path.exists()

@pytest.mark.asyncio
async def test_status_when_not_connected(client: AsyncClient):
    response = await client.get("/api/database/connect")

    assert response.status_code == 200
    assert response.json()["data"]["isConnected"] is False

@pytest.mark.asyncio
async def test_status_masks_password(client: AsyncClient, connection_cookies):
    response = await client.get("/api/database/connect", headers=connection_cookies)

    data = response.json()["data"]
    assert data["isConnected"] is True
    assert data["connection"]["password"] == "******"
    assert len(data["schema"]["tables"]) == 3

@pytest.mark.asyncio
async def test_status_reports_failed_reconnect(client: AsyncClient, tmp_path):
    cookies = {"Cookie": f"db_connected=true; db_backend=sqlite; db_database={tmp_path}/no/such/dir.db"}

    response = await client.get("/api/database/connect", headers=cookies)

    data = response.json()["data"]
    assert data["isConnected"] is False
    assert data["error"] == "Database connection failed, please reconnect"

@pytest.mark.asyncio
async def test_disconnect_clears_every_cookie(client: AsyncClient):
    response = await client.post("/api/database/disconnect")

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert _set_cookie_names(response) == {
        "db_connected", "db_backend", "db_host", "db_port", "db_user", "db_database", "db_encrypt",
    }

@pytest.mark.asyncio
async def test_schema_maps_tables_to_columns(client: AsyncClient, connection_cookies):
    response = await client.get("/api/database/schema", headers=connection_cookies)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["main.orders"] == ["id", "customer_id", "product_id", "quantity", "ordered_at"]
    assert set(data) == {"main.customers", "main.orders", "main.products"}

@pytest.mark.asyncio
async def test_schema_requires_connection(client: AsyncClient):
    response = await client.get("/api/database/schema")

    assert response.status_code == 400
    assert response.json()["success"] is False

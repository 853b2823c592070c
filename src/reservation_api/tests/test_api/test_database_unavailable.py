"""A store that cannot be opened is a server failure, never a bad request."""

from typing import AsyncGenerator

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from reservation_api.core.dependencies import get_db_session
from reservation_api.main import create_app

BODY = {"groupId": 0, "minPeople": 1, "maxPeople": 5, "admissionPrice": 13.99, "startInterval": 4}


@pytest.fixture
async def broken_client(app_settings, tmp_path) -> AsyncGenerator[httpx.AsyncClient, None]:
    # The parent directory does not exist, so SQLite cannot open the file
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'db.sqlite'}")
    sessions = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    async def _broken_session() -> AsyncGenerator[AsyncSession, None]:
        async with sessions() as session:
            yield session

    application = create_app(app_settings)
    application.dependency_overrides[get_db_session] = _broken_session
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=application), base_url="http://testserver") as c:
        yield c
    await engine.dispose()


@pytest.mark.parametrize(
    "method, path, body",
    [
        ("GET", "/groups", None),
        ("GET", "/groups/1", None),
        ("GET", "/groups/by-people/3", None),
        ("POST", "/groups", BODY),
        ("PUT", "/groups/1", {**BODY, "groupId": 1}),
        ("DELETE", "/groups/1", None),
    ],
)
async def test_unreachable_store_is_500(broken_client, method, path, body):
    resp = await broken_client.request(method, path, json=body)

    problem = resp.json()
    assert resp.status_code == 500
    assert problem["title"] == "Internal Server Error"
    assert problem["type"] == "https://tools.ietf.org/html/rfc9110#section-15.6.1"
    assert problem["code"] == "database_error"
    assert "errors" not in problem
    assert "sqlite" not in resp.text.lower()

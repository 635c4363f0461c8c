import os

# Тестовое окружение: in-memory SQLite, noop push и eager Celery.
# Переменные ставим ДО импорта pakhealth: settings и engine создаются при импорте.
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ["PUSH_PROVIDER"] = "noop"

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from pakhealth.core.push import PushDispatcher, get_push_dispatcher  # noqa: E402
from pakhealth.core.push.noop import NoOpPushProvider  # noqa: E402
from pakhealth.db.base import create_db_and_tables, drop_db_and_tables, engine  # noqa: E402
from pakhealth.main import app  # noqa: E402
from pakhealth.workers.tasks import celery_app  # noqa: E402

celery_app.conf.task_always_eager = True
celery_app.conf.task_eager_propagates = True


@pytest_asyncio.fixture
async def setup_db():
    await create_db_and_tables()
    yield
    await drop_db_and_tables()
    # Новое соединение StaticPool = новая пустая in-memory БД
    await engine.dispose()


@pytest.fixture
def push_provider() -> NoOpPushProvider:
    return NoOpPushProvider()


@pytest.fixture
def dispatcher(push_provider: NoOpPushProvider) -> PushDispatcher:
    return PushDispatcher(push_provider, timeout=1.0)


@pytest_asyncio.fixture
async def client(setup_db, dispatcher: PushDispatcher):
    app.dependency_overrides[get_push_dispatcher] = lambda: dispatcher
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def register(client: httpx.AsyncClient):
    """Регистрирует пользователя через API и возвращает (user, auth headers)."""

    async def _register(email="ali@example.com", password="secret1", name="Ali", fcm_token=None):
        resp = await client.post(
            "/api/auth/register",
            json={"email": email, "password": password, "name": name, "fcm_token": fcm_token},
        )
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return body["user"], {"Authorization": f"Bearer {body['token']}"}

    return _register

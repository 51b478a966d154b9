
import pytest
import httpx

from app.core import settings as settings_module
from app.db.base import Base
from app.db.models import User
from app.db.session import get_engine, get_sessionmaker, init_engine
from app.main import app
from app.services.revisions import Actor


@pytest.fixture()
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _use_test_db(tmp_path, monkeypatch):
    db_path = tmp_path / "test.db"
    database_url = f"sqlite+pysqlite:///{db_path}"

    monkeypatch.setattr(settings_module.settings, "database_url", database_url)
    monkeypatch.setattr(settings_module.settings, "db_auto_create", True)

    init_engine(database_url)
    Base.metadata.create_all(bind=get_engine())

    yield


@pytest.fixture()
async def client():
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


@pytest.fixture()
def db():
    SessionLocal = get_sessionmaker()
    with SessionLocal() as session:
        yield session


@pytest.fixture()
def creator(db) -> Actor:
    user = User(email="author@example.com", creator_nick="Inkwell", role="creator")
    db.add(user)
    db.commit()
    return Actor(user_id=user.user_id, role="creator")


@pytest.fixture()
def moderator(db) -> Actor:
    user = User(email="mod@example.com", display_name="Mod", role="admin")
    db.add(user)
    db.commit()
    return Actor(user_id=user.user_id, role="admin")

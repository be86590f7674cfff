import os
import tempfile

# Settings are read at import time; keep tests off the real database and upload folder
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="inventory-uploads-"))

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
import models.users  # noqa: F401
import models.goods  # noqa: F401
import models.stock  # noqa: F401
import models.price  # noqa: F401
import models.log  # noqa: F401
from models.users import User
from routes.goods import get_clock
from services.clock import FixedClock
from services.inventory import InventoryService
from utils.hashing import get_password_hash


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 10, 20, 9, 30))


@pytest.fixture
def inventory(db, clock):
    return InventoryService(db, clock=clock)


@pytest.fixture
def client(session_factory, clock):
    from main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()


def _login(client, username, password):
    response = client.post("/api/users/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def auth_headers(client):
    client.post("/api/users/register", json={"username": "kasir", "password": "rahasia123"})
    return _login(client, "kasir", "rahasia123")


@pytest.fixture
def admin_headers(client, db):
    db.add(User(username="admin", password_hash=get_password_hash("admin123"), role="admin"))
    db.commit()
    return _login(client, "admin", "admin123")

"""
Pytest configuration - shared fixtures
"""
import os
from typing import Dict, Generator, Optional

# Configure the app before godown modules read their settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from godown.database import Base, get_db
from godown.main import app
from godown.models import Godown, Item, User

PASSWORD = "s3cret-pass"


@pytest.fixture
def test_db() -> Generator[Session, None, None]:
    """Create in-memory SQLite database for testing"""
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False)
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def client(test_db) -> Generator[TestClient, None, None]:
    """TestClient whose requests share the test session"""
    def _get_db():
        yield test_db

    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def signup(client: TestClient, email: str, name: str = "Tester") -> Dict[str, str]:
    """Register a user and return bearer headers for it"""
    response = client.post(
        "/users", json={"name": name, "email": email, "password": PASSWORD}
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def auth_headers(client) -> Dict[str, str]:
    return signup(client, "owner@example.com", "Owner")


@pytest.fixture
def other_headers(client) -> Dict[str, str]:
    return signup(client, "intruder@example.com", "Intruder")


def create_godown(
    client: TestClient,
    headers: Dict[str, str],
    name: str,
    parent: Optional[str] = None,
    godown_id: Optional[str] = None,
) -> Dict:
    payload = {"name": name}
    if parent:
        payload["parent_godown"] = parent
    if godown_id:
        payload["_id"] = godown_id
    response = client.post("/godown", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def create_item(client: TestClient, headers: Dict[str, str], godown_id: str, **fields) -> Dict:
    payload = {
        "name": "Widget",
        "quantity": 5,
        "category": "Tools",
        "price": 2.5,
        "brand": "Acme",
        "godown_id": godown_id,
    }
    payload.update(fields)
    response = client.post("/item", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def warehouse(client, auth_headers) -> Dict[str, Dict]:
    """Warehouse A > Shelf 1 > Widget, plus Warehouse A > Rack > Bin"""
    warehouse_a = create_godown(client, auth_headers, "Warehouse A")
    shelf = create_godown(client, auth_headers, "Shelf 1", parent=warehouse_a["id"])
    rack = create_godown(client, auth_headers, "Rack", parent=warehouse_a["id"])
    bin_ = create_godown(client, auth_headers, "Bin", parent=rack["id"])
    widget = create_item(client, auth_headers, shelf["id"])
    return {
        "warehouse": warehouse_a,
        "shelf": shelf,
        "rack": rack,
        "bin": bin_,
        "widget": widget,
    }


@pytest.fixture
def make_user(test_db):
    """Persist a bare user for service-level tests"""
    def _make(email: str = "svc@example.com") -> User:
        user = User(name="Service", email=email, hashed_password="x", is_active=True)
        test_db.add(user)
        test_db.commit()
        test_db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_godown(test_db):
    def _make(owner: User, name: str, parent: Optional[Godown] = None) -> Godown:
        godown = Godown(
            name=name,
            owner_id=owner.id,
            parent_godown_id=parent.id if parent else None,
        )
        test_db.add(godown)
        if parent is not None:
            parent.is_leaf = False
        test_db.commit()
        test_db.refresh(godown)
        return godown
    return _make


@pytest.fixture
def make_item(test_db):
    def _make(godown: Godown, name: str = "Widget", **fields) -> Item:
        values = dict(quantity=5, category="Tools", price=2.5, brand="Acme")
        values.update(fields)
        item = Item(name=name, godown_id=godown.id, **values)
        test_db.add(item)
        test_db.commit()
        test_db.refresh(item)
        return item
    return _make

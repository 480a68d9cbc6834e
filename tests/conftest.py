import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set testing environment before the application is imported
os.environ["TESTING"] = "1"
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///./test.db")

from openmed.main import app
from openmed.core.database import get_db, get_redis, Base
from openmed.core.security import UserRole
from openmed.models.user import User

SQLALCHEMY_DATABASE_URL = os.environ["TEST_DATABASE_URL"]
engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db

class FakeRedis:
    """In-memory stand-in for the few Redis calls the rate limiter makes."""

    def __init__(self):
        self.data = {}

    def setex(self, key, time, value):
        self.data[key] = str(value)
        return True

    def get(self, key):
        return self.data.get(key)

    def incr(self, key):
        self.data[key] = str(int(self.data.get(key, "0")) + 1)
        return int(self.data[key])

@pytest.fixture(scope="function")
def test_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def fake_redis():
    redis_client = FakeRedis()
    app.dependency_overrides[get_redis] = lambda: redis_client
    yield redis_client
    app.dependency_overrides.pop(get_redis, None)

@pytest.fixture
def client(test_db, fake_redis):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client

@pytest.fixture
def db_session(test_db):
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

# Test data
signup_data = {
    "username": "alice",
    "email": "a@b.com",
    "password": "pass1",
    "firstname": "Alice",
    "lastname": "Doe",
    "birthdate": "1990-01-01",
}

def signup(client, **overrides):
    payload = {**signup_data, **overrides}
    return client.post("/v1/users/signup", json=payload)

def signin(client, username="alice", password="pass1"):
    response = client.post(
        "/v1/users/signin",
        json={"username": username, "password": password}
    )
    assert response.status_code == 200, response.text
    return response.json()

def auth_headers(client, username="alice", password="pass1"):
    token = signin(client, username, password)["access_token"]
    return {"Authorization": f"Bearer {token}"}

def set_role(user_id, role: UserRole):
    db = TestingSessionLocal()
    try:
        user = db.query(User).filter(User.id == user_id).first()
        user.role = role
        db.commit()
    finally:
        db.close()

@pytest.fixture
def admin_headers(client):
    response = signup(
        client, username="root", email="root@openmed.org", firstname="Ada", lastname="Admin"
    )
    assert response.status_code == 201, response.text
    set_role(response.json()["id"], UserRole.ADMIN)
    return auth_headers(client, "root", "pass1")

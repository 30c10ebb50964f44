import os

# 设置测试环境 (must happen before the app reads its settings)
os.environ["APP_ENV"] = "test"
os.environ["SWEEPER_ENABLED"] = "false"

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from blogapi.main import app
from blogapi.db.database import Base, create_tables, get_session, SQLITE_TEST_DB
from blogapi.models.user import User

# 测试数据库配置
test_engine = create_engine(SQLITE_TEST_DB, connect_args={"check_same_thread": False})
TestSessionLocal = sessionmaker(bind=test_engine, autocommit=False, autoflush=False)


class FixedClock:
    """Clock that returns a settable instant"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(autouse=True)
def clean_db():
    """清理并重建测试数据库"""
    Base.metadata.drop_all(bind=test_engine)
    create_tables(test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)

@pytest.fixture
def session_factory():
    return TestSessionLocal

@pytest.fixture
def session():
    db = TestSessionLocal()
    yield db
    db.close()

@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 5, 1, 12, 0, 0))

@pytest.fixture
def make_user(session):
    def _make_user(name="alice", email=None):
        user = User(name=name, email=email or f"{name}@example.com", password_hash="not-a-real-hash")
        session.add(user)
        session.commit()
        return user
    return _make_user

@pytest.fixture
def client(clean_db):
    """创建测试客户端"""
    def override_get_session():
        test_session = TestSessionLocal()
        try:
            yield test_session
        finally:
            test_session.close()

    app.dependency_overrides[get_session] = override_get_session

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()

@pytest.fixture
def register(client):
    """Register a user and return a TestClient authenticated as them"""
    def _register(name="testuser", email="test@example.com", password="testpassword123"):
        response = client.post("/api/register", json={
            "name": name,
            "email": email,
            "password": password,
        })
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        auth_client = TestClient(client.app)
        auth_client.headers = {"Authorization": f"Bearer {data['token']}"}
        auth_client.user = data["user"]
        return auth_client
    return _register

@pytest.fixture
def authenticated_client(register):
    return register()

@pytest.fixture
def other_client(register):
    return register(name="otheruser", email="other@example.com", password="otherpassword123")

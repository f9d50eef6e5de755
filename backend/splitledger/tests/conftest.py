"""
Shared fixtures: an in-memory database behind the FastAPI app.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from splitledger.db.base import Base
from splitledger.db.session import get_db, init_db
from splitledger.main import app


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Sign up and log in a user; returns (user_id, auth headers)."""
    def _register(username: str, name: str = None):
        response = client.post(
            "/api/auth/signup",
            json={
                "username": username,
                "email": f"{username}@example.com",
                "name": name or username.capitalize(),
                "password": "testpassword123"
            }
        )
        assert response.status_code == 201, response.text
        user_id = response.json()["id"]

        response = client.post(
            "/api/auth/login",
            json={"username": username, "password": "testpassword123"}
        )
        assert response.status_code == 200, response.text
        token = response.json()["access_token"]
        return user_id, {"Authorization": f"Bearer {token}"}

    return _register

"""
Tests for authentication endpoints.
"""


def test_signup(client):
    """Test user signup."""
    response = client.post(
        "/api/auth/signup",
        json={
            "username": "testuser",
            "email": "test@example.com",
            "name": "Test User",
            "password": "testpassword123"
        }
    )
    assert response.status_code == 201
    body = response.json()
    assert body["username"] == "testuser"
    assert "hashed_password" not in body


def test_signup_duplicate_username(client, register):
    """Usernames are unique."""
    register("alice")
    response = client.post(
        "/api/auth/signup",
        json={
            "username": "alice",
            "email": "other@example.com",
            "name": "Other",
            "password": "testpassword123"
        }
    )
    assert response.status_code == 400


def test_login_and_me(client, register):
    """A login token identifies the user."""
    user_id, headers = register("bob", "Bob")
    response = client.get("/api/users/me", headers=headers)
    assert response.status_code == 200
    assert response.json()["id"] == user_id
    assert response.json()["name"] == "Bob"


def test_login_invalid_credentials(client):
    """Test login with invalid credentials."""
    response = client.post(
        "/api/auth/login",
        json={
            "username": "nonexistent",
            "password": "wrongpassword"
        }
    )
    assert response.status_code == 401


def test_protected_route_requires_token(client):
    response = client.get("/api/groups")
    assert response.status_code == 401

    response = client.get("/api/groups", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401

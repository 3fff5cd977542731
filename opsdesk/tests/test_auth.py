"""
Tests for authentication endpoints
"""
import pytest
from fastapi import status
from sqlalchemy.orm import Session

from opsdesk.core.security import create_access_token, hash_password
from opsdesk.models.user import User

PASSWORD = "secret123"


@pytest.fixture
def inactive_user(db: Session):
    user = User(
        email="gone@example.com",
        name="Gone",
        password_hash=hash_password(PASSWORD),
        active=False,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def test_auth_login_success(client, alice):
    response = client.post(
        "/api/v1/auth/login",
        json={"email": "alice@example.com", "password": PASSWORD}
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"
    assert data["user"] == {"id": alice.id, "name": "Alice", "email": "alice@example.com"}


def test_auth_login_email_is_case_insensitive(client, alice):
    response = client.post(
        "/api/v1/auth/login",
        json={"email": "  ALICE@Example.com", "password": PASSWORD}
    )

    assert response.status_code == status.HTTP_200_OK


def test_auth_login_wrong_password(client, alice):
    response = client.post(
        "/api/v1/auth/login",
        json={"email": "alice@example.com", "password": "wrongpass"}
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["code"] == "INVALID_CREDENTIALS"


def test_auth_login_unknown_email(client, db):
    response = client.post(
        "/api/v1/auth/login",
        json={"email": "nobody@example.com", "password": PASSWORD}
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_auth_login_inactive_user(client, inactive_user):
    response = client.post(
        "/api/v1/auth/login",
        json={"email": "gone@example.com", "password": PASSWORD}
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["code"] == "INACTIVE_USER"


def test_register_returns_token_for_new_user(client, db):
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "Carol@Example.com", "password": "carolpass", "name": "Carol"}
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["user"]["email"] == "carol@example.com"

    me = client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {data['access_token']}"}
    )
    assert me.status_code == status.HTTP_200_OK
    assert me.json()["name"] == "Carol"


def test_register_duplicate_email(client, alice):
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "alice@example.com", "password": "another1", "name": "Other Alice"}
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "EMAIL_TAKEN"


def test_register_short_password_rejected(client, db):
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "dave@example.com", "password": "123", "name": "Dave"}
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_protected_endpoint_requires_token(client, db):
    response = client.get("/api/v1/tasks")

    assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)


def test_invalid_token_rejected(client, db):
    response = client.get(
        "/api/v1/auth/me",
        headers={"Authorization": "Bearer not-a-jwt"}
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_token_for_inactive_user_rejected(client, inactive_user):
    token = create_access_token({"sub": str(inactive_user.id)})

    response = client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {token}"}
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_list_users_returns_active_users(client, alice, bob, inactive_user, alice_headers):
    response = client.get("/api/v1/users", headers=alice_headers)

    assert response.status_code == status.HTTP_200_OK
    names = [u["name"] for u in response.json()["users"]]
    assert names == ["Alice", "Bob"]


@pytest.mark.parametrize("email", ["a@b@c.d", "has space@x.y", "x@.", "x@y.", "no-at-sign.com"])
def test_register_malformed_email_rejected(client, db, email):
    response = client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": "validpass", "name": "Someone"}
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert db.query(User).count() == 0

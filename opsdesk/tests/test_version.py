"""
Tests for version endpoint
"""
from fastapi import status


def test_version_endpoint_returns_service_and_version(client):
    response = client.get("/api/v1/version")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()

    assert data["service"] == "ops-desk-backend"
    assert "version" in data
    assert data["env"] in ["local", "staging", "prod"]


def test_version_endpoint_accessible_without_auth(client):
    response = client.get("/api/v1/version")

    assert response.status_code == status.HTTP_200_OK

# tests/api/v1/test_server_mode.py

from fastapi.testclient import TestClient

URL = "/api/v1/server-mode"


def test_get_current_mode(test_client: TestClient, admin_headers):
    response = test_client.get(URL, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["mode"] == "onsite"


def test_get_current_mode_requires_permission(test_client: TestClient, user_headers):
    response = test_client.get(URL, headers=user_headers)

    assert response.status_code == 403


def test_set_mode_appends_history(test_client: TestClient, superadmin_headers, superadmin):
    response = test_client.post(URL, json={"mode": "both"}, headers=superadmin_headers)

    assert response.status_code == 201
    assert response.json()["mode"] == "both"
    assert response.json()["activated_by"] == superadmin.id
    assert test_client.get(URL, headers=superadmin_headers).json()["mode"] == "both"

    history = test_client.get(f"{URL}/history", headers=superadmin_headers).json()
    assert history["total"] == 2
    assert [row["mode"] for row in history["items"]] == ["both", "onsite"]


def test_set_mode_requires_edit_permission(test_client: TestClient, admin_headers):
    response = test_client.post(URL, json={"mode": "online"}, headers=admin_headers)

    assert response.status_code == 403
    assert test_client.get(URL, headers=admin_headers).json()["mode"] == "onsite"


def test_set_mode_rejects_unknown_mode(test_client: TestClient, superadmin_headers):
    response = test_client.post(URL, json={"mode": "maintenance"}, headers=superadmin_headers)

    assert response.status_code == 422
    assert "mode" in response.json()["error"]["fields"]


def test_history_is_paginated(test_client: TestClient, superadmin_headers):
    for mode in ["online", "both", "deactivate", "onsite"]:
        test_client.post(URL, json={"mode": mode}, headers=superadmin_headers)

    response = test_client.get(
        f"{URL}/history", params={"skip": 1, "limit": 2}, headers=superadmin_headers
    )

    data = response.json()
    assert data["total"] == 5
    assert data["skip"] == 1
    assert data["limit"] == 2
    assert [row["mode"] for row in data["items"]] == ["deactivate", "both"]


def test_mode_requires_authentication(test_client: TestClient):
    response = test_client.get(URL)

    assert response.status_code == 401

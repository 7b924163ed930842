import pytest


def test_defaults_before_anything_saved(client, auth_headers):
    data = client.get("/api/settings", headers=auth_headers).json()["data"]
    assert data == {"daily_goal_minutes": 60, "daily_sentence_goal": 10, "theme": "light", "updated_at": None}


def test_partial_update_keeps_other_values(client, auth_headers):
    resp = client.put("/api/settings", json={"theme": "dark"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["theme"] == "dark"

    client.put("/api/settings", json={"daily_goal_minutes": 30}, headers=auth_headers)
    data = client.get("/api/settings", headers=auth_headers).json()["data"]
    assert data["theme"] == "dark"
    assert data["daily_goal_minutes"] == 30
    assert data["daily_sentence_goal"] == 10
    assert data["updated_at"] is not None


@pytest.mark.parametrize(
    "body",
    [
        {"theme": "blue"},
        {"daily_goal_minutes": 0},
        {"daily_goal_minutes": 481},
        {"daily_sentence_goal": 101},
    ],
)
def test_invalid_settings_are_rejected(client, auth_headers, body):
    resp = client.put("/api/settings", json=body, headers=auth_headers)
    assert resp.status_code == 400
    assert client.get("/api/settings", headers=auth_headers).json()["data"]["updated_at"] is None

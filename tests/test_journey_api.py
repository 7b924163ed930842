from datetime import timedelta

USER = "learner@example.com"


def _complete_today(client, auth_headers, fake_clock, minutes=15):
    client.post("/api/journey/update-activity", json={"minutes_practiced": minutes}, headers=auth_headers)
    return client.post("/api/journey/complete-day", json={}, headers=auth_headers)


def test_requires_backend_token(client):
    resp = client.get("/api/journey/status", headers={"X-User-Email": USER})
    assert resp.status_code == 401
    assert resp.json()["success"] is False


def test_status_starts_fresh_journey(client, auth_headers, fake_clock):
    resp = client.get("/api/journey/status", headers=auth_headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["current_day"] == 1
    assert data["completed_days"] == []
    assert data["journey_start_date"] == fake_clock.today().isoformat()
    assert data["next_milestone"] == 7
    assert data["today_activity"]["minutes_practiced"] == 0


def test_update_activity_accumulates(client, auth_headers):
    client.post("/api/journey/update-activity", json={"minutes_practiced": 5}, headers=auth_headers)
    resp = client.post(
        "/api/journey/update-activity",
        json={"minutes_practiced": 4, "vocabulary_added": 2},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["minutes_practiced"] == 9
    assert data["words_learned"] == 2


def test_negative_activity_is_rejected(client, auth_headers):
    resp = client.post("/api/journey/update-activity", json={"minutes_practiced": -5}, headers=auth_headers)
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["code"] == "validation_error"


def test_complete_day_after_practice(client, auth_headers, fake_clock):
    resp = _complete_today(client, auth_headers, fake_clock)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["accepted"] is True
    assert data["day_completed"] is True
    assert data["next_day"] == 2
    assert data["milestone_reached"] is False

    status = client.get("/api/journey/status", headers=auth_headers).json()["data"]
    assert status["current_day"] == 2
    assert status["completed_days"] == [1]
    assert status["today_completed"] is True


def test_duplicate_completion_is_noop(client, auth_headers, fake_clock):
    _complete_today(client, auth_headers, fake_clock)
    resp = client.post("/api/journey/complete-day", json={}, headers=auth_headers)
    data = resp.json()["data"]
    assert resp.status_code == 200
    assert data["accepted"] is False
    assert data["reason"] == "already_completed"

    status = client.get("/api/journey/status", headers=auth_headers).json()["data"]
    assert status["completed_days"] == [1]


def test_complete_day_without_activity_not_accepted(client, auth_headers):
    resp = client.post("/api/journey/complete-day", json={}, headers=auth_headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["accepted"] is False
    assert data["reason"] == "precondition_not_met"
    assert data["criteria"]["minutes_practiced"]["value"] == 0

    status = client.get("/api/journey/status", headers=auth_headers).json()["data"]
    assert status["current_day"] == 1


def test_client_signals_count_toward_criteria(client, auth_headers):
    resp = client.post("/api/journey/complete-day", json={"journal_entries": 1}, headers=auth_headers)
    assert resp.json()["data"]["accepted"] is True


def test_week_of_practice_reaches_first_milestone(client, auth_headers, fake_clock):
    start = fake_clock.today()
    result = None
    for offset in range(7):
        fake_clock.current_date = start + timedelta(days=offset)
        result = _complete_today(client, auth_headers, fake_clock).json()["data"]
    assert result["journey_day"] == 7
    assert result["milestone_reached"] is True
    assert [ach["key"] for ach in result["achievements_unlocked"]] == ["day_7_milestone"]

    board = client.get("/api/journey/achievements", headers=auth_headers).json()["data"]
    assert "day_7_milestone" in {ach["key"] for ach in board["unlocked"]}

    landmarks = client.get("/api/journey/landmarks", headers=auth_headers).json()["data"]
    assert landmarks[0]["key"] == "grammar_fort"
    assert landmarks[0]["unlocked"] is True
    assert landmarks[1]["unlocked"] is False


def test_reset_starts_new_journey(client, auth_headers, fake_clock):
    _complete_today(client, auth_headers, fake_clock)
    fake_clock.current_date += timedelta(days=1)
    resp = client.post("/api/journey/reset", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["journeys_completed"] == 0

    status = client.get("/api/journey/status", headers=auth_headers).json()["data"]
    assert status["current_day"] == 1
    assert status["completed_days"] == []
    assert status["journey_start_date"] == fake_clock.today().isoformat()


def test_users_are_isolated(client, auth_headers, fake_clock):
    _complete_today(client, auth_headers, fake_clock)
    other = {**auth_headers, "X-User-Email": "someone@example.com"}
    status = client.get("/api/journey/status", headers=other).json()["data"]
    assert status["completed_days"] == []


def test_complete_day_rejects_future_date(client, auth_headers, fake_clock):
    tomorrow = (fake_clock.today() + timedelta(days=1)).isoformat()
    resp = client.post(
        "/api/journey/complete-day",
        json={"date": tomorrow, "minutes_practiced": 30},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "validation_error"

    status = client.get("/api/journey/status", headers=auth_headers).json()["data"]
    assert status["completed_days"] == []

    resp = _complete_today(client, auth_headers, fake_clock)
    assert resp.json()["data"]["accepted"] is True


def test_update_activity_rejects_future_date(client, auth_headers, fake_clock):
    future = (fake_clock.today() + timedelta(days=3)).isoformat()
    resp = client.post(
        "/api/journey/update-activity",
        json={"minutes_practiced": 20, "date": future},
        headers=auth_headers,
    )
    assert resp.status_code == 400

    client.post("/api/journey/update-activity", json={"minutes_practiced": 20}, headers=auth_headers)
    streak = client.get("/api/progress/streak", headers=auth_headers).json()["data"]
    assert streak["current"] == 1


def test_past_date_still_accepted(client, auth_headers, fake_clock):
    yesterday = (fake_clock.today() - timedelta(days=1)).isoformat()
    resp = client.post(
        "/api/journey/update-activity",
        json={"minutes_practiced": 20, "date": yesterday},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["date"] == yesterday


def test_reported_specials_match_achievement_board(client, auth_headers):
    resp = client.post("/api/journey/complete-day", json={"minutes_practiced": 60}, headers=auth_headers)
    data = resp.json()["data"]
    assert data["accepted"] is True
    reported = {ach["key"] for ach in data["achievements_unlocked"]}
    assert "dedicated_learner" not in reported

    board = client.get("/api/journey/achievements", headers=auth_headers).json()["data"]
    assert reported <= {ach["key"] for ach in board["unlocked"]}


def test_stored_practice_reports_special_once(client, auth_headers):
    client.post("/api/journey/update-activity", json={"minutes_practiced": 60}, headers=auth_headers)
    data = client.post("/api/journey/complete-day", json={}, headers=auth_headers).json()["data"]
    assert [ach["key"] for ach in data["achievements_unlocked"]] == ["dedicated_learner"]

    board = client.get("/api/journey/achievements", headers=auth_headers).json()["data"]
    assert "dedicated_learner" in {ach["key"] for ach in board["unlocked"]}

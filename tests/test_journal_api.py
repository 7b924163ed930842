from journal_backend.services import translation

ENTRY = {
    "english_text": "Today I walked to the market.",
    "german_text": "Heute bin ich zum Markt gelaufen.",
    "session_duration": 12,
}


def _today_activity(client, auth_headers):
    return client.get("/api/journey/status", headers=auth_headers).json()["data"]["today_activity"]


def test_create_entry_credits_ledger(client, auth_headers):
    resp = client.post("/api/journal/entries", json=ENTRY, headers=auth_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["data"]["word_count"] == 6
    assert "user_email" not in body["data"]
    assert body["activity"]["entries_written"] == 1
    assert body["activity"]["minutes_practiced"] == 12

    activity = _today_activity(client, auth_headers)
    assert activity["entries_written"] == 1


def test_blank_text_rejected(client, auth_headers):
    resp = client.post("/api/journal/entries", json={**ENTRY, "german_text": "   "}, headers=auth_headers)
    assert resp.status_code == 400
    assert _today_activity(client, auth_headers)["entries_written"] == 0


def test_entry_crud(client, auth_headers):
    entry_id = client.post("/api/journal/entries", json=ENTRY, headers=auth_headers).json()["data"]["id"]

    listed = client.get("/api/journal/entries?search=markt", headers=auth_headers).json()["data"]
    assert [item["id"] for item in listed] == [entry_id]

    updated = client.put(
        f"/api/journal/entries/{entry_id}",
        json={"german_text": "Heute ging ich zum Markt."},
        headers=auth_headers,
    ).json()["data"]
    assert updated["german_text"] == "Heute ging ich zum Markt."

    fetched = client.get(f"/api/journal/entries/{entry_id}", headers=auth_headers).json()["data"]
    assert fetched["english_text"] == ENTRY["english_text"]

    assert client.delete(f"/api/journal/entries/{entry_id}", headers=auth_headers).status_code == 200
    resp = client.delete(f"/api/journal/entries/{entry_id}", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["success"] is False


def test_vocabulary_credits_only_new_words(client, auth_headers):
    first = client.post("/api/vocabulary", json={"word": "Haus", "translation": "house"}, headers=auth_headers).json()
    assert first["created"] is True
    assert first["activity"]["words_learned"] == 1

    again = client.post("/api/vocabulary", json={"word": "haus"}, headers=auth_headers).json()
    assert again["created"] is False
    assert again["activity"] is None
    assert again["data"]["times_seen"] == 2
    assert again["data"]["translation"] == "house"

    assert _today_activity(client, auth_headers)["words_learned"] == 1
    words = client.get("/api/vocabulary", headers=auth_headers).json()["data"]
    assert len(words) == 1


def test_vocabulary_auto_translate(client, auth_headers, monkeypatch):
    async def fake_translate(text, source_lang="en", target_lang="de"):
        assert (source_lang, target_lang) == ("de", "en")
        return {"translated": "tree", "provider": "gemini"}

    monkeypatch.setattr(translation, "translate", fake_translate)
    resp = client.post("/api/vocabulary", json={"word": "Baum", "auto_translate": True}, headers=auth_headers)
    assert resp.json()["data"]["translation"] == "tree"


def test_delete_unknown_word(client, auth_headers):
    resp = client.delete("/api/vocabulary/does-not-exist", headers=auth_headers)
    assert resp.status_code == 404


def test_export_and_clear(client, auth_headers):
    client.post("/api/journal/entries", json=ENTRY, headers=auth_headers)
    exported = client.get("/api/data/export", headers=auth_headers).json()["data"]
    assert len(exported["journal_entries"]) == 1
    assert exported["activity"][0]["entries_written"] == 1

    assert client.delete("/api/data/clear", headers=auth_headers).status_code == 400
    assert client.delete("/api/data/clear?confirm=true", headers=auth_headers).status_code == 200
    exported = client.get("/api/data/export", headers=auth_headers).json()["data"]
    assert exported["journal_entries"] == []
    assert exported["activity"] == []


def _import_entries(client, auth_headers, entries):
    rows = [
        {"english_text": english, "german_text": german, "created_at": created_at}
        for english, german, created_at in entries
    ]
    resp = client.post("/api/data/import", json={"data": {"journal_entries": rows}}, headers=auth_headers)
    assert resp.json()["data"]["imported"]["journal_entries"] == len(rows)


def test_journal_search_by_text_and_dates(client, auth_headers):
    _import_entries(
        client,
        auth_headers,
        [
            ("I bought bread.", "Ich habe Brot gekauft.", "2024-03-01T09:00:00+00:00"),
            ("Bread again.", "Wieder Brot.", "2024-03-05T18:30:00+00:00"),
            ("I read a book.", "Ich habe ein Buch gelesen.", "2024-03-05T20:00:00+00:00"),
        ],
    )
    found = client.get("/api/journal/search", params={"q": "brot"}, headers=auth_headers).json()
    assert found["count"] == 2

    in_range = client.get(
        "/api/journal/search",
        params={"start_date": "2024-03-02", "end_date": "2024-03-05"},
        headers=auth_headers,
    ).json()["data"]
    assert [entry["english_text"] for entry in in_range] == ["I read a book.", "Bread again."]

    both = client.get(
        "/api/journal/search",
        params={"q": "bread", "end_date": "2024-03-04"},
        headers=auth_headers,
    ).json()["data"]
    assert [entry["english_text"] for entry in both] == ["I bought bread."]


def test_journal_search_needs_a_filter(client, auth_headers):
    resp = client.get("/api/journal/search", headers=auth_headers)
    assert resp.status_code == 400

    backwards = client.get(
        "/api/journal/search",
        params={"start_date": "2024-03-05", "end_date": "2024-03-01"},
        headers=auth_headers,
    )
    assert backwards.status_code == 400


def test_vocabulary_stats(client, auth_headers):
    words = [
        {"word": "Brot", "first_seen": "2024-03-08T10:00:00+00:00"},
        {"word": "Milch", "first_seen": "2024-02-20T10:00:00+00:00"},
        {"word": "Käse", "first_seen": "2024-01-01T10:00:00+00:00"},
    ]
    client.post("/api/data/import", json={"data": {"vocabulary": words}}, headers=auth_headers)
    stats = client.get("/api/vocabulary/stats", headers=auth_headers).json()["data"]
    assert stats["total"] == 3
    assert stats["this_week"] == 1
    assert stats["this_month"] == 2
    assert stats["average_per_week"] == 0.3


def test_empty_vocabulary_stats(client, auth_headers):
    stats = client.get("/api/vocabulary/stats", headers=auth_headers).json()["data"]
    assert stats == {"total": 0, "this_week": 0, "this_month": 0, "average_per_week": 0.0}


def test_word_meaning_translates_once(client, auth_headers, monkeypatch):
    calls = []

    async def fake_translate(text, source_lang="en", target_lang="de"):
        calls.append(text)
        return {"translated": "window", "provider": "mymemory"}

    monkeypatch.setattr(translation, "translate", fake_translate)
    word = client.post("/api/vocabulary", json={"word": "Fenster"}, headers=auth_headers).json()["data"]

    first = client.get(f"/api/vocabulary/{word['id']}/meaning", headers=auth_headers).json()["data"]
    assert first["translation"] == "window"
    assert first["cached"] is False
    second = client.get(f"/api/vocabulary/{word['id']}/meaning", headers=auth_headers).json()["data"]
    assert second["cached"] is True
    assert calls == ["Fenster"]


def test_review_word(client, auth_headers):
    word = client.post("/api/vocabulary", json={"word": "Tür", "translation": "door"}, headers=auth_headers).json()["data"]
    assert word["last_reviewed"] is None
    resp = client.put(f"/api/vocabulary/{word['id']}/review", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["last_reviewed"] is not None

    assert client.put("/api/vocabulary/missing/review", headers=auth_headers).status_code == 404
    assert client.get("/api/vocabulary/missing/meaning", headers=auth_headers).status_code == 404

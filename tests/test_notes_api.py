def _add(client, content):
    r = client.post("/notes", json={"content": content})
    assert r.status_code == 201, r.text
    return r.json()


def test_add_and_search_by_query(client):
    groceries = _add(client, "buy groceries for the week")
    _add(client, "call mom about the trip")

    r = client.post("/notes/search", json={"query": "groceries"})
    assert r.status_code == 200, r.text
    assert [n["id"] for n in r.json()] == [groceries["id"]]
    assert "embedding" not in r.json()[0]


def test_search_without_query_returns_everything_in_id_order(client):
    ids = [_add(client, text)["id"] for text in ("one note", "two note", "three note")]
    r = client.post("/notes/search", json={})
    assert [n["id"] for n in r.json()] == ids


def test_search_by_ids_ignores_distance(client):
    a = _add(client, "buy groceries")
    b = _add(client, "renew passport")

    r = client.post("/notes/search", json={"ids": [b["id"]]})
    assert [n["id"] for n in r.json()] == [b["id"]]

    # ids are unioned with the query results
    r = client.post("/notes/search", json={"query": "groceries", "ids": [b["id"]]})
    assert sorted(n["id"] for n in r.json()) == sorted([a["id"], b["id"]])

    r = client.post("/notes/search", json={"ids": [9999]})
    assert r.json() == []


def test_order_by_creation_time_ignores_query(client):
    ids = [_add(client, text)["id"] for text in ("first entry", "second entry", "unrelated")]

    r = client.post("/notes/search", json={"query": "nothing matches this", "order_by": "Newest"})
    assert [n["id"] for n in r.json()] == list(reversed(ids))

    r = client.post("/notes/search", json={"order_by": "Oldest", "limit": 2})
    assert [n["id"] for n in r.json()] == ids[:2]


def test_order_by_creation_time_skips_reranking(client):
    ids = [_add(client, text)["id"] for text in ("pick up dry cleaning", "schedule house cleaning service")]

    body = {"query": "house cleaning", "use_reranking_filter": True, "similarity_threshold": 0.0}
    r = client.post("/notes/search", json={**body, "order_by": "Oldest"})
    assert [n["id"] for n in r.json()] == ids

    r = client.post("/notes/search", json={**body, "order_by": "Newest"})
    assert [n["id"] for n in r.json()] == list(reversed(ids))


def test_equal_distance_ties_break_by_id(client):
    ids = [_add(client, "buy groceries")["id"] for _ in range(3)]

    r = client.post("/notes/search", json={"query": "groceries"})
    assert [n["id"] for n in r.json()] == ids


def test_equal_rerank_scores_break_by_id(client, upstream):
    ids = [_add(client, "buy groceries")["id"] for _ in range(3)]
    upstream.rerank_reversed = True

    r = client.post("/notes/search", json={"query": "groceries", "use_reranking_filter": True})
    assert [n["id"] for n in r.json()] == ids


def test_reranking_filter_keeps_specific_match(client):
    _add(client, "pick up dry cleaning")
    cleaning = _add(client, "schedule house cleaning service")

    r = client.post("/notes/search", json={"query": "house cleaning", "use_reranking_filter": True})
    assert [n["id"] for n in r.json()] == [cleaning["id"]]


def test_update_re_embeds_best_match(client):
    note = _add(client, "buy groceries")

    r = client.put("/notes", json={"query": "groceries", "note_updates": {"content": "renew passport"}})
    assert r.status_code == 200, r.text
    assert r.json()["id"] == note["id"]
    assert r.json()["content"] == "renew passport"

    assert client.post("/notes/search", json={"query": "groceries"}).json() == []
    found = client.post("/notes/search", json={"query": "passport"}).json()
    assert [n["id"] for n in found] == [note["id"]]


def test_update_by_id(client):
    _add(client, "first")
    second = _add(client, "second")
    r = client.put("/notes", json={"id": second["id"], "note_updates": {"content": "changed"}})
    assert r.status_code == 200, r.text
    assert r.json() == {**second, "content": "changed"}


def test_update_without_match_is_not_found(client):
    r = client.put("/notes", json={"query": "anything", "note_updates": {"content": "x"}})
    assert r.status_code == 404
    assert r.json() == {"success": False, "error": "note not found"}


def test_delete_returns_deleted_rows_and_is_idempotent(client):
    note = _add(client, "buy groceries")
    keep = _add(client, "renew passport")

    r = client.post("/notes/delete", json={"ids": [note["id"]]})
    assert [n["id"] for n in r.json()] == [note["id"]]
    assert client.post("/notes/delete", json={"ids": [note["id"]]}).json() == []
    assert [n["id"] for n in client.post("/notes/search", json={}).json()] == [keep["id"]]


def test_invalid_body_is_a_400(client):
    r = client.post("/notes", json={"content": ""})
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert "content" in body["error"]

    r = client.post("/notes/search", json={"limit": 0})
    assert r.status_code == 400

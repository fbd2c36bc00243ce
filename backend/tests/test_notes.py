def test_create_note_defaults_and_url(client):
    r = client.post("/api/notes", json={"content": "# Hi"})
    assert r.status_code == 201
    note = r.json()
    assert note["title"] == "Untitled"
    assert note["metadata"] == {}
    assert note["url"] == f"http://testserver/note/{note['id']}"
    assert note["createdAt"] == note["updatedAt"]


def test_create_note_requires_content(client):
    assert client.post("/api/notes", json={"title": "empty"}).status_code == 400
    assert client.post("/api/notes", json={"title": "empty", "content": ""}).status_code == 400


def test_metadata_round_trips_verbatim(client):
    meta = {"author": "agent-7", "type": "daily", "pages": 3, "draft": False, "score": 0.5}
    note_id = client.post("/api/notes", json={"content": "x", "metadata": meta}).json()["id"]

    assert client.get(f"/api/notes/{note_id}").json()["metadata"] == meta


def test_ids_are_sequential_integers(client):
    ids = [client.post("/api/notes", json={"content": f"n{i}"}).json()["id"] for i in range(3)]
    assert ids == [1, 2, 3]


def test_get_missing_note(client):
    assert client.get("/api/notes/999").status_code == 404
    assert client.get("/api/notes/not-a-number").status_code == 422


def test_update_merges_metadata(client):
    note_id = client.post(
        "/api/notes", json={"title": "t", "content": "c", "metadata": {"a": 1, "b": "x"}}
    ).json()["id"]

    r = client.put(f"/api/notes/{note_id}", json={"content": "c2", "metadata": {"b": "y", "c": True}})

    assert r.status_code == 200
    body = r.json()
    assert body["title"] == "t"
    assert body["content"] == "c2"
    assert body["metadata"] == {"a": 1, "b": "y", "c": True}
    assert body["updatedAt"] >= body["createdAt"]


def test_update_missing_note(client):
    assert client.put("/api/notes/12", json={"content": "x"}).status_code == 404


def test_list_is_newest_update_first(client):
    first = client.post("/api/notes", json={"content": "first"}).json()["id"]
    second = client.post("/api/notes", json={"content": "second"}).json()["id"]
    client.put(f"/api/notes/{first}", json={"title": "bumped"})

    ids = [n["id"] for n in client.get("/api/notes").json()]
    assert ids == [first, second]


def test_delete_note(client):
    note_id = client.post("/api/notes", json={"content": "bye"}).json()["id"]

    assert client.delete(f"/api/notes/{note_id}").status_code == 204
    assert client.get(f"/api/notes/{note_id}").status_code == 404
    assert client.delete(f"/api/notes/{note_id}").status_code == 404

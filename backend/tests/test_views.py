def test_index_lists_recent_notes(client):
    client.post("/api/notes", json={"title": "Daily report", "content": "x", "metadata": {"author": "agent-1"}})

    r = client.get("/")

    assert r.status_code == 200
    assert "1 note" in r.text
    assert "Daily report" in r.text
    assert "agent-1" in r.text


def test_index_empty(client):
    r = client.get("/")
    assert r.status_code == 200
    assert "No notes yet" in r.text


def test_note_page_renders_markdown(client):
    content = "# Heading\n\n- one\n- two\n\n```\ncode here\n```\n"
    note_id = client.post("/api/notes", json={"title": "Rendered", "content": content}).json()["id"]

    r = client.get(f"/note/{note_id}")

    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    assert "<h1>Heading</h1>" in r.text
    assert "<li>one</li>" in r.text
    assert "<code>code here" in r.text


def test_note_page_escapes_title_and_metadata(client):
    note_id = client.post(
        "/api/notes",
        json={"title": "<script>alert(1)</script>", "content": "x", "metadata": {"k": "<b>v</b>"}},
    ).json()["id"]

    r = client.get(f"/note/{note_id}")

    assert "<script>alert(1)</script>" not in r.text
    assert "&lt;script&gt;" in r.text
    assert "<b>v</b>" not in r.text


def test_note_page_missing(client):
    assert client.get("/note/404").status_code == 404


def test_share_pages_for_each_outcome(client):
    assert client.get("/s/unknown123").status_code == 404

    note_id = client.post("/api/notes", json={"title": "Shared", "content": "**bold**"}).json()["id"]
    public = client.post("/api/share", json={"noteId": note_id}).json()["shareCode"]
    locked = client.post("/api/share", json={"noteId": note_id, "password": "pw"}).json()["shareCode"]

    r = client.get(f"/s/{public}")
    assert r.status_code == 200
    assert "<strong>bold</strong>" in r.text
    assert "Views: 1" in r.text

    r = client.get(f"/s/{locked}")
    assert r.status_code == 200
    assert 'type="password"' in r.text
    assert f"/api/share/{locked}/unlock" in r.text
    assert "<strong>bold</strong>" not in r.text

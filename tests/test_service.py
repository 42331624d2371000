import pytest

from patricia_service import create_app


@pytest.fixture
def client():
    app = create_app({"SEED_WORDS": ["car", "cat", "dog"], "MAX_KEY_LENGTH": 16})
    app.config["TESTING"] = True
    return app.test_client()


def test_index_lists_endpoints(client):
    resp = client.get("/")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["service"] == "Patricia Trie Service"
    assert "POST /add" in body["endpoints"]


def test_health_and_stats(client):
    health = client.get("/health").get_json()
    assert health["status"] == "healthy"
    assert health["trie_size"] == 3

    stats = client.get("/stats").get_json()
    assert stats["total_keys"] == 3
    assert stats["seed_words"] == 3


def test_contains(client):
    assert client.get("/contains?q=car").get_json() == {"key": "car", "found": True}
    assert client.get("/contains?q=ca").get_json()["found"] is False
    assert client.get("/contains").status_code == 400


def test_add_then_duplicate(client):
    resp = client.post("/add", json={"key": "cart"})
    assert resp.status_code == 201
    assert resp.get_json() == {"key": "cart", "added": True, "trie_size": 4}

    resp = client.post("/add", json={"key": "cart"})
    assert resp.status_code == 200
    assert resp.get_json()["added"] is False
    assert resp.get_json()["trie_size"] == 4


@pytest.mark.parametrize("payload", [
    {},
    {"key": ""},
    {"key": "   "},
    {"key": 7},
    {"key": "x" * 17},
    ["car"],
])
def test_add_rejects_bad_input(client, payload):
    resp = client.post("/add", json=payload)
    assert resp.status_code == 400
    assert "error" in resp.get_json()
    assert client.get("/health").get_json()["trie_size"] == 3


def test_remove(client):
    resp = client.delete("/remove?q=cat")
    assert resp.status_code == 200
    assert resp.get_json() == {"key": "cat", "removed": True, "trie_size": 2}

    resp = client.delete("/remove?q=cat")
    assert resp.status_code == 404
    assert resp.get_json()["removed"] is False
    assert client.delete("/remove").status_code == 400


def test_prefix(client):
    client.post("/add", json={"key": "cart"})
    body = client.get("/prefix?q=ca").get_json()
    assert body == {"prefix": "ca", "count": 3, "matches": ["car", "cart", "cat"]}

    body = client.get("/prefix?q=ca&limit=2").get_json()
    assert body["matches"] == ["car", "cart"]

    body = client.get("/prefix?q=ca&limit=oops").get_json()
    assert body["count"] == 3
    assert client.get("/prefix").status_code == 400


def test_tree_is_plain_text(client):
    client.delete("/remove?q=cat")
    resp = client.get("/tree")
    assert resp.status_code == 200
    assert resp.mimetype == "text/plain"
    assert resp.get_data(as_text=True) == (
        "└── [branch]\n"
        "    ├── (car) [terminal] car\n"
        "    └── (dog) [terminal] dog\n"
    )


def test_apps_do_not_share_state():
    first = create_app({"SEED_WORDS": []}).test_client()
    second = create_app({"SEED_WORDS": []}).test_client()
    first.post("/add", json={"key": "only-here"})
    assert first.get("/contains?q=only-here").get_json()["found"] is True
    assert second.get("/contains?q=only-here").get_json()["found"] is False


def test_seed_words_from_environment(monkeypatch):
    monkeypatch.setenv("PATRICIA_SEED_WORDS", "alpha, beta,,gamma")
    client = create_app().test_client()
    assert client.get("/stats").get_json()["seed_words"] == 3
    assert client.get("/contains?q=beta").get_json()["found"] is True

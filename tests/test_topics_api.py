from fastapi.testclient import TestClient

from quiz_arena.main import create_app

from conftest import make_settings


def test_list_topics(client):
    res = client.get("/api/topics")
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["count"] == 4
    javascript = next(t for t in body["topics"] if t["slug"] == "javascript")
    assert javascript["name"] == "JavaScript"
    assert javascript["question_count"] == 10
    assert javascript["difficulty"] == "intermediate"


def test_topic_details(client):
    res = client.get("/api/topics/data-structures")
    assert res.status_code == 200
    assert res.json()["topic"]["name"] == "Data Structures"


def test_topic_details_missing(client):
    res = client.get("/api/topics/nope")
    assert res.status_code == 404
    assert res.json()["message"] == "Topic not found"


def test_health_and_root(client):
    health = client.get("/health").json()
    assert health["success"] is True
    assert health["timestamp"]
    assert client.get("/").json()["endpoints"]["quiz"] == "/api/quiz"


def test_unknown_route(client):
    res = client.get("/api/does-not-exist")
    assert res.status_code == 404
    assert res.json()["message"] == "Route not found"


def test_app_starts_and_seeds_with_foreign_keys_on():
    app = create_app(make_settings())
    with TestClient(app) as client:
        body = client.get("/api/topics").json()
        assert body["count"] == 4
        assert all(t["question_count"] == 10 for t in body["topics"])

        with app.state.engine.connect() as conn:
            assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1

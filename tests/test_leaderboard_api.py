from conftest import signup, topic_questions


def submit(client, db, token, slug, correct):
    answers = []
    for i, q in enumerate(topic_questions(db, slug)):
        selected = q.correct_answer if i < correct else (q.correct_answer + 1) % len(q.options)
        answers.append({"question_id": q.id, "selected_answer": selected, "time_taken": 2})
    res = client.post(
        "/api/quiz/submit",
        json={"topic_slug": slug, "answers": answers, "total_time": 60 - correct},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert res.status_code == 200, res.text
    return res.json()["result"]


def test_leaderboards(client, db):
    alice = signup(client, "alice", "alice@example.com")
    bob = signup(client, "bob", "bob@example.com")
    signup(client, "carol", "carol@example.com")

    submit(client, db, alice["token"], "javascript", 6)
    submit(client, db, alice["token"], "aptitude", 5)
    submit(client, db, bob["token"], "javascript", 9)

    board = client.get("/api/leaderboard/global").json()["leaderboard"]
    # users without attempts are not ranked
    assert [(e["rank"], e["username"], e["total_score"]) for e in board] == [
        (1, "alice", 11),
        (2, "bob", 9),
    ]
    assert board[0]["total_quizzes"] == 2
    assert board[0]["avg_percentage"] == 55.0

    today = client.get("/api/leaderboard/today").json()["leaderboard"]
    assert [e["username"] for e in today] == ["alice", "bob"]
    assert today[0]["score_today"] == 11

    topic_id = client.get("/api/topics/javascript").json()["topic"]["id"]
    by_topic = client.get(f"/api/leaderboard/topic/{topic_id}").json()["leaderboard"]
    assert [(e["username"], e["best_score"]) for e in by_topic] == [("bob", 9), ("alice", 6)]
    assert by_topic[0]["best_percentage"] == 90.0

    rank = client.get(f"/api/leaderboard/user/{bob['user']['id']}").json()["rank"]
    assert rank["rank"] == 2
    assert rank["total_score"] == 9


def test_user_rank_without_attempts(client, user):
    res = client.get(f"/api/leaderboard/user/{user['user']['id']}")
    assert res.status_code == 404


def test_global_limit(client, db):
    for name in ("ann", "ben", "cat"):
        token = signup(client, name, f"{name}@example.com")["token"]
        submit(client, db, token, "aptitude", 3)
    board = client.get("/api/leaderboard/global", params={"limit": 2}).json()["leaderboard"]
    assert len(board) == 2

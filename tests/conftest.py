import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from quiz_arena.config import Settings
from quiz_arena.database import create_db_engine, init_db
from quiz_arena.main import create_app
from quiz_arena.models import Question, Topic
from quiz_arena.seed import seed_database


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": "sqlite://",
        "jwt_secret": "test-secret",
        "environment": "test",
        "seed_on_startup": True,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def engine(settings):
    engine = create_db_engine(settings)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        seed_database(session)
        yield session


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def db(app, client):
    """Session on the same database the client talks to."""
    with Session(app.state.engine) as session:
        yield session


def signup(client, username="alice", email="alice@example.com", password="Secret123"):
    res = client.post(
        "/api/auth/signup",
        json={"username": username, "email": email, "password": password},
    )
    assert res.status_code == 201, res.text
    return res.json()


@pytest.fixture
def user(client):
    return signup(client)


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {user['token']}"}


def topic_questions(session, slug) -> list[Question]:
    topic = session.exec(select(Topic).where(Topic.slug == slug)).one()
    return list(session.exec(select(Question).where(Question.topic_id == topic.id)).all())

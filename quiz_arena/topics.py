from typing import Optional
from sqlalchemy import func
from sqlmodel import Session, select

from quiz_arena.models import Question, Topic, TopicDetail


def _question_counts():
    return (
        select(Topic, func.count(Question.id).label("question_count"))
        .join(Question, Question.topic_id == Topic.id, isouter=True)
        .where(Topic.is_active == True)  # noqa: E712
        .group_by(Topic.id)
    )


def _to_detail(topic: Topic, question_count: int) -> TopicDetail:
    return TopicDetail(**topic.model_dump(), question_count=question_count or 0)


def get_all_topics(session: Session) -> list[TopicDetail]:
    """Active topics with their question counts, oldest first."""
    rows = session.exec(_question_counts().order_by(Topic.created_at.asc())).all()
    return [_to_detail(topic, count) for topic, count in rows]


def get_topic_by_slug(session: Session, slug: str) -> Optional[Topic]:
    """Active topic for the slug; inactive topics are treated as missing."""
    return session.exec(
        select(Topic).where(Topic.slug == slug, Topic.is_active == True)  # noqa: E712
    ).first()


def get_topic_detail(session: Session, slug: str) -> Optional[TopicDetail]:
    row = session.exec(_question_counts().where(Topic.slug == slug)).first()
    if row is None:
        return None
    topic, count = row
    return _to_detail(topic, count)

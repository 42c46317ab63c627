from typing import Optional
from sqlalchemy import func
from sqlmodel import Session, col, select

from quiz_arena.models import Question, QuestionForQuiz


def fetch_quiz_questions(
    session: Session,
    topic_id: str,
    limit: int = 10,
    difficulty: Optional[str] = None,
) -> list[QuestionForQuiz]:
    """
    Draw up to `limit` random questions of a topic for play.

    Only the client-safe columns are selected, so correct answers and
    explanations never leave the store on this path. Every call draws a
    fresh order. An empty list means the topic has nothing to play.
    """
    stmt = select(Question.id, Question.question, Question.options, Question.difficulty).where(
        Question.topic_id == topic_id
    )
    if difficulty:
        stmt = stmt.where(Question.difficulty == difficulty)
    stmt = stmt.order_by(func.random()).limit(limit)

    return [
        QuestionForQuiz(id=q_id, question=text, options=options, difficulty=level)
        for q_id, text, options, level in session.exec(stmt).all()
    ]


def fetch_questions_by_ids(
    session: Session,
    ids: list[str],
    topic_id: Optional[str] = None,
) -> list[Question]:
    """
    Authoritative lookup of full question records, correct answers included.

    Unknown ids are left out of the result rather than raising. With
    `topic_id`, questions of other topics are left out as well.
    """
    unique_ids = list(dict.fromkeys(ids))
    if not unique_ids:
        return []

    stmt = select(Question).where(col(Question.id).in_(unique_ids))
    if topic_id is not None:
        stmt = stmt.where(Question.topic_id == topic_id)
    return list(session.exec(stmt).all())

from sqlalchemy import distinct, func
from sqlmodel import Session, select

from quiz_arena.models import HistoryEntry, QuizAttempt, Topic, UserAnswer, UserStats


def record_attempt(
    session: Session,
    user_id: str,
    topic_id: str,
    score: int,
    total: int,
    percentage: float,
    time_taken: int,
) -> QuizAttempt:
    """Stage a new attempt. The caller owns the transaction and commits."""
    attempt = QuizAttempt(
        user_id=user_id,
        topic_id=topic_id,
        score=score,
        total_questions=total,
        percentage=percentage,
        time_taken=time_taken,
    )
    session.add(attempt)
    session.flush()
    return attempt


def record_answer(
    session: Session,
    attempt_id: str,
    question_id: str,
    selected: int,
    is_correct: bool,
    time_taken: int,
) -> UserAnswer:
    answer = UserAnswer(
        attempt_id=attempt_id,
        question_id=question_id,
        selected_answer=selected,
        is_correct=is_correct,
        time_taken=time_taken,
    )
    session.add(answer)
    session.flush()
    return answer


def get_user_history(session: Session, user_id: str, limit: int = 10) -> list[HistoryEntry]:
    """Past attempts of a user joined with their topic, newest first."""
    rows = session.exec(
        select(QuizAttempt, Topic)
        .join(Topic, Topic.id == QuizAttempt.topic_id)
        .where(QuizAttempt.user_id == user_id)
        .order_by(QuizAttempt.completed_at.desc())
        .limit(limit)
    ).all()

    return [
        HistoryEntry(
            **attempt.model_dump(),
            topic_name=topic.name,
            topic_slug=topic.slug,
            topic_icon=topic.icon,
        )
        for attempt, topic in rows
    ]


def get_user_stats(session: Session, user_id: str) -> UserStats:
    total_quizzes, avg_score, total_points, topics_attempted = session.exec(
        select(
            func.count(QuizAttempt.id),
            func.avg(QuizAttempt.percentage),
            func.sum(QuizAttempt.score),
            func.count(distinct(QuizAttempt.topic_id)),
        ).where(QuizAttempt.user_id == user_id)
    ).one()

    # aggregates come back NULL when the user has no attempts
    return UserStats(
        total_quizzes=total_quizzes or 0,
        avg_score=round(float(avg_score or 0), 2),
        total_points=int(total_points or 0),
        topics_attempted=topics_attempted or 0,
    )

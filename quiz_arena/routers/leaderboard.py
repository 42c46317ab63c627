from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlmodel import Session, select
from quiz_arena.database import get_session
from quiz_arena.errors import NotFound
from quiz_arena.models import QuizAttempt, User, LeaderboardResponse, UserRankResponse

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])


def _ranked(rows, fields: tuple[str, ...]) -> list[dict]:
    """Attach 1-based ranks to already ordered aggregate rows."""
    ranked = []
    for rank, row in enumerate(rows, start=1):
        entry = {"rank": rank}
        for name, value in zip(fields, row):
            entry[name] = round(value, 2) if isinstance(value, float) else value
        ranked.append(entry)
    return ranked


def _totals_by_user():
    total_score = func.coalesce(func.sum(QuizAttempt.score), 0)
    return (
        select(
            User.id,
            User.username,
            func.count(QuizAttempt.id),
            total_score,
            func.avg(QuizAttempt.percentage),
        )
        .join(QuizAttempt, QuizAttempt.user_id == User.id)
        .group_by(User.id, User.username)
        .order_by(total_score.desc(), User.username.asc())
    )


@router.get("/global", response_model=LeaderboardResponse)
def global_leaderboard(
    limit: int = Query(10, ge=1, le=100),
    session: Session = Depends(get_session),
):
    """Users ranked by total score over all attempts."""
    rows = session.exec(_totals_by_user().limit(limit)).all()
    return LeaderboardResponse(
        leaderboard=_ranked(rows, ("id", "username", "total_quizzes", "total_score", "avg_percentage"))
    )


@router.get("/today", response_model=LeaderboardResponse)
def today_leaderboard(
    limit: int = Query(10, ge=1, le=100),
    session: Session = Depends(get_session),
):
    """Same ranking restricted to attempts completed since UTC midnight."""
    midnight = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    rows = session.exec(
        _totals_by_user().where(QuizAttempt.completed_at >= midnight).limit(limit)
    ).all()
    return LeaderboardResponse(
        leaderboard=_ranked(rows, ("id", "username", "quizzes_today", "score_today", "avg_percentage"))
    )


@router.get("/topic/{topic_id}", response_model=LeaderboardResponse)
def topic_leaderboard(
    topic_id: str,
    limit: int = Query(10, ge=1, le=100),
    session: Session = Depends(get_session),
):
    """Best score per user on one topic, ties broken by the fastest attempt."""
    best_score = func.max(QuizAttempt.score)
    fastest = func.min(QuizAttempt.time_taken)
    rows = session.exec(
        select(
            User.id,
            User.username,
            func.count(QuizAttempt.id),
            best_score,
            func.max(QuizAttempt.percentage),
        )
        .join(QuizAttempt, QuizAttempt.user_id == User.id)
        .where(QuizAttempt.topic_id == topic_id)
        .group_by(User.id, User.username)
        .order_by(best_score.desc(), fastest.asc(), User.username.asc())
        .limit(limit)
    ).all()
    return LeaderboardResponse(
        leaderboard=_ranked(rows, ("id", "username", "attempts", "best_score", "best_percentage"))
    )


@router.get("/user/{user_id}", response_model=UserRankResponse)
def user_rank(user_id: str, session: Session = Depends(get_session)):
    """Position of one user in the global ranking."""
    rows = session.exec(_totals_by_user()).all()
    for entry in _ranked(rows, ("id", "username", "total_quizzes", "total_score", "avg_percentage")):
        if entry["id"] == user_id:
            return UserRankResponse(rank=entry)
    raise NotFound("User not found or has no quiz attempts")

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session
from quiz_arena.attempts import get_user_history, get_user_stats
from quiz_arena.config import Settings, app_settings
from quiz_arena.database import get_session
from quiz_arena.models import (
    QuizStartResponse, QuizSubmission, QuizSubmitResponse,
    QuizHistoryResponse, UserStatsResponse,
)
from quiz_arena.quiz_session import start_quiz, submit_quiz
from quiz_arena.security import TokenPayload, get_current_user

router = APIRouter(prefix="/api/quiz", tags=["quiz"])


@router.get("/start/{topic_slug}", response_model=QuizStartResponse)
def start(
    topic_slug: str,
    limit: Optional[int] = Query(None, ge=1, le=100),
    difficulty: Optional[str] = Query(None),
    session: Session = Depends(get_session),
    settings: Settings = Depends(app_settings),
):
    """Random questions for a topic, without their correct answers."""
    return start_quiz(
        session,
        topic_slug,
        limit=limit or settings.default_question_limit,
        difficulty=difficulty,
        time_per_question=settings.time_per_question,
    )


@router.post("/submit", response_model=QuizSubmitResponse)
def submit(
    data: QuizSubmission,
    current: TokenPayload = Depends(get_current_user),
    session: Session = Depends(get_session),
    settings: Settings = Depends(app_settings),
):
    """Score a quiz and save it as a new attempt."""
    result = submit_quiz(
        session,
        current.userId,
        data,
        policy=settings.unmatched_answer_policy,
    )
    return QuizSubmitResponse(result=result)


@router.get("/history", response_model=QuizHistoryResponse)
def history(
    limit: int = Query(10, ge=1, le=100),
    current: TokenPayload = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    entries = get_user_history(session, current.userId, limit)
    return QuizHistoryResponse(count=len(entries), history=entries)


@router.get("/stats", response_model=UserStatsResponse)
def stats(
    current: TokenPayload = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return UserStatsResponse(stats=get_user_stats(session, current.userId))

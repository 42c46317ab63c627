import uuid
from datetime import datetime, timezone
from typing import Optional
from pydantic import EmailStr
from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    id: str = Field(default_factory=_uuid, primary_key=True)
    username: str = Field(index=True, unique=True, max_length=50)
    email: str = Field(index=True, unique=True, max_length=255)
    password_hash: str
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class Topic(SQLModel, table=True):
    id: str = Field(default_factory=_uuid, primary_key=True)
    name: str = Field(max_length=100)
    slug: str = Field(index=True, unique=True, max_length=100)
    description: Optional[str] = None
    icon: Optional[str] = Field(default=None, max_length=50)
    # beginner | intermediate | advanced
    difficulty: str = Field(default="intermediate", max_length=20)
    is_active: bool = True
    created_at: datetime = Field(default_factory=_now)


class Question(SQLModel, table=True):
    id: str = Field(default_factory=_uuid, primary_key=True)
    topic_id: str = Field(foreign_key="topic.id", index=True, ondelete="CASCADE")
    question: str
    options: list[str] = Field(sa_column=Column(JSON, nullable=False))
    correct_answer: int
    # easy | medium | hard
    difficulty: str = Field(default="medium", index=True, max_length=20)
    explanation: Optional[str] = None
    created_at: datetime = Field(default_factory=_now)


class QuizAttempt(SQLModel, table=True):
    id: str = Field(default_factory=_uuid, primary_key=True)
    user_id: str = Field(foreign_key="user.id", index=True, ondelete="CASCADE")
    topic_id: str = Field(foreign_key="topic.id", index=True, ondelete="CASCADE")
    score: int
    total_questions: int
    percentage: float
    time_taken: int = 0
    completed_at: datetime = Field(default_factory=_now, index=True)


class UserAnswer(SQLModel, table=True):
    id: str = Field(default_factory=_uuid, primary_key=True)
    attempt_id: str = Field(foreign_key="quizattempt.id", index=True, ondelete="CASCADE")
    question_id: str = Field(foreign_key="question.id", index=True, ondelete="CASCADE")
    selected_answer: int
    is_correct: bool
    time_taken: int = 0
    created_at: datetime = Field(default_factory=_now)


# --- Pydantic request/response schemas ---

class UserCreate(SQLModel):
    username: str
    email: EmailStr
    password: str


class LoginRequest(SQLModel):
    email: str
    password: str


class UserResponse(SQLModel):
    id: str
    username: str
    email: str
    created_at: datetime


class AuthResponse(SQLModel):
    success: bool = True
    message: str
    user: UserResponse
    token: str


class MeResponse(SQLModel):
    success: bool = True
    user: UserResponse


class MessageResponse(SQLModel):
    success: bool = True
    message: str


class TopicSummary(SQLModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    icon: Optional[str] = None


class TopicDetail(TopicSummary):
    difficulty: str
    is_active: bool
    created_at: datetime
    question_count: int = 0


class TopicListResponse(SQLModel):
    success: bool = True
    count: int
    topics: list[TopicDetail]


class TopicDetailResponse(SQLModel):
    success: bool = True
    topic: TopicDetail


class QuestionForQuiz(SQLModel):
    """A question as sent to the player: no correct answer, no explanation."""
    id: str
    question: str
    options: list[str]
    difficulty: str


class QuizStartResponse(SQLModel):
    success: bool = True
    topic: TopicSummary
    questions: list[QuestionForQuiz]
    total_questions: int
    time_per_question: int


class SubmittedAnswer(SQLModel):
    question_id: str = Field(min_length=1)
    selected_answer: int
    time_taken: int = Field(default=0, ge=0)


class QuizSubmission(SQLModel):
    topic_slug: str = Field(min_length=1)
    answers: list[SubmittedAnswer]
    total_time: int = Field(default=0, ge=0)


class AnswerDetail(SQLModel):
    question_id: str
    question: str
    options: list[str]
    selected_answer: int
    correct_answer: int
    is_correct: bool
    explanation: Optional[str] = None
    difficulty: str
    time_taken: int = 0


class TopicAnalysis(SQLModel):
    topic: str
    correct: int
    total: int
    percentage: float


class QuizResult(SQLModel):
    attempt_id: str
    score: int
    total_questions: int
    percentage: float
    grade: str
    feedback: str
    time_taken: int
    answers: list[AnswerDetail]
    topic_analysis: TopicAnalysis


class QuizSubmitResponse(SQLModel):
    success: bool = True
    message: str = "Quiz submitted successfully"
    result: QuizResult


class HistoryEntry(SQLModel):
    id: str
    user_id: str
    topic_id: str
    score: int
    total_questions: int
    percentage: float
    time_taken: int
    completed_at: datetime
    topic_name: str
    topic_slug: str
    topic_icon: Optional[str] = None


class QuizHistoryResponse(SQLModel):
    success: bool = True
    count: int
    history: list[HistoryEntry]


class UserStats(SQLModel):
    total_quizzes: int = 0
    avg_score: float = 0
    total_points: int = 0
    topics_attempted: int = 0


class UserStatsResponse(SQLModel):
    success: bool = True
    stats: UserStats


class LeaderboardResponse(SQLModel):
    success: bool = True
    leaderboard: list[dict]


class UserRankResponse(SQLModel):
    success: bool = True
    rank: dict

from pydantic_settings import BaseSettings
from functools import lru_cache
from fastapi import Request

from quiz_arena.scoring import UnmatchedPolicy


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/quiz.db"
    jwt_secret: str = "your-secret-key-change-this"
    jwt_expires_days: int = 7
    jwt_issuer: str = "smart-quiz-arena"
    environment: str = "production"
    log_level: str = "INFO"
    frontend_url: str = "http://localhost:3000"
    app_host: str = "0.0.0.0"
    app_port: int = 5000
    default_question_limit: int = 10
    time_per_question: int = 30
    unmatched_answer_policy: UnmatchedPolicy = UnmatchedPolicy.SKIP
    seed_on_startup: bool = True

    @property
    def is_dev(self) -> bool:
        return self.environment.lower() in {"dev", "development", "local"}

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def app_settings(request: Request) -> Settings:
    """Settings the running app was created with."""
    return request.app.state.settings

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session

from quiz_arena.config import Settings, get_settings
from quiz_arena.database import create_db_engine, init_db
from quiz_arena.errors import register_error_handlers
from quiz_arena.routers import auth, topics, quiz, leaderboard
from quiz_arena.seed import seed_database

logger = logging.getLogger("quiz_arena")


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    for name in ("sqlalchemy.engine", "multipart"):
        logging.getLogger(name).setLevel(logging.WARNING)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = app.state.engine
        init_db(engine)
        if settings.seed_on_startup:
            with Session(engine) as session:
                seed_database(session)
        logger.info("Quiz Arena ready (environment=%s)", settings.environment)
        yield
        logger.info("Shutting down, disposing database engine")
        engine.dispose()

    app = FastAPI(
        title="Smart Quiz Arena",
        description="Quiz platform API: topics, quizzes, scoring and leaderboards",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = create_db_engine(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s -> %d (%.1f ms)",
            request.method, request.url.path, response.status_code, duration_ms,
        )
        return response

    register_error_handlers(app, expose_errors=settings.is_dev)

    # Routers
    app.include_router(auth.router)
    app.include_router(topics.router)
    app.include_router(quiz.router)
    app.include_router(leaderboard.router)

    @app.get("/")
    async def root():
        return {
            "message": "Welcome to Smart Quiz Arena API",
            "version": app.version,
            "endpoints": {
                "auth": "/api/auth",
                "topics": "/api/topics",
                "quiz": "/api/quiz",
                "leaderboard": "/api/leaderboard",
                "health": "/health",
            },
        }

    @app.get("/health")
    async def health():
        return {
            "success": True,
            "message": "Server is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


def run():
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.app_host, port=settings.app_port)


if __name__ == "__main__":
    run()

import logging
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select
from quiz_arena.config import Settings, app_settings
from quiz_arena.database import get_session
from quiz_arena.errors import Conflict, InvalidSubmission, NotFound, Unauthorized
from quiz_arena.models import (
    User, UserCreate, UserResponse, LoginRequest,
    AuthResponse, MeResponse, MessageResponse,
)
from quiz_arena.security import (
    TokenPayload, create_token, get_current_user,
    hash_password, validate_password, validate_username, verify_password,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])


def _sanitize(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        created_at=user.created_at,
    )


def _duplicate_message(session: Session, email: str, username: str) -> Optional[str]:
    if session.exec(select(User).where(User.email == email)).first():
        return "Email already registered"
    if session.exec(select(User).where(User.username == username)).first():
        return "Username already taken"
    return None


def _issue_token(user: User, settings: Settings) -> str:
    return create_token(
        TokenPayload(userId=user.id, email=user.email, username=user.username),
        settings,
    )


@router.post("/signup", response_model=AuthResponse, status_code=201)
def signup(
    data: UserCreate,
    session: Session = Depends(get_session),
    settings: Settings = Depends(app_settings),
):
    """Register a new account and log it in."""
    username = data.username.strip()
    email = data.email.lower()

    errors = validate_username(username)
    if errors:
        raise InvalidSubmission("Invalid username", errors=errors)

    errors = validate_password(data.password)
    if errors:
        raise InvalidSubmission("Password does not meet requirements", errors=errors)

    conflict = _duplicate_message(session, email, username)
    if conflict:
        raise Conflict(conflict)

    user = User(username=username, email=email, password_hash=hash_password(data.password))
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        # lost a race with a concurrent signup for the same email or username
        session.rollback()
        raise Conflict(_duplicate_message(session, email, username) or "Account already exists")
    session.refresh(user)
    logger.info("New user registered: %s", user.username)

    return AuthResponse(
        message="Account created successfully",
        user=_sanitize(user),
        token=_issue_token(user, settings),
    )


@router.post("/login", response_model=AuthResponse)
def login(
    data: LoginRequest,
    session: Session = Depends(get_session),
    settings: Settings = Depends(app_settings),
):
    if not data.email or not data.password:
        raise InvalidSubmission("Email and password are required")

    user = session.exec(select(User).where(User.email == data.email.strip().lower())).first()
    if not user or not verify_password(data.password, user.password_hash):
        raise Unauthorized("Invalid email or password")

    return AuthResponse(
        message="Login successful",
        user=_sanitize(user),
        token=_issue_token(user, settings),
    )


@router.get("/me", response_model=MeResponse)
def me(
    current: TokenPayload = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Fresh copy of the logged-in user's profile."""
    user = session.get(User, current.userId)
    if not user:
        raise NotFound("User not found")
    return MeResponse(user=_sanitize(user))


@router.post("/logout", response_model=MessageResponse)
def logout(current: TokenPayload = Depends(get_current_user)):
    # Tokens are stateless; the client just drops its copy.
    logger.info("User logged out: %s", current.username)
    return MessageResponse(message="Logged out successfully")

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from quiz_arena.config import Settings, app_settings
from quiz_arena.errors import Unauthorized

BCRYPT_ROUNDS = 10
MAX_BCRYPT_BYTES = 72

USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]+$")
UPPER_RE = re.compile(r"[A-Z]")
LOWER_RE = re.compile(r"[a-z]")
DIGIT_RE = re.compile(r"[0-9]")

bearer_scheme = HTTPBearer(auto_error=False)


class TokenPayload(BaseModel):
    """Identity carried inside an access token."""
    userId: str
    email: str
    username: str


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > MAX_BCRYPT_BYTES:
        return False
    return bcrypt.checkpw(password_bytes, password_hash.encode("utf-8"))


def create_token(payload: TokenPayload, settings: Settings) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        **payload.model_dump(),
        "iss": settings.jwt_issuer,
        "iat": now,
        "exp": now + timedelta(days=settings.jwt_expires_days),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm="HS256")


def decode_token(token: str, settings: Settings) -> TokenPayload:
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=["HS256"],
            issuer=settings.jwt_issuer,
        )
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expired. Please login again.")
    except jwt.InvalidTokenError:
        raise Unauthorized("Invalid token. Please login again.")

    try:
        return TokenPayload(**claims)
    except ValueError:
        raise Unauthorized("Invalid token. Please login again.")


def validate_username(username: str) -> list[str]:
    errors = []
    if len(username) < 3:
        errors.append("Username must be at least 3 characters long")
    if len(username) > 50:
        errors.append("Username must be less than 50 characters")
    if not USERNAME_RE.match(username):
        errors.append("Username can only contain letters, numbers, and underscores")
    return errors


def validate_password(password: str) -> list[str]:
    errors = []
    if len(password) < 8:
        errors.append("Password must be at least 8 characters long")
    if len(password.encode("utf-8")) > MAX_BCRYPT_BYTES:
        errors.append(f"Password must be at most {MAX_BCRYPT_BYTES} bytes long")

    has_upper = UPPER_RE.search(password)
    has_lower = LOWER_RE.search(password)
    has_digit = DIGIT_RE.search(password)
    if not (has_upper and has_lower and has_digit):
        errors.append("Password must contain uppercase, lowercase, and number")
    return errors


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(app_settings),
) -> TokenPayload:
    """Resolve the caller from the Bearer token, or fail with 401."""
    if credentials is None:
        raise Unauthorized("No authorization token provided. Use: Bearer <token>")
    return decode_token(credentials.credentials, settings)

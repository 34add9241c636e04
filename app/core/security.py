from datetime import UTC, datetime, timedelta
from uuid import uuid4

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _encode(claims: dict, lifetime: timedelta) -> str:
    to_encode = {**claims, "exp": datetime.now(UTC) + lifetime}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def create_access_token(subject: str | int) -> str:
    return _encode(
        {"sub": str(subject), "type": "access"},
        timedelta(minutes=settings.access_token_expire_minutes),
    )


def create_refresh_token(subject: str | int) -> str:
    return _encode(
        {"sub": str(subject), "type": "refresh", "jti": str(uuid4())},
        timedelta(days=settings.refresh_token_expire_days),
    )


def _decode(token: str, expected_type: str) -> dict | None:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
    if payload.get("type") != expected_type:
        return None
    return payload


def decode_access_token(token: str) -> str | None:
    payload = _decode(token, "access")
    if not payload or not payload.get("sub"):
        return None
    return str(payload["sub"])


def decode_refresh_token(token: str) -> tuple[str | None, str | None]:
    """Returns (user_id_str, jti) or (None, None)."""
    payload = _decode(token, "refresh")
    if not payload:
        return None, None
    return payload.get("sub"), payload.get("jti")

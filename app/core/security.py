from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from app.config import Settings, settings


@dataclass(frozen=True)
class Principal:
    subject: str
    role: str = "user"


def create_access_token(subject: str, role: str = "user", config: Settings = settings) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=config.access_token_expire_minutes)
    payload = {"sub": subject, "role": role, "exp": expire}
    return jwt.encode(payload, config.secret_key, algorithm=config.algorithm)


def decode_access_token(token: str, config: Settings = settings) -> Principal | None:
    """Returns the token's principal or None if invalid."""
    try:
        payload = jwt.decode(token, config.secret_key, algorithms=[config.algorithm])
    except JWTError:
        return None
    subject = payload.get("sub")
    if not subject:
        return None
    return Principal(subject=subject, role=payload.get("role", "user"))


def authenticate_token(token: str, config: Settings = settings) -> Principal | None:
    # The static server token is a development convenience only
    if config.environment == "development" and config.server_token and token == config.server_token:
        return Principal(subject="system", role="admin")
    return decode_access_token(token, config)

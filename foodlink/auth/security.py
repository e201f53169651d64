import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from foodlink.core.config import get_settings
from foodlink.core.errors import InvalidRole, ProfileNotFound, Unauthenticated
from foodlink.db.session import get_db
from foodlink.models.profile import Profile, Role

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Caller:
    user_id: str
    role: Role
    profile: Profile


def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    to_encode = {"sub": subject, "exp": datetime.now(timezone.utc) + expires_delta}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> str:
    """Return the caller identity carried by ``token`` or raise ``Unauthenticated``."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        logger.warning("Rejected bearer token: %s", exc)
        raise Unauthenticated()
    subject = payload.get("sub")
    if not subject:
        logger.warning("Rejected bearer token without subject")
        raise Unauthenticated()
    return str(subject)


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()
    return decode_access_token(credentials.credentials)


def resolve_role(value: Optional[str]) -> Role:
    try:
        return Role(value)
    except ValueError:
        raise InvalidRole()


async def get_current_caller(
    identity: str = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> Caller:
    profile = db.query(Profile).filter(Profile.id == identity).first()
    if profile is None:
        raise ProfileNotFound()
    return Caller(user_id=identity, role=resolve_role(profile.role), profile=profile)

"""FastAPI dependency utilities."""

from hashlib import sha256

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from crm_notifications.domain.entities import User
from crm_notifications.infrastructure.database import get_db
from crm_notifications.infrastructure.repositories import UserRepository
from crm_notifications.infrastructure.security import (
    decode_access_token,
    is_valid_cron_authorization,
)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")

_INVALID_CREDENTIALS = "Identifiants invalides"


def password_signature(user: User) -> str:
    """Fingerprint embedded in tokens so they die with a password change."""

    return sha256(f"{user.password}:{int(user.is_active)}".encode()).hexdigest()


def _unauthorized(detail: str = _INVALID_CREDENTIALS) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def resolve_current_user(token: str, db: Session) -> User:
    """Resolve the authenticated user for the provided token."""

    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise _unauthorized() from exc

    email = payload.get("sub")
    signature = payload.get("pwd_sig")
    if not isinstance(email, str) or not isinstance(signature, str):
        raise _unauthorized()

    user = UserRepository(db).get_by_email(email)
    if user is None:
        raise _unauthorized("Utilisateur introuvable")
    if signature != password_signature(user):
        raise _unauthorized()
    return user


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    return resolve_current_user(token, db)


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    """Ensure the authenticated user is active."""

    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Utilisateur inactif")
    return current_user


def require_cron_secret(authorization: str | None = Header(default=None)) -> None:
    """Reject trigger calls whose bearer does not match ``CRON_SECRET_TOKEN``."""

    if not is_valid_cron_authorization(authorization):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

"""Security helpers for hashing, token generation and the cron secret."""

from datetime import datetime, timedelta, timezone
import hmac

from jose import JWTError, jwt
from passlib.context import CryptContext

from crm_notifications.config import get_settings

_ALGORITHM = "HS256"

pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__rounds=310_000,
)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    return jwt.encode({**data, "exp": expire}, settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, get_settings().secret_key, algorithms=[_ALGORITHM])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc


def is_valid_cron_authorization(authorization: str | None) -> bool:
    """Check an ``Authorization`` header against ``CRON_SECRET_TOKEN``.

    When no secret is configured every caller is accepted.
    """

    expected = get_settings().cron_secret_token
    if not expected:
        return True
    if not authorization:
        return False
    return hmac.compare_digest(authorization, f"Bearer {expected}")

"""Use case for creating users."""

from sqlalchemy.orm import Session

from crm_notifications.application.errors import ValidationError
from crm_notifications.domain.entities import User
from crm_notifications.infrastructure.repositories import UserRepository
from crm_notifications.infrastructure.security import get_password_hash


def create_user(session: Session, *, name: str, email: str, password: str) -> User:
    """Create an active user with a unique email address."""

    if not name or not name.strip():
        raise ValidationError("Le nom est obligatoire")
    if not email or "@" not in email:
        raise ValidationError("Adresse email invalide")
    if not password:
        raise ValidationError("Le mot de passe est obligatoire")

    repository = UserRepository(session)
    if repository.get_by_email(email):
        raise ValidationError("Cette adresse email est déjà utilisée")

    user = User(
        id=None,
        name=name.strip(),
        email=email,
        password=get_password_hash(password),
        is_active=True,
    )
    return repository.create(user)

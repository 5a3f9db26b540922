"""Domain entity representing a user."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    """Core attributes describing a CRM user."""

    id: int | None
    name: str
    email: str
    password: str
    is_active: bool
    created_at: datetime | None = None
    last_login: datetime | None = None

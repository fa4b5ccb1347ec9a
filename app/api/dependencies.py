from typing import Optional

from app.core.config import settings
from app.core.errors import InvalidCredentials
from app.core.security import secret_matches


def require_purchase_password(password: Optional[str]) -> None:
    if not secret_matches(password, settings.purchase_password):
        raise InvalidCredentials("Invalid verification password")


def require_admin(admin_password: Optional[str]) -> None:
    if not secret_matches(admin_password, settings.admin_password):
        raise InvalidCredentials("Invalid admin password")

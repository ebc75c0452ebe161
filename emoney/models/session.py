"""Session identity model."""

from dataclasses import dataclass

ADMIN_ID = "admin"
ADMIN_PASSWORD = "admin"


@dataclass(frozen=True)
class AdminPrincipal:
    """The synthetic admin identity. It is not an account and has no balance."""

    id: str = ADMIN_ID


ADMIN = AdminPrincipal()

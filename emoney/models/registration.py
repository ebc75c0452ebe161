"""Registration data model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Registration:
    """A pending request to create an account, awaiting an admin decision."""

    id: str
    password: str

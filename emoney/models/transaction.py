"""Transaction data model."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

TRANSFER = "Transfer"
PAYMENT = "Payment"


def now() -> datetime:
    """Current local time, timezone-aware and truncated to seconds."""
    return datetime.now().astimezone().replace(microsecond=0)


@dataclass(frozen=True)
class Transaction:
    """Represents one balance-affecting event on a single account."""

    id: int
    account_id: str
    type: str
    amount: Decimal
    date: datetime
    details: str

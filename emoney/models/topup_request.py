"""Top-up request data model."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class TopUpRequest:
    """A request to credit an account's balance, awaiting admin approval."""

    id: int
    account_id: str
    amount: Decimal
    date: datetime
    approved: bool = False

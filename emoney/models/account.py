"""Account data model."""

from dataclasses import dataclass, field
from decimal import Decimal

from .transaction import Transaction


@dataclass
class Account:
    """Represents an approved holder of balance and transaction history."""

    id: str
    password: str
    balance: Decimal = Decimal("0")
    approved: bool = False
    transactions: list[Transaction] = field(default_factory=list)
    next_transaction_id: int = field(default=1, compare=False, repr=False)

    def __post_init__(self):
        # Rebuild the counter for histories loaded from disk.
        if self.transactions:
            last_id = max(txn.id for txn in self.transactions)
            self.next_transaction_id = max(self.next_transaction_id, last_id + 1)

    def record(self, type: str, amount: Decimal, date, details: str) -> Transaction:
        """
        Append a new transaction to this account's history.

        Args:
            type: The transaction type ('Transfer' or 'Payment')
            amount: The transaction amount
            date: Timestamp of the balance change
            details: Free text shown in the history

        Returns:
            The appended Transaction
        """
        transaction = Transaction(
            id=self.next_transaction_id,
            account_id=self.id,
            type=type,
            amount=amount,
            date=date,
            details=details,
        )
        self.next_transaction_id += 1
        self.transactions.append(transaction)
        return transaction


@dataclass(frozen=True)
class AccountSummary:
    """Admin view of an account: id, balance and approval flag."""

    id: str
    balance: Decimal
    approved: bool

    @classmethod
    def of(cls, account: Account) -> "AccountSummary":
        return cls(id=account.id, balance=account.balance, approved=account.approved)

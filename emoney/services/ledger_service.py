"""Ledger store: accounts, pending requests and money movements."""

import copy
import logging
import threading
from contextlib import contextmanager
from decimal import Decimal, Inexact, Overflow, localcontext

from emoney.models.account import Account, AccountSummary
from emoney.models.exceptions import (
    AccountNotFoundError,
    InsufficientBalanceError,
    InvalidAmountError,
    PersistenceError,
    RecipientNotFoundError,
)
from emoney.models.registration import Registration
from emoney.models.topup_request import TopUpRequest
from emoney.models.transaction import PAYMENT, TRANSFER, Transaction, now
from emoney.repositories.account_repo import AccountRepository

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
MAX_AMOUNT = Decimal(1_000_000_000_000)  # 1T


def validate_amount(amount: Decimal, action: str) -> None:
    """
    Check that an amount is a finite, strictly positive number of whole cents.

    Args:
        amount: The amount to check
        action: Name of the operation, used in the error message

    Raises:
        InvalidAmountError: If the amount is not finite, not positive,
            above MAX_AMOUNT or finer than one cent
    """
    if not isinstance(amount, Decimal) or not amount.is_finite():
        raise InvalidAmountError(f"{action.capitalize()} amount must be a finite decimal number.")
    if amount < 0:
        raise InvalidAmountError(
            f"Cannot {action} negative amount: {amount}. Amount must be positive."
        )
    if amount == 0:
        raise InvalidAmountError(f"{action.capitalize()} amount must be greater than zero.")
    if amount > MAX_AMOUNT:
        raise InvalidAmountError(
            f"Amount {amount} exceeds maximum allowed {action} of {MAX_AMOUNT}"
        )
    if amount != amount.quantize(CENT):
        raise InvalidAmountError(f"Amount {amount} has more than two decimal places.")


def add_money(balance: Decimal, delta: Decimal) -> Decimal:
    """
    Exact balance arithmetic.

    Raises:
        InvalidAmountError: If the result cannot be represented without rounding
    """
    with localcontext() as ctx:
        ctx.traps[Inexact] = True
        ctx.traps[Overflow] = True
        try:
            return balance + delta
        except (Inexact, Overflow) as err:
            raise InvalidAmountError(f"Balance {balance} cannot take {delta} exactly") from err


class LedgerStore:
    """
    Owner of all ledger state.

    Every public operation runs under one exclusive lock, so a transfer's
    debit, credit and both history entries are observed as a single step.
    Callers must collect user input before calling in; nothing here blocks
    on I/O while the lock is held.
    """

    def __init__(self, accounts: dict[str, Account] | None = None):
        """
        Initialize the store.

        Args:
            accounts: Initial account table, usually from the persistence adapter
        """
        self._lock = threading.RLock()
        self.accounts: dict[str, Account] = dict(accounts or {})
        self.registrations: dict[str, Registration] = {}
        self.top_up_requests: list[TopUpRequest] = []
        self._next_top_up_id = 1

    @contextmanager
    def locked(self):
        """Hold the ledger lock for the duration of the block."""
        with self._lock:
            yield self

    def _get_account(self, account_id: str) -> Account:
        account = self.accounts.get(account_id)
        if account is None:
            raise AccountNotFoundError(f"Account {account_id} not found")
        return account

    def find_account(self, account_id: str) -> Account | None:
        """Return the shared Account object for an id, or None."""
        with self._lock:
            return self.accounts.get(account_id)

    def has_accounts(self) -> bool:
        with self._lock:
            return bool(self.accounts)

    def get_balance(self, account_id: str) -> Decimal:
        """
        Get the balance of an account.

        Raises:
            AccountNotFoundError: If the account doesn't exist
        """
        with self._lock:
            return self._get_account(account_id).balance

    def transfer(self, from_id: str, to_id: str, amount: Decimal) -> tuple[Transaction, Transaction]:
        """
        Move funds between two accounts.

        Both accounts get a 'Transfer' entry stamped with the same instant.
        Transferring to oneself is allowed and leaves the balance unchanged.

        Args:
            from_id: The sending account id
            to_id: The receiving account id
            amount: The amount to transfer (must be positive)

        Returns:
            The (sender, recipient) transactions

        Raises:
            InvalidAmountError: If the amount is not positive
            AccountNotFoundError: If the sender doesn't exist
            RecipientNotFoundError: If the recipient doesn't exist
            InsufficientBalanceError: If the sender's balance is below amount
        """
        with self._lock:
            validate_amount(amount, "transfer")
            sender = self._get_account(from_id)
            recipient = self.accounts.get(to_id)
            if recipient is None:
                raise RecipientNotFoundError(f"Recipient account {to_id} not found")
            if sender.balance < amount:
                raise InsufficientBalanceError(
                    f"Insufficient balance: {sender.balance} available, {amount} requested"
                )

            debited = add_money(sender.balance, -amount)
            # A self-transfer credits the already debited balance.
            credited = add_money(debited if recipient is sender else recipient.balance, amount)
            sender.balance = debited
            recipient.balance = credited

            date = now()
            sent = sender.record(TRANSFER, amount, date, f"Transferred to {to_id}")
            received = recipient.record(TRANSFER, amount, date, f"Received from {from_id}")

        logger.info("Transfer of %s from %s to %s", amount, from_id, to_id)
        return sent, received

    def pay(self, account_id: str, category: str, amount: Decimal) -> Transaction:
        """
        Pay for something out of an account's balance.

        Args:
            account_id: The paying account id
            category: What the payment is for; stored as the transaction details
            amount: The amount to pay (must be positive)

        Returns:
            The created 'Payment' Transaction

        Raises:
            InvalidAmountError: If the amount is not positive
            AccountNotFoundError: If the account doesn't exist
            InsufficientBalanceError: If the balance is below amount
        """
        with self._lock:
            validate_amount(amount, "pay")
            account = self._get_account(account_id)
            if account.balance < amount:
                raise InsufficientBalanceError(
                    f"Insufficient balance: {account.balance} available, {amount} requested"
                )

            account.balance = add_money(account.balance, -amount)
            transaction = account.record(PAYMENT, amount, now(), category)

        logger.info("Payment of %s by %s for %r", amount, account_id, category)
        return transaction

    def request_top_up(self, account_id: str, amount: Decimal) -> int:
        """
        File a top-up request for admin approval.

        The balance is untouched until an admin approves the request.

        Returns:
            The id of the new request

        Raises:
            InvalidAmountError: If the amount is not positive
            AccountNotFoundError: If the account doesn't exist
        """
        with self._lock:
            validate_amount(amount, "top up")
            self._get_account(account_id)
            request = TopUpRequest(
                id=self._next_top_up_id,
                account_id=account_id,
                amount=amount,
                date=now(),
            )
            self.top_up_requests.append(request)
            self._next_top_up_id += 1

        logger.info("Top-up request %d for %s of %s submitted", request.id, account_id, amount)
        return request.id

    def list_transactions(self, account_id: str) -> list[Transaction]:
        """
        Get an account's history in creation order.

        Raises:
            AccountNotFoundError: If the account doesn't exist
        """
        with self._lock:
            return list(self._get_account(account_id).transactions)

    def list_accounts(self) -> list[AccountSummary]:
        """Get id, balance and approval flag of every account."""
        with self._lock:
            return [AccountSummary.of(account) for account in self.accounts.values()]

    def snapshot(self) -> dict[str, Account]:
        """Deep copy of the account table, safe to serialize without the lock."""
        with self._lock:
            return copy.deepcopy(self.accounts)

    def load_from(self, repository: AccountRepository) -> None:
        """
        Replace the account table with the repository's contents.

        A load failure is logged and leaves the ledger empty.
        """
        try:
            accounts = repository.load()
        except PersistenceError:
            logger.exception("Failed to load accounts, starting with an empty ledger")
            accounts = {}

        with self._lock:
            self.accounts = accounts
        logger.info("Loaded %d account(s) from %s", len(accounts), repository.path)

    def save_to(self, repository: AccountRepository) -> bool:
        """
        Write the account table through the repository.

        A save failure is logged and leaves the in-memory state as it is.

        Returns:
            True if the accounts were written, False otherwise
        """
        accounts = self.snapshot()
        try:
            repository.save(accounts)
        except PersistenceError:
            logger.exception("Failed to save accounts")
            return False
        logger.info("Saved %d account(s) to %s", len(accounts), repository.path)
        return True

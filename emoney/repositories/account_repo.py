"""Account repository backed by a single JSON document."""

import json
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from emoney.models.account import Account
from emoney.models.exceptions import PersistenceError
from emoney.models.transaction import Transaction


class AccountRepository:
    """Repository for loading and saving the whole account table."""

    def __init__(self, path: str | Path):
        """
        Initialize the repository with the path of the accounts file.

        Args:
            path: Location of the JSON document (created on first save)
        """
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, Account]:
        """
        Load every account from the file.

        A missing or empty file (or a `null` document) yields an empty table.
        Each record must sit under its own ID, carry a boolean Approved flag
        and a non-negative balance.

        Returns:
            Mapping of account id to Account, in file order

        Raises:
            PersistenceError: If the file cannot be read or does not hold a valid account table
        """
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as err:
            raise PersistenceError(f"Failed to read accounts file {self._path}: {err}") from err

        if not text.strip():
            return {}

        try:
            document = json.loads(text, parse_float=Decimal, parse_int=Decimal)
        except json.JSONDecodeError as err:
            raise PersistenceError(f"Failed to parse accounts file {self._path}: {err}") from err

        if document is None:
            return {}
        if not isinstance(document, dict):
            raise PersistenceError(f"Accounts file {self._path} must hold a JSON object")

        try:
            return {key: self._to_account(key, record) for key, record in document.items()}
        except (AttributeError, KeyError, TypeError, ValueError, ArithmeticError) as err:
            raise PersistenceError(f"Malformed account record in {self._path}: {err}") from err

    def save(self, accounts: dict[str, Account]) -> None:
        """
        Overwrite the file with the given account table, pretty-printed.

        Args:
            accounts: Mapping of account id to Account

        Raises:
            PersistenceError: If the file cannot be written
        """
        document = {key: self._to_record(account) for key, account in accounts.items()}
        try:
            self._path.write_text(json.dumps(document, indent=2), encoding="utf-8")
        except OSError as err:
            raise PersistenceError(f"Failed to save accounts file {self._path}: {err}") from err

    def _to_record(self, account: Account) -> dict:
        return {
            "ID": account.id,
            "Password": account.password,
            "Balance": _to_number(account.balance),
            "Approved": account.approved,
            "Transactions": [
                {
                    "ID": txn.id,
                    "AccountID": txn.account_id,
                    "Type": txn.type,
                    "Amount": _to_number(txn.amount),
                    "Date": txn.date.isoformat(),
                    "Details": txn.details,
                }
                for txn in account.transactions
            ],
        }

    def _to_account(self, key: str, record: dict) -> Account:
        if record["ID"] != key:
            raise PersistenceError(f"Account record under {key!r} has ID {record['ID']!r}")
        if not isinstance(record["Approved"], bool):
            raise PersistenceError(f"Account {key} has a non-boolean Approved flag")
        balance = Decimal(record["Balance"])
        if not balance.is_finite() or balance < 0:
            raise PersistenceError(f"Account {key} has an invalid balance {balance}")

        transactions = [
            Transaction(
                id=int(row["ID"]),
                account_id=row["AccountID"],
                type=row["Type"],
                amount=Decimal(row["Amount"]),
                date=datetime.fromisoformat(row["Date"]),
                details=row["Details"],
            )
            for row in record.get("Transactions") or []
        ]
        return Account(
            id=record["ID"],
            password=record["Password"],
            balance=balance,
            approved=record["Approved"],
            transactions=transactions,
        )


def _to_number(value: Decimal) -> float | str:
    """JSON number when a float holds the value exactly, decimal string otherwise."""
    number = float(value)
    if Decimal(repr(number)) == value:
        return number
    return str(value)

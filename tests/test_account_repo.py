"""Tests for AccountRepository."""

import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from emoney.models.account import Account
from emoney.models.exceptions import PersistenceError
from emoney.models.transaction import Transaction
from emoney.repositories.account_repo import AccountRepository


@pytest.fixture
def accounts_file(tmp_path):
    """Path of a not-yet-existing accounts file."""
    return tmp_path / "accounts.json"


@pytest.fixture
def account_repo(accounts_file):
    """Create an AccountRepository on a fresh file."""
    return AccountRepository(accounts_file)


@pytest.fixture
def accounts():
    """An account table with histories on both sides of a transfer."""
    date = datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone(timedelta(hours=7)))
    alice = Account(id="alice", password="pw1", balance=Decimal("70.25"), approved=True)
    bob = Account(id="bob", password="pw2", balance=Decimal("29.75"), approved=True)
    alice.record("Transfer", Decimal("29.75"), date, "Transferred to bob")
    alice.record("Payment", Decimal("0.10"), date, "food")
    bob.record("Transfer", Decimal("29.75"), date, "Received from alice")
    return {"alice": alice, "bob": bob}


def test_load_missing_file(account_repo):
    """A missing file is an empty ledger, not an error."""
    assert account_repo.load() == {}


@pytest.mark.parametrize("content", ["", "  \n", "null"])
def test_load_empty_document(account_repo, accounts_file, content):
    """An empty file or a null document is an empty ledger."""
    accounts_file.write_text(content)

    assert account_repo.load() == {}


def test_save_and_load_round_trip(account_repo, accounts):
    """Saving then loading reproduces ids, balances, flags and full histories."""
    account_repo.save(accounts)

    loaded = account_repo.load()

    assert loaded == accounts
    assert list(loaded) == ["alice", "bob"]
    assert [txn.id for txn in loaded["alice"].transactions] == [1, 2]
    assert loaded["alice"].transactions[0].date == accounts["alice"].transactions[0].date


def test_loaded_account_continues_transaction_ids(account_repo, accounts):
    """The per-account counter picks up after the highest stored id."""
    account_repo.save(accounts)

    alice = account_repo.load()["alice"]
    transaction = alice.record("Payment", Decimal("1"), datetime.now(timezone.utc), "phone")

    assert transaction.id == 3


def test_save_is_pretty_printed(account_repo, accounts_file, accounts):
    """The file is indented JSON keyed by account id."""
    account_repo.save(accounts)

    text = accounts_file.read_text()
    document = json.loads(text)
    assert text.startswith('{\n  "alice": {')
    assert document["alice"]["ID"] == "alice"
    assert document["alice"]["Password"] == "pw1"
    assert document["alice"]["Balance"] == 70.25
    assert document["alice"]["Approved"] is True
    assert document["alice"]["Transactions"][0] == {
        "ID": 1,
        "AccountID": "alice",
        "Type": "Transfer",
        "Amount": 29.75,
        "Date": "2024-05-01T10:00:00+07:00",
        "Details": "Transferred to bob",
    }


def test_save_overwrites_whole_file(account_repo, accounts):
    """Each save replaces the previous contents."""
    account_repo.save(accounts)
    account_repo.save({"bob": accounts["bob"]})

    assert list(account_repo.load()) == ["bob"]


def test_load_numeric_amounts_without_rounding(account_repo, accounts_file):
    """Plain JSON numbers, and a null history, load exactly."""
    accounts_file.write_text(
        json.dumps(
            {
                "alice": {
                    "ID": "alice",
                    "Password": "pw1",
                    "Balance": 0.1,
                    "Approved": True,
                    "Transactions": [
                        {
                            "ID": 1,
                            "AccountID": "alice",
                            "Type": "Payment",
                            "Amount": 2.5,
                            "Date": "2024-05-01T10:00:00Z",
                            "Details": "food",
                        }
                    ],
                },
                "bob": {"ID": "bob", "Password": "pw2", "Balance": 0, "Approved": False, "Transactions": None},
            }
        )
    )

    loaded = account_repo.load()

    assert loaded["alice"].balance == Decimal("0.1")
    assert loaded["alice"].transactions[0] == Transaction(
        id=1,
        account_id="alice",
        type="Payment",
        amount=Decimal("2.5"),
        date=datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc),
        details="food",
    )
    assert loaded["bob"].transactions == []
    assert loaded["bob"].approved is False


def test_load_invalid_json(account_repo, accounts_file):
    """Should raise PersistenceError for a file that isn't JSON."""
    accounts_file.write_text("{not json")

    with pytest.raises(PersistenceError):
        account_repo.load()


def test_load_non_object_document(account_repo, accounts_file):
    """Should raise PersistenceError when the document isn't an object."""
    accounts_file.write_text("[1, 2, 3]")

    with pytest.raises(PersistenceError):
        account_repo.load()


def test_load_malformed_record(account_repo, accounts_file):
    """Should raise PersistenceError when a record is missing fields."""
    accounts_file.write_text(json.dumps({"alice": {"ID": "alice"}}))

    with pytest.raises(PersistenceError):
        account_repo.load()


def test_unreadable_and_unwritable_path(tmp_path, accounts):
    """Should raise PersistenceError when the path is a directory."""
    repo = AccountRepository(tmp_path)

    with pytest.raises(PersistenceError):
        repo.load()
    with pytest.raises(PersistenceError):
        repo.save(accounts)


def test_saved_amounts_are_json_numbers(account_repo, accounts_file, accounts):
    """Balances and amounts are written as plain numbers and read back exactly."""
    accounts["alice"].balance = Decimal("1000000000000.01")
    account_repo.save(accounts)

    document = json.loads(accounts_file.read_text())
    assert isinstance(document["alice"]["Balance"], float)
    assert isinstance(document["alice"]["Transactions"][1]["Amount"], float)

    loaded = account_repo.load()
    assert loaded["alice"].balance == Decimal("1000000000000.01")
    assert loaded["alice"].transactions[1].amount == Decimal("0.10")


def test_amount_beyond_float_precision_is_saved_as_text(account_repo, accounts_file, accounts):
    """A balance a float cannot hold exactly is kept as a decimal string."""
    accounts["bob"].balance = Decimal("12345678901234567.89")
    account_repo.save(accounts)

    document = json.loads(accounts_file.read_text())
    assert document["bob"]["Balance"] == "12345678901234567.89"
    assert account_repo.load()["bob"].balance == Decimal("12345678901234567.89")


def _record(**overrides):
    record = {"ID": "alice", "Password": "pw1", "Balance": 10, "Approved": False, "Transactions": []}
    record.update(overrides)
    return record


@pytest.mark.parametrize(
    "document",
    [
        {"alice": _record(Approved="false")},
        {"alice": _record(Approved=0)},
        {"alice": _record(ID="bob")},
        {"alice": _record(Balance=-1)},
        {"alice": _record(Balance="NaN")},
    ],
)
def test_load_rejects_inconsistent_record(account_repo, accounts_file, document):
    """Should raise PersistenceError for a non-boolean flag, a mismatched ID or a bad balance."""
    accounts_file.write_text(json.dumps(document))

    with pytest.raises(PersistenceError):
        account_repo.load()

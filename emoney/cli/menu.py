"""Terminal menus that translate user input into ledger calls."""

import logging
from decimal import Decimal, InvalidOperation
from typing import Callable

from tabulate import tabulate

from emoney.models.exceptions import (
    AccountAlreadyExistsError,
    BankError,
    InsufficientBalanceError,
    InvalidAmountError,
    RecipientNotFoundError,
)
from emoney.models.registration import Registration
from emoney.models.topup_request import TopUpRequest
from emoney.services.approval_service import ApprovalWorkflow
from emoney.services.ledger_service import LedgerStore, validate_amount
from emoney.services.session_service import SessionGate

logger = logging.getLogger(__name__)

# Short messages for the errors a user is expected to run into.
ERROR_MESSAGES = {
    InvalidAmountError: "Invalid amount.",
    RecipientNotFoundError: "Recipient account not found.",
    InsufficientBalanceError: "Insufficient funds.",
    AccountAlreadyExistsError: "Account already exists.",
}


def parse_amount(text: str) -> Decimal:
    """
    Parse a user-typed amount.

    Raises:
        InvalidAmountError: If the text is not a positive number of whole cents up to MAX_AMOUNT
    """
    try:
        amount = Decimal(text.strip())
    except InvalidOperation:
        raise InvalidAmountError(f"Not a number: {text!r}")
    validate_amount(amount, "enter")
    return amount


class CommandDispatcher:
    """Line-based menu loop on top of the ledger, approvals and session gate."""

    def __init__(
        self,
        store: LedgerStore,
        approvals: ApprovalWorkflow,
        session: SessionGate,
        input_func: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
    ):
        self._store = store
        self._approvals = approvals
        self._session = session
        self._input = input_func
        self._output = output

    def _report(self, err: BankError) -> None:
        for error_type, message in ERROR_MESSAGES.items():
            if isinstance(err, error_type):
                self._output(message)
                return
        self._output(str(err))

    def _choose(self, options: list[tuple[str, Callable[[], bool | None]]]) -> bool:
        """Print a numbered menu, run the chosen action and return its result."""
        for number, (label, _) in enumerate(options, start=1):
            self._output(f"{number}. {label}")
        choice = self._input("").strip()
        if not choice.isdigit() or not 1 <= int(choice) <= len(options):
            self._output("Invalid option. Please try again.")
            return True
        _, action = options[int(choice) - 1]
        return action() is not False

    def run(self) -> None:
        """Run the top-level menu until the user exits or input ends."""
        self._output("Welcome to the e-money system!")
        if not self._store.has_accounts():
            self._output("No accounts found. Please register as admin or register a new account.")
        try:
            while self._choose(self._main_options()):
                pass
        except EOFError:
            logger.info("Input closed, leaving menu")
        finally:
            self._session.logout()

    def _main_options(self):
        options = [
            ("Admin Login", self._admin_login),
            ("Register Account", self._register),
            ("Exit", self._exit),
        ]
        if self._store.has_accounts():
            options.insert(0, ("User Login", self._user_login))
        return options

    def _exit(self) -> bool:
        self._output("Goodbye!")
        return False

    def _register(self) -> None:
        account_id = self._input("Enter account ID: ")
        password = self._input("Enter password: ")
        try:
            self._approvals.submit_registration(account_id, password)
        except BankError as err:
            self._report(err)
            return
        self._output("Registration submitted for approval.")

    def _user_login(self) -> None:
        account_id = self._input("Enter account ID: ")
        password = self._input("Enter password: ")
        if not self._session.login_account(account_id, password):
            self._output("Invalid credentials or account not approved.")
            return
        self._session_loop(self._user_options())

    def _admin_login(self) -> None:
        admin_id = self._input("Enter admin ID: ")
        password = self._input("Enter password: ")
        if not self._session.login_admin(admin_id, password):
            self._output("Invalid admin credentials.")
            return
        self._session_loop(self._admin_options())

    def _session_loop(self, options) -> None:
        while self._session.identity is not None and self._choose(options):
            pass

    def _logout(self) -> bool:
        self._session.logout()
        return False

    # User menu

    def _user_options(self):
        return [
            ("Check Balance", self._check_balance),
            ("Transfer Money", self._transfer),
            ("Make Payment", self._pay),
            ("Print Transaction History", self._print_history),
            ("Top Up Balance", self._top_up),
            ("Logout", self._logout),
        ]

    def _check_balance(self) -> None:
        account = self._session.require_account()
        balance = self._store.get_balance(account.id)
        self._output(f"Balance for account {account.id}: {balance:.2f}")

    def _transfer(self) -> None:
        account = self._session.require_account()
        recipient_id = self._input("Enter recipient account ID: ")
        amount_text = self._input("Enter amount to transfer: ")
        try:
            amount = parse_amount(amount_text)
            self._store.transfer(account.id, recipient_id, amount)
        except BankError as err:
            logger.warning("Transfer by %s rejected: %s", account.id, err)
            self._report(err)
            return
        self._output("Transfer successful.")

    def _pay(self) -> None:
        account = self._session.require_account()
        category = self._input("Enter payment type (e.g., food, phone, electricity, BPJS): ")
        amount_text = self._input("Enter amount to pay: ")
        try:
            amount = parse_amount(amount_text)
            self._store.pay(account.id, category, amount)
        except BankError as err:
            logger.warning("Payment by %s rejected: %s", account.id, err)
            self._report(err)
            return
        self._output("Payment successful.")

    def _print_history(self) -> None:
        account = self._session.require_account()
        rows = [
            [txn.id, txn.type, f"{txn.amount:.2f}", txn.date.isoformat(), txn.details]
            for txn in self._store.list_transactions(account.id)
        ]
        self._output(f"Transaction history for account {account.id}:")
        self._output(
            tabulate(
                rows,
                headers=["ID", "Type", "Amount", "Date", "Details"],
                stralign="left",
                disable_numparse=True,
            )
        )

    def _top_up(self) -> None:
        account = self._session.require_account()
        amount_text = self._input("Enter amount to top up: ")
        try:
            amount = parse_amount(amount_text)
            self._store.request_top_up(account.id, amount)
        except BankError as err:
            self._report(err)
            return
        self._output("Top up request submitted.")

    # Admin menu

    def _admin_options(self):
        return [
            ("Approve/Reject Registration", self._review_registrations),
            ("Print Account List", self._print_accounts),
            ("Approve/Reject Top Up Requests", self._review_top_ups),
            ("Logout", self._logout),
        ]

    def _confirm(self, question: str) -> bool:
        return self._input(f"{question} (y/n): ").strip().lower() == "y"

    def _decide_registration(self, registration: Registration) -> bool:
        approved = self._confirm(f"Approve account {registration.id}?")
        self._output("Account approved." if approved else "Account rejected.")
        return approved

    def _decide_top_up(self, request: TopUpRequest) -> bool:
        approved = self._confirm(
            f"Approve top up request {request.id} for account {request.account_id} "
            f"of amount {request.amount:.2f}?"
        )
        self._output("Top up approved." if approved else "Top up rejected.")
        return approved

    def _review_registrations(self) -> None:
        self._session.require_admin()
        if not self._approvals.pending_registrations():
            self._output("No pending registrations.")
            return
        self._approvals.review_registrations(self._decide_registration)

    def _print_accounts(self) -> None:
        self._session.require_admin()
        rows = [
            [summary.id, f"{summary.balance:.2f}", summary.approved]
            for summary in self._store.list_accounts()
        ]
        self._output("Account List:")
        self._output(
            tabulate(rows, headers=["ID", "Balance", "Approved"], stralign="left", disable_numparse=True)
        )

    def _review_top_ups(self) -> None:
        self._session.require_admin()
        if not self._approvals.pending_top_ups():
            self._output("No pending top up requests.")
            return
        self._approvals.review_top_ups(self._decide_top_up)

"""Approval workflow for registrations and top-up requests."""

import logging
from dataclasses import dataclass
from typing import Callable

from emoney.models.account import Account
from emoney.models.exceptions import (
    AccountAlreadyExistsError,
    AccountNotFoundError,
    InvalidAmountError,
    InvalidRegistrationError,
    InvalidTopUpStatusError,
    RegistrationNotFoundError,
    TopUpRequestNotFoundError,
)
from emoney.models.registration import Registration
from emoney.models.topup_request import TopUpRequest
from emoney.services.ledger_service import LedgerStore, add_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewResult:
    """Outcome of one admin pass."""

    approved: int = 0
    declined: int = 0


class ApprovalWorkflow:
    """
    Admin-side decisions on pending registrations and top-up requests.

    Registration: Pending -> Approved (account created) or Rejected; the
    registration is removed either way. Top-up: Pending -> Approved (balance
    credited). Declining a top-up leaves it pending, so it comes back on the
    next pass. Top-up credits do not create a Transaction.
    """

    def __init__(self, store: LedgerStore):
        self._store = store

    def submit_registration(self, account_id: str, password: str) -> Registration:
        """
        File a registration for admin approval.

        Args:
            account_id: The requested account id
            password: The requested password

        Returns:
            The pending Registration

        Raises:
            InvalidRegistrationError: If the id or password is blank
            AccountAlreadyExistsError: If the id has an account or a pending registration
        """
        if not account_id.strip() or not password:
            raise InvalidRegistrationError("Account ID and password must not be empty.")

        with self._store.locked() as store:
            if account_id in store.accounts or account_id in store.registrations:
                raise AccountAlreadyExistsError(f"Account {account_id} already exists")
            registration = Registration(id=account_id, password=password)
            store.registrations[account_id] = registration

        logger.info("Registration for %s submitted", account_id)
        return registration

    def pending_registrations(self) -> list[Registration]:
        with self._store.locked() as store:
            return list(store.registrations.values())

    def approve_registration(self, account_id: str) -> Account:
        """
        Turn a pending registration into an approved account with zero balance.

        Raises:
            RegistrationNotFoundError: If no registration is pending for the id
        """
        with self._store.locked() as store:
            registration = store.registrations.pop(account_id, None)
            if registration is None:
                raise RegistrationNotFoundError(f"No pending registration for {account_id}")
            account = Account(id=registration.id, password=registration.password, approved=True)
            store.accounts[account.id] = account

        logger.info("Registration for %s approved", account_id)
        return account

    def reject_registration(self, account_id: str) -> None:
        """
        Drop a pending registration without creating an account.

        Raises:
            RegistrationNotFoundError: If no registration is pending for the id
        """
        with self._store.locked() as store:
            if store.registrations.pop(account_id, None) is None:
                raise RegistrationNotFoundError(f"No pending registration for {account_id}")

        logger.info("Registration for %s rejected", account_id)

    def pending_top_ups(self) -> list[TopUpRequest]:
        with self._store.locked() as store:
            return [request for request in store.top_up_requests if not request.approved]

    def _find_top_up(self, request_id: int) -> TopUpRequest:
        for request in self._store.top_up_requests:
            if request.id == request_id:
                return request
        raise TopUpRequestNotFoundError(f"Top-up request {request_id} not found")

    def approve_top_up(self, request_id: int) -> TopUpRequest:
        """
        Credit the requested amount and mark the request approved.

        Raises:
            TopUpRequestNotFoundError: If the request doesn't exist
            InvalidTopUpStatusError: If the request was already approved
            AccountNotFoundError: If the requesting account doesn't exist
            InvalidAmountError: If the balance cannot take the amount exactly
        """
        with self._store.locked() as store:
            request = self._find_top_up(request_id)
            if request.approved:
                raise InvalidTopUpStatusError(f"Top-up request {request_id} is already approved")
            account = store.accounts.get(request.account_id)
            if account is None:
                raise AccountNotFoundError(f"Account {request.account_id} not found")

            account.balance = add_money(account.balance, request.amount)
            request.approved = True

        logger.info(
            "Top-up request %d approved, %s credited to %s",
            request_id, request.amount, request.account_id,
        )
        return request

    def decline_top_up(self, request_id: int) -> TopUpRequest:
        """
        Decline a top-up for this pass. The request stays pending.

        Raises:
            TopUpRequestNotFoundError: If the request doesn't exist
        """
        with self._store.locked():
            request = self._find_top_up(request_id)

        logger.info("Top-up request %d declined, left pending", request_id)
        return request

    def review_registrations(self, decide: Callable[[Registration], bool]) -> ReviewResult:
        """
        Walk every pending registration and apply the admin's decision.

        `decide` runs without the ledger lock held, so it may prompt the user.
        Registrations decided elsewhere in the meantime are skipped.
        """
        approved = declined = 0
        for registration in self.pending_registrations():
            accept = decide(registration)
            try:
                if accept:
                    self.approve_registration(registration.id)
                    approved += 1
                else:
                    self.reject_registration(registration.id)
                    declined += 1
            except RegistrationNotFoundError:
                logger.warning("Registration for %s was already decided", registration.id)
        return ReviewResult(approved=approved, declined=declined)

    def review_top_ups(self, decide: Callable[[TopUpRequest], bool]) -> ReviewResult:
        """
        Walk every pending top-up request, in submission order, and apply the admin's decision.

        `decide` runs without the ledger lock held, so it may prompt the user.
        A request the balance cannot take exactly stays pending.
        """
        approved = declined = 0
        for request in self.pending_top_ups():
            if decide(request):
                try:
                    self.approve_top_up(request.id)
                except InvalidTopUpStatusError:
                    logger.warning("Top-up request %d was already approved", request.id)
                    continue
                except InvalidAmountError as err:
                    logger.error("Top-up request %d left pending: %s", request.id, err)
                    continue
                approved += 1
            else:
                self.decline_top_up(request.id)
                declined += 1
        return ReviewResult(approved=approved, declined=declined)

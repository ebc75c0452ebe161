"""Data models for the e-money ledger."""

from .account import Account, AccountSummary
from .registration import Registration
from .session import ADMIN, AdminPrincipal
from .topup_request import TopUpRequest
from .transaction import PAYMENT, TRANSFER, Transaction
from .exceptions import (
    BankError,
    AccountNotFoundError,
    RecipientNotFoundError,
    AccountAlreadyExistsError,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidRegistrationError,
    RegistrationNotFoundError,
    TopUpRequestNotFoundError,
    InvalidTopUpStatusError,
    UnauthorizedError,
    PersistenceError,
)

__all__ = [
    "Account",
    "AccountSummary",
    "Registration",
    "ADMIN",
    "AdminPrincipal",
    "TopUpRequest",
    "Transaction",
    "TRANSFER",
    "PAYMENT",
    "BankError",
    "AccountNotFoundError",
    "RecipientNotFoundError",
    "AccountAlreadyExistsError",
    "InsufficientBalanceError",
    "InvalidAmountError",
    "InvalidRegistrationError",
    "RegistrationNotFoundError",
    "TopUpRequestNotFoundError",
    "InvalidTopUpStatusError",
    "UnauthorizedError",
    "PersistenceError",
]

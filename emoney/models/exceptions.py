"""Custom exceptions for the e-money ledger."""


class BankError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class AccountNotFoundError(BankError):
    """Raised when an account cannot be found."""
    pass


class RecipientNotFoundError(AccountNotFoundError):
    """Raised when the receiving side of a transfer does not exist."""
    pass


class AccountAlreadyExistsError(BankError):
    """Raised when registering an id that already has an account or a pending registration."""
    pass


class InsufficientBalanceError(BankError):
    """Raised when an account has insufficient balance for a debit."""
    pass


class InvalidAmountError(BankError):
    """Raised when an invalid amount is provided (e.g., zero, negative or not a number)."""
    pass


class InvalidRegistrationError(BankError):
    """Raised when a registration is submitted with a blank id or password."""
    pass


class RegistrationNotFoundError(BankError):
    """Raised when deciding on a registration that is no longer pending."""
    pass


class TopUpRequestNotFoundError(BankError):
    """Raised when a top-up request cannot be found."""
    pass


class InvalidTopUpStatusError(BankError):
    """Raised when approving a top-up request that was already approved."""
    pass


class UnauthorizedError(BankError):
    """Raised when the current session is not allowed to perform an action."""
    pass


class PersistenceError(BankError):
    """Raised when the accounts file cannot be read, parsed or written."""
    pass

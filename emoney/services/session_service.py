"""Session gate: the single currently authenticated identity."""

import logging

from emoney.models.account import Account
from emoney.models.exceptions import UnauthorizedError
from emoney.models.session import ADMIN, ADMIN_ID, ADMIN_PASSWORD, AdminPrincipal
from emoney.services.ledger_service import LedgerStore

logger = logging.getLogger(__name__)


class SessionGate:
    """Holds at most one identity: nobody, the admin, or one account."""

    def __init__(self, store: LedgerStore):
        self._store = store
        self._identity: Account | AdminPrincipal | None = None

    @property
    def identity(self) -> Account | AdminPrincipal | None:
        return self._identity

    @property
    def is_admin(self) -> bool:
        return self._identity is ADMIN

    @property
    def current_account(self) -> Account | None:
        if isinstance(self._identity, Account):
            return self._identity
        return None

    def login_admin(self, admin_id: str, password: str) -> bool:
        """
        Log in as the admin. Only the fixed admin credential pair is accepted.

        Returns:
            True on success; on failure the current identity is left unchanged
        """
        with self._store.locked():
            if admin_id == ADMIN_ID and password == ADMIN_PASSWORD:
                self._identity = ADMIN
                logger.info("Admin logged in")
                return True

        logger.warning("Failed admin login for %r", admin_id)
        return False

    def login_account(self, account_id: str, password: str) -> bool:
        """
        Log in as an account holder.

        The account must exist, the password must match exactly and the
        account must be approved. The session keeps the store's own Account
        object, so later changes through either side are shared.

        Returns:
            True on success; on failure the current identity is left unchanged
        """
        with self._store.locked() as store:
            account = store.accounts.get(account_id)
            if account is not None and account.password == password and account.approved:
                self._identity = account
                logger.info("Account %s logged in", account_id)
                return True

        logger.warning("Failed login for account %r", account_id)
        return False

    def logout(self) -> None:
        with self._store.locked():
            if self._identity is not None:
                logger.info("%s logged out", self._identity.id)
            self._identity = None

    def require_account(self) -> Account:
        """
        Raises:
            UnauthorizedError: If no account holder is logged in
        """
        account = self.current_account
        if account is None:
            raise UnauthorizedError("An account login is required.")
        return account

    def require_admin(self) -> AdminPrincipal:
        """
        Raises:
            UnauthorizedError: If the admin is not logged in
        """
        if not self.is_admin:
            raise UnauthorizedError("Admin login is required.")
        return ADMIN

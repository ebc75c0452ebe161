"""Configuration management for the e-money ledger."""
import logging
import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Configuration settings for the e-money ledger.

    Admin credentials are fixed and deliberately not part of the settings.
    """

    # Persistence
    accounts_file_path: str = 'accounts.json'

    # Logging
    log_file_path: str = 'emoney.log'
    log_level: str = 'INFO'

    @classmethod
    def load(cls) -> 'Settings':
        """Load settings from environment variables.

        Unset variables fall back to the defaults above.

        Returns:
            Settings: A Settings instance with values from environment variables.

        Raises:
            ValueError: If EMONEY_LOG_LEVEL is not a known logging level.
        """
        defaults = cls()
        log_level = os.getenv('EMONEY_LOG_LEVEL', defaults.log_level).upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"EMONEY_LOG_LEVEL must be a logging level, got {log_level!r}")

        return cls(
            accounts_file_path=os.getenv('EMONEY_ACCOUNTS_FILE') or defaults.accounts_file_path,
            log_file_path=os.getenv('EMONEY_LOG_FILE') or defaults.log_file_path,
            log_level=log_level,
        )

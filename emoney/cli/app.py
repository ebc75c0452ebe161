import logging

from dotenv import load_dotenv

from config.settings import Settings
from emoney.cli.menu import CommandDispatcher
from emoney.repositories.account_repo import AccountRepository
from emoney.services.approval_service import ApprovalWorkflow
from emoney.services.ledger_service import LedgerStore
from emoney.services.session_service import SessionGate


def setup_logging(settings: Settings) -> logging.Logger:
    logger = logging.getLogger('emoney')
    logger.setLevel(settings.log_level)
    handler = logging.FileHandler(filename=settings.log_file_path, encoding='utf-8', mode='a')
    handler.setFormatter(logging.Formatter('%(asctime)s:%(levelname)s:%(name)s: %(message)s'))
    logger.addHandler(handler)
    return logger


def main():
    load_dotenv()
    settings = Settings.load()
    logger = setup_logging(settings)

    repository = AccountRepository(settings.accounts_file_path)
    store = LedgerStore()
    store.load_from(repository)

    dispatcher = CommandDispatcher(
        store=store,
        approvals=ApprovalWorkflow(store),
        session=SessionGate(store),
    )
    try:
        dispatcher.run()
    except KeyboardInterrupt:
        logger.info("Interrupted")
        print()
    finally:
        store.save_to(repository)


if __name__ == '__main__':
    main()

"""Console entry point: ``python -m vault`` starts the interactive menu."""

import asyncio
import logging

from vault.config import get_settings
from vault.infrastructure.dependencies import open_vault
from vault.infrastructure.logging.log_config import setup_logging
from vault.presentation.cli.menu import VaultMenu

logger = logging.getLogger(__name__)


async def _run() -> None:
    async with open_vault(get_settings()) as vault:
        await VaultMenu(vault.store, vault.storage).run()


def main() -> None:
    setup_logging()
    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        # open_vault has already released the database by the time we get here
        logger.info("Interrupted, vault closed")


if __name__ == "__main__":
    main()

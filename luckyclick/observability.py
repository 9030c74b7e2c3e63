"""Logfire cloud observability initialization and instrumentation."""

import logging

import logfire

from luckyclick import __version__
from luckyclick.config import Settings

logger = logging.getLogger(__name__)


def initialize_logfire(settings: Settings) -> None:
    """
    Initialize Logfire and instrument the bot's outbound clients.

    Must be called ONCE at process startup, before the bot starts polling.

    Instruments:
    - HTTPX clients (TON HTTP API)
    - PyMongo (ledger reads and writes)
    - Python logging (bridges to Logfire)

    Args:
        settings: Application settings containing Logfire token

    Returns:
        None. Logs success or warning messages.
    """
    if not settings.logfire_token:
        logger.warning("Logfire token not set - observability disabled")
        return

    try:
        logfire.configure(
            token=settings.logfire_token,
            service_name="luckyclick",
            service_version=__version__,
            environment=settings.environment,
        )

        logfire.instrument_httpx()

        try:
            logfire.instrument_pymongo()
        except Exception as mongo_error:
            logger.debug(f"PyMongo instrumentation skipped: {mongo_error}")

        root_logger = logging.getLogger()
        root_logger.addHandler(logfire.LogfireLoggingHandler())

        logger.info("✓ Logfire cloud tracking initialized")

    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")

"""Application wiring: settings in, a ready-to-poll telegram Application out."""

from __future__ import annotations

import logging

from telegram.ext import Application

from luckyclick.config import Settings
from luckyclick.game import CooldownTracker, GameService
from luckyclick.ledger import BalanceLedger, TxLedger
from luckyclick.services.telegram import TelegramConfig, create_telegram_notifier
from luckyclick.services.ton import TonClientConfig, create_ton_client
from luckyclick.timers import SchedulerTimerService
from luckyclick.wallet import DepositChecker, WithdrawalDesk, WithdrawalSessions

from .handlers import BotHandlers

logger = logging.getLogger(__name__)


def create_ledger(settings: Settings) -> BalanceLedger:
    if settings.ledger_backend == "memory":
        from luckyclick.ledger import InMemoryLedger

        logger.warning("Using in-memory ledger; balances are lost on restart")
        return InMemoryLedger()

    from luckyclick.ledger.mongo import MongoLedger

    return MongoLedger.from_url(settings.mongodb_url, settings.mongodb_database)


def build_application(
    settings: Settings, ledger: BalanceLedger | None = None
) -> Application:
    """Build the bot with every service attached to ``application.bot_data``."""
    if not settings.telegram_bot_token:
        raise ValueError("TELEGRAM_BOT_TOKEN is not set")

    ledger = ledger or create_ledger(settings)
    if not isinstance(ledger, TxLedger):
        raise TypeError("ledger must also implement TxLedger")

    timers = SchedulerTimerService()
    ton = create_ton_client(
        api_key=settings.ton_api_key,
        config=TonClientConfig(
            base_url=settings.ton.base_url,
            timeout_seconds=settings.ton.timeout_seconds,
            max_retries=settings.ton.max_retries,
        ),
    )

    async def post_init(application: Application) -> None:
        timers.start()
        await ton.__aenter__()
        ensure_indexes = getattr(ledger, "ensure_indexes", None)
        if ensure_indexes is not None:
            await ensure_indexes()
        logger.info("✓ LuckyClick services started")

    async def post_shutdown(application: Application) -> None:
        timers.shutdown()
        await ton.__aexit__(None, None, None)
        close = getattr(ledger, "close", None)
        if close is not None:
            close()
        logger.info("✓ LuckyClick services stopped")

    application = (
        Application.builder()
        .token(settings.telegram_bot_token)
        .post_init(post_init)
        .post_shutdown(post_shutdown)
        .build()
    )

    notifier = create_telegram_notifier(
        bot=application.bot,
        config=TelegramConfig(bot_token=settings.telegram_bot_token),
    )
    game = GameService(
        settings.game,
        ledger,
        notifier,
        timers,
        cooldowns=CooldownTracker(settings.cooldowns),
        coins_per_ton=settings.wallet.coins_per_ton,
    )
    deposits = DepositChecker(
        ton, ledger, ledger, settings.ton_wallet, config=settings.wallet
    )
    desk = WithdrawalDesk(
        ledger, notifier, admin_chat_id=settings.admin_chat_id, config=settings.wallet
    )
    sessions = WithdrawalSessions(
        desk,
        ttl_seconds=settings.wallet.session_ttl_seconds,
        maxsize=settings.wallet.max_open_sessions,
    )

    handlers = BotHandlers(game, deposits, sessions, settings)
    handlers.register(application)
    application.bot_data["game"] = game
    logger.info(
        f"Built application (ledger={type(ledger).__name__}, "
        f"tiers={settings.game.stake_tiers})"
    )
    return application

"""LuckyClick CLI entry point."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

load_dotenv(Path.cwd() / ".env")

from luckyclick import __version__
from luckyclick.config import get_settings
from luckyclick.errors import Unavailable

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)

CONFIG_TEMPLATE = """# LuckyClick Configuration
# Operational parameters for the betting bot.
# Tokens and connection strings belong in .env, not here.

game:
  stake_tiers: [100, 300, 500, 1000]
  quorum: 3
  grace_seconds: 10
  betting_window_seconds: 30
  countdown_checkpoints: [5, 4, 3, 2, 1]
  rake_percent: 20

cooldowns:
  default_seconds: 60
  actions:
    bet: 30
    check_deposit: 60
    withdraw: 60

wallet:
  coins_per_ton: 1000
  min_deposit_ton: 0.1
  deposit_scan_limit: 20
  session_ttl_seconds: 300

ton:
  base_url: https://toncenter.com/api/v2
  timeout_seconds: 15
  max_retries: 3
"""


def _init_logfire() -> None:
    """Initialize Logfire if available, without failing commands."""
    try:
        from luckyclick.observability import initialize_logfire

        initialize_logfire(get_settings())
    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")


def cmd_init(args: argparse.Namespace) -> int:
    """Create the data directory and a config template."""
    data_dir = Path("data").resolve()

    try:
        data_dir.mkdir(exist_ok=True)
        logger.info(f"Created data directory: {data_dir}")

        config_path = data_dir / "config.yaml"
        if not config_path.exists():
            config_path.write_text(CONFIG_TEMPLATE)
            logger.info(f"Created config template: {config_path}")
        else:
            logger.info(f"Config file already exists: {config_path}")

        print(f"\n✓ Data directory initialized at {data_dir}")
        print("\nNext steps:")
        print("1. Set TELEGRAM_BOT_TOKEN, TON_WALLET and MONGODB_URL in .env")
        print("2. Review and customize data/config.yaml if needed")
        print("3. Run 'python -m luckyclick config' to verify configuration")
        print("4. Run 'python -m luckyclick run' to start the bot\n")
        return 0

    except Exception as e:
        logger.error(f"Failed to initialize: {e}")
        print(f"\n❌ Initialization failed: {e}\n")
        return 1


def cmd_config(args: argparse.Namespace) -> int:
    """Display merged configuration."""
    try:
        settings = get_settings()

        print("\n=== LuckyClick Configuration ===\n")
        print(f"Environment: {settings.environment}")
        print(f"Data Directory: {settings.data_dir}")
        print(f"Ledger Backend: {settings.ledger_backend}\n")

        print("Game:")
        print(f"  Stake Tiers: {', '.join(str(t) for t in settings.game.stake_tiers)}")
        print(f"  Quorum: {settings.game.quorum}")
        print(f"  Grace Period: {settings.game.grace_seconds:g}s")
        print(f"  Betting Window: {settings.game.betting_window_seconds:g}s")
        print(f"  Countdown: {settings.game.countdown_checkpoints}")
        print(f"  Rake: {settings.game.rake_percent}%\n")

        print("Cooldowns (seconds):")
        print(f"  Default: {settings.cooldowns.default_seconds:g}")
        for action, seconds in sorted(settings.cooldowns.actions.items()):
            print(f"  {action}: {seconds:g}")
        print()

        print("Wallet:")
        print(f"  Coins per TON: {settings.wallet.coins_per_ton}")
        print(f"  Min Deposit: {settings.wallet.min_deposit_ton} TON")
        print(f"  Withdrawal Dialog TTL: {settings.wallet.session_ttl_seconds:g}s\n")

        print("Secrets:")
        print(f"  Telegram: {'✓ Set' if settings.telegram_bot_token else '✗ Not set'}")
        print(f"  Admin Chat: {'✓ Set' if settings.admin_chat_id else '✗ Not set'}")
        print(f"  TON Wallet: {'✓ Set' if settings.ton_wallet else '✗ Not set'}")
        print(f"  TON API Key: {'✓ Set' if settings.ton_api_key else '✗ Not set'}")
        print(f"  Logfire: {'✓ Set' if settings.logfire_token else '✗ Not set'}\n")
        return 0

    except ValidationError as e:
        print("\n❌ Configuration Error:\n")
        for error in e.errors():
            print(f"  • {'.'.join(str(x) for x in error['loc'])}: {error['msg']}")
        print()
        return 1
    except Exception as e:
        logger.error(f"Failed to load config: {e}")
        print(f"\n❌ Failed to load configuration: {e}\n")
        return 1


async def _read_balance(user_id: int) -> int:
    from luckyclick.ledger.mongo import MongoLedger

    settings = get_settings()
    ledger = MongoLedger.from_url(settings.mongodb_url, settings.mongodb_database)
    try:
        if not await ledger.check_connection():
            raise Unavailable()
        return await ledger.get(user_id)
    finally:
        ledger.close()


def cmd_balance(args: argparse.Namespace) -> int:
    """Print a user's balance from the MongoDB ledger."""
    try:
        coins = asyncio.run(_read_balance(args.user_id))
        coins_per_ton = get_settings().wallet.coins_per_ton
        print(f"\nUser {args.user_id}: {coins} coins ({coins / coins_per_ton:.3f} TON)\n")
        return 0
    except Exception as e:
        logger.error(f"Balance lookup failed: {e}")
        print(f"\n❌ Balance lookup failed: {e}\n")
        return 1


def cmd_run(args: argparse.Namespace) -> int:
    """Start the bot and poll Telegram until interrupted."""
    try:
        _init_logfire()

        if args.debug:
            logging.getLogger().setLevel(logging.DEBUG)

        settings = get_settings()
        if args.memory_ledger:
            settings.ledger_backend = "memory"

        from luckyclick.bot import build_application

        application = build_application(settings)

        print("\n=== LuckyClick ===\n")
        print(f"Version: {__version__}")
        print(f"Ledger: {settings.ledger_backend}")
        print(f"Stake Tiers: {settings.game.stake_tiers}\n")

        application.run_polling()
        return 0

    except KeyboardInterrupt:
        logger.info("Received interrupt signal")
        return 0
    except Exception as e:
        logger.error(f"Bot failed: {e}", exc_info=True)
        print(f"\n❌ Bot failed: {e}\n")
        return 1


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="luckyclick",
        description="LuckyClick - pari-mutuel Green/Red betting rooms over Telegram",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(help="Available commands")

    parser_init = subparsers.add_parser("init", help="Initialize data directory and configuration")
    parser_init.set_defaults(func=cmd_init)

    parser_config = subparsers.add_parser("config", help="Display merged configuration")
    parser_config.set_defaults(func=cmd_config)

    balance_parser = subparsers.add_parser("balance", help="Show a user's balance")
    balance_parser.add_argument("--user-id", type=int, required=True, help="Telegram user id")
    balance_parser.set_defaults(func=cmd_balance)

    run_parser = subparsers.add_parser("run", help="Start the bot")
    run_parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    run_parser.add_argument(
        "--memory-ledger",
        action="store_true",
        help="Keep balances in memory instead of MongoDB",
    )
    run_parser.set_defaults(func=cmd_run)

    args = parser.parse_args()

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

"""Configuration management using Pydantic Settings."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class GameConfig(BaseModel):
    """Room lifecycle and payout parameters."""

    stake_tiers: list[int] = Field(default_factory=lambda: [100, 300, 500, 1000])
    quorum: int = 3
    grace_seconds: float = 10.0
    betting_window_seconds: float = 30.0
    countdown_checkpoints: list[int] = Field(default_factory=lambda: [5, 4, 3, 2, 1])
    rake_percent: int = 20  # House fee taken from the pool before payout

    @field_validator("stake_tiers", mode="after")
    @classmethod
    def tiers_positive(cls, v: list[int]) -> list[int]:
        """Stake tiers must be distinct positive integers."""
        if any(tier <= 0 for tier in v):
            raise ValueError("stake tiers must be positive")
        return sorted(set(v))

    @field_validator("rake_percent", mode="after")
    @classmethod
    def rake_in_range(cls, v: int) -> int:
        if not 0 <= v < 100:
            raise ValueError("rake_percent must be in [0, 100)")
        return v


class CooldownConfig(BaseModel):
    """Refractory windows for ledger-mutating commands, in seconds."""

    default_seconds: float = 60.0
    actions: dict[str, float] = Field(
        default_factory=lambda: {
            "bet": 30.0,
            "check_deposit": 60.0,
            "withdraw": 60.0,
        }
    )


class WalletConfig(BaseModel):
    """Deposit and withdrawal parameters."""

    coins_per_ton: int = 1000
    min_deposit_ton: float = 0.1
    deposit_scan_limit: int = 20
    session_ttl_seconds: float = 300.0  # Withdrawal dialog expiry
    max_open_sessions: int = 10000


class TonConfig(BaseModel):
    """TON HTTP API client parameters."""

    base_url: str = "https://toncenter.com/api/v2"
    timeout_seconds: float = 15.0
    max_retries: int = 3


class Settings(BaseSettings):
    """Main configuration class."""

    # Paths
    data_dir: Path = Path("data")

    # Deployment name reported to observability
    environment: str = "production"

    # Secrets and endpoints
    telegram_bot_token: str = ""
    admin_chat_id: str = ""
    ton_wallet: str = ""
    ton_api_key: str = ""
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_database: str = "luckyclick"
    ledger_backend: Literal["memory", "mongo"] = "mongo"
    logfire_token: str = ""

    # Nested configuration sections
    game: GameConfig = Field(default_factory=GameConfig)
    cooldowns: CooldownConfig = Field(default_factory=CooldownConfig)
    wallet: WalletConfig = Field(default_factory=WalletConfig)
    ton: TonConfig = Field(default_factory=TonConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("data_dir", mode="after")
    @classmethod
    def resolve_data_dir(cls, v: Path) -> Path:
        """Resolve data directory to absolute path."""
        return v.resolve()

    def load_yaml_config(self) -> None:
        """Load and merge YAML configuration."""
        config_path = self.data_dir / "config.yaml"

        if not config_path.exists():
            logger.warning(
                f"Config file not found: {config_path}. "
                "Using defaults. Run 'python -m luckyclick init' to create it."
            )
            return

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)

            if not yaml_config:
                logger.warning(f"Empty config file: {config_path}")
                return

            for section_name in ["game", "cooldowns", "wallet", "ton"]:
                if section_name in yaml_config:
                    section = getattr(self, section_name)
                    yaml_section = yaml_config[section_name]

                    section_dict = section.model_dump()
                    section_dict.update(yaml_section)

                    new_section = section.__class__(**section_dict)
                    setattr(self, section_name, new_section)

            logger.info(f"Loaded configuration from {config_path}")

        except yaml.YAMLError as e:
            logger.error(f"Failed to parse YAML config: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed to load config: {e}")
            raise


@lru_cache()
def get_settings() -> Settings:
    """Get singleton Settings instance."""
    settings = Settings()
    settings.load_yaml_config()
    return settings

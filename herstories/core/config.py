"""
Application configuration.
All settings are loaded from environment variables.
Use env.example as a reference for available variables.
"""
from decimal import Decimal

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Defaults target a local SQLite database and the Primordial BlockDAG testnet.
    """

    # ===========================================
    # APPLICATION
    # ===========================================
    app_env: str = "local"

    # ===========================================
    # DATABASE
    # ===========================================
    # postgresql://... is rewritten to the asyncpg driver, sqlite://... to aiosqlite
    database_url: str = "sqlite+aiosqlite:///./data/herstories.db"
    database_echo: bool = False

    # ===========================================
    # REDIS (cross-session purchase lock)
    # ===========================================
    # Empty = no lock, only the per-view in-flight guard applies.
    redis_url: str = ""
    purchase_lock_ttl: int = 300  # 5 minutes, longer than a receipt wait

    # ===========================================
    # CHAIN
    # ===========================================
    chain_network_name: str = "Primordial BlockDAG Testnet"
    chain_rpc_url: str = "https://rpc.primordial.bdagscan.com"
    chain_id: int = 1043
    chain_currency_symbol: str = "BDAG"
    chain_block_explorer: str = "https://primordial.bdagscan.com"
    chapter_payment_contract: str = "0x643859f45cC468e26d98917b086a7B50436f51db"
    chain_receipt_timeout_seconds: float = 120.0
    chain_receipt_poll_seconds: float = 1.0

    # ===========================================
    # MARKETPLACE
    # ===========================================
    default_price_per_chapter: Decimal = Decimal("5")
    # Ask the ledger for paid-but-unrecorded chapters on every purchase refresh
    reconcile_on_refresh: bool = False

    # ===========================================
    # LOGGING
    # ===========================================
    log_level: str = "INFO"
    log_file: str | None = None
    log_max_bytes: int = 10_000_000
    log_backup_count: int = 5

    @field_validator("chapter_payment_contract")
    @classmethod
    def validate_contract_address(cls, v: str) -> str:
        """Require a 20-byte hex address."""
        v = v.strip()
        if not v.startswith("0x") or len(v) != 42:
            raise ValueError("chapter_payment_contract must be a 0x-prefixed 20-byte address")
        int(v, 16)
        return v

    @field_validator("chain_receipt_timeout_seconds", "chain_receipt_poll_seconds")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def async_database_url(self) -> str:
        """database_url with an async driver."""
        url = self.database_url
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if url.startswith("sqlite://"):
            return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return url

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


settings = Settings()

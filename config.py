"""
Configuration management for the fraction ledger.
Uses pydantic-settings for type-safe, centralized configuration.
"""

from enum import Enum
from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class TransferSettlement(str, Enum):
    """
    Who receives the payment the new holder makes in a holder-to-holder transfer.

    PAY_CREATOR credits the asset creator rather than the sending holder.
    It is the long-standing behaviour; see DESIGN.md before relying on it.
    """
    PAY_SENDER = "pay_sender"
    PAY_CREATOR = "pay_creator"
    NO_PAYMENT = "no_payment"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Uses pydantic-settings for validation and type safety.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'  # Allow extra fields in .env for flexibility
    )

    # Database
    database_url: str = "sqlite:///fraction_ledger.db"
    db_echo: bool = False

    # Ledger
    creator_identity: str = "owner"
    transfer_settlement: TransferSettlement = TransferSettlement.PAY_CREATOR
    price_rounding: Literal["floor", "ceil"] = "floor"

    # Logging
    log_level: str = "INFO"

    @property
    def is_in_memory_database(self) -> bool:
        """Check if the database URL points at an in-memory SQLite database."""
        return self.database_url in ("sqlite://", "sqlite:///:memory:")


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Reload settings from environment (useful for testing)."""
    global _settings
    _settings = Settings()
    return _settings

"""
Fraction Ledger - application wiring.
Builds the registry, ledger, settlement engine and query service from
centralized settings.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from config import Settings, get_settings
from db_engine import init_db
from services import (
    AssetRegistry,
    FractionLedger,
    InMemoryCustody,
    LoggingNotificationSink,
    NotificationSink,
    PaymentCustody,
    QueryService,
    SettlementEngine,
)

logger = logging.getLogger(__name__)


@dataclass
class FractionalOwnershipApp:
    """The wired components of one ledger instance."""
    registry: AssetRegistry
    ledger: FractionLedger
    settlement: SettlementEngine
    query: QueryService
    custody: PaymentCustody
    sink: NotificationSink


def configure_logging(settings: Optional[Settings] = None):
    """Configure root logging from settings."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def create_app(
    custody: Optional[PaymentCustody] = None,
    sink: Optional[NotificationSink] = None
) -> FractionalOwnershipApp:
    """
    Initialize the database and wire the ledger components.

    Args:
        custody: Payment custody provider (default: a fresh InMemoryCustody)
        sink: Notification sink (default: LoggingNotificationSink)

    Returns:
        FractionalOwnershipApp with every component sharing one mutation lock
    """
    settings = get_settings()
    custody = custody if custody is not None else InMemoryCustody()
    sink = sink if sink is not None else LoggingNotificationSink()

    init_db()

    registry = AssetRegistry(creator=settings.creator_identity, sink=sink)
    settlement = SettlementEngine(custody=custody, treasury=registry.creator)
    ledger = FractionLedger(
        registry=registry,
        settlement=settlement,
        sink=sink,
        transfer_settlement=settings.transfer_settlement,
        price_rounding=settings.price_rounding
    )
    logger.info(
        f"Fraction ledger ready: creator={settings.creator_identity}, "
        f"transfer_settlement={settings.transfer_settlement.value}, price_rounding={settings.price_rounding}"
    )
    return FractionalOwnershipApp(
        registry=registry,
        ledger=ledger,
        settlement=settlement,
        query=QueryService(),
        custody=custody,
        sink=sink,
    )

"""
Services package for the fraction ledger.
Provides core business logic separated from the data layer.
"""

from services.common import (
    price_per_fraction,
    settlement_amount,
)
from services.notification import (
    LedgerEvent,
    NotificationSink,
    LoggingNotificationSink,
    MemoryNotificationSink,
)
from services.settlement import (
    CustodyRejected,
    PaymentCustody,
    InMemoryCustody,
    SettlementEngine,
    SettlementTransaction,
    CompensationFailed,
)
from services.registry import AssetRegistry
from services.ledger import FractionLedger
from services.query import QueryService

__all__ = [
    # Common utilities
    'price_per_fraction',
    'settlement_amount',
    # Notifications
    'LedgerEvent',
    'NotificationSink',
    'LoggingNotificationSink',
    'MemoryNotificationSink',
    # Settlement
    'CustodyRejected',
    'PaymentCustody',
    'InMemoryCustody',
    'SettlementEngine',
    'SettlementTransaction',
    'CompensationFailed',
    # Services
    'AssetRegistry',
    'FractionLedger',
    'QueryService',
]

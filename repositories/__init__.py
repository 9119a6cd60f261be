"""
Repositories package for the fraction ledger.
Provides data access layer for all database operations.
"""

from repositories.asset_repository import AssetRepository
from repositories.holding_repository import HoldingRepository

__all__ = [
    'AssetRepository',
    'HoldingRepository',
]

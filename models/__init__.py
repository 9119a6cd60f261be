"""
Database models for the fraction ledger.
All SQLModel table definitions are centralized here.
"""

from models.asset import Asset
from models.holding import Holding

__all__ = [
    'Asset',
    'Holding',
]

"""
Holding model - a holder's fraction balance in one asset.
"""

from sqlalchemy import BigInteger
from sqlmodel import SQLModel, Field


class Holding(SQLModel, table=True):
    """Fractions of an asset held by one identity. Absent row means zero."""
    asset_id: int = Field(foreign_key="asset.id", primary_key=True)
    holder: str = Field(primary_key=True)
    balance: int = Field(sa_type=BigInteger)

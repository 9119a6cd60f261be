"""
Asset model - a registered divisible asset and its fraction pool.
"""

from typing import Optional
from datetime import datetime, timezone
from sqlalchemy import BigInteger, DateTime
from sqlmodel import SQLModel, Field


class Asset(SQLModel, table=True):
    """Represents a divisible asset; available_fractions is its unassigned pool."""
    id: Optional[int] = Field(default=None, primary_key=True)  # Assigned sequentially from 0
    name: str
    location: str
    value: int = Field(sa_type=BigInteger)  # Smallest payment denomination
    total_fractions: int = Field(sa_type=BigInteger)
    available_fractions: int = Field(sa_type=BigInteger)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_type=DateTime(timezone=True)
    )

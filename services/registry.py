"""
Asset registry - the catalog of divisible assets.
Only the creator identity fixed at construction may register assets.
"""

import logging
import threading
from typing import Any, Optional

from db_engine import get_session
from errors import InvalidArgument, Unauthorized
from repositories import AssetRepository
from services.common import is_valid_id, require_integer
from services.notification import ASSET_CREATED, NotificationSink, notify

logger = logging.getLogger(__name__)


class AssetRegistry:
    """
    Registers assets and answers existence checks.
    Owns the mutation lock that FractionLedger shares, so asset creation and
    fraction movements are serialized against each other.
    """

    def __init__(
        self,
        creator: str,
        sink: Optional[NotificationSink] = None,
        lock: Optional[threading.RLock] = None
    ):
        if not isinstance(creator, str) or not creator:
            raise ValueError("creator identity must be a non-empty string")
        self._creator = creator
        self._sink = sink
        self._lock = lock or threading.RLock()

    @property
    def creator(self) -> str:
        return self._creator

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def create_asset(self, name: str, location: str, value: int, total_fractions: int, caller: str) -> int:
        """
        Register a new asset with every fraction in the pool.

        Args:
            name: Asset name
            location: Asset location
            value: Declared value in the smallest payment unit (>= 0)
            total_fractions: Number of fractions (> 0)
            caller: Identity invoking the call

        Returns:
            The new asset id (0 for the first asset)

        Raises:
            Unauthorized: if caller is not the creator
            InvalidArgument: on malformed attributes or counts
        """
        try:
            if caller != self._creator:
                raise Unauthorized(f"{caller!r} may not create assets")
            if not isinstance(name, str) or not isinstance(location, str):
                raise InvalidArgument("name and location must be strings")
            require_integer("value", value, minimum=0)
            require_integer("total_fractions", total_fractions, minimum=1)
        except (Unauthorized, InvalidArgument) as e:
            logger.warning(f"create_asset rejected ({e.kind}): {e}")
            raise

        with self._lock, get_session() as session:
            try:
                asset_id = AssetRepository.next_id(session=session)
                AssetRepository.add(
                    asset_id=asset_id,
                    name=name,
                    location=location,
                    value=value,
                    total_fractions=total_fractions,
                    session=session
                )
                session.commit()
            except Exception:
                session.rollback()
                raise

        logger.info(f"Created asset {asset_id} '{name}' with {total_fractions} fractions valued {value}")
        notify(
            self._sink, ASSET_CREATED, asset_id,
            name=name, location=location, value=value, total_fractions=total_fractions
        )
        return asset_id

    def asset_exists(self, asset_id: Any) -> bool:
        """Check whether an asset id is registered. Never raises for bad ids."""
        if not is_valid_id(asset_id):
            return False
        return AssetRepository.get_by_id(asset_id) is not None

"""
Query service - read-only projections over the registry and ledger state.
"""

import logging
from typing import Dict, List, Union

from errors import UnknownAsset
from repositories import AssetRepository
from services.common import is_valid_id

logger = logging.getLogger(__name__)


class QueryService:
    """Read-only lookups. Never takes the mutation lock and never writes."""

    @staticmethod
    def get_asset(asset_id: int) -> Dict[str, Union[str, int]]:
        """
        Look up an asset's details.

        Args:
            asset_id: Asset ID

        Returns:
            Dictionary with name, location, value and available_fractions

        Raises:
            UnknownAsset: if no asset has this id
        """
        asset = AssetRepository.get_by_id(asset_id) if is_valid_id(asset_id) else None
        if asset is None:
            logger.debug(f"get_asset: unknown asset {asset_id!r}")
            raise UnknownAsset(asset_id)
        return {
            'name': asset.name,
            'location': asset.location,
            'value': asset.value,
            'available_fractions': asset.available_fractions,
        }

    @staticmethod
    def get_assets() -> List[int]:
        """Every asset id ever created, in creation order."""
        return AssetRepository.get_ids()

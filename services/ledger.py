"""
Fraction ledger - moves fractions between an asset's pool and its holders.

Every mutation runs validate -> settle -> commit under the registry's lock in
a single database session. A settlement failure rolls the session back; a
commit failure reverses the settlement. Either way the caller gets the error
and the ledger looks exactly as it did before the call.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

from sqlmodel import Session

from config import TransferSettlement
from db_engine import get_session
from errors import (
    InsufficientBalance,
    InsufficientPool,
    InvalidArgument,
    LedgerError,
    PaymentMismatch,
    UnknownAsset,
)
from models import Asset
from repositories import AssetRepository, HoldingRepository
from services.common import is_valid_id, require_integer, settlement_amount
from services.notification import PURCHASE, SALE, TRANSFER, NotificationSink, notify
from services.registry import AssetRegistry
from services.settlement import SettlementEngine

logger = logging.getLogger(__name__)


def _require_identity(name: str, identity) -> str:
    if not isinstance(identity, str) or not identity:
        raise InvalidArgument(f"{name} must be a non-empty identity")
    return identity


class FractionLedger:
    """
    Owns each asset's pool count and per-holder balances.

    Invariant after every call, for every asset:
        available_fractions + sum(holder balances) == total_fractions
    """

    def __init__(
        self,
        registry: AssetRegistry,
        settlement: SettlementEngine,
        sink: Optional[NotificationSink] = None,
        transfer_settlement: TransferSettlement = TransferSettlement.PAY_CREATOR,
        price_rounding: str = "floor"
    ):
        self._registry = registry
        self._settlement = settlement
        self._sink = sink
        self._transfer_settlement = TransferSettlement(transfer_settlement)
        self._price_rounding = price_rounding
        self._lock = registry.lock

    @property
    def transfer_settlement(self) -> TransferSettlement:
        return self._transfer_settlement

    @contextmanager
    def _mutation(self, operation: str) -> Iterator[Session]:
        """Serialize a mutation and roll its session back on any error."""
        with self._lock, get_session() as session:
            try:
                yield session
            except LedgerError as e:
                session.rollback()
                logger.warning(f"{operation} rejected ({e.kind}): {e}")
                raise
            except Exception as e:
                session.rollback()
                logger.error(f"{operation} failed: {e}")
                raise

    @staticmethod
    def _load_asset(asset_id, session: Session) -> Asset:
        if not is_valid_id(asset_id):
            raise UnknownAsset(asset_id)
        asset = AssetRepository.get_by_id(asset_id, session=session)
        if asset is None:
            raise UnknownAsset(asset_id)
        return asset

    def buy_fraction(self, asset_id: int, count: int, payment: int, buyer: str) -> int:
        """
        Buy fractions from the pool, paying exactly count * price.

        Args:
            asset_id: Asset to buy into
            count: Fractions to buy (> 0)
            payment: Attached payment; must equal the required amount
            buyer: Buying identity

        Returns:
            The buyer's new balance

        Raises:
            UnknownAsset, InvalidArgument, InsufficientPool,
            PaymentMismatch, TransferFailed
        """
        with self._mutation("buy_fraction") as session:
            asset = self._load_asset(asset_id, session)
            require_integer("count", count, minimum=1)
            require_integer("payment", payment)
            _require_identity("buyer", buyer)
            if count > asset.available_fractions:
                raise InsufficientPool(
                    f"Asset {asset_id} has {asset.available_fractions} fractions available, {count} requested"
                )
            amount = settlement_amount(asset, count, self._price_rounding)
            if payment != amount:
                raise PaymentMismatch(required=amount, attached=payment)

            asset.available_fractions -= count
            session.add(asset)
            balance = HoldingRepository.adjust(asset_id, buyer, count, session=session)

            with self._settlement.transaction() as settlement:
                settlement.collect(buyer, amount)
                session.commit()

        logger.info(f"{buyer} bought {count} fractions of asset {asset_id} for {amount}")
        notify(self._sink, PURCHASE, asset_id, buyer=buyer, count=count, amount=amount)
        return balance

    def sell_fraction(self, asset_id: int, count: int, seller: str) -> int:
        """
        Sell fractions back to the pool for count * price.

        Args:
            asset_id: Asset to sell from
            count: Fractions to sell (> 0)
            seller: Selling identity

        Returns:
            The seller's new balance

        Raises:
            UnknownAsset, InvalidArgument, InsufficientBalance, TransferFailed
        """
        with self._mutation("sell_fraction") as session:
            asset = self._load_asset(asset_id, session)
            require_integer("count", count, minimum=1)
            _require_identity("seller", seller)
            held = HoldingRepository.get_balance(asset_id, seller, session=session)
            if held < count:
                raise InsufficientBalance(f"{seller} holds {held} fractions of asset {asset_id}, {count} requested")
            amount = settlement_amount(asset, count, self._price_rounding)

            balance = HoldingRepository.adjust(asset_id, seller, -count, session=session)
            asset.available_fractions += count
            session.add(asset)

            with self._settlement.transaction() as settlement:
                settlement.pay(seller, amount)
                session.commit()

        logger.info(f"{seller} sold {count} fractions of asset {asset_id} for {amount}")
        notify(self._sink, SALE, asset_id, seller=seller, count=count, amount=amount)
        return balance

    def transfer_fraction(self, asset_id: int, count: int, new_holder: str, from_holder: str) -> Tuple[int, int]:
        """
        Move fractions from one holder to another without touching the pool.

        The receiving holder pays count * price to the beneficiary chosen by
        the transfer_settlement policy: the sender, the creator, or nobody.

        Args:
            asset_id: Asset whose fractions move
            count: Fractions to move (> 0)
            new_holder: Receiving identity
            from_holder: Sending identity

        Returns:
            (sender balance, receiver balance) after the transfer

        Raises:
            UnknownAsset, InvalidArgument, InsufficientBalance, TransferFailed
        """
        with self._mutation("transfer_fraction") as session:
            asset = self._load_asset(asset_id, session)
            require_integer("count", count, minimum=1)
            _require_identity("new_holder", new_holder)
            _require_identity("from_holder", from_holder)
            if new_holder == from_holder:
                raise InvalidArgument("Cannot transfer fractions to the same holder")
            held = HoldingRepository.get_balance(asset_id, from_holder, session=session)
            if held < count:
                raise InsufficientBalance(
                    f"{from_holder} holds {held} fractions of asset {asset_id}, {count} requested"
                )

            beneficiary = self._transfer_beneficiary(from_holder)
            amount = settlement_amount(asset, count, self._price_rounding) if beneficiary else 0

            sender_balance = HoldingRepository.adjust(asset_id, from_holder, -count, session=session)
            receiver_balance = HoldingRepository.adjust(asset_id, new_holder, count, session=session)

            with self._settlement.transaction() as settlement:
                if beneficiary:
                    settlement.relay(new_holder, beneficiary, amount)
                session.commit()

        logger.info(f"{from_holder} transferred {count} fractions of asset {asset_id} to {new_holder}")
        notify(
            self._sink, TRANSFER, asset_id,
            from_holder=from_holder, to_holder=new_holder, count=count,
            amount=amount, payer=new_holder if beneficiary else None, beneficiary=beneficiary
        )
        return sender_balance, receiver_balance

    def _transfer_beneficiary(self, from_holder: str) -> Optional[str]:
        if self._transfer_settlement == TransferSettlement.PAY_SENDER:
            return from_holder
        elif self._transfer_settlement == TransferSettlement.PAY_CREATOR:
            return self._registry.creator
        return None

    def get_holder_balance(self, asset_id: int, holder: str) -> int:
        """Fractions of an asset held by an identity; 0 when it holds none."""
        if not is_valid_id(asset_id) or not isinstance(holder, str):
            return 0
        return HoldingRepository.get_balance(asset_id, holder)

    def audit_conservation(self) -> List[int]:
        """
        Check the pool/holder conservation invariant for every asset.

        Returns:
            Ids of assets whose pool plus holder balances differ from total_fractions
        """
        violations = []
        with get_session() as session:
            for asset in AssetRepository.get_all(session=session):
                held = HoldingRepository.total_held(asset.id, session=session)
                if asset.available_fractions + held != asset.total_fractions or asset.available_fractions < 0:
                    logger.error(
                        f"Asset {asset.id} out of balance: pool {asset.available_fractions} + "
                        f"held {held} != total {asset.total_fractions}"
                    )
                    violations.append(asset.id)
        return violations

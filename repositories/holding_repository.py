"""
Holding Repository - data access layer for Holding model.
Balances are sparse: a missing row reads as zero and a row that drops to zero is removed.
"""

from typing import Optional, Dict
from sqlalchemy import func
from sqlmodel import Session, select

from db_engine import get_engine
from models import Holding


class HoldingRepository:
    """Repository for per-holder fraction balances."""

    @staticmethod
    def get_balance(asset_id: int, holder: str, session: Optional[Session] = None) -> int:
        """
        Read a holder's balance for one asset.

        Args:
            asset_id: Asset ID
            holder: Holder identity
            session: Optional existing session for transaction reuse

        Returns:
            The balance, 0 if the holder has no record
        """
        def _get_balance(sess: Session) -> int:
            holding = sess.get(Holding, (asset_id, holder))
            return holding.balance if holding else 0

        if session is not None:
            return _get_balance(session)
        else:
            with Session(get_engine()) as session:
                return _get_balance(session)

    @staticmethod
    def adjust(asset_id: int, holder: str, delta: int, session: Session) -> int:
        """
        Stage a change to a holder's balance inside the caller's transaction.

        Args:
            asset_id: Asset ID
            holder: Holder identity
            delta: Fractions to add (negative to remove)
            session: Session the change belongs to; the caller commits

        Returns:
            The new balance

        Raises:
            ValueError: if the balance would go negative
        """
        holding = session.get(Holding, (asset_id, holder))
        current = holding.balance if holding else 0
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(f"Balance of {holder} in asset {asset_id} would become {new_balance}")

        if holding is None:
            if new_balance > 0:
                session.add(Holding(asset_id=asset_id, holder=holder, balance=new_balance))
        elif new_balance == 0:
            session.delete(holding)
        else:
            holding.balance = new_balance
            session.add(holding)
        session.flush()
        return new_balance

    @staticmethod
    def get_by_asset(asset_id: int, session: Optional[Session] = None) -> Dict[str, int]:
        """
        Retrieve all non-zero balances for an asset.

        Args:
            asset_id: Asset ID
            session: Optional existing session for transaction reuse

        Returns:
            Mapping of holder identity to balance
        """
        def _get_by_asset(sess: Session) -> Dict[str, int]:
            statement = select(Holding).where(Holding.asset_id == asset_id)
            return {h.holder: h.balance for h in sess.exec(statement).all()}

        if session is not None:
            return _get_by_asset(session)
        else:
            with Session(get_engine()) as session:
                return _get_by_asset(session)

    @staticmethod
    def total_held(asset_id: int, session: Optional[Session] = None) -> int:
        """
        Sum every holder's balance for an asset.

        Args:
            asset_id: Asset ID
            session: Optional existing session for transaction reuse

        Returns:
            Total fractions held outside the pool
        """
        def _total_held(sess: Session) -> int:
            statement = select(func.coalesce(func.sum(Holding.balance), 0)).where(
                Holding.asset_id == asset_id
            )
            return int(sess.exec(statement).one())

        if session is not None:
            return _total_held(session)
        else:
            with Session(get_engine()) as session:
                return _total_held(session)

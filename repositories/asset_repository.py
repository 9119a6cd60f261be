"""
Asset Repository - data access layer for Asset model.
Optimized with optional session parameter for transaction reuse.
"""

from typing import Optional, List
from sqlalchemy import func
from sqlmodel import Session, select

from db_engine import get_engine
from models import Asset


class AssetRepository:
    """Repository for Asset persistence. Assets are never updated in place except for the pool count, and never deleted."""

    @staticmethod
    def next_id(session: Optional[Session] = None) -> int:
        """
        Compute the next sequential asset id (0 for an empty registry).

        Args:
            session: Optional existing session for transaction reuse

        Returns:
            The id the next created asset should receive
        """
        def _next_id(sess: Session) -> int:
            max_id = sess.exec(select(func.max(Asset.id))).first()
            return 0 if max_id is None else max_id + 1

        if session is not None:
            return _next_id(session)
        else:
            with Session(get_engine()) as session:
                return _next_id(session)

    @staticmethod
    def add(
        asset_id: int,
        name: str,
        location: str,
        value: int,
        total_fractions: int,
        session: Optional[Session] = None
    ) -> Asset:
        """
        Stage a new asset with a full fraction pool.
        The caller owns the commit when a session is passed in.

        Args:
            asset_id: Sequential id for the asset
            name: Asset name
            location: Asset location
            value: Declared value in the smallest payment unit
            total_fractions: Number of fractions the asset is split into
            session: Optional existing session for transaction reuse

        Returns:
            Created Asset object
        """
        def _create_asset(sess: Session) -> Asset:
            asset = Asset(
                id=asset_id,
                name=name,
                location=location,
                value=value,
                total_fractions=total_fractions,
                available_fractions=total_fractions
            )
            sess.add(asset)
            sess.flush()
            return asset

        if session is not None:
            return _create_asset(session)
        else:
            with Session(get_engine()) as session:
                asset = _create_asset(session)
                session.commit()
                session.refresh(asset)
                return asset

    @staticmethod
    def get_by_id(asset_id: int, session: Optional[Session] = None) -> Optional[Asset]:
        """
        Retrieve an asset by its ID.

        Args:
            asset_id: Asset ID to look up
            session: Optional existing session for transaction reuse

        Returns:
            Asset object or None if not found
        """
        def _get_by_id(sess: Session) -> Optional[Asset]:
            return sess.get(Asset, asset_id)

        if session is not None:
            return _get_by_id(session)
        else:
            with Session(get_engine()) as session:
                return _get_by_id(session)

    @staticmethod
    def get_all(session: Optional[Session] = None) -> List[Asset]:
        """
        Retrieve all assets in creation order.

        Args:
            session: Optional existing session for transaction reuse

        Returns:
            List of all Asset objects
        """
        def _get_all(sess: Session) -> List[Asset]:
            statement = select(Asset).order_by(Asset.id)
            results = sess.exec(statement)
            return list(results.all())

        if session is not None:
            return _get_all(session)
        else:
            with Session(get_engine()) as session:
                return _get_all(session)

    @staticmethod
    def get_ids(session: Optional[Session] = None) -> List[int]:
        """
        Retrieve every asset id in creation order.

        Args:
            session: Optional existing session for transaction reuse

        Returns:
            List of asset ids
        """
        def _get_ids(sess: Session) -> List[int]:
            statement = select(Asset.id).order_by(Asset.id)
            return list(sess.exec(statement).all())

        if session is not None:
            return _get_ids(session)
        else:
            with Session(get_engine()) as session:
                return _get_ids(session)

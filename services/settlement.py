"""
Settlement engine - moves value that accompanies ledger mutations.
All movements go through a PaymentCustody provider. A SettlementTransaction
records each completed move so it can be reversed if the paired ledger
commit does not happen.
"""

import logging
import threading
from collections import defaultdict
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Protocol, Tuple

from errors import InvalidArgument, TransferFailed
from services.common import is_integer

logger = logging.getLogger(__name__)


class CustodyRejected(Exception):
    """Raised by a custody provider that refuses a movement."""


class CompensationFailed(TransferFailed):
    """One or more settlement moves could not be reversed after a failure."""

    def __init__(self, message: str, unreversed: List[Tuple[str, str, int]]):
        super().__init__(message)
        self.unreversed = unreversed


class PaymentCustody(Protocol):
    """Value-movement primitive supplied by the host environment."""

    def transfer(self, source: str, destination: str, amount: int) -> None:
        """Move amount from source to destination or raise CustodyRejected without side effects."""
        ...


class InMemoryCustody:
    """
    Thread-safe account book implementing PaymentCustody.
    Overdrafts are rejected before any account is touched.
    """

    def __init__(self, balances: Optional[Dict[str, int]] = None):
        self._lock = threading.Lock()
        self._balances: Dict[str, int] = defaultdict(int)
        for account, amount in (balances or {}).items():
            self.deposit(account, amount)

    def deposit(self, account: str, amount: int) -> int:
        """Credit an account from outside the ledger. Returns the new balance."""
        if not is_integer(amount) or amount < 0:
            raise ValueError(f"Deposit must be a non-negative integer, got {amount!r}")
        with self._lock:
            self._balances[account] += amount
            return self._balances[account]

    def balance_of(self, account: str) -> int:
        with self._lock:
            return self._balances.get(account, 0)

    def transfer(self, source: str, destination: str, amount: int) -> None:
        with self._lock:
            available = self._balances.get(source, 0)
            if amount < 0:
                raise CustodyRejected(f"Negative amount {amount}")
            if available < amount:
                raise CustodyRejected(
                    f"Account {source} holds {available}, cannot move {amount}"
                )
            self._balances[source] = available - amount
            self._balances[destination] += amount


class SettlementEngine:
    """
    Moves value between participants and the treasury account.

    collect() debits a participant into the treasury; pay() credits a
    participant out of the treasury. The treasury is the asset creator's
    account.
    """

    def __init__(self, custody: PaymentCustody, treasury: str):
        self.custody = custody
        self.treasury = treasury

    def collect(self, source: str, amount: int) -> Tuple[str, str, int]:
        """
        Move amount from a participant into the treasury.

        Args:
            source: Paying identity
            amount: Non-negative integer amount

        Returns:
            The (source, destination, amount) move that was applied

        Raises:
            InvalidArgument: on negative or non-integer amounts
            TransferFailed: if the custody provider rejects the move
        """
        return self._move(source, self.treasury, amount)

    def pay(self, destination: str, amount: int) -> Tuple[str, str, int]:
        """
        Move amount from the treasury to a participant.

        Args:
            destination: Receiving identity
            amount: Non-negative integer amount

        Returns:
            The (source, destination, amount) move that was applied

        Raises:
            InvalidArgument: on negative or non-integer amounts
            TransferFailed: if the custody provider rejects the move
        """
        return self._move(self.treasury, destination, amount)

    def relay(self, source: str, destination: str, amount: int) -> Tuple[str, str, int]:
        """
        Move amount directly between two participants.

        Raises:
            InvalidArgument: on negative or non-integer amounts
            TransferFailed: if the custody provider rejects the move
        """
        return self._move(source, destination, amount)

    def _move(self, source: str, destination: str, amount: int) -> Tuple[str, str, int]:
        if not is_integer(amount) or amount < 0:
            raise InvalidArgument(f"Settlement amount must be a non-negative integer, got {amount!r}")
        if amount == 0 or source == destination:
            return (source, destination, 0)
        try:
            self.custody.transfer(source, destination, amount)
        except CustodyRejected as e:
            logger.warning(f"Custody rejected {amount} from {source} to {destination}: {e}")
            raise TransferFailed(str(e)) from e
        logger.debug(f"Settled {amount} from {source} to {destination}")
        return (source, destination, amount)

    @contextmanager
    def transaction(self) -> Iterator["SettlementTransaction"]:
        """
        Group moves so they are reversed if the enclosed block raises.

        Usage:
            with engine.transaction() as settlement:
                settlement.collect(buyer, amount)
                session.commit()
        """
        unit = SettlementTransaction(self)
        try:
            yield unit
        except BaseException as e:
            unit.rollback(cause=e)
            raise


class SettlementTransaction:
    """Moves applied inside one SettlementEngine.transaction() block."""

    def __init__(self, engine: SettlementEngine):
        self._engine = engine
        self.moves: List[Tuple[str, str, int]] = []

    def collect(self, source: str, amount: int) -> None:
        self._record(self._engine.collect(source, amount))

    def pay(self, destination: str, amount: int) -> None:
        self._record(self._engine.pay(destination, amount))

    def relay(self, source: str, destination: str, amount: int) -> None:
        self._record(self._engine.relay(source, destination, amount))

    def _record(self, move: Tuple[str, str, int]) -> None:
        if move[2] > 0:
            self.moves.append(move)

    def rollback(self, cause: Optional[BaseException] = None) -> None:
        """
        Reverse applied moves, newest first.

        Every move is attempted even if an earlier reversal fails; failures are
        collected and raised together as CompensationFailed chained to cause.
        """
        unreversed = []
        while self.moves:
            source, destination, amount = self.moves.pop()
            try:
                self._engine.custody.transfer(destination, source, amount)
            except Exception as e:
                logger.error(
                    f"Compensation failed: could not return {amount} from {destination} to {source}: {e}"
                )
                unreversed.append((source, destination, amount))
                continue
            logger.info(f"Reversed settlement of {amount} from {source} to {destination}")

        if unreversed:
            raise CompensationFailed(
                f"{len(unreversed)} settlement move(s) could not be reversed", unreversed
            ) from cause

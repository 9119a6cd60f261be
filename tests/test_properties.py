"""
Property tests over random operation sequences.

Tests cover:
- Conservation: pool + holder balances == total fractions
- No negative balances or pool counts
- Exact-payment enforcement
- Atomicity: a rejected operation changes neither the ledger nor custody
- Value conservation across custody accounts
"""

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from config import TransferSettlement
from db_engine import init_db, reset_engine
from errors import LedgerError, PaymentMismatch
from repositories import HoldingRepository
from services import (
    AssetRegistry,
    FractionLedger,
    InMemoryCustody,
    QueryService,
    SettlementEngine,
)

CREATOR = "owner"
HOLDERS = ["alice", "bob", "carol"]
FUNDS = 500

operation = st.tuples(
    st.sampled_from(["buy", "sell", "transfer"]),
    st.sampled_from(HOLDERS),
    st.sampled_from(HOLDERS),
    st.integers(min_value=-1, max_value=8),
    st.sampled_from([0, 0, 0, 1, -1]),  # payment error on buys
)

fixture_settings = settings(
    max_examples=40,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)


def build_ledger(policy=TransferSettlement.PAY_CREATOR):
    """Fresh database and components for one generated example."""
    reset_engine()
    init_db()
    custody = InMemoryCustody({h: FUNDS for h in HOLDERS})
    registry = AssetRegistry(creator=CREATOR)
    ledger = FractionLedger(
        registry=registry,
        settlement=SettlementEngine(custody, treasury=CREATOR),
        transfer_settlement=policy,
    )
    return registry, ledger, custody


def observe(ledger, custody, asset_id):
    return (
        QueryService.get_asset(asset_id)['available_fractions'],
        HoldingRepository.get_by_asset(asset_id),
        {a: custody.balance_of(a) for a in HOLDERS + [CREATOR]},
    )


@fixture_settings
@given(
    ops=st.lists(operation, max_size=25),
    policy=st.sampled_from(list(TransferSettlement)),
    value=st.integers(min_value=0, max_value=200),
    total=st.integers(min_value=1, max_value=12),
)
def test_random_sequences_preserve_invariants(ops, policy, value, total):
    registry, ledger, custody = build_ledger(policy)
    asset_id = registry.create_asset("Prop", "Somewhere", value, total, caller=CREATOR)
    price = value // total
    money_supply = FUNDS * len(HOLDERS)

    for kind, holder, other, count, payment_error in ops:
        before = observe(ledger, custody, asset_id)
        try:
            if kind == "buy":
                ledger.buy_fraction(asset_id, count, count * price + payment_error, holder)
            elif kind == "sell":
                ledger.sell_fraction(asset_id, count, holder)
            else:
                ledger.transfer_fraction(asset_id, count, other, holder)
        except LedgerError:
            assert observe(ledger, custody, asset_id) == before

        pool, balances, accounts = observe(ledger, custody, asset_id)
        assert pool >= 0
        assert all(b > 0 for b in balances.values())
        assert pool + sum(balances.values()) == total
        assert all(a >= 0 for a in accounts.values())
        assert sum(accounts.values()) == money_supply
        assert ledger.audit_conservation() == []


@fixture_settings
@given(
    count=st.integers(min_value=1, max_value=10),
    payment=st.integers(min_value=-5, max_value=120),
)
def test_buy_succeeds_iff_payment_is_exact(count, payment):
    registry, ledger, custody = build_ledger()
    asset_id = registry.create_asset("Prop", "Somewhere", 100, 10, caller=CREATOR)
    required = count * 10

    try:
        ledger.buy_fraction(asset_id, count, payment, "alice")
    except PaymentMismatch:
        assert payment != required
        assert ledger.get_holder_balance(asset_id, "alice") == 0
        assert QueryService.get_asset(asset_id)['available_fractions'] == 10
    else:
        assert payment == required
        assert ledger.get_holder_balance(asset_id, "alice") == count
        assert custody.balance_of(CREATOR) == required

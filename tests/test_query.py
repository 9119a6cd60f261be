"""
Tests for QueryService and the pricing helpers it shares with the ledger.
"""

import pytest

from errors import InvalidArgument, UnknownAsset
from services import price_per_fraction

CREATOR = "owner"


class TestGetAsset:

    def test_returns_details(self, ledger_app, asset_id):
        assert ledger_app.query.get_asset(asset_id) == {
            'name': "Sample Property",
            'location': "Sample Location",
            'value': 100,
            'available_fractions': 10,
        }

    @pytest.mark.parametrize("bad_id", [1, -1, "0", None])
    def test_unknown_asset(self, ledger_app, asset_id, bad_id):
        with pytest.raises(UnknownAsset):
            ledger_app.query.get_asset(bad_id)

    def test_reflects_pool_after_purchase(self, ledger_app, asset_id):
        ledger_app.ledger.buy_fraction(asset_id, 3, payment=30, buyer="alice")
        assert ledger_app.query.get_asset(asset_id)['available_fractions'] == 7

    def test_repeated_reads_are_identical(self, ledger_app, asset_id):
        ledger_app.ledger.buy_fraction(asset_id, 3, payment=30, buyer="alice")
        assert ledger_app.query.get_asset(asset_id) == ledger_app.query.get_asset(asset_id)
        assert ledger_app.query.get_assets() == ledger_app.query.get_assets()


class TestGetAssets:

    def test_empty_registry(self, ledger_app):
        assert ledger_app.query.get_assets() == []

    def test_creation_order(self, ledger_app):
        for i in range(4):
            ledger_app.registry.create_asset(f"A{i}", "X", 10, 2, caller=CREATOR)
        assert ledger_app.query.get_assets() == [0, 1, 2, 3]

    def test_sold_out_assets_still_listed(self, ledger_app, asset_id):
        ledger_app.ledger.buy_fraction(asset_id, 10, payment=100, buyer="alice")
        assert ledger_app.query.get_assets() == [asset_id]


class TestPricePerFraction:

    def test_floor_division(self):
        assert price_per_fraction(100, 10) == 10
        assert price_per_fraction(100, 3) == 33
        assert price_per_fraction(5, 10) == 0

    def test_ceil_rounding(self):
        assert price_per_fraction(100, 3, rounding="ceil") == 34
        assert price_per_fraction(100, 10, rounding="ceil") == 10

    def test_zero_fractions_rejected(self):
        with pytest.raises(InvalidArgument):
            price_per_fraction(100, 0)


def test_ceil_rounding_setting_reaches_ledger(monkeypatch):
    from app import create_app
    from config import reload_settings
    from services import InMemoryCustody

    monkeypatch.setenv("PRICE_ROUNDING", "ceil")
    reload_settings()
    app = create_app(custody=InMemoryCustody({"alice": 100}))
    asset_id = app.registry.create_asset("A", "X", 100, 3, caller=CREATOR)

    app.ledger.buy_fraction(asset_id, 2, payment=68, buyer="alice")
    assert app.custody.balance_of(CREATOR) == 68

"""Aggregation tests - holdings, summary/APY, chart series and projections."""

from datetime import date

import pytest

from savings.services.aggregation import (
    AssetInfo,
    LedgerEntry,
    Quote,
    build_portfolio,
    compute_apy,
    compute_chart_series,
    compute_holdings,
    compute_portfolio_summary,
    compute_projections,
)

BTC = AssetInfo("BTC", "Bitcoin", 25.0)
GOLD = AssetInfo("GOLD", "Gold", 8.0)
USD = AssetInfo("USD", "US Dollar", 0.0)


def entry(day, amount, asset="BTC", usd_value=100.0, usd_cumulative=100.0):
    return LedgerEntry(
        transaction_date=day,
        amount=amount,
        asset_name=asset,
        usd_value_at_tx=usd_value,
        usd_cumulative=usd_cumulative,
    )


class TestBitcoinScenario:
    """One BTC bought for 20k, now worth 60k at a 35 THB rate."""

    @pytest.fixture
    def ledger(self):
        return [entry(date(2023, 1, 1), 1.0, "BTC", 20000.0, 20000.0)]

    @pytest.fixture
    def quote(self):
        return Quote(usdthb_rate=35.0, prices={"BTC": 60000.0})

    def test_holding(self, ledger, quote):
        [holding] = compute_holdings(ledger, [BTC], quote)
        assert holding.asset_name == "BTC"
        assert holding.display_name == "Bitcoin"
        assert holding.total_amount == 1.0
        assert holding.current_value_usd == 60000.0
        assert holding.current_value_thb == 2100000.0
        assert holding.cagr_percent == 25.0

    def test_summary(self, ledger, quote):
        holdings = compute_holdings(ledger, [BTC], quote)
        summary = compute_portfolio_summary(ledger, holdings, quote, today=date(2024, 1, 1))
        assert summary.total_value_usd == 60000.0
        assert summary.total_value_thb == 2100000.0
        assert summary.total_cost_usd == 20000.0
        assert summary.profit_usd == 40000.0
        assert summary.profit_percent == 200.0
        # 365 days elapsed -> exactly one year, tripled
        assert summary.apy_percent == pytest.approx(200.0)

    def test_projection_one_year(self, ledger, quote):
        [projection] = compute_projections(ledger, [BTC], quote, years=1)
        assert projection.current_value_usd == 60000.0
        assert projection.future_value_usd == pytest.approx(75000.0)
        assert projection.years == 1


class TestHoldings:
    """Grouping, sorting and tolerant catalog join"""

    def test_amounts_are_conserved_per_asset(self):
        ledger = [
            entry(date(2024, 1, 1), 0.5, "BTC"),
            entry(date(2024, 1, 2), 10.0, "GOLD"),
            entry(date(2024, 1, 3), -0.2, "BTC"),
            entry(date(2024, 1, 4), 2.5, "GOLD"),
            entry(date(2024, 1, 5), 100.0, "USD"),
        ]
        quote = Quote(usdthb_rate=35.0, prices={"BTC": 50000.0, "GOLD": 2000.0, "USD": 1.0})
        holdings = {h.asset_name: h for h in compute_holdings(ledger, [BTC, GOLD, USD], quote)}

        for symbol in ("BTC", "GOLD", "USD"):
            expected = sum(tx.amount for tx in ledger if tx.asset_name == symbol)
            assert holdings[symbol].total_amount == pytest.approx(expected)

    def test_sorted_by_usd_value_descending(self):
        ledger = [
            entry(date(2024, 1, 1), 100.0, "USD"),
            entry(date(2024, 1, 1), 1.0, "BTC"),
            entry(date(2024, 1, 1), 1.0, "GOLD"),
        ]
        quote = Quote(usdthb_rate=35.0, prices={"BTC": 50000.0, "GOLD": 2000.0, "USD": 1.0})
        holdings = compute_holdings(ledger, [BTC, GOLD, USD], quote)
        assert [h.asset_name for h in holdings] == ["BTC", "GOLD", "USD"]

    def test_missing_price_yields_zero_value(self):
        ledger = [entry(date(2024, 1, 1), 3.0, "GOLD")]
        [holding] = compute_holdings(ledger, [GOLD], Quote(usdthb_rate=35.0, prices={}))
        assert holding.total_amount == 3.0
        assert holding.current_value_usd == 0.0
        assert holding.current_value_thb == 0.0

    def test_unknown_symbol_uses_raw_name(self):
        ledger = [entry(date(2024, 1, 1), 2.0, "ETH")]
        [holding] = compute_holdings(ledger, [BTC], Quote(usdthb_rate=35.0, prices={"ETH": 3000.0}))
        assert holding.display_name == "ETH"
        assert holding.cagr_percent == 0.0
        assert holding.current_value_usd == 6000.0

    def test_empty_ledger(self):
        assert compute_holdings([], [BTC], Quote(usdthb_rate=35.0)) == []


class TestSummary:
    """Totals, profit and APY edge cases"""

    def test_empty_ledger_is_all_zero(self):
        quote = Quote(usdthb_rate=35.0)
        summary = compute_portfolio_summary([], [], quote)
        assert summary.total_value_usd == 0
        assert summary.total_cost_usd == 0
        assert summary.profit_percent == 0
        assert summary.apy_percent == 0

    def test_cost_is_max_cumulative_not_sum(self):
        ledger = [
            entry(date(2024, 1, 1), 1.0, "USD", usd_value=100.0, usd_cumulative=100.0),
            entry(date(2024, 2, 1), 1.0, "USD", usd_value=150.0, usd_cumulative=250.0),
            entry(date(2024, 3, 1), 1.0, "USD", usd_value=50.0, usd_cumulative=300.0),
        ]
        quote = Quote(usdthb_rate=35.0, prices={"USD": 1.0})
        summary = compute_portfolio_summary(ledger, compute_holdings(ledger, [USD], quote), quote)
        assert summary.total_cost_usd == 300.0

    def test_zero_cost_never_divides(self):
        ledger = [entry(date(2020, 1, 1), 1.0, "BTC", usd_value=0.0, usd_cumulative=0.0)]
        quote = Quote(usdthb_rate=35.0, prices={"BTC": 60000.0})
        summary = compute_portfolio_summary(ledger, compute_holdings(ledger, [BTC], quote), quote)
        assert summary.profit_usd == 60000.0
        assert summary.profit_percent == 0.0
        assert summary.apy_percent == 0.0

    def test_apy_zero_on_first_day(self):
        ledger = [entry(date(2024, 5, 1), 1.0, usd_cumulative=100.0)]
        assert compute_apy(ledger, 150.0, 100.0, today=date(2024, 5, 1)) == 0.0

    def test_apy_zero_for_future_dated_ledger(self):
        ledger = [entry(date(2030, 1, 1), 1.0, usd_cumulative=100.0)]
        assert compute_apy(ledger, 150.0, 100.0, today=date(2024, 5, 1)) == 0.0

    def test_apy_uses_earliest_date(self):
        ledger = [
            entry(date(2023, 1, 1), 1.0, usd_cumulative=200.0),
            entry(date(2022, 1, 1), 1.0, usd_cumulative=100.0),
        ]
        # Two 365-day years, value x4 -> doubling per year
        apy = compute_apy(ledger, 800.0, 200.0, today=date(2024, 1, 1))
        assert apy == pytest.approx(100.0, rel=1e-3)

    def test_apy_loss_is_negative(self):
        ledger = [entry(date(2023, 1, 1), 1.0, usd_cumulative=100.0)]
        assert compute_apy(ledger, 50.0, 100.0, today=date(2024, 1, 1)) == pytest.approx(-50.0)

    def test_apy_non_finite_falls_back_to_zero(self):
        ledger = [entry(date(2023, 1, 1), 1.0, usd_cumulative=100.0)]
        # Negative portfolio value to a fractional power is not a real number
        assert compute_apy(ledger, -50.0, 100.0, today=date(2023, 7, 1)) == 0.0
        # Tiny time span blows up the exponent
        assert compute_apy(ledger, 1e300, 1e-300, today=date(2023, 1, 2)) == 0.0


class TestChartSeries:
    """One point per transaction, in date order"""

    def test_points_sorted_and_converted(self):
        ledger = [
            entry(date(2024, 3, 1), 1.0, usd_cumulative=300.0),
            entry(date(2024, 1, 1), 1.0, usd_cumulative=100.0),
            entry(date(2024, 2, 1), 1.0, usd_cumulative=200.0),
        ]
        points = compute_chart_series(ledger, 35.0)
        assert [p.date for p in points] == [date(2024, 1, 1), date(2024, 2, 1), date(2024, 3, 1)]
        assert [p.value_usd for p in points] == [100.0, 200.0, 300.0]
        assert [p.value_thb for p in points] == [3500.0, 7000.0, 10500.0]

    def test_same_day_entries_are_not_merged(self):
        day = date(2024, 1, 1)
        ledger = [
            entry(day, 1.0, "BTC", usd_cumulative=100.0),
            entry(day, 1.0, "GOLD", usd_cumulative=150.0),
        ]
        assert len(compute_chart_series(ledger, 35.0)) == 2

    def test_empty(self):
        assert compute_chart_series([], 35.0) == []


class TestProjections:
    """CAGR compounding per asset"""

    @pytest.fixture
    def ledger(self):
        return [
            entry(date(2024, 1, 1), 1.0, "BTC"),
            entry(date(2024, 1, 1), 10.0, "GOLD"),
            entry(date(2024, 1, 1), 500.0, "USD"),
        ]

    @pytest.fixture
    def quote(self):
        return Quote(usdthb_rate=35.0, prices={"BTC": 50000.0, "GOLD": 2000.0, "USD": 1.0})

    def test_monotonic_in_years(self, ledger, quote):
        assets = [BTC, GOLD, USD]
        for years_1, years_2 in [(0, 1), (1, 5), (5, 30)]:
            first = {p.asset_name: p.future_value_usd for p in compute_projections(ledger, assets, quote, years_1)}
            second = {p.asset_name: p.future_value_usd for p in compute_projections(ledger, assets, quote, years_2)}
            for symbol in ("BTC", "GOLD"):
                assert second[symbol] >= first[symbol]
            # Zero CAGR stays flat
            assert second["USD"] == first["USD"] == 500.0

    def test_sorted_and_compounded(self, ledger, quote):
        projections = compute_projections(ledger, [BTC, GOLD, USD], quote, years=2)
        assert [p.asset_name for p in projections] == ["BTC", "GOLD", "USD"]
        assert projections[0].future_value_usd == pytest.approx(50000.0 * 1.25 ** 2)
        assert projections[1].future_value_usd == pytest.approx(20000.0 * 1.08 ** 2)

    def test_years_outside_ui_range_are_not_clamped(self, ledger, quote):
        [btc, *_] = compute_projections(ledger, [BTC, GOLD, USD], quote, years=50)
        assert btc.future_value_usd == pytest.approx(50000.0 * 1.25 ** 50)
        assert btc.years == 50

    def test_unknown_asset_has_flat_projection(self):
        ledger = [entry(date(2024, 1, 1), 2.0, "ETH")]
        [projection] = compute_projections(ledger, [BTC], Quote(usdthb_rate=35.0, prices={"ETH": 1000.0}), years=10)
        assert projection.display_name == "ETH"
        assert projection.future_value_usd == projection.current_value_usd == 2000.0


def test_build_portfolio_bundles_every_view():
    ledger = [entry(date(2023, 1, 1), 1.0, "BTC", 20000.0, 20000.0)]
    quote = Quote(usdthb_rate=35.0, prices={"BTC": 60000.0}, degraded=True)

    snapshot = build_portfolio(ledger, [BTC], quote, years=1, today=date(2024, 1, 1))

    assert snapshot.quote is quote
    assert snapshot.holdings[0].current_value_usd == 60000.0
    assert snapshot.summary.profit_percent == 200.0
    assert len(snapshot.chart) == 1
    assert snapshot.projections[0].future_value_usd == pytest.approx(75000.0)

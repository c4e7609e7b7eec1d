"""Tests for the payout calculator."""

from types import SimpleNamespace

import numpy as np
import pytest

from cropwatch.ypk import (
    DisasterContext,
    PayoutCalculation,
    PayoutCalculator,
    PayoutTier,
    YieldLossEstimator,
    format_inr,
    round_currency,
)

from conftest import make_farm


@pytest.fixture
def calculator():
    return PayoutCalculator()


@pytest.fixture
def flood_estimate():
    return YieldLossEstimator().estimate(0.45, 0.75, "flood")


class TestCalculate:
    def test_flood_reference_case(self, calculator, flood_estimate):
        farm = make_farm(insurance_value=250000)
        result = calculator.calculate(farm, flood_estimate)
        assert result.base_payout == 150000
        assert result.final_payout == 156750
        assert result.factors["weather"].value == 1.1
        assert result.factors["weather"].applied is True
        assert result.factors["government"].value == 1.0
        assert result.factors["market"].value == 0.95
        assert result.recommendation == PayoutTier.STANDARD_APPROVAL
        assert result.farm_id == farm.farm_id

    def test_calculation_steps(self, calculator, flood_estimate):
        result = calculator.calculate(make_farm(insurance_value=250000), flood_estimate)
        steps = result.calculation_steps
        assert [s.step for s in steps] == [1, 2, 3, 4]
        assert [s.description for s in steps] == [
            "Base Payout Calculation", "Weather Factor", "Government Rate", "Market Adjustment",
        ]
        assert steps[0].result == "₹1,50,000"
        assert steps[1].result == "₹1,65,000"
        assert steps[2].result == "₹1,65,000"
        assert steps[3].result == "₹1,56,750"
        assert "60.0% yield loss" in steps[0].formula
        assert result.summary == "Final Payout: ₹1,56,750 (60.0% yield loss)"

    def test_no_weather_factor_without_rain(self, calculator):
        estimate = YieldLossEstimator().estimate(0.45, 0.75, "drought")
        result = calculator.calculate(make_farm(insurance_value=250000), estimate)
        assert result.factors["weather"].value == 1.0
        assert result.factors["weather"].applied is False
        assert result.final_payout == 142500

    def test_heavy_rainfall_context(self, calculator):
        estimate = YieldLossEstimator().estimate(0.45, 0.75, "drought")
        result = calculator.calculate(
            make_farm(insurance_value=250000), estimate, DisasterContext(heavy_rainfall=True)
        )
        assert result.final_payout == 156750

    @pytest.mark.parametrize("insured,tier", [
        (400000, PayoutTier.SENIOR_APPROVAL),
        (250000, PayoutTier.STANDARD_APPROVAL),
        (100000, PayoutTier.FAST_TRACK),
    ])
    def test_tiers(self, calculator, flood_estimate, insured, tier):
        result = calculator.calculate(make_farm(insurance_value=insured), flood_estimate)
        assert result.recommendation == tier

    def test_breakdown(self, calculator, flood_estimate):
        result = calculator.calculate(make_farm(insurance_value=250000), flood_estimate)
        assert result.breakdown["insurance_value"] == 250000
        assert result.breakdown["yield_loss_percentage"] == 60.0
        assert result.breakdown["ndvi_drop"] == 40.0

    def test_numpy_inputs(self, calculator):
        estimate = YieldLossEstimator().estimate(np.float64(0.45), np.float64(0.75), "flood")
        result = calculator.calculate(make_farm(insurance_value=np.float64(250000)), estimate)
        assert result.final_payout == 156750
        assert result.summary == "Final Payout: ₹1,56,750 (60.0% yield loss)"

    def test_round_trip_dict(self, calculator, flood_estimate):
        result = calculator.calculate(make_farm(), flood_estimate)
        assert PayoutCalculation.from_dict(result.to_dict()) == result


class TestBatchAndRegional:
    def test_batch_skips_unaffected(self, calculator):
        estimator = YieldLossEstimator()
        pairs = [
            (make_farm(1), estimator.estimate(0.45, 0.75, "flood")),
            (make_farm(2), estimator.estimate(0.74, 0.75)),
        ]
        results = calculator.calculate_batch(pairs)
        assert [r.farm_id for r in results] == [1]

    def test_regional(self):
        payouts = [SimpleNamespace(final_payout=v) for v in (50000, 150000, 250000, 350000)]
        regional = PayoutCalculator.calculate_regional(payouts)
        assert regional["total_payout"] == 800000
        assert regional["average_payout"] == 200000
        assert regional["max_payout"] == 350000
        assert regional["min_payout"] == 50000
        assert regional["farms_with_payout"] == 4
        assert regional["total_payout_crores"] == 0.08
        assert regional["distribution"] == {
            "below_1l": 1, "1l_to_2l": 1, "2l_to_3l": 1, "3l_and_above": 1,
        }
        assert regional["formatted_total"] == "₹8,00,000"

    def test_regional_empty(self):
        regional = PayoutCalculator.calculate_regional([])
        assert regional["total_payout"] == 0
        assert regional["average_payout"] == 0
        assert regional["farms_with_payout"] == 0

    def test_summarize(self, calculator, flood_estimate):
        farm = make_farm(insurance_value=250000)
        card = calculator.summarize(farm, calculator.calculate(farm, flood_estimate))
        assert card["village"] == "Nesari"
        assert card["recommended_payout"] == "₹1,56,750"
        assert card["yield_loss"] == "60.0%"
        assert card["priority"] == "normal"

    @pytest.mark.parametrize("amount,category", [
        (50000, "low"), (100000, "medium"), (250000, "high"), (300000, "critical"),
    ])
    def test_categorize(self, amount, category):
        assert PayoutCalculator.categorize(amount)["category"] == category


class TestCurrency:
    @pytest.mark.parametrize("amount,text", [
        (0, "₹0"),
        (999, "₹999"),
        (1000, "₹1,000"),
        (156750, "₹1,56,750"),
        (1234567, "₹12,34,567"),
        (10000000, "₹1,00,00,000"),
        (156750.4, "₹1,56,750"),
    ])
    def test_format_inr(self, amount, text):
        assert format_inr(amount) == text

    def test_numpy_amounts(self):
        assert round_currency(np.float64(2.5)) == 3
        assert format_inr(np.float64(156750.4)) == "₹1,56,750"
        regional = PayoutCalculator.calculate_regional(
            [SimpleNamespace(final_payout=np.int64(150000))]
        )
        assert regional["total_payout"] == 150000

    def test_round_half_up(self):
        assert round_currency(2.5) == 3
        assert round_currency(3.5) == 4
        assert round_currency(156750.00000000003) == 156750

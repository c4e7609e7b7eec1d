"""Tests for the yield-loss estimator."""

import pytest

from cropwatch.errors import ValidationError
from cropwatch.ypk import YieldLossEstimate, YieldLossEstimator, YieldLossStatus, ndvi_drop_percentage


@pytest.fixture
def estimator():
    return YieldLossEstimator()


class TestEstimate:
    def test_flood_reference_case(self, estimator):
        result = estimator.estimate(0.45, 0.75, "flood")
        assert result.affected is True
        assert result.ndvi_drop == 40.0
        assert result.yield_loss == 60.0
        assert result.confidence == 89.0
        assert result.status == YieldLossStatus.CRITICAL
        assert result.disaster_type == "flood"
        assert result.recommendation == "Field verification recommended within 48 hours"
        assert result.calculation["multiplier"] == 1.5
        assert result.calculation["capped_result"] == "60.00%"

    def test_below_threshold_is_unaffected(self, estimator):
        result = estimator.estimate(0.71, 1.0)
        assert result.affected is False
        assert result.yield_loss == 0.0
        assert result.confidence == 95.0
        assert result.status == YieldLossStatus.UNAFFECTED
        assert result.disaster_type == "none"

    def test_severe_band(self, estimator):
        result = estimator.estimate(0.5, 1.0)
        assert result.yield_loss == 75.0
        assert result.status == YieldLossStatus.SEVERE
        assert result.disaster_type == "unknown"
        assert result.recommendation.startswith("Immediate field inspection")

    def test_affected_band(self, estimator):
        result = estimator.estimate(0.68, 1.0, "pest")
        assert result.status == YieldLossStatus.AFFECTED
        assert result.yield_loss == 48.0
        assert result.recommendation.startswith("Standard claim processing")

    def test_yield_loss_capped_at_100(self, estimator):
        result = estimator.estimate(0.1, 0.9)
        assert result.yield_loss == 100.0
        assert result.calculation["raw_result"] == "133.33%"
        assert result.confidence == 93.9

    def test_rounding(self, estimator):
        result = estimator.estimate(0.5, 0.77)
        assert result.ndvi_drop == round(result.ndvi_drop, 2)
        assert result.yield_loss == round(result.yield_loss, 2)
        assert result.confidence == round(result.confidence, 1)

    def test_invalid_baseline(self, estimator):
        with pytest.raises(ValidationError):
            estimator.estimate(0.5, 0)
        with pytest.raises(ValueError):
            ndvi_drop_percentage(0.5, -1)

    def test_counts_estimates(self, estimator):
        estimator.estimate(0.45, 0.75)
        estimator.estimate(0.75, 0.75)
        assert estimator.stats["estimate_count"] == 2


class TestHelpers:
    def test_estimate_batch(self, estimator):
        results = estimator.estimate_batch([
            {"farm_id": 1, "farmer_name": "a", "current_ndvi": 0.45, "baseline_ndvi": 0.75},
            {"farm_id": 2, "current_ndvi": 0.74, "baseline_ndvi": 0.75},
        ])
        assert [r["farm_id"] for r in results] == [1, 2]
        assert results[0]["yield_loss"] == 60.0
        assert results[1]["affected"] is False

    @pytest.mark.parametrize("loss,category", [
        (0, "none"), (10, "minor"), (25, "moderate"), (60, "severe"), (75, "critical"),
    ])
    def test_categorize(self, loss, category):
        assert YieldLossEstimator.categorize(loss)["category"] == category

    def test_actual_yield(self):
        result = YieldLossEstimator.actual_yield(20.0, 60.0)
        assert result["actual_yield"] == 8.0
        assert result["loss_amount"] == 12.0

    def test_round_trip_dict(self, estimator):
        result = estimator.estimate(0.45, 0.75, "flood")
        assert YieldLossEstimate.from_dict(result.to_dict()) == result

    def test_from_dict_rejects_garbage(self):
        with pytest.raises(ValidationError):
            YieldLossEstimate.from_dict({"affected": True})

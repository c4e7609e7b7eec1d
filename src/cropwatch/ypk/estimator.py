"""
Yield-Loss Estimator

Deterministic mapping from an NDVI drop to an estimated yield loss.
This is the load-bearing formula behind every claim decision, so it is a
fixed linear rule rather than a trained model, and every intermediate value
is kept in the result for audit.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from ..errors import ValidationError
from .results import YieldLossEstimate, YieldLossStatus

logger = logging.getLogger(__name__)


def ndvi_drop_percentage(current_ndvi: float, baseline_ndvi: float) -> float:
    """Relative decline of the current NDVI from baseline, in percent."""
    if baseline_ndvi is None or baseline_ndvi <= 0:
        raise ValidationError(f"Baseline NDVI must be positive: {baseline_ndvi}", field="baseline_ndvi")
    if current_ndvi is None:
        raise ValidationError("Current NDVI is required", field="current_ndvi")
    return float((baseline_ndvi - current_ndvi) / baseline_ndvi * 100)


class YieldLossEstimator:
    """
    Yield loss = NDVI drop x 1.5, capped at 100%.

    Thresholds:
        - NDVI drop < 30%: Unaffected (no loss)
        - yield loss >= 50%: Critical
        - yield loss >= 75%: Severe
        - otherwise: Affected
    """

    AFFECTED_DROP_THRESHOLD = 30.0
    MULTIPLIER = 1.5
    MAX_YIELD_LOSS = 100.0
    BASE_CONFIDENCE = 85.0
    UNAFFECTED_CONFIDENCE = 95.0
    MAX_CONFIDENCE = 98.0
    CRITICAL_THRESHOLD = 50.0
    SEVERE_THRESHOLD = 75.0

    def __init__(self):
        self._estimate_count = 0

    def estimate(
        self,
        current_ndvi: float,
        baseline_ndvi: float,
        disaster_type: Optional[str] = None,
    ) -> YieldLossEstimate:
        """
        Estimate yield loss from an NDVI reading.

        Args:
            current_ndvi: Latest observed NDVI
            baseline_ndvi: Expected healthy NDVI for the farm
            disaster_type: Suspected cause (flood, drought, pest, ...)

        Returns:
            YieldLossEstimate with the calculation breakdown

        Raises:
            ValidationError: If the baseline is not positive
        """
        self._estimate_count += 1
        ndvi_drop = ndvi_drop_percentage(current_ndvi, baseline_ndvi)

        if ndvi_drop < self.AFFECTED_DROP_THRESHOLD:
            return YieldLossEstimate(
                affected=False,
                yield_loss=0.0,
                confidence=self.UNAFFECTED_CONFIDENCE,
                status=YieldLossStatus.UNAFFECTED,
                ndvi_drop=round(ndvi_drop, 2),
                disaster_type=disaster_type or "none",
                message="Crop health is within acceptable range",
                recommendation="Continue normal monitoring",
                calculation={
                    "formula": f"NDVI drop {ndvi_drop:.2f}% < {self.AFFECTED_DROP_THRESHOLD:.0f}% threshold",
                    "ndvi_drop": f"{ndvi_drop:.2f}%",
                    "threshold": self.AFFECTED_DROP_THRESHOLD,
                    "result": "0.00%",
                },
            )

        raw_yield_loss = ndvi_drop * self.MULTIPLIER
        yield_loss = min(raw_yield_loss, self.MAX_YIELD_LOSS)
        confidence = min(self.BASE_CONFIDENCE + ndvi_drop / 10, self.MAX_CONFIDENCE)

        if yield_loss >= self.SEVERE_THRESHOLD:
            status = YieldLossStatus.SEVERE
        elif yield_loss >= self.CRITICAL_THRESHOLD:
            status = YieldLossStatus.CRITICAL
        else:
            status = YieldLossStatus.AFFECTED

        cause = f" ({disaster_type})" if disaster_type else ""
        result = YieldLossEstimate(
            affected=True,
            yield_loss=round(yield_loss, 2),
            confidence=round(confidence, 1),
            status=status,
            ndvi_drop=round(ndvi_drop, 2),
            disaster_type=disaster_type or "unknown",
            message=(
                f"Estimated {yield_loss:.1f}% yield loss based on "
                f"{ndvi_drop:.1f}% NDVI decline{cause}"
            ),
            recommendation=self._recommendation(yield_loss),
            calculation={
                "formula": "Yield Loss = min(NDVI Drop x 1.5, 100)",
                "confidence_formula": "Confidence = min(85 + NDVI Drop / 10, 98)",
                "ndvi_drop": f"{ndvi_drop:.2f}%",
                "multiplier": self.MULTIPLIER,
                "raw_result": f"{raw_yield_loss:.2f}%",
                "capped_result": f"{yield_loss:.2f}%",
                "confidence": f"{confidence:.1f}%",
            },
        )
        logger.debug(
            "Estimated yield loss %.2f%% (%s) from %.2f%% NDVI drop",
            result.yield_loss, status.value, result.ndvi_drop,
        )
        return result

    @staticmethod
    def _recommendation(yield_loss: float) -> str:
        if yield_loss > 70:
            return "Immediate field inspection and expert assessment required"
        if yield_loss > 50:
            return "Field verification recommended within 48 hours"
        return "Standard claim processing - Document review sufficient"

    def estimate_batch(self, readings: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Estimate yield loss for many farms.

        Each reading needs ``farm_id``, ``current_ndvi`` and ``baseline_ndvi``;
        ``farmer_name`` and ``disaster_type`` are optional.
        """
        estimates = []
        for reading in readings:
            estimate = self.estimate(
                reading["current_ndvi"],
                reading["baseline_ndvi"],
                reading.get("disaster_type"),
            )
            entry = {"farm_id": reading.get("farm_id"), "farmer_name": reading.get("farmer_name")}
            entry.update(estimate.to_dict())
            estimates.append(entry)
        return estimates

    @staticmethod
    def categorize(yield_loss: float) -> Dict[str, str]:
        """Visual category of a yield loss percentage."""
        if yield_loss == 0:
            return {"category": "none", "label": "No Loss", "color": "#10b981"}
        if yield_loss < 25:
            return {"category": "minor", "label": "Minor Loss", "color": "#f59e0b"}
        if yield_loss < 50:
            return {"category": "moderate", "label": "Moderate Loss", "color": "#f97316"}
        if yield_loss < 75:
            return {"category": "severe", "label": "Severe Loss", "color": "#ef4444"}
        return {"category": "critical", "label": "Total Loss", "color": "#991b1b"}

    @staticmethod
    def actual_yield(expected_yield: float, yield_loss_percentage: float) -> Dict[str, float]:
        """Expected vs actual yield (quintals) for a loss percentage."""
        actual = expected_yield * (1 - yield_loss_percentage / 100)
        return {
            "expected_yield": round(expected_yield, 2),
            "actual_yield": round(actual, 2),
            "loss_amount": round(expected_yield - actual, 2),
            "loss_percentage": round(yield_loss_percentage, 2),
        }

    @property
    def stats(self) -> Dict[str, Any]:
        """Get estimator statistics."""
        return {
            "estimate_count": self._estimate_count,
            "affected_drop_threshold": self.AFFECTED_DROP_THRESHOLD,
            "multiplier": self.MULTIPLIER,
        }

"""
Payout Calculator

Turns a yield-loss estimate and a farm's insured value into a payout,
applying weather, government and market factors. Every step is recorded so
the officer sees exactly how the figure was reached.
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Tuple

from .results import (
    AdjustmentFactor,
    CalculationStep,
    PayoutCalculation,
    PayoutTier,
    YieldLossEstimate,
)

if TYPE_CHECKING:
    from ..models import Farm

logger = logging.getLogger(__name__)

LAKH = 100_000
CRORE = 10_000_000


def round_currency(amount: float) -> int:
    """Round to the nearest rupee, halves away from zero."""
    return int(Decimal(str(float(amount))).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_inr(amount: float) -> str:
    """
    Format rupees with Indian digit grouping.

    >>> format_inr(156750)
    '₹1,56,750'
    """
    value = round_currency(amount)
    sign = "-" if value < 0 else ""
    digits = str(abs(value))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])
    return f"{sign}₹{digits}"


@dataclass(frozen=True)
class DisasterContext:
    """Conditions recorded around the loss event."""
    heavy_rainfall: bool = False


class PayoutCalculator:
    """
    Payout = Insured Value x Yield Loss% x Weather x Government x Market

    Factors:
        - Weather: 1.1 after heavy rainfall or a flood, else 1.0
        - Government: 1.0 (standard MSP rate)
        - Market: 0.95
    """

    WEATHER_FACTOR = 1.1
    GOVERNMENT_FACTOR = 1.0
    MARKET_FACTOR = 0.95
    SENIOR_APPROVAL_ABOVE = 2 * LAKH
    STANDARD_APPROVAL_ABOVE = 1 * LAKH

    def __init__(self):
        self._calculation_count = 0

    def calculate(
        self,
        farm: "Farm",
        estimate: YieldLossEstimate,
        context: Optional[DisasterContext] = None,
    ) -> PayoutCalculation:
        """
        Calculate the payout for a farm.

        Args:
            farm: The insured farm
            estimate: Yield-loss estimate for the farm
            context: Disaster conditions (heavy rainfall, ...)

        Returns:
            PayoutCalculation with factors and calculation steps
        """
        self._calculation_count += 1
        context = context or DisasterContext()
        insurance_value = farm.insurance_value
        yield_loss = estimate.yield_loss

        base_payout = insurance_value * (yield_loss / 100)
        factors = self._factors(estimate.disaster_type, context)

        after_weather = base_payout * factors["weather"].value
        after_government = after_weather * factors["government"].value
        final_payout = after_government * factors["market"].value

        steps = [
            CalculationStep(
                step=1,
                description="Base Payout Calculation",
                formula=f"{format_inr(insurance_value)} × {yield_loss:.1f}% yield loss",
                result=format_inr(base_payout),
            ),
            CalculationStep(
                step=2,
                description="Weather Factor",
                formula=(
                    f"{format_inr(base_payout)} × {factors['weather'].value} "
                    f"({factors['weather'].label})"
                ),
                result=format_inr(after_weather),
            ),
            CalculationStep(
                step=3,
                description="Government Rate",
                formula=f"× {factors['government'].value} ({factors['government'].label})",
                result=format_inr(after_government),
            ),
            CalculationStep(
                step=4,
                description="Market Adjustment",
                formula=f"× {factors['market'].value} ({factors['market'].label})",
                result=format_inr(final_payout),
            ),
        ]

        rounded_final = round_currency(final_payout)
        result = PayoutCalculation(
            farm_id=farm.farm_id,
            farmer_name=farm.farmer_name,
            base_payout=round_currency(base_payout),
            factors=factors,
            final_payout=rounded_final,
            calculation_steps=steps,
            recommendation=self.tier(rounded_final),
            breakdown={
                "insurance_value": insurance_value,
                "yield_loss_percentage": yield_loss,
                "ndvi_drop": estimate.ndvi_drop,
                "weather_factor": factors["weather"].value,
                "government_factor": factors["government"].value,
                "market_factor": factors["market"].value,
            },
            summary=(
                f"Final Payout: {format_inr(rounded_final)} "
                f"({yield_loss:.1f}% yield loss)"
            ),
        )
        logger.debug("Payout for farm %s: %s", farm.farm_id, result.summary)
        return result

    def _factors(self, disaster_type: str, context: DisasterContext) -> Dict[str, AdjustmentFactor]:
        heavy_rain = bool(context.heavy_rainfall or disaster_type == "flood")
        return {
            "weather": AdjustmentFactor(
                value=self.WEATHER_FACTOR if heavy_rain else 1.0,
                label="Heavy Rainfall Recorded (+10%)" if heavy_rain else "Normal Weather Conditions",
                applied=heavy_rain,
            ),
            "government": AdjustmentFactor(
                value=self.GOVERNMENT_FACTOR,
                label="Standard MSP (Minimum Support Price)",
                applied=True,
            ),
            "market": AdjustmentFactor(
                value=self.MARKET_FACTOR,
                label="Current Market Adjustment (-5%)",
                applied=True,
            ),
        }

    def tier(self, final_payout: float) -> PayoutTier:
        if final_payout > self.SENIOR_APPROVAL_ABOVE:
            return PayoutTier.SENIOR_APPROVAL
        if final_payout > self.STANDARD_APPROVAL_ABOVE:
            return PayoutTier.STANDARD_APPROVAL
        return PayoutTier.FAST_TRACK

    def calculate_batch(
        self,
        farms_with_estimates: Iterable[Tuple["Farm", YieldLossEstimate]],
        context: Optional[DisasterContext] = None,
    ) -> List[PayoutCalculation]:
        """Calculate payouts for affected farms only; one context for all."""
        return [
            self.calculate(farm, estimate, context)
            for farm, estimate in farms_with_estimates
            if estimate.affected
        ]

    @staticmethod
    def calculate_regional(payouts: Iterable[PayoutCalculation]) -> Dict[str, Any]:
        """
        Aggregate payouts for a region.

        Pure reduction: totals, extremes and a distribution in lakh bands.
        """
        amounts = [p.final_payout for p in payouts]
        total = sum(amounts)
        count = len(amounts)
        average = total / count if count else 0

        return {
            "total_payout": round_currency(total),
            "total_payout_crores": round(total / CRORE, 2),
            "average_payout": round_currency(average),
            "max_payout": max(amounts) if amounts else 0,
            "min_payout": min(amounts) if amounts else 0,
            "farms_with_payout": count,
            "distribution": {
                "below_1l": sum(1 for a in amounts if a < LAKH),
                "1l_to_2l": sum(1 for a in amounts if LAKH <= a < 2 * LAKH),
                "2l_to_3l": sum(1 for a in amounts if 2 * LAKH <= a < 3 * LAKH),
                "3l_and_above": sum(1 for a in amounts if a >= 3 * LAKH),
            },
            "formatted_total": format_inr(total),
            "formatted_average": format_inr(average),
        }

    @staticmethod
    def categorize(payout: float) -> Dict[str, str]:
        if payout < LAKH:
            return {"category": "low", "label": "< ₹1 Lakh", "range": "0-1L"}
        if payout < 2 * LAKH:
            return {"category": "medium", "label": "₹1-2 Lakh", "range": "1-2L"}
        if payout < 3 * LAKH:
            return {"category": "high", "label": "₹2-3 Lakh", "range": "2-3L"}
        return {"category": "critical", "label": "> ₹3 Lakh", "range": "3L+"}

    def summarize(self, farm: "Farm", payout: PayoutCalculation) -> Dict[str, Any]:
        """Officer dashboard card for one farm's payout."""
        return {
            "farm_id": farm.farm_id,
            "farmer_name": farm.farmer_name,
            "village": farm.village,
            "area": f"{farm.area} Ha",
            "yield_loss": f"{payout.breakdown['yield_loss_percentage']:.1f}%",
            "ndvi_drop": f"{payout.breakdown['ndvi_drop']:.1f}%",
            "insurance_value": format_inr(farm.insurance_value),
            "recommended_payout": format_inr(payout.final_payout),
            "status": "pending",
            "priority": "high" if payout.final_payout > self.SENIOR_APPROVAL_ABOVE else "normal",
        }

    @property
    def stats(self) -> Dict[str, Any]:
        return {
            "calculation_count": self._calculation_count,
            "weather_factor": self.WEATHER_FACTOR,
            "government_factor": self.GOVERNMENT_FACTOR,
            "market_factor": self.MARKET_FACTOR,
        }

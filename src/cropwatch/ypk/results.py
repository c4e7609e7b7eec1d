"""
Kernel Results

Value objects produced by the yield-loss estimator and the payout
calculator. Both carry the full calculation breakdown so a decision can be
replayed and audited without recomputing it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..errors import ValidationError


class YieldLossStatus(Enum):
    """Severity status derived from the estimated yield loss."""
    UNAFFECTED = "Unaffected"
    AFFECTED = "Affected"
    CRITICAL = "Critical"  # yield loss >= 50%
    SEVERE = "Severe"  # yield loss >= 75%


@dataclass(frozen=True)
class YieldLossEstimate:
    """
    Estimated crop yield loss for one NDVI reading.

    Attributes:
        affected: Whether the NDVI drop crossed the 30% threshold
        yield_loss: Estimated yield loss percentage (0-100)
        confidence: Confidence percentage (capped at 98)
        status: Severity status
        ndvi_drop: NDVI drop percentage relative to baseline
        disaster_type: Disaster cause, "none" or "unknown" when not given
        message: Human-readable summary
        recommendation: Next step for the reviewing officer
        calculation: Formula strings and intermediate values
    """
    affected: bool
    yield_loss: float
    confidence: float
    status: YieldLossStatus
    ndvi_drop: float
    disaster_type: str
    message: str
    recommendation: str
    calculation: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "affected": self.affected,
            "yield_loss": self.yield_loss,
            "confidence": self.confidence,
            "status": self.status.value,
            "ndvi_drop": self.ndvi_drop,
            "disaster_type": self.disaster_type,
            "message": self.message,
            "recommendation": self.recommendation,
            "calculation": dict(self.calculation),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "YieldLossEstimate":
        try:
            return cls(
                affected=bool(data["affected"]),
                yield_loss=float(data["yield_loss"]),
                confidence=float(data["confidence"]),
                status=YieldLossStatus(data["status"]),
                ndvi_drop=float(data["ndvi_drop"]),
                disaster_type=data.get("disaster_type") or "unknown",
                message=data.get("message", ""),
                recommendation=data.get("recommendation", ""),
                calculation=dict(data.get("calculation") or {}),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid yield loss data: {e}", field="yield_loss")


@dataclass(frozen=True)
class AdjustmentFactor:
    """A named multiplier applied to the base payout."""
    value: float
    label: str
    applied: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "label": self.label, "applied": self.applied}


@dataclass(frozen=True)
class CalculationStep:
    """One displayable line of the payout calculation."""
    step: int
    description: str
    formula: str
    result: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.step,
            "description": self.description,
            "formula": self.formula,
            "result": self.result,
        }


class PayoutTier(Enum):
    """Approval route for a payout."""
    SENIOR_APPROVAL = "Requires senior officer approval (>₹2 Lakh)"
    STANDARD_APPROVAL = "Standard approval process"
    FAST_TRACK = "Fast-track approval eligible"


@dataclass(frozen=True)
class PayoutCalculation:
    """
    Insurance payout with its transparent breakdown.

    ``factors`` maps "weather", "government" and "market" to their
    multipliers; ``calculation_steps`` replays the arithmetic in order.
    """
    farm_id: Optional[int]
    farmer_name: Optional[str]
    base_payout: int
    factors: Dict[str, AdjustmentFactor]
    final_payout: int
    calculation_steps: List[CalculationStep]
    recommendation: PayoutTier
    breakdown: Dict[str, Any]
    summary: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "farm_id": self.farm_id,
            "farmer_name": self.farmer_name,
            "base_payout": self.base_payout,
            "factors": {name: f.to_dict() for name, f in self.factors.items()},
            "final_payout": self.final_payout,
            "calculation_steps": [s.to_dict() for s in self.calculation_steps],
            "recommendation": self.recommendation.value,
            "breakdown": dict(self.breakdown),
            "summary": self.summary,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PayoutCalculation":
        try:
            return cls(
                farm_id=data.get("farm_id"),
                farmer_name=data.get("farmer_name"),
                base_payout=int(data["base_payout"]),
                factors={
                    name: AdjustmentFactor(
                        value=float(f["value"]),
                        label=f.get("label", name),
                        applied=bool(f.get("applied", False)),
                    )
                    for name, f in (data.get("factors") or {}).items()
                },
                final_payout=int(data["final_payout"]),
                calculation_steps=[
                    CalculationStep(
                        step=int(s["step"]),
                        description=s["description"],
                        formula=s["formula"],
                        result=s["result"],
                    )
                    for s in data.get("calculation_steps") or []
                ],
                recommendation=PayoutTier(data["recommendation"]),
                breakdown=dict(data.get("breakdown") or {}),
                summary=data.get("summary", ""),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid payout data: {e}", field="payout")

"""
YPK - Yield & Payout Kernel

Deterministic calculation core for the crop insurance swarm.
NDVI drop in, yield loss and payout out, with every step recorded.
"""

from .results import (
    AdjustmentFactor,
    CalculationStep,
    PayoutCalculation,
    PayoutTier,
    YieldLossEstimate,
    YieldLossStatus,
)
from .estimator import YieldLossEstimator, ndvi_drop_percentage
from .payout import DisasterContext, PayoutCalculator, format_inr, round_currency

__all__ = [
    "AdjustmentFactor",
    "CalculationStep",
    "DisasterContext",
    "PayoutCalculation",
    "PayoutCalculator",
    "PayoutTier",
    "YieldLossEstimate",
    "YieldLossEstimator",
    "YieldLossStatus",
    "format_inr",
    "ndvi_drop_percentage",
    "round_currency",
]

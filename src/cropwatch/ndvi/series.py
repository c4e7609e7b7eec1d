"""
NDVI Time-Series Synthesizer

Generates plausible daily NDVI series for a farm and overlays disaster
events on them. Synthesis is stochastic and seedable; disaster injection is
deterministic.
"""

import math
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from ..errors import ValidationError
from ..models import NDVI_MAX, NDVI_MIN, DisasterEvent, Farm, NDVISample

# A disaster at its trough removes up to half of the NDVI (severity 1.0).
MAX_DEPTH = 0.5
ONSET_TENTHS = 2
RECOVERY_TENTHS = 7
RECOVERED_SHARE = 0.4


def generate_series(
    farm: Farm,
    days: int,
    end_date: Optional[date] = None,
    noise_std: float = 0.01,
    seasonal_amplitude: float = 0.015,
    seasonal_period: float = 90.0,
    rng: Optional[np.random.Generator] = None,
) -> List[NDVISample]:
    """
    Synthesize ``days`` consecutive daily readings ending on ``end_date``.

    value = baseline + amplitude * sin(2*pi*t / period) + N(0, noise_std),
    clipped to the valid NDVI range.

    Args:
        farm: Farm whose baseline anchors the series
        days: Number of daily samples
        end_date: Date of the latest sample (defaults to today)
        noise_std: Standard deviation of the daily noise
        seasonal_amplitude: Amplitude of the seasonal oscillation
        seasonal_period: Oscillation period in days
        rng: Random generator, seed it for a reproducible series

    Returns:
        Samples ordered oldest first
    """
    if days < 1:
        raise ValidationError(f"Series length must be >= 1 day: {days}", field="days")
    rng = rng if rng is not None else np.random.default_rng()
    end_date = end_date or date.today()

    t = np.arange(days)
    values = farm.baseline_ndvi + seasonal_amplitude * np.sin(2 * np.pi * t / seasonal_period)
    if noise_std > 0:
        values = values + rng.normal(0.0, noise_std, size=days)
    values = np.clip(values, NDVI_MIN, NDVI_MAX)

    start = end_date - timedelta(days=days - 1)
    return [
        NDVISample(farm_id=farm.farm_id, date=start + timedelta(days=int(i)), ndvi=float(v))
        for i, v in zip(t, values)
    ]


def disaster_profile(duration_days: int) -> np.ndarray:
    """
    Depth factor for each day of a disaster window, in [0, 1].

    Linear onset over the first 20% of the window, full depth until 70%,
    then a partial recovery that gives back 40% of the depth by the last
    day.
    """
    length = duration_days
    onset_days = max(1, math.ceil(length * ONSET_TENTHS / 10))
    recovery_start = math.ceil(length * RECOVERY_TENTHS / 10)

    profile = np.ones(length)
    for k in range(length):
        if k < onset_days:
            profile[k] = (k + 1) / onset_days
        elif k >= recovery_start:
            profile[k] = 1 - RECOVERED_SHARE * (k - recovery_start + 1) / (length - recovery_start)
    return profile


def inject_disaster(series: Sequence[NDVISample], event: DisasterEvent) -> List[NDVISample]:
    """
    Overlay a disaster event on a series.

    Days ``[start_day_offset, start_day_offset + duration_days)`` are scaled
    by ``1 - 0.5 * severity * profile`` and tagged with the disaster type.
    A window running past the end of the series is clipped. The input is
    left unchanged.
    """
    result = list(series)
    if event.start_day_offset >= len(result):
        return result

    profile = disaster_profile(event.duration_days)
    stop = min(event.start_day_offset + event.duration_days, len(result))
    tag = event.disaster_type.value

    for index in range(event.start_day_offset, stop):
        k = index - event.start_day_offset
        sample = result[index]
        factor = 1 - MAX_DEPTH * event.severity * profile[k]
        ndvi = float(np.clip(sample.ndvi * factor, NDVI_MIN, NDVI_MAX))
        result[index] = NDVISample(
            farm_id=sample.farm_id, date=sample.date, ndvi=ndvi, event_type=tag,
        )
    return result


def series_summary(series: Sequence[NDVISample]) -> Dict[str, Any]:
    """Descriptive statistics for a series."""
    if not series:
        raise ValidationError("Cannot summarize an empty series", field="series")
    values = np.array([sample.ndvi for sample in series])
    latest = series[-1]
    return {
        "days": len(series),
        "start_date": series[0].date.isoformat(),
        "end_date": latest.date.isoformat(),
        "mean": round(float(values.mean()), 4),
        "min": round(float(values.min()), 4),
        "max": round(float(values.max()), 4),
        "std": round(float(values.std()), 4),
        "latest": round(latest.ndvi, 4),
        "event_days": sum(1 for sample in series if sample.event_type),
    }

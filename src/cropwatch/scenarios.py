"""
Test-Data Scenarios

Populates a system's NDVI store with healthy series or a regional flood,
then runs monitoring. Used by the demo and the integration tests.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

import numpy as np

from .models import DisasterEvent, DisasterType
from .ndvi.monitor import MonitoringReport
from .ndvi.series import generate_series, inject_disaster
from .system import CropwatchSystem

logger = logging.getLogger(__name__)

FLOOD_SEVERITY_RANGE = (0.6, 0.9)
FLOOD_STARTED_DAYS_AGO = 15
FLOOD_DURATION_DAYS = 21


@dataclass
class FloodScenario:
    """What the flood scenario did and what monitoring found."""
    affected_farm_ids: List[int] = field(default_factory=list)
    healthy_farm_ids: List[int] = field(default_factory=list)
    severities: Dict[int, float] = field(default_factory=dict)
    report: Optional[MonitoringReport] = None

    @property
    def severe_count(self) -> int:
        return sum(1 for severity in self.severities.values() if severity > 0.75)


def seed_healthy_series(
    system: CropwatchSystem,
    days: Optional[int] = None,
    end_date: Optional[date] = None,
) -> int:
    """Store a disaster-free series for every farm. Returns the sample count."""
    settings = system.settings
    days = days or settings.series_days
    total = 0
    for farm in system.roster.all():
        series = generate_series(
            farm, days, end_date=end_date,
            noise_std=settings.noise_std,
            seasonal_amplitude=settings.seasonal_amplitude,
            rng=system.rng,
        )
        system.ndvi_store.store(farm.farm_id, series)
        total += len(series)
    logger.info("Seeded %d NDVI samples for %d farms", total, len(system.roster))
    return total


def flood_event(rng: np.random.Generator, days: int) -> DisasterEvent:
    """
    A flood that began 15 days before the end of a ``days``-long series.

    The 21-day window is still at full depth on the latest day. Severity is
    drawn uniformly from [0.6, 0.9].
    """
    return DisasterEvent(
        disaster_type=DisasterType.FLOOD,
        start_day_offset=max(0, days - FLOOD_STARTED_DAYS_AGO),
        duration_days=FLOOD_DURATION_DAYS,
        severity=float(rng.uniform(*FLOOD_SEVERITY_RANGE)),
    )


def plan_flood(
    system: CropwatchSystem,
    affected_fraction: float = 0.8,
    days: Optional[int] = None,
) -> Dict[int, DisasterEvent]:
    """Pick a random share of the roster and build a flood event for each farm."""
    days = days or system.settings.series_days
    farms = system.roster.all()
    order = system.rng.permutation(len(farms))
    affected_count = int(round(len(farms) * affected_fraction))
    return {
        farms[int(index)].farm_id: flood_event(system.rng, days)
        for index in order[:affected_count]
    }


def run_flood_scenario(
    system: CropwatchSystem,
    affected_fraction: float = 0.8,
    days: Optional[int] = None,
    end_date: Optional[date] = None,
) -> FloodScenario:
    """
    Flood a random share of the roster and run a monitoring pass.

    Each flooded farm gets a severity in [0.6, 0.9], so its latest NDVI sits
    30-45% below the synthesized value. The flood began 15 days ago and is
    still ongoing on the latest day.
    """
    settings = system.settings
    days = days or settings.series_days
    plan = plan_flood(system, affected_fraction, days)

    scenario = FloodScenario()
    for farm in system.roster.all():
        series = generate_series(
            farm, days, end_date=end_date,
            noise_std=settings.noise_std,
            seasonal_amplitude=settings.seasonal_amplitude,
            rng=system.rng,
        )
        event = plan.get(farm.farm_id)
        if event is not None:
            series = inject_disaster(series, event)
            scenario.affected_farm_ids.append(farm.farm_id)
            scenario.severities[farm.farm_id] = event.severity
        else:
            scenario.healthy_farm_ids.append(farm.farm_id)
        system.ndvi_store.store(farm.farm_id, series)

    logger.info(
        "Flood scenario: %d affected, %d healthy farms",
        len(scenario.affected_farm_ids), len(scenario.healthy_farm_ids),
    )
    scenario.report = system.monitor.monitor_all_farms()
    return scenario

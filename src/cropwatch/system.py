"""
System Bootstrap

Builds each store and pipeline component exactly once and wires them
together. Everything that needs a store receives it here.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np

from .claims import ClaimLifecycleManager
from .config import Settings
from .logging import configure_logging
from .ndvi.monitor import MonitoringEngine
from .roster import SEED_FARMS, generate_roster
from .store import AlertStore, ClaimStore, FarmRoster, NDVIStore
from .models import Farm
from .ypk.estimator import YieldLossEstimator
from .ypk.payout import PayoutCalculator

logger = logging.getLogger(__name__)


@dataclass
class CropwatchSystem:
    """The single set of stores and components for one process."""
    settings: Settings
    rng: np.random.Generator
    roster: FarmRoster
    ndvi_store: NDVIStore
    alert_store: AlertStore
    claim_store: ClaimStore
    monitor: MonitoringEngine
    estimator: YieldLossEstimator
    calculator: PayoutCalculator
    claims: ClaimLifecycleManager

    def generate_claims(self):
        """Create claims for every active alert."""
        return self.claims.auto_generate_claims_from_alerts(
            self.alert_store.get_active(),
            self.roster.all(),
            self.estimator,
            self.calculator,
        )


def build_system(
    settings: Optional[Settings] = None,
    farms: Optional[Iterable[Farm]] = None,
) -> CropwatchSystem:
    """
    Construct and wire a CropwatchSystem.

    Args:
        settings: Runtime settings (defaults apply when omitted). Its
            ``log_level`` and ``log_format`` configure cropwatch logging.
        farms: Roster to load. When omitted, a generated roster of
            ``settings.farm_count`` farms, or the seed farms.
    """
    settings = settings or Settings()
    configure_logging(settings.log_level, settings.log_format)
    rng = np.random.default_rng(settings.seed)

    if farms is None:
        if settings.farm_count:
            farms = generate_roster(settings.farm_count, settings, rng)
        else:
            farms = SEED_FARMS

    roster = FarmRoster(farms)
    ndvi_store = NDVIStore()
    alert_store = AlertStore()
    claim_store = ClaimStore()

    system = CropwatchSystem(
        settings=settings,
        rng=rng,
        roster=roster,
        ndvi_store=ndvi_store,
        alert_store=alert_store,
        claim_store=claim_store,
        monitor=MonitoringEngine(roster, ndvi_store, alert_store),
        estimator=YieldLossEstimator(),
        calculator=PayoutCalculator(),
        claims=ClaimLifecycleManager(
            claim_store,
            default_officer=settings.default_officer,
            default_disaster_type=settings.default_disaster_type,
        ),
    )
    logger.info("Cropwatch system built with %d farms", len(roster))
    return system

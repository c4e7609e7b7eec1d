"""
Monitoring & Alert Engine

Compares each farm's latest NDVI against its baseline and raises a
classified alert when the drop crosses a threshold. Thresholds are fixed:

    drop < 30%        healthy, no alert
    30% <= drop < 50% MODERATE
    50% <= drop < 75% CRITICAL
    drop >= 75%       SEVERE
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..errors import BatchError, ValidationError
from ..logging import get_logger
from ..models import Alert, AlertSeverity, Farm, NDVISample
from ..store import AlertStore, FarmRoster, NDVIStore
from ..ypk.estimator import ndvi_drop_percentage

logger = logging.getLogger(__name__)
audit = get_logger("cropwatch.audit.monitoring")

MODERATE_DROP = 30.0
CRITICAL_DROP = 50.0
SEVERE_DROP = 75.0


def classify_drop(drop_percentage: float) -> Optional[AlertSeverity]:
    """Alert tier for an NDVI drop, or None when the farm is healthy."""
    if drop_percentage >= SEVERE_DROP:
        return AlertSeverity.SEVERE
    if drop_percentage >= CRITICAL_DROP:
        return AlertSeverity.CRITICAL
    if drop_percentage >= MODERATE_DROP:
        return AlertSeverity.MODERATE
    return None


@dataclass
class MonitoringReport:
    """Outcome of one monitoring pass over the roster."""
    farms_checked: int = 0
    new_alerts: List[Alert] = field(default_factory=list)
    errors: List[BatchError] = field(default_factory=list)

    @property
    def alerts_generated(self) -> int:
        return len(self.new_alerts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "farms_checked": self.farms_checked,
            "alerts_generated": self.alerts_generated,
            "new_alerts": [alert.to_dict() for alert in self.new_alerts],
            "errors": [error.to_dict() for error in self.errors],
        }


class MonitoringEngine:
    """
    Turns NDVI history into alerts.

    Monitoring is idempotent while an alert is active: the alert store
    refuses a second active alert for the same farm.
    """

    def __init__(self, roster: FarmRoster, ndvi_store: NDVIStore, alert_store: AlertStore):
        self.roster = roster
        self.ndvi_store = ndvi_store
        self.alert_store = alert_store
        self._runs = 0

    def monitor_farm(
        self,
        farm: Farm,
        series: Optional[Sequence[NDVISample]] = None,
    ) -> Optional[Alert]:
        """
        Check one farm's latest reading.

        Args:
            farm: The farm to check
            series: History to use instead of the stored series

        Returns:
            The newly created alert, or None when the farm is healthy or
            already has an active alert

        Raises:
            ValidationError: If the farm has no NDVI history, or ``series``
                holds samples of another farm
        """
        series = series if series is not None else self.ndvi_store.get_series(farm.farm_id)
        if not series:
            raise ValidationError(f"No NDVI history for farm {farm.farm_id}", field="series")
        if any(sample.farm_id != farm.farm_id for sample in series):
            raise ValidationError(
                f"Series contains samples for another farm than {farm.farm_id}", field="series"
            )

        latest = series[-1]
        drop = ndvi_drop_percentage(latest.ndvi, farm.baseline_ndvi)
        severity = classify_drop(drop)
        if severity is None:
            return None

        alert = Alert(
            farm_id=farm.farm_id,
            farmer_name=farm.farmer_name,
            current_ndvi=latest.ndvi,
            baseline_ndvi=farm.baseline_ndvi,
            drop_percentage=drop,
            severity=severity,
            estimated_cause=latest.event_type,
            message=(
                f"NDVI dropped {drop:.1f}% below baseline "
                f"({latest.ndvi:.3f} vs {farm.baseline_ndvi:.3f})"
            ),
        )
        created = self.alert_store.create(alert)
        if created is not None:
            audit.alert_raised(farm.farm_id, severity.value, drop, latest.event_type)
        return created

    def monitor_all_farms(self, farms: Optional[Iterable[Farm]] = None) -> MonitoringReport:
        """
        Monitor every farm in the roster.

        A failure for one farm is recorded in the report and does not stop
        the pass.
        """
        self._runs += 1
        report = MonitoringReport()
        for farm in (farms if farms is not None else self.roster.all()):
            report.farms_checked += 1
            try:
                alert = self.monitor_farm(farm)
            except Exception as e:
                report.errors.append(BatchError.from_exception(farm.farm_id, e))
                audit.batch_error("monitoring", farm.farm_id, str(e))
                continue
            if alert is not None:
                report.new_alerts.append(alert)

        logger.info(
            "Monitoring pass %d: %d farms checked, %d new alerts, %d errors",
            self._runs, report.farms_checked, report.alerts_generated, len(report.errors),
        )
        return report

    def regional_health(self, farms: Optional[Iterable[Farm]] = None) -> Dict[str, Any]:
        """Regional summary of farm health from the active alerts."""
        farms = list(farms if farms is not None else self.roster.all())
        farm_ids = {farm.farm_id for farm in farms}
        active = [a for a in self.alert_store.get_active() if a.farm_id in farm_ids]
        affected = {alert.farm_id for alert in active}
        total = len(farms)

        return {
            "total_farms": total,
            "affected_farms": len(affected),
            "healthy_farms": total - len(affected),
            "affected_percentage": round(len(affected) / total * 100, 1) if total else 0.0,
            "severity_distribution": {
                "severe": sum(1 for a in active if a.drop_percentage >= CRITICAL_DROP),
                "moderate": sum(
                    1 for a in active if MODERATE_DROP <= a.drop_percentage < CRITICAL_DROP
                ),
            },
            "active_alerts": len(active),
        }

    @property
    def stats(self) -> Dict[str, Any]:
        return {
            "runs": self._runs,
            "farms": len(self.roster),
            "active_alerts": len(self.alert_store.get_active()),
        }

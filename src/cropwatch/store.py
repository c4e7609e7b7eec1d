"""
Stores

In-memory repository objects for farms, NDVI history, alerts and claims.
Each store is built once at startup and injected into the components that
use it. Every store guards its collection with its own re-entrant lock.
"""

import logging
from abc import ABC, abstractmethod
from threading import RLock
from typing import Dict, Iterable, List, Optional, Sequence

from .errors import NotFoundError, ValidationError
from .models import Alert, AlertStatus, Claim, ClaimStatus, Farm, NDVISample, utcnow

logger = logging.getLogger(__name__)


class RecordStore(ABC):
    """Common interface for the keyed stores."""

    kind = "record"

    def __init__(self):
        self.lock = RLock()

    @abstractmethod
    def get_by_id(self, record_id) -> Optional[object]:
        """Retrieve a record by id, or None."""
        pass

    @abstractmethod
    def list_all(self) -> List[object]:
        """All records in insertion order."""
        pass

    def get(self, record_id):
        """Retrieve a record by id, raising NotFoundError if absent."""
        record = self.get_by_id(record_id)
        if record is None:
            raise NotFoundError(self.kind, record_id)
        return record

    def __len__(self) -> int:
        return len(self.list_all())


class FarmRoster(RecordStore):
    """The insured farms, keyed by farm id."""

    kind = "farm"

    def __init__(self, farms: Iterable[Farm] = ()):
        super().__init__()
        self._farms: Dict[int, Farm] = {}
        for farm in farms:
            self.add(farm)

    def add(self, farm: Farm) -> Farm:
        with self.lock:
            if farm.farm_id in self._farms:
                raise ValidationError(f"Duplicate farm id: {farm.farm_id}", field="farm_id")
            self._farms[farm.farm_id] = farm
        return farm

    def get_by_id(self, farm_id: int) -> Optional[Farm]:
        with self.lock:
            return self._farms.get(farm_id)

    def list_all(self) -> List[Farm]:
        with self.lock:
            return list(self._farms.values())

    def all(self) -> List[Farm]:
        return self.list_all()


class NDVIStore:
    """Daily NDVI history per farm. A stored series replaces the previous one."""

    def __init__(self):
        self.lock = RLock()
        self._series: Dict[int, List[NDVISample]] = {}

    def store(self, farm_id: int, series: Sequence[NDVISample]) -> None:
        if any(sample.farm_id != farm_id for sample in series):
            raise ValidationError(f"Series contains samples for another farm than {farm_id}",
                                  field="series")
        ordered = sorted(series, key=lambda sample: sample.date)
        with self.lock:
            self._series[farm_id] = ordered

    def get_series(self, farm_id: int) -> List[NDVISample]:
        with self.lock:
            return list(self._series.get(farm_id, []))

    def get_latest(self, farm_id: int) -> Optional[NDVISample]:
        with self.lock:
            series = self._series.get(farm_id)
            return series[-1] if series else None

    def farm_ids(self) -> List[int]:
        with self.lock:
            return list(self._series)

    def clear(self) -> None:
        with self.lock:
            self._series.clear()


class AlertStore(RecordStore):
    """
    Alerts keyed by alert id.

    At most one active alert exists per farm; ``create`` enforces this
    atomically.
    """

    kind = "alert"

    def __init__(self):
        super().__init__()
        self._alerts: Dict[str, Alert] = {}

    def get_by_id(self, alert_id: str) -> Optional[Alert]:
        with self.lock:
            return self._alerts.get(alert_id)

    def list_all(self) -> List[Alert]:
        with self.lock:
            return list(self._alerts.values())

    def get_active(self, farm_id: Optional[int] = None) -> List[Alert]:
        with self.lock:
            return [
                alert for alert in self._alerts.values()
                if alert.is_active and (farm_id is None or alert.farm_id == farm_id)
            ]

    def create(self, alert: Alert) -> Optional[Alert]:
        """
        Store a new alert unless the farm already has an active one.

        Returns:
            The stored alert, or None if it was refused as a duplicate
        """
        with self.lock:
            if alert.is_active and self.get_active(alert.farm_id):
                logger.debug("Farm %s already has an active alert", alert.farm_id)
                return None
            self._alerts[alert.alert_id] = alert
            return alert

    def resolve(self, alert_id: str) -> Alert:
        """Mark an alert resolved. The alert is kept."""
        with self.lock:
            alert = self.get(alert_id)
            if alert.is_active:
                alert.status = AlertStatus.RESOLVED
                alert.resolved_at = utcnow()
            return alert


class ClaimStore(RecordStore):
    """Claims keyed by claim id. Callers hold ``lock`` across check-and-write."""

    kind = "claim"

    def __init__(self):
        super().__init__()
        self._claims: Dict[str, Claim] = {}

    def add(self, claim: Claim) -> Claim:
        with self.lock:
            self._claims[claim.claim_id] = claim
        return claim

    def get_by_id(self, claim_id: str) -> Optional[Claim]:
        with self.lock:
            return self._claims.get(claim_id)

    def list_all(self) -> List[Claim]:
        with self.lock:
            return list(self._claims.values())

    def find_by_farm(self, farm_id: int) -> List[Claim]:
        with self.lock:
            return [claim for claim in self._claims.values() if claim.farm_id == farm_id]

    def find_by_status(self, status: ClaimStatus) -> List[Claim]:
        with self.lock:
            return [claim for claim in self._claims.values() if claim.status == status]

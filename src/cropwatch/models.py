"""
Domain Records

Farms, NDVI samples, disaster events, alerts and claims.
All records serialize to JSON-shaped dictionaries via ``to_dict()``.
"""

from copy import deepcopy
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple
from uuid import uuid4

from .errors import ValidationError
from .ypk.results import PayoutCalculation, YieldLossEstimate

Coordinate = Tuple[float, float]  # (lat, lng)
Polygon = Tuple[Coordinate, ...]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _isoformat(value: Optional[Any]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_date(value: Any, field_name: str) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"Invalid date for {field_name}: {value!r}", field=field_name)


def to_polygon(points: Sequence[Sequence[float]]) -> Polygon:
    """
    Normalize a vertex list into a tuple of ``(lat, lng)`` float pairs.

    Raises:
        ValidationError: If there are fewer than 3 vertices or a vertex is
            not a numeric pair.
    """
    if points is None or len(points) < 3:
        raise ValidationError("A polygon needs at least 3 vertices", field="polygon")
    vertices = []
    for vertex in points:
        if len(vertex) != 2:
            raise ValidationError(f"Vertex must be a (lat, lng) pair: {vertex!r}", field="polygon")
        try:
            vertices.append((float(vertex[0]), float(vertex[1])))
        except (TypeError, ValueError):
            raise ValidationError(f"Vertex must be numeric: {vertex!r}", field="polygon")
    return tuple(vertices)


# ---------------------------------------------------------------------------
# Farms
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AdministrativeData:
    """Administrative hierarchy of a farm's location."""
    village: str = ""
    tehsil: Optional[str] = None
    district: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state,
            "district": self.district,
            "tehsil": self.tehsil,
            "village": self.village,
            "pincode": self.pincode,
        }


@dataclass(frozen=True)
class Farm:
    """
    An insured farm plot.

    The polygon vertex order is significant: it defines the plot boundary.
    Farms are immutable after creation.
    """
    farm_id: int
    farmer_name: str
    crop: str
    polygon: Polygon
    area: float  # hectares
    baseline_ndvi: float
    insurance_value: float  # rupees
    location: str = ""
    crop_type: Optional[str] = None
    sowing_date: Optional[date] = None
    expected_harvest_date: Optional[date] = None
    administrative: AdministrativeData = field(default_factory=AdministrativeData)

    def __post_init__(self) -> None:
        if not self.farmer_name:
            raise ValidationError("Farm needs a farmer name", field="farmer_name")
        if not self.crop:
            raise ValidationError("Farm needs a crop", field="crop")
        object.__setattr__(self, "polygon", to_polygon(self.polygon))
        if not self.area or self.area <= 0:
            raise ValidationError(f"Farm area must be positive: {self.area}", field="area")
        if not 0 < self.baseline_ndvi <= 1:
            raise ValidationError(
                f"Baseline NDVI must be in (0, 1]: {self.baseline_ndvi}", field="baseline_ndvi"
            )
        if not self.insurance_value or self.insurance_value <= 0:
            raise ValidationError(
                f"Insurance value must be positive: {self.insurance_value}", field="insurance_value"
            )

    @property
    def village(self) -> str:
        return self.administrative.village

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Farm":
        """
        Build a farm from its JSON shape.

        Raises:
            ValidationError: If a required field is missing or invalid.
        """
        required = ("farm_id", "farmer_name", "crop", "polygon", "area",
                    "baseline_ndvi", "insurance_value")
        missing = [key for key in required if data.get(key) is None]
        if missing:
            raise ValidationError(f"Missing farm fields: {', '.join(missing)}", field=missing[0])

        admin = data.get("administrative") or {}
        return cls(
            farm_id=int(data["farm_id"]),
            farmer_name=data["farmer_name"],
            crop=data["crop"],
            polygon=to_polygon(data["polygon"]),
            area=float(data["area"]),
            baseline_ndvi=float(data["baseline_ndvi"]),
            insurance_value=float(data["insurance_value"]),
            location=data.get("location", ""),
            crop_type=data.get("crop_type"),
            sowing_date=_parse_date(data.get("sowing_date"), "sowing_date"),
            expected_harvest_date=_parse_date(
                data.get("expected_harvest_date"), "expected_harvest_date"
            ),
            administrative=AdministrativeData(
                village=admin.get("village", ""),
                tehsil=admin.get("tehsil"),
                district=admin.get("district"),
                state=admin.get("state"),
                pincode=admin.get("pincode"),
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "farm_id": self.farm_id,
            "farmer_name": self.farmer_name,
            "crop": self.crop,
            "crop_type": self.crop_type,
            "location": self.location,
            "polygon": [list(vertex) for vertex in self.polygon],
            "area": self.area,
            "baseline_ndvi": self.baseline_ndvi,
            "insurance_value": self.insurance_value,
            "sowing_date": _isoformat(self.sowing_date),
            "expected_harvest_date": _isoformat(self.expected_harvest_date),
            "administrative": self.administrative.to_dict(),
        }


# ---------------------------------------------------------------------------
# NDVI
# ---------------------------------------------------------------------------

NDVI_MIN = 0.1
NDVI_MAX = 0.95


@dataclass(frozen=True)
class NDVISample:
    """One daily NDVI reading for a farm."""
    farm_id: int
    date: date
    ndvi: float
    event_type: Optional[str] = None  # set on days touched by a disaster

    def to_dict(self) -> Dict[str, Any]:
        return {
            "farm_id": self.farm_id,
            "date": self.date.isoformat(),
            "ndvi": round(self.ndvi, 4),
            "event_type": self.event_type,
        }


class DisasterType(Enum):
    """Disasters that can be injected into an NDVI series."""
    FLOOD = "flood"
    DROUGHT = "drought"
    PEST = "pest"
    HAILSTORM = "hailstorm"
    UNSEASONAL_RAIN = "unseasonal_rain"


@dataclass(frozen=True)
class DisasterEvent:
    """
    A disaster window to overlay on a generated series.

    Attributes:
        disaster_type: Kind of disaster
        start_day_offset: Index of the first affected day in the series
        duration_days: Length of the window in days
        severity: 0 (no effect) to 1 (NDVI halved at the trough)
    """
    disaster_type: DisasterType
    start_day_offset: int
    duration_days: int
    severity: float

    def __post_init__(self) -> None:
        if not isinstance(self.disaster_type, DisasterType):
            try:
                object.__setattr__(self, "disaster_type", DisasterType(self.disaster_type))
            except ValueError:
                raise ValidationError(
                    f"Unknown disaster type: {self.disaster_type!r}", field="disaster_type"
                )
        if self.start_day_offset < 0:
            raise ValidationError("start_day_offset must be >= 0", field="start_day_offset")
        if self.duration_days < 1:
            raise ValidationError("duration_days must be >= 1", field="duration_days")
        if not 0.0 <= self.severity <= 1.0:
            raise ValidationError(f"severity must be in [0, 1]: {self.severity}", field="severity")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "disaster_type": self.disaster_type.value,
            "start_day_offset": self.start_day_offset,
            "duration_days": self.duration_days,
            "severity": self.severity,
        }


# ---------------------------------------------------------------------------
# Alerts
# ---------------------------------------------------------------------------

class AlertSeverity(Enum):
    """
    Alert tiers by NDVI drop.

    LOW is the lowest tier; monitoring never emits it (drops under 30%
    are healthy) but alerts created directly may carry it.
    """
    LOW = "low"
    MODERATE = "moderate"  # 30-50% drop
    CRITICAL = "critical"  # 50-75% drop
    SEVERE = "severe"  # >= 75% drop


class AlertStatus(Enum):
    ACTIVE = "active"
    RESOLVED = "resolved"


@dataclass
class Alert:
    """An NDVI-drop alert for one farm."""
    farm_id: int
    farmer_name: str
    current_ndvi: float
    baseline_ndvi: float
    drop_percentage: float
    severity: AlertSeverity
    message: str
    estimated_cause: Optional[str] = None
    status: AlertStatus = AlertStatus.ACTIVE
    created_at: datetime = field(default_factory=utcnow)
    resolved_at: Optional[datetime] = None
    alert_id: str = field(default_factory=lambda: str(uuid4()))

    @property
    def is_active(self) -> bool:
        return self.status == AlertStatus.ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "alert_id": self.alert_id,
            "farm_id": self.farm_id,
            "farmer_name": self.farmer_name,
            "current_ndvi": round(self.current_ndvi, 4),
            "baseline_ndvi": self.baseline_ndvi,
            "drop_percentage": round(self.drop_percentage, 2),
            "severity": self.severity.value,
            "status": self.status.value,
            "estimated_cause": self.estimated_cause,
            "message": self.message,
            "created_at": self.created_at.isoformat(),
            "resolved_at": _isoformat(self.resolved_at),
        }


# ---------------------------------------------------------------------------
# Claims
# ---------------------------------------------------------------------------

class ClaimStatus(Enum):
    """
    Claim review states.

    PENDING is initial. APPROVED and REJECTED are terminal.
    FLAGGED marks a claim for field inspection and can still be decided.
    """
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    FLAGGED = "flagged"

    @property
    def is_terminal(self) -> bool:
        return self in (ClaimStatus.APPROVED, ClaimStatus.REJECTED)


@dataclass(frozen=True)
class ClaimMetadata:
    """Farm facts captured at submission time."""
    village: Optional[str] = None
    area: Optional[float] = None
    insurance_value: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "village": self.village,
            "area": self.area,
            "insurance_value": self.insurance_value,
        }


@dataclass
class Claim:
    """
    A reviewable insurance claim.

    The yield-loss estimate and payout calculation are snapshots taken at
    creation; they are never recomputed.
    """
    farm_id: int
    farmer_name: str
    yield_loss: YieldLossEstimate
    payout: PayoutCalculation
    alert_id: Optional[str] = None
    status: ClaimStatus = ClaimStatus.PENDING
    submitted_at: datetime = field(default_factory=utcnow)
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    officer_notes: Optional[str] = None
    metadata: ClaimMetadata = field(default_factory=ClaimMetadata)
    claim_id: str = field(default_factory=lambda: str(uuid4()))

    def __post_init__(self) -> None:
        self.yield_loss = deepcopy(self.yield_loss)
        self.payout = deepcopy(self.payout)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "claim_id": self.claim_id,
            "farm_id": self.farm_id,
            "farmer_name": self.farmer_name,
            "alert_id": self.alert_id,
            "yield_loss": self.yield_loss.to_dict(),
            "payout": self.payout.to_dict(),
            "status": self.status.value,
            "submitted_at": self.submitted_at.isoformat(),
            "reviewed_at": _isoformat(self.reviewed_at),
            "reviewed_by": self.reviewed_by,
            "officer_notes": self.officer_notes,
            "metadata": self.metadata.to_dict(),
        }

"""
Claim Lifecycle Manager

Creates insurance claims (directly, from a JSON payload, or from alerts)
and moves them through the review workflow:

    PENDING  -> APPROVED | REJECTED | FLAGGED
    FLAGGED  -> APPROVED | REJECTED

APPROVED and REJECTED are terminal.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .errors import BatchError, InvalidTransitionError, ValidationError
from .logging import get_logger
from .models import Alert, AlertSeverity, Claim, ClaimMetadata, ClaimStatus, Farm, utcnow
from .store import ClaimStore
from .ypk.estimator import YieldLossEstimator
from .ypk.payout import DisasterContext, PayoutCalculator, round_currency
from .ypk.results import PayoutCalculation, YieldLossEstimate

logger = logging.getLogger(__name__)
audit = get_logger("cropwatch.audit.claims")

ALLOWED_TRANSITIONS = {
    ClaimStatus.PENDING: {ClaimStatus.APPROVED, ClaimStatus.REJECTED, ClaimStatus.FLAGGED},
    ClaimStatus.FLAGGED: {ClaimStatus.APPROVED, ClaimStatus.REJECTED},
    ClaimStatus.APPROVED: set(),
    ClaimStatus.REJECTED: set(),
}

DEFAULT_NOTES = {
    ClaimStatus.APPROVED: "Claim approved",
    ClaimStatus.REJECTED: "Insufficient evidence",
    ClaimStatus.FLAGGED: "Requires field inspection",
}


@dataclass
class ClaimGenerationReport:
    """Claims created from a batch of alerts."""
    claims: List[Claim] = field(default_factory=list)
    skipped: int = 0
    errors: List[BatchError] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated": len(self.claims),
            "skipped": self.skipped,
            "claims": [claim.to_dict() for claim in self.claims],
            "errors": [error.to_dict() for error in self.errors],
        }


class ClaimLifecycleManager:
    """
    Claim creation, review and statistics over a ClaimStore.

    Review decisions and claim creation run under the store's lock so the
    one-claim-per-farm rule of alert-driven generation holds with concurrent
    callers.
    """

    def __init__(
        self,
        claim_store: ClaimStore,
        default_officer: str = "System Officer",
        default_disaster_type: str = "flood",
    ):
        self.store = claim_store
        self.default_officer = default_officer
        self.default_disaster_type = default_disaster_type

    # -- creation ----------------------------------------------------------

    def create_claim(
        self,
        farm_id: int,
        farmer_name: str,
        yield_loss: YieldLossEstimate,
        payout: PayoutCalculation,
        alert_id: Optional[str] = None,
        village: Optional[str] = None,
        area: Optional[float] = None,
        insurance_value: Optional[float] = None,
    ) -> Claim:
        """
        Create a pending claim.

        The estimate and payout are copied into the claim, so later changes to
        the inputs never alter it.

        Raises:
            ValidationError: If a required field is missing or mistyped
        """
        if farm_id is None:
            raise ValidationError("Claim needs a farm id", field="farm_id")
        if not farmer_name:
            raise ValidationError("Claim needs a farmer name", field="farmer_name")
        if not isinstance(yield_loss, YieldLossEstimate):
            raise ValidationError("Claim needs a yield loss estimate", field="yield_loss")
        if not isinstance(payout, PayoutCalculation):
            raise ValidationError("Claim needs a payout calculation", field="payout")

        claim = Claim(
            farm_id=farm_id,
            farmer_name=farmer_name,
            yield_loss=yield_loss,
            payout=payout,
            alert_id=alert_id,
            metadata=ClaimMetadata(village=village, area=area, insurance_value=insurance_value),
        )
        self.store.add(claim)
        audit.claim_created(claim.claim_id, farm_id, payout.final_payout, alert_id)
        return claim

    def create_claim_from_payload(self, payload: Dict[str, Any]) -> Claim:
        """Create a claim from its JSON shape (as sent by a client)."""
        if not isinstance(payload, dict):
            raise ValidationError("Claim payload must be an object")
        for key in ("farm_id", "farmer_name", "yield_loss", "payout"):
            if payload.get(key) is None:
                raise ValidationError(f"Missing claim field: {key}", field=key)

        metadata = payload.get("metadata") or {}
        try:
            farm_id = int(payload["farm_id"])
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid farm id: {payload['farm_id']!r}", field="farm_id")

        return self.create_claim(
            farm_id=farm_id,
            farmer_name=payload["farmer_name"],
            yield_loss=YieldLossEstimate.from_dict(payload["yield_loss"]),
            payout=PayoutCalculation.from_dict(payload["payout"]),
            alert_id=payload.get("alert_id"),
            village=payload.get("village", metadata.get("village")),
            area=payload.get("area", metadata.get("area")),
            insurance_value=payload.get("insurance_value", metadata.get("insurance_value")),
        )

    # -- queries -----------------------------------------------------------

    def get_claim(self, claim_id: str) -> Claim:
        return self.store.get(claim_id)

    def list_claims(self, status: Optional[ClaimStatus] = None) -> List[Claim]:
        if status is None:
            return self.store.list_all()
        return self.store.find_by_status(ClaimStatus(status))

    def claims_for_farm(self, farm_id: int) -> List[Claim]:
        return self.store.find_by_farm(farm_id)

    # -- review ------------------------------------------------------------

    def approve(self, claim_id: str, officer_name: Optional[str] = None,
                reason: Optional[str] = None) -> Claim:
        return self._transition(claim_id, ClaimStatus.APPROVED, officer_name, reason)

    def reject(self, claim_id: str, officer_name: Optional[str] = None,
               reason: Optional[str] = None) -> Claim:
        return self._transition(claim_id, ClaimStatus.REJECTED, officer_name, reason)

    def flag(self, claim_id: str, officer_name: Optional[str] = None,
             reason: Optional[str] = None) -> Claim:
        return self._transition(claim_id, ClaimStatus.FLAGGED, officer_name, reason)

    def _transition(
        self,
        claim_id: str,
        target: ClaimStatus,
        officer_name: Optional[str],
        reason: Optional[str],
    ) -> Claim:
        """
        Move a claim to ``target``.

        Raises:
            NotFoundError: If the claim id does not resolve
            InvalidTransitionError: If the workflow forbids the move; the
                claim is left unchanged
        """
        with self.store.lock:
            claim = self.store.get(claim_id)
            if target not in ALLOWED_TRANSITIONS[claim.status]:
                raise InvalidTransitionError(claim_id, claim.status.value, target.value)

            officer = officer_name or self.default_officer
            claim.status = target
            claim.reviewed_at = utcnow()
            claim.reviewed_by = officer
            claim.officer_notes = reason or DEFAULT_NOTES[target]

        audit.claim_reviewed(claim_id, target.value, officer, claim.officer_notes)
        return claim

    # -- statistics --------------------------------------------------------

    def get_claims_stats(self) -> Dict[str, Any]:
        claims = self.store.list_all()
        counts = {status: 0 for status in ClaimStatus}
        for claim in claims:
            counts[claim.status] += 1

        total = len(claims)
        approved_payout = sum(
            c.payout.final_payout for c in claims if c.status == ClaimStatus.APPROVED
        )
        pending_payout = sum(
            c.payout.final_payout for c in claims if c.status == ClaimStatus.PENDING
        )
        approved = counts[ClaimStatus.APPROVED]

        return {
            "total": total,
            "pending": counts[ClaimStatus.PENDING],
            "approved": approved,
            "rejected": counts[ClaimStatus.REJECTED],
            "flagged": counts[ClaimStatus.FLAGGED],
            "total_payout": round_currency(approved_payout),
            "pending_payout": round_currency(pending_payout),
            "approval_rate": round(approved / total * 100, 1) if total else 0.0,
        }

    # -- alert-driven generation -------------------------------------------

    def auto_generate_claims_from_alerts(
        self,
        alerts: Iterable[Alert],
        farms: Iterable[Farm],
        estimator: YieldLossEstimator,
        calculator: PayoutCalculator,
    ) -> ClaimGenerationReport:
        """
        Create at most one claim per farm from a batch of alerts.

        LOW alerts, alerts for unknown farms and farms that already have a
        claim are skipped. A failure for one alert is recorded in the report
        and does not stop the batch.
        """
        farms_by_id = {farm.farm_id: farm for farm in farms}
        report = ClaimGenerationReport()

        for alert in alerts:
            if alert.severity == AlertSeverity.LOW:
                report.skipped += 1
                continue
            farm = farms_by_id.get(alert.farm_id)
            if farm is None:
                logger.warning("Alert %s references unknown farm %s", alert.alert_id, alert.farm_id)
                report.skipped += 1
                continue

            try:
                with self.store.lock:
                    if self.store.find_by_farm(farm.farm_id):
                        report.skipped += 1
                        continue
                    claim = self._claim_from_alert(alert, farm, estimator, calculator)
            except Exception as e:
                report.errors.append(BatchError.from_exception(alert.farm_id, e))
                audit.batch_error("claim generation", alert.farm_id, str(e))
                continue
            report.claims.append(claim)

        logger.info(
            "Generated %d claims from alerts (%d skipped, %d errors)",
            len(report.claims), report.skipped, len(report.errors),
        )
        return report

    def _claim_from_alert(
        self,
        alert: Alert,
        farm: Farm,
        estimator: YieldLossEstimator,
        calculator: PayoutCalculator,
    ) -> Claim:
        cause = alert.estimated_cause or self.default_disaster_type
        estimate = estimator.estimate(alert.current_ndvi, alert.baseline_ndvi, cause)
        payout = calculator.calculate(
            farm, estimate, DisasterContext(heavy_rainfall=cause == "flood")
        )
        return self.create_claim(
            farm_id=farm.farm_id,
            farmer_name=farm.farmer_name,
            yield_loss=estimate,
            payout=payout,
            alert_id=alert.alert_id,
            village=farm.village,
            area=farm.area,
            insurance_value=farm.insurance_value,
        )

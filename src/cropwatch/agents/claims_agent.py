"""
Claims Agent - "The Adjuster"

Turns alerts into insurance claims using the deterministic yield and payout
kernel. The kernel decides the figures; the agent only manages the flow.
"""

from typing import Any, Dict, List

from ..amb import Message, MessageType, Topics
from ..system import CropwatchSystem
from .base import Agent, MessageBus


class ClaimsAgent(Agent):
    """
    Role: Claim generator that:
        - Listens for ALERT messages
        - Estimates yield loss and payout for the alerted farm
        - Creates at most one claim per farm
        - Publishes the claim for officer review

    Subscribes to: ALERTS
    Publishes: CLAIM messages to the CLAIMS topic
    """

    def __init__(self, agent_id: str, bus: MessageBus, system: CropwatchSystem):
        super().__init__(agent_id, bus, name="claims-agent")
        self._system = system
        self._results: List[Dict[str, Any]] = []

    @property
    def subscribed_topics(self) -> List[str]:
        return [Topics.ALERTS]

    def handle_message(self, message: Message) -> None:
        if message.type != MessageType.ALERT:
            return
        alert = self._system.alert_store.get(message.payload["alert_id"])
        report = self._system.claims.auto_generate_claims_from_alerts(
            [alert],
            self._system.roster.all(),
            self._system.estimator,
            self._system.calculator,
        )
        for error in report.errors:
            self._log(f"Claim generation failed for farm {error.farm_id}: {error.error}")

        for claim in report.claims:
            payload = claim.to_dict()
            self._results.append(payload)
            self._log(
                f"Claim {claim.claim_id} for farm {claim.farm_id}: {claim.payout.summary}"
            )
            self.publish(
                topic=Topics.CLAIMS,
                payload=payload,
                message_type=MessageType.CLAIM,
                correlation_id=message.correlation_id,
            )

    def get_results(self) -> List[Dict[str, Any]]:
        """Claims created by this agent, oldest first."""
        return list(self._results)

    def get_kernel_stats(self) -> Dict[str, Any]:
        return {
            "estimator": self._system.estimator.stats,
            "calculator": self._system.calculator.stats,
        }

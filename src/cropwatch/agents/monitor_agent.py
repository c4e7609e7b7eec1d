"""
Monitor Agent - "The Watchman"

Runs the monitoring engine whenever a farm's NDVI series is refreshed and
broadcasts any new alert.
"""

from typing import Any, Dict, List

from ..amb import Message, MessageType, Topics
from ..system import CropwatchSystem
from .base import Agent, MessageBus


class MonitorAgent(Agent):
    """
    Subscribes to: NDVI
    Publishes: ALERT messages to the ALERTS topic
    """

    def __init__(self, agent_id: str, bus: MessageBus, system: CropwatchSystem):
        super().__init__(agent_id, bus, name="monitor-agent")
        self._system = system
        self._alerts: List[Dict[str, Any]] = []

    @property
    def subscribed_topics(self) -> List[str]:
        return [Topics.NDVI]

    def handle_message(self, message: Message) -> None:
        if message.type != MessageType.NDVI_SERIES:
            return
        farm = self._system.roster.get(message.payload["farm_id"])
        alert = self._system.monitor.monitor_farm(farm)
        if alert is None:
            return

        payload = alert.to_dict()
        self._alerts.append(payload)
        self._log(
            f"{alert.severity.value.upper()} alert for farm {farm.farm_id}: {alert.message}",
        )
        self.publish(
            topic=Topics.ALERTS,
            payload=payload,
            message_type=MessageType.ALERT,
            correlation_id=message.correlation_id,
        )

    def get_alerts(self) -> List[Dict[str, Any]]:
        """Alerts raised by this agent, oldest first."""
        return list(self._alerts)

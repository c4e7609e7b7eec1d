"""
Survey Agent - "The Eye"

Stands in for the satellite feed: synthesizes each farm's NDVI history,
overlays any requested disaster events, stores the series and announces it.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from ..amb import Message, MessageType, Topics
from ..errors import ValidationError
from ..models import DisasterEvent, Farm
from ..ndvi.series import generate_series, inject_disaster, series_summary
from ..system import CropwatchSystem
from .base import Agent, MessageBus


class SurveyAgent(Agent):
    """
    Role: NDVI source that:
        - Listens for ``synthesize`` commands on the SYSTEM topic
        - Generates and stores a series per farm (with disaster events)
        - Publishes one NDVI_SERIES message per farm

    Subscribes to: SYSTEM
    Publishes: NDVI_SERIES messages to the NDVI topic

    Command payload::

        {"command": "synthesize", "days": 60,
         "events": {"3": {"disaster_type": "flood", "start_day_offset": 45,
                          "duration_days": 21, "severity": 0.8}}}
    """

    def __init__(self, agent_id: str, bus: MessageBus, system: CropwatchSystem):
        super().__init__(agent_id, bus, name="survey-agent")
        self._system = system

    @property
    def subscribed_topics(self) -> List[str]:
        return [Topics.SYSTEM]

    def handle_message(self, message: Message) -> None:
        if message.type != MessageType.SYSTEM or message.payload.get("command") != "synthesize":
            return
        payload = message.payload
        events = {
            int(farm_id): DisasterEvent(**event)
            for farm_id, event in (payload.get("events") or {}).items()
        }
        end_date = payload.get("end_date")
        self.survey_all(
            days=payload.get("days"),
            events=events,
            end_date=date.fromisoformat(end_date) if end_date else None,
            correlation_id=message.correlation_id,
        )

    def survey_all(
        self,
        days: Optional[int] = None,
        events: Optional[Dict[int, DisasterEvent]] = None,
        end_date: Optional[date] = None,
        correlation_id: Optional[str] = None,
    ) -> int:
        """Survey every farm in the roster. Returns the number surveyed."""
        events = events or {}
        unknown = set(events) - {farm.farm_id for farm in self._system.roster.all()}
        if unknown:
            raise ValidationError(f"Disaster events for unknown farms: {sorted(unknown)}",
                                  field="events")

        farms = self._system.roster.all()
        self._log(f"Surveying {len(farms)} farms ({len(events)} with disaster events)")
        for farm in farms:
            self.survey_farm(farm, days, events.get(farm.farm_id), end_date, correlation_id)
        return len(farms)

    def survey_farm(
        self,
        farm: Farm,
        days: Optional[int] = None,
        event: Optional[DisasterEvent] = None,
        end_date: Optional[date] = None,
        correlation_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        settings = self._system.settings
        series = generate_series(
            farm,
            days or settings.series_days,
            end_date=end_date,
            noise_std=settings.noise_std,
            seasonal_amplitude=settings.seasonal_amplitude,
            rng=self._system.rng,
        )
        if event is not None:
            series = inject_disaster(series, event)
        self._system.ndvi_store.store(farm.farm_id, series)

        payload = {
            "farm_id": farm.farm_id,
            "summary": series_summary(series),
            "latest": series[-1].to_dict(),
        }
        self.publish(
            topic=Topics.NDVI,
            payload=payload,
            message_type=MessageType.NDVI_SERIES,
            correlation_id=correlation_id,
        )
        return payload

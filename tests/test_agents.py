"""End-to-end tests for the survey, monitor and claims agents."""

from typing import List

import pytest

from cropwatch.agents import Agent, AgentState, ClaimsAgent, MonitorAgent, SurveyAgent
from cropwatch.amb import Message, MessageBus, MessageType, Topics
from cropwatch.errors import ValidationError
from cropwatch.models import ClaimStatus, DisasterEvent

from conftest import END_DATE


def flood(severity, start=15):
    return {"disaster_type": "flood", "start_day_offset": start,
            "duration_days": 21, "severity": severity}


@pytest.fixture
def swarm(system):
    bus = MessageBus()
    agents = {
        "survey": SurveyAgent("survey-1", bus, system),
        "monitor": MonitorAgent("monitor-1", bus, system),
        "claims": ClaimsAgent("claims-1", bus, system),
    }
    for agent in agents.values():
        agent.start()
    return bus, agents


def synthesize(bus, events=None, correlation_id="run-1"):
    bus.publish(Message(
        type=MessageType.SYSTEM,
        topic=Topics.SYSTEM,
        payload={"command": "synthesize", "days": 30,
                 "end_date": END_DATE.isoformat(), "events": events or {}},
        source="test",
        correlation_id=correlation_id,
    ))


class TestPipeline:
    def test_flood_to_claims(self, system, swarm):
        bus, agents = swarm
        synthesize(bus, {"1": flood(0.8), "2": flood(0.9)})

        assert len(system.ndvi_store.get_series(3)) == 30
        alerts = agents["monitor"].get_alerts()
        assert sorted(a["farm_id"] for a in alerts) == [1, 2]
        assert all(a["severity"] == "moderate" for a in alerts)
        assert all(a["estimated_cause"] == "flood" for a in alerts)

        results = agents["claims"].get_results()
        assert sorted(c["farm_id"] for c in results) == [1, 2]
        farm_one = next(c for c in results if c["farm_id"] == 1)
        assert farm_one["payout"]["final_payout"] == 156750
        assert farm_one["status"] == "pending"
        assert len(system.claims.list_claims(ClaimStatus.PENDING)) == 2

    def test_messages_share_correlation_id(self, swarm):
        bus, _ = swarm
        synthesize(bus, {"1": flood(0.8)}, correlation_id="run-42")
        for topic in (Topics.NDVI, Topics.ALERTS, Topics.CLAIMS):
            history = bus.get_history(topic)
            assert history
            assert all(m.correlation_id == "run-42" for m in history)

    def test_resurvey_adds_no_duplicates(self, system, swarm):
        bus, agents = swarm
        synthesize(bus, {"1": flood(0.8)})
        synthesize(bus, {"1": flood(0.8)})
        assert len(agents["monitor"].get_alerts()) == 1
        assert len(system.claims.claims_for_farm(1)) == 1

    def test_healthy_region(self, system, swarm):
        bus, agents = swarm
        synthesize(bus)
        assert agents["monitor"].get_alerts() == []
        assert agents["claims"].get_results() == []
        assert len(bus.get_history(Topics.NDVI)) == 3

    def test_unknown_farm_event_marks_error(self, system, swarm):
        bus, agents = swarm
        synthesize(bus, {"9": flood(0.8)})
        survey = agents["survey"]
        assert survey.state == AgentState.ERROR
        assert survey.metrics.errors == 1
        assert "unknown farms" in survey.metrics.last_error
        assert system.ndvi_store.farm_ids() == []

    def test_survey_all_direct(self, system, swarm):
        _, agents = swarm
        with pytest.raises(ValidationError):
            agents["survey"].survey_all(events={9: DisasterEvent("flood", 0, 5, 0.5)})
        assert agents["survey"].survey_all(days=10, end_date=END_DATE) == 3
        assert system.ndvi_store.get_latest(1).date == END_DATE

    def test_kernel_stats(self, swarm):
        bus, agents = swarm
        synthesize(bus, {"1": flood(0.8)})
        stats = agents["claims"].get_kernel_stats()
        assert stats["estimator"]["estimate_count"] == 1


class _Recorder(Agent):
    def __init__(self, bus, fail=False):
        super().__init__("recorder", bus)
        self.fail = fail
        self.seen: List[Message] = []

    @property
    def subscribed_topics(self) -> List[str]:
        return [Topics.SYSTEM]

    def handle_message(self, message: Message) -> None:
        if self.fail:
            raise RuntimeError("cannot handle")
        self.seen.append(message)


class TestAgentLifecycle:
    def test_start_subscribes(self):
        bus = MessageBus()
        agent = _Recorder(bus)
        assert agent.state == AgentState.CREATED
        agent.start()
        assert agent.state == AgentState.RUNNING
        agent.publish(Topics.SYSTEM, {"ping": True})
        assert len(agent.seen) == 1
        assert agent.metrics.messages_sent == 1
        assert agent.metrics.messages_received == 1

    def test_cannot_start_twice(self):
        agent = _Recorder(MessageBus())
        agent.start()
        with pytest.raises(RuntimeError):
            agent.start()

    def test_stopped_agent_ignores_messages(self):
        bus = MessageBus()
        agent = _Recorder(bus)
        agent.start()
        agent.stop()
        agent.publish(Topics.SYSTEM, {})
        assert agent.seen == []
        assert agent.metrics.messages_received == 0

    def test_handler_error_is_recorded(self):
        bus = MessageBus()
        agent = _Recorder(bus, fail=True)
        agent.start()
        agent.publish(Topics.SYSTEM, {})
        assert agent.state == AgentState.ERROR
        assert agent.metrics.last_error == "cannot handle"
        assert agent.metrics.to_dict()["errors"] == 1

"""Integration tests for the flood and healthy-region scenarios."""

import pytest

from cropwatch.models import AlertSeverity, DisasterType
from cropwatch.scenarios import flood_event, plan_flood, run_flood_scenario, seed_healthy_series
from cropwatch.system import build_system

from conftest import END_DATE, make_farm


class TestHealthyRegion:
    def test_no_alerts(self, system):
        assert seed_healthy_series(system, end_date=END_DATE) == 90
        report = system.monitor.monitor_all_farms()
        assert report.farms_checked == 3
        assert report.alerts_generated == 0
        assert system.generate_claims().claims == []


class TestFloodScenario:
    def test_affected_farms_alerted(self, system):
        scenario = run_flood_scenario(system, end_date=END_DATE)
        assert len(scenario.affected_farm_ids) == 2
        assert len(scenario.healthy_farm_ids) == 1
        assert set(scenario.severities) == set(scenario.affected_farm_ids)
        assert all(0.6 <= s <= 0.9 for s in scenario.severities.values())

        report = scenario.report
        assert report.farms_checked == 3
        assert sorted(a.farm_id for a in report.new_alerts) == sorted(scenario.affected_farm_ids)
        for alert in report.new_alerts:
            # the flood is at full depth on the latest day
            assert alert.drop_percentage == pytest.approx(scenario.severities[alert.farm_id] * 50)
            assert alert.severity == AlertSeverity.MODERATE
            assert alert.estimated_cause == "flood"

    def test_claims_for_flooded_farms(self, system):
        scenario = run_flood_scenario(system, end_date=END_DATE)
        report = system.generate_claims()
        assert sorted(c.farm_id for c in report.claims) == sorted(scenario.affected_farm_ids)
        for claim in report.claims:
            assert claim.payout.factors["weather"].applied is True
            assert claim.payout.final_payout > 0

        assert system.generate_claims().claims == []

    def test_severe_count(self, system):
        scenario = run_flood_scenario(system, affected_fraction=1.0, end_date=END_DATE)
        assert scenario.severe_count == sum(1 for s in scenario.severities.values() if s > 0.75)
        assert len(scenario.healthy_farm_ids) == 0

    def test_seeded_runs_match(self, quiet_settings):
        def run():
            system = build_system(quiet_settings, farms=[make_farm(i) for i in range(1, 6)])
            return run_flood_scenario(system, end_date=END_DATE).severities

        assert run() == run()


class TestFloodPlan:
    def test_flood_event(self, rng):
        event = flood_event(rng, 30)
        assert event.disaster_type == DisasterType.FLOOD
        assert event.start_day_offset == 15
        assert event.duration_days == 21
        assert 0.6 <= event.severity <= 0.9

    def test_short_series_starts_at_first_day(self, rng):
        assert flood_event(rng, 10).start_day_offset == 0

    def test_plan_covers_affected_share(self, system):
        plan = plan_flood(system, affected_fraction=0.5)
        assert len(plan) == 2
        assert set(plan) <= {1, 2, 3}
        for event in plan.values():
            assert event.start_day_offset == system.settings.series_days - 15
            assert event.to_dict()["disaster_type"] == "flood"

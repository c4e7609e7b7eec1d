#!/usr/bin/env python3
"""
Cropwatch - Flood Demo

Demonstrates the satellite crop insurance swarm on a regional flood.

This script:
1. Builds the system (roster, stores, kernel) from settings
2. Spins up three agents (survey-agent, monitor-agent, claims-agent)
3. Requests NDVI synthesis with a flood on most farms
4. Lets the agents raise alerts and generate claims
5. Reviews a few claims and prints the regional payout summary

"The satellite raised the alert; the formula sized the payout."
"""

import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from cropwatch.agents import ClaimsAgent, MonitorAgent, SurveyAgent
from cropwatch.amb import Message, MessageBus, MessageType, Topics
from cropwatch.config import Settings, load_config
from cropwatch.models import ClaimStatus
from cropwatch.scenarios import plan_flood
from cropwatch.system import build_system
from cropwatch.ypk.payout import PayoutCalculator, format_inr


def print_banner():
    print("\n" + "=" * 70)
    print("  CROPWATCH - Satellite Crop Insurance Swarm")
    print("=" * 70)
    print("  'The satellite raised the alert; the formula sized the payout.'")
    print("=" * 70 + "\n")


def print_section(title: str):
    print(f"\n{'─' * 70}")
    print(f"  {title}")
    print(f"{'─' * 70}\n")


def flood_events(system, affected_fraction: float):
    """Flood events keyed the way the survey command carries them."""
    return {
        str(farm_id): event.to_dict()
        for farm_id, event in plan_flood(system, affected_fraction).items()
    }


def run_demo(settings: Settings, affected_fraction: float = 0.8, review: int = 3):
    print_banner()

    print_section("STEP 1: Building the System")
    system = build_system(settings)
    print(f"[✓] {len(system.roster)} farms loaded")

    print_section("STEP 2: Initializing Agent Swarm")
    bus = MessageBus()
    survey_agent = SurveyAgent("survey-agent-001", bus, system)
    monitor_agent = MonitorAgent("monitor-agent-001", bus, system)
    claims_agent = ClaimsAgent("claims-agent-001", bus, system)
    for agent in (survey_agent, monitor_agent, claims_agent):
        agent.start()
        print(f"[✓] {agent.name} started, topics: {agent.subscribed_topics}")

    print_section("STEP 3: Satellite Survey with Regional Flood")
    events = flood_events(system, affected_fraction)
    print(f"[→] Flooding {len(events)} of {len(system.roster)} farms")
    bus.publish(Message(
        type=MessageType.SYSTEM,
        topic=Topics.SYSTEM,
        payload={"command": "synthesize", "days": settings.series_days, "events": events},
        source="demo",
        correlation_id="flood-demo-001",
    ))

    print_section("STEP 4: Alerts")
    alerts = monitor_agent.get_alerts()
    health = system.monitor.regional_health()
    print(f"Alerts raised: {len(alerts)}")
    print(f"Affected farms: {health['affected_farms']} ({health['affected_percentage']}%)")
    print(f"Severity: {health['severity_distribution']}")
    for alert in alerts[:5]:
        print(f"  [{alert['severity'].upper():8}] Farm {alert['farm_id']:3} "
              f"{alert['farmer_name']}: {alert['drop_percentage']:.1f}% drop")

    print_section("STEP 5: Claims")
    claims = claims_agent.get_results()
    print(f"Claims generated: {len(claims)}")
    for claim in claims[:3]:
        print(f"\n  Farm {claim['farm_id']} - {claim['farmer_name']}")
        for step in claim["payout"]["calculation_steps"]:
            print(f"    {step['step']}. {step['description']}: {step['formula']} = {step['result']}")
        print(f"    -> {claim['payout']['recommendation']}")

    print_section("STEP 6: Officer Review")
    pending = system.claims.list_claims(ClaimStatus.PENDING)
    for claim in pending[:review]:
        if claim.payout.final_payout > PayoutCalculator.SENIOR_APPROVAL_ABOVE:
            system.claims.flag(claim.claim_id)
        else:
            system.claims.approve(claim.claim_id)
    stats = system.claims.get_claims_stats()
    print(f"Total: {stats['total']}  Pending: {stats['pending']}  "
          f"Approved: {stats['approved']}  Flagged: {stats['flagged']}")
    print(f"Approved payout: {format_inr(stats['total_payout'])}")
    print(f"Pending payout: {format_inr(stats['pending_payout'])}")
    print(f"Approval rate: {stats['approval_rate']}%")

    print_section("STEP 7: Regional Payout")
    regional = PayoutCalculator.calculate_regional(c.payout for c in system.claims.list_claims())
    print(f"Total: {regional['formatted_total']} ({regional['total_payout_crores']} crore)")
    print(f"Average: {regional['formatted_average']}")
    print(f"Distribution: {regional['distribution']}")

    for agent in (survey_agent, monitor_agent, claims_agent):
        agent.stop()
    print("\n" + "=" * 70)
    print("  Demo Complete")
    print("=" * 70 + "\n")


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Cropwatch Flood Demo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python demo_flood.py                     # 50 farms, 80% flooded
  python demo_flood.py --farms 4           # small roster
  python demo_flood.py --config cropwatch.yml --seed 7
        """
    )
    parser.add_argument("--config", help="Path to a YAML settings file")
    parser.add_argument("--farms", type=int, default=None, help="Number of farms to generate")
    parser.add_argument("--affected", type=float, default=0.8, help="Share of farms flooded")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--review", type=int, default=3, help="Claims to review")
    args = parser.parse_args()

    if args.config:
        settings = load_config(args.config)
    else:
        settings = Settings(log_level="WARNING", log_format="text")
    if args.farms is not None:
        settings.farm_count = args.farms
    elif settings.farm_count is None:
        settings.farm_count = 50
    if args.seed is not None:
        settings.seed = args.seed

    run_demo(settings, affected_fraction=args.affected, review=args.review)


if __name__ == "__main__":
    main()

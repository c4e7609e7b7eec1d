"""
Agents Module

Pipeline agents of the crop insurance swarm.
"""

from .base import Agent, AgentMetrics, AgentState
from .survey_agent import SurveyAgent
from .monitor_agent import MonitorAgent
from .claims_agent import ClaimsAgent

__all__ = [
    "Agent",
    "AgentMetrics",
    "AgentState",
    "ClaimsAgent",
    "MonitorAgent",
    "SurveyAgent",
]

"""
NDVI - time-series synthesis and monitoring.
"""

from .series import disaster_profile, generate_series, inject_disaster, series_summary
from .monitor import MonitoringEngine, MonitoringReport, classify_drop

__all__ = [
    "MonitoringEngine",
    "MonitoringReport",
    "classify_drop",
    "disaster_profile",
    "generate_series",
    "inject_disaster",
    "series_summary",
]

"""
Topic Definitions

Standard topic names for the crop insurance message bus.
"""


class Topics:
    """Standard topic names for agent communication."""

    # Survey Agent publishes synthesized NDVI series here
    NDVI = "crop.ndvi"

    # Monitor Agent publishes new NDVI-drop alerts here
    ALERTS = "crop.alerts"

    # Claims Agent publishes generated claims here
    CLAIMS = "crop.claims"

    # System commands and agent status
    SYSTEM = "crop.system"

"""
Cropwatch - Satellite Crop Insurance Swarm

Simulates NDVI (vegetation index) signals for farm plots, detects crop
disasters from NDVI drops, and turns them into transparent yield-loss,
payout and claim decisions.

"The satellite raised the alert; the formula sized the payout."
"""

__version__ = "0.1.0"

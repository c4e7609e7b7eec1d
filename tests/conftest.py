"""Shared fixtures and src/ import path for the cropwatch tests."""
import sys
from datetime import date
from pathlib import Path

import numpy as np
import pytest

# Add src/ to sys.path so `import cropwatch` works without installing
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from cropwatch.config import Settings  # noqa: E402
from cropwatch.models import Farm  # noqa: E402
from cropwatch.system import build_system  # noqa: E402

END_DATE = date(2025, 9, 30)


def make_farm(farm_id=1, baseline_ndvi=0.75, insurance_value=250000, area=2.5,
              farmer_name="rajaram mane", village="Nesari"):
    return Farm.from_dict({
        "farm_id": farm_id,
        "farmer_name": farmer_name,
        "crop": "Soybean",
        "location": "Kolhapur",
        "polygon": [[0.0, 0.0], [0.0, 0.01], [0.01, 0.01], [0.01, 0.0]],
        "area": area,
        "baseline_ndvi": baseline_ndvi,
        "insurance_value": insurance_value,
        "administrative": {"village": village, "district": "Kolhapur"},
    })


@pytest.fixture
def square():
    """Unit square in (lat, lng)."""
    return [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0)]


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def farm():
    return make_farm()


@pytest.fixture
def quiet_settings():
    """Settings with a noiseless, flat series so NDVI values are exact."""
    return Settings(noise_std=0.0, seasonal_amplitude=0.0, seed=7, series_days=30)


@pytest.fixture
def system(quiet_settings):
    farms = [
        make_farm(1, baseline_ndvi=0.75, insurance_value=250000),
        make_farm(2, baseline_ndvi=0.80, insurance_value=320000, farmer_name="sarjerao mane"),
        make_farm(3, baseline_ndvi=0.70, insurance_value=180000, farmer_name="vishal rane"),
    ]
    return build_system(quiet_settings, farms=farms)

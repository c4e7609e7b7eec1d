"""
Farm Rosters

The four seed farms of the Kolhapur pilot and a generator for larger
synthetic rosters placed inside the survey boundary.
"""

import logging
from datetime import date
from typing import List, Optional

import numpy as np

from .config import DEFAULT_BOUNDARY, Settings
from .geo.placement import generate_placements
from .models import AdministrativeData, Farm

logger = logging.getLogger(__name__)

INSURED_VALUE_PER_HECTARE = 100_000  # rupees

_SEED_DATA = [
    {
        "farm_id": 1,
        "farmer_name": "rajaram mane",
        "crop": "Soybean",
        "location": "Kolhapur",
        "polygon": [
            [16.71041949368174, 74.19363319596657],
            [16.710327084514432, 74.1952216044626],
            [16.711843943078215, 74.1953183725529],
            [16.711936352245523, 74.19372996405687],
        ],
        "area": 2.5,
        "crop_type": "Soybean (JS 335 variety)",
        "sowing_date": "2025-07-15",
        "expected_harvest_date": "2025-11-10",
        "baseline_ndvi": 0.75,
        "insurance_value": 250000,
        "administrative": {
            "state": "Maharashtra", "district": "Kolhapur", "tehsil": "Shahuwadi",
            "village": "Nesari", "pincode": "416213",
        },
    },
    {
        "farm_id": 2,
        "farmer_name": "sarjerao mane",
        "crop": "Soybean",
        "location": "Kolhapur",
        "polygon": [
            [16.70675768111585, 74.1954133774293],
            [16.706917258109986, 74.19693387169205],
            [16.708369261640176, 74.19676676748122],
            [16.70820968464604, 74.19524627321847],
        ],
        "area": 3.2,
        "crop_type": "Soybean (JS 335 variety)",
        "sowing_date": "2025-07-18",
        "expected_harvest_date": "2025-11-12",
        "baseline_ndvi": 0.72,
        "insurance_value": 320000,
        "administrative": {
            "state": "Maharashtra", "district": "Kolhapur", "tehsil": "Shahuwadi",
            "village": "Nesari", "pincode": "416213",
        },
    },
    {
        "farm_id": 3,
        "farmer_name": "vishal rane",
        "crop": "Soybean",
        "location": "Kolhapur",
        "polygon": [
            [16.705457645706318, 74.19502180148767],
            [16.705394796848662, 74.19635331376927],
            [16.706666331099562, 74.19641912719568],
            [16.706729179957218, 74.19508761491409],
        ],
        "area": 1.8,
        "crop_type": "Soybean (MAUS 71 variety)",
        "sowing_date": "2025-07-12",
        "expected_harvest_date": "2025-11-05",
        "baseline_ndvi": 0.78,
        "insurance_value": 180000,
        "administrative": {
            "state": "Maharashtra", "district": "Kolhapur", "tehsil": "Radhanagari",
            "village": "Kasba Walva", "pincode": "416211",
        },
    },
    {
        "farm_id": 4,
        "farmer_name": "Ramesh Patil",
        "crop": "Soybean",
        "location": "Kolhapur",
        "polygon": [
            [16.71107749556177, 74.19392821373813],
            [16.711000149224745, 74.19589600094011],
            [16.712879297363575, 74.19597699568925],
            [16.7129566437006, 74.19400920848727],
        ],
        "area": 4.0,
        "crop_type": "Soybean (JS 335 variety)",
        "sowing_date": "2025-07-20",
        "expected_harvest_date": "2025-11-15",
        "baseline_ndvi": 0.74,
        "insurance_value": 400000,
        "administrative": {
            "state": "Maharashtra", "district": "Kolhapur", "tehsil": "Karveer",
            "village": "Nigave", "pincode": "416207",
        },
    },
]

SEED_FARMS = tuple(Farm.from_dict(data) for data in _SEED_DATA)

_FIRST_NAMES = ["Rajaram", "Sarjerao", "Vishal", "Ramesh", "Sunil", "Anil", "Dattatray",
                "Ganpati", "Shivaji", "Prakash", "Sambhaji", "Vilas"]
_SURNAMES = ["Mane", "Rane", "Patil", "Jadhav", "Pawar", "Shinde", "Kamble", "Chavan"]
_VILLAGES = [
    AdministrativeData(village="Nesari", tehsil="Shahuwadi", district="Kolhapur",
                       state="Maharashtra", pincode="416213"),
    AdministrativeData(village="Kasba Walva", tehsil="Radhanagari", district="Kolhapur",
                       state="Maharashtra", pincode="416211"),
    AdministrativeData(village="Nigave", tehsil="Karveer", district="Kolhapur",
                       state="Maharashtra", pincode="416207"),
]


def generate_roster(
    count: int,
    settings: Optional[Settings] = None,
    rng: Optional[np.random.Generator] = None,
) -> List[Farm]:
    """
    Generate ``count`` soybean farms inside the configured boundary.

    Insured value is 1 lakh rupees per hectare. When placement runs out of
    attempts the roster is shorter than ``count``.
    """
    settings = settings or Settings()
    rng = rng if rng is not None else np.random.default_rng(settings.seed)

    placements = generate_placements(
        count,
        settings.boundary,
        min_distance=settings.min_distance,
        attempts_per_farm=settings.attempts_per_farm,
        rng=rng,
    )
    if len(placements) < count:
        logger.warning("Roster has %d farms, %d requested", len(placements), count)

    farms = []
    for index, placement in enumerate(placements):
        farm_id = index + 1
        name = f"{rng.choice(_FIRST_NAMES)} {rng.choice(_SURNAMES)}"
        farms.append(Farm(
            farm_id=farm_id,
            farmer_name=name,
            crop="Soybean",
            location="Kolhapur",
            polygon=placement.polygon,
            area=placement.area,
            baseline_ndvi=round(float(rng.uniform(0.70, 0.80)), 2),
            insurance_value=round(placement.area * INSURED_VALUE_PER_HECTARE),
            crop_type="Soybean (JS 335 variety)",
            sowing_date=date(2025, 7, 15),
            expected_harvest_date=date(2025, 11, 10),
            administrative=_VILLAGES[index % len(_VILLAGES)],
        ))
    return farms


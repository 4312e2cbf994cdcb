"""
Facility seeding.
Creates the initial set of beds when the store is empty.

FACILITY LAYOUT:
================

- ICU:        10 beds (BED-1 .. BED-10), Critical
- Cardiology: 10 beds (BED-11 .. BED-20)
- General:    20 beds (BED-21 .. BED-40)
- Pediatrics: 10 beds (BED-41 .. BED-50)

Every seeded bed starts Available with a distance from the nursing station
between 1 and SEED_DISTANCE_MAX.
"""
from typing import List, Tuple
import logging

from bedflow.config import settings
from bedflow.models.bed import Bed
from bedflow.models.enums import WardEnum, BedStatusEnum, bed_type_for_ward
from bedflow.services.registry import Registry, BED_ID_PREFIX

logger = logging.getLogger("bedflow.init_data")

FACILITY_LAYOUT: List[Tuple[WardEnum, int]] = [
    (WardEnum.ICU, 10),
    (WardEnum.CARDIOLOGY, 10),
    (WardEnum.GENERAL, 20),
    (WardEnum.PEDIATRICS, 10),
]


def seed_facility(registry: Registry) -> int:
    """
    Seeds the facility beds if the registry has none.

    Args:
        registry: Registry already loaded from the store

    Returns:
        Number of beds created (0 when beds already exist)
    """
    if registry.list_beds():
        return 0

    number = 0
    for ward, count in FACILITY_LAYOUT:
        for _ in range(count):
            number += 1
            registry.insert_bed(Bed(
                id=f"{BED_ID_PREFIX}{number}",
                ward=ward,
                status=BedStatusEnum.AVAILABLE,
                distance_from_station=registry.rng.randint(1, settings.SEED_DISTANCE_MAX),
                type=bed_type_for_ward(ward),
            ))

    logger.info(f"Seeded {number} beds")
    return number

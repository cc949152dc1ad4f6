"""Bookable service catalog, loaded once from JSON reference data."""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from ..core.config import settings
from .variants import (
    AddOn,
    ChefService,
    CleaningService,
    ElectricalService,
    FlatUrgency,
    GardenService,
    HandymanService,
    MultiplierUrgency,
    PlumbingService,
    PoolService,
    ServiceCatalog,
    ServiceConfig,
)

logger = logging.getLogger(__name__)

CATALOG_FILE = Path(__file__).with_name("catalog.json")


@lru_cache(maxsize=None)
def load_catalog(path: str) -> ServiceCatalog:
    logger.info("Loading service catalog from %s", path)
    with open(path, encoding="utf-8") as fh:
        # Keep multipliers exact; 1.3 must not become 1.3000000000000000444.
        raw = json.load(fh, parse_float=Decimal)
    catalog = ServiceCatalog.model_validate(raw)
    logger.info("Service catalog loaded: %d services", len(catalog.services))
    return catalog


def get_catalog() -> ServiceCatalog:
    return load_catalog(settings.SERVICE_CATALOG_PATH or str(CATALOG_FILE))


__all__ = [
    "AddOn",
    "ChefService",
    "CleaningService",
    "ElectricalService",
    "FlatUrgency",
    "GardenService",
    "HandymanService",
    "MultiplierUrgency",
    "PlumbingService",
    "PoolService",
    "ServiceCatalog",
    "ServiceConfig",
    "get_catalog",
    "load_catalog",
    "CATALOG_FILE",
]

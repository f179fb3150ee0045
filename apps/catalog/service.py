import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Tuple

from settings.config import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VendorCatalog:
    """
    Reference vocabularies used to validate registrations and uploads.
    Kept as data so the lists can change without touching the workflow code.
    """
    entity_types: Tuple[str, ...]
    categories: Tuple[str, ...]
    document_types: Tuple[str, ...]
    employee_counts: Tuple[str, ...]
    annual_turnovers: Tuple[str, ...]
    pricing_tiers: Tuple[str, ...]
    states: Tuple[str, ...]


@lru_cache()
def load_catalog(path: str) -> VendorCatalog:
    """
    Read the catalog JSON file once per path.
    """
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    catalog = VendorCatalog(
        entity_types=tuple(raw["entity_types"]),
        categories=tuple(raw["categories"]),
        document_types=tuple(raw["document_types"]),
        employee_counts=tuple(raw.get("employee_counts", ())),
        annual_turnovers=tuple(raw.get("annual_turnovers", ())),
        pricing_tiers=tuple(raw.get("pricing_tiers", ())),
        states=tuple(raw.get("states", ())),
    )
    logger.info("Loaded vendor catalog from %s (%d categories)", path, len(catalog.categories))
    return catalog


def get_catalog() -> VendorCatalog:
    return load_catalog(get_settings().VENDOR_CATALOG_PATH)

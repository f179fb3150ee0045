from fastapi import APIRouter

from apps.catalog.schemas import CatalogResponse
from apps.catalog.service import get_catalog


router = APIRouter(prefix="/api/vendor-catalog", tags=["Vendor Catalog"])


@router.get("", response_model=CatalogResponse, response_model_by_alias=True)
async def read_catalog():
    """
    Vocabularies the registration form offers (categories, document types, states, ...).
    """
    catalog = get_catalog()
    return CatalogResponse(
        entity_types=list(catalog.entity_types),
        categories=list(catalog.categories),
        document_types=list(catalog.document_types),
        employee_counts=list(catalog.employee_counts),
        annual_turnovers=list(catalog.annual_turnovers),
        pricing_tiers=list(catalog.pricing_tiers),
        states=list(catalog.states),
    )

from typing import List

from pydantic import BaseModel, ConfigDict, Field as PydanticField


class CatalogResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    entity_types: List[str] = PydanticField(alias="entityTypes")
    categories: List[str]
    document_types: List[str] = PydanticField(alias="documentTypes")
    employee_counts: List[str] = PydanticField(alias="employeeCounts")
    annual_turnovers: List[str] = PydanticField(alias="annualTurnovers")
    pricing_tiers: List[str] = PydanticField(alias="pricingTiers")
    states: List[str]

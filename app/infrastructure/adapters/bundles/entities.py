from __future__ import annotations

from functools import lru_cache
from types import SimpleNamespace
from typing import Optional

from app.application.interfaces import IEntityPipelineAdapters
from app.core.entity_models import (
    InternationalReferenceData,
    LocationReferenceData,
    OrganizationReferenceData,
)
from app.infrastructure.adapters import (
    DomesticLocationResolver,
    InternationalLocationResolver,
    OrganizationResolver,
    ReferenceDataLoader,
    StanfordNERPolisher,
)


@lru_cache(maxsize=4)
def load_reference_data(
    data_path: Optional[str] = None,
) -> tuple[LocationReferenceData, OrganizationReferenceData, InternationalReferenceData]:
    """Read the reference tables once per data directory for the life of the process."""
    loader = ReferenceDataLoader(data_path)
    return (
        loader.load_location_data(),
        loader.load_organization_data(),
        loader.load_international_data(),
    )


def get_entity_adapter_bundle(
    *,
    data_path: Optional[str] = None,
    locations: Optional[LocationReferenceData] = None,
    organizations: Optional[OrganizationReferenceData] = None,
    international: Optional[InternationalReferenceData] = None,
) -> IEntityPipelineAdapters:
    """Provide the adapters container for the entity resolution pipeline.

    Reference tables may be injected; otherwise they are loaded from
    ``data_path`` (default: settings.entity_data_path). When the domestic and
    organization tables are injected without international ones, the bundle
    has no international resolver and the pipeline stops after the domestic pass.
    """
    if locations is None or organizations is None:
        loaded_locations, loaded_organizations, loaded_international = load_reference_data(data_path)
        locations = locations or loaded_locations
        organizations = organizations or loaded_organizations
        international = international or loaded_international

    return SimpleNamespace(
        polisher=StanfordNERPolisher(),
        organization_resolver=OrganizationResolver(organizations),
        location_resolver=DomesticLocationResolver(locations),
        international_resolver=InternationalLocationResolver(international) if international is not None else None,
    )

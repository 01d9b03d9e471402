from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from .entity_resolver import ILocationResolver, IOrganizationResolver
from .ner_polisher import INERPolisher


@runtime_checkable
class IEntityPipelineAdapters(Protocol):
    polisher: INERPolisher
    organization_resolver: IOrganizationResolver
    location_resolver: ILocationResolver
    international_resolver: Optional[ILocationResolver]

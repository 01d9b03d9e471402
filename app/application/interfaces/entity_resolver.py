from __future__ import annotations

from typing import List, Protocol, Sequence, Tuple

from app.core.entity_models import (
    LocationEntity,
    NamedEntity,
    OrganizationalEntity,
    OrganizationResolution,
)


class ILocationResolver(Protocol):
    def resolve(
        self, candidates: Sequence[NamedEntity]
    ) -> Tuple[List[LocationEntity], List[LocationEntity]]:
        """Return (resolved, unresolved) location entities for one story."""
        ...


class IOrganizationResolver(Protocol):
    def resolve(
        self, candidates: Sequence[NamedEntity]
    ) -> Tuple[List[OrganizationalEntity], List[OrganizationalEntity]]:
        """Return (resolved, unresolved) organizations for one story."""
        ...

    def resolve_story(self, candidates: Sequence[NamedEntity]) -> OrganizationResolution:
        """Like resolve(), but reports an id conflict instead of only logging it."""
        ...

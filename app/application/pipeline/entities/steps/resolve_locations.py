from __future__ import annotations

from app.application.interfaces import ILocationResolver
from app.application.pipeline.base import BaseStep, PipelineContext


class ResolveDomesticLocationsStep(BaseStep):
    """Input: candidates -> Output: locations_resolved, locations_unresolved"""

    name = "resolve_domestic_locations"
    required_keys = ["candidates"]

    def __init__(self, resolver: ILocationResolver) -> None:
        self.resolver = resolver

    async def run(self, context: PipelineContext) -> None:  # type: ignore[override]
        candidates = self.lookup(context, "candidates") or []
        resolved, unresolved = self.resolver.resolve(candidates)
        context.update(locations_resolved=resolved, locations_unresolved=unresolved)


class ResolveInternationalLocationsStep(BaseStep):
    """Input: locations_unresolved -> Output: international_locations_resolved, locations_unresolved"""

    name = "resolve_international_locations"
    required_keys = ["locations_unresolved"]

    def __init__(self, resolver: ILocationResolver) -> None:
        self.resolver = resolver

    async def run(self, context: PipelineContext) -> None:  # type: ignore[override]
        leftovers = self.lookup(context, "locations_unresolved") or []
        resolved, unresolved = self.resolver.resolve(leftovers)
        context.update(international_locations_resolved=resolved, locations_unresolved=unresolved)

from __future__ import annotations

from app.application.interfaces import IOrganizationResolver
from app.application.pipeline.base import BaseStep, PipelineContext


class ResolveOrganizationsStep(BaseStep):
    """Input: candidates -> Output: organization_resolution"""

    name = "resolve_organizations"
    required_keys = ["candidates"]

    def __init__(self, resolver: IOrganizationResolver) -> None:
        self.resolver = resolver

    async def run(self, context: PipelineContext) -> None:  # type: ignore[override]
        candidates = self.lookup(context, "candidates") or []
        context.set("organization_resolution", self.resolver.resolve_story(candidates))

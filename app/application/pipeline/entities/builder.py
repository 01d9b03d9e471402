from __future__ import annotations

from app.application.interfaces import IEntityPipelineAdapters
from app.application.pipeline.base import Pipeline, make_logging_middleware
from app.application.pipeline.factory import PipelineFactory
from app.application.pipeline.entities.steps.polish_ner import PolishStanfordNERStep
from app.application.pipeline.entities.steps.resolve_organizations import (
    ResolveOrganizationsStep,
)
from app.application.pipeline.entities.steps.resolve_locations import (
    ResolveDomesticLocationsStep,
    ResolveInternationalLocationsStep,
)


def build_entity_pipeline(
    adapters: IEntityPipelineAdapters,
    *,
    enable_logging_middleware: bool = True,
    fail_fast: bool = True,
) -> Pipeline:

    middlewares = [make_logging_middleware()] if enable_logging_middleware else []
    factory = PipelineFactory(middlewares=middlewares, fail_fast=fail_fast)
    factory.add(PolishStanfordNERStep(adapters.polisher))
    factory.add(ResolveOrganizationsStep(adapters.organization_resolver))
    factory.add(ResolveDomesticLocationsStep(adapters.location_resolver))

    international = getattr(adapters, "international_resolver", None)
    if international is not None:
        factory.add(ResolveInternationalLocationsStep(international))

    return factory.build()

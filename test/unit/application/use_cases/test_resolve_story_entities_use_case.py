from types import SimpleNamespace

import pytest

from app.application.use_cases.outcomes import OutcomeStatus
from app.application.use_cases.resolve_story_entities import ResolveStoryEntitiesUseCase
from app.core.entity_models import EntityType
from app.infrastructure.adapters import (
    DomesticLocationResolver,
    OrganizationResolver,
    StanfordNERPolisher,
)
from app.infrastructure.adapters.bundles.entities import get_entity_adapter_bundle

TRANSCRIPT = "She joined the NAACP in New Orleans."
NER_LINES = [
    "She\tO", "joined\tO", "the\tO", "NAACP\tORGANIZATION", "in\tO",
    "New\tLOCATION", "Orleans\tLOCATION", ".\tO",
]


class _CannedPolisher:
    """Returns prepared candidates whatever the tagger output."""

    def __init__(self, candidates):
        self.candidates = candidates

    def polish(self, token_lines, transcript):
        return list(self.candidates)


@pytest.fixture
def adapters(location_reference, organization_reference):
    return get_entity_adapter_bundle(
        locations=location_reference, organizations=organization_reference
    )


class TestResolveStoryEntitiesUseCase:
    @pytest.mark.asyncio
    async def test_story_resolved(self, adapters):
        outcome = await ResolveStoryEntitiesUseCase(adapters).execute(
            transcript=TRANSCRIPT, ner_lines=NER_LINES
        )

        assert outcome.ok
        assert [c.type for c in outcome.candidates] == [EntityType.ORG, EntityType.LOC]
        assert [o.loc_name_id for o in outcome.organizations_resolved] == ["n79018519"]
        assert outcome.organizations_unresolved == []
        assert [loc.place_id for loc in outcome.locations_resolved] == [1629985]
        assert outcome.conflict == ""
        assert outcome.run_id

    @pytest.mark.asyncio
    async def test_tagger_file_from_disk(self, adapters, tmp_path):
        path = tmp_path / "story.ner"
        path.write_text("\n".join(NER_LINES), encoding="utf-8")

        outcome = await ResolveStoryEntitiesUseCase(adapters).execute(
            transcript=TRANSCRIPT, ner_path=str(path)
        )

        assert outcome.ok
        assert len(outcome.candidates) == 2

    @pytest.mark.asyncio
    async def test_organization_conflict_marks_story_not_resolved(
        self, location_reference, organization_reference, make_entity
    ):
        candidates = [
            make_entity("Howard", EntityType.ORG, start=0, context="Howard [University]"),
            make_entity("Howard", EntityType.ORG, start=300, context="Howard [Army]"),
            make_entity("New Orleans", EntityType.LOC, start=600),
        ]
        adapters = SimpleNamespace(
            polisher=_CannedPolisher(candidates),
            organization_resolver=OrganizationResolver(organization_reference),
            location_resolver=DomesticLocationResolver(location_reference),
        )

        outcome = await ResolveStoryEntitiesUseCase(adapters).execute(
            transcript="irrelevant", ner_lines=[]
        )

        assert outcome.status == OutcomeStatus.NOT_RESOLVED
        assert not outcome.ok
        assert outcome.conflict == "Howard"
        assert outcome.organizations_resolved == [] and outcome.organizations_unresolved == []
        assert [loc.text for loc in outcome.locations_resolved] == ["New Orleans"]

    @pytest.mark.asyncio
    async def test_desynchronised_tagger_output_fails_story(self, adapters):
        outcome = await ResolveStoryEntitiesUseCase(adapters).execute(
            transcript="Something else entirely.", ner_lines=NER_LINES
        )

        assert outcome.status == OutcomeStatus.FAILED
        assert outcome.error_code == "NER_DESYNC_ERROR"
        assert outcome.candidates == []

    @pytest.mark.asyncio
    async def test_missing_tagger_output_fails_story(self):
        adapters = SimpleNamespace(
            polisher=StanfordNERPolisher(),
            organization_resolver=None,
            location_resolver=None,
        )

        outcome = await ResolveStoryEntitiesUseCase(adapters).execute(transcript=TRANSCRIPT)

        assert outcome.status == OutcomeStatus.FAILED
        assert outcome.error_code == "PIPELINE_ERROR"

    @pytest.mark.asyncio
    async def test_places_abroad_resolved_after_domestic_pass(
        self, location_reference, organization_reference, international_reference
    ):
        adapters = get_entity_adapter_bundle(
            locations=location_reference,
            organizations=organization_reference,
            international=international_reference,
        )
        lines = [
            "She\tO", "moved\tO", "from\tO", "New\tLOCATION", "Orleans\tLOCATION", "to\tO",
            "Tokyo\tLOCATION", "and\tO", "Gotham\tLOCATION", ".\tO",
        ]

        outcome = await ResolveStoryEntitiesUseCase(adapters).execute(
            transcript="She moved from New Orleans to Tokyo and Gotham.", ner_lines=lines
        )

        assert outcome.ok
        assert [loc.place_id for loc in outcome.locations_resolved] == [1629985]
        assert [(loc.text, loc.country_code) for loc in outcome.international_locations_resolved] == [
            ("Tokyo", 392)
        ]
        assert [loc.text for loc in outcome.locations_unresolved] == ["Gotham"]

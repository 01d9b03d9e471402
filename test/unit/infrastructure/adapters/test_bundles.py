from app.core.config import Settings
from app.infrastructure.adapters import (
    AlignmentFormatter,
    DomesticLocationResolver,
    InternationalLocationResolver,
    GentleTranscriptionAligner,
    OrganizationResolver,
    StanfordNERPolisher,
    TextCaptioner,
)
from app.infrastructure.adapters.bundles.captions import get_caption_adapter_bundle
from app.infrastructure.adapters.bundles.entities import (
    get_entity_adapter_bundle,
    load_reference_data,
)


def test_caption_bundle_shares_formatter_and_applies_settings():
    s = Settings(caption_target_length=42, max_unaligned_trailing_words_allowed=3)

    adapters = get_caption_adapter_bundle(settings=s)

    assert isinstance(adapters.aligner, GentleTranscriptionAligner)
    assert isinstance(adapters.formatter, AlignmentFormatter)
    assert isinstance(adapters.captioner, TextCaptioner)
    assert adapters.captioner.formatter is adapters.formatter
    assert adapters.captioner.options.target_length == 42


def test_caption_bundle_without_aligner():
    adapters = get_caption_adapter_bundle(with_aligner=False)

    assert adapters.aligner is None


def test_entity_bundle_with_injected_tables(location_reference, organization_reference):
    adapters = get_entity_adapter_bundle(
        locations=location_reference, organizations=organization_reference
    )

    assert isinstance(adapters.polisher, StanfordNERPolisher)
    assert isinstance(adapters.location_resolver, DomesticLocationResolver)
    assert isinstance(adapters.organization_resolver, OrganizationResolver)
    assert adapters.location_resolver.reference is location_reference
    assert adapters.organization_resolver.reference is organization_reference
    assert adapters.international_resolver is None


def test_entity_bundle_loads_tables_once_per_path(reference_files):
    load_reference_data.cache_clear()
    path = str(reference_files)

    first = get_entity_adapter_bundle(data_path=path)
    second = get_entity_adapter_bundle(data_path=path)

    assert first.location_resolver.reference is second.location_resolver.reference
    assert load_reference_data.cache_info().misses == 1
    assert first.organization_resolver.lookup("NAACP") == "n79018519"
    assert isinstance(first.international_resolver, InternationalLocationResolver)
    assert first.international_resolver.reference.look_up_country("Germany") == 276


def test_entity_bundle_with_injected_international_table(
    location_reference, organization_reference, international_reference
):
    adapters = get_entity_adapter_bundle(
        locations=location_reference,
        organizations=organization_reference,
        international=international_reference,
    )

    assert adapters.international_resolver.reference is international_reference

from app.core.entity_models import (
    EntityType,
    LocationEntity,
    LocationReferenceData,
    NamedEntity,
    OrganizationReferenceData,
)


def test_reference_tables_default_to_empty_read_only_mappings():
    locations = LocationReferenceData()
    organizations = OrganizationReferenceData()

    assert dict(locations.places) == {} and dict(locations.city_hints) == {}
    assert dict(organizations.authority) == {} and dict(organizations.synonyms) == {}
    assert locations.place_in_state("Chicago", 17) == 0


def test_default_tables_are_not_shared_between_instances():
    assert LocationReferenceData().places is not LocationReferenceData().places


def test_length_defaults_to_text_length():
    entity = NamedEntity(text="Chicago", type=EntityType.LOC)

    assert entity.length == 7
    assert entity.contextualized_text == "Chicago"


def test_explicit_zero_length_is_kept():
    entity = NamedEntity(text="Chicago", length=0)

    assert entity.length == 0
    assert LocationEntity.from_entity(entity).length == 0


def test_location_is_resolved_by_state_or_foreign_country():
    entity = NamedEntity(text="Paris", type=EntityType.LOC)

    assert not LocationEntity.from_entity(entity).is_resolved
    assert not LocationEntity.from_entity(entity, country_code=840).is_resolved
    assert LocationEntity(text="Paris", country_code=840, state_code=48).is_resolved
    assert LocationEntity(text="Paris", country_code=250).is_resolved

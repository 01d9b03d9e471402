import pytest

from app.core.entity_models import EntityType, LocationEntity
from app.infrastructure.adapters.international_location_resolver import (
    InternationalLocationResolver,
    proper_world_name,
)

LOC = EntityType.LOC


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("St. Petersburg", "Saint Petersburg"),
        ("Main St.", "Main Street"),
        ("the capital city of Paris", "Paris"),
        ("City of Lyon", "Lyon"),
        ("[Berlin]", "Berlin"),
    ],
)
def test_proper_world_name(raw, expected):
    assert proper_world_name(raw) == expected


class TestInternationalLocationResolver:
    @pytest.fixture(autouse=True)
    def _resolver(self, international_reference):
        self.resolver = InternationalLocationResolver(international_reference)

    @staticmethod
    def codes(entity):
        return entity.country_code, entity.place_id, entity.confidence

    def test_parse_place_and_country(self):
        assert self.resolver.parse_place_and_country("Paris, France") == ("Paris", 250)
        assert self.resolver.parse_place_and_country("Toronto [Canada]") == ("Toronto", 124)
        assert self.resolver.parse_place_and_country("Paris") == ("", 0)

    def test_city_and_country_in_mention(self, make_entity):
        (entry,) = self.resolver.process_story([make_entity("Paris, France", LOC)])

        assert self.codes(entry) == (250, 2988507, 2)
        assert entry.state_code == 0

    def test_unknown_city_in_known_country_keeps_country(self, make_entity):
        (entry,) = self.resolver.process_story([make_entity("Springfield, France", LOC)])

        assert self.codes(entry) == (250, 0, 1)

    def test_country_from_bracketed_context_picks_matching_city(self, make_entity):
        (entry,) = self.resolver.process_story(
            [make_entity("Paris", LOC, context="Paris [Canada]")]
        )

        assert self.codes(entry) == (124, 6942553, 2)

    def test_adjacent_country_settles_both_mentions(self, make_entity):
        city, country = self.resolver.process_story(
            [make_entity("Berlin", LOC, 200), make_entity("Germany", LOC, 208)]
        )

        assert self.codes(city) == (276, 2950159, 2)
        assert self.codes(country) == (276, 2950159, 2)

    def test_distant_country_is_not_adjacent(self, make_entity):
        city, country = self.resolver.process_story(
            [make_entity("Berlin", LOC, 200), make_entity("Germany", LOC, 260)]
        )

        assert self.codes(city) == (0, 0, 0)
        assert self.codes(country) == (276, 0, 1)

    def test_city_hint_and_bare_country(self, make_entity):
        tokyo, japan = self.resolver.process_story(
            [make_entity("Tokyo", LOC, 0), make_entity("Japan", LOC, 100)]
        )

        assert self.codes(tokyo) == (392, 1850147, 2)
        assert self.codes(japan) == (392, 0, 1)

    def test_general_location_is_left_alone(self, make_entity):
        (entry,) = self.resolver.process_story([make_entity("Berlin Street", LOC)])

        assert self.codes(entry) == (0, 0, 0)

    def test_bare_mention_copies_an_earlier_qualified_one(self, make_entity):
        qualified, bare = self.resolver.process_story(
            [
                make_entity("Lyon", LOC, 0, context="Lyon, France"),
                make_entity("Lyon", LOC, 100),
            ]
        )

        assert self.codes(qualified) == (250, 2996944, 2)
        assert self.codes(bare) == (250, 2996944, 2)

    def test_only_location_candidates_are_processed(self, make_entity):
        entries = self.resolver.process_story(
            [make_entity("Paris", EntityType.PERSON), make_entity("Japan", LOC, 10)]
        )

        assert [e.text for e in entries] == ["Japan"]

    def test_input_entities_are_not_modified(self, make_entity):
        entity = LocationEntity.from_entity(make_entity("Tokyo", LOC))

        self.resolver.process_story([entity])

        assert self.codes(entity) == (0, 0, 0)

    def test_resolve_groups_by_country_and_city(self, make_entity):
        candidates = [
            make_entity("Tokyo", LOC, 0),
            make_entity("Japan", LOC, 100),
            make_entity("France", LOC, 200),
            make_entity("Tokyo", LOC, 300),
            make_entity("Gotham", LOC, 400),
        ]

        resolved, unresolved = self.resolver.resolve(candidates)

        summary = sorted((e.country_code, e.place_id, e.text, e.count) for e in resolved)
        assert summary == [(250, 0, "France", 1), (392, 0, "Japan", 1), (392, 1850147, "Tokyo", 2)]
        assert [e.text for e in unresolved] == ["Gotham"]
        assert all(e.is_resolved for e in resolved)

    def test_frequent_mentions_raise_confidence(self, make_entity):
        candidates = [make_entity("Tokyo", LOC, start) for start in (0, 100, 200, 300)]

        (tokyo,), _ = self.resolver.resolve(candidates)

        assert tokyo.count == 4
        assert tokyo.confidence == 3

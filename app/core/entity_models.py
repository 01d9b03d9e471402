"""
Named entity candidates and their resolved location / organization forms.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple


class EntityType(str, Enum):
    UNSET = "unset"
    PERSON = "person"
    LOC = "loc"
    ORG = "org"
    YEAR = "year"
    YEAR_PERHAPS = "year_perhaps"
    SOMETHING_TO_IGNORE = "something_to_ignore"
    SOMETHING_ELSE = "something_else"


class EntityConfidence(IntEnum):
    """Names for the confidence scale. Resolver bumps may go above BETTER."""

    NONE = 0
    SOME = 1
    GOOD = 2
    BETTER = 3


US_COUNTRY_CODE = 840


@dataclass(slots=True)
class NamedEntity:
    text: str
    contextualized_text: str = ""
    start_offset: int = 0
    length: Optional[int] = None
    type: EntityType = EntityType.UNSET
    spacy_type: str = ""
    received_duel_coverage: bool = False
    confidence: int = EntityConfidence.NONE

    def __post_init__(self) -> None:
        if not self.contextualized_text:
            self.contextualized_text = self.text
        if self.length is None:
            self.length = len(self.text)

    def base_values(self) -> dict:
        """Field values of the NamedEntity part only."""
        return {f.name: getattr(self, f.name) for f in fields(NamedEntity)}


@dataclass(slots=True)
class LocationEntity(NamedEntity):
    """A location candidate. Zero codes mean unresolved.

    US places need a state; places abroad carry a country and never a state.
    """

    country_code: int = 0
    state_code: int = 0
    place_id: int = 0
    count: int = 1

    @classmethod
    def from_entity(cls, entity: NamedEntity, country_code: int = 0) -> "LocationEntity":
        return cls(**entity.base_values(), country_code=country_code)

    @property
    def is_resolved(self) -> bool:
        if self.country_code in (0, US_COUNTRY_CODE):
            return self.state_code != 0
        return True


@dataclass(slots=True)
class OrganizationalEntity(NamedEntity):
    """An organization candidate. An empty ``loc_name_id`` means unresolved."""

    loc_name_id: str = ""
    count: int = 1

    @classmethod
    def from_entity(cls, entity: NamedEntity) -> "OrganizationalEntity":
        return cls(**entity.base_values())

    @property
    def is_resolved(self) -> bool:
        return bool(self.loc_name_id)


@dataclass
class OrganizationResolution:
    """Outcome of resolving the organizations of one story.

    ``conflict`` names the text that resolved to two different ids; when set,
    both lists are empty and the story is left unresolved.
    """

    resolved: List[OrganizationalEntity] = field(default_factory=list)
    unresolved: List[OrganizationalEntity] = field(default_factory=list)
    conflict: str = ""

    @property
    def has_conflict(self) -> bool:
        return bool(self.conflict)


@dataclass(frozen=True, slots=True)
class StateInfo:
    state_id: int
    usgs_id: int
    alpha: str
    variants: Tuple[str, ...]


@dataclass(frozen=True, slots=True)
class CityHint:
    """Default state for a well-known place name."""

    name: str
    state_alpha: str
    state_id: int
    place_id: int


@dataclass(frozen=True, slots=True)
class LocationReferenceData:
    """Read-only lookup tables for domestic location resolution.

    ``places`` maps state id to a mapping of place name to USGS place id.
    ``city_hints`` maps place name to its default state.
    """

    places: Mapping[int, Mapping[str, int]] = field(default_factory=lambda: MappingProxyType({}))
    city_hints: Mapping[str, CityHint] = field(default_factory=lambda: MappingProxyType({}))

    def place_in_state(self, name: str, state_id: int) -> int:
        """USGS place id of ``name`` within ``state_id``, 0 if unknown."""
        state_places = self.places.get(state_id)
        if not state_places:
            return 0
        return state_places.get(name, 0)


@dataclass(frozen=True, slots=True)
class OrganizationReferenceData:
    """Read-only organization authority (name -> id) and synonym (synonym -> id) tables."""

    authority: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    synonyms: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True, slots=True)
class WorldCity:
    """A non-US city: numeric country code plus the city id of the world cities table."""

    country_code: int
    city_id: int


@dataclass(frozen=True, slots=True)
class InternationalReferenceData:
    """Read-only lookup tables for non-US location resolution.

    ``countries`` maps every country name variant to its numeric code,
    ``cities`` maps a city name to the cities of that name across countries, and
    ``city_hints`` names the default country of cities that need no qualifier.
    """

    countries: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    cities: Mapping[str, Tuple[WorldCity, ...]] = field(default_factory=lambda: MappingProxyType({}))
    city_hints: Mapping[str, WorldCity] = field(default_factory=lambda: MappingProxyType({}))

    def look_up_country(self, name: str) -> int:
        """Numeric code of a country name or variant, 0 if unknown."""
        return self.countries.get(name, 0)

    def city_in_country(self, name: str, country_code: int) -> int:
        """City id of ``name`` within ``country_code``, 0 if unknown."""
        for city in self.cities.get(name, ()):
            if city.country_code == country_code:
                return city.city_id
        return 0

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from app.application.interfaces import ILocationResolver
from app.core.entity_models import (
    EntityType,
    InternationalReferenceData,
    LocationEntity,
    NamedEntity,
)
from app.infrastructure.adapters.domestic_location_resolver import (
    ADJACENCY_EPSILON,
    is_general_location,
    trim_place_name,
)

logger = logging.getLogger(__name__)

_VERBOSE_PREFIXES = ("the city of ", "city of ", "the capital city of ", "capital city of ")


def proper_world_name(candidate: str) -> str:
    """Rewrite a place name into the form used by the world cities table."""
    name = candidate.replace("[", " ").replace("]", " ").strip()
    lowered = name.lower()
    for prefix in _VERBOSE_PREFIXES:
        if lowered.startswith(prefix):
            name = name[len(prefix) :]
            break

    if name.endswith(" St.") and len(name) > 4:
        name = name[:-4] + " Street"
    elif "St." in name:
        name = name.replace("St.", "Saint")
    return name


class InternationalLocationResolver(ILocationResolver):
    """Resolves the mentions the domestic pass left open to world cities and countries.

    A city found inside a country raises confidence by 2 and sets ``place_id``
    to the city id; a country alone raises it by 1 and leaves ``place_id`` at 0.
    ``state_code`` is always 0. Only listed cities and countries resolve.
    """

    def __init__(self, reference: InternationalReferenceData) -> None:
        self.reference = reference

    def resolve(
        self, candidates: Sequence[NamedEntity]
    ) -> Tuple[List[LocationEntity], List[LocationEntity]]:
        processed = self.process_story(candidates)

        # country-only matches share place_id 0, so the country is part of the key
        resolved: Dict[Tuple[int, int], LocationEntity] = {}
        unresolved: List[LocationEntity] = []
        for entity in processed:
            if entity.country_code == 0:
                unresolved.append(entity)
                continue
            key = (entity.country_code, entity.place_id)
            existing = resolved.get(key)
            if existing is not None:
                existing.count += 1
                existing.confidence = max(existing.confidence, entity.confidence)
            else:
                resolved[key] = entity

        for entity in resolved.values():
            if entity.count > 3:
                entity.confidence += 1

        logger.info(
            "Resolved %s distinct international places; %s location mentions still unresolved",
            len(resolved),
            len(unresolved),
        )
        return list(resolved.values()), unresolved

    def parse_place_and_country(self, text: str) -> Tuple[str, int]:
        """Split "city, country" or "city [country]" into (place name, country code)."""
        country_name = ""
        place_name = ""

        pos = text.rfind(",")
        if not 2 <= pos < len(text) - 2:
            pos = text.rfind("[")
        if 2 <= pos < len(text) - 2:
            country_name = text[pos + 1 :].strip()
            if country_name.endswith("]"):
                country_name = country_name[:-1].strip()
            place_name = trim_place_name(text[:pos])

        return place_name, self.reference.look_up_country(country_name)

    def process_story(self, candidates: Sequence[NamedEntity]) -> List[LocationEntity]:
        """Attach city/country ids and confidence to each location mention of one story."""
        locations = [LocationEntity.from_entity(c) for c in candidates if c.type == EntityType.LOC]

        for i, entry in enumerate(locations):
            if entry.country_code != 0:
                # already settled as the partner of the previous mention
                continue
            country, place, confidence = self._resolve_entry(locations, i)
            entry.country_code = country
            entry.place_id = place
            entry.confidence = confidence

        for i, entry in enumerate(locations):
            if entry.country_code != 0:
                continue
            other = self._same_name(locations, i)
            if other is not None:
                entry.country_code = other.country_code
                entry.place_id = other.place_id
                entry.confidence = other.confidence

        return locations

    @staticmethod
    def _same_name(locations: List[LocationEntity], i: int) -> Optional[LocationEntity]:
        """First other mention of the same text with a city, else with only a country."""
        country_only = None
        for j, other in enumerate(locations):
            if j == i or other.text != locations[i].text:
                continue
            if other.place_id != 0:
                return other
            if country_only is None and other.country_code != 0:
                country_only = other
        return country_only

    def _resolve_entry(self, locations: List[LocationEntity], i: int) -> Tuple[int, int, int]:
        entry = locations[i]
        text = entry.text
        context = entry.contextualized_text
        city_in = self.reference.city_in_country
        country = 0
        place = 0
        confidence = entry.confidence

        if is_general_location(text, context):
            return country, place, confidence

        # a comma in the mention itself wins over every other clue
        if text.find(",") > 0:
            place_name, country = self.parse_place_and_country(text)
            if country != 0:
                place = city_in(place_name, country)
                if place:
                    confidence += 2
                else:
                    bracket = text.find("[")
                    if bracket > 0:
                        place = city_in(text[:bracket].strip(), country)
                        if place:
                            confidence += 2
                    if place == 0:
                        confidence += 1

        if country != 0:
            return country, place, confidence

        if text != context:
            pos = context.find(text)
            if pos >= 0 and pos + len(text) < len(context) - 1:
                country_name = context[pos + len(text) :].strip()
            else:
                country_name = context
                bracket = country_name.rfind("[")
                if bracket >= 0:
                    country_name = country_name[bracket + 1 :]
                bracket = country_name.rfind("]")
                if bracket >= 0:
                    country_name = country_name[:bracket]

            country = self.reference.look_up_country(country_name)
            if country != 0:
                place = city_in(proper_world_name(text.strip()), country)
                if place:
                    confidence += 2
                else:
                    country = 0

            if country == 0:
                place_name, country = self.parse_place_and_country(context)
                if country != 0:
                    place = city_in(place_name, country)
                    if place == 0:
                        place = city_in(text.strip(), country)
                    confidence += 2 if place else 1

        if country == 0 and i < len(locations) - 1:
            following = locations[i + 1]
            if following.start_offset <= ADJACENCY_EPSILON + entry.start_offset + entry.length:
                country = self.reference.look_up_country(following.text)
                if country != 0:
                    place = city_in(text.strip(), country)
                    if place:
                        confidence += 2
                        following.country_code = country
                        following.place_id = place
                        following.confidence += 2
                    else:
                        country = 0

        if country == 0:
            name = text.strip()
            hint = self.reference.city_hints.get(name)
            if hint is not None:
                country = hint.country_code
                place = hint.city_id
                confidence += 2
            else:
                country = self.reference.look_up_country(name)
                place = 0
                if country != 0:
                    confidence += 1

        return country, place, confidence

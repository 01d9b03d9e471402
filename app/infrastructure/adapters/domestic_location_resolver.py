from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Sequence, Tuple

from app.application.interfaces import ILocationResolver
from app.core.entity_models import (
    EntityType,
    LocationEntity,
    LocationReferenceData,
    NamedEntity,
    StateInfo,
    US_COUNTRY_CODE,
)
from app.core.us_states import DC_STATE_ID, US_STATES, WA_STATE_ID

logger = logging.getLogger(__name__)

# Gap allowed between "Buffalo" and "NY" extracted as two mentions, e.g. "Buffalo -- NY"
ADJACENCY_EPSILON = 4

# "Washington" alone is too often a surname to match inexactly
WASHINGTON_EXCEPTION = "Washington"

GENERAL_LOCATION_SUFFIXES = frozenset(
    {"Avenue", "Ave", "Boulevard", "Blvd", "Street", "St", "Road", "Lane", "Lake", "River"}
)

DC_CLUES = ("d.c.", "district of columbia", "metro washington", "metro [washington")
WA_CLUES = (
    "king county",
    "seattle",
    "spokane",
    "yakima",
    "tacoma",
    "pasco",
    "fort lewis",
    "mcchord",
    "fairchild air force base",
    "kitsap",
    "state of washington",
    "washington state",
)

PLACE_ALIASES = {
    "Philly": "Philadelphia",
    "Phila.": "Philadelphia",
    "LA": "Los Angeles",
    "L.A.": "Los Angeles",
    "L.A. Los Angeles": "Los Angeles",
    "N.Y. City": "New York City",
    "NY City": "New York City",
    "NYC": "New York City",
    "New York City": "New York City",
    "Pearl Harbor": "Naval Station Pearl Harbor",
    "Vegas": "Las Vegas",
}


def look_up_state(
    name: str, exact: bool = True, states: Mapping[int, StateInfo] = US_STATES
) -> int:
    """USGS state id for a state name, abbreviation or variant (0 when none).

    Postal codes always need an exact match. With ``exact=False`` any variant
    contained in ``name`` matches, except the bare "Washington". When several
    states match, the last one in table order wins.
    """
    found = 0
    if len(name) <= 1:
        return found

    for state_id, info in states.items():
        if name == info.alpha:
            return state_id
        for variant in info.variants:
            if name == variant or (not exact and variant in name and variant != WASHINGTON_EXCEPTION):
                found = state_id
                if not exact and state_id == 51 and "West Virginia" in name:
                    found = 54
                break
    return found


def code_to_alpha(state_code: int) -> str:
    """Two letter postal code for a USGS state id, or "unknown"."""
    info = US_STATES.get(state_code)
    return info.alpha if info else "unknown"


def consider_washington(text: str) -> int:
    """Decide whether a "Washington" mention means DC or WA from surrounding text.

    Returns DC_STATE_ID, WA_STATE_ID, or 0 when the text is not conclusive. State
    clues win over DC clues.
    """
    lowered = text.lower()
    state = 0
    if any(clue in lowered for clue in DC_CLUES):
        state = DC_STATE_ID
    if any(clue in lowered for clue in WA_CLUES):
        state = WA_STATE_ID
    return state


def is_general_location(text: str, context: str) -> bool:
    """True for streets, rivers and lakes such as "Wyoming Avenue" or a bare "Lake Michigan"."""
    work_context = context if context and context.strip() else text
    work = work_context.replace("]", "").rstrip()
    if work.endswith("."):
        work = work[:-1]

    final_word = work[max(work.rfind("["), work.rfind(" ")) + 1 :]
    if final_word in GENERAL_LOCATION_SUFFIXES:
        return True

    if text.startswith("Lake "):
        work = work_context.replace("[", "").replace("]", "").strip()
        if work.startswith("Lake ") and len(work) <= len(text):
            return True
    return False


def trim_place_name(candidate: str) -> str:
    """Drop "[sic ..." markers and any prefix ending in "[", ":", ";" or ","."""
    name = candidate.strip()
    for marker in ("[sic. ", "[sic ", " sic "):
        pos = name.rfind(marker)
        if pos >= 0:
            name = name[pos + len(marker) :]
            break
    for marker in ("[", ":", ";", ","):
        pos = name.rfind(marker)
        if pos >= 0:
            name = name[pos + 1 :]
    return name.strip()


def proper_usgs_name(candidate: str) -> str:
    """Rewrite a place name into the form used by the USGS table."""
    name = candidate.replace("[", " ").replace("]", " ").replace(" AFB", " Air Force Base").strip()
    lowered = name.lower()
    if lowered.startswith("the city of "):
        name = name[12:]
    elif lowered.startswith("city of "):
        name = name[8:]

    if "Ft." in name and len(name) > 4:
        name = name.replace("Ft.", "Fort")

    if name.endswith(" St.") and len(name) > 4:
        name = name[:-4] + " Street"
    elif "St." in name:
        name = name.replace("St.", "Saint")
    else:
        name = PLACE_ALIASES.get(name, name)
    return name


def _strip_closing_bracket(text: str) -> str:
    text = text.strip()
    if text.endswith("]"):
        text = text[:-1].strip()
    return text


def parse_place_and_state(text: str) -> Tuple[str, int]:
    """Split "city, state" or "city [state]" into (USGS style place name, state id)."""
    state_name = ""
    place_name = ""

    pos = text.rfind(",")
    if 2 <= pos < len(text) - 2:
        state_name = _strip_closing_bracket(text[pos + 1 :])
        place_name = trim_place_name(text[:pos])
    else:
        pos = text.rfind("[")
        if 2 <= pos < len(text) - 2:
            state_name = _strip_closing_bracket(text[pos + 1 :])
            place_name = trim_place_name(text[:pos])

    return proper_usgs_name(place_name), look_up_state(state_name, exact=False)


class DomesticLocationResolver(ILocationResolver):
    """Resolves US place mentions to USGS place and state ids.

    Confidence rises by 2 when a place is found inside a state and by 1 when
    only the state is known. Reference tables are injected and never mutated.
    """

    def __init__(self, reference: LocationReferenceData) -> None:
        self.reference = reference

    def resolve(
        self, candidates: Sequence[NamedEntity]
    ) -> Tuple[List[LocationEntity], List[LocationEntity]]:
        processed = self.process_story(candidates)

        resolved: Dict[int, LocationEntity] = {}
        unresolved: List[LocationEntity] = []
        for entity in processed:
            if entity.state_code != 0:
                existing = resolved.get(entity.place_id)
                if existing is not None:
                    existing.count += 1
                    existing.confidence = max(existing.confidence, entity.confidence)
                else:
                    resolved[entity.place_id] = entity
            else:
                entity.place_id = entity.state_code = entity.country_code = 0
                unresolved.append(entity)

        for entity in resolved.values():
            if entity.count > 3:
                entity.confidence += 1

        logger.info(
            "Resolved %s distinct places; %s location mentions unresolved",
            len(resolved),
            len(unresolved),
        )
        return list(resolved.values()), unresolved

    def _place_in(self, name: str, state_id: int) -> int:
        return self.reference.place_in_state(name, state_id)

    def process_story(self, candidates: Sequence[NamedEntity]) -> List[LocationEntity]:
        """Attach place/state ids and confidence to each location mention of one story."""
        locations = [
            LocationEntity.from_entity(c, country_code=US_COUNTRY_CODE)
            for c in candidates
            if c.type == EntityType.LOC
        ]

        for i, entry in enumerate(locations):
            if entry.state_code != 0:
                # already settled as the partner of the previous mention
                continue
            state, place, confidence = self._resolve_entry(locations, i)
            entry.place_id = place
            entry.state_code = state
            entry.confidence = confidence

        # same text elsewhere in the story resolved: reuse it
        for i, entry in enumerate(locations):
            if entry.state_code != 0:
                continue
            for j, other in enumerate(locations):
                if j != i and other.text == entry.text and other.state_code != 0:
                    entry.place_id = other.place_id
                    entry.state_code = other.state_code
                    entry.confidence = other.confidence
                    break

        return locations

    def _state_only(self, state: int, context: str) -> int:
        if state == WA_STATE_ID:
            state = consider_washington(context)
        return state

    def _resolve_entry(self, locations: List[LocationEntity], i: int) -> Tuple[int, int, int]:
        entry = locations[i]
        text = entry.text
        context = entry.contextualized_text
        state = 0
        place = 0
        confidence = entry.confidence

        if is_general_location(text, context):
            return state, place, confidence

        # "place, state" inside the mention itself
        if text.find(",") > 0:
            place_name, state = parse_place_and_state(text)
            if state != 0:
                place = self._place_in(place_name, state)
                if place:
                    confidence += 2
                else:
                    bracket = text.find("[")
                    if bracket > 0:
                        place = self._place_in(proper_usgs_name(text[:bracket].strip()), state)
                        if place:
                            confidence += 2
                    if place == 0:
                        state = self._state_only(state, context)
                        if state != 0:
                            place = US_STATES[state].usgs_id
                            confidence += 1

        if place != 0:
            return state, place, confidence

        if text != context:
            pos = context.find(text)
            if pos >= 0 and pos + len(text) < len(context) - 1:
                state_name = context[pos + len(text) :].strip()
            else:
                state_name = context
                bracket = state_name.rfind("[")
                if bracket >= 0:
                    state_name = state_name[bracket + 1 :]
                bracket = state_name.rfind("]")
                if bracket >= 0:
                    state_name = state_name[:bracket]

            state = look_up_state(state_name, exact=False)
            if state != 0:
                place = self._place_in(proper_usgs_name(text.strip()), state)
                if place:
                    confidence += 2
                else:
                    state = 0

            if place == 0:
                place_name, state = parse_place_and_state(context)
                if state != 0:
                    place = self._place_in(place_name, state)
                    if place:
                        confidence += 2
                    else:
                        place = self._place_in(proper_usgs_name(text.strip()), state)
                        if place:
                            confidence += 2
                        else:
                            state = self._state_only(state, context)
                            if state != 0:
                                place = US_STATES[state].usgs_id
                                confidence += 1

        place_name = proper_usgs_name(text.strip())

        if state == 0 and i < len(locations) - 1:
            following = locations[i + 1]
            if following.start_offset <= ADJACENCY_EPSILON + entry.start_offset + entry.length:
                state = look_up_state(following.text)
                if state != 0:
                    place = self._place_in(place_name, state)
                    if place:
                        confidence += 2
                        following.state_code = state
                        following.place_id = place
                        following.confidence += 2
                    else:
                        state = 0

        if state == 0:
            hint = self.reference.city_hints.get(place_name)
            if hint is not None:
                state = hint.state_id
                place = hint.place_id
                confidence += 2
            else:
                state = look_up_state(place_name)
                if state != 0:
                    state = self._state_only(state, context)
                    if state != 0:
                        place = US_STATES[state].usgs_id
                        confidence += 1
                    else:
                        place = 0

        return state, place, confidence

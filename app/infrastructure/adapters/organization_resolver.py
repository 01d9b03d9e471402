from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Sequence, Tuple

from app.application.interfaces import IOrganizationResolver
from app.core.entity_models import (
    EntityType,
    NamedEntity,
    OrganizationalEntity,
    OrganizationResolution,
    OrganizationReferenceData,
)
from utils.text_utils import strip_trailing

logger = logging.getLogger(__name__)

# "... NAME sport team": NAME needs more than 3 chars, the sport at least 6 ("hockey")
MIN_SPORTS_NAME_OFFSET = 3
MIN_SPORT_NAME_LENGTH = 6

SPORT_SUFFIXES = {
    "basketball": " (Basketball team)",
    "hockey": " (Hockey team)",
}
FOOTBALL_QUALIFIERS = ("American",)
BASEBALL_LEAGUES = ("American League", "National League", "Negro League")


def trim_org_name(candidate: str) -> str:
    """Normalise brackets/ampersands, drop a leading "sic" and trailing ":;," punctuation."""
    name = candidate.replace("[", " ").replace("]", " ").replace("&", " & ")
    name = name.replace("  ", " ").strip()
    if name.startswith("sic. "):
        name = name[5:]
    elif name.startswith("sic "):
        name = name[4:]
    return strip_trailing(name, ":;,")


def recast_sports_team(text: str) -> str:
    """Rewrite "Boston Celtics basketball team" as "Boston Celtics (Basketball team)".

    Returns "" when the text is not a recognised team mention.
    """
    offset = -1
    if text.endswith(" team"):
        offset = len(text) - 5
    elif text.endswith(" team)"):
        offset = len(text) - 6
    if offset <= 0:
        return ""

    work = text[:offset].strip()
    sport_at = work.rfind(" ")
    if not (MIN_SPORTS_NAME_OFFSET < sport_at <= len(work) - MIN_SPORT_NAME_LENGTH):
        return ""

    sport = work[sport_at + 1 :].lower()
    if sport.startswith("("):
        sport = sport[1:].strip()
    team = work[:sport_at].strip()

    if sport in SPORT_SUFFIXES:
        return team + SPORT_SUFFIXES[sport]
    if sport == "football":
        for qualifier in FOOTBALL_QUALIFIERS:
            if team.endswith(qualifier):
                team = team[: -len(qualifier)].strip()
        if team.endswith("professional"):
            team = team[:-12].strip()
        return team + " (Football team)"
    if sport == "baseball":
        for league in BASEBALL_LEAGUES:
            if team.endswith(league):
                team = team[: -len(league)].strip()
                break
        if team.endswith("professional"):
            team = team[:-12].strip()
        return team + " (Baseball team)"
    return ""


def extract_from_trailer(text: str, start: int) -> str:
    """Text from ``start`` up to the first "[", ",", ";" or "("."""
    if start < 0:
        return ""
    rest = text[start:]
    cut = len(rest)
    for marker in "[,;(":
        pos = rest.find(marker)
        if 0 <= pos < cut:
            cut = pos
    return rest[:cut].strip()


def extract_potential_name(text: str, end: int) -> str:
    """Text before ``end`` following the last "[", ",", ";", "(" or "sic" marker."""
    if end <= 0:
        return ""
    head = text[:end]
    sic = head.rfind("sic. ")
    if sic == -1:
        sic = head.rfind("sic ")
        if sic >= 0:
            sic += 3
    else:
        sic += 4
    cut = max(head.rfind("["), head.rfind(","), head.rfind(";"), head.rfind("("), sic)
    if cut >= 0:
        head = head[cut + 1 :]
    return head.strip()


class OrganizationResolver(IOrganizationResolver):
    """Resolves organization mentions to name authority ids.

    A found id raises the mention's confidence by 1; an id mentioned at least
    twice in the story gets a further +1. Two different ids for the same text
    abandon the whole story.
    """

    def __init__(self, reference: OrganizationReferenceData) -> None:
        self.reference = reference

    @property
    def authority(self) -> Mapping[str, str]:
        return self.reference.authority

    @property
    def synonyms(self) -> Mapping[str, str]:
        return self.reference.synonyms

    def resolve(
        self, candidates: Sequence[NamedEntity]
    ) -> Tuple[List[OrganizationalEntity], List[OrganizationalEntity]]:
        outcome = self.resolve_story(candidates)
        return outcome.resolved, outcome.unresolved

    def resolve_story(self, candidates: Sequence[NamedEntity]) -> OrganizationResolution:
        processed = self.process_story(candidates)

        ids_by_text: Dict[str, str] = {}
        for entity in processed:
            known = ids_by_text.get(entity.text)
            if known is None:
                ids_by_text[entity.text] = entity.loc_name_id
            elif known != entity.loc_name_id:
                if known == "":
                    ids_by_text[entity.text] = entity.loc_name_id
                elif entity.loc_name_id != "":
                    logger.error(
                        "Two or more entities with the name '%s' resolved to different IDs.",
                        entity.text,
                    )
                    return OrganizationResolution(conflict=entity.text)

        for entity in processed:
            entity.loc_name_id = ids_by_text[entity.text]

        resolved: Dict[str, OrganizationalEntity] = {}
        unresolved: List[OrganizationalEntity] = []
        for entity in processed:
            if entity.loc_name_id:
                existing = resolved.get(entity.loc_name_id)
                if existing is not None:
                    existing.count += 1
                    existing.confidence = max(existing.confidence, entity.confidence)
                else:
                    resolved[entity.loc_name_id] = entity
            else:
                unresolved.append(entity)

        for entity in resolved.values():
            if entity.count >= 2:
                entity.confidence += 1

        logger.info(
            "Resolved %s distinct organizations; %s organization mentions unresolved",
            len(resolved),
            len(unresolved),
        )
        return OrganizationResolution(resolved=list(resolved.values()), unresolved=unresolved)

    def process_story(self, candidates: Sequence[NamedEntity]) -> List[OrganizationalEntity]:
        organizations = [
            OrganizationalEntity.from_entity(c) for c in candidates if c.type == EntityType.ORG
        ]

        for org in organizations:
            found = self.parse_org_candidate(org.text)
            if not found and org.text != org.contextualized_text:
                context = org.contextualized_text
                found = self.parse_org_candidate(context)
                if not found:
                    pos = context.find(org.text)
                    if pos >= 0 and pos + len(org.text) < len(context) - 1:
                        found = self.parse_org_candidate(context[pos + len(org.text) :].strip())

            org.loc_name_id = found
            if found:
                org.confidence += 1

        return organizations

    def lookup(self, name: str) -> str:
        return self.lookup_synonyms(name) or self.lookup_authority(name)

    def lookup_synonyms(self, key: str) -> str:
        if key in self.synonyms:
            return self.synonyms[key]
        if "United States" in key:
            return self.synonyms.get(key.replace("United States", "U.S."), "")
        if key.startswith("The ") or key.startswith("the "):
            return self.synonyms.get(key[4:], "")
        if key.startswith("later "):
            return self.synonyms.get(key[6:], "")
        return ""

    def lookup_authority(self, key: str) -> str:
        if key in self.authority:
            return self.authority[key]
        if key.startswith("The ") or key.startswith("the "):
            return self.authority.get(key[4:], "")
        if key.startswith("later "):
            return self.authority.get(key[6:], "")
        if key.startswith("UC "):
            return self.authority.get("University of California, " + key[3:], "")
        team = recast_sports_team(key)
        if team:
            return self.authority.get(team, "")
        return ""

    def parse_org_candidate(self, text: str) -> str:
        """Authority id for a mention such as "ORG", "ORGa [ORGb]" or "ORG (context)"; "" if none."""
        found = self.lookup(trim_org_name(text))
        if found:
            return found

        square = False
        paren = False

        pos = text.find("[")
        if 2 <= pos < len(text) - 1:
            square = True
            found = self.lookup(trim_org_name(text[:pos]))
            if not found:
                found = self.lookup(trim_org_name(text[pos + 1 :]))
            if found:
                return found

        pos = text.find("(")
        if 2 <= pos < len(text) - 1:
            paren = True
            found = self.lookup(trim_org_name(text[:pos]))
            if not found:
                name = trim_org_name(text[pos + 1 :]).strip()
                if name.endswith(")"):
                    name = name[:-1]
                found = self.lookup(name)
            if found:
                return found

        if square:
            found = self.parse_college_mention(text, "[")
        if not found and paren:
            found = self.parse_college_mention(text, "(")
        if not found:
            found = self.parse_college_mention(text, "")
        return found

    def parse_college_mention(self, text: str, marker: str) -> str:
        """Try "Howard [University]" style splits and "... X University ..." phrases."""
        found = ""
        suffix = text

        if marker:
            pos = text.find(marker)
            if 2 <= pos < len(text) - 1:
                prefix = text[:pos].strip()
                suffix = text[pos + 1 :]
                if "College" not in prefix and "University" not in prefix:
                    name = ""
                    if suffix.startswith("University"):
                        name = trim_org_name(prefix) + " University"
                    elif suffix.startswith("College"):
                        name = trim_org_name(prefix) + " College"
                    if name:
                        found = self.lookup(name)

                    if not found:
                        name = ""
                        if prefix + " University" in suffix:
                            name = prefix + " University"
                        elif "University of " + prefix in suffix:
                            name = "University of " + prefix
                        elif prefix + " College" in suffix:
                            name = prefix + " College"
                        if name:
                            found = self.lookup(name)

        if found:
            return found

        name = ""
        pos = suffix.find("University of")
        if pos > 0 and pos + 13 < len(suffix):
            name = "University of " + extract_from_trailer(suffix, pos + 13)
        pos = suffix.find(" University")
        if pos > 0:
            name = extract_potential_name(suffix, pos) + " University"
        else:
            pos = suffix.find(" College")
            if pos > 0:
                name = extract_potential_name(suffix, pos) + " College"
        if name:
            found = self.lookup(name)
        return found

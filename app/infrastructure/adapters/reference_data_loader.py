"""
Loaders for the tab-separated reference tables used by the entity resolvers.

Every file has a header line followed by data rows with an exact number of
fields. Malformed or duplicate rows are logged and skipped; a missing file, or
one without a header, is fatal.
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, List, Optional, Tuple

from app.core.config import Settings, settings as default_settings
from app.core.entity_models import (
    CityHint,
    InternationalReferenceData,
    LocationReferenceData,
    OrganizationReferenceData,
    WorldCity,
)
from app.core.exceptions import ReferenceDataError
from app.core.us_states import US_STATE_NAMES, US_STATES

logger = logging.getLogger(__name__)


def _read_rows(path: Path, field_count: int) -> Iterator[Tuple[int, List[str]]]:
    """Yield (line_number, fields) for each data row after the header with exactly ``field_count`` fields."""
    if not path.is_file():
        raise ReferenceDataError(f"Reference data file not found: {path}", file_path=str(path))

    with open(path, "r", encoding="utf-8") as f:
        header = f.readline()
        if not header.strip():
            raise ReferenceDataError(f"Reference data file is empty: {path}", file_path=str(path))
        for line_number, line in enumerate(f, start=2):
            line = line.rstrip("\r\n")
            if not line.strip():
                continue
            fields = line.split("\t")
            if len(fields) != field_count:
                logger.warning(
                    "%s:%s: expected exactly %s fields, got %s; skipped",
                    path.name, line_number, field_count, len(fields),
                )
                continue
            yield line_number, fields


def load_places(path: Path) -> MappingProxyType:
    """USGS places: ``place_id<TAB>name<TAB>state_id`` -> {state_id: {name: place_id}}."""
    places: Dict[int, Dict[str, int]] = {}
    loaded = 0
    for line_number, fields in _read_rows(path, 3):
        try:
            place_id = int(fields[0])
            state_id = int(fields[2])
        except ValueError:
            logger.warning("%s:%s: non-numeric id; skipped", path.name, line_number)
            continue
        name = fields[1].strip()
        if not name or state_id not in US_STATES:
            logger.warning("%s:%s: unknown state %s or empty name; skipped", path.name, line_number, state_id)
            continue
        state_places = places.setdefault(state_id, {})
        if name in state_places:
            logger.warning("%s:%s: duplicate place '%s' in state %s; skipped", path.name, line_number, name, state_id)
            continue
        state_places[name] = place_id
        loaded += 1

    logger.info("Loaded %s places across %s states from %s", loaded, len(places), path)
    return MappingProxyType({k: MappingProxyType(v) for k, v in places.items()})


def load_city_hints(path: Path) -> MappingProxyType:
    """Default states: ``name<TAB>state_alpha<TAB>state_id<TAB>place_id`` -> {name: CityHint}."""
    hints: Dict[str, CityHint] = {}
    for line_number, fields in _read_rows(path, 4):
        try:
            state_id = int(fields[2])
            place_id = int(fields[3])
        except ValueError:
            logger.warning("%s:%s: non-numeric id; skipped", path.name, line_number)
            continue
        name = fields[0].strip()
        if not name:
            continue
        if name in hints:
            logger.warning("%s:%s: duplicate hint '%s'; skipped", path.name, line_number, name)
            continue
        hints[name] = CityHint(name=name, state_alpha=fields[1].strip(), state_id=state_id, place_id=place_id)

    logger.info("Loaded %s city hints from %s", len(hints), path)
    return MappingProxyType(hints)


def load_corporate_names(path: Path) -> MappingProxyType:
    """Authority names: ``name<TAB>id`` -> {name: id}."""
    names: Dict[str, str] = {}
    for line_number, fields in _read_rows(path, 2):
        name, org_id = fields[0].strip(), fields[1].strip()
        if not name or not org_id:
            logger.warning("%s:%s: empty name or id; skipped", path.name, line_number)
            continue
        if name in names:
            logger.warning("%s:%s: duplicate name '%s'; skipped", path.name, line_number, name)
            continue
        names[name] = org_id

    logger.info("Loaded %s corporate names from %s", len(names), path)
    return MappingProxyType(names)


def load_corporate_synonyms(path: Path) -> MappingProxyType:
    """Synonyms: ``synonym<TAB>canonical<TAB>id`` -> {synonym: id}."""
    synonyms: Dict[str, str] = {}
    for line_number, fields in _read_rows(path, 3):
        synonym, org_id = fields[0].strip(), fields[2].strip()
        if not synonym or not org_id:
            logger.warning("%s:%s: empty synonym or id; skipped", path.name, line_number)
            continue
        if synonym in synonyms:
            logger.warning("%s:%s: duplicate synonym '%s'; skipped", path.name, line_number, synonym)
            continue
        synonyms[synonym] = org_id

    logger.info("Loaded %s corporate synonyms from %s", len(synonyms), path)
    return MappingProxyType(synonyms)


def load_countries(path: Path) -> MappingProxyType:
    """Countries: ``code<TAB>name`` -> {name: code}."""
    countries: Dict[str, int] = {}
    for line_number, fields in _read_rows(path, 2):
        try:
            code = int(fields[0])
        except ValueError:
            logger.warning("%s:%s: non-numeric country code; skipped", path.name, line_number)
            continue
        name = fields[1].strip()
        if not name:
            continue
        if name in countries:
            logger.warning("%s:%s: duplicate country '%s'; skipped", path.name, line_number, name)
            continue
        countries[name] = code

    logger.info("Loaded %s countries from %s", len(countries), path)
    return MappingProxyType(countries)


def load_world_cities(path: Path) -> MappingProxyType:
    """World cities: ``name<TAB>country_code<TAB>city_id`` -> {name: (WorldCity, ...)}.

    Names shared with a US state are left out so a bare state name never
    resolves abroad.
    """
    cities: Dict[str, List[WorldCity]] = {}
    loaded = 0
    for line_number, fields in _read_rows(path, 3):
        try:
            city = WorldCity(country_code=int(fields[1]), city_id=int(fields[2]))
        except ValueError:
            logger.warning("%s:%s: non-numeric id; skipped", path.name, line_number)
            continue
        name = fields[0].strip()
        if not name or name.lower() in US_STATE_NAMES:
            continue
        cities.setdefault(name, []).append(city)
        loaded += 1

    logger.info("Loaded %s world cities under %s names from %s", loaded, len(cities), path)
    return MappingProxyType({name: tuple(entries) for name, entries in cities.items()})


def load_country_hints(path: Path) -> MappingProxyType:
    """Default countries: ``name<TAB>city_id<TAB>country_code`` -> {name: WorldCity}."""
    hints: Dict[str, WorldCity] = {}
    for line_number, fields in _read_rows(path, 3):
        try:
            hint = WorldCity(country_code=int(fields[2]), city_id=int(fields[1]))
        except ValueError:
            logger.warning("%s:%s: non-numeric id; skipped", path.name, line_number)
            continue
        name = fields[0].strip()
        if not name:
            continue
        if name in hints:
            logger.warning("%s:%s: duplicate hint '%s'; skipped", path.name, line_number, name)
            continue
        hints[name] = hint

    logger.info("Loaded %s country hints from %s", len(hints), path)
    return MappingProxyType(hints)


class ReferenceDataLoader:
    """Reads all entity reference tables from ``settings.entity_data_path``."""

    def __init__(self, data_path: Optional[str] = None, settings: Optional[Settings] = None) -> None:
        self.settings = settings or default_settings
        self.data_path = Path(data_path or self.settings.entity_data_path)

    def _file(self, name: str) -> Path:
        return self.data_path / name

    def load_location_data(self) -> LocationReferenceData:
        return LocationReferenceData(
            places=load_places(self._file(self.settings.entity_places_file)),
            city_hints=load_city_hints(self._file(self.settings.entity_city_hints_file)),
        )

    def load_organization_data(self) -> OrganizationReferenceData:
        return OrganizationReferenceData(
            authority=load_corporate_names(self._file(self.settings.entity_corporate_names_file)),
            synonyms=load_corporate_synonyms(self._file(self.settings.entity_corporate_synonyms_file)),
        )

    def load_international_data(self) -> InternationalReferenceData:
        return InternationalReferenceData(
            countries=load_countries(self._file(self.settings.entity_countries_file)),
            cities=load_world_cities(self._file(self.settings.entity_world_cities_file)),
            city_hints=load_country_hints(self._file(self.settings.entity_country_hints_file)),
        )

"""
Shared test configuration and fixtures for the caption and entity pipelines.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from typing import List, Optional, Sequence, Tuple

import pytest

from app.core.entity_models import (
    CityHint,
    EntityType,
    InternationalReferenceData,
    LocationReferenceData,
    NamedEntity,
    OrganizationReferenceData,
    WorldCity,
)
from app.core.pyd_schemas import AlignmentResult, WordResult


def setup_logging():
    """Configure logging for the whole test run."""
    log_dir = Path("test/test_output/logs")
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "test_run.log"

    formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)-8s [%(name)s:%(lineno)d] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = logging.FileHandler(filename=log_file, mode="a", encoding="utf-8")
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Drop existing handlers to avoid duplicate lines
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.getLogger("app").setLevel(logging.DEBUG)
    logging.getLogger("utils").setLevel(logging.DEBUG)
    logging.getLogger("test").setLevel(logging.DEBUG)

    return log_file


def pytest_configure(config):  # pylint: disable=unused-argument
    """Configure pytest for tests."""
    log_file = setup_logging()

    logger = logging.getLogger("pytest")
    logger.info("=" * 80)
    logger.info("STARTING TEST RUN")
    logger.info("=" * 80)
    logger.info("Working directory: %s", os.getcwd())
    logger.info("Log file: %s", log_file)
    logger.info("-" * 80)


@pytest.fixture(autouse=True)
def log_test_name(request):
    """Log test name when test starts and finishes."""
    logger = logging.getLogger(request.node.nodeid)
    logger.info("Starting test: %s", request.node.name)
    start_time = datetime.now()

    def log_test_end():
        duration = (datetime.now() - start_time).total_seconds()
        logger.info("Finished test in %.2fs", duration)
        logger.info("-" * 80)

    request.addfinalizer(log_test_end)


# -------------------- Alignment fixtures --------------------
Timing = Tuple[str, Optional[float], Optional[float]]


def build_alignment(transcript: str, timings: Sequence[Timing]) -> AlignmentResult:
    """Gentle style alignment: offsets found by forward search, ``None`` times mean unaligned."""
    words: List[WordResult] = []
    pointer = 0
    for word, start, end in timings:
        pos = transcript.index(word, pointer)
        pointer = pos + len(word)
        aligned = start is not None
        words.append(
            WordResult(
                case="success" if aligned else "not-found-in-audio",
                word=word,
                alignedWord=word.lower() if aligned else None,
                startOffset=pos,
                endOffset=pos + len(word),
                start=start or 0.0,
                end=end or 0.0,
            )
        )
    return AlignmentResult(transcript=transcript, words=words)


@pytest.fixture
def alignment_factory():
    return build_alignment


# -------------------- Entity fixtures --------------------
@pytest.fixture
def location_reference() -> LocationReferenceData:
    return LocationReferenceData(
        places=MappingProxyType(
            {
                17: MappingProxyType({"Cairo": 405641, "Chicago": 428803}),
                22: MappingProxyType({"New Orleans": 1629985}),
                36: MappingProxyType({"Buffalo": 978764}),
                53: MappingProxyType({"Seattle": 1512650}),
            }
        ),
        city_hints=MappingProxyType(
            {"New Orleans": CityHint("New Orleans", "LA", 22, 1629985)}
        ),
    )


@pytest.fixture
def organization_reference() -> OrganizationReferenceData:
    return OrganizationReferenceData(
        authority=MappingProxyType(
            {
                "Howard University": "n79021581",
                "NAACP": "n79018519",
                "University of California, Berkeley": "n79058482",
                "Boston Celtics (Basketball team)": "n80010813",
                "Morehouse College": "n80126290",
                "Army": "n78095330",
            }
        ),
        synonyms=MappingProxyType(
            {
                "U.S. Army": "n78095330",
                "National Association for the Advancement of Colored People": "n79018519",
            }
        ),
    )


@pytest.fixture
def international_reference() -> InternationalReferenceData:
    return InternationalReferenceData(
        countries=MappingProxyType({"France": 250, "Germany": 276, "Canada": 124, "Japan": 392}),
        cities=MappingProxyType(
            {
                "Paris": (WorldCity(250, 2988507), WorldCity(124, 6942553)),
                "Lyon": (WorldCity(250, 2996944),),
                "Berlin": (WorldCity(276, 2950159),),
                "Toronto": (WorldCity(124, 6167865),),
                "Saint Petersburg": (WorldCity(643, 498817),),
            }
        ),
        city_hints=MappingProxyType({"Tokyo": WorldCity(392, 1850147)}),
    )


@pytest.fixture
def make_entity():
    def _make(
        text: str,
        etype: EntityType,
        start: int = 0,
        context: str = "",
    ) -> NamedEntity:
        return NamedEntity(
            text=text,
            contextualized_text=context or text,
            start_offset=start,
            length=len(text),
            type=etype,
        )

    return _make


@pytest.fixture
def reference_files(tmp_path) -> Path:
    """The domestic, organization and international reference tables as tab-separated files."""
    data_dir = tmp_path / "entities"
    data_dir.mkdir()
    (data_dir / "USGS_Places_Table.txt").write_text(
        "PlaceID\tName\tStateID\n"
        "1629985\tNew Orleans\t22\n"
        "405641\tCairo\t17\n"
        "978764\tBuffalo\t36\n",
        encoding="utf-8",
    )
    (data_dir / "DefaultStatesForSomeLocations.txt").write_text(
        "Name\tStateAlpha\tStateID\tPlaceID\n"
        "New Orleans\tLA\t22\t1629985\n",
        encoding="utf-8",
    )
    (data_dir / "CorporateNameLookup.txt").write_text(
        "Name\tID\n"
        "NAACP\tn79018519\n"
        "Howard University\tn79021581\n",
        encoding="utf-8",
    )
    (data_dir / "AlternateCorporateNames.txt").write_text(
        "Synonym\tCanonical\tID\n"
        "National Association for the Advancement of Colored People\tNAACP\tn79018519\n",
        encoding="utf-8",
    )
    (data_dir / "CountryNameListWithCodes.txt").write_text(
        "Code\tName\n"
        "250\tFrance\n"
        "276\tGermany\n",
        encoding="utf-8",
    )
    (data_dir / "WorldCitiesWithCodes.txt").write_text(
        "Name\tCountryCode\tCityID\n"
        "Paris\t250\t2988507\n"
        "Paris\t124\t6942553\n"
        "Berlin\t276\t2950159\n"
        "Georgia\t268\t611717\n",
        encoding="utf-8",
    )
    (data_dir / "DefaultCountriesForSomeLocations.txt").write_text(
        "Name\tCityID\tCountryCode\n"
        "Tokyo\t1850147\t392\n",
        encoding="utf-8",
    )
    return data_dir

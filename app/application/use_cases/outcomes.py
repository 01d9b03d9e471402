"""
Result values returned by the use cases, one per processed segment or story.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from app.core.caption_models import CaptionValidationReport, TextCaptions
from app.core.entity_models import LocationEntity, NamedEntity, OrganizationalEntity
from app.core.pyd_schemas import TSyncPair


class OutcomeStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    NOT_RESOLVED = "not_resolved"


@dataclass
class SegmentCaptionOutcome:
    status: OutcomeStatus
    captions: Optional[TextCaptions] = None
    vtt: str = ""
    tsync: List[TSyncPair] = field(default_factory=list)
    caption_dump: str = ""
    error: Optional[str] = None
    error_code: Optional[str] = None
    run_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == OutcomeStatus.COMPLETED

    @property
    def validation(self) -> Optional[CaptionValidationReport]:
        return self.captions.validation if self.captions is not None else None


@dataclass
class StoryResolutionOutcome:
    """Entities of one story.

    NOT_RESOLVED means the organization ids conflicted: the organization lists
    are empty and ``conflict`` names the text, while locations are still
    reported.
    """

    status: OutcomeStatus
    candidates: List[NamedEntity] = field(default_factory=list)
    organizations_resolved: List[OrganizationalEntity] = field(default_factory=list)
    organizations_unresolved: List[OrganizationalEntity] = field(default_factory=list)
    locations_resolved: List[LocationEntity] = field(default_factory=list)
    locations_unresolved: List[LocationEntity] = field(default_factory=list)
    international_locations_resolved: List[LocationEntity] = field(default_factory=list)
    conflict: str = ""
    error: Optional[str] = None
    error_code: Optional[str] = None
    run_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == OutcomeStatus.COMPLETED

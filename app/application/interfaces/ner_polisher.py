from __future__ import annotations

from typing import Iterable, List, Protocol

from app.core.entity_models import NamedEntity


class INERPolisher(Protocol):
    """Turns token-per-line tagger output into offset-anchored entity candidates."""

    def polish(self, token_lines: Iterable[str], transcript: str) -> List[NamedEntity]:
        ...

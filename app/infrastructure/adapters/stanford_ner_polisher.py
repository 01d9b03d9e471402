from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from app.application.interfaces import INERPolisher
from app.core.entity_models import EntityConfidence, EntityType, NamedEntity
from app.core.exceptions import NERBracketMismatchError, NERDesyncError
from utils.text_utils import has_alphanumeric

logger = logging.getLogger(__name__)

ESCAPED_BRACKETS = {
    "-LSB-": "[",
    "-RSB-": "]",
    "-LRB-": "(",
    "-RRB-": ")",
    "-LCB-": "{",
    "-RCB-": "}",
}

TAG_TYPES = {
    "PERSON": EntityType.PERSON,
    "LOCATION": EntityType.LOC,
    "ORGANIZATION": EntityType.ORG,
}


def type_for_tag(tag: str) -> EntityType:
    return TAG_TYPES.get(tag, EntityType.UNSET)


def map_to_ascii(text: str) -> str:
    """Replace characters beyond Latin-1 with a space, logging the first offender."""
    for i, ch in enumerate(text):
        if ord(ch) > 255:
            logger.warning("Non-ASCII value at offset %s within: '%s'", i, text)
            return "".join(" " if ord(c) > 255 else c for c in text)
    return text


def transcript_source_form(token: str) -> str:
    """The transcript spelling of a tagger token, or "" for punctuation to ignore.

    Bracket escapes map back to brackets and a comma is kept; any other token
    without letters or digits collapses to "[" or "]" if it holds one, else "".
    """
    if token in ESCAPED_BRACKETS:
        return ESCAPED_BRACKETS[token]
    if token == ",":
        return ","

    work = token
    for escape, bracket in ESCAPED_BRACKETS.items():
        work = work.replace(escape, bracket)
    if has_alphanumeric(work):
        return map_to_ascii(work)
    if "[" in work:
        return "["
    if "]" in work:
        return "]"
    return ""


@dataclass
class _TaggedToken:
    text: str
    tag: str

    @property
    def type(self) -> EntityType:
        return type_for_tag(self.tag)


def parse_token_line(line: str) -> Optional[_TaggedToken]:
    """Parse "token<TAB>TAG"; None for lines to skip."""
    pieces = line.rstrip("\r\n").split("\t")
    if len(pieces) != 2 or not pieces[0]:
        return None
    text = transcript_source_form(pieces[0])
    if not text:
        return None
    return _TaggedToken(text=text, tag=pieces[1])


class StanfordNERPolisher(INERPolisher):
    """Converts Stanford NER token output into entity candidates anchored in the transcript.

    Tokens are located by a forward-only scan of the transcript. Consecutive
    tokens of one type form a candidate; bracketed annotations are folded into
    the candidate next to them, and a blank line in the transcript always ends
    a candidate. A token that ends a candidate is processed again as the
    possible start of the next one.
    """

    def polish_file(self, path: str, transcript: str) -> List[NamedEntity]:
        with open(path, "r", encoding="utf-8") as f:
            return self.polish(f, transcript)

    def polish(self, token_lines: Iterable[str], transcript: str) -> List[NamedEntity]:
        tokens = [t for t in (parse_token_line(line) for line in token_lines) if t is not None]
        entities: List[NamedEntity] = []
        offset = 0
        i = 0

        while i < len(tokens):
            token = tokens[i]
            i += 1
            found = self._find(transcript, token.text, offset)
            offset = found + len(token.text)

            if token.type == EntityType.UNSET and token.text != "[":
                continue

            entity, current_type, offset, i = self._collect(tokens, i, transcript, token, found, offset)
            if current_type != EntityType.UNSET:
                entity.type = current_type
                entities.append(entity)

        logger.info("Polished %s named entity candidates from %s tokens", len(entities), len(tokens))
        return entities

    @staticmethod
    def _find(transcript: str, text: str, offset: int) -> int:
        found = transcript.find(text, offset)
        if found < 0:
            raise NERDesyncError(
                f"Transcript at/after offset {offset} does not have this text: {text}",
                token=text,
                offset=offset,
            )
        return found

    @staticmethod
    def _close(entity: NamedEntity, transcript: str, offset: int) -> None:
        entity.length = offset - entity.start_offset
        entity.contextualized_text = transcript[entity.start_offset : entity.start_offset + entity.length]

    def _collect(
        self,
        tokens: List[_TaggedToken],
        i: int,
        transcript: str,
        first: _TaggedToken,
        start: int,
        offset: int,
    ) -> Tuple[NamedEntity, EntityType, int, int]:
        """Grow one candidate from ``first``; returns (entity, type, offset, next token index)."""
        current_type = first.type
        within = first.text == "["
        depth = 1 if within else 0
        considering_prefix = within
        entity = NamedEntity(
            text=first.text,
            contextualized_text=first.text,
            start_offset=start,
            length=len(first.text),
            type=current_type,
            confidence=EntityConfidence.NONE,
        )

        while True:
            if i >= len(tokens):
                if within:
                    raise NERBracketMismatchError("Square brackets mismatched.", entity_text=entity.text)
                self._close(entity, transcript, offset)
                return entity, current_type, offset, i

            token = tokens[i]
            found = self._find(transcript, token.text, offset)

            if within:
                i += 1
                if token.text == "[":
                    depth += 1
                    entity.text += " " + token.text
                    offset = found + 1
                elif token.text == "]":
                    depth -= 1
                    entity.text += " " + token.text
                    offset = found + 1
                    if depth == 0:
                        within = False
                else:
                    if considering_prefix and current_type == EntityType.UNSET:
                        current_type = token.type
                    entity.text += " " + token.text
                    offset = found + len(token.text)
                continue

            if "\n\n" in transcript[entity.start_offset : found + len(token.text)]:
                # paragraph break ends the candidate; token is reprocessed
                self._close(entity, transcript, offset)
                return entity, current_type, offset, i

            if token.text == "[":
                i += 1
                within = True
                depth = 1
                entity.text += " " + token.text
                offset = found + 1
                continue

            if considering_prefix:
                considering_prefix = False
                if token.type != current_type:
                    if token.type == EntityType.UNSET:
                        # the bracketed prefix is the whole entity
                        self._close(entity, transcript, offset)
                        return entity, current_type, offset, i
                    current_type = token.type
                elif current_type == EntityType.UNSET:
                    # untyped bracket followed by untyped text: drop it
                    i += 1
                    offset = found + len(token.text)
                    self._close(entity, transcript, offset)
                    return entity, current_type, offset, i

            if token.type != current_type:
                self._close(entity, transcript, offset)
                return entity, current_type, offset, i

            i += 1
            entity.text += " " + token.text
            offset = found + len(token.text)

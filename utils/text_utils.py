"""
Text cleanup helpers shared by the alignment formatter and the entity resolvers.
"""

import re

_WHITESPACE_RE = re.compile(r"\s+")
_SPACE_BEFORE_PUNCT_RE = re.compile(r"\s(?=[\.\?,;!])")

_CLOSERS = {"[": "]", "(": ")"}


def remove_brackets(text: str) -> str:
    """Drop ``[...]`` and ``(...)`` spans, brackets included.

    Brackets do not nest: everything from an opener to the first matching closer
    is removed. An unclosed opener removes the rest of the text.
    """
    out = []
    closer = None
    for ch in text:
        if closer is not None:
            if ch == closer:
                closer = None
            continue
        if ch in _CLOSERS:
            closer = _CLOSERS[ch]
            continue
        out.append(ch)
    return "".join(out)


def clean_caption_text(text: str) -> str:
    """Remove bracketed annotations, collapse whitespace, tighten punctuation."""
    result = remove_brackets(text)
    result = _WHITESPACE_RE.sub(" ", result)
    result = _SPACE_BEFORE_PUNCT_RE.sub("", result)
    return result.strip()


def has_alphanumeric(text: str) -> bool:
    return any(ch.isalnum() for ch in text)


def strip_trailing(text: str, chars: str) -> str:
    """Repeatedly drop a trailing character from ``chars``, stripping whitespace each time."""
    result = text.strip()
    while result and result[-1] in chars:
        result = result[:-1].strip()
    return result

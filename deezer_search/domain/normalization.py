from __future__ import annotations

import math
import re
import unicodedata
from typing import Any, Iterable, Mapping, Optional

from .entities import UnresolvedTrack
from .errors import ValidationError


_FEAT_PATTERN = re.compile(r"\b(feat\.?|ft\.)\b", re.IGNORECASE)
_PARENS_CHARS_PATTERN = re.compile(r"[\(\)\[\]\{\}]")
_PARENS_CONTENT_PATTERN = re.compile(r"\s*[\(\[\{][^\)\]\}]*[\)\]\}]\s*")
# Keep unicode word characters and spaces; strip punctuation/symbols. Underscores go separately.
_NON_WORD_SPACE_PATTERN = re.compile(r"[^\w\s]", re.UNICODE)
_MULTISPACE_PATTERN = re.compile(r"\s+")
_TAIL_TOKENS = {
    "vol", "pt", "remaster", "remastered", "live", "edit", "topic",
}


def normalize_track(raw: Optional[Mapping[str, Any]]) -> UnresolvedTrack:
    """Convert a raw Deezer track object into an unresolved track.

    Raises:
        ValidationError: the record, its artist or its title is missing, or the
            title is not a string.
    """
    if not raw:
        raise ValidationError("The Deezer track object was not provided")
    if not isinstance(raw, Mapping):
        raise ValidationError(f"The Deezer track must be an object, received type {type(raw).__name__}")

    artist = raw.get("artist")
    if not artist:
        raise ValidationError("The track artist was not provided")
    author = artist.get("name") if isinstance(artist, Mapping) else None
    if not author or not isinstance(author, str):
        raise ValidationError("The track artist name was not provided")

    title = raw.get("title")
    if title is None or title == "":
        raise ValidationError("The track title was not provided")
    if not isinstance(title, str):
        raise ValidationError(
            f"The track title must be a string, received type {type(title).__name__}"
        )

    return UnresolvedTrack(
        title=title,
        author=author,
        duration_ms=_duration_ms(raw.get("duration")),
    )


def _duration_ms(seconds: Any) -> int:
    if seconds is None:
        return 0
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
        raise ValidationError(
            f"The track duration must be a number, received type {type(seconds).__name__}"
        )
    if not math.isfinite(seconds):
        raise ValidationError(f"The track duration must be finite, received {seconds}")
    if seconds < 0:
        raise ValidationError(f"The track duration must not be negative, received {seconds}")
    return int(round(seconds * 1000))


def _strip_diacritics(text: str) -> str:
    normalized = unicodedata.normalize("NFKD", text)
    return "".join(c for c in normalized if not unicodedata.combining(c))


def normalize_string(value: str) -> str:
    value = value or ""
    value = _strip_diacritics(value)
    value = value.lower()
    value = value.replace("&", " and ")
    value = _FEAT_PATTERN.sub(" ", value)
    while True:
        new_value = _PARENS_CONTENT_PATTERN.sub(" ", value)
        if new_value == value:
            break
        value = new_value
    value = _PARENS_CHARS_PATTERN.sub(" ", value)
    value = _NON_WORD_SPACE_PATTERN.sub(" ", value)
    value = value.replace("_", " ")
    value = _MULTISPACE_PATTERN.sub(" ", value).strip()
    return value


def normalize_artist_tokens(artists: Iterable[str]) -> list[str]:
    """Normalize artist names and return their significant tokens.

    Drops numeric-only tokens and service suffixes such as 'vol', 'live' or 'topic'
    (the latter appears on auto-generated channel names).
    """
    tokens: list[str] = []
    for artist in artists or []:
        norm = normalize_string(artist)
        for tok in norm.split():
            if not tok:
                continue
            if tok.isdigit():
                continue
            if tok in _TAIL_TOKENS:
                continue
            tokens.append(tok)
    return tokens

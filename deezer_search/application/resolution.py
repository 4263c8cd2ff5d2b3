from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional

from deezer_search.domain.entities import LoadType, UnresolvedTrack
from deezer_search.domain.errors import ResolutionError
from deezer_search.domain.normalization import normalize_artist_tokens, normalize_string
from deezer_search.domain.ports import SearchFunction, TrackResolver


logger = logging.getLogger(__name__)


def resolve_tracks(tracks: Iterable[UnresolvedTrack], resolver: Optional[TrackResolver]) -> List[Any]:
    """Resolve tracks one by one in catalog order.

    A track whose resolution fails is dropped; the others keep their relative order.
    Without a resolver the tracks are returned unchanged.
    """
    if resolver is None:
        return list(tracks)

    resolved = []
    for index, track in enumerate(tracks):
        try:
            resolved.append(resolver.resolve(track))
        except Exception as e:
            logger.warning(f"Dropping track #{index + 1} '{track.author} - {track.title}': {e}")
    return resolved


class HostSearchResolver:
    """Resolves unresolved tracks through the host's own search.

    Searches for "author - title". Candidates from the same artist (auto-generated
    "- Topic" channels included) or with the same title are preferred over the
    rest; within that pool the first one inside the duration tolerance wins,
    otherwise the first one.
    """

    def __init__(self, search: SearchFunction, duration_tolerance_ms: int = 1500):
        """Initialize the resolver.

        Args:
            search: The host's original search function
            duration_tolerance_ms: Maximum duration difference for a duration match
        """
        self.search = search
        self.duration_tolerance_ms = duration_tolerance_ms

    def resolve(self, track: UnresolvedTrack) -> Any:
        query = " - ".join(part for part in (track.author, track.title) if part)
        result = self.search(query, track.requester)

        load_type = _load_type(_field(result, 'load_type', 'loadType'))
        candidates = list(_field(result, 'tracks') or [])
        if load_type is not LoadType.SEARCH_RESULT or not candidates:
            exception = _field(result, 'exception')
            message = _field(exception, 'message') if exception else None
            raise ResolutionError(message or f"No tracks found for '{query}'")

        return self.find_best_match(track, candidates)

    def find_best_match(self, track: UnresolvedTrack, candidates: List[Any]) -> Any:
        if not candidates:
            raise ResolutionError(f"No candidates for '{track.author} - {track.title}'")

        source_artist = set(normalize_artist_tokens([track.author]))
        source_title = normalize_string(track.title)

        def same_source(candidate: Any) -> bool:
            author = _field(candidate, 'author') or ''
            title = _field(candidate, 'title') or ''
            if source_artist and set(normalize_artist_tokens([author])) == source_artist:
                return True
            return bool(source_title) and normalize_string(title) == source_title

        pool = [c for c in candidates if same_source(c)] or candidates
        close = [c for c in pool if self._duration_matches(track, c)]
        return close[0] if close else pool[0]

    def _duration_matches(self, track: UnresolvedTrack, candidate: Any) -> bool:
        if not track.duration_ms:
            return False
        duration = _field(candidate, 'duration')
        if not isinstance(duration, (int, float)):
            return False
        return abs(duration - track.duration_ms) <= self.duration_tolerance_ms


def _field(obj: Any, *names: str) -> Any:
    """Read the first present attribute or mapping key among ``names``."""
    for name in names:
        if isinstance(obj, dict):
            if name in obj:
                return obj[name]
        elif hasattr(obj, name):
            return getattr(obj, name)
    return None


def _load_type(value: Any) -> Optional[LoadType]:
    try:
        return LoadType(value)
    except ValueError:
        return None

from __future__ import annotations

from typing import Any, Iterable, Optional

from deezer_search.domain.entities import LoadType, PlaylistSummary, SearchFailure, SearchOutcome


FAILURE_SEVERITY = "COMMON"


def build_search(load_type: LoadType,
                 tracks: Optional[Iterable[Any]] = None,
                 error: Optional[str] = None,
                 name: Optional[str] = None) -> SearchOutcome:
    """Assemble the search result handed back to the host.

    The playlist summary is only present for a non-empty ``name``; its duration is
    the sum over the tracks given here, so items dropped upstream do not count.
    The exception payload is only present for a non-empty ``error``. Both may be
    set at once; the caller decides which one wins.
    """
    tracks = tuple(tracks or ())
    playlist = None
    if name:
        playlist = PlaylistSummary(name=name, duration=sum(track_duration_ms(t) for t in tracks))
    exception = SearchFailure(message=error, severity=FAILURE_SEVERITY) if error else None
    return SearchOutcome(
        load_type=LoadType(load_type),
        tracks=tracks,
        playlist=playlist,
        exception=exception,
    )


def track_duration_ms(track: Any) -> int:
    """Duration of an unresolved or host-resolved track in ms; missing counts as 0."""
    if isinstance(track, dict):
        value = track.get('duration_ms', track.get('duration'))
    else:
        value = getattr(track, 'duration_ms', None)
        if value is None:
            value = getattr(track, 'duration', None)
    return value or 0

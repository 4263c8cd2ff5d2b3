from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class CatalogKind(str, Enum):
    """Catalog entity kinds a Deezer URL can point at."""

    TRACK = "track"
    ALBUM = "album"
    PLAYLIST = "playlist"

    @classmethod
    def parse(cls, value: Any) -> Optional["CatalogKind"]:
        """Return the matching kind, or None when the value names no known kind."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class LoadType(str, Enum):
    """Outcome tag the host uses to decide how to queue a search result."""

    TRACK_LOADED = "TRACK_LOADED"
    PLAYLIST_LOADED = "PLAYLIST_LOADED"
    SEARCH_RESULT = "SEARCH_RESULT"
    NO_MATCHES = "NO_MATCHES"
    LOAD_FAILED = "LOAD_FAILED"


@dataclass(frozen=True)
class CatalogReference:
    """Entity kind and numeric id extracted from a catalog URL."""

    kind: CatalogKind
    id: str


@dataclass(frozen=True)
class SearchQuery:
    """Structured query as passed by the host instead of a plain string."""

    query: str
    source: Optional[str] = None


@dataclass(frozen=True)
class UnresolvedTrack:
    """Track known only by its metadata, not yet bound to a playable source.

    Build instances with ``normalize_track`` so field validation stays in one place.
    """

    title: str
    author: str
    duration_ms: int = 0
    requester: Any = None

    def with_requester(self, requester: Any) -> "UnresolvedTrack":
        return replace(self, requester=requester)

    def to_json(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "author": self.author,
            "duration": self.duration_ms,
        }


@dataclass(frozen=True)
class FetchResult:
    """Normalized tracks of one catalog entity. Containers also carry a display name."""

    tracks: Tuple[UnresolvedTrack, ...] = ()
    name: Optional[str] = None


@dataclass(frozen=True)
class FetchFailure:
    """A catalog fetch that did not produce tracks."""

    message: str
    error: Optional[Exception] = None
    load_type: Optional[LoadType] = None


@dataclass(frozen=True)
class PlaylistSummary:
    """Aggregate metadata for a container result. Duration is in milliseconds."""

    name: str
    duration: int

    def to_json(self) -> Dict[str, Any]:
        return {"name": self.name, "duration": self.duration}


@dataclass(frozen=True)
class SearchFailure:
    """Exception payload in the host's search-result contract."""

    message: str
    severity: str = "COMMON"

    def to_json(self) -> Dict[str, Any]:
        return {"message": self.message, "severity": self.severity}


@dataclass(frozen=True)
class SearchOutcome:
    """Search result handed back to the host."""

    load_type: LoadType
    tracks: Tuple[Any, ...] = ()
    playlist: Optional[PlaylistSummary] = None
    exception: Optional[SearchFailure] = None

    def to_json(self) -> Dict[str, Any]:
        return {
            "loadType": self.load_type.value,
            "tracks": [_track_to_json(t) for t in self.tracks],
            "playlist": self.playlist.to_json() if self.playlist else None,
            "exception": self.exception.to_json() if self.exception else None,
        }


def _track_to_json(track: Any) -> Any:
    # Resolved tracks come from the host and may be plain mappings
    if hasattr(track, "to_json"):
        return track.to_json()
    if isinstance(track, dict):
        return dict(track)
    return {
        "title": getattr(track, "title", None),
        "author": getattr(track, "author", None),
        "duration": getattr(track, "duration", None),
        "uri": getattr(track, "uri", None),
    }

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Union

from .entities import SearchQuery, UnresolvedTrack


class SearchFunction(Protocol):
    """The host's search entry point, captured once at plugin installation."""

    def __call__(self, query: Union[str, SearchQuery], requester: Optional[Any] = None) -> Any:
        ...


class HostManager(Protocol):
    """Player manager whose ``search`` attribute the plugin replaces."""

    search: SearchFunction


class CatalogClient(Protocol):
    """Port for reading raw catalog entities.

    Implementations return decoded JSON objects and raise ``RemoteFetchError`` for
    transport failures, non-success responses and payloads of the wrong shape.
    """

    def get_track(self, track_id: str) -> Dict[str, Any]:
        """Return the raw track object."""

    def get_album(self, album_id: str) -> Dict[str, Any]:
        """Return the raw album object including its ``tracks.data`` list."""

    def get_playlist(self, playlist_id: str) -> Dict[str, Any]:
        """Return the raw playlist object including its ``tracks.data`` list."""


class TrackResolver(Protocol):
    """Binds an unresolved track to a directly playable one."""

    def resolve(self, track: UnresolvedTrack) -> Any:
        """Return the playable track or raise when none can be found."""

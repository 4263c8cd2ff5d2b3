from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Union

from deezer_search.domain.entities import (
    CatalogKind,
    CatalogReference,
    FetchFailure,
    FetchResult,
    LoadType,
    UnresolvedTrack,
)
from deezer_search.domain.errors import CatalogError
from deezer_search.domain.normalization import normalize_track
from deezer_search.domain.ports import CatalogClient


logger = logging.getLogger(__name__)

UNTITLED_ALBUM = "Untitled album"
UNTITLED_PLAYLIST = "Untitled playlist"


class CatalogFetcher:
    """Fetches one catalog entity and normalizes its tracks.

    Album and playlist limits truncate the normalized track list; they bound the
    number of tracks returned, not the number of requests made.
    """

    def __init__(self,
                 client: CatalogClient,
                 album_page_limit: Optional[int] = None,
                 playlist_page_limit: Optional[int] = None):
        self.client = client
        self.album_page_limit = album_page_limit
        self.playlist_page_limit = playlist_page_limit

    def fetch(self, reference: CatalogReference) -> Union[FetchResult, FetchFailure]:
        """Fetch the referenced entity, returning a FetchFailure instead of raising."""
        kind = CatalogKind.parse(reference.kind)
        try:
            if kind is CatalogKind.TRACK:
                return self.fetch_track(reference.id)
            elif kind is CatalogKind.ALBUM:
                return self.fetch_album(reference.id)
            elif kind is CatalogKind.PLAYLIST:
                return self.fetch_playlist(reference.id)
            else:
                return FetchFailure(message=f"Unsupported catalog kind: {reference.kind!r}")
        except CatalogError as e:
            logger.warning(f"Fetching {reference.kind} {reference.id} failed: {e}")
            return FetchFailure(
                message=str(e),
                error=e,
                load_type=LoadType(e.load_type) if e.load_type else None,
            )

    def fetch_track(self, track_id: str) -> FetchResult:
        data = self.client.get_track(track_id)
        return FetchResult(tracks=(normalize_track(data),))

    def fetch_album(self, album_id: str) -> FetchResult:
        album = self.client.get_album(album_id)
        tracks = _normalize_titled(album['tracks']['data'])
        return FetchResult(
            tracks=tuple(_limit(tracks, self.album_page_limit)),
            name=_display_name(album) or UNTITLED_ALBUM,
        )

    def fetch_playlist(self, playlist_id: str) -> FetchResult:
        playlist = self.client.get_playlist(playlist_id)
        items = [_unwrap_playlist_item(item) for item in playlist['tracks']['data']]
        tracks = _normalize_titled(items)
        return FetchResult(
            tracks=tuple(_limit(tracks, self.playlist_page_limit)),
            name=_display_name(playlist) or UNTITLED_PLAYLIST,
        )


def _normalize_titled(items: Iterable[Any]) -> List[UnresolvedTrack]:
    # Catalog containers occasionally list incomplete entries; skip those without a title
    tracks = []
    skipped = 0
    for item in items:
        if not isinstance(item, Mapping) or not item.get('title'):
            skipped += 1
            continue
        tracks.append(normalize_track(item))
    if skipped:
        logger.debug(f"Skipped {skipped} catalog item(s) without a title")
    return tracks


def _unwrap_playlist_item(item: Any) -> Any:
    if isinstance(item, Mapping) and 'title' not in item and isinstance(item.get('track'), Mapping):
        return item['track']
    return item


def _limit(tracks: List[UnresolvedTrack], limit: Optional[int]) -> List[UnresolvedTrack]:
    if limit:
        return tracks[:limit]
    return tracks


def _display_name(entity: Mapping[str, Any]) -> Optional[str]:
    name = entity.get('title') or entity.get('name')
    return name if isinstance(name, str) else None

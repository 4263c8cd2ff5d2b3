import logging
from typing import Any, Dict, Optional

import requests

from deezer_search.crosscutting.config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SEC
from deezer_search.domain.entities import CatalogKind
from deezer_search.domain.errors import RemoteFetchError
from deezer_search.domain.ports import CatalogClient

logger = logging.getLogger(__name__)


class DeezerClient(CatalogClient):
    """Read-only client for the public Deezer API.

    Each call issues exactly one GET and returns the decoded JSON object. Any
    transport error, non-2xx status, undecodable body, Deezer error payload or
    missing track list is reported as ``RemoteFetchError``.
    """

    def __init__(self,
                 base_url: str = DEFAULT_BASE_URL,
                 timeout_sec: float = DEFAULT_TIMEOUT_SEC,
                 access_token: Optional[str] = None,
                 session: Optional[requests.Session] = None):
        """Initialize the client.

        Args:
            base_url: API root, e.g. https://api.deezer.com
            timeout_sec: Per-request timeout
            access_token: Optional user token for private playlists
            session: Session to reuse; a new one is created when omitted
        """
        self.base_url = base_url.rstrip('/')
        self.timeout_sec = timeout_sec
        self.access_token = access_token
        self._session = session or requests.Session()

    @classmethod
    def from_config(cls, config) -> "DeezerClient":
        return cls(
            base_url=config.base_url,
            timeout_sec=config.timeout_sec,
            access_token=config.access_token,
        )

    def get_track(self, track_id: str) -> Dict[str, Any]:
        return self._get_entity(CatalogKind.TRACK, track_id)

    def get_album(self, album_id: str) -> Dict[str, Any]:
        album = self._get_entity(CatalogKind.ALBUM, album_id)
        self._require_track_list(album, CatalogKind.ALBUM, album_id)
        return album

    def get_playlist(self, playlist_id: str) -> Dict[str, Any]:
        playlist = self._get_entity(CatalogKind.PLAYLIST, playlist_id)
        self._require_track_list(playlist, CatalogKind.PLAYLIST, playlist_id)
        return playlist

    def _get_entity(self, kind: CatalogKind, entity_id: str) -> Dict[str, Any]:
        url = f"{self.base_url}/{kind.value}/{entity_id}"
        params = {'access_token': self.access_token} if self.access_token else None

        try:
            response = self._session.get(url, params=params, timeout=self.timeout_sec)
        except requests.RequestException as e:
            logger.error(f"Deezer request for {kind.value} {entity_id} failed: {e}")
            raise RemoteFetchError(f"Failed to fetch Deezer {kind.value} {entity_id}: {e}") from e

        if not 200 <= response.status_code < 300:
            logger.warning(f"Deezer returned HTTP {response.status_code} for {kind.value} {entity_id}")
            raise RemoteFetchError(
                f"Deezer request for {kind.value} {entity_id} failed ({response.status_code})"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise RemoteFetchError(f"Deezer returned invalid JSON for {kind.value} {entity_id}") from e

        if not isinstance(payload, dict):
            raise RemoteFetchError(f"Unexpected Deezer response for {kind.value} {entity_id}")

        error = payload.get('error')
        if error:
            raise self._error_from_payload(error, kind, entity_id)

        logger.debug(f"Fetched Deezer {kind.value} {entity_id}")
        return payload

    @staticmethod
    def _error_from_payload(error: Any, kind: CatalogKind, entity_id: str) -> RemoteFetchError:
        if not isinstance(error, dict):
            return RemoteFetchError(f"Deezer error for {kind.value} {entity_id}: {error}")

        # Deezer answers unknown ids with HTTP 200 and {"error": {"type": "DataException", "code": 800}}
        message = error.get('message') or error.get('type') or 'unknown error'
        return RemoteFetchError(f"Deezer error for {kind.value} {entity_id}: {message}")

    @staticmethod
    def _require_track_list(payload: Dict[str, Any], kind: CatalogKind, entity_id: str) -> None:
        tracks = payload.get('tracks')
        if not isinstance(tracks, dict) or not isinstance(tracks.get('data'), list):
            raise RemoteFetchError(f"Deezer {kind.value} {entity_id} has no track list")

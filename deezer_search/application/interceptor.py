from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from deezer_search.application.catalog import CatalogFetcher
from deezer_search.application.resolution import HostSearchResolver, resolve_tracks
from deezer_search.application.results import build_search
from deezer_search.crosscutting.config import PluginConfiguration
from deezer_search.crosscutting.logging import (
    CorrelationContext,
    log_error,
    log_search_complete,
    log_search_start,
)
from deezer_search.domain.classifier import classify
from deezer_search.domain.entities import (
    CatalogKind,
    CatalogReference,
    FetchFailure,
    FetchResult,
    LoadType,
    SearchOutcome,
    SearchQuery,
)
from deezer_search.domain.ports import SearchFunction, TrackResolver


logger = logging.getLogger(__name__)

INCORRECT_TYPE_MESSAGE = 'Incorrect type for Deezer URL, must be one of "track", "album" or "playlist".'
UNTITLED = "Untitled"

# Marks a requester the caller did not pass
_NOT_GIVEN = object()


def extract_query_text(query: Union[str, SearchQuery, Mapping[str, Any], None]) -> Optional[str]:
    """Return the literal search text of a plain or structured query."""
    if isinstance(query, str):
        return query
    if isinstance(query, Mapping):
        text = query.get('query')
    else:
        text = getattr(query, 'query', None)
    return text if isinstance(text, str) else None


class SearchInterceptor:
    """Answers Deezer URLs from the catalog and hands everything else to the host.

    This is where catalog failures become LOAD_FAILED results: ``search`` never
    raises for a Deezer URL. Input that is not a Deezer URL goes to the captured
    host search with the original arguments and its result is returned untouched.
    """

    def __init__(self,
                 config: PluginConfiguration,
                 fetcher: CatalogFetcher,
                 delegate: SearchFunction,
                 resolver: Optional[TrackResolver] = None):
        """Initialize the interceptor.

        Args:
            config: Validated plugin configuration
            fetcher: Catalog fetcher used for recognized URLs
            delegate: The host's original search function
            resolver: Eager resolver; defaults to searching through ``delegate``
                when eager resolution is enabled
        """
        self.config = config
        self.fetcher = fetcher
        self.delegate = delegate
        if config.eager_resolve and resolver is None:
            resolver = HostSearchResolver(delegate)
        self.resolver = resolver if config.eager_resolve else None

    def search(self, query: Union[str, SearchQuery], requester: Any = _NOT_GIVEN) -> Any:
        text = extract_query_text(query)
        reference = classify(text)
        if reference is None:
            if requester is _NOT_GIVEN:
                return self.delegate(query)
            return self.delegate(query, requester)

        if requester is _NOT_GIVEN:
            requester = None
        with CorrelationContext(query=text):
            return self.load_reference(reference, requester)

    def load_reference(self, reference: CatalogReference, requester: Optional[Any] = None) -> SearchOutcome:
        """Fetch a classified reference and build the host result."""
        kind = CatalogKind.parse(reference.kind)
        if kind is None:
            logger.warning(f"No handler for Deezer entity kind {reference.kind!r}")
            return build_search(LoadType.LOAD_FAILED, None, INCORRECT_TYPE_MESSAGE)

        log_search_start(logger, kind.value, reference.id)
        try:
            fetched = self.fetcher.fetch(CatalogReference(kind=kind, id=reference.id))
            if isinstance(fetched, FetchFailure):
                outcome = build_search(fetched.load_type or LoadType.LOAD_FAILED, None, fetched.message)
            else:
                outcome = self._loaded(kind, fetched, requester)
        except Exception as e:
            log_error(logger, "Unexpected failure while loading Deezer URL", e,
                      kind=kind.value, catalog_id=reference.id)
            outcome = build_search(LoadType.LOAD_FAILED, None, str(e) or type(e).__name__)

        log_search_complete(logger, kind.value, reference.id,
                            outcome.load_type.value, len(outcome.tracks))
        return outcome

    def _loaded(self, kind: CatalogKind, fetched: FetchResult, requester: Optional[Any]) -> SearchOutcome:
        if kind is CatalogKind.TRACK:
            load_type = LoadType.TRACK_LOADED
            name = None
        else:
            load_type = LoadType.PLAYLIST_LOADED
            name = fetched.name or UNTITLED

        tracks = [track.with_requester(requester) for track in fetched.tracks]
        tracks = resolve_tracks(tracks, self.resolver)
        return build_search(load_type, tracks, None, name)

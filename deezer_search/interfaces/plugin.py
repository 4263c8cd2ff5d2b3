import logging
from typing import Any, Mapping, Optional, Union

from deezer_search.application.catalog import CatalogFetcher
from deezer_search.application.interceptor import SearchInterceptor
from deezer_search.application.results import build_search
from deezer_search.crosscutting.config import PluginConfiguration
from deezer_search.domain.entities import LoadType, SearchQuery
from deezer_search.domain.ports import CatalogClient, HostManager, TrackResolver
from deezer_search.infrastructure.providers.deezer import DeezerClient

logger = logging.getLogger(__name__)


class DeezerPlugin:
    """Player-manager plugin that makes the host's search understand Deezer URLs.

    Usage:
        plugin = DeezerPlugin({'playlist_page_limit': 100})
        plugin.load(manager)
        manager.search("https://www.deezer.com/en/album/302127")
    """

    def __init__(self,
                 options: Union[PluginConfiguration, Mapping[str, Any], None] = None,
                 client: Optional[CatalogClient] = None,
                 resolver: Optional[TrackResolver] = None):
        """Validate options and prepare the catalog fetcher.

        Args:
            options: Plugin options; invalid values raise ConfigurationError here
            client: Catalog client; a DeezerClient built from the options by default
            resolver: Eager resolver; by default the host's own search is used
        """
        if isinstance(options, PluginConfiguration):
            self.config = options
        else:
            self.config = PluginConfiguration.from_mapping(options)

        self.client = client or DeezerClient.from_config(self.config)
        self.fetcher = CatalogFetcher(
            self.client,
            album_page_limit=self.config.album_page_limit,
            playlist_page_limit=self.config.playlist_page_limit,
        )
        self._resolver = resolver
        self.manager: Optional[HostManager] = None
        self.interceptor: Optional[SearchInterceptor] = None

    def load(self, manager: HostManager) -> None:
        """Capture the manager's current search and install the interceptor in its place."""
        if self.interceptor is not None:
            raise RuntimeError("DeezerPlugin is already loaded")

        self.interceptor = SearchInterceptor(
            self.config,
            self.fetcher,
            delegate=manager.search,
            resolver=self._resolver,
        )
        self.manager = manager
        manager.search = self.interceptor.search
        logger.info(f"Deezer plugin loaded (eager_resolve={self.config.eager_resolve})")

    def search(self, query: Union[str, SearchQuery], *args: Any) -> Any:
        if self.interceptor is None:
            raise RuntimeError("DeezerPlugin.load() must be called before searching")
        return self.interceptor.search(query, *args)


def no_host_search(query: Union[str, SearchQuery], requester: Optional[Any] = None):
    """Stand-in host search for standalone use: nothing but Deezer URLs resolve."""
    return build_search(LoadType.NO_MATCHES)


class StandaloneHost:
    """Minimal host manager so the plugin can run outside a player."""

    def __init__(self):
        self.search = no_host_search

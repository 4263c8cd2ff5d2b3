import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

from dotenv import dotenv_values


DEFAULT_BASE_URL = "https://api.deezer.com"
DEFAULT_TIMEOUT_SEC = 15.0

_ENV_KEYS = {
    'playlist_page_limit': 'DEEZER_PLAYLIST_PAGE_LIMIT',
    'album_page_limit': 'DEEZER_ALBUM_PAGE_LIMIT',
    'eager_resolve': 'DEEZER_EAGER_RESOLVE',
    'base_url': 'DEEZER_API_BASE_URL',
    'timeout_sec': 'DEEZER_TIMEOUT_SEC',
    'access_token': 'DEEZER_ACCESS_TOKEN',
}
_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off'}


class ConfigurationError(Exception):
    """Configuration error."""
    pass


@dataclass(frozen=True)
class PluginConfiguration:
    """Validated, immutable plugin options.

    Attributes:
        playlist_page_limit: Keep at most this many playlist tracks (None keeps all)
        album_page_limit: Keep at most this many album tracks (None keeps all)
        eager_resolve: Resolve every track to a playable one at search time.
            Not recommended for large playlists as it issues one search per track.
        base_url: Catalog API root
        timeout_sec: Per-request timeout for catalog calls
        access_token: Optional user token, needed for private playlists
    """

    playlist_page_limit: Optional[int] = None
    album_page_limit: Optional[int] = None
    eager_resolve: bool = False
    base_url: str = DEFAULT_BASE_URL
    timeout_sec: float = DEFAULT_TIMEOUT_SEC
    access_token: Optional[str] = None

    def __post_init__(self):
        _check_limit('playlist_page_limit', self.playlist_page_limit)
        _check_limit('album_page_limit', self.album_page_limit)
        if not isinstance(self.eager_resolve, bool):
            raise ConfigurationError('Deezer option "eager_resolve" must be a boolean.')
        if not isinstance(self.base_url, str) or not self.base_url.strip():
            raise ConfigurationError('Deezer option "base_url" must be a non-empty string.')
        if (isinstance(self.timeout_sec, bool)
                or not isinstance(self.timeout_sec, (int, float))
                or self.timeout_sec <= 0):
            raise ConfigurationError('Deezer option "timeout_sec" must be a positive number.')
        if self.access_token is not None and not isinstance(self.access_token, str):
            raise ConfigurationError('Deezer option "access_token" must be a string.')

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]] = None) -> "PluginConfiguration":
        """Build configuration from a plain options mapping, failing fast on bad input."""
        if options is None:
            return cls()
        if not isinstance(options, Mapping):
            raise ConfigurationError("Deezer options must be a mapping.")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ConfigurationError(f"Unknown Deezer option(s): {', '.join(unknown)}")

        # Explicit None means "not set"
        kwargs = {key: value for key, value in options.items() if value is not None}
        return cls(**kwargs)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None,
                 dotenv_path: Optional[str] = None) -> "PluginConfiguration":
        """Build configuration from DEEZER_* environment variables.

        Values found in ``dotenv_path`` are used where the environment has none.
        """
        source: Dict[str, Any] = {}
        if dotenv_path:
            source.update({k: v for k, v in dotenv_values(dotenv_path).items() if v is not None})
        source.update(os.environ if env is None else env)

        options: Dict[str, Any] = {}
        for key, env_key in _ENV_KEYS.items():
            raw = source.get(env_key)
            if raw is None or not str(raw).strip():
                continue
            options[key] = _parse_env_value(key, env_key, str(raw).strip())
        return cls.from_mapping(options)

    def to_json(self) -> Dict[str, Any]:
        """Configuration summary (without the access token)."""
        return {
            'playlistPageLimit': self.playlist_page_limit,
            'albumPageLimit': self.album_page_limit,
            'eagerResolve': self.eager_resolve,
            'baseUrl': self.base_url,
            'timeoutSec': self.timeout_sec,
            'hasAccessToken': bool(self.access_token),
        }


def _check_limit(name: str, value: Any) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f'Deezer option "{name}" must be an integer.')
    if value <= 0:
        raise ConfigurationError(f'Deezer option "{name}" must be positive.')


def _parse_env_value(key: str, env_key: str, raw: str) -> Any:
    if key in ('playlist_page_limit', 'album_page_limit'):
        try:
            return int(raw)
        except ValueError:
            raise ConfigurationError(f"{env_key} must be an integer, got {raw!r}")
    if key == 'timeout_sec':
        try:
            return float(raw)
        except ValueError:
            raise ConfigurationError(f"{env_key} must be a number, got {raw!r}")
    if key == 'eager_resolve':
        lowered = raw.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ConfigurationError(f"{env_key} must be a boolean flag, got {raw!r}")
    return raw

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from dotenv import load_dotenv

from deezer_search.crosscutting.config import ConfigurationError, PluginConfiguration
from deezer_search.crosscutting.logging import setup_logging
from deezer_search.domain.classifier import classify
from deezer_search.domain.entities import LoadType
from deezer_search.interfaces.plugin import DeezerPlugin, StandaloneHost


LOADED_TYPES = (LoadType.TRACK_LOADED, LoadType.PLAYLIST_LOADED)


class CLI:
    """Command Line Interface for deezer-search."""

    def __init__(self):
        """Initialize CLI."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create argument parser."""
        parser = argparse.ArgumentParser(
            prog='deezer-search',
            description='Resolve Deezer track, album and playlist URLs into queueable tracks'
        )

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        resolve_parser = subparsers.add_parser('resolve', help='Load a Deezer URL and print the result')
        resolve_parser.add_argument('url', help='Deezer track, album or playlist URL')
        resolve_parser.add_argument(
            '--album-page-limit',
            type=int,
            help='Keep at most this many album tracks'
        )
        resolve_parser.add_argument(
            '--playlist-page-limit',
            type=int,
            help='Keep at most this many playlist tracks'
        )
        resolve_parser.add_argument(
            '--env-file',
            help='Read DEEZER_* settings from this .env file'
        )
        resolve_parser.add_argument(
            '--log-level',
            choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
            default='WARNING',
            help='Set logging level (default: WARNING)'
        )

        classify_parser = subparsers.add_parser('classify', help='Show the entity a Deezer URL points at')
        classify_parser.add_argument('url', help='Text to classify')

        return parser

    def _build_config(self, args: argparse.Namespace) -> PluginConfiguration:
        """Environment settings, overridden by command line options."""
        config = PluginConfiguration.from_env(dotenv_path=args.env_file)
        overrides = {
            'album_page_limit': args.album_page_limit,
            'playlist_page_limit': args.playlist_page_limit,
        }
        # Standalone runs have no playback source to resolve against
        return replace(
            config,
            eager_resolve=False,
            **{key: value for key, value in overrides.items() if value is not None}
        )

    def _resolve(self, args: argparse.Namespace) -> int:
        """Load a URL and print the outcome as JSON."""
        logger = logging.getLogger(__name__)

        if classify(args.url) is None:
            logger.error(f"Not a Deezer track, album or playlist URL: {args.url}")
            return 1

        plugin = DeezerPlugin(self._build_config(args))
        host = StandaloneHost()
        plugin.load(host)

        outcome = host.search(args.url)
        print(json.dumps(outcome.to_json(), indent=2, ensure_ascii=False))
        return 0 if outcome.load_type in LOADED_TYPES else 1

    def _classify(self, args: argparse.Namespace) -> int:
        reference = classify(args.url)
        if reference is None:
            print("not a Deezer URL")
            return 1
        print(f"{reference.kind.value} {reference.id}")
        return 0

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Run the CLI and return the process exit code."""
        args = self.parser.parse_args(argv)

        if not args.command:
            self.parser.print_help()
            return 1

        if args.command == 'classify':
            return self._classify(args)

        setup_logging(args.log_level)
        try:
            return self._resolve(args)
        except ConfigurationError as e:
            logging.getLogger(__name__).error(f"Configuration error: {e}")
            return 2
        except KeyboardInterrupt:
            logging.getLogger(__name__).warning("Operation cancelled by user")
            return 130


def main():
    """Main entry point."""
    load_dotenv()
    cli = CLI()
    sys.exit(cli.run())


if __name__ == '__main__':
    main()

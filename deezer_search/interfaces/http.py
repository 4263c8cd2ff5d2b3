import os
import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, request, jsonify

from deezer_search.crosscutting.config import PluginConfiguration
from deezer_search.crosscutting.logging import setup_logging
from deezer_search.domain.entities import LoadType
from deezer_search.interfaces.plugin import DeezerPlugin, StandaloneHost


class HTTPServer:
    """HTTP server exposing Deezer URL lookups and a health check."""

    def __init__(self, host: str = 'localhost', port: int = 3000, debug: bool = False,
                 plugin: Optional[DeezerPlugin] = None):
        """Initialize HTTP server.

        Args:
            host: Interface to bind
            port: Port to bind
            debug: Run Flask in debug mode
            plugin: Pre-built plugin; one configured from DEEZER_* variables by default
        """
        self.host = host
        self.port = port
        self.debug = debug
        self.app = Flask(__name__)
        self.logger = logging.getLogger(__name__)

        self.version = "0.1.0"
        self.commit = os.getenv('GIT_COMMIT', 'unknown')

        if plugin is None:
            # No playback source behind this server, so eager resolution stays off
            config = replace(PluginConfiguration.from_env(), eager_resolve=False)
            plugin = DeezerPlugin(config)
        self.plugin = plugin
        self.host_manager = StandaloneHost()
        self.plugin.load(self.host_manager)

        self._setup_routes()

    def _setup_routes(self) -> None:
        """Setup Flask routes."""

        @self.app.route('/health', methods=['GET'])
        def health_check():
            """Health check endpoint."""
            return jsonify({
                'status': 'healthy',
                'version': self.version,
                'commit': self.commit,
                'config': self.plugin.config.to_json(),
                'timestamp': datetime.now().isoformat()
            }), 200

        @self.app.route('/search', methods=['GET'])
        def search():
            """Resolve a Deezer URL passed as ?q=..."""
            query = request.args.get('q', '').strip()
            if not query:
                return jsonify({'error': 'Missing query parameter q'}), 400

            outcome = self.host_manager.search(query, request.args.get('requester'))
            status = 502 if outcome.load_type is LoadType.LOAD_FAILED else 200
            self.logger.info(f"Search answered with {outcome.load_type.value} ({len(outcome.tracks)} tracks)")
            return jsonify(outcome.to_json()), status

    def run(self) -> None:
        """Run the HTTP server."""
        self.logger.info(f"Starting deezer-search HTTP server on {self.host}:{self.port}")
        self.app.run(
            host=self.host,
            port=self.port,
            debug=self.debug
        )


def create_app(plugin: Optional[DeezerPlugin] = None) -> Flask:
    """Create Flask app, e.g. for a WSGI server or tests.

    A given plugin must not be loaded yet; the server installs it into its own host.
    """
    server = HTTPServer(plugin=plugin)
    return server.app


def main():
    """Run the HTTP server configured from the environment."""
    load_dotenv()
    setup_logging(os.getenv('LOG_LEVEL', 'INFO'))
    server = HTTPServer(
        host=os.getenv('HTTP_HOST', 'localhost'),
        port=int(os.getenv('HTTP_PORT', '3000')),
        debug=os.getenv('FLASK_DEBUG', '').lower() in ('1', 'true'),
    )
    server.run()


if __name__ == '__main__':
    main()

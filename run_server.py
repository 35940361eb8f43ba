#!/usr/bin/env python3
"""
PR Review Bot Server

Runs the GitHub webhook server of the PR Review Bot.
"""

import logging
import sys
from pathlib import Path

# Add src directory to Python path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from pr_review_bot.config import ConfigurationError, get_config
from pr_review_bot.webhook import create_app


logger = logging.getLogger(__name__)


def main() -> int:
    try:
        config = get_config()
        app = create_app(config)
    except (ConfigurationError, FileNotFoundError) as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(f"Cannot start server: {e}")
        return 1

    print("🚀 Starting PR Review Bot...")
    print(f"📍 Server will be available at: http://{config.server.host}:{config.server.port}")
    print("📋 Endpoints:")
    print("   - Webhook: POST /webhook/github")
    print("   - Health Check: GET /webhook/health")
    print("   - Detailed Health: GET /webhook/health/details")

    app.run(
        host=config.server.host,
        port=config.server.port,
        debug=config.debug,
        use_reloader=False
    )
    return 0


if __name__ == '__main__':
    sys.exit(main())

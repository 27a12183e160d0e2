#!/usr/bin/env python3
"""
Simple runner script for the Flask application.
This script ensures the correct Python path is set, configures logging and
runs the app.
"""

import sys
import logging
from pathlib import Path

# Add the current directory to Python path
current_dir = Path(__file__).parent
sys.path.insert(0, str(current_dir))

from config_manager import get_app_config
from generation_service.logging_config import setup_logging, stop_logging


def main() -> None:
    app_config = get_app_config()
    setup_logging(debug=app_config.debug)
    log = logging.getLogger("run_app")

    # Import after logging is configured so startup messages are captured
    from app.main import app

    log.info(f"Starting quota gate on {app_config.host}:{app_config.port}")
    try:
        app.run(
            host=app_config.host,
            port=app_config.port,
            debug=app_config.debug
        )
    finally:
        stop_logging()


if __name__ == "__main__":
    main()

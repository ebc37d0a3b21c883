"""
Server Entry Point for the Finance Tracker

Starts the HTTP JSON API (and the static front end, if present).

Usage:
    python app/main.py
    uvicorn app.main:app --port 8080

Configuration comes from environment variables / .env
(see finance_tracker.config.settings):
    FINANCE_STORAGE_DATA_FILE   path of the JSON document
    FINANCE_SERVER_HOST         interface to bind
    FINANCE_SERVER_PORT         port to listen on
    FINANCE_SERVER_STATIC_DIR   front end directory
    LOG_LEVEL                   root log level
"""

import sys

import uvicorn

from finance_tracker.api import create_app
from finance_tracker.config import get_settings, validate_all_settings


app = create_app()


def main():
    """Main application entry point."""
    results = validate_all_settings()
    failed = [name for name, ok in results.items() if ok is False]
    if failed:
        for name in failed:
            print(f"Invalid {name} settings: {results.get(name + '_error')}", file=sys.stderr)
        sys.exit(1)

    server = get_settings().server
    print(f"Server listening on {server.host}:{server.port}")
    uvicorn.run(app, host=server.host, port=server.port)


if __name__ == "__main__":
    main()

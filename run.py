#!/usr/bin/env python3
"""
Pothole Detector - Main Entry Point

Run this script to start the detection API.

Usage:
    python run.py [--host HOST] [--port PORT] [--debug]

Example:
    python run.py --host 0.0.0.0 --port 5000 --debug
"""

import argparse
import logging
from app import create_app

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description='Pothole Detector API')
    parser.add_argument('--host', default='0.0.0.0', help='Host to bind to (default: 0.0.0.0)')
    parser.add_argument('--port', type=int, default=5000, help='Port to bind to (default: 5000)')
    parser.add_argument('--debug', action='store_true', help='Enable debug mode')
    args = parser.parse_args()

    app = create_app()

    logger.info(f"Pothole detector API starting at http://{args.host}:{args.port}/api")

    app.run(host=args.host, port=args.port, debug=args.debug)


if __name__ == '__main__':
    main()

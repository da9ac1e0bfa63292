#!/usr/bin/env python3
"""
OpenAPI Mocker - Mock HTTP server for OpenAPI 3 contracts

This is a convenience wrapper that calls the packaged CLI.
The actual implementation is in src/openapi_mocker/cli.py

Usage:
    python openapi-mocker.py serve petstore.yaml --port 8080

For more information: python openapi-mocker.py --help
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent / 'src'))

from openapi_mocker.cli import main

if __name__ == '__main__':
    main()

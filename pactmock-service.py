#!/usr/bin/env python3
"""
PactMock Service CLI

Run a mock provider straight from a source checkout.

Examples:
    # Start mock service
    python3 pactmock-service.py serve --name "Animal Service" --port 1234

    # Verify at the end of a test run
    python3 pactmock-service.py verify --url http://localhost:1234
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent / 'src'))

from pactmock.cli import main


if __name__ == '__main__':
    main()

#!/usr/bin/env python3
"""tunebridge - Main entry point.

Runs the command line without installing the package.
"""

import sys
from pathlib import Path

# Add src directory to Python path BEFORE imports
sys.path.insert(0, str(Path(__file__).parent / "src"))

from tunebridge.app.runner import main

if __name__ == "__main__":
    main()

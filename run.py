"""Startup script for the agenda reminder scheduler.

This script ensures proper Python path configuration.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from agenda_ccb.main import main

if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Online Banking System Entry Point

Starts the interactive banking shell on the terminal.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from online_banking.shell import main


if __name__ == "__main__":
    main()

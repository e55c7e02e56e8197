#!/usr/bin/env python3
"""
Eternal Quest

Track goals, earn points and level up from the console.
"""

import sys
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent / 'src'
sys.path.insert(0, str(src_path))

from cli import main

if __name__ == '__main__':
    sys.exit(main())

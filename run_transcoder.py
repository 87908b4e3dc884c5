#!/usr/bin/env python3
"""
Entry point script for the foveated panorama transcoder.

Usage:
    python run_transcoder.py [--image PATH] [--azimuth A] [--elevation E] [--headless ...]

Examples:
    python run_transcoder.py
    python run_transcoder.py --image pano.jpg
    python run_transcoder.py --image pano.jpg --headless -a 350 -e 80 -o out.png --save-optimized out.npz
"""

import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from Foveation.application import main

if __name__ == '__main__':
    sys.exit(main())

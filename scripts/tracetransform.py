#!/usr/bin/env python3
"""
Tracetransform CLI - development entry point.

Thin router for running from a source checkout; all logic lives in
tracetransform.cli.
"""

import sys
from pathlib import Path

# Add src to path for development
src_path = Path(__file__).parent.parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from tracetransform.cli.main import main


if __name__ == "__main__":
    sys.exit(main())

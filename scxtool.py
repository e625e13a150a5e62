#!/usr/bin/env python3
"""scxtool.py - run the scxforge CLI from a source checkout.

    python scxtool.py inspect scenario.scx
    python scxtool.py convert in.scx out.scx --to wk --remap
"""

import sys
from pathlib import Path

# Add scxforge src to path
_src_dir = Path(__file__).parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from scxforge.cli import main

if __name__ == "__main__":
    sys.exit(main())

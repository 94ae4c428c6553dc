#!/usr/bin/env python3
"""Spatial units pipeline runner.

Usage:
    python scripts/run_units_pipeline.py scripts/user_config.py
    python scripts/run_units_pipeline.py scripts/user_config.py --provider mypkg.units:REGISTRY
    python scripts/run_units_pipeline.py scripts/user_config.py --mode parallel -v

Note: User config in scripts/user_config.py, expert config in src/spatialunits/schemas/param.py
"""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from spatialunits.cli.run_units import main


if __name__ == "__main__":
    sys.exit(main())

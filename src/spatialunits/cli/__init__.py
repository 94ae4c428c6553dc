"""Command-line interface for pipeline execution.

This package contains the execution logic, making scripts/ optional.
"""

from spatialunits.cli.run_units import main, run_units_pipeline

__all__ = ['main', 'run_units_pipeline']

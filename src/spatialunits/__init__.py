"""`spatialunits` - Building, block and RSU construction for territory analysis.

Subpackages:
- processes: Process declarations, outcomes and the registry of implementations
- pipeline: Parameter binder, step graph, orchestrator, run tracking
- schemas: Configuration models
- contracts: Fail-fast checks at step boundaries
"""

__version__ = "0.1.0"

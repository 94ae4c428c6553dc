"""Pydantic configuration schemas for the units-of-analysis pipeline.

All configuration validation, coercion and normalization happens at schema
validation time via Pydantic.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
PipelineInputs : class
    External inputs of one run
"""

from spatialunits.schemas.resolve import resolve_config
from spatialunits.schemas.internal import InternalConfig
from spatialunits.schemas.param import ParamConfig
from spatialunits.schemas.user import UserConfig
from spatialunits.schemas.cli import CLIConfig
from spatialunits.schemas.inputs import PipelineInputs

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
    'PipelineInputs',
]

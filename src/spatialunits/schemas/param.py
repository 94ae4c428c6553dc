"""ParamConfig: Expert defaults for the units-of-analysis pipeline.

This module defines the complete default configuration. ALL pipeline
parameters have a default here; runtime code never defines fallback values.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from spatialunits.constants import BLOCK_DISTANCE, SURFACE_HYDRO, SURFACE_VEGETATION
from spatialunits.schemas.base import SpatialUnitsBaseModel


# =============================================================================
# Nested Configuration Models
# =============================================================================

class TablesConfig(SpatialUnitsBaseModel):
    """Names of the input layers in the datastore."""
    zone_table: Optional[str] = None
    building_table: Optional[str] = None
    road_table: Optional[str] = None
    rail_table: Optional[str] = None
    vegetation_table: Optional[str] = None
    hydrographic_table: Optional[str] = None


class ThresholdsConfig(SpatialUnitsBaseModel):
    """Area and distance thresholds."""
    surface_vegetation: float = Field(SURFACE_VEGETATION, gt=0, description="Minimum vegetation area in m²")
    surface_hydro: float = Field(SURFACE_HYDRO, gt=0, description="Minimum water area in m²")
    distance: float = Field(BLOCK_DISTANCE, ge=0, description="Block grouping distance in m")

    @field_validator("surface_vegetation", "surface_hydro", "distance", mode="before")
    @classmethod
    def coerce_to_float(cls, v):
        """Allow int or float. None is left for the float check to reject."""
        if v is not None:
            return float(v)
        return v


class DatastoreConfig(SpatialUnitsBaseModel):
    """SQLite datastore location."""
    path: str = ":memory:"


class ExecutionConfig(SpatialUnitsBaseModel):
    """Step scheduling settings."""
    mode: Literal["sequential", "parallel"] = "sequential"
    max_workers: int = Field(2, ge=1)
    check_contracts: bool = True
    track_runs: bool = True

    @field_validator("mode", mode="before")
    @classmethod
    def normalize_mode(cls, v):
        if isinstance(v, str):
            return v.lower().strip()
        return v


class LoggingConfig(SpatialUnitsBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(SpatialUnitsBaseModel):
    """Complete expert configuration with all defaults.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    prefix_name: str = ""
    base_dir: Optional[str] = None
    process_provider: Optional[str] = None
    tables: TablesConfig = Field(default_factory=TablesConfig)
    thresholds: ThresholdsConfig = Field(default_factory=ThresholdsConfig)
    datastore: DatastoreConfig = Field(default_factory=DatastoreConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

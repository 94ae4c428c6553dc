"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized and frozen. Fallback defaults are FORBIDDEN in runtime code.
"""

from typing import Any, Literal, Optional
from pydantic import ConfigDict, Field
from spatialunits.schemas.base import SpatialUnitsBaseModel
from spatialunits.schemas.inputs import PipelineInputs


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalTablesConfig(SpatialUnitsBaseModel):
    """Runtime input layer names.

    Names may still be None here; the step needing a missing layer reports
    it as a binding failure.
    """
    zone_table: Optional[str]
    building_table: Optional[str]
    road_table: Optional[str]
    rail_table: Optional[str]
    vegetation_table: Optional[str]
    hydrographic_table: Optional[str]


class InternalThresholdsConfig(SpatialUnitsBaseModel):
    """Runtime thresholds."""
    surface_vegetation: float = Field(gt=0)
    surface_hydro: float = Field(gt=0)
    distance: float = Field(ge=0)


class InternalDatastoreConfig(SpatialUnitsBaseModel):
    """Runtime datastore location."""
    path: str


class InternalExecutionConfig(SpatialUnitsBaseModel):
    """Runtime scheduling settings."""
    mode: Literal["sequential", "parallel"]
    max_workers: int = Field(ge=1)
    check_contracts: bool
    track_runs: bool


class InternalLoggingConfig(SpatialUnitsBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(SpatialUnitsBaseModel):
    """Fully validated, immutable runtime configuration.

    Created only by resolve_config().
    """

    prefix_name: str
    base_dir: Optional[str]
    process_provider: Optional[str]
    tables: InternalTablesConfig
    thresholds: InternalThresholdsConfig
    datastore: InternalDatastoreConfig
    execution: InternalExecutionConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        frozen=True,
        use_enum_values=True,
        str_strip_whitespace=True,
    )

    def pipeline_inputs(self, datasource: Any) -> PipelineInputs:
        """Build the external inputs of a run on ``datasource``."""
        return PipelineInputs(
            datasource=datasource,
            prefix_name=self.prefix_name,
            **self.tables.model_dump(),
            **self.thresholds.model_dump(),
        )

"""PipelineInputs: external inputs of one units-of-analysis run."""

from typing import Any, Dict, Optional
from pydantic import Field, field_validator
from spatialunits.constants import BLOCK_DISTANCE, SURFACE_HYDRO, SURFACE_VEGETATION
from spatialunits.schemas.base import FrozenModel


class PipelineInputs(FrozenModel):
    """Top-level inputs of the pipeline.

    Table names left as None are reported as missing bindings by the step
    that needs them, so a run without a building table fails at
    ``create_blocks`` and not before.

    Attributes
    ----------
    datasource : Any
        Datastore handle passed by reference to every step.
    zone_table, building_table, road_table, rail_table, vegetation_table, hydrographic_table : str
        Input layer table names.
    surface_vegetation : float
        Minimum vegetation area in m² (default 100,000).
    surface_hydro : float
        Minimum water area in m² (default 2,500).
    distance : float
        Block grouping distance in m (default 0.01).
    prefix_name : str
        Prefix of every output table name.
    """

    datasource: Any = None
    zone_table: Optional[str] = None
    building_table: Optional[str] = None
    road_table: Optional[str] = None
    rail_table: Optional[str] = None
    vegetation_table: Optional[str] = None
    hydrographic_table: Optional[str] = None
    surface_vegetation: float = Field(SURFACE_VEGETATION, gt=0)
    surface_hydro: float = Field(SURFACE_HYDRO, gt=0)
    distance: float = Field(BLOCK_DISTANCE, ge=0)
    prefix_name: str = ""

    @field_validator("surface_vegetation", "surface_hydro", "distance", mode="before")
    @classmethod
    def coerce_to_float(cls, v):
        if v is not None:
            return float(v)
        return v

    def as_mapping(self) -> Dict[str, Any]:
        """Inputs as a name to value mapping, without unset entries."""
        return {
            name: getattr(self, name)
            for name in type(self).model_fields
            if getattr(self, name) is not None
        }

"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs with aliases for the upper-case names used
in config files (ZONE_TABLE -> zone_table, PREFIX_NAME -> prefix_name).

Users only specify what they want to override from the expert defaults.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from spatialunits.schemas.base import SpatialUnitsBaseModel


class UserConfig(SpatialUnitsBaseModel):
    """User-facing configuration schema.

    Usage
    -----
        user_cfg = UserConfig(
            prefix_name="p1",
            zone_table="ZONE",
            building_table="BUILDING",
            distance=0.01,
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Run settings
    prefix_name: Optional[str] = Field(None, alias="PREFIX_NAME")
    base_dir: Optional[str] = Field(None, alias="BASE_DIR")
    datastore: Optional[str] = Field(None, alias="DATASTORE")
    process_provider: Optional[str] = Field(None, alias="PROCESS_PROVIDER")

    # Input layers
    zone_table: Optional[str] = Field(None, alias="ZONE_TABLE")
    building_table: Optional[str] = Field(None, alias="BUILDING_TABLE")
    road_table: Optional[str] = Field(None, alias="ROAD_TABLE")
    rail_table: Optional[str] = Field(None, alias="RAIL_TABLE")
    vegetation_table: Optional[str] = Field(None, alias="VEGETATION_TABLE")
    hydrographic_table: Optional[str] = Field(None, alias="HYDROGRAPHIC_TABLE")

    # Thresholds
    surface_vegetation: Optional[float] = Field(None, alias="SURFACE_VEGETATION")
    surface_hydro: Optional[float] = Field(None, alias="SURFACE_HYDRO")
    distance: Optional[float] = Field(None, alias="DISTANCE")

    # Execution
    mode: Optional[Literal["sequential", "parallel"]] = Field(None, alias="MODE")
    check_contracts: Optional[bool] = Field(None, alias="CHECK_CONTRACTS")
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(None, alias="LOG_LEVEL")

    model_config = SpatialUnitsBaseModel.model_config.copy()
    model_config.update({"populate_by_name": True})

    @field_validator("surface_vegetation", "surface_hydro", "distance", mode="before")
    @classmethod
    def coerce_float(cls, v):
        """Accept int or float for thresholds."""
        if v is not None:
            return float(v)
        return v

    @field_validator("mode", mode="before")
    @classmethod
    def normalize_mode(cls, v):
        if isinstance(v, str):
            return v.lower().strip()
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert user config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        for key in ("prefix_name", "base_dir", "process_provider"):
            value = getattr(self, key)
            if value is not None:
                overrides[key] = value

        if self.datastore is not None:
            overrides["datastore"] = {"path": self.datastore}

        tables = {
            key: getattr(self, key)
            for key in (
                "zone_table", "building_table", "road_table",
                "rail_table", "vegetation_table", "hydrographic_table",
            )
            if getattr(self, key) is not None
        }
        if tables:
            overrides["tables"] = tables

        thresholds = {
            key: getattr(self, key)
            for key in ("surface_vegetation", "surface_hydro", "distance")
            if getattr(self, key) is not None
        }
        if thresholds:
            overrides["thresholds"] = thresholds

        execution = {}
        if self.mode is not None:
            execution["mode"] = self.mode
        if self.check_contracts is not None:
            execution["check_contracts"] = self.check_contracts
        if execution:
            overrides["execution"] = execution

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides

"""CLIConfig: Command-line operational overrides.

Minimal configuration for settings that commonly change between runs:
prefix, output directory, datastore, scheduling mode, verbosity.
"""

from typing import Literal, Optional
from spatialunits.schemas.base import SpatialUnitsBaseModel


class CLIConfig(SpatialUnitsBaseModel):
    """Command-line configuration overrides.

    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(prefix_name="p2", mode="parallel")
        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    prefix_name: Optional[str] = None
    base_dir: Optional[str] = None
    datastore: Optional[str] = None
    process_provider: Optional[str] = None
    mode: Optional[Literal["sequential", "parallel"]] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure."""
        overrides = {}

        if self.prefix_name is not None:
            overrides["prefix_name"] = self.prefix_name
        if self.base_dir is not None:
            overrides["base_dir"] = str(self.base_dir)
        if self.process_provider is not None:
            overrides["process_provider"] = self.process_provider
        if self.datastore is not None:
            overrides["datastore"] = {"path": self.datastore}
        if self.mode is not None:
            overrides["execution"] = {"mode": self.mode}
        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides

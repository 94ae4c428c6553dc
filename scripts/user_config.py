"""Spatial units user configuration.

This is the user-facing configuration file. Modify settings here to customize
the run. Expert defaults live in src/spatialunits/schemas/param.py.

Usage:
    python scripts/run_units_pipeline.py scripts/user_config.py
    python scripts/run_units_pipeline.py scripts/user_config.py --prefix p2
    python scripts/run_units_pipeline.py scripts/user_config.py --mode parallel
"""

CONFIG = {
    # ========================================================================
    # RUN SETTINGS
    # ========================================================================
    "PREFIX_NAME": "p1",            # Prefix of every output table ("" for none)
    "BASE_DIR": "./output",         # Logs, run database and relative datastores
    "DATASTORE": "units.sqlite",    # SQLite file, relative to BASE_DIR/data
    "PROCESS_PROVIDER": None,       # "package.module:attribute" of the processes

    # ========================================================================
    # INPUT LAYERS (table names in the datastore)
    # ========================================================================
    "ZONE_TABLE": "ZONE",
    "BUILDING_TABLE": "BUILDING",
    "ROAD_TABLE": "ROAD",
    "RAIL_TABLE": "RAIL",
    "VEGETATION_TABLE": "VEGETATION",
    "HYDROGRAPHIC_TABLE": "HYDRO",

    # ========================================================================
    # THRESHOLDS
    # ========================================================================
    "SURFACE_VEGETATION": 100000,   # m², smaller vegetation areas do not cut RSU
    "SURFACE_HYDRO": 2500,          # m², smaller water areas do not cut RSU
    "DISTANCE": 0.01,               # m, buildings closer than this form one block

    # ========================================================================
    # EXECUTION
    # ========================================================================
    "MODE": "sequential",           # "sequential" or "parallel"
    "CHECK_CONTRACTS": True,        # Verify step outputs and final tables
    "LOG_LEVEL": "INFO",
}

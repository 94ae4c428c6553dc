"""Default thresholds of the units-of-analysis chain.

Areas are in m², distances in m.
"""

# Minimum vegetation area considered when delineating the RSU
SURFACE_VEGETATION = 100000.0

# Minimum water area considered when delineating the RSU
SURFACE_HYDRO = 2500.0

# Distance under which two buildings belong to the same block
BLOCK_DISTANCE = 0.01

# Base names of the tables created by each process, prefixed per run
RSU_DATA_BASE_NAME = "prepared_rsu_data"
RSU_BASE_NAME = "rsu"
BLOCK_BASE_NAME = "block"

# Unique identifier columns of the spatial unit tables
ID_RSU = "id_rsu"
ID_BLOCK = "id_block"
ID_BUILDING = "id_build"

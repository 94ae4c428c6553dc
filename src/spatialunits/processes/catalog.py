"""Declared schemas of the spatial unit processes.

These are the four processes the units-of-analysis chain composes. Their
implementations are supplied by the caller through a ProcessRegistry.
"""

from spatialunits.constants import BLOCK_DISTANCE, SURFACE_HYDRO, SURFACE_VEGETATION
from spatialunits.processes.spec import ProcessSpec, param

PREPARE_RSU_DATA = ProcessSpec(
    name="prepare_rsu_data",
    title="Prepare the layers used to delineate the RSU",
    inputs=[
        param("datasource"),
        param("zone_table", str),
        param("road_table", str),
        param("rail_table", str),
        param("vegetation_table", str),
        param("hydrographic_table", str),
        param("surface_vegetation", float, default=SURFACE_VEGETATION),
        param("surface_hydro", float, default=SURFACE_HYDRO),
        param("prefix_name", str),
    ],
    outputs=[param("output_table_name", str)],
)

CREATE_RSU = ProcessSpec(
    name="create_rsu",
    title="Create the reference spatial units",
    inputs=[
        param("datasource"),
        param("input_table_name", str),
        param("prefix_name", str),
    ],
    outputs=[
        param("output_table_name", str),
        param("output_id_rsu", str),
    ],
)

CREATE_BLOCKS = ProcessSpec(
    name="create_blocks",
    title="Create the blocks from the buildings in contact",
    inputs=[
        param("datasource"),
        param("input_table_name", str),
        param("prefix_name", str),
        param("distance", float, default=BLOCK_DISTANCE),
    ],
    outputs=[
        param("output_table_name", str),
        param("output_id_block", str),
    ],
)

CREATE_SCALES_RELATIONS = ProcessSpec(
    name="create_scales_relations",
    title="Store the id of the upper scale unit in the lower scale table",
    inputs=[
        param("datasource"),
        param("input_lower_scale_table_name", str),
        param("input_upper_scale_table_name", str),
        param("id_column_up", str),
        param("prefix_name", str),
    ],
    outputs=[param("output_table_name", str)],
)

CREATE_UNITS_OF_ANALYSIS = ProcessSpec(
    name="create_units_of_analysis",
    title="Create all new spatial units and their relations: building, block and RSU",
    inputs=[
        param("datasource"),
        param("zone_table", str),
        param("building_table", str),
        param("road_table", str),
        param("rail_table", str),
        param("vegetation_table", str),
        param("hydrographic_table", str),
        param("surface_vegetation", float, default=SURFACE_VEGETATION),
        param("surface_hydro", float, default=SURFACE_HYDRO),
        param("distance", float, default=BLOCK_DISTANCE),
        param("prefix_name", str),
    ],
    outputs=[
        param("building_table", str),
        param("block_table", str),
        param("rsu_table", str),
    ],
)

CATALOG = {
    spec.name: spec
    for spec in (PREPARE_RSU_DATA, CREATE_RSU, CREATE_BLOCKS, CREATE_SCALES_RELATIONS)
}

"""Contracts on step results and spatial unit tables.

assert_step_outputs runs after every successful step. The table checks need
a DataSource and run once a whole run has completed.
"""

from typing import Any, Mapping

from spatialunits.contracts.base import require
from spatialunits.processes.spec import ProcessSpec


def assert_step_outputs(spec: ProcessSpec, outputs: Mapping[str, Any], step: str) -> None:
    """Verify a success record carries every output its process declares.

    Raises
    ------
    ContractViolation
        If a declared output is missing, None, or an empty string.
    """
    for output in spec.outputs:
        require(
            output.name in outputs,
            f"Output contract: '{spec.name}' did not produce '{output.name}'",
            step,
        )
        value = outputs[output.name]
        require(
            value is not None and value != "",
            f"Output contract: '{output.name}' of '{spec.name}' is empty",
            step,
        )


def assert_unit_table(datasource, table: str, id_column: str) -> None:
    """Verify a spatial unit table exists and carries its id column.

    Raises
    ------
    ContractViolation
        If the table or the column is missing, or the ids are not unique.
    """
    require(datasource.table_exists(table), f"Unit contract: table '{table}' not found")
    columns = datasource.column_names(table)
    require(id_column in columns, f"Unit contract: '{table}' missing '{id_column}' column")
    ids = datasource.read_table(table)[id_column]
    require(ids.is_unique, f"Unit contract: '{id_column}' values in '{table}' are not unique")


def assert_scales_relation(datasource, lower_table: str, upper_table: str, id_column: str) -> None:
    """Verify every upper-scale id stored in ``lower_table`` exists in ``upper_table``.

    Null ids are allowed: a lower unit outside every upper unit has none.

    Raises
    ------
    ContractViolation
        If the relation column is missing or references unknown ids.
    """
    require(
        id_column in datasource.column_names(lower_table),
        f"Relation contract: '{lower_table}' missing '{id_column}' column",
    )
    lower_ids = datasource.read_table(lower_table)[id_column].dropna()
    upper_ids = datasource.read_table(upper_table)[id_column]
    unknown = lower_ids[~lower_ids.isin(upper_ids)]
    require(
        unknown.empty,
        f"Relation contract: {len(unknown)} '{id_column}' values of '{lower_table}' "
        f"not found in '{upper_table}'",
    )


def assert_units_of_analysis(datasource, building_table: str, block_table: str, rsu_table: str,
                             id_rsu: str, id_block: str) -> None:
    """Verify the three final tables and the relations stored in them.

    The RSU id of a building is checked against the RSU table only, never
    against the RSU id of its block: the two relations are computed
    independently and may differ.
    """
    assert_unit_table(datasource, rsu_table, id_rsu)
    assert_unit_table(datasource, block_table, id_block)
    assert_scales_relation(datasource, block_table, rsu_table, id_rsu)
    assert_scales_relation(datasource, building_table, block_table, id_block)
    assert_scales_relation(datasource, building_table, rsu_table, id_rsu)

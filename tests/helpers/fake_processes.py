"""One-dimensional stand-ins for the geoprocessing collaborators.

Every feature lives on a line: cutting features (roads, rail, vegetation,
water) are positions ``x``, buildings and units are intervals
``[x_min, x_max]``. A lower unit belongs to the upper unit containing its
centre. This keeps the relations between tables meaningful without any
geometry library.
"""

from spatialunits.constants import (
    BLOCK_BASE_NAME,
    ID_BLOCK,
    ID_BUILDING,
    ID_RSU,
    RSU_BASE_NAME,
    RSU_DATA_BASE_NAME,
)
from spatialunits.datasource import output_table_name
from spatialunits.processes import (
    CREATE_BLOCKS,
    CREATE_RSU,
    CREATE_SCALES_RELATIONS,
    PREPARE_RSU_DATA,
    Process,
    ProcessRegistry,
)


class FakeProcess(Process):
    """Records each call in a shared journal; can be told to fail.

    Parameters
    ----------
    journal : list
        Shared list receiving the process name at each call.
    fail : bool
        Return None instead of a result.
    fail_calls : iterable of int
        1-based call numbers that return None.
    error : Exception, optional
        Raise this instead of running.
    """

    def __init__(self, journal=None, fail=False, error=None, fail_calls=()):
        self.journal = journal if journal is not None else []
        self.fail = fail
        self.error = error
        self.fail_calls = set(fail_calls)
        self.calls = []

    def _execute(self, **arguments):
        self.calls.append(arguments)
        self.journal.append(self.name)
        if self.error is not None:
            raise self.error
        if self.fail or len(self.calls) in self.fail_calls:
            return None
        return self.compute(**arguments)

    def compute(self, **arguments):
        raise NotImplementedError


class FakePrepareRsuData(FakeProcess):
    spec = PREPARE_RSU_DATA

    def compute(self, datasource, zone_table, road_table, rail_table, vegetation_table,
                hydrographic_table, surface_vegetation, surface_hydro, prefix_name):
        out = output_table_name(prefix_name, RSU_DATA_BASE_NAME)
        datasource.executescript(f"""
            DROP TABLE IF EXISTS "{out}";
            CREATE TABLE "{out}" AS
            SELECT x FROM (
                SELECT x_min AS x FROM "{zone_table}"
                UNION SELECT x_max FROM "{zone_table}"
                UNION SELECT x FROM "{road_table}"
                UNION SELECT x FROM "{rail_table}"
                UNION SELECT x FROM "{vegetation_table}" WHERE area >= {surface_vegetation}
                UNION SELECT x FROM "{hydrographic_table}" WHERE area >= {surface_hydro}
            )
            WHERE x >= (SELECT MIN(x_min) FROM "{zone_table}")
              AND x <= (SELECT MAX(x_max) FROM "{zone_table}");
        """)
        return {"output_table_name": out}


class FakeCreateRsu(FakeProcess):
    spec = CREATE_RSU

    def compute(self, datasource, input_table_name, prefix_name):
        cuts = [row["x"] for row in datasource.query(
            f'SELECT DISTINCT x FROM "{input_table_name}" ORDER BY x')]
        if len(cuts) < 2:
            return None
        out = output_table_name(prefix_name, RSU_BASE_NAME)
        datasource.drop_tables(out)
        datasource.execute(f'CREATE TABLE "{out}" ({ID_RSU} INTEGER PRIMARY KEY, x_min REAL, x_max REAL)')
        for i, (lo, hi) in enumerate(zip(cuts, cuts[1:]), start=1):
            datasource.execute(f'INSERT INTO "{out}" VALUES (?, ?, ?)', (i, lo, hi))
        return {"output_table_name": out, "output_id_rsu": ID_RSU}


class FakeCreateBlocks(FakeProcess):
    spec = CREATE_BLOCKS

    def compute(self, datasource, input_table_name, prefix_name, distance):
        rows = datasource.query(
            f'SELECT x_min, x_max FROM "{input_table_name}" ORDER BY x_min')
        groups = []
        for row in rows:
            if groups and row["x_min"] - groups[-1][1] <= distance:
                groups[-1][1] = max(groups[-1][1], row["x_max"])
            else:
                groups.append([row["x_min"], row["x_max"]])
        out = output_table_name(prefix_name, BLOCK_BASE_NAME)
        datasource.drop_tables(out)
        datasource.execute(f'CREATE TABLE "{out}" ({ID_BLOCK} INTEGER PRIMARY KEY, x_min REAL, x_max REAL)')
        for i, (lo, hi) in enumerate(groups, start=1):
            datasource.execute(f'INSERT INTO "{out}" VALUES (?, ?, ?)', (i, lo, hi))
        return {"output_table_name": out, "output_id_block": ID_BLOCK}


class FakeCreateScalesRelations(FakeProcess):
    spec = CREATE_SCALES_RELATIONS

    def compute(self, datasource, input_lower_scale_table_name, input_upper_scale_table_name,
                id_column_up, prefix_name):
        base = input_lower_scale_table_name
        if prefix_name and base.startswith(f"{prefix_name}_"):
            base = base[len(prefix_name) + 1:]
        out = output_table_name(prefix_name, f"{base}_{id_column_up}")
        datasource.executescript(f"""
            DROP TABLE IF EXISTS "{out}";
            CREATE TABLE "{out}" AS
            SELECT lo.*, (
                SELECT up.{id_column_up} FROM "{input_upper_scale_table_name}" AS up
                WHERE (lo.x_min + lo.x_max) / 2.0 >= up.x_min
                  AND (lo.x_min + lo.x_max) / 2.0 < up.x_max
                ORDER BY up.{id_column_up} LIMIT 1
            ) AS {id_column_up}
            FROM "{input_lower_scale_table_name}" AS lo;
        """)
        return {"output_table_name": out}


FAKE_PROCESSES = {
    "prepare_rsu_data": FakePrepareRsuData,
    "create_rsu": FakeCreateRsu,
    "create_blocks": FakeCreateBlocks,
    "create_scales_relations": FakeCreateScalesRelations,
}


def make_registry(journal=None, fail=(), errors=None, fail_calls=None):
    """Registry of fake processes sharing one journal.

    Parameters
    ----------
    journal : list, optional
        Receives the process name at each call.
    fail : iterable of str
        Process names that return failure.
    errors : dict, optional
        Process name to exception raised when called.
    fail_calls : dict, optional
        Process name to the call numbers that return failure.
    """
    journal = journal if journal is not None else []
    errors = errors or {}
    fail_calls = fail_calls or {}
    return ProcessRegistry(
        cls(journal, fail=name in fail, error=errors.get(name), fail_calls=fail_calls.get(name, ()))
        for name, cls in FAKE_PROCESSES.items()
    )


DEFAULT_TABLES = {
    "zone_table": "ZONE",
    "building_table": "BUILDING",
    "road_table": "ROAD",
    "rail_table": "RAIL",
    "vegetation_table": "VEGETATION",
    "hydrographic_table": "HYDRO",
}

DEFAULT_BUILDINGS = [
    (1, 2.0, 5.0), (2, 5.0, 8.0),        # block centred on 5, first RSU
    (3, 36.0, 39.0), (4, 39.0, 47.0),    # block straddling the road at 40
    (5, 70.0, 75.0),                     # isolated building, second RSU
]


def load_territory(datasource, buildings=DEFAULT_BUILDINGS, roads=(40.0,), rails=(),
                   vegetation=(), water=(), tables=None):
    """Create the input layers on ``datasource`` and return their names.

    Defaults: a zone from 0 to 100 cut by one road at 40, and buildings
    forming three blocks, one of which straddles the road.

    Returns
    -------
    dict
        Table names keyed like the pipeline inputs.
    """
    names = dict(DEFAULT_TABLES, **(tables or {}))
    zone, building, road, rail, vegetation_t, hydro = (
        names["zone_table"], names["building_table"], names["road_table"],
        names["rail_table"], names["vegetation_table"], names["hydrographic_table"],
    )
    datasource.drop_tables(*names.values())
    datasource.executescript(f"""
        CREATE TABLE "{zone}" (id_zone INTEGER PRIMARY KEY, x_min REAL, x_max REAL);
        CREATE TABLE "{building}" ({ID_BUILDING} INTEGER PRIMARY KEY, x_min REAL, x_max REAL);
        CREATE TABLE "{road}" (id_road INTEGER PRIMARY KEY, x REAL);
        CREATE TABLE "{rail}" (id_rail INTEGER PRIMARY KEY, x REAL);
        CREATE TABLE "{vegetation_t}" (id_veget INTEGER PRIMARY KEY, x REAL, area REAL);
        CREATE TABLE "{hydro}" (id_hydro INTEGER PRIMARY KEY, x REAL, area REAL);
        INSERT INTO "{zone}" VALUES (1, 0.0, 100.0);
    """)
    for row in buildings:
        datasource.execute(f'INSERT INTO "{building}" VALUES (?, ?, ?)', tuple(row))
    for i, x in enumerate(roads, start=1):
        datasource.execute(f'INSERT INTO "{road}" VALUES (?, ?)', (i, x))
    for i, x in enumerate(rails, start=1):
        datasource.execute(f'INSERT INTO "{rail}" VALUES (?, ?)', (i, x))
    for i, (x, area) in enumerate(vegetation, start=1):
        datasource.execute(f'INSERT INTO "{vegetation_t}" VALUES (?, ?, ?)', (i, x, area))
    for i, (x, area) in enumerate(water, start=1):
        datasource.execute(f'INSERT INTO "{hydro}" VALUES (?, ?, ?)', (i, x, area))
    return names

"""Units-of-analysis pipeline execution logic.

This module contains the actual pipeline runner, separated from argument
parsing. Scripts are thin wrappers; this is the real implementation.
"""

import sys
import json
import argparse
import logging
import importlib.util
from pathlib import Path
from typing import Optional, Dict, Any

from spatialunits.contracts import PipelineError, assert_units_of_analysis
from spatialunits.datasource import DataSource
from spatialunits.pipeline.orchestrator import PipelineOrchestrator, PipelineResult, RunContext
from spatialunits.pipeline.run_tracker import RunTracker
from spatialunits.processes.registry import ProcessRegistry, load_provider
from spatialunits.schemas import resolve_config, ParamConfig, UserConfig, CLIConfig, InternalConfig
from spatialunits.setup_directories import setup_output_directories, setup_logging


logger = logging.getLogger(__name__)


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing a CONFIG dict.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def datastore_path(config: InternalConfig, output_dirs: Dict[str, Path]) -> str:
    """Resolve the datastore path; relative paths live under the data directory."""
    path = config.datastore.path
    if path == ":memory:" or Path(path).is_absolute():
        return path
    return str(output_dirs["data"] / path)


def check_outputs(datasource: DataSource, result: PipelineResult) -> None:
    """Run the table contracts on the outputs of a successful run.

    Raises
    ------
    ContractViolation
        If a final table or one of its relations is inconsistent.
    """
    outputs = result.outputs
    assert_units_of_analysis(
        datasource,
        building_table=outputs.building_table,
        block_table=outputs.block_table,
        rsu_table=outputs.rsu_table,
        id_rsu=result.step_outputs["create_rsu.output_id_rsu"],
        id_block=result.step_outputs["create_blocks.output_id_block"],
    )
    logger.info("Output contracts satisfied")


def run_units_pipeline(
    user_config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    registry: Optional[ProcessRegistry] = None,
    verbose: bool = False,
) -> PipelineResult:
    """Execute the units-of-analysis pipeline.

    This function:
    1. Loads and resolves configuration (Param < User < CLI)
    2. Sets up output directories and logging
    3. Loads the process implementations
    4. Opens the datastore and runs the orchestrator
    5. Checks the output tables when contracts are enabled

    Parameters
    ----------
    user_config_path : str, optional
        Path to user config file (Python file with CONFIG dict).
    cli_args : dict, optional
        CLI overrides. Keys: prefix_name, base_dir, datastore,
        process_provider, mode, log_level. All optional.
    registry : ProcessRegistry, optional
        Process implementations. Loaded from ``process_provider`` if None.
    verbose : bool, optional
        If True, enable DEBUG logging and print the resolved config.

    Returns
    -------
    PipelineResult

    Raises
    ------
    FileNotFoundError
        If user_config_path does not exist.
    ValueError
        If no process implementations are available.
    ContractViolation
        If the output tables of a successful run are inconsistent.
    """
    param_cfg = ParamConfig()

    user_cfg = UserConfig()
    if user_config_path:
        user_cfg = UserConfig.model_validate(load_user_config_dict(user_config_path))

    cli_args = dict(cli_args or {})
    if verbose and "log_level" not in cli_args:
        cli_args["log_level"] = "DEBUG"
    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    config = resolve_config(param_cfg, user_cfg, cli_cfg)

    output_dirs = setup_output_directories(config.base_dir)
    setup_logging(config.logging.level, output_dirs["logs"] / f"units_{config.prefix_name or 'default'}.log")

    if verbose:
        print("\nFull Internal Configuration:")
        print(json.dumps(config.model_dump(), indent=2))

    if registry is None:
        if not config.process_provider:
            raise ValueError("No process implementations: set PROCESS_PROVIDER or pass a registry")
        registry = load_provider(config.process_provider)

    tracker = None
    if config.execution.track_runs:
        tracker = RunTracker(output_dirs["runs"] / "runs.db")

    orchestrator = PipelineOrchestrator.from_config(config, registry)
    context = RunContext(logger=logging.getLogger("spatialunits.run"), tracker=tracker)

    try:
        with DataSource(datastore_path(config, output_dirs)) as datasource:
            result = orchestrator.run(config.pipeline_inputs(datasource), context)
            if result.ok and config.execution.check_contracts:
                check_outputs(datasource, result)
    finally:
        if tracker is not None:
            tracker.close()

    return result


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create the building, block and RSU units of analysis")
    parser.add_argument("config", nargs="?", help="Path to user config file")
    parser.add_argument("--prefix", dest="prefix_name", help="Prefix of the output tables")
    parser.add_argument("--base-dir", help="Output directory")
    parser.add_argument("--datastore", help="SQLite datastore path")
    parser.add_argument("--provider", dest="process_provider", help="Process provider 'module:attribute'")
    parser.add_argument("--mode", choices=["sequential", "parallel"], help="Step scheduling mode")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    cli_args = {
        "prefix_name": args.prefix_name,
        "base_dir": args.base_dir,
        "datastore": args.datastore,
        "process_provider": args.process_provider,
        "mode": args.mode,
    }
    try:
        result = run_units_pipeline(args.config, cli_args, verbose=args.verbose)
    except PipelineError as exc:
        print(exc, file=sys.stderr)
        return 1

    if not result.ok:
        print(result.message, file=sys.stderr)
        return 1

    print(f"\n{'='*60}")
    print("Units of analysis")
    print('='*60)
    print(f"Buildings: {result.outputs.building_table}")
    print(f"Blocks:    {result.outputs.block_table}")
    print(f"RSU:       {result.outputs.rsu_table}")
    print('='*60)
    return 0

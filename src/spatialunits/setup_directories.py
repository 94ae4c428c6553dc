"""
Directory setup and logging for pipeline runs.

- base/logs: one log file per prefix
- base/runs: run tracker database
- base/data: default location of a file datastore
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def setup_output_directories(base_output_dir=None):
    """
    Set up the output directory structure.

    Parameters
    ----------
    base_output_dir : str or Path, optional
        Base output directory. Defaults to ``./output``.

    Returns
    -------
    dict
        Dictionary with paths: 'base', 'logs', 'runs', 'data'
    """
    if base_output_dir is None:
        base_output_dir = Path.cwd() / "output"

    base_output_dir = Path(base_output_dir).expanduser().resolve()

    directories = {
        "base": base_output_dir,
        "logs": base_output_dir / "logs",
        "runs": base_output_dir / "runs",
        "data": base_output_dir / "data",
    }

    for path in directories.values():
        path.mkdir(parents=True, exist_ok=True)

    return directories


def setup_logging(level="INFO", log_path=None):
    """Configure the root logger with console and optional file handlers.

    Existing root handlers are removed so repeated runs in one process do
    not duplicate output.

    Parameters
    ----------
    level : str
        "DEBUG", "INFO", "WARNING", "ERROR" or "CRITICAL".
    log_path : str or Path, optional
        Log file. Console only when None.
    """
    log_level = getattr(logging, str(level).upper(), logging.INFO)

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    if log_path is not None:
        log_path = Path(log_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    root.addHandler(ch)

    logger.info("Logging: level=%s, file=%s", logging.getLevelName(log_level), log_path)

"""
Sets up logging for applications that use this package.

The package itself only logs through `loguru`, and leaves the sinks alone.
Applications can call `config_logger` once on startup to get a console sink
and a rotating log file.
"""


import sys
from pathlib import Path
from typing import Optional

from confuse import ConfigView
from loguru import logger

from .config import config


def _log_dir(log_config: ConfigView) -> Path:
    """
    Args:
        log_config: The logging configuration.

    Returns:
        The directory to put log files in.

    """
    log_dir = log_config["log_dir"].as_str()
    if not log_dir:
        return Path(".")
    return Path(log_dir)


def config_logger(
    name: str,
    log_dir: Optional[Path] = None,
    log_config: Optional[ConfigView] = None,
) -> None:
    """
    Replaces the default `loguru` sink with a console sink and a log file.

    Args:
        name: The name to use for the log file.
        log_dir: The directory to write the log file to. If not provided, it
            will be read from the configuration.
        log_config: The logging configuration. Defaults to the `logging`
            section of the package configuration.

    """
    if log_config is None:
        log_config = config["logging"]
    if log_dir is None:
        log_dir = _log_dir(log_config)

    logger.remove()

    logger.add(sys.stderr, level=log_config["console_level"].as_str())
    logger.add(
        log_dir / f"{name}.log",
        level=log_config["file_level"].as_str(),
        enqueue=True,
        rotation="00:00",
        retention="30 days",
        compression="zip",
    )
    logger.debug("Logging to {}.", log_dir / f"{name}.log")

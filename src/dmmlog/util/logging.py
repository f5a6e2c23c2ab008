# -*- coding: utf-8 -*-
"""
Logging setup on top of loguru.

Everything in dmmlog logs through `from loguru import logger`. The CSV output
may go to stdout, so log messages only ever go to stderr and/or a log file.
"""

import os
import pathlib
import sys
import traceback

from loguru import logger

from .defaults import DEFAULT_LOGLEVEL, LOG_DIR


def format_error_response():
    return "\t".join(line.strip() for line in traceback.format_exc().splitlines())


def start_log(
    log_to_file=False,
    log_to_stderr=True,
    log_path=None,
    clear_prev=True,
    log_level=DEFAULT_LOGLEVEL,
):
    if log_path is None or log_path == "":
        log_path = log_default_path()
    else:
        log_path = os.path.abspath(log_path)

    if log_to_file and clear_prev:
        clear_log(log_path)

    # first remove (default) stderr output
    logger.remove()

    if log_to_stderr:
        logger.add(sys.stderr, level=log_level, enqueue=True, colorize=None)
    if log_to_file:
        pathlib.Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        logger.add(log_path, level=log_level, enqueue=True, colorize=False)
        logger.info("Log started at {}", log_path)
    else:
        logger.info("Log started.")


def log_default_path() -> str:
    return str(LOG_DIR / "dmmlog.log")


def clear_log(log_path: str):
    """
    Clear the log file at the given path, if there is one.

    Arguments
    ---------
    log_path : str
        The path to the log file. The default is given by log_default_path().
    """
    if os.path.exists(log_path):
        try:
            os.remove(log_path)
        except PermissionError:
            logger.error(
                f"Could not clear log file {log_path}. Permission denied. Continuing."
            )


def shutdown_log():
    logger.info("Closing down log.")
    # complete() waits for enqueued messages to be written
    logger.complete()
    logger.remove()

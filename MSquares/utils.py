"""
Utility Functions
=================

This module provides general utility functions used throughout MSquares,
currently the logging configuration.

Functions
---------
configure_logging
    Set up logging for the MSquares package with customizable
    output format and destinations.
"""

import logging
import MSquares


def configure_logging(level=logging.INFO, logfile=None):
    """Configure logging for the MSquares package.

    Sets up a logger with a standard format and optional file output.
    This is called automatically when MSquares is imported.

    Parameters
    ----------
    level : int, default logging.INFO
        Logging level (e.g., logging.DEBUG, logging.INFO, logging.WARNING).
    logfile : str, optional
        Path to log file. If provided, logs are written to both console
        and file. If None, logs only to console.

    Examples
    --------
    >>> from MSquares.utils import configure_logging
    >>> import logging
    >>>
    >>> # Show the per-sweep debug messages and keep a copy on disk
    >>> configure_logging(level=logging.DEBUG, logfile='msquares.log')

    Notes
    -----
    The log format is: "HH:MM:SS message".
    Calling this function again replaces the handlers installed by a
    previous call instead of stacking them.
    """
    logger = logging.getLogger(MSquares.__name__)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger_handler = logging.StreamHandler()
    formatter = logging.Formatter("%(asctime)s %(message)s", datefmt="%H:%M:%S")
    logger_handler.setFormatter(formatter)
    logger.addHandler(logger_handler)

    if logfile is not None:
        file_logger_handler = logging.FileHandler(logfile)
        file_logger_handler.setFormatter(formatter)
        logger.addHandler(file_logger_handler)

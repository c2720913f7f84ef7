#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utility functions for the Circuitscape runner.
"""
import contextlib
import functools
import os
import time
from typing import Callable, Iterator, Optional

from circuitscape_runner.core.logging_config import get_module_logger

logger = get_module_logger(__name__)


def timer(func: Callable) -> Callable:
    """
    Decorator to time function execution.

    Parameters
    ----------
    func : Callable
        Function to time.

    Returns
    -------
    Callable
        Wrapped function with timing.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed = time.time() - start_time
            logger.debug(f"Function {func.__name__} took {elapsed:.2f} seconds to run")
    return wrapper


@contextlib.contextmanager
def working_directory(path: Optional[str]) -> Iterator[str]:
    """
    Temporarily change the process working directory.

    The previous directory is restored when the block exits, whether it
    returns normally or raises. ``None`` leaves the directory unchanged.

    Parameters
    ----------
    path : str, optional
        Directory to switch to.

    Yields
    ------
    str
        The working directory inside the block.
    """
    previous = os.getcwd()
    if path is None:
        yield previous
        return

    os.chdir(path)
    logger.debug(f"Changed working directory to {path}")
    try:
        yield os.getcwd()
    finally:
        os.chdir(previous)
        logger.debug(f"Restored working directory to {previous}")

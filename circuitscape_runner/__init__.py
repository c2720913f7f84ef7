#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Circuitscape Runner Package.

Writes Circuitscape .ini configuration files from a validated option set,
runs Circuitscape.jl through a Julia process and plots the cumulative
current map it produces.
"""

__version__ = "0.1.0"
__author__ = "Circuitscape Runner Team"
__email__ = "user@example.com"

from circuitscape_runner.core.options import CircuitscapeOptions, FocalInputError, OptionError
from circuitscape_runner.run import circuitscape_run, run_with_options

__all__ = [
    "CircuitscapeOptions",
    "FocalInputError",
    "OptionError",
    "circuitscape_run",
    "run_with_options",
]

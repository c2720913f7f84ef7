#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration settings for the Circuitscape runner.

This module centralizes the fixed values shared across the package: the
option values Circuitscape accepts, output file naming, how Julia is
invoked and how results are plotted.
"""
from typing import Dict, Any, Tuple

# Accepted option values
SCENARIOS: Tuple[str, ...] = ("pairwise", "advanced", "one-to-all", "all-to-one")
SOLVERS: Tuple[str, ...] = ("cholmod", "cg+amg")
REMOVAL_POLICIES: Tuple[str, ...] = ("keepall", "rmvsrc", "rmvgnd", "rmvall")
LOG_LEVELS: Tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Focal polygons must be an integer-coded raster, not a vector layer
VECTOR_EXTENSIONS: Tuple[str, ...] = (".shp", ".gpkg", ".geojson", ".kml", ".gml")

# Output naming
DEFAULT_OUTPUT_NAME: str = "circuitscape_output"
INI_EXTENSION: str = ".ini"
OUTPUT_FILE_EXTENSION: str = ".out"
LOG_FILE_EXTENSION: str = ".log"
PROFILER_LOG_SUFFIX: str = "_rusages.log"
CUM_CURMAP_SUFFIX: str = "_cum_curmap"
OUTPUT_RASTER_EXTENSION: str = ".asc"

# Section headers, in the order they are written
SECTIONS: Dict[str, str] = {
    "mode": "Circuitscape mode",
    "habitat": "Habitat raster or graph",
    "connection": "Connection scheme for raster habitat data",
    "focal": "Options for pairwise and one-to-all and all-to-one modes",
    "advanced": "Options for advanced mode",
    "output": "Output options",
    "calculation": "Calculation options",
    "logging": "Logging Options",
    "polygons": "Short circuit regions (aka polygons)",
}

# Short-circuit regions are never used; the focal raster must not be read as one
POLYGON_PLACEHOLDER: str = "(Browse for a short-circuit region file)"

# Julia / Circuitscape.jl invocation
JULIA_CONFIG: Dict[str, Any] = {
    "executable": "julia",
    "env_var": "JULIA_EXE",
    "package": "Circuitscape",
    "entry_point": "compute",
    "julia_flags": ["--startup-file=no"],
    "install_url": "https://julialang.org/downloads/",
}

# Plotting
PLOT_CONFIG: Dict[str, Any] = {
    "cmap": "terrain",
    "figsize": (10, 8),
    "dpi": 300,
    "title": "Circuitscape Cumulative Current",
    "point_color": "black",
    "point_size": 12,
}

# Logging configuration
LOGGING_CONFIG: Dict[str, Any] = {
    "level": "INFO",  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    "log_to_file": False,
    "log_file": None,
    "log_format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}

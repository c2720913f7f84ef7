#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Option model for a Circuitscape run.

A ``CircuitscapeOptions`` instance holds every setting that ends up in the
.ini file. All argument validation happens when the instance is created, so
an invalid option set never reaches the serializer and nothing is written
to disk for it.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import numpy as np

from circuitscape_runner.core.config import (
    SCENARIOS, SOLVERS, REMOVAL_POLICIES, LOG_LEVELS, VECTOR_EXTENSIONS,
    DEFAULT_OUTPUT_NAME, INI_EXTENSION, OUTPUT_FILE_EXTENSION,
    LOG_FILE_EXTENSION, PROFILER_LOG_SUFFIX
)
from circuitscape_runner.core.io import output_raster_path
from circuitscape_runner.core.logging_config import get_module_logger

logger = get_module_logger(__name__)

BOOLEAN_FIELDS = (
    "habitat_map_is_resistance", "connect_four_neighbors_only",
    "connect_using_avg_resistances", "ground_file_is_resistance",
    "use_direct_grounds", "use_unit_currents", "write_cur_maps",
    "write_cum_cur_map_only", "write_volt_maps", "log_transform_maps",
    "compress_grids", "parallelize", "preemptive_memory_release",
    "low_memory_mode", "print_timings", "screenprint_log",
)


class OptionError(ValueError):
    """An option has a value Circuitscape does not accept."""


class FocalInputError(OptionError):
    """Focal node inputs are missing, ambiguous or of the wrong kind."""


def validate_focal_inputs(focal_points_file: Optional[str],
                          focal_polygons_ascii: Optional[str]) -> str:
    """
    Check the two focal node inputs and return the one to use.

    Parameters
    ----------
    focal_points_file : str, optional
        Text table of ``id x y`` rows without a header.
    focal_polygons_ascii : str, optional
        Integer-coded ASCII raster of focal regions.

    Returns
    -------
    str
        The focal input path that becomes ``point_file``.

    Raises
    ------
    FocalInputError
        If both or neither input is given, or the polygon input is a
        vector file.
    """
    if focal_points_file is not None and focal_polygons_ascii is not None:
        raise FocalInputError(
            "Please specify EITHER `focal_points_file` OR `focal_polygons_ascii`, not both."
        )
    if focal_points_file is None and focal_polygons_ascii is None:
        raise FocalInputError(
            "No focal node input provided. Supply either `focal_points_file` (points) "
            "or `focal_polygons_ascii` (integer-coded ASCII raster)."
        )

    if focal_points_file is not None:
        return str(focal_points_file)

    extension = Path(str(focal_polygons_ascii)).suffix.lower()
    if extension in VECTOR_EXTENSIONS:
        raise FocalInputError(
            f"`focal_polygons_ascii` points to a vector file ({extension}). "
            "For polygon focal nodes provide an integer-coded ASCII raster instead."
        )
    return str(focal_polygons_ascii)


def _check_choice(name: str, value: str, choices, case_sensitive: bool = True) -> None:
    candidate = value if case_sensitive else str(value).lower()
    if candidate not in choices:
        raise OptionError(
            f"Invalid {name} '{value}'. Expected one of: {', '.join(choices)}"
        )


@dataclass
class CircuitscapeOptions:
    """
    Every setting written to a Circuitscape .ini file.

    Input paths are kept exactly as given; Circuitscape resolves relative
    paths against the working directory it is started in, which is
    ``output_dir`` when the run goes through this package. ``output_dir``
    itself is made absolute so the output paths written to the file do not
    depend on the working directory of the solver.
    """
    cost_file: str
    focal_points_file: Optional[str] = None
    focal_polygons_ascii: Optional[str] = None

    output_name: str = DEFAULT_OUTPUT_NAME
    output_dir: Optional[str] = None

    scenario: str = "pairwise"

    # Habitat / connectivity
    habitat_map_is_resistance: bool = True
    connect_four_neighbors_only: bool = False
    connect_using_avg_resistances: bool = True
    included_pairs_file: Optional[str] = None

    # Advanced mode
    ground_file_is_resistance: bool = True
    remove_src_or_gnd: str = "keepall"
    ground_file: Optional[str] = None
    source_file: Optional[str] = None
    use_direct_grounds: bool = False
    use_unit_currents: bool = False

    # Outputs
    write_cur_maps: bool = True
    write_cum_cur_map_only: bool = True
    write_volt_maps: bool = False
    log_transform_maps: bool = False
    compress_grids: bool = False

    # Performance / memory
    parallelize: bool = False
    max_parallel: int = 0
    solver: str = "cholmod"
    preemptive_memory_release: bool = False
    low_memory_mode: bool = False
    print_timings: bool = True

    # Circuitscape's own logging
    log_level: str = "INFO"
    screenprint_log: bool = True

    point_file: str = field(init=False, repr=False)

    def __post_init__(self):
        self.point_file = validate_focal_inputs(self.focal_points_file, self.focal_polygons_ascii)

        if not self.cost_file:
            raise OptionError("`cost_file` is required")
        if not self.output_name:
            raise OptionError("`output_name` must not be empty")

        _check_choice("scenario", self.scenario, SCENARIOS, case_sensitive=False)
        _check_choice("solver", self.solver, SOLVERS)
        _check_choice("remove_src_or_gnd", self.remove_src_or_gnd, REMOVAL_POLICIES)
        self.log_level = str(self.log_level).upper()
        _check_choice("log_level", self.log_level, LOG_LEVELS)

        for name in BOOLEAN_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, (bool, np.bool_)):
                raise OptionError(f"`{name}` must be True or False, got {value!r}")
            setattr(self, name, bool(value))

        if isinstance(self.max_parallel, bool) or not isinstance(self.max_parallel, int):
            raise OptionError(f"`max_parallel` must be an integer, got {self.max_parallel!r}")
        if self.max_parallel < 0:
            raise OptionError("`max_parallel` must be 0 (all cores) or a positive number of workers")

        if self.output_dir is None:
            self.output_dir = os.getcwd()
        # Circuitscape runs inside output_dir, so its own paths must not be relative
        self.output_dir = os.path.abspath(str(self.output_dir))

        if self.is_advanced:
            for name in ("ground_file", "source_file"):
                if not getattr(self, name):
                    logger.warning(f"Advanced scenario without `{name}`; Circuitscape will likely reject the run")
        else:
            for name in ("ground_file", "source_file"):
                if getattr(self, name):
                    logger.debug(f"`{name}` is only used by the advanced scenario and will be ignored")

    @property
    def is_advanced(self) -> bool:
        return self.scenario.lower() == "advanced"

    @property
    def uses_polygons(self) -> bool:
        return self.focal_polygons_ascii is not None

    def _output_path(self, suffix: str) -> str:
        return os.path.join(self.output_dir, f"{self.output_name}{suffix}")

    @property
    def ini_path(self) -> str:
        return self._output_path(INI_EXTENSION)

    @property
    def output_file(self) -> str:
        return self._output_path(OUTPUT_FILE_EXTENSION)

    @property
    def log_file(self) -> str:
        return self._output_path(LOG_FILE_EXTENSION)

    @property
    def profiler_log_file(self) -> str:
        return self._output_path(PROFILER_LOG_SUFFIX)

    @property
    def cum_curmap_path(self) -> str:
        return output_raster_path(self.output_dir, self.output_name)

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Circuitscape .ini serialization.

Options are turned into an ordered list of lines: a ``[section]`` header
followed by ``key = value`` lines, sections separated by a blank line. Key
names and section titles are the ones Circuitscape reads and must not
change.
"""
import configparser
import os
from pathlib import Path
from typing import Dict, List

from circuitscape_runner.core.config import SECTIONS, POLYGON_PLACEHOLDER
from circuitscape_runner.core.logging_config import get_module_logger
from circuitscape_runner.core.options import CircuitscapeOptions

logger = get_module_logger(__name__)


def format_bool(value: bool) -> str:
    """Serialize a boolean as Circuitscape expects it: ``true`` or ``false``."""
    if not isinstance(value, bool):
        raise TypeError(f"Expected a bool, got {type(value).__name__}: {value!r}")
    return "true" if value else "false"


def _line(key: str, value) -> str:
    return f"{key} = {value}"


def _bool_line(key: str, value: bool) -> str:
    return _line(key, format_bool(value))


def _optional_path_line(key: str, value) -> str:
    if value:
        return _line(key, value)
    return f"# {key} not provided"


def build_ini_lines(options: CircuitscapeOptions) -> List[str]:
    """
    Build the lines of a Circuitscape .ini file.

    Parameters
    ----------
    options : CircuitscapeOptions
        Validated run options.

    Returns
    -------
    list of str
        Lines without trailing newlines, in the order they are written.
    """
    sections = []

    sections.append([
        f"[{SECTIONS['mode']}]",
        _line("scenario", options.scenario),
        _line("data_type", "raster"),
    ])

    sections.append([
        f"[{SECTIONS['habitat']}]",
        _line("habitat_file", options.cost_file),
        _bool_line("habitat_map_is_resistances", options.habitat_map_is_resistance),
    ])

    sections.append([
        f"[{SECTIONS['connection']}]",
        _bool_line("connect_four_neighbors_only", options.connect_four_neighbors_only),
        _bool_line("connect_using_avg_resistances", options.connect_using_avg_resistances),
    ])

    # Points and integer-coded polygon rasters both go in as point_file
    focal = [
        f"[{SECTIONS['focal']}]",
        _line("point_file", options.point_file),
        _bool_line("use_included_pairs", options.included_pairs_file is not None),
    ]
    if options.included_pairs_file is not None:
        focal.append(_line("included_pairs_file", options.included_pairs_file))
    sections.append(focal)

    if options.is_advanced:
        sections.append([
            f"[{SECTIONS['advanced']}]",
            _bool_line("ground_file_is_resistances", options.ground_file_is_resistance),
            _line("remove_src_or_gnd", options.remove_src_or_gnd),
            _optional_path_line("ground_file", options.ground_file),
            _optional_path_line("source_file", options.source_file),
            _bool_line("use_unit_currents", options.use_unit_currents),
            _bool_line("use_direct_grounds", options.use_direct_grounds),
        ])

    sections.append([
        f"[{SECTIONS['output']}]",
        _line("output_file", options.output_file),
        _line("log_file", options.log_file),
        _line("profiler_log_file", options.profiler_log_file),
        _bool_line("write_cur_maps", options.write_cur_maps),
        _bool_line("write_cum_cur_map_only", options.write_cum_cur_map_only),
        _bool_line("write_volt_maps", options.write_volt_maps),
        _bool_line("log_transform_maps", options.log_transform_maps),
        _bool_line("compress_grids", options.compress_grids),
    ])

    sections.append([
        f"[{SECTIONS['calculation']}]",
        _bool_line("low_memory_mode", options.low_memory_mode),
        _bool_line("parallelize", options.parallelize),
        _line("max_parallel", options.max_parallel),
        _line("solver", options.solver),
        _bool_line("preemptive_memory_release", options.preemptive_memory_release),
        _bool_line("print_timings", options.print_timings),
    ])

    sections.append([
        f"[{SECTIONS['logging']}]",
        _line("log_level", options.log_level),
        _bool_line("screenprint_log", options.screenprint_log),
    ])

    # Never short-circuit regions, or the focal raster would be read as one
    sections.append([
        f"[{SECTIONS['polygons']}]",
        _line("polygon_file", POLYGON_PLACEHOLDER),
        _bool_line("use_polygons", False),
    ])

    lines = []
    for i, section in enumerate(sections):
        if i:
            lines.append("")
        lines.extend(section)
    return lines


def write_ini(options: CircuitscapeOptions) -> Path:
    """
    Write the .ini file for ``options`` and return its path.

    The output directory is created if needed and an existing file with the
    same name is overwritten.
    """
    lines = build_ini_lines(options)

    os.makedirs(options.output_dir, exist_ok=True)
    ini_path = Path(options.ini_path)
    with open(ini_path, "w", encoding="utf-8", newline="\n") as f:
        f.write("\n".join(lines) + "\n")

    logger.info(f"Wrote Circuitscape config to: {ini_path}")
    return ini_path


def read_ini(path: str) -> Dict[str, Dict[str, str]]:
    """
    Read a Circuitscape .ini file back into ``{section: {key: value}}``.

    Values are returned as the raw strings found in the file.
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(f"File {path} does not exist")

    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str
    with open(path, "r", encoding="utf-8-sig") as f:
        parser.read_file(f)

    return {section: dict(parser.items(section)) for section in parser.sections()}

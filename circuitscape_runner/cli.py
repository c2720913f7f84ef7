#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Command line entry point for the Circuitscape runner.

Subcommands:

- ``write``: write the .ini file only
- ``run``: write the .ini file and run Circuitscape.jl on it
- ``plot``: plot the cumulative current map of a finished run
"""
import argparse
import sys
import time
from typing import List, Optional

from circuitscape_runner import __version__
from circuitscape_runner.core.config import (
    SCENARIOS, SOLVERS, REMOVAL_POLICIES, LOG_LEVELS, DEFAULT_OUTPUT_NAME
)
from circuitscape_runner.core.io import load_focal_points
from circuitscape_runner.core.logging_config import setup_logging, get_module_logger
from circuitscape_runner.core.options import CircuitscapeOptions, OptionError
from circuitscape_runner.run import run_with_options
from circuitscape_runner.utils.visualization import plot_cumulative_current

logger = get_module_logger(__name__)

# (flag, field, default, help) for every boolean option
BOOLEAN_OPTIONS = [
    ("--habitat-is-resistance", "habitat_map_is_resistance", True,
     "Interpret the cost raster as resistance (use --no-habitat-is-resistance for conductance)"),
    ("--four-neighbors-only", "connect_four_neighbors_only", False,
     "Connect cells to their 4 neighbors instead of 8"),
    ("--avg-resistances", "connect_using_avg_resistances", True,
     "Average resistances when connecting cells"),
    ("--ground-is-resistance", "ground_file_is_resistance", True,
     "Interpret ground file values as resistances (advanced mode)"),
    ("--direct-grounds", "use_direct_grounds", False,
     "Tie grounds directly to ground (advanced mode)"),
    ("--unit-currents", "use_unit_currents", False,
     "Use unit current sources (advanced mode)"),
    ("--write-cur-maps", "write_cur_maps", True,
     "Write current maps"),
    ("--cum-cur-map-only", "write_cum_cur_map_only", True,
     "Only write the cumulative current map"),
    ("--write-volt-maps", "write_volt_maps", False,
     "Write voltage maps"),
    ("--log-transform-maps", "log_transform_maps", False,
     "Log-transform current maps"),
    ("--compress-grids", "compress_grids", False,
     "Compress output grids"),
    ("--parallelize", "parallelize", False,
     "Let Circuitscape run pairs in parallel"),
    ("--preemptive-memory-release", "preemptive_memory_release", False,
     "Release memory eagerly on large runs"),
    ("--low-memory-mode", "low_memory_mode", False,
     "Trade speed for lower memory use"),
    ("--print-timings", "print_timings", True,
     "Have Circuitscape print timing information"),
    ("--screenprint-log", "screenprint_log", True,
     "Have Circuitscape print its log to the console"),
]


def _add_option_arguments(parser: argparse.ArgumentParser) -> None:
    """Arguments that map onto CircuitscapeOptions fields."""
    parser.add_argument(
        "--cost", "-c",
        dest="cost_file",
        required=True,
        help="Path to the resistance/conductance raster (.asc or .tif)"
    )

    focal = parser.add_argument_group("focal nodes (exactly one)")
    focal.add_argument(
        "--points", "-p",
        dest="focal_points_file",
        help="Text file of focal points with rows 'id x y' and no header"
    )
    focal.add_argument(
        "--polygons",
        dest="focal_polygons_ascii",
        help="Integer-coded ASCII raster of focal regions"
    )

    parser.add_argument(
        "--output-name", "-n",
        default=DEFAULT_OUTPUT_NAME,
        help=f"Base name of the .ini and output files (default: {DEFAULT_OUTPUT_NAME})"
    )
    parser.add_argument(
        "--output-dir", "-o",
        help="Directory for the .ini and output files (default: current directory)"
    )
    parser.add_argument(
        "--scenario", "-s",
        default="pairwise",
        type=str.lower,
        choices=SCENARIOS,
        help="Circuitscape scenario (default: pairwise)"
    )
    parser.add_argument(
        "--included-pairs",
        dest="included_pairs_file",
        help="File listing focal node pairs to include or exclude"
    )

    advanced = parser.add_argument_group("advanced mode")
    advanced.add_argument("--ground-file", help="Ground point raster or table")
    advanced.add_argument("--source-file", help="Current source raster or table")
    advanced.add_argument(
        "--remove-src-or-gnd",
        default="keepall",
        choices=REMOVAL_POLICIES,
        help="What to do where sources and grounds coincide (default: keepall)"
    )

    calc = parser.add_argument_group("calculation")
    calc.add_argument(
        "--max-parallel",
        type=int,
        default=0,
        help="Maximum number of parallel workers, 0 for all cores (default: 0)"
    )
    calc.add_argument(
        "--solver",
        default="cholmod",
        choices=SOLVERS,
        help="Linear solver (default: cholmod)"
    )
    calc.add_argument(
        "--cs-log-level",
        dest="cs_log_level",
        default="INFO",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Log level written into the .ini for Circuitscape (default: INFO)"
    )

    toggles = parser.add_argument_group("switches")
    for flag, field_name, default, help_text in BOOLEAN_OPTIONS:
        toggles.add_argument(
            flag,
            dest=field_name,
            default=default,
            action=argparse.BooleanOptionalAction,
            help=f"{help_text} (default: {'on' if default else 'off'})"
        )

    parser.add_argument(
        "--print-ini",
        action="store_true",
        help="Print the .ini contents to the console"
    )


def _add_plot_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--plot-extent",
        nargs=4,
        type=float,
        metavar=("XMIN", "XMAX", "YMIN", "YMAX"),
        help="Crop the plot to this extent"
    )
    parser.add_argument(
        "--plot-zlim",
        nargs=2,
        type=float,
        metavar=("MIN", "MAX"),
        help="Color scale limits of the plot"
    )


def _add_log_level(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--log-level", "-l",
        choices=list(LOG_LEVELS),
        default="INFO",
        help="Logging level (default: INFO)"
    )


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns
    -------
    argparse.Namespace
        Parsed command line arguments.
    """
    parser = argparse.ArgumentParser(
        prog="circuitscape-run",
        description="Write Circuitscape .ini files, run Circuitscape.jl and plot its results."
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"circuitscape-runner v{__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to execute")

    write_parser = subparsers.add_parser("write", help="Write the .ini file only")
    _add_option_arguments(write_parser)
    _add_log_level(write_parser)

    run_parser = subparsers.add_parser("run", help="Write the .ini file and run Circuitscape.jl")
    _add_option_arguments(run_parser)
    run_parser.add_argument(
        "--julia",
        dest="julia_executable",
        help="Julia executable (default: $JULIA_EXE or 'julia' on PATH)"
    )
    run_parser.add_argument(
        "--install-missing",
        action="store_true",
        help="Install Circuitscape.jl if Julia does not have it"
    )
    run_parser.add_argument(
        "--plot",
        action="store_true",
        help="Plot the cumulative current map after the run"
    )
    _add_plot_arguments(run_parser)
    _add_log_level(run_parser)

    plot_parser = subparsers.add_parser("plot", help="Plot the cumulative current map of a finished run")
    plot_parser.add_argument(
        "--output-name", "-n",
        default=DEFAULT_OUTPUT_NAME,
        help=f"Base name of the run (default: {DEFAULT_OUTPUT_NAME})"
    )
    plot_parser.add_argument(
        "--output-dir", "-o",
        default=".",
        help="Directory holding the run outputs (default: current directory)"
    )
    plot_parser.add_argument(
        "--points", "-p",
        dest="focal_points_file",
        help="Focal point file to overlay"
    )
    plot_parser.add_argument(
        "--save",
        dest="save_path",
        help="Save the figure to this path"
    )
    plot_parser.add_argument(
        "--no-show",
        action="store_true",
        help="Do not open an interactive window"
    )
    _add_plot_arguments(plot_parser)
    _add_log_level(plot_parser)

    return parser.parse_args(argv)


def build_options(args: argparse.Namespace) -> CircuitscapeOptions:
    """Create CircuitscapeOptions from parsed ``write``/``run`` arguments."""
    kwargs = {
        "cost_file": args.cost_file,
        "focal_points_file": args.focal_points_file,
        "focal_polygons_ascii": args.focal_polygons_ascii,
        "output_name": args.output_name,
        "output_dir": args.output_dir,
        "scenario": args.scenario,
        "included_pairs_file": args.included_pairs_file,
        "ground_file": args.ground_file,
        "source_file": args.source_file,
        "remove_src_or_gnd": args.remove_src_or_gnd,
        "max_parallel": args.max_parallel,
        "solver": args.solver,
        "log_level": args.cs_log_level,
    }
    for _flag, field_name, _default, _help in BOOLEAN_OPTIONS:
        kwargs[field_name] = getattr(args, field_name)
    return CircuitscapeOptions(**kwargs)


def write_config(args: argparse.Namespace) -> int:
    """
    Write the .ini file.

    Returns
    -------
    int
        Exit code.
    """
    options = build_options(args)
    run_with_options(options, run_in_julia=False, print_ini_lines=args.print_ini)
    return 0


def run_config(args: argparse.Namespace) -> int:
    """
    Write the .ini file and run Circuitscape.jl.

    Returns
    -------
    int
        Exit code.
    """
    start_time = time.time()
    options = build_options(args)
    run_with_options(
        options,
        run_in_julia=True,
        plot=args.plot,
        plot_extent=args.plot_extent,
        plot_zlim=args.plot_zlim,
        print_ini_lines=args.print_ini,
        install_missing=args.install_missing,
        julia_executable=args.julia_executable,
    )
    elapsed_time = time.time() - start_time
    logger.info(f"Circuitscape run completed in {elapsed_time:.2f} seconds")
    return 0


def plot_results(args: argparse.Namespace) -> int:
    """
    Plot the cumulative current map of a finished run.

    Returns
    -------
    int
        Exit code.
    """
    focal_points = None
    if args.focal_points_file:
        focal_points = load_focal_points(args.focal_points_file)

    fig = plot_cumulative_current(
        args.output_dir,
        args.output_name,
        extent=args.plot_extent,
        zlim=args.plot_zlim,
        focal_points=focal_points,
        output_path=args.save_path,
        show_plot=not args.no_show,
    )
    return 0 if fig is not None else 1


COMMANDS = {
    "write": write_config,
    "run": run_config,
    "plot": plot_results,
}


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function of the command line interface.
    """
    args = parse_arguments(argv)

    setup_logging(log_level=args.log_level)

    try:
        return COMMANDS[args.command](args)
    except OptionError as e:
        logger.error(str(e))
        return 2
    except Exception as e:
        logger.exception(f"Error during '{args.command}': {str(e)}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

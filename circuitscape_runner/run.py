#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Write a Circuitscape config and optionally run and plot it.

``circuitscape_run`` is the main entry point of the package. It validates
the options, writes ``<output_dir>/<output_name>.ini`` and, when asked,
runs Circuitscape.jl on it and plots the cumulative current map.

Example
-------
>>> result = circuitscape_run(
...     cost_file="myCostSurface.asc",
...     focal_points_file="myPoints.txt",
...     output_name="ExampleCircuitscape",
...     plot=True,
...     plot_extent=(550000, 560000, 915000, 925000),
...     plot_zlim=(0, 20),
...     parallelize=True,
...     max_parallel=4,
... )
"""
from typing import Optional, Sequence

from circuitscape_runner.core.ini import build_ini_lines, write_ini
from circuitscape_runner.core.io import load_focal_points
from circuitscape_runner.core.logging_config import get_module_logger
from circuitscape_runner.core.options import CircuitscapeOptions
from circuitscape_runner.julia.bridge import (
    RunResult, find_julia, require_circuitscape, run_circuitscape
)
from circuitscape_runner.utils.visualization import check_plot_limits, plot_cumulative_current

logger = get_module_logger(__name__)


def print_ini(lines) -> None:
    """Echo .ini lines to the console."""
    print("=== Circuitscape .INI contents ===")
    print("\n".join(lines))
    print("\n=== End of .INI ===\n")


def _plot_result(options: CircuitscapeOptions,
                 plot_extent: Optional[Sequence[float]],
                 plot_zlim: Optional[Sequence[float]],
                 show_plot: bool) -> None:
    focal_points = None
    if options.focal_points_file is not None:
        try:
            focal_points = load_focal_points(options.focal_points_file)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read focal points for plotting: {e}")

    plot_cumulative_current(
        options.output_dir,
        options.output_name,
        extent=plot_extent,
        zlim=plot_zlim,
        focal_points=focal_points,
        show_plot=show_plot,
    )


def run_with_options(options: CircuitscapeOptions,
                     run_in_julia: bool = True,
                     plot: bool = False,
                     plot_extent: Optional[Sequence[float]] = None,
                     plot_zlim: Optional[Sequence[float]] = None,
                     print_ini_lines: bool = False,
                     install_missing: bool = False,
                     julia_executable: Optional[str] = None,
                     show_plot: bool = True) -> Optional[RunResult]:
    """
    Write the config for ``options`` and optionally run and plot it.

    Parameters
    ----------
    options : CircuitscapeOptions
        Validated run options.
    run_in_julia : bool, optional
        Run Circuitscape.jl after writing the config, by default True.
        When False nothing outside this process is contacted.
    plot : bool, optional
        Plot the cumulative current map after the run, by default False.
    plot_extent : sequence of float, optional
        ``(xmin, xmax, ymin, ymax)`` to crop the plot to.
    plot_zlim : sequence of float, optional
        ``(min, max)`` of the plot color scale.
    print_ini_lines : bool, optional
        Echo the config to the console, by default False.
    install_missing : bool, optional
        Install Circuitscape.jl if Julia does not have it, by default False.
    julia_executable : str, optional
        Julia executable to use instead of the one found on PATH.
    show_plot : bool, optional
        Show the figure interactively, by default True.

    Returns
    -------
    RunResult or None
        Result of the Circuitscape.jl run, or None if it was not run.
        ``RunResult.output`` holds the solver output lines; they are also
        logged at INFO level, which is only visible once logging is set up
        (see :func:`~circuitscape_runner.core.logging_config.setup_logging`).
    """
    if plot:
        check_plot_limits(plot_extent, plot_zlim)

    lines = build_ini_lines(options)
    ini_path = write_ini(options)

    if print_ini_lines:
        print_ini(lines)

    if not run_in_julia:
        logger.info("Circuitscape .ini file created. Set run_in_julia=True to compute automatically.")
        return None

    julia = find_julia(julia_executable)
    require_circuitscape(julia, install=install_missing)

    focal_kind = "polygons" if options.uses_polygons else "points"
    logger.info(f"Running Circuitscape with scenario='{options.scenario}' "
                f"for point_file='{options.point_file}' ({focal_kind}) ...")
    result = run_circuitscape(str(ini_path), julia, working_dir=options.output_dir)

    if plot:
        _plot_result(options, plot_extent, plot_zlim, show_plot)

    return result


def circuitscape_run(cost_file: str,
                     focal_points_file: Optional[str] = None,
                     focal_polygons_ascii: Optional[str] = None,
                     *,
                     run_in_julia: bool = True,
                     plot: bool = False,
                     plot_extent: Optional[Sequence[float]] = None,
                     plot_zlim: Optional[Sequence[float]] = None,
                     print_ini_lines: bool = False,
                     install_missing: bool = False,
                     julia_executable: Optional[str] = None,
                     show_plot: bool = True,
                     **options) -> Optional[RunResult]:
    """
    Write a Circuitscape .ini file and optionally run Circuitscape on it.

    Exactly one of ``focal_points_file`` (``id x y`` text table) and
    ``focal_polygons_ascii`` (integer-coded ASCII raster) must be given.
    Any other keyword is a field of :class:`CircuitscapeOptions`, e.g.
    ``output_name``, ``output_dir``, ``scenario``, ``solver``.
    The orchestration flags are described in :func:`run_with_options`.
    The solver output is returned in ``RunResult.output``.

    Raises
    ------
    FocalInputError
        Both or neither focal input given, or a vector polygon input.
        Nothing is written in that case.
    OptionError
        Another option has an unsupported value.
    """
    run_options = CircuitscapeOptions(
        cost_file=cost_file,
        focal_points_file=focal_points_file,
        focal_polygons_ascii=focal_polygons_ascii,
        **options
    )
    return run_with_options(
        run_options,
        run_in_julia=run_in_julia,
        plot=plot,
        plot_extent=plot_extent,
        plot_zlim=plot_zlim,
        print_ini_lines=print_ini_lines,
        install_missing=install_missing,
        julia_executable=julia_executable,
        show_plot=show_plot,
    )

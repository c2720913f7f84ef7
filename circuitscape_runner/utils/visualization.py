#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Visualization utilities for Circuitscape results.

This module plots the cumulative current map written by a Circuitscape run,
optionally cropped to an extent and with a clipped color scale.
"""
import os
import warnings
from typing import Optional, Sequence

import numpy as np
import matplotlib.pyplot as plt
import pandas as pd

from circuitscape_runner.core.config import PLOT_CONFIG
from circuitscape_runner.core.io import load_raster, output_raster_path
from circuitscape_runner.core.logging_config import get_module_logger

logger = get_module_logger(__name__)


def check_length(name: str, values: Optional[Sequence[float]], expected: int) -> None:
    if values is not None and len(values) != expected:
        raise ValueError(f"`{name}` needs {expected} values, got {len(values)}")


def check_plot_limits(extent: Optional[Sequence[float]] = None,
                      zlim: Optional[Sequence[float]] = None) -> None:
    """Raise ValueError unless extent has four values and zlim two."""
    check_length("extent", extent, 4)
    check_length("zlim", zlim, 2)


def plot_raster(
    raster: np.ndarray,
    mask: Optional[np.ndarray] = None,
    extent: Optional[Sequence[float]] = None,
    title: str = "Raster",
    cmap: str = PLOT_CONFIG["cmap"],
    zlim: Optional[Sequence[float]] = None,
    focal_points: Optional[pd.DataFrame] = None,
    figsize=PLOT_CONFIG["figsize"],
    output_path: Optional[str] = None,
    show_plot: bool = True
) -> plt.Figure:
    """
    Plot a raster array.

    Parameters
    ----------
    raster : np.ndarray
        2D array to plot.
    mask : np.ndarray, optional
        Boolean mask of valid data, by default None.
    extent : sequence of float, optional
        ``(xmin, xmax, ymin, ymax)`` of the array in map units; pixel
        indices are used when omitted.
    title : str, optional
        Plot title, by default "Raster".
    cmap : str, optional
        Colormap name, by default "terrain".
    zlim : sequence of float, optional
        ``(vmin, vmax)`` of the color scale. The data range is used when
        omitted.
    focal_points : pd.DataFrame, optional
        Table with ``x`` and ``y`` columns drawn on top of the raster.
    figsize : tuple, optional
        Figure size.
    output_path : str, optional
        Path to save the plot, by default None.
    show_plot : bool, optional
        Whether to show the plot, by default True.

    Returns
    -------
    plt.Figure
        Matplotlib figure.
    """
    if mask is None:
        mask = np.ones_like(raster, dtype=bool)

    masked_raster = np.ma.array(raster, mask=~mask)

    vmin, vmax = (None, None) if zlim is None else zlim

    fig, ax = plt.subplots(figsize=figsize)
    im = ax.imshow(masked_raster, cmap=cmap, vmin=vmin, vmax=vmax, extent=extent)
    plt.colorbar(im, ax=ax, shrink=0.8, label="Current")
    ax.set_title(title)
    if extent is not None:
        ax.set_xlabel("X")
        ax.set_ylabel("Y")
    else:
        ax.set_xlabel("Column")
        ax.set_ylabel("Row")

    if focal_points is not None and len(focal_points):
        ax.scatter(focal_points["x"], focal_points["y"],
                   c=PLOT_CONFIG["point_color"], s=PLOT_CONFIG["point_size"],
                   marker="o", label="Focal nodes")
        if extent is not None:
            ax.set_xlim(extent[0], extent[1])
            ax.set_ylim(extent[2], extent[3])
        ax.legend(loc="upper right")

    plt.tight_layout()

    if output_path:
        os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)
        plt.savefig(output_path, dpi=PLOT_CONFIG["dpi"], bbox_inches='tight')
        logger.info(f"Saved plot to {output_path}")

    if show_plot:
        plt.show()
    else:
        plt.close(fig)

    return fig


def plot_cumulative_current(
    output_dir: str,
    output_name: str,
    extent: Optional[Sequence[float]] = None,
    zlim: Optional[Sequence[float]] = None,
    focal_points: Optional[pd.DataFrame] = None,
    cmap: str = PLOT_CONFIG["cmap"],
    output_path: Optional[str] = None,
    show_plot: bool = True
) -> Optional[plt.Figure]:
    """
    Plot the cumulative current map of a Circuitscape run.

    A missing map is not an error: a warning is issued and nothing is
    plotted.

    Parameters
    ----------
    output_dir : str
        Directory Circuitscape wrote its outputs to.
    output_name : str
        Base name of the run.
    extent : sequence of float, optional
        ``(xmin, xmax, ymin, ymax)`` to crop to before plotting.
    zlim : sequence of float, optional
        ``(min, max)`` of the color scale.
    focal_points : pd.DataFrame, optional
        Focal points to overlay.
    cmap : str, optional
        Colormap name.
    output_path : str, optional
        Where to save the figure.
    show_plot : bool, optional
        Whether to show the plot, by default True.

    Returns
    -------
    plt.Figure or None
        The figure, or None when the map does not exist.
    """
    check_plot_limits(extent, zlim)

    cum_map_path = output_raster_path(output_dir, output_name)
    if not os.path.isfile(cum_map_path):
        message = (f"Could not find the expected cumulative current map: {cum_map_path}. "
                   "Check if Circuitscape generated a different name or if "
                   "'write_cum_cur_map_only' was disabled.")
        logger.warning(message)
        warnings.warn(message, UserWarning, stacklevel=2)
        return None

    arr, mask, transform, meta = load_raster(cum_map_path, bounds=extent)
    bounds = meta['bounds']
    map_extent = (bounds['left'], bounds['right'], bounds['bottom'], bounds['top'])

    valid = arr[mask]
    if valid.size:
        logger.info(f"Cumulative current range: {np.min(valid):.4f} to {np.max(valid):.4f}")

    return plot_raster(
        arr,
        mask=mask,
        extent=map_extent,
        title=f"{PLOT_CONFIG['title']}: {output_name}",
        cmap=cmap,
        zlim=zlim,
        focal_points=focal_points,
        output_path=output_path,
        show_plot=show_plot,
    )

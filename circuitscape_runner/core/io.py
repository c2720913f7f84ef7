#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Input/output handling for the Circuitscape runner.

This module derives the paths of Circuitscape outputs, loads output rasters
for inspection and reads focal point tables.
"""
import math
import os
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import rasterio
from rasterio.errors import WindowError
from rasterio.windows import Window, from_bounds

from circuitscape_runner.core.config import CUM_CURMAP_SUFFIX, OUTPUT_RASTER_EXTENSION
from circuitscape_runner.core.logging_config import get_module_logger

logger = get_module_logger(__name__)


def output_raster_path(output_dir: str,
                       output_name: str,
                       suffix: str = CUM_CURMAP_SUFFIX,
                       extension: str = OUTPUT_RASTER_EXTENSION) -> str:
    """Path of an output raster Circuitscape writes for ``output_name``."""
    return os.path.join(str(output_dir), f"{output_name}{suffix}{extension}")


def load_raster(path: str,
                bounds: Optional[Sequence[float]] = None) -> Tuple[np.ndarray, np.ndarray, Any, Dict[str, Any]]:
    """
    Load raster data from file.

    Parameters
    ----------
    path : str
        Path to the raster file (.asc or .tif).
    bounds : sequence of float, optional
        ``(xmin, xmax, ymin, ymax)`` in map units. When given, only the
        window covering this extent is read.

    Returns
    -------
    tuple
        - 2D array of raster values
        - 2D boolean mask of valid data
        - Affine transform of the returned array
        - Additional metadata dictionary
    """
    logger.info(f"Loading raster from {path}")

    with rasterio.open(path) as src:
        window = None
        if bounds is not None:
            xmin, xmax, ymin, ymax = bounds
            window = from_bounds(xmin, ymin, xmax, ymax, transform=src.transform)
            # Snap outward to whole cells, ignoring float noise on cell edges
            col_start = math.floor(round(window.col_off, 6))
            row_start = math.floor(round(window.row_off, 6))
            col_stop = math.ceil(round(window.col_off + window.width, 6))
            row_stop = math.ceil(round(window.row_off + window.height, 6))
            window = Window(col_start, row_start, col_stop - col_start, row_stop - row_start)
            try:
                window = window.intersection(Window(0, 0, src.width, src.height))
            except WindowError:
                raise ValueError(f"Extent {tuple(bounds)} does not overlap raster {path}")

        arr = src.read(1, window=window)
        if arr.size == 0:
            raise ValueError(f"Extent {tuple(bounds)} does not cover any cell of raster {path}")
        transform = src.window_transform(window) if window is not None else src.transform

        nodata = src.nodata
        if nodata is None:
            mask = np.isfinite(arr)
        else:
            mask = (arr != nodata) & np.isfinite(arr)

        height, width = arr.shape
        left, top = transform * (0, 0)
        right, bottom = transform * (width, height)
        meta = {
            'width': width,
            'height': height,
            'crs': src.crs.to_string() if src.crs else None,
            'bounds': {
                'left': min(left, right),
                'right': max(left, right),
                'bottom': min(top, bottom),
                'top': max(top, bottom),
            },
            'nodata': nodata,
            'dtype': str(arr.dtype),
            'driver': src.driver,
            'res': src.res,
        }

    logger.info(f"Loaded raster with shape {arr.shape}, {int(np.sum(mask))} valid cells")

    return arr, mask, transform, meta


def load_focal_points(path: str) -> pd.DataFrame:
    """
    Read a focal point table.

    The file holds one ``id x y`` row per focal node, whitespace separated,
    without a header, as Circuitscape expects.

    Parameters
    ----------
    path : str
        Path to the focal point text file.

    Returns
    -------
    pd.DataFrame
        Columns ``id``, ``x`` and ``y``.
    """
    df = pd.read_csv(path, sep=r"\s+", header=None, names=["id", "x", "y"],
                     comment="#", engine="python")
    if df[["x", "y"]].isnull().any().any():
        raise ValueError(f"Focal point file {path} must have three columns: id x y")
    logger.debug(f"Read {len(df)} focal points from {path}")
    return df

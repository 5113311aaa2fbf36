#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ******************************************************************************
# Project: Zeiss Import ToolKit (ZITK)
# Author: Eric Robeck <robeckgeo@gmail.com>
#
# Copyright (c) 2025, Eric Robeck
# Licensed under the MIT License
# ******************************************************************************

"""
Tile Grid Reconstruction.

Mosaic tiles are acquired by moving the stage in a raster, so their stage
positions line up along rows and columns up to a small jitter. Rows and
columns are recovered by clustering the stage start values of each axis
independently: values within a tolerance belong to the same cluster, and
clusters are numbered in ascending order of position.
"""

import logging
import numpy as np
from typing import Dict, List, Sequence
from zeissimport.utils.data_models import GridShape, TileBounds
from zeissimport.utils.exceptions import MalformedInputError

logger = logging.getLogger(__name__)


def cluster_values(values: Sequence[float], tolerance: float) -> Dict[float, int]:
    """
    Greedy 1-D tolerance clustering.

    Distinct values are visited in ascending order. A value joins the existing
    cluster whose representative (its first member) is closest, provided the
    distance is at most `tolerance`; otherwise it opens a new cluster.

    Args:
        values: Values to cluster; duplicates are allowed.
        tolerance: Largest distance to a representative that still joins it.

    Returns:
        Mapping from each distinct value to its zero-based cluster index.
    """
    if tolerance < 0:
        raise ValueError(f"Tolerance must not be negative, got {tolerance}")

    representatives: List[float] = []
    assignment: Dict[float, int] = {}
    for value in np.unique(np.asarray(values, dtype=np.float64)):
        best_index = None
        best_distance = None
        for index, representative in enumerate(representatives):
            distance = abs(value - representative)
            if distance <= tolerance and (best_distance is None or distance < best_distance):
                best_index, best_distance = index, distance
        if best_index is None:
            representatives.append(value)
            best_index = len(representatives) - 1
        assignment[float(value)] = best_index
    return assignment


def assign_grid_indices(tiles: List[TileBounds], tolerance: int) -> GridShape:
    """
    Fill in `row` and `col` of every tile.

    Columns come from clustering the stage start x values and rows from
    clustering the stage start y values. The tiles are updated in place.

    Args:
        tiles: All tiles of the mosaic.
        tolerance: Stage distance within which two starts share a row/column.

    Returns:
        The number of rows and columns found.

    Raises:
        MalformedInputError: If a tile has no positive pixel size.
    """
    if not tiles:
        return GridShape(0, 0)

    for tile in tiles:
        if tile.size_x <= 0 or tile.size_y <= 0:
            raise MalformedInputError(
                f"Tile {tile.tile_tag} has invalid pixel dimensions {tile.size_x}x{tile.size_y}"
            )

    columns = cluster_values([tile.stage_x for tile in tiles], tolerance)
    rows = cluster_values([tile.stage_y for tile in tiles], tolerance)
    for tile in tiles:
        tile.col = columns[float(tile.stage_x)]
        tile.row = rows[float(tile.stage_y)]

    shape = GridShape(row_count=len(set(rows.values())), column_count=len(set(columns.values())))
    logger.info(f"Reconstructed mosaic grid: {shape.row_count} rows x {shape.column_count} columns")
    return shape


def grid_layout(tiles: List[TileBounds], shape: GridShape) -> List[List[List[str]]]:
    """
    Tile tags arranged by row and column.

    Returns:
        A `row_count` x `column_count` nested list; each cell lists the tags of
        the tiles assigned to it (empty where no tile landed).
    """
    layout: List[List[List[str]]] = [[[] for _ in range(shape.column_count)] for _ in range(shape.row_count)]
    for tile in tiles:
        if tile.row is None or tile.col is None:
            raise ValueError(f"Tile {tile.tile_tag} has not been assigned to the grid")
        layout[tile.row][tile.col].append(tile.tile_tag)
    return layout

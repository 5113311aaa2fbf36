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
Montage Import Tool for ZITK.

This module powers the 'import' command: it imports every tile of an
AxioVision mosaic together with its metadata and saves all arrays of the data
container to a NumPy `.npz` archive. Archive keys are
`<attribute matrix>/<array>`; the reconstructed grid is stored under
`montage/...`.
"""

import logging
import numpy as np
from pathlib import Path
from typing import Dict
from zeissimport.utils.data_structure import DataContainer
from zeissimport.utils.performance_tracker import PerformanceTracker
from zeissimport.utils.script_arguments import ImportArguments
from zeissimport.utils.zeiss_import_filter import ZeissImportFilter

logger = logging.getLogger('import_montage')


def collect_arrays(container: DataContainer, montage_filter: ZeissImportFilter) -> Dict[str, np.ndarray]:
    """Flatten a data container into archive entries."""
    arrays: Dict[str, np.ndarray] = {}
    for am_name in container.attribute_matrix_names():
        matrix = container.get_attribute_matrix(am_name)
        for array_name in matrix.array_names():
            array = matrix.get_array(array_name)
            if not array.is_allocated:
                continue
            data = array.data
            if data.dtype == np.dtype(object):
                data = data.astype(str)
            arrays[f"{am_name}/{array_name}"] = data

    tiles = montage_filter.tiles
    arrays['montage/grid_shape'] = np.array([montage_filter.row_count, montage_filter.column_count], dtype=np.int64)
    arrays['montage/tile_rows'] = np.array([tile.row for tile in tiles], dtype=np.int64)
    arrays['montage/tile_cols'] = np.array([tile.col for tile in tiles], dtype=np.int64)
    arrays['montage/filenames'] = np.array(montage_filter.filename_list, dtype=str)
    if container.geometry is not None:
        arrays['montage/dimensions'] = np.array(container.geometry.dimensions, dtype=np.int64)
        arrays['montage/spacing'] = np.array(container.geometry.spacing, dtype=np.float64)
        arrays['montage/origin'] = np.array(container.geometry.origin, dtype=np.float64)
    return arrays


def import_montage(args: ImportArguments) -> int:
    """
    Import a mosaic and save its arrays.

    Args:
        args: Validated command-line arguments.

    Returns:
        0 on success, 1 on failure
    """
    logger.info(f"Arguments: {args}")
    tracker = PerformanceTracker()

    montage_filter = ZeissImportFilter(
        input_file=str(args.input_path),
        data_container_name=args.data_container_name,
        image_attribute_matrix_name=args.attribute_matrix_name,
        convert_to_grayscale=args.convert_to_grayscale,
        color_weights=args.color_weights,
        tolerance=args.tolerance,
        import_all_metadata=args.import_all_metadata,
        change_origin=args.change_origin,
        origin=tuple(args.origin),
        change_spacing=args.change_spacing,
        spacing=tuple(args.spacing),
    )

    with tracker.track('preflight'):
        montage_filter.preflight()
    if montage_filter.error_code < 0:
        logger.error(f"Preflight failed: {montage_filter.error_message}")
        return 1

    with tracker.track('import'):
        montage_filter.execute()
    if montage_filter.error_code < 0:
        logger.error(f"Import failed: {montage_filter.error_message}")
        return 1
    logger.info(montage_filter.montage_information)

    container = montage_filter.data_container_array.get_data_container(args.data_container_name)
    output_path = Path(args.output_path)
    try:
        with tracker.track('save'):
            output_path.parent.mkdir(parents=True, exist_ok=True)
            np.savez_compressed(output_path, **collect_arrays(container, montage_filter))
    except OSError as e:
        logger.error(f"Could not write {output_path}: {e}")
        return 1

    logger.info(f"Arrays written to {output_path}")
    tracker.log_summary()
    return 0

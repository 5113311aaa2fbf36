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
Image Import Collaborators.

The import filter never reads pixels itself. It hands a typed configuration to
two collaborators that are injected when the filter is built:

- an `ImageImporter`, which reads one tile image into a new array of an
  existing attribute matrix, and
- a `GrayscaleConverter`, which derives a single-component array from a color
  array using per-channel weights.

Both follow the same two-step protocol: `configure()` accepts the
configuration (raising `CollaboratorPropertyError` for a property it rejects,
in which case that property keeps its default), then `run()` either only
validates and creates unallocated arrays (preflight) or does the work.

Classes:
    ImageImporter: Abstract image reader.
    TiffImageImporter: Reads TIFF files with tifffile and other formats with Pillow.
    GrayscaleConverter: Abstract color to grayscale converter.
    LuminosityGrayscaleConverter: Weighted sum of the red, green and blue components.
"""

import math
import logging
import numpy as np
import tifffile
from abc import ABC, abstractmethod
from dataclasses import replace
from pathlib import Path
from PIL import Image
from typing import Optional, Tuple
from zeissimport.utils.data_models import DEFAULT_COLOR_WEIGHTS, GrayscaleConfig, ImageImportConfig
from zeissimport.utils.data_structure import (
    AttributeMatrix, DataArray, DataArrayPath, DataContainerArray, require_image_geometry
)
from zeissimport.utils.exceptions import CollaboratorPropertyError, ImageImportError

logger = logging.getLogger(__name__)

DEFAULT_ARRAY_NAME = 'ImageData'
TIFF_EXTENSIONS = ('.tif', '.tiff')

# Pillow modes and the numpy type of their pixels
PIL_MODE_DTYPES = {
    '1': np.bool_,
    'L': np.uint8,
    'P': np.uint8,
    'LA': np.uint8,
    'RGB': np.uint8,
    'RGBA': np.uint8,
    'CMYK': np.uint8,
    'I;16': np.uint16,
    'I;16B': np.uint16,
    'I': np.int32,
    'F': np.float32,
}


# ============================================================================
# Image readers
# ============================================================================

class ImageImporter(ABC):
    """Reads one image file into a new array of an existing attribute matrix."""

    name = 'ReadImage'

    def __init__(self):
        self.config: Optional[ImageImportConfig] = None

    def configure(self, config: ImageImportConfig):
        """
        Accept the configuration for the next run.

        Raises:
            CollaboratorPropertyError: If the array name is empty. Every other
                property is applied and the array name falls back to
                `DEFAULT_ARRAY_NAME`.
        """
        if not config.data_array_name:
            self.config = replace(config, data_array_name=DEFAULT_ARRAY_NAME)
            raise CollaboratorPropertyError(
                f"Error Setting Property 'ImageDataArrayName' into filter '{self.name}': the name is empty"
            )
        self.config = config

    def run(self, dca: DataContainerArray, preflight: bool) -> DataArray:
        """
        Import the configured image.

        Args:
            dca: The destination structure.
            preflight: If True, only validate and create an unallocated array.

        Returns:
            The array that was added to the attribute matrix.

        Raises:
            ImageImportError: If the file cannot be read or does not fit the matrix.
        """
        if self.config is None:
            raise ImageImportError(f"'{self.name}' was run without a configuration")
        config = self.config
        matrix = self._destination_matrix(dca, config)

        path = Path(config.input_file)
        if not path.is_file():
            raise ImageImportError(f"The input image file does not exist: {path}")

        shape, dtype = self.read_header(path)
        height, width = shape[0], shape[1]
        components = shape[2] if len(shape) > 2 else 1
        expected_x, expected_y = matrix.tuple_dims[0], matrix.tuple_dims[1]
        if (width, height) != (expected_x, expected_y):
            raise ImageImportError(
                f"Image {path.name} is {width}x{height} pixels but attribute matrix "
                f"'{matrix.name}' expects {expected_x}x{expected_y}"
            )

        array = DataArray(config.data_array_name, width * height, (components,), dtype, allocate=False)
        if not preflight:
            pixels = self.read_pixels(path)
            array.data = np.ascontiguousarray(pixels).reshape(array.shape).astype(dtype, copy=False)
        matrix.add_array(array)
        logger.debug(f"{self.name}: {'validated' if preflight else 'imported'} {path.name} into {config.array_path}")
        return array

    def _destination_matrix(self, dca: DataContainerArray, config: ImageImportConfig) -> AttributeMatrix:
        container = dca.get_data_container(config.data_container_name)
        if container is None:
            raise ImageImportError(f"Data container '{config.data_container_name}' does not exist")
        require_image_geometry(container)
        matrix = container.get_attribute_matrix(config.attribute_matrix_name)
        if matrix is None:
            raise ImageImportError(
                f"Attribute matrix '{config.attribute_matrix_name}' does not exist in '{container.name}'"
            )
        return matrix

    @abstractmethod
    def read_header(self, path: Path) -> Tuple[Tuple[int, ...], np.dtype]:
        """Return the (height, width[, components]) shape and pixel type without decoding pixels."""

    @abstractmethod
    def read_pixels(self, path: Path) -> np.ndarray:
        """Decode the pixels as a (height, width[, components]) array."""


class TiffImageImporter(ImageImporter):
    """Reads TIFF files with tifffile and every other format Pillow knows."""

    def read_header(self, path: Path) -> Tuple[Tuple[int, ...], np.dtype]:
        try:
            if path.suffix.lower() in TIFF_EXTENSIONS:
                with tifffile.TiffFile(str(path)) as tif:
                    page = tif.pages[0]
                    shape = tuple(page.shape)
                    if page.axes.startswith('S') and len(shape) == 3:
                        shape = shape[1:] + shape[:1]
                    return shape, np.dtype(page.dtype)
            with Image.open(path) as img:
                width, height = img.size
                bands = len(img.getbands())
                dtype = np.dtype(PIL_MODE_DTYPES.get(img.mode, np.uint8))
                shape = (height, width) if bands == 1 else (height, width, bands)
                return shape, dtype
        except (OSError, ValueError, tifffile.TiffFileError) as e:
            raise ImageImportError(f"Cannot read image header of {path}: {e}") from e

    def read_pixels(self, path: Path) -> np.ndarray:
        try:
            if path.suffix.lower() in TIFF_EXTENSIONS:
                with tifffile.TiffFile(str(path)) as tif:
                    page = tif.pages[0]
                    pixels = page.asarray()
                    if page.axes.startswith('S') and pixels.ndim == 3:
                        pixels = np.moveaxis(pixels, 0, -1)
                    return pixels
            with Image.open(path) as img:
                return np.asarray(img)
        except (OSError, ValueError, tifffile.TiffFileError) as e:
            raise ImageImportError(f"Cannot decode image {path}: {e}") from e


# ============================================================================
# Grayscale converters
# ============================================================================

class GrayscaleConverter(ABC):
    """Derives a single-component array from a color array."""

    name = 'RGBToGray'

    def __init__(self):
        self.selected_array_path: Optional[DataArrayPath] = None
        self.color_weights: Tuple[float, float, float] = DEFAULT_COLOR_WEIGHTS
        self.output_array_name: str = 'gray_scale_temp'

    def configure(self, config: GrayscaleConfig):
        """
        Accept the configuration for the next run.

        Raises:
            CollaboratorPropertyError: If the color weights are not three finite
                numbers. Every other property is applied and the weights keep
                their previous value.
        """
        self.selected_array_path = config.selected_array_path
        self.output_array_name = config.output_array_name
        weights = tuple(config.color_weights)
        if len(weights) != 3 or not all(isinstance(w, (int, float, np.floating)) and math.isfinite(w) for w in weights):
            raise CollaboratorPropertyError(
                f"Error Setting Property 'ColorWeights' into filter '{self.name}': "
                f"expected three finite weights, got {weights}"
            )
        self.color_weights = tuple(float(w) for w in weights)

    def run(self, dca: DataContainerArray, preflight: bool) -> DataArray:
        """
        Create the grayscale array next to the selected color array.

        Raises:
            ImageImportError: If the selected array is missing or has fewer
                than three components.
        """
        if self.selected_array_path is None:
            raise ImageImportError(f"'{self.name}' was run without a selected array")
        source = dca.get_array(self.selected_array_path)
        if source is None:
            raise ImageImportError(f"Selected array '{self.selected_array_path}' does not exist")
        if source.number_of_components < 3:
            raise ImageImportError(
                f"'{self.name}' needs at least three components but '{source.name}' has "
                f"{source.number_of_components}"
            )

        output = DataArray(self.output_array_name, source.tuple_count, (1,), source.dtype, allocate=False)
        if not preflight:
            if not source.is_allocated:
                raise ImageImportError(f"Selected array '{self.selected_array_path}' holds no data")
            output.data = self.convert(source.data.reshape(source.tuple_count, -1)[:, :3], source.dtype)

        container = dca.get_data_container(self.selected_array_path.data_container_name)
        matrix = container.get_attribute_matrix(self.selected_array_path.attribute_matrix_name)
        matrix.add_array(output)
        return output

    @abstractmethod
    def convert(self, rgb: np.ndarray, dtype: np.dtype) -> np.ndarray:
        """Convert an (n, 3) array into n gray values of type `dtype`."""


class LuminosityGrayscaleConverter(GrayscaleConverter):
    """Gray = weighted sum of red, green and blue."""

    def convert(self, rgb: np.ndarray, dtype: np.dtype) -> np.ndarray:
        gray = rgb.astype(np.float64) @ np.asarray(self.color_weights, dtype=np.float64)
        if np.issubdtype(dtype, np.integer):
            info = np.iinfo(dtype)
            gray = np.clip(np.rint(gray), info.min, info.max)
        return gray.astype(dtype)

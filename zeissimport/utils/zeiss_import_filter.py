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
Zeiss AxioVision Montage Import Filter.

`ZeissImportFilter` drives the whole import of an AxioVision mosaic:

1. validate the parameters and parse the `_meta.xml` file into an import plan,
2. create the destination data container with a tile attribute matrix (one
   tuple per pixel) and a metadata attribute matrix (one tuple per image),
3. for every tile, in ascending order, store its metadata values, import its
   image through the injected `ImageImporter` and optionally convert it to
   grayscale through the injected `GrayscaleConverter`,
4. reconstruct the tile grid from the stage positions.

`preflight()` performs every step without reading pixel data; `execute()`
performs them for real. Fatal problems end up in `error_code` and
`error_message` and discard the partially built container; lenient problems
(a collaborator rejecting a property) are only logged.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple
from zeissimport.utils.data_models import (
    DEFAULT_COLOR_WEIGHTS, GrayscaleConfig, GridShape, ImageImportConfig, ImportPlan, TagSection, TileBounds
)
from zeissimport.utils.data_structure import (
    AttributeMatrix, DataArray, DataArrayPath, DataContainer, DataContainerArray, ImageGeometry
)
from zeissimport.utils.document_parser import AxioDocumentParser
from zeissimport.utils.exceptions import (
    CollaboratorPropertyError, ImageImportError, InvalidToleranceError, MissingCollaboratorError,
    ZeissImportError
)
from zeissimport.utils.image_readers import (
    GrayscaleConverter, ImageImporter, LuminosityGrayscaleConverter, TiffImageImporter
)
from zeissimport.utils.path_helpers import tile_array_name
from zeissimport.utils.plan_cache import PlanCache
from zeissimport.utils.tag_mapping import MANDATORY_TILE_IDS, TagMappingRegistry
from zeissimport.utils.tile_grid import assign_grid_indices, grid_layout

logger = logging.getLogger(__name__)

DEFAULT_DATA_CONTAINER_NAME = 'Zeiss Axio Vision Montage'
DEFAULT_TILE_ATTRIBUTE_MATRIX_NAME = 'Tile AttributeMatrix'
META_DATA_SUFFIX = 'MetaData'
GRAY_SCALE_TEMP_ARRAY_NAME = 'gray_scale_temp'
DEFAULT_TOLERANCE = 100

# Sentinel for the default collaborators; passing None opts out
DEFAULT_COLLABORATOR = object()


class ZeissImportFilter:
    """Imports a Zeiss AxioVision mosaic described by a `_meta.xml` file."""

    human_label = 'Zeiss AxioVision Import'

    def __init__(
        self,
        input_file: str = '',
        data_container_name: str = DEFAULT_DATA_CONTAINER_NAME,
        image_attribute_matrix_name: str = DEFAULT_TILE_ATTRIBUTE_MATRIX_NAME,
        convert_to_grayscale: bool = False,
        color_weights: Sequence[float] = DEFAULT_COLOR_WEIGHTS,
        tolerance: int = DEFAULT_TOLERANCE,
        import_all_metadata: bool = True,
        change_origin: bool = False,
        origin: Tuple[float, float, float] = (0.0, 0.0, 0.0),
        change_spacing: bool = False,
        spacing: Tuple[float, float, float] = (1.0, 1.0, 1.0),
        importer: Optional[ImageImporter] = DEFAULT_COLLABORATOR,
        converter: Optional[GrayscaleConverter] = DEFAULT_COLLABORATOR,
        registry: Optional[TagMappingRegistry] = None,
        cache: Optional[PlanCache] = None,
        message_handler: Optional[Callable[[str], None]] = None,
    ):
        """
        Args:
            input_file: Path of the `_meta.xml` file.
            data_container_name: Name of the data container to create.
            image_attribute_matrix_name: Name of the per-pixel tile attribute matrix.
            convert_to_grayscale: Convert every tile to a single component.
            color_weights: Red, green and blue weights for the conversion.
            tolerance: Stage distance within which tiles share a row or column.
            import_all_metadata: Store every tag of the first tile as a metadata
                column; if False only the mandatory position and size tags.
            change_origin: Use `origin` instead of (0, 0, 0) for the geometry.
            origin: Geometry origin override.
            change_spacing: Use `spacing` instead of the scale factors in the metadata.
            spacing: Geometry spacing override.
            importer: Image reader, a `TiffImageImporter` unless given; None
                makes any non-empty import fail.
            converter: Grayscale converter, a `LuminosityGrayscaleConverter`
                unless given; None makes a conversion fail.
            registry: Tag definitions, loaded from the package resources if None.
            cache: Parsed plan cache shared between runs.
            message_handler: Receives one status message per tile.
        """
        self.input_file = input_file
        self.data_container_name = data_container_name
        self.image_attribute_matrix_name = image_attribute_matrix_name
        self.convert_to_grayscale = convert_to_grayscale
        self.color_weights = tuple(color_weights)
        self.tolerance = tolerance
        self.import_all_metadata = import_all_metadata
        self.change_origin = change_origin
        self.origin = tuple(origin)
        self.change_spacing = change_spacing
        self.spacing = tuple(spacing)
        self.importer = TiffImageImporter() if importer is DEFAULT_COLLABORATOR else importer
        self.converter = LuminosityGrayscaleConverter() if converter is DEFAULT_COLLABORATOR else converter
        self.registry = registry if registry is not None else TagMappingRegistry.load()
        self.cache = cache if cache is not None else PlanCache()
        self.message_handler = message_handler
        self.parser = AxioDocumentParser(self.registry)

        self.data_container_array: Optional[DataContainerArray] = DataContainerArray()
        self.in_preflight = False
        self.error_code = 0
        self.error_message = ''
        self.file_was_read = False
        self.row_count = -1
        self.column_count = -1
        self.filename_list: List[str] = []
        self.tiles: List[TileBounds] = []

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def preflight(self, dca: Optional[DataContainerArray] = None) -> int:
        """Validate everything without reading pixel data. Returns the error code."""
        self.in_preflight = True
        try:
            self._use_data_container_array(dca)
            self.data_check()
        finally:
            self.in_preflight = False
        return self.error_code

    def execute(self, dca: Optional[DataContainerArray] = None) -> int:
        """Import the mosaic. Returns the error code."""
        self.in_preflight = False
        self._use_data_container_array(dca)
        self.data_check()
        if self.error_code < 0:
            return self.error_code
        self.notify_status_message('Complete')
        return self.error_code

    def _use_data_container_array(self, dca: Optional[DataContainerArray]):
        self.data_container_array = dca if dca is not None else DataContainerArray()

    # ------------------------------------------------------------------
    # Validation and import
    # ------------------------------------------------------------------

    def data_check(self):
        """Check the parameters, parse the metadata and build the data structure."""
        self.error_code = 0
        self.error_message = ''
        self.file_was_read = False
        self.row_count = -1
        self.column_count = -1
        self.filename_list = []
        self.tiles = []

        input_path = Path(self.input_file) if self.input_file else None
        if input_path is None:
            self.set_error(-387, f"{self.human_label} needs the Input File Set and it was not.")
            return
        if not input_path.is_file():
            self.set_error(-388, f"The input file does not exist: {self.input_file}")
            return

        dca = self.data_container_array
        if dca is None:
            self.set_error(-390, f"{self.human_label} needs a valid DataContainerArray")
            return
        if not self.data_container_name or dca.has_data_container(self.data_container_name):
            self.set_error(
                -391, f"The data container name '{self.data_container_name}' is empty or already in use"
            )
            return
        if self.tolerance < 0:
            error = InvalidToleranceError(f"Tolerance must not be negative, got {self.tolerance}")
            self.set_error(error.code, error.message)
            return

        try:
            plan = self.cache.get_or_parse(input_path, self.parser.parse_file)
        except ZeissImportError as e:
            logger.error("Could not parse Zeiss XML file")
            self.set_error(e.code, e.message)
            return
        except OSError as e:
            self.set_error(-389, f"Could not parse Zeiss XML file: {e}")
            return
        self.file_was_read = True

        container = dca.create_data_container(self.data_container_name)
        try:
            self._check_collaborators(plan)
            tiles = self._read_images(container, plan)
            shape = assign_grid_indices(tiles, self.tolerance)
        except ZeissImportError as e:
            self._discard_container(dca, container)
            self.set_error(e.code, e.message)
            return
        except Exception:
            self._discard_container(dca, container)
            raise

        self.tiles = tiles
        self.row_count = shape.row_count
        self.column_count = shape.column_count
        self.filename_list = [tile.filename for tile in tiles]

    def _discard_container(self, dca: DataContainerArray, container: DataContainer):
        if dca.get_data_container(self.data_container_name) is container:
            dca.remove_data_container(self.data_container_name)

    def _check_collaborators(self, plan: ImportPlan):
        if plan.image_count == 0:
            return
        if self.importer is None:
            raise MissingCollaboratorError(
                "Error trying to instantiate the 'ReadImage' filter which is needed to import the tile images."
            )
        if self.convert_to_grayscale and self.converter is None:
            raise MissingCollaboratorError(
                "Error trying to instantiate the 'RGBToGray' filter which is needed to convert the tile images."
            )

    def _read_images(self, container: DataContainer, plan: ImportPlan) -> List[TileBounds]:
        """Create the attribute matrices and import every tile in ascending order."""
        tiles = [replace(tile, row=None, col=None, image_data=None) for tile in plan.tiles]
        if plan.image_count == 0:
            return tiles

        first_tile = tiles[0]
        dims = (plan.tile_width, plan.tile_height, 1)
        spacing = self.spacing if self.change_spacing else (first_tile.spacing_x, first_tile.spacing_y, 1.0)
        origin = self.origin if self.change_origin else (0.0, 0.0, 0.0)
        container.geometry = ImageGeometry(dimensions=dims, spacing=tuple(spacing), origin=tuple(origin))

        tile_am = container.create_attribute_matrix(dims, self.image_attribute_matrix_name)
        meta_am = container.create_attribute_matrix(
            (plan.image_count,), self.image_attribute_matrix_name + META_DATA_SUFFIX
        )
        columns = self._create_meta_data_arrays(meta_am, plan.tile_sections[0][1], plan.image_count)

        for p, ((tag, section), tile) in enumerate(zip(plan.tile_sections, tiles)):
            self.notify_status_message(f"{self.human_label}: Importing file {p} of {plan.image_count}")
            self._add_meta_data(columns, section, p)
            tile.image_data = self._import_image(plan.base_filename, tile, tag)
            if self.convert_to_grayscale:
                tile.image_data = self._convert_to_grayscale(tile_am, plan.base_filename, tag)
        return tiles

    def _create_meta_data_arrays(self, meta_am: AttributeMatrix, section: TagSection,
                                 image_count: int) -> Dict[int, DataArray]:
        """One column per tag of the first tile, sized to the image count."""
        columns: Dict[int, DataArray] = {}
        for entry in section.entries():
            if not self.import_all_metadata and entry.tag_id not in MANDATORY_TILE_IDS:
                continue
            name = self.registry.name_for(entry.tag_id)
            array = entry.make_storage_array(name, image_count, allocate=not self.in_preflight)
            meta_am.add_array(array)
            columns[entry.tag_id] = array
        return columns

    def _add_meta_data(self, columns: Dict[int, DataArray], section: TagSection, index: int):
        if self.in_preflight:
            return
        for tag_id, array in columns.items():
            entry = section.get_entry(tag_id)
            if entry is not None:
                array.set_value(index, entry.value)
        extra = [tag_id for tag_id in section.tag_ids() if tag_id not in columns]
        if extra:
            logger.debug(f"Tile {index}: tags {extra} have no metadata column and were not stored")

    def _import_image(self, base_filename: str, tile: TileBounds, tag: str) -> DataArray:
        config = ImageImportConfig(
            input_file=tile.filename,
            data_container_name=self.data_container_name,
            attribute_matrix_name=self.image_attribute_matrix_name,
            data_array_name=tile_array_name(base_filename, tag),
        )
        try:
            self.importer.configure(config)
        except CollaboratorPropertyError as e:
            logger.warning(f"{self.human_label}: {e.message}. The sub-filter continues with its default value.")
        return self.importer.run(self.data_container_array, self.in_preflight)

    def _convert_to_grayscale(self, tile_am: AttributeMatrix, base_filename: str, tag: str) -> DataArray:
        """Convert a tile and put the result in place of the color array, under the same name."""
        array_name = tile_array_name(base_filename, tag)
        config = GrayscaleConfig(
            selected_array_path=DataArrayPath(self.data_container_name, self.image_attribute_matrix_name, array_name),
            color_weights=self.color_weights,
            output_array_name=GRAY_SCALE_TEMP_ARRAY_NAME,
        )
        try:
            self.converter.configure(config)
        except CollaboratorPropertyError as e:
            logger.warning(f"{self.human_label}: {e.message}. The sub-filter continues with its default value.")
        self.converter.run(self.data_container_array, self.in_preflight)

        if not tile_am.has_array(GRAY_SCALE_TEMP_ARRAY_NAME):
            raise ImageImportError(
                f"'{self.converter.name}' did not create '{GRAY_SCALE_TEMP_ARRAY_NAME}' for {array_name}"
            )
        tile_am.remove_array(array_name)
        gray = tile_am.remove_array(GRAY_SCALE_TEMP_ARRAY_NAME)
        gray.name = array_name
        return tile_am.add_array(gray)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def set_error(self, code: int, message: str):
        self.error_code = code
        self.error_message = message
        logger.error(f"{self.human_label} ({code}): {message}")

    def notify_status_message(self, message: str):
        logger.info(message)
        if self.message_handler is not None:
            self.message_handler(message)

    @property
    def montage_information(self) -> str:
        """One-line summary of the reconstructed mosaic."""
        if self.row_count < 0:
            return 'No montage information available'
        return (
            f"Tile Rows: {self.row_count}  Tile Columns: {self.column_count}  "
            f"Tile Count: {len(self.tiles)}"
        )

    def grid_layout(self) -> List[List[List[str]]]:
        """Tile tags by row and column of the last successful run."""
        if self.row_count < 0:
            return []
        return grid_layout(self.tiles, GridShape(self.row_count, self.column_count))

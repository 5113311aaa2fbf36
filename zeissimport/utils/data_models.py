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
Data Models for the Zeiss Import ToolKit.

This module defines strongly-typed data classes shared by the parsers, the grid
reconstructor and the import filter. They give the pipeline stages clear
contracts instead of loosely shaped dictionaries.

Domain model classes:
    TagSection: Decoded entries of one <Tags> block, keyed by tag id
    TileBounds: Position, size and spacing of one tile of the mosaic
    GridShape: Row and column counts of a reconstructed mosaic
    ImportPlan: Everything a document parse produces

Collaborator configuration classes (*Config suffix):
    ImageImportConfig: What the image reader should read and where to put it
    GrayscaleConfig: What the grayscale converter should convert
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple
from zeissimport.utils.data_structure import DataArray, DataArrayPath
from zeissimport.utils.metadata_entries import MetadataEntry

DEFAULT_COLOR_WEIGHTS: Tuple[float, float, float] = (0.2125, 0.7154, 0.0721)


# ============================================================================
# Domain model classes
# ============================================================================

class TagSection:
    """
    Decoded entries of one `<Tags>` block.

    Entries are keyed by tag id; ids are unique within a section. Ids that were
    present in the XML but unknown to the registry are kept in `unknown_ids`
    for diagnostics only.
    """

    def __init__(self):
        self._entries: Dict[int, MetadataEntry] = {}
        self.unknown_ids: Set[int] = set()

    def add_entry(self, entry: MetadataEntry):
        self._entries[entry.tag_id] = entry

    def get_entry(self, tag_id: int) -> Optional[MetadataEntry]:
        return self._entries.get(tag_id)

    def get_value(self, tag_id: int, default: Any = None) -> Any:
        entry = self._entries.get(tag_id)
        return entry.value if entry is not None else default

    def tag_ids(self) -> List[int]:
        """Tag ids in ascending order."""
        return sorted(self._entries)

    def entries(self) -> List[MetadataEntry]:
        return [self._entries[tag_id] for tag_id in self.tag_ids()]

    def __contains__(self, tag_id) -> bool:
        return tag_id in self._entries

    def __len__(self):
        return len(self._entries)

    def __iter__(self) -> Iterator[MetadataEntry]:
        return iter(self.entries())

    def __repr__(self):
        return f"TagSection(entries={len(self._entries)}, unknown={len(self.unknown_ids)})"


@dataclass
class TileBounds:
    """
    Position and size of one tile.

    `row` and `col` stay None until the grid reconstructor runs over the full
    set of tiles.

    Attributes:
        filename: Absolute path of the tile image.
        tile_tag: Element name of the tile in the XML (e.g. 'p07').
        start_x: Pixel start of the tile within the mosaic along x.
        start_y: Pixel start of the tile within the mosaic along y.
        size_x: Tile width in pixels.
        size_y: Tile height in pixels.
        stage_x: Stage start along x, used for grid clustering.
        stage_y: Stage start along y, used for grid clustering.
        start_c: Channel index.
        start_s: Scene index.
        start_b: Block index.
        start_m: Mosaic index.
        spacing_x: Physical pixel size along x.
        spacing_y: Physical pixel size along y.
        image_data: The imported pixel array, None until imported.
    """
    filename: str
    tile_tag: str
    start_x: int
    start_y: int
    size_x: int
    size_y: int
    stage_x: int
    stage_y: int
    start_c: int = 0
    start_s: int = 0
    start_b: int = 0
    start_m: int = 0
    row: Optional[int] = None
    col: Optional[int] = None
    spacing_x: float = 1.0
    spacing_y: float = 1.0
    image_data: Optional[DataArray] = field(default=None, repr=False)


@dataclass(frozen=True)
class GridShape:
    """Row and column counts of a reconstructed mosaic."""
    row_count: int
    column_count: int


@dataclass
class ImportPlan:
    """
    The result of parsing one `_meta.xml` document.

    Attributes:
        source: Path of the parsed file.
        global_section: Entries of the <ROOT><Tags> block.
        image_count: Number of tiles declared by the document.
        base_filename: Image file name all tile file names derive from.
        tile_sections: (tile tag, section) pairs in ascending tile order.
        tiles: One TileBounds per tile, in the same order.
        tile_width: Pixel width shared by all tiles (0 when there are none).
        tile_height: Pixel height shared by all tiles (0 when there are none).
    """
    source: str
    global_section: TagSection
    image_count: int
    base_filename: str
    tile_sections: List[Tuple[str, TagSection]] = field(default_factory=list)
    tiles: List[TileBounds] = field(default_factory=list)
    tile_width: int = 0
    tile_height: int = 0

    @property
    def filenames(self) -> List[str]:
        return [tile.filename for tile in self.tiles]


# ============================================================================
# Collaborator configuration classes
# ============================================================================

@dataclass(frozen=True)
class ImageImportConfig:
    """
    Configuration handed to an image reader for one tile.

    Attributes:
        input_file: Absolute path of the image file.
        data_container_name: Container receiving the array.
        attribute_matrix_name: Attribute matrix receiving the array.
        data_array_name: Name of the array to create.
    """
    input_file: str
    data_container_name: str
    attribute_matrix_name: str
    data_array_name: str

    @property
    def array_path(self) -> DataArrayPath:
        return DataArrayPath(self.data_container_name, self.attribute_matrix_name, self.data_array_name)


@dataclass(frozen=True)
class GrayscaleConfig:
    """
    Configuration handed to a grayscale converter for one tile.

    Attributes:
        selected_array_path: The color array to convert.
        color_weights: Red, green and blue weights.
        output_array_name: Name of the array to create next to the source.
    """
    selected_array_path: DataArrayPath
    color_weights: Tuple[float, ...] = DEFAULT_COLOR_WEIGHTS
    output_array_name: str = 'gray_scale_temp'

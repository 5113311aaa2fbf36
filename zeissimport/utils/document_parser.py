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
AxioVision `_meta.xml` Document Parser.

Walks a metadata document of the form

    <ROOT>
      <Tags> ... global tags: image count, base file name ... </Tags>
      <p0><Tags> ... tile 0 ... </Tags></p0>
      <p1><Tags> ... tile 1 ... </Tags></p1>
      ...
    </ROOT>

and turns it into an `ImportPlan`: the decoded global section, one decoded
section per tile in ascending order, and one `TileBounds` per tile. Any problem
aborts the whole parse; no partial plan is ever returned.
"""

import re
import logging
from pathlib import Path
from typing import Optional, Union
from lxml import etree
from zeissimport.utils.data_models import ImportPlan, TagSection, TileBounds
from zeissimport.utils.exceptions import (
    MalformedCountError, MalformedDocumentError, MalformedInputError, MalformedTileSectionError,
    MissingMandatoryTagError, MissingRootTagsError, MissingTileElementError, MissingTileTagsError,
    TileCountMismatchError
)
from zeissimport.utils.path_helpers import tile_image_path, tile_tag, tile_tag_width
from zeissimport.utils.tags_section_parser import TagsSectionParser
import zeissimport.utils.tag_mapping as tm

logger = logging.getLogger(__name__)

TAGS_ELEMENT = 'Tags'
TILE_ELEMENT_PATTERN = re.compile(r'^p\d+$')


class AxioDocumentParser:
    """Parses AxioVision metadata documents into import plans."""

    def __init__(self, registry: Optional[tm.TagMappingRegistry] = None, strict: bool = False):
        self.registry = registry if registry is not None else tm.TagMappingRegistry.load()
        self.section_parser = TagsSectionParser(self.registry, strict=strict)

    def parse_file(self, xml_path: Union[str, Path]) -> ImportPlan:
        """Read and parse a metadata file."""
        xml_path = Path(xml_path)
        with open(xml_path, 'rb') as f:
            xml_bytes = f.read()
        return self.parse(xml_bytes, xml_path)

    def parse(self, xml_bytes: bytes, source: Union[str, Path]) -> ImportPlan:
        """
        Parse a metadata document.

        Args:
            xml_bytes: The raw document.
            source: Path of the document; tile images are resolved next to it.

        Returns:
            The import plan.

        Raises:
            MalformedInputError: Or one of its subclasses, for any defect.
        """
        try:
            root = etree.fromstring(xml_bytes, etree.XMLParser(remove_blank_text=True))
        except etree.XMLSyntaxError as e:
            line, column = e.position if e.position else (0, 0)
            raise MalformedDocumentError(str(e.msg), line, column) from e

        tags = root.find(TAGS_ELEMENT)
        if tags is None:
            raise MissingRootTagsError(
                "Could not find the <ROOT><Tags> element. Aborting Parsing. Is the file a Zeiss _meta.xml file"
            )

        global_section = self.section_parser.parse(tags, context='<ROOT><Tags>')
        for tag_id in tm.MANDATORY_GLOBAL_IDS:
            if tag_id not in global_section:
                raise MissingMandatoryTagError(
                    f"<ROOT><Tags> is missing the mandatory tag {tag_id} ({self.registry.name_for(tag_id)})"
                )

        image_count = global_section.get_value(tm.IMAGE_COUNT_RAW_ID)
        if image_count < 0:
            raise MalformedInputError(f"Image count must not be negative, got {image_count}")
        base_filename = global_section.get_value(tm.FILENAME_ID)

        plan = ImportPlan(
            source=str(source),
            global_section=global_section,
            image_count=image_count,
            base_filename=base_filename,
        )

        width = tile_tag_width(image_count)
        for p in range(image_count):
            tag = tile_tag(p, width)
            photo = root.find(tag)
            if photo is None:
                raise MissingTileElementError(p, tag)
            photo_tags = photo.find(TAGS_ELEMENT)
            if photo_tags is None:
                raise MissingTileTagsError(p, tag)

            try:
                section = self.section_parser.parse(photo_tags, context=f'<ROOT><{tag}><Tags>')
            except MalformedCountError as e:
                raise MalformedTileSectionError(p, tag, e.message) from e
            tile = self._tile_bounds(section, p, tag, tile_image_path(source, base_filename, tag))

            if p == 0:
                plan.tile_width = tile.size_x
                plan.tile_height = tile.size_y
            elif (tile.size_x, tile.size_y) != (plan.tile_width, plan.tile_height):
                raise MalformedInputError(
                    f"Tile {p} ({tag}) is {tile.size_x}x{tile.size_y} pixels but the first tile is "
                    f"{plan.tile_width}x{plan.tile_height}; all tiles must share their dimensions"
                )

            plan.tile_sections.append((tag, section))
            plan.tiles.append(tile)

        found = sum(
            1 for child in root
            if isinstance(child.tag, str) and TILE_ELEMENT_PATTERN.match(child.tag)
        )
        if found != image_count:
            raise TileCountMismatchError(
                f"The document declares {image_count} images but contains {found} <pNNN> elements"
            )

        logger.debug(f"Parsed {image_count} tile sections from {source}")
        return plan

    def _tile_bounds(self, section: TagSection, index: int, tag: str, filename: str) -> TileBounds:
        """Build the bounds of one tile from its section."""
        for tag_id in tm.MANDATORY_TILE_IDS:
            if tag_id not in section:
                raise MissingMandatoryTagError(
                    f"Tile {index} (<ROOT><{tag}><Tags>) is missing the mandatory tag "
                    f"{tag_id} ({self.registry.name_for(tag_id)})",
                    index=index,
                )

        size_x = section.get_value(tm.IMAGE_WIDTH_PIXEL_ID)
        size_y = section.get_value(tm.IMAGE_HEIGHT_PIXEL_ID)
        if size_x <= 0 or size_y <= 0:
            raise MalformedInputError(f"Tile {index} ({tag}) has invalid pixel dimensions {size_x}x{size_y}")

        return TileBounds(
            filename=filename,
            tile_tag=tag,
            start_x=section.get_value(tm.IMAGE_POSITION_X_ID),
            start_y=section.get_value(tm.IMAGE_POSITION_Y_ID),
            size_x=size_x,
            size_y=size_y,
            stage_x=section.get_value(tm.STAGE_POSITION_X_ID),
            stage_y=section.get_value(tm.STAGE_POSITION_Y_ID),
            start_c=section.get_value(tm.IMAGE_INDEX_C_ID, 0),
            start_s=section.get_value(tm.IMAGE_INDEX_S_ID, 0),
            start_b=section.get_value(tm.IMAGE_INDEX_B_ID, 0),
            start_m=section.get_value(tm.IMAGE_INDEX_M_ID, 0),
            spacing_x=section.get_value(tm.SCALE_FACTOR_X_ID),
            spacing_y=section.get_value(tm.SCALE_FACTOR_Y_ID),
        )

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
AxioVision Tag Mapping Registry.

Maps the numeric tag ids used in Zeiss AxioVision `_meta.xml` files to a tag
name and the entry type that decodes its value. The table is loaded from the
`axio_tag_lookup.json` resource once and is read-only afterwards; callers
construct a registry and pass it to the parsers that need it.

Unknown ids are not an error: the format carries vendor tags this package does
not know about, and lookups for them simply return None.
"""

import json
import logging
from dataclasses import dataclass
from importlib import resources
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Type
from zeissimport.utils.metadata_entries import (
    ENTRY_TYPES, Float32Entry, Int32Entry, MetadataEntry, StringEntry
)

logger = logging.getLogger(__name__)

# Global <ROOT><Tags> ids
IMAGE_COUNT_RAW_ID = 517
FILENAME_ID = 1548

# Per-tile <pNNN><Tags> ids
IMAGE_WIDTH_PIXEL_ID = 515
IMAGE_HEIGHT_PIXEL_ID = 516
SCALE_FACTOR_X_ID = 769
SCALE_FACTOR_Y_ID = 772
IMAGE_POSITION_X_ID = 2073
IMAGE_POSITION_Y_ID = 2074
STAGE_POSITION_X_ID = 2076
STAGE_POSITION_Y_ID = 2077
IMAGE_TILE_INDEX_ID = 2315
IMAGE_INDEX_C_ID = 2318
IMAGE_INDEX_S_ID = 2319
IMAGE_INDEX_B_ID = 2320
IMAGE_INDEX_M_ID = 2321

MANDATORY_GLOBAL_IDS = (IMAGE_COUNT_RAW_ID, FILENAME_ID)
MANDATORY_TILE_IDS = (
    IMAGE_WIDTH_PIXEL_ID,
    IMAGE_HEIGHT_PIXEL_ID,
    IMAGE_POSITION_X_ID,
    IMAGE_POSITION_Y_ID,
    STAGE_POSITION_X_ID,
    STAGE_POSITION_Y_ID,
    SCALE_FACTOR_X_ID,
    SCALE_FACTOR_Y_ID,
)


@dataclass(frozen=True)
class TagDefinition:
    """Name and value type of one known tag id."""
    tag_id: int
    name: str
    entry_type: Type[MetadataEntry]


# Used when the lookup file cannot be read
_FALLBACK_DEFINITIONS = {
    IMAGE_COUNT_RAW_ID: ('ImageCountRaw', Int32Entry),
    FILENAME_ID: ('Filename', StringEntry),
    IMAGE_WIDTH_PIXEL_ID: ('ImageWidthPixel', Int32Entry),
    IMAGE_HEIGHT_PIXEL_ID: ('ImageHeightPixel', Int32Entry),
    SCALE_FACTOR_X_ID: ('ScaleFactorForX', Float32Entry),
    SCALE_FACTOR_Y_ID: ('ScaleFactorForY', Float32Entry),
    IMAGE_POSITION_X_ID: ('ImagePositionX', Int32Entry),
    IMAGE_POSITION_Y_ID: ('ImagePositionY', Int32Entry),
    STAGE_POSITION_X_ID: ('StagePositionX', Int32Entry),
    STAGE_POSITION_Y_ID: ('StagePositionY', Int32Entry),
}


def _load_axio_tag_lookup() -> Dict[int, TagDefinition]:
    """
    Load tag definitions from the JSON lookup file.

    Returns:
        Dictionary mapping tag ids to their definitions.
    """
    lookup_file = resources.files('zeissimport.resources.axio').joinpath('axio_tag_lookup.json')
    try:
        with lookup_file.open('r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.warning(f"AxioVision tag lookup file not found: {lookup_file}")
        logger.warning("Falling back to minimal tag definitions")
        return {
            tag_id: TagDefinition(tag_id, name, entry_type)
            for tag_id, (name, entry_type) in _FALLBACK_DEFINITIONS.items()
        }

    definitions = {}
    for tag_id_str, tag_info in data.get('tags', {}).items():
        tag_id = int(tag_id_str)
        type_name = tag_info.get('type', 'string')
        entry_type = ENTRY_TYPES.get(type_name)
        if entry_type is None:
            logger.warning(f"Tag {tag_id} has unsupported type '{type_name}', treating it as string")
            entry_type = StringEntry
        definitions[tag_id] = TagDefinition(tag_id, tag_info.get('name', f'UnknownTag ({tag_id})'), entry_type)
    return definitions


class TagMappingRegistry:
    """Read-only lookup of tag id to tag definition."""

    def __init__(self, definitions: Mapping[int, TagDefinition]):
        self._definitions = MappingProxyType(dict(definitions))

    @classmethod
    def load(cls) -> 'TagMappingRegistry':
        """Build a registry from the packaged lookup file."""
        return cls(_load_axio_tag_lookup())

    def definition_for(self, tag_id: int) -> Optional[TagDefinition]:
        return self._definitions.get(tag_id)

    def entry_for(self, tag_id: int, raw_text: str) -> Optional[MetadataEntry]:
        """
        Decode `raw_text` with the entry type registered for `tag_id`.

        Returns:
            The decoded entry, or None when the id is unknown.

        Raises:
            MetadataParseError: If the id is known but the text does not parse.
        """
        definition = self._definitions.get(tag_id)
        if definition is None:
            return None
        return definition.entry_type.from_text(tag_id, raw_text)

    def name_for(self, tag_id: int) -> str:
        definition = self._definitions.get(tag_id)
        return definition.name if definition else f'UnknownTag ({tag_id})'

    def __contains__(self, tag_id) -> bool:
        return tag_id in self._definitions

    def __len__(self):
        return len(self._definitions)

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
File and Path Utilities for ZITK.

This module provides helper functions for deriving the zero-padded tile
element names and the per-tile image file names and array names from the
base file name stored in the metadata.
"""
import re
import logging
from pathlib import Path
from typing import Tuple, Union

logger = logging.getLogger(__name__)

META_XML_SUFFIX = '_meta.xml'
MAX_TILE_TAG_WIDTH = 5


def split_image_name(image_name: str) -> Tuple[str, str]:
    """
    Split an image file name into its base name and extension.

    Directory parts (either separator) are dropped; the base name is everything
    before the last dot, the extension everything after it without the dot.

    Example:
        >>> split_image_name('C:\\\\data\\\\sample.run1.tif')
        ('sample.run1', 'tif')
    """
    name = re.split(r'[\\/]', image_name)[-1]
    stem, dot, suffix = name.rpartition('.')
    if not dot:
        return name, ''
    return stem, suffix


def tile_tag_width(image_count: int) -> int:
    """
    Number of digits used to zero-pad tile element names.

    The width is the number of digits of the largest tile index
    (`image_count - 1`), at least 1 and at most 5.
    """
    if image_count <= 1:
        return 1
    return min(len(str(image_count - 1)), MAX_TILE_TAG_WIDTH)


def tile_tag(index: int, width: int) -> str:
    """Element name of a tile, e.g. tile_tag(7, 2) == 'p07'."""
    return f"p{index:0{width}d}"


def tile_array_name(image_name: str, tag: str) -> str:
    """Name of the data array that receives a tile's pixels."""
    stem, _ = split_image_name(image_name)
    return f"{stem}_{tag}"


def tile_image_path(xml_path: Union[str, Path], image_name: str, tag: str) -> str:
    """
    Absolute path of a tile image.

    Tile images live next to the metadata file and are named
    `{base name}_{tile tag}.{extension}`.
    """
    stem, suffix = split_image_name(image_name)
    filename = f"{stem}_{tag}.{suffix}" if suffix else f"{stem}_{tag}"
    return str(Path(xml_path).resolve().parent / filename)

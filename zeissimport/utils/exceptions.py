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
Custom Exceptions Module.

A centralized module for custom exceptions used throughout the Zeiss Import
ToolKit. Every error carries a stable negative numeric code next to its
human-readable message so that a host inspecting codes keeps working:
-387..-392 for setup errors and -700xx for parse and collaborator errors.
"""

class ZeissImportError(Exception):
    """Base exception carrying a stable negative error code."""
    code = -90000

    def __init__(self, message: str, code=None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self):
        return f"[{self.code}] {self.message}"

class ConfigurationError(ZeissImportError):
    """Missing or invalid input file, container or other setup problem."""
    code = -387

class MissingCollaboratorError(ConfigurationError):
    """A required image reader or grayscale converter was not provided."""
    code = -70009

class InvalidToleranceError(ConfigurationError):
    """The grid tolerance is negative."""
    code = -392

class MalformedInputError(ZeissImportError):
    """The metadata document violates the tag schema."""
    code = -70004

class MalformedDocumentError(MalformedInputError):
    """The XML itself could not be parsed."""
    code = -70000

    def __init__(self, message: str, line: int = 0, column: int = 0):
        super().__init__(f"Parse error at line {line}, column {column}:\n{message}")
        self.line = line
        self.column = column

class MalformedCountError(MalformedInputError):
    """A <Tags> section has no usable <Count> element."""
    code = -70001

class MalformedTileSectionError(MalformedInputError):
    """A per-tile <Tags> section could not be read."""
    code = -70004

    def __init__(self, index: int, tile_tag: str, reason: str):
        super().__init__(f"Tile {index} (<ROOT><{tile_tag}><Tags>): {reason}")
        self.index = index

class MissingRootTagsError(MalformedInputError):
    """The document has no <ROOT><Tags> element."""
    code = -70001

class MissingTileElementError(MalformedInputError):
    """A <pNNN> element announced by the image count is missing."""
    code = -70002

    def __init__(self, index: int, tile_tag: str):
        super().__init__(
            f"Could not find the <ROOT><{tile_tag}> element. Aborting Parsing. "
            "Is the file a Zeiss _meta.xml file"
        )
        self.index = index

class MissingTileTagsError(MalformedInputError):
    """A <pNNN> element has no nested <Tags> element."""
    code = -70003

    def __init__(self, index: int, tile_tag: str):
        super().__init__(
            f"Could not find the <ROOT><{tile_tag}><Tags> element. Aborting Parsing. "
            "Is the file a Zeiss _meta.xml file"
        )
        self.index = index

class TileCountMismatchError(MalformedInputError):
    """The number of <pNNN> elements differs from the declared image count."""
    code = -70010

class MissingMandatoryTagError(MalformedInputError):
    """A mandatory tag id is absent from a global or per-tile section."""
    code = -70011

    def __init__(self, message: str, index=None):
        super().__init__(message)
        self.index = index

class CollaboratorPropertyError(ZeissImportError):
    """A collaborator rejected one of its configuration properties."""
    code = -70005

class GeometryError(ZeissImportError):
    """A data container does not carry the geometry an operation needs."""
    code = -70012

class ImageImportError(ZeissImportError):
    """A tile image could not be read into the destination structure."""
    code = -70013

class DataStructureError(ZeissImportError, ValueError):
    """An array, attribute matrix or container does not fit the data structure."""
    code = -70014

class MetadataParseError(ValueError):
    """Raw tag text could not be converted into the entry's value type."""

    def __init__(self, tag_id: int, raw_text: str, type_name: str):
        super().__init__(f"Tag {tag_id}: cannot convert '{raw_text}' to {type_name}")
        self.tag_id = tag_id
        self.raw_text = raw_text
        self.type_name = type_name

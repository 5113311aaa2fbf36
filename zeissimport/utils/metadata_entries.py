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
Typed Metadata Entries.

Each value found in a `<Tags>` section is decoded into one of the entry types
below. An entry knows how to parse itself from the raw element text, how to
render its value back to text, and how to create a correctly typed storage
array for a column of such values.

Classes:
    MetadataEntry: Abstract base for all entry types.
    Int32Entry, Int64Entry: Signed integer entries with range checking.
    Float32Entry, Float64Entry: Floating point entries.
    StringEntry: Free text entries.
"""
import math
import numpy as np
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Type
from zeissimport.utils.data_structure import DataArray
from zeissimport.utils.exceptions import MetadataParseError


@dataclass(frozen=True)
class MetadataEntry(ABC):
    """
    A single decoded tag value.

    Attributes:
        tag_id: The numeric tag id from the `I{c}` element.
        raw_text: The untouched text of the `V{c}` element.
        value: The decoded value.
    """
    tag_id: int
    raw_text: str
    value: Any

    type_name: ClassVar[str] = 'abstract'
    dtype: ClassVar[Any] = object

    @classmethod
    def from_text(cls, tag_id: int, raw_text: str) -> 'MetadataEntry':
        """
        Decode raw text into an entry.

        Raises:
            MetadataParseError: If the text is not a valid value of this type.
        """
        return cls(tag_id=tag_id, raw_text=raw_text, value=cls._convert(tag_id, raw_text))

    @classmethod
    @abstractmethod
    def _convert(cls, tag_id: int, raw_text: str) -> Any:
        ...

    def to_text(self) -> str:
        return str(self.value)

    def make_storage_array(self, name: str, length: int, allocate: bool = True) -> DataArray:
        """Create an empty array able to hold `length` values of this entry's type."""
        return DataArray(name, length, (1,), self.dtype, allocate=allocate)


class _IntegerEntry(MetadataEntry):
    bits: ClassVar[int] = 32

    @classmethod
    def _convert(cls, tag_id: int, raw_text: str) -> int:
        try:
            value = int(raw_text.strip(), 10)
        except ValueError:
            raise MetadataParseError(tag_id, raw_text, cls.type_name) from None
        limit = 1 << (cls.bits - 1)
        if not -limit <= value < limit:
            raise MetadataParseError(tag_id, raw_text, cls.type_name)
        return value


class _FloatEntry(MetadataEntry):

    @classmethod
    def _convert(cls, tag_id: int, raw_text: str) -> float:
        try:
            value = float(raw_text.strip())
        except ValueError:
            raise MetadataParseError(tag_id, raw_text, cls.type_name) from None
        if math.isfinite(value) and abs(value) > np.finfo(cls.dtype).max:
            raise MetadataParseError(tag_id, raw_text, cls.type_name)
        return value

    def to_text(self) -> str:
        return repr(float(self.value))


@dataclass(frozen=True)
class Int32Entry(_IntegerEntry):
    type_name: ClassVar[str] = 'int32'
    dtype: ClassVar[Any] = np.int32
    bits: ClassVar[int] = 32


@dataclass(frozen=True)
class Int64Entry(_IntegerEntry):
    type_name: ClassVar[str] = 'int64'
    dtype: ClassVar[Any] = np.int64
    bits: ClassVar[int] = 64


@dataclass(frozen=True)
class Float32Entry(_FloatEntry):
    type_name: ClassVar[str] = 'float32'
    dtype: ClassVar[Any] = np.float32


@dataclass(frozen=True)
class Float64Entry(_FloatEntry):
    type_name: ClassVar[str] = 'float64'
    dtype: ClassVar[Any] = np.float64


@dataclass(frozen=True)
class StringEntry(MetadataEntry):
    type_name: ClassVar[str] = 'string'
    dtype: ClassVar[Any] = object

    @classmethod
    def _convert(cls, tag_id: int, raw_text: str) -> str:
        return raw_text


# Type names used in the tag lookup file
ENTRY_TYPES: Dict[str, Type[MetadataEntry]] = {
    Int32Entry.type_name: Int32Entry,
    Int64Entry.type_name: Int64Entry,
    Float32Entry.type_name: Float32Entry,
    Float64Entry.type_name: Float64Entry,
    StringEntry.type_name: StringEntry,
}

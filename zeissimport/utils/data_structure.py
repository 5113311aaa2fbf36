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
In-Memory Columnar Data Structure.

This module holds the destination of an import: a `DataContainerArray` of named
`DataContainer` objects, each owning an optional geometry and any number of
`AttributeMatrix` objects. An attribute matrix is a set of numpy-backed
`DataArray` columns that all share the matrix's tuple count.

Arrays may be created unallocated (preflight) so that names, types and shapes
can be validated without touching pixel data.

Classes:
    GeometryKind: Closed set of geometry variants.
    ImageGeometry: Regular grid geometry (dimensions, spacing, origin).
    DataArray: A named, typed, tuple-indexed numpy array.
    AttributeMatrix: A named group of arrays sharing tuple dimensions.
    DataContainer: A named group of attribute matrices plus a geometry.
    DataContainerArray: The top-level collection of data containers.
"""
import logging
import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union
from zeissimport.utils.exceptions import DataStructureError, GeometryError

logger = logging.getLogger(__name__)


class GeometryKind(Enum):
    """The geometry variants a data container can carry."""
    UNKNOWN = 0
    IMAGE = 1
    RECT_GRID = 2
    VERTEX = 3
    EDGE = 4


@dataclass
class ImageGeometry:
    """
    Regular grid geometry of an image data container.

    Attributes:
        dimensions: Number of cells along x, y and z.
        spacing: Physical size of one cell along x, y and z.
        origin: Physical coordinates of the first cell.
    """
    dimensions: Tuple[int, int, int]
    spacing: Tuple[float, float, float] = (1.0, 1.0, 1.0)
    origin: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    kind: GeometryKind = GeometryKind.IMAGE


class DataArray:
    """A named array with `tuple_count` tuples of `component_dims` components."""

    def __init__(self, name: str, tuple_count: int, component_dims: Sequence[int] = (1,),
                 dtype: Union[str, np.dtype, type] = np.float32, allocate: bool = True):
        if tuple_count < 0:
            raise DataStructureError(f"Tuple count must not be negative, got {tuple_count}")
        self.name = name
        self.tuple_count = int(tuple_count)
        self.component_dims = tuple(int(d) for d in component_dims)
        self.dtype = np.dtype(dtype)
        self.data: Optional[np.ndarray] = None
        if allocate:
            self.allocate()

    @property
    def shape(self) -> Tuple[int, ...]:
        if self.component_dims == (1,):
            return (self.tuple_count,)
        return (self.tuple_count,) + self.component_dims

    @property
    def number_of_components(self) -> int:
        return int(np.prod(self.component_dims))

    @property
    def is_allocated(self) -> bool:
        return self.data is not None

    def allocate(self):
        """Allocate zero-filled storage (empty strings for object arrays)."""
        if self.dtype == np.dtype(object):
            self.data = np.full(self.shape, '', dtype=object)
        else:
            self.data = np.zeros(self.shape, dtype=self.dtype)

    def set_value(self, index: int, value):
        if self.data is None:
            raise RuntimeError(f"Array '{self.name}' is not allocated")
        self.data[index] = value

    def get_value(self, index: int):
        if self.data is None:
            raise RuntimeError(f"Array '{self.name}' is not allocated")
        return self.data[index]

    def __repr__(self):
        state = 'allocated' if self.is_allocated else 'unallocated'
        return f"DataArray(name={self.name!r}, shape={self.shape}, dtype={self.dtype}, {state})"


class AttributeMatrix:
    """A group of arrays that all have the same number of tuples."""

    def __init__(self, name: str, tuple_dims: Sequence[int]):
        self.name = name
        self.tuple_dims = tuple(int(d) for d in tuple_dims)
        self._arrays: Dict[str, DataArray] = {}

    @property
    def tuple_count(self) -> int:
        return int(np.prod(self.tuple_dims)) if self.tuple_dims else 0

    def add_array(self, array: DataArray) -> DataArray:
        if array.tuple_count != self.tuple_count:
            raise DataStructureError(
                f"Array '{array.name}' has {array.tuple_count} tuples but attribute matrix "
                f"'{self.name}' expects {self.tuple_count}"
            )
        self._arrays[array.name] = array
        return array

    def remove_array(self, name: str) -> Optional[DataArray]:
        return self._arrays.pop(name, None)

    def get_array(self, name: str) -> Optional[DataArray]:
        return self._arrays.get(name)

    def has_array(self, name: str) -> bool:
        return name in self._arrays

    def array_names(self) -> List[str]:
        return list(self._arrays.keys())

    def __len__(self):
        return len(self._arrays)


class DataContainer:
    """A named collection of attribute matrices with an optional geometry."""

    def __init__(self, name: str, geometry: Optional[ImageGeometry] = None):
        self.name = name
        self.geometry = geometry
        self._matrices: Dict[str, AttributeMatrix] = {}

    @property
    def geometry_kind(self) -> GeometryKind:
        return self.geometry.kind if self.geometry is not None else GeometryKind.UNKNOWN

    def create_attribute_matrix(self, tuple_dims: Sequence[int], name: str) -> AttributeMatrix:
        if name in self._matrices:
            raise DataStructureError(f"Attribute matrix '{name}' already exists in '{self.name}'")
        matrix = AttributeMatrix(name, tuple_dims)
        self._matrices[name] = matrix
        logger.debug(f"Created attribute matrix '{self.name}/{name}' with tuple dims {matrix.tuple_dims}")
        return matrix

    def get_attribute_matrix(self, name: str) -> Optional[AttributeMatrix]:
        return self._matrices.get(name)

    def remove_attribute_matrix(self, name: str) -> Optional[AttributeMatrix]:
        return self._matrices.pop(name, None)

    def attribute_matrix_names(self) -> List[str]:
        return list(self._matrices.keys())


class DataContainerArray:
    """Top-level collection of data containers."""

    def __init__(self):
        self._containers: Dict[str, DataContainer] = {}

    def create_data_container(self, name: str) -> DataContainer:
        if not name:
            raise DataStructureError("Data container name must not be empty")
        if name in self._containers:
            raise DataStructureError(f"Data container '{name}' already exists")
        container = DataContainer(name)
        self._containers[name] = container
        return container

    def get_data_container(self, name: str) -> Optional[DataContainer]:
        return self._containers.get(name)

    def has_data_container(self, name: str) -> bool:
        return name in self._containers

    def remove_data_container(self, name: str) -> Optional[DataContainer]:
        return self._containers.pop(name, None)

    def get_array(self, path: 'DataArrayPath') -> Optional[DataArray]:
        """Resolve a container/matrix/array path, returning None if any part is missing."""
        container = self.get_data_container(path.data_container_name)
        if container is None:
            return None
        matrix = container.get_attribute_matrix(path.attribute_matrix_name)
        if matrix is None:
            return None
        return matrix.get_array(path.data_array_name)

    def data_container_names(self) -> List[str]:
        return list(self._containers.keys())


@dataclass(frozen=True)
class DataArrayPath:
    """Address of an array: container / attribute matrix / array name."""
    data_container_name: str
    attribute_matrix_name: str
    data_array_name: str

    def __str__(self):
        return f"{self.data_container_name}/{self.attribute_matrix_name}/{self.data_array_name}"


def require_image_geometry(container: DataContainer) -> ImageGeometry:
    """Return the container's image geometry or raise GeometryError."""
    if container.geometry_kind is not GeometryKind.IMAGE:
        raise GeometryError(
            f"Data container '{container.name}' requires an image geometry, "
            f"found {container.geometry_kind.name}"
        )
    return container.geometry

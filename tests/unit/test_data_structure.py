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
Unit tests for the in-memory columnar data structure and the data models.
"""

import numpy as np
import pytest
from zeissimport.utils.data_models import TagSection
from zeissimport.utils.data_structure import (
    DataArray, DataArrayPath, DataContainer, DataContainerArray, GeometryKind, ImageGeometry,
    require_image_geometry
)
from zeissimport.utils.exceptions import GeometryError
from zeissimport.utils.metadata_entries import Int32Entry, StringEntry


@pytest.mark.unit
class TestDataArray:
    """Test DataArray shapes and storage."""

    def test_scalar_components(self):
        array = DataArray('a', 5, (1,), np.uint16)
        assert array.shape == (5,)
        assert array.number_of_components == 1
        assert array.data.dtype == np.uint16

    def test_multi_component(self):
        array = DataArray('rgb', 48, (3,), np.uint8, allocate=False)
        assert array.shape == (48, 3)
        assert array.number_of_components == 3
        assert not array.is_allocated

    def test_set_and_get(self):
        array = DataArray('a', 3, (1,), np.int32)
        array.set_value(1, 42)
        assert array.get_value(1) == 42

    def test_unallocated_access(self):
        array = DataArray('a', 3, allocate=False)
        with pytest.raises(RuntimeError):
            array.set_value(0, 1)

    def test_negative_tuple_count(self):
        with pytest.raises(ValueError):
            DataArray('a', -1)


@pytest.mark.unit
class TestContainers:
    """Test attribute matrices, containers and the container array."""

    def test_attribute_matrix_requires_matching_tuples(self):
        container = DataContainer('c')
        matrix = container.create_attribute_matrix((8, 6, 1), 'Tile AttributeMatrix')
        assert matrix.tuple_count == 48

        matrix.add_array(DataArray('ok', 48))
        with pytest.raises(ValueError):
            matrix.add_array(DataArray('bad', 47))
        assert matrix.array_names() == ['ok']

    def test_duplicate_attribute_matrix(self):
        container = DataContainer('c')
        container.create_attribute_matrix((1,), 'm')
        with pytest.raises(ValueError):
            container.create_attribute_matrix((1,), 'm')

    def test_remove_and_rename_array(self):
        container = DataContainer('c')
        matrix = container.create_attribute_matrix((2,), 'm')
        matrix.add_array(DataArray('old', 2))
        array = matrix.remove_array('old')
        array.name = 'new'
        matrix.add_array(array)
        assert matrix.array_names() == ['new']
        assert matrix.remove_array('missing') is None

    def test_container_array(self):
        dca = DataContainerArray()
        container = dca.create_data_container('Zeiss Axio Vision Montage')
        matrix = container.create_attribute_matrix((2,), 'm')
        array = matrix.add_array(DataArray('a', 2))

        assert dca.has_data_container('Zeiss Axio Vision Montage')
        assert dca.get_array(DataArrayPath('Zeiss Axio Vision Montage', 'm', 'a')) is array
        assert dca.get_array(DataArrayPath('Zeiss Axio Vision Montage', 'x', 'a')) is None
        assert dca.get_array(DataArrayPath('other', 'm', 'a')) is None

        assert dca.remove_data_container('Zeiss Axio Vision Montage') is container
        assert dca.data_container_names() == []

    @pytest.mark.parametrize("name", ['', 'taken'])
    def test_invalid_container_names(self, name):
        dca = DataContainerArray()
        dca.create_data_container('taken')
        with pytest.raises(ValueError):
            dca.create_data_container(name)

    def test_array_path_str(self):
        assert str(DataArrayPath('c', 'm', 'a')) == 'c/m/a'


@pytest.mark.unit
class TestGeometry:
    """Test geometry checks."""

    def test_require_image_geometry(self):
        container = DataContainer('c', ImageGeometry(dimensions=(8, 6, 1)))
        assert container.geometry_kind is GeometryKind.IMAGE
        assert require_image_geometry(container).dimensions == (8, 6, 1)

    def test_missing_geometry(self):
        with pytest.raises(GeometryError) as exc_info:
            require_image_geometry(DataContainer('c'))
        assert 'UNKNOWN' in exc_info.value.message

    def test_wrong_geometry_kind(self):
        geometry = ImageGeometry(dimensions=(1, 1, 1), kind=GeometryKind.VERTEX)
        with pytest.raises(GeometryError):
            require_image_geometry(DataContainer('c', geometry))


@pytest.mark.unit
class TestTagSection:
    """Test the decoded section container."""

    def test_entries_are_ordered_by_id(self):
        section = TagSection()
        section.add_entry(StringEntry.from_text(1548, 'mosaic.tif'))
        section.add_entry(Int32Entry.from_text(517, '4'))

        assert section.tag_ids() == [517, 1548]
        assert [entry.tag_id for entry in section] == [517, 1548]
        assert 517 in section
        assert section.get_value(9, 'default') == 'default'
        assert section.get_entry(9) is None

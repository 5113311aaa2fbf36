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
Unit tests for file name and tile tag helpers.
"""

import pytest
from pathlib import Path
from zeissimport.utils.path_helpers import (
    split_image_name, tile_array_name, tile_image_path, tile_tag, tile_tag_width
)


@pytest.mark.unit
class TestTileTags:
    """Test zero-padded tile element names."""

    @pytest.mark.parametrize("image_count, width", [
        (0, 1), (1, 1), (5, 1), (10, 1), (11, 2), (100, 2), (101, 3), (150, 3), (10 ** 7, 5),
    ])
    def test_width_is_digits_of_largest_index(self, image_count, width):
        assert tile_tag_width(image_count) == width

    def test_tile_tag(self):
        assert tile_tag(7, 1) == 'p7'
        assert tile_tag(7, 2) == 'p07'
        assert tile_tag(149, 3) == 'p149'


@pytest.mark.unit
class TestImageNames:
    """Test tile image and array names derived from the base file name."""

    def test_split_windows_path(self):
        assert split_image_name('C:\\data\\sample.run1.tif') == ('sample.run1', 'tif')

    def test_split_posix_path(self):
        assert split_image_name('/data/mosaic.zvi') == ('mosaic', 'zvi')

    def test_split_without_extension(self):
        assert split_image_name('mosaic') == ('mosaic', '')

    def test_array_name(self):
        assert tile_array_name('mosaic.tif', 'p03') == 'mosaic_p03'

    def test_image_path(self, tmp_path):
        xml_path = tmp_path / 'mosaic_meta.xml'
        assert Path(tile_image_path(xml_path, 'mosaic.tif', 'p3')) == tmp_path.resolve() / 'mosaic_p3.tif'

    def test_image_path_without_extension(self, tmp_path):
        xml_path = tmp_path / 'mosaic_meta.xml'
        assert Path(tile_image_path(xml_path, 'mosaic', 'p0')).name == 'mosaic_p0'


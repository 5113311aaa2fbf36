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
Unit tests for the AxioVision document parser.

Documents are built with MockAxioMetaXml and parsed from bytes; the source
path only decides where tile images are expected.
"""

import pytest
from lxml import etree
from pathlib import Path
from tests.fixtures.mock_axio_factory import MockAxioMetaXml
from zeissimport.utils.document_parser import AxioDocumentParser
from zeissimport.utils.exceptions import (
    MalformedCountError, MalformedDocumentError, MalformedInputError, MalformedTileSectionError,
    MissingMandatoryTagError, MissingRootTagsError, MissingTileElementError, MissingTileTagsError,
    TileCountMismatchError
)
import zeissimport.utils.tag_mapping as tm


def parse_mock(parser, mock: MockAxioMetaXml, source: Path = Path('/data/mosaic_meta.xml')):
    return parser.parse(mock.to_xml_bytes(), source)


@pytest.mark.unit
class TestWellFormedDocuments:
    """Test the import plan built from valid documents."""

    def test_basic_plan(self, parser, mock_mosaic):
        plan = parse_mock(parser, mock_mosaic)

        assert plan.image_count == 4
        assert plan.base_filename == 'mosaic.tif'
        assert [tag for tag, _ in plan.tile_sections] == ['p0', 'p1', 'p2', 'p3']
        assert (plan.tile_width, plan.tile_height) == (8, 6)
        assert len(plan.tiles) == 4

    def test_tile_bounds(self, parser, mock_mosaic):
        plan = parse_mock(parser, mock_mosaic)
        tile = plan.tiles[3]

        assert tile.tile_tag == 'p3'
        assert (tile.start_x, tile.start_y) == (8, 6)
        assert (tile.size_x, tile.size_y) == (8, 6)
        assert (tile.stage_x, tile.stage_y) == mock_mosaic.stage_position(3)
        assert (tile.spacing_x, tile.spacing_y) == (0.5, 0.5)
        assert tile.row is None and tile.col is None
        assert tile.image_data is None

    def test_tile_filenames_resolve_next_to_document(self, parser, mock_mosaic, tmp_path):
        source = tmp_path / 'mosaic_meta.xml'
        plan = parse_mock(parser, mock_mosaic, source)

        assert Path(plan.tiles[1].filename) == source.resolve().parent / 'mosaic_p1.tif'
        assert plan.filenames == [tile.filename for tile in plan.tiles]

    def test_channel_scene_indexes_default_to_zero(self, parser, mock_mosaic):
        plan = parse_mock(parser, mock_mosaic)
        tile = plan.tiles[0]
        assert (tile.start_c, tile.start_s, tile.start_b, tile.start_m) == (0, 0, 0, 0)

    def test_channel_scene_indexes_are_read(self, parser):
        mock = MockAxioMetaXml(rows=1, cols=1, tile_tags={tm.IMAGE_INDEX_C_ID: 2, tm.IMAGE_INDEX_M_ID: 5})
        tile = parse_mock(parser, mock).tiles[0]
        assert (tile.start_c, tile.start_m) == (2, 5)

    def test_five_tiles_use_single_digit_tags(self, parser):
        plan = parse_mock(parser, MockAxioMetaXml(rows=1, cols=5))
        assert [tag for tag, _ in plan.tile_sections] == ['p0', 'p1', 'p2', 'p3', 'p4']

    def test_ten_tiles_use_single_digit_tags(self, parser):
        plan = parse_mock(parser, MockAxioMetaXml(rows=2, cols=5))
        assert [tag for tag, _ in plan.tile_sections][-1] == 'p9'

    def test_hundred_tiles_use_two_digit_tags(self, parser):
        plan = parse_mock(parser, MockAxioMetaXml(rows=10, cols=10))
        tags = [tag for tag, _ in plan.tile_sections]
        assert (tags[0], tags[-1]) == ('p00', 'p99')

    def test_eleven_tiles_use_two_digit_tags(self, parser):
        plan = parse_mock(parser, MockAxioMetaXml(rows=1, cols=11))
        tags = [tag for tag, _ in plan.tile_sections]
        assert tags[0] == 'p00'
        assert tags[-1] == 'p10'

    def test_hundred_fifty_tiles_use_three_digit_tags(self, parser):
        plan = parse_mock(parser, MockAxioMetaXml(rows=10, cols=15, tile_width=2, tile_height=2))
        tags = [tag for tag, _ in plan.tile_sections]
        assert len(tags) == 150
        assert tags[0] == 'p000'
        assert tags[7] == 'p007'
        assert tags[-1] == 'p149'

    def test_zero_images_gives_empty_plan(self, parser):
        plan = parse_mock(parser, MockAxioMetaXml(rows=0, cols=0))
        assert plan.image_count == 0
        assert plan.tiles == []
        assert plan.tile_sections == []
        assert (plan.tile_width, plan.tile_height) == (0, 0)

    def test_unknown_global_tags_are_tolerated(self, parser):
        plan = parse_mock(parser, MockAxioMetaXml(rows=1, cols=1, global_tags={99999: 'vendor'}))
        assert plan.global_section.unknown_ids == {99999}

    def test_parse_file(self, parser, mosaic_2x2):
        plan = parser.parse_file(mosaic_2x2)
        assert plan.source == str(mosaic_2x2)
        assert plan.image_count == 4


@pytest.mark.unit
class TestMalformedDocuments:
    """Test that every defect aborts the parse with the right error."""

    def test_xml_syntax_error(self, parser):
        with pytest.raises(MalformedDocumentError) as exc_info:
            parser.parse(b"<ROOT>\n<Tags>\n</ROOT>", 'broken_meta.xml')
        assert exc_info.value.code == -70000
        assert exc_info.value.line >= 1

    def test_missing_root_tags(self, parser):
        with pytest.raises(MissingRootTagsError) as exc_info:
            parser.parse(b"<ROOT><p0/></ROOT>", 'x_meta.xml')
        assert exc_info.value.code == -70001

    def test_missing_global_count(self, parser, mock_mosaic):
        root = mock_mosaic.to_element()
        tags = root.find('Tags')
        tags.remove(tags.find('Count'))
        with pytest.raises(MalformedCountError):
            parser.parse(etree.tostring(root), 'x_meta.xml')

    def test_missing_tile_count_names_the_tile(self, parser, mock_mosaic):
        root = mock_mosaic.to_element()
        tags = root.find('p1').find('Tags')
        tags.remove(tags.find('Count'))
        with pytest.raises(MalformedTileSectionError) as exc_info:
            parser.parse(etree.tostring(root), 'x_meta.xml')
        assert exc_info.value.code == -70004
        assert exc_info.value.index == 1
        assert 'Tile 1 (<ROOT><p1><Tags>)' in exc_info.value.message

    def test_missing_mandatory_global_tag(self, parser):
        xml = b"<ROOT><Tags><V0>4</V0><I0>517</I0><Count>1</Count></Tags></ROOT>"
        with pytest.raises(MissingMandatoryTagError) as exc_info:
            parser.parse(xml, 'x_meta.xml')
        assert '1548' in exc_info.value.message

    def test_negative_image_count(self, parser):
        with pytest.raises(MalformedInputError):
            parse_mock(parser, MockAxioMetaXml(rows=0, cols=0, image_count=-1))

    def test_missing_tile_element(self, parser):
        mock = MockAxioMetaXml(rows=2, cols=2, image_count=5)
        with pytest.raises(MissingTileElementError) as exc_info:
            parse_mock(parser, mock)
        assert exc_info.value.index == 4
        assert exc_info.value.code == -70002
        assert '<ROOT><p4>' in exc_info.value.message

    def test_missing_tile_tags(self, parser, mock_mosaic):
        root = mock_mosaic.to_element()
        photo = root.find('p2')
        photo.remove(photo.find('Tags'))
        with pytest.raises(MissingTileTagsError) as exc_info:
            parser.parse(etree.tostring(root), 'x_meta.xml')
        assert exc_info.value.index == 2
        assert exc_info.value.code == -70003

    def test_missing_mandatory_tile_tag_names_the_tile(self, parser):
        mock = MockAxioMetaXml(rows=2, cols=2, omit_tile_tags={2: [tm.STAGE_POSITION_X_ID]})
        with pytest.raises(MissingMandatoryTagError) as exc_info:
            parse_mock(parser, mock)
        assert exc_info.value.index == 2
        assert 'Tile 2' in exc_info.value.message
        assert str(tm.STAGE_POSITION_X_ID) in exc_info.value.message

    def test_unparsable_mandatory_value_is_missing_when_lenient(self, parser):
        mock = MockAxioMetaXml(rows=1, cols=2, tile_overrides={1: {tm.IMAGE_POSITION_X_ID: 'left'}})
        with pytest.raises(MissingMandatoryTagError) as exc_info:
            parse_mock(parser, mock)
        assert exc_info.value.index == 1

    def test_unparsable_value_in_strict_mode(self, registry):
        strict_parser = AxioDocumentParser(registry, strict=True)
        mock = MockAxioMetaXml(rows=1, cols=2, tile_overrides={1: {tm.IMAGE_POSITION_X_ID: 'left'}})
        with pytest.raises(MalformedInputError) as exc_info:
            parse_mock(strict_parser, mock)
        assert not isinstance(exc_info.value, MissingMandatoryTagError)

    def test_non_positive_tile_size(self, parser):
        mock = MockAxioMetaXml(rows=1, cols=2, tile_overrides={0: {tm.IMAGE_WIDTH_PIXEL_ID: 0}})
        with pytest.raises(MalformedInputError):
            parse_mock(parser, mock)

    def test_tiles_must_share_dimensions(self, parser):
        mock = MockAxioMetaXml(rows=1, cols=3, tile_overrides={2: {tm.IMAGE_HEIGHT_PIXEL_ID: 7}})
        with pytest.raises(MalformedInputError) as exc_info:
            parse_mock(parser, mock)
        assert 'Tile 2' in exc_info.value.message

    def test_more_tiles_than_declared(self, parser):
        mock = MockAxioMetaXml(rows=2, cols=2, image_count=3)
        with pytest.raises(TileCountMismatchError):
            parse_mock(parser, mock)

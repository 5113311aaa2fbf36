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
Unit tests for the <Tags> section parser.
"""

import logging
import pytest
from lxml import etree
from zeissimport.utils.exceptions import MalformedCountError, MalformedInputError
from zeissimport.utils.tags_section_parser import TagsSectionParser


def tags_element(body: str) -> etree._Element:
    return etree.fromstring(f"<Tags>{body}</Tags>")


@pytest.mark.unit
class TestTagsSectionParser:
    """Test decoding of V/I/A triplets."""

    def test_parses_known_entries(self, registry):
        section = TagsSectionParser(registry).parse(tags_element(
            "<V0>4</V0><I0>517</I0><A0>0</A0>"
            "<V1>mosaic.tif</V1><I1>1548</I1><A1>0</A1>"
            "<Count>2</Count>"
        ))
        assert len(section) == 2
        assert section.get_value(517) == 4
        assert section.get_value(1548) == 'mosaic.tif'
        assert section.tag_ids() == [517, 1548]

    def test_count_limits_the_entries_read(self, registry):
        section = TagsSectionParser(registry).parse(tags_element(
            "<V0>4</V0><I0>517</I0><V1>mosaic.tif</V1><I1>1548</I1><Count>1</Count>"
        ))
        assert section.tag_ids() == [517]

    def test_zero_count_gives_empty_section(self, registry):
        section = TagsSectionParser(registry).parse(tags_element("<Count>0</Count>"))
        assert len(section) == 0

    @pytest.mark.parametrize("count", ["", "<Count>two</Count>", "<Count></Count>"])
    def test_missing_or_bad_count(self, registry, count):
        with pytest.raises(MalformedCountError) as exc_info:
            TagsSectionParser(registry).parse(tags_element(f"<V0>4</V0><I0>517</I0>{count}"))
        assert exc_info.value.code == -70001

    def test_unknown_ids_are_recorded_not_stored(self, registry):
        section = TagsSectionParser(registry).parse(tags_element(
            "<V0>x</V0><I0>99999</I0><V1>4</V1><I1>517</I1><Count>2</Count>"
        ))
        assert section.unknown_ids == {99999}
        assert 99999 not in section
        assert section.get_value(517) == 4

    def test_non_numeric_id_and_empty_value_are_skipped(self, registry):
        section = TagsSectionParser(registry).parse(tags_element(
            "<V0>4</V0><I0>abc</I0>"
            "<V1></V1><I1>1548</I1>"
            "<V2>8</V2><I2>515</I2>"
            "<Count>3</Count>"
        ))
        assert section.tag_ids() == [515]

    def test_missing_triplet_elements_are_skipped(self, registry):
        section = TagsSectionParser(registry).parse(tags_element("<V1>8</V1><I1>515</I1><Count>2</Count>"))
        assert section.tag_ids() == [515]

    def test_unparsable_value_is_skipped_with_warning(self, registry, caplog):
        with caplog.at_level(logging.WARNING):
            section = TagsSectionParser(registry).parse(tags_element(
                "<V0>wide</V0><I0>515</I0><V1>6</V1><I1>516</I1><Count>2</Count>"
            ), context='<ROOT><p0><Tags>')
        assert section.tag_ids() == [516]
        assert '<ROOT><p0><Tags>' in caplog.text

    def test_strict_mode_raises_on_unparsable_value(self, registry):
        with pytest.raises(MalformedInputError):
            TagsSectionParser(registry, strict=True).parse(tags_element(
                "<V0>wide</V0><I0>515</I0><Count>1</Count>"
            ))

    def test_duplicate_id_keeps_last_value(self, registry):
        section = TagsSectionParser(registry).parse(tags_element(
            "<V0>8</V0><I0>515</I0><V1>9</V1><I1>515</I1><Count>2</Count>"
        ))
        assert section.get_value(515) == 9

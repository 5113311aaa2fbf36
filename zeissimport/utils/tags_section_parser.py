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
Parser for AxioVision `<Tags>` Sections.

A `<Tags>` block stores its entries as numbered sibling elements:

    <Tags>
      <Count>2</Count>
      <V0>1388</V0><I0>515</I0><A0>0</A0>
      <V1>1040</V1><I1>516</I1><A1>0</A1>
    </Tags>

`I{c}` holds the numeric tag id and `V{c}` the raw value; `A{c}` is not used.
"""

import logging
from typing import Optional
from lxml import etree
from zeissimport.utils.data_models import TagSection
from zeissimport.utils.exceptions import MalformedCountError, MalformedInputError, MetadataParseError
from zeissimport.utils.tag_mapping import TagMappingRegistry

logger = logging.getLogger(__name__)

COUNT_TAG = 'Count'


def _child_text(element: etree._Element, name: str) -> Optional[str]:
    """Text of the first child called `name`, '' if it is empty, None if absent."""
    child = element.find(name)
    if child is None:
        return None
    return child.text or ''


class TagsSectionParser:
    """Decodes `<Tags>` elements into TagSection objects."""

    def __init__(self, registry: TagMappingRegistry, strict: bool = False):
        """
        Args:
            registry: Tag definitions used to decode values.
            strict: If True, a known tag with an unparsable value aborts the
                parse instead of being skipped.
        """
        self.registry = registry
        self.strict = strict

    def parse(self, tags: etree._Element, context: str = 'Tags') -> TagSection:
        """
        Parse one `<Tags>` element.

        Args:
            tags: The `<Tags>` element.
            context: Location used in messages, e.g. '<ROOT><p03><Tags>'.

        Returns:
            The decoded section.

        Raises:
            MalformedCountError: If `<Count>` is missing or not an integer.
            MalformedInputError: In strict mode, if a known value cannot be parsed.
        """
        count_text = _child_text(tags, COUNT_TAG)
        try:
            count = int((count_text or '').strip(), 10)
        except ValueError:
            raise MalformedCountError(
                f"Count tag missing or non-numeric in {context} (found {count_text!r})"
            ) from None

        section = TagSection()
        for c in range(count):
            id_text = _child_text(tags, f'I{c}')
            value_text = _child_text(tags, f'V{c}')

            try:
                tag_id = int((id_text or '').strip(), 10)
            except ValueError:
                logger.debug(f"{context}: <I{c}> has no numeric tag id ({id_text!r}), skipping")
                continue

            if not value_text:
                continue

            try:
                entry = self.registry.entry_for(tag_id, value_text)
            except MetadataParseError as e:
                if self.strict:
                    raise MalformedInputError(f"{context}: {e}") from e
                logger.warning(f"{context}: {e}; entry skipped")
                continue

            if entry is None:
                section.unknown_ids.add(tag_id)
                continue
            section.add_entry(entry)

        if section.unknown_ids:
            logger.debug(
                f"{context}: {len(section.unknown_ids)} tag(s) unknown to the tag mapping: "
                f"{sorted(section.unknown_ids)}"
            )
        return section

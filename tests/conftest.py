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
Pytest configuration and shared fixtures for ZITK test suite.

This module provides:
- Shared fixtures for the tag registry and parsers
- Mock mosaic factories written to temporary directories
- Recording doubles for the image import collaborators

Fixtures are organized by scope:
- session: Created once per test session (expensive setup)
- function: Created for each test function (default)

Example:
    >>> def test_using_fixture(mosaic_2x2):
    ...     '''Test using the mosaic_2x2 fixture.'''
    ...     assert mosaic_2x2.name == 'mosaic_meta.xml'
"""

import pytest

# pythonpath is configured in pyproject.toml to include project root
from tests.fixtures.mock_axio_factory import MockAxioMetaXml
from tests.fixtures.recording_collaborators import RecordingConverter, RecordingImporter
from zeissimport.utils.document_parser import AxioDocumentParser
from zeissimport.utils.tag_mapping import TagMappingRegistry


# =============================================================================
# Session-scope Fixtures (Created once per test session)
# =============================================================================

@pytest.fixture(scope="session")
def registry():
    """
    The tag registry loaded from the packaged lookup file.

    Returns:
        TagMappingRegistry: Read-only tag definitions
    """
    return TagMappingRegistry.load()


# =============================================================================
# Function-scope Fixtures (Created for each test)
# =============================================================================

@pytest.fixture
def parser(registry):
    """A lenient document parser."""
    return AxioDocumentParser(registry)


@pytest.fixture
def mock_mosaic():
    """
    Create a 2x2 RGB mock mosaic description.

    Returns:
        MockAxioMetaXml: Configured factory, nothing written yet
    """
    return MockAxioMetaXml(rows=2, cols=2, tile_width=8, tile_height=6, channels=3)


@pytest.fixture
def mosaic_2x2(tmp_path, mock_mosaic):
    """
    Write a 2x2 RGB mosaic (metadata and tiles) to a temporary directory.

    Returns:
        Path: Path of the `_meta.xml` file
    """
    return mock_mosaic.save(tmp_path)


@pytest.fixture
def recording_importer():
    return RecordingImporter()


@pytest.fixture
def recording_converter():
    return RecordingConverter()

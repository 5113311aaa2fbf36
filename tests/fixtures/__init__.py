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
Test fixtures and mock data factories for ZITK tests.

This package contains:
- MockAxioMetaXml: Factory for AxioVision _meta.xml documents and tile images
- RecordingImporter, RecordingConverter: Collaborators that record their configuration
"""

from tests.fixtures.mock_axio_factory import MockAxioMetaXml
from tests.fixtures.recording_collaborators import RecordingConverter, RecordingImporter

__all__ = ['MockAxioMetaXml', 'RecordingConverter', 'RecordingImporter']

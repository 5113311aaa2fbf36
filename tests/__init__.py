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
Zeiss Import ToolKit Test Suite.

This package contains tests for ZITK components including:
- Unit tests for the parsers, entries, grid reconstruction and data structure
- Integration tests for the import filter and the montage reports
- End-to-end tests for the `info` and `import` CLI commands
"""

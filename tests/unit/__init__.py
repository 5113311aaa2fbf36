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
Unit tests for ZITK components.

Unit tests verify individual functions and classes in isolation and should be
fast, focused, and independent.
"""

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
Memoization of parsed metadata documents.

Preflight runs repeatedly while a pipeline is being edited. Re-parsing an
unchanged `_meta.xml` each time is wasted work, so parsed plans are cached
under the resolved path and the file's modification time. Touching or
replacing the file changes the key, which invalidates the entry.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple, Union
from zeissimport.utils.data_models import ImportPlan

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, int]


class PlanCache:
    """Cache of import plans keyed by (resolved path, modification time)."""

    def __init__(self):
        self._plans: Dict[CacheKey, ImportPlan] = {}
        self.hits = 0
        self.misses = 0

    @staticmethod
    def key_for(xml_path: Union[str, Path]) -> CacheKey:
        path = Path(xml_path).resolve()
        return str(path), path.stat().st_mtime_ns

    def get(self, xml_path: Union[str, Path]) -> Optional[ImportPlan]:
        return self._plans.get(self.key_for(xml_path))

    def get_or_parse(self, xml_path: Union[str, Path], parse: Callable[[Path], ImportPlan]) -> ImportPlan:
        """
        Return the cached plan for `xml_path`, parsing it with `parse` on a miss.

        Only successful parses are stored; any stale plan for the same path is dropped.
        """
        key = self.key_for(xml_path)
        plan = self._plans.get(key)
        if plan is not None:
            self.hits += 1
            logger.debug(f"Reusing parsed metadata for {key[0]}")
            return plan

        self.misses += 1
        plan = parse(Path(key[0]))
        self._plans = {k: v for k, v in self._plans.items() if k[0] != key[0]}
        self._plans[key] = plan
        return plan

    def clear(self):
        self._plans.clear()

    def __len__(self):
        return len(self._plans)

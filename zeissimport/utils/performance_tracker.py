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
Timing of the import stages (metadata parse, preflight, pixel import, save).

Classes:
    PerformanceTracker: Named stage timers with a logged summary.
"""
import logging
import time
from contextlib import contextmanager
from typing import Dict, Iterator

logger = logging.getLogger(__name__)


class PerformanceTracker:
    """Tracks the duration of named import stages."""

    def __init__(self):
        self.timings: Dict[str, float] = {}
        self._start_times: Dict[str, float] = {}

    def start(self, stage: str):
        self._start_times[stage] = time.perf_counter()

    def stop(self, stage: str):
        """Stop a running stage; repeated stages accumulate."""
        started = self._start_times.pop(stage, None)
        if started is not None:
            self.timings[stage] = self.timings.get(stage, 0.0) + time.perf_counter() - started

    @contextmanager
    def track(self, stage: str) -> Iterator[None]:
        self.start(stage)
        try:
            yield
        finally:
            self.stop(stage)

    def get_total_time(self) -> float:
        return sum(self.timings.values())

    def log_summary(self):
        logger.info("--- Performance Summary ---")
        for stage, duration in self.timings.items():
            logger.info(f"- {stage}: {self.format_time(duration)}")
        logger.info(f"- total: {self.format_time(self.get_total_time())}")

    @staticmethod
    def format_time(seconds: float) -> str:
        """Formats seconds into a human-readable string."""
        if seconds < 60:
            return f"{seconds:.2f}s"
        elif seconds < 3600:
            minutes = int(seconds // 60)
            return f"{minutes}m {seconds % 60:.1f}s"
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        return f"{hours}h {minutes}m {seconds % 60:.0f}s"

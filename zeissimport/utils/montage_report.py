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
Montage Report Formatters.

Formats the result of a montage preflight (grid shape, tile positions, file
names and the global metadata) as a Markdown report, or as a self-contained
HTML page rendered from that Markdown with mistune.

Classes:
    MontageReportFormatter: Builds the Markdown report.
    HtmlMontageReportFormatter: Wraps the Markdown report in an HTML page.
"""

import html
import logging
import re
import mistune
from datetime import datetime
from importlib import metadata
from pathlib import Path
from typing import List, Optional
from zeissimport.utils.data_models import ImportPlan
from zeissimport.utils.tag_mapping import TagMappingRegistry
from zeissimport.utils.zeiss_import_filter import ZeissImportFilter

logger = logging.getLogger(__name__)

try:
    __version__ = metadata.version("zeiss-import-toolkit")
except metadata.PackageNotFoundError:
    __version__ = "0.0.0-dev"

REPORT_TITLE = "Montage Report"
SECTION_TITLES = ["Report Summary", "Tile Grid", "Tiles", "Global Metadata"]


def _anchor(title: str) -> str:
    anchor = re.sub(r'[^a-z0-9\-_]', '', title.lower().replace(' ', '-'))
    return anchor.strip('-')


def _escape_cell(value) -> str:
    return str(value).replace('|', '\\|').replace('\n', ' ')


class MontageReportFormatter:
    """
    Generate a Markdown montage report.

    Example:
        >>> montage_filter.preflight()
        >>> formatter = MontageReportFormatter(montage_filter, plan)
        >>> markdown = formatter.format()
    """

    def __init__(self, montage_filter: ZeissImportFilter, plan: Optional[ImportPlan] = None,
                 registry: Optional[TagMappingRegistry] = None):
        """
        Args:
            montage_filter: A filter on which preflight or execute has run.
            plan: The parsed plan; adds the global metadata section when given.
            registry: Tag names for the metadata table.
        """
        self.montage_filter = montage_filter
        self.plan = plan
        self.registry = registry if registry is not None else montage_filter.registry
        self.filename = Path(montage_filter.input_file).name

    def format(self) -> str:
        parts = [
            self._render_header(),
            self._render_summary(),
            self._render_grid(),
            self._render_tiles(),
            self._render_global_metadata(),
            self._render_footer(),
        ]
        return "\n\n".join(filter(None, parts)) + "\n"

    def _render_header(self) -> str:
        lines = [f"# {REPORT_TITLE}: {self.filename}\n", "## Table of Contents\n"]
        titles = SECTION_TITLES if self.plan is not None else SECTION_TITLES[:-1]
        lines.extend(f"- [{title}](#{_anchor(title)})" for title in titles)
        return "\n".join(lines)

    def _render_summary(self) -> str:
        f = self.montage_filter
        lines = [
            "## Report Summary\n",
            f"**Report Date:** {datetime.now().strftime('%Y-%m-%d')}  ",
            f"**Metadata File:** {self.filename}  ",
            f"**Data Container:** {f.data_container_name}  ",
            f"**Tile Count:** {len(f.tiles)}  ",
            f"**Rows:** {f.row_count}  ",
            f"**Columns:** {f.column_count}  ",
            f"**Tolerance:** {f.tolerance}  ",
        ]
        if f.tiles:
            first = f.tiles[0]
            lines.append(f"**Tile Size:** {first.size_x} x {first.size_y} pixels  ")
            lines.append(f"**Pixel Spacing:** {first.spacing_x} x {first.spacing_y}  ")
        return "\n".join(lines)

    def _render_grid(self) -> str:
        f = self.montage_filter
        lines = ["## Tile Grid\n"]
        if f.column_count <= 0:
            lines.append("*No tiles*")
            return "\n".join(lines)
        layout = f.grid_layout()
        lines.append("| Row | " + " | ".join(f"Col {c}" for c in range(f.column_count)) + " |")
        lines.append("|---|" + "---|" * f.column_count)
        for r, row in enumerate(layout):
            cells = [", ".join(tags) if tags else "-" for tags in row]
            lines.append(f"| {r} | " + " | ".join(cells) + " |")
        return "\n".join(lines)

    def _render_tiles(self) -> str:
        lines = ["## Tiles\n"]
        tiles = self.montage_filter.tiles
        if not tiles:
            lines.append("*No tiles*")
            return "\n".join(lines)
        lines.append("| Tile | Row | Column | Start X | Start Y | Stage X | Stage Y | File |")
        lines.append("|---|---|---|---|---|---|---|---|")
        for tile in tiles:
            lines.append(
                f"| {tile.tile_tag} | {tile.row} | {tile.col} | {tile.start_x} | {tile.start_y} | "
                f"{tile.stage_x} | {tile.stage_y} | {_escape_cell(Path(tile.filename).name)} |"
            )
        return "\n".join(lines)

    def _render_global_metadata(self) -> Optional[str]:
        if self.plan is None:
            return None
        lines = ["## Global Metadata\n", "| Id | Name | Type | Value |", "|---|---|---|---|"]
        for entry in self.plan.global_section:
            lines.append(
                f"| {entry.tag_id} | {_escape_cell(self.registry.name_for(entry.tag_id))} | "
                f"{entry.type_name} | {_escape_cell(entry.to_text())} |"
            )
        return "\n".join(lines)

    def _render_footer(self) -> str:
        return f"---\n\n*Report generated by Zeiss Import ToolKit v{__version__}*"


class HtmlMontageReportFormatter(MontageReportFormatter):
    """Render the Markdown report as a self-contained HTML page."""

    def format(self) -> str:
        body = mistune.html(super().format())
        return self._wrap_in_html_template(body)

    def _wrap_in_html_template(self, body_html: str) -> str:
        title = html.escape(f"{REPORT_TITLE}: {self.filename}")
        lines: List[str] = [
            "<!DOCTYPE html>",
            "<html lang=\"en\">",
            "<head>",
            "<meta charset=\"utf-8\">",
            f"<title>{title}</title>",
            "<style>",
            "body { font-family: sans-serif; margin: 2em; }",
            "table { border-collapse: collapse; }",
            "th, td { border: 1px solid #ccc; padding: 4px 8px; }",
            "</style>",
            "</head>",
            "<body>",
            body_html,
            "</body>",
            "</html>",
        ]
        return "\n".join(lines)

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
Montage Information Tool for ZITK.

This module powers the 'info' command: it preflights an AxioVision mosaic
(parsing the metadata, checking every tile image header and reconstructing the
tile grid, without reading pixels) and writes a Markdown or HTML report.
"""

import logging
from zeissimport.utils.montage_report import HtmlMontageReportFormatter, MontageReportFormatter
from zeissimport.utils.script_arguments import InfoArguments
from zeissimport.utils.zeiss_import_filter import ZeissImportFilter

logger = logging.getLogger('read_montage_info')


def read_montage_info(args: InfoArguments) -> int:
    """
    Preflight a mosaic and write its montage report.

    Args:
        args: Validated command-line arguments.

    Returns:
        0 on success, 1 on failure
    """
    logger.info(f"Arguments: {args}")

    montage_filter = ZeissImportFilter(
        input_file=str(args.input_path),
        data_container_name=args.data_container_name,
        image_attribute_matrix_name=args.attribute_matrix_name,
        tolerance=args.tolerance,
    )
    if montage_filter.preflight() < 0:
        logger.error(f"Preflight failed: {montage_filter.error_message}")
        return 1
    logger.info(montage_filter.montage_information)

    plan = montage_filter.cache.get(args.input_path)
    formatter_class = HtmlMontageReportFormatter if args.report_format == 'html' else MontageReportFormatter
    report = formatter_class(montage_filter, plan).format()

    try:
        args.output_path.parent.mkdir(parents=True, exist_ok=True)
        args.output_path.write_text(report, encoding='utf-8')
    except OSError as e:
        logger.error(f"Could not write report {args.output_path}: {e}")
        return 1

    logger.info(f"Report written to {args.output_path}")
    return 0

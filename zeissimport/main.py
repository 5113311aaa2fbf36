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
Command-line interface for the Zeiss Import ToolKit (ZITK).

This script provides the main entry point for the `zeissimport` command,
parsing user arguments and dispatching them to the appropriate tool.
"""
import argparse
import logging
import sys
from pathlib import Path
from zeissimport.utils.config_loader import config
from zeissimport.utils.log_helpers import setup_logger, shutdown_logger
from zeissimport.utils.script_arguments import ImportArguments, InfoArguments


def str2bool(v):
    if isinstance(v, bool):
        return v
    if v.lower() in ('yes', 'true', 't', 'y', '1'):
        return True
    elif v.lower() in ('no', 'false', 'f', 'n', '0'):
        return False
    else:
        raise argparse.ArgumentTypeError('Boolean value expected.')


def non_negative_int(value: str) -> int:
    """Validate that the tolerance is an integer of at least 0."""
    try:
        ivalue = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Tolerance must be an integer, got '{value}'")
    if ivalue < 0:
        raise argparse.ArgumentTypeError(f"Tolerance must not be negative, got '{ivalue}'")
    return ivalue


def add_common_args(p):
    p.add_argument('-i', '--input', required=True, type=Path, dest='input_path', help='Path to the AxioVision _meta.xml file.')
    p.add_argument('-t', '--tolerance', type=non_negative_int, default=None, dest='tolerance', help='Stage distance within which tiles share a row or column (default from config.toml).')
    p.add_argument('--data-container', type=str, default=None, dest='data_container_name', help='Name of the data container to create.')
    p.add_argument('--attribute-matrix', type=str, default=None, dest='attribute_matrix_name', help='Name of the tile attribute matrix.')
    p.add_argument('--log-file', type=Path, dest='log_file', help='Path to a log file for debugging.')
    p.add_argument('-v', '--verbose', action='store_true', dest='verbose', help='Enable verbose logging.')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='ZITK',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    subparsers = parser.add_subparsers(dest='tool', help='Available tools')
    subparsers.required = True

    # --- Montage Information Tool ---
    info_parser = subparsers.add_parser(
        'info',
        help='Validate an AxioVision mosaic and report its tile grid without reading pixels.',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    add_common_args(info_parser)
    info_parser.add_argument('-o', '--output', type=Path, dest='output_path', help='Path of the report file (default: <name>_montage.md next to the input).')
    info_parser.add_argument('-f', '--report-format', type=str.lower, default='md', choices=['html', 'md'], dest='report_format', help='Format for the output report.')

    # --- Montage Import Tool ---
    import_parser = subparsers.add_parser(
        'import',
        help='Import every tile and its metadata and save the arrays to an .npz archive.',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    add_common_args(import_parser)
    import_parser.add_argument('-o', '--output', type=Path, dest='output_path', help='Path of the .npz archive (default: <name>_arrays.npz next to the input).')
    import_parser.add_argument('-g', '--grayscale', type=str2bool, default=False, dest='convert_to_grayscale', help='Convert color tiles to grayscale.')
    import_parser.add_argument('-w', '--color-weights', type=float, nargs=3, metavar=('R', 'G', 'B'), dest='color_weights', help='Red, green and blue weights for the grayscale conversion.')
    import_parser.add_argument('-m', '--import-all-metadata', type=str2bool, default=None, dest='import_all_metadata', help='Store every tag as a metadata column, not only the tile position and size tags.')
    import_parser.add_argument('--origin', type=float, nargs=3, metavar=('X', 'Y', 'Z'), dest='origin', help='Override the geometry origin.')
    import_parser.add_argument('--spacing', type=float, nargs=3, metavar=('X', 'Y', 'Z'), dest='spacing', help='Override the geometry spacing.')
    return parser


def main():
    """
    Main function to parse arguments and call the appropriate tool.
    """
    parser = build_parser()
    args = parser.parse_args()
    tool = args.tool
    args_dict = vars(args)
    args_dict.pop('tool', None)

    # --- Logger Setup ---
    if args.verbose:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, str(config.get('logging.level', 'INFO')).upper(), logging.INFO)
    log_file = args.log_file or config.get('logging.file') or None
    logger = setup_logger(log_file=str(log_file) if log_file else None, level=log_level)

    exit_code = 0
    try:
        if tool == 'info':
            from zeissimport.tools.read_montage_info import read_montage_info
            script_args = InfoArguments(**args_dict)
            exit_code = read_montage_info(script_args)
        elif tool == 'import':
            from zeissimport.tools.import_montage import import_montage
            args_dict['change_origin'] = args_dict.get('origin') is not None
            args_dict['change_spacing'] = args_dict.get('spacing') is not None
            script_args = ImportArguments(**args_dict)
            exit_code = import_montage(script_args)
    except ValueError as e:
        logger.error(f"Invalid arguments: {e}")
        exit_code = 1
    except Exception as e:
        logger.error(f"An unexpected error occurred: {e}", exc_info=True)
        exit_code = 1
    finally:
        shutdown_logger(logger)

    if exit_code:
        sys.exit(exit_code)

if __name__ == "__main__":
    main()

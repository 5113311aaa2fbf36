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
Dataclass-based Argument Models for ZITK Tools.

This module defines strongly-typed dataclasses for parsing and validating the
command-line arguments for each tool (`info`, `import`). It uses
`__post_init__` for validation and resolving configured default values, so the
tools receive clean and validated inputs.

Classes:
    BaseArguments: A base dataclass for common script arguments.
    InfoArguments: Arguments for the read_montage_info tool.
    ImportArguments: Arguments for the import_montage tool.
"""
import math
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from zeissimport.utils.config_loader import config
from zeissimport.utils.path_helpers import META_XML_SUFFIX

logger = logging.getLogger(__name__)


def _meta_stem(input_path: Path) -> str:
    """'sample_meta.xml' -> 'sample'; any other name keeps its stem."""
    name = input_path.name
    if name.lower().endswith(META_XML_SUFFIX):
        return name[:-len(META_XML_SUFFIX)]
    return input_path.stem


@dataclass
class BaseArguments:
    """A base dataclass for common script arguments."""
    input_path: Optional[Path] = None
    output_path: Optional[Path] = None
    tolerance: Optional[int] = None
    data_container_name: Optional[str] = None
    attribute_matrix_name: Optional[str] = None
    log_file: Optional[Path] = None
    verbose: bool = False

    def __post_init__(self):
        """Coerce path-like arguments and validate the common ones."""
        if self.input_path and isinstance(self.input_path, str):
            self.input_path = Path(self.input_path)
        if self.output_path and isinstance(self.output_path, str):
            self.output_path = Path(self.output_path)
        if self.log_file and isinstance(self.log_file, str):
            self.log_file = Path(self.log_file)
        try:
            self._validate_base()
            self._resolve_base_defaults()
        except ValueError as e:
            self.handle_error(str(e))

    def handle_error(self, message: str):
        """Logs an error and raises ValueError."""
        logger.error(message)
        raise ValueError(message)

    def _validate_base(self):
        if self.input_path is None:
            raise ValueError("The 'input_path' argument is required.")
        if not self.input_path.is_file():
            raise ValueError(f"Input file not found: {self.input_path}")
        if not self.input_path.name.lower().endswith(META_XML_SUFFIX):
            logger.warning(f"{self.input_path.name} does not end with '{META_XML_SUFFIX}'")
        if self.tolerance is not None and self.tolerance < 0:
            raise ValueError(f"Tolerance must not be negative, got {self.tolerance}")

    def _resolve_base_defaults(self):
        if self.tolerance is None:
            self.tolerance = int(config.get("import.tolerance", 100))
        if not self.data_container_name:
            self.data_container_name = config.get("import.data_container_name", "Zeiss Axio Vision Montage")
        if not self.attribute_matrix_name:
            self.attribute_matrix_name = config.get("import.attribute_matrix_name", "Tile AttributeMatrix")


@dataclass
class InfoArguments(BaseArguments):
    """Arguments for the read_montage_info tool."""
    report_format: str = 'md'
    report_suffix: str = '_montage'

    def __post_init__(self):
        super().__post_init__()
        if self.report_format not in ('md', 'html'):
            self.handle_error(f"Unsupported report format: {self.report_format}")
        if self.output_path is None:
            stem = _meta_stem(self.input_path)
            extension = '.html' if self.report_format == 'html' else '.md'
            self.output_path = self.input_path.with_name(f"{stem}{self.report_suffix}{extension}")


@dataclass
class ImportArguments(BaseArguments):
    """Arguments for the import_montage tool."""
    convert_to_grayscale: bool = False
    color_weights: Optional[List[float]] = None
    import_all_metadata: Optional[bool] = None
    change_origin: bool = False
    origin: Optional[List[float]] = None
    change_spacing: bool = False
    spacing: Optional[List[float]] = None

    def __post_init__(self):
        """Validation and default resolution for import arguments."""
        super().__post_init__()
        try:
            self._validate_import()
            self._resolve_defaults()
        except ValueError as e:
            self.handle_error(str(e))

    def _validate_import(self):
        if self.color_weights is not None:
            if len(self.color_weights) != 3 or not all(math.isfinite(w) for w in self.color_weights):
                raise ValueError(f"Color weights must be three finite numbers, got {self.color_weights}")
        if self.change_origin and (self.origin is None or len(self.origin) != 3):
            raise ValueError("An origin of three values is required when changing the origin.")
        if self.change_spacing:
            if self.spacing is None or len(self.spacing) != 3:
                raise ValueError("A spacing of three values is required when changing the spacing.")
            if any(s <= 0 for s in self.spacing):
                raise ValueError(f"Spacing values must be positive, got {self.spacing}")
        if self.output_path is not None and self.output_path.suffix.lower() != '.npz':
            raise ValueError(f"The output archive must be an .npz file: {self.output_path}")

    def _resolve_defaults(self):
        if self.color_weights is None:
            self.color_weights = list(config.get("import.color_weights", [0.2125, 0.7154, 0.0721]))
        if self.import_all_metadata is None:
            self.import_all_metadata = bool(config.get("import.import_all_metadata", True))
        if self.origin is None:
            self.origin = [0.0, 0.0, 0.0]
        if self.spacing is None:
            self.spacing = [1.0, 1.0, 1.0]
        if self.output_path is None:
            self.output_path = self.input_path.with_name(f"{_meta_stem(self.input_path)}_arrays.npz")

"""
Module: config

Purpose:
    Configuration dataclass for one archive build. Immutable
    configuration with validation on construction.

Key Classes:
    - ArchiveConfig: Competition metadata, protection and output options

Dependencies:
    - dataclasses (std)
    - layout.config: Sheet geometry

Used By:
    - controller: build_archive()
    - cli: Command line options
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from scramble_sheets.layout.config import SheetConfig


@dataclass(frozen=True)
class ArchiveConfig:
    """
    Configuration for building a scramble archive (immutable).

    Attributes:
        global_title: Competition name, used for headers and archive names
        generation_date: Date stamped on documents (default: now)
        generation_url: URL the batch was generated from, kept in the JSON
        password: Encrypts the outer archive when set
        schedule: External schedule copied verbatim into the JSON
        seed: Makes scramble generation reproducible
        output_path: Where write_archive() puts the archive
        include_all_scrambles: Add the all-scrambles bundle
        sheet: Page geometry

    Example:
        >>> config = ArchiveConfig(global_title="Spring Open 2026", seed="abc")
    """

    global_title: Optional[str] = None
    generation_date: datetime = field(default_factory=datetime.now)
    generation_url: Optional[str] = None
    password: Optional[str] = None
    schedule: Optional[Any] = None
    seed: Optional[str] = None
    output_path: Optional[Path] = None
    include_all_scrambles: bool = True
    sheet: SheetConfig = field(default_factory=SheetConfig)

    def __post_init__(self) -> None:
        if self.password is not None and not self.password:
            raise ValueError("password must not be empty (use None for no password)")
        if self.seed is not None and not self.seed:
            raise ValueError("seed must not be empty (use None for random scrambles)")
        if self.output_path is not None and self.output_path.suffix.lower() != ".zip":
            raise ValueError(f"output_path must be a .zip file: {self.output_path}")

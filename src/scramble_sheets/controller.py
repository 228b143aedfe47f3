"""
Module: controller

Purpose:
    Orchestrate the complete archive building pipeline.
    Parse → Sort → Render documents → Package → (optionally) Write

Key Functions:
    - build_archive(): Main entry point for building an archive
    - write_archive(): Persist archive bytes under an exclusive lock

Key Classes:
    - BuildResult: Complete build result

Dependencies:
    - portalocker: Locked archive writes
    - core.models.request: Request parsing
    - output.archive: Packaging

Used By:
    - scramble_sheets.cli: Command line entry point
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Mapping, Optional

import portalocker

from scramble_sheets.config import ArchiveConfig
from scramble_sheets.core.models.request import RequestParser, ScrambleRequest, sort_requests
from scramble_sheets.errors import BuildError
from scramble_sheets.output.archive import requests_to_zip
from scramble_sheets.puzzles.pool import ScramblePool
from scramble_sheets.puzzles.registry import PuzzleRegistry, default_registry

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def shared_pool() -> ScramblePool:
    """Process-wide scramble pool, shared by every unseeded build."""
    return ScramblePool()


@dataclass(frozen=True)
class BuildResult:
    """
    Complete build result (immutable).

    Attributes:
        archive: ZIP bytes
        requests: Parsed requests in archive order
        passcodes: Disambiguated title -> computer display passcode
        output_path: Where the archive was written (if anywhere)
        duration: Build time in seconds

    Example:
        >>> result = build_archive({"Round 1": "333*5*1*"}, ArchiveConfig(global_title="Open"))
        >>> sorted(result.passcodes)
        ['Round 1']
    """
    archive: bytes
    requests: tuple[ScrambleRequest, ...]
    passcodes: Dict[str, str]
    output_path: Optional[Path]
    duration: float

    @property
    def scramble_count(self) -> int:
        return sum(len(request.all_scrambles) for request in self.requests)


def build_archive(
    specs: Mapping[str, str],
    config: Optional[ArchiveConfig] = None,
    registry: Optional[PuzzleRegistry] = None,
    pool: Optional[ScramblePool] = None,
) -> BuildResult:
    """
    Build an archive from title -> encoded request specs.

    Pipeline:
    1. Parse every spec (fails before any rendering)
    2. Sort by round start time
    3. Render and package all documents
    4. (Optional) Write to config.output_path

    Args:
        specs: Title -> ``puzzle*count*copies*scheme``
        config: Archive configuration (defaults: untitled, now, no password)
        registry: Puzzle table (default: bundled cubes)
        pool: Scramble pool for unseeded requests (default: shared pool)

    Raises:
        InvalidScrambleRequestError: A spec could not be parsed
        BuildError: Rendering, packaging or writing failed
    """
    config = config or ArchiveConfig()
    start_time = time.perf_counter()
    logger.info(f"Starting build of {len(specs)} requests for {config.global_title or 'untitled competition'}")

    # 1. Parse
    parser = RequestParser(registry or default_registry(), pool or shared_pool())
    requests = parser.parse_batch(specs, seed=config.seed)

    # 2. Order
    requests = sort_requests(requests)

    # 3. Package
    archive, passcodes = requests_to_zip(
        requests,
        config.global_title,
        config.generation_date,
        password=config.password,
        generation_url=config.generation_url,
        schedule=config.schedule,
        include_all_scrambles=config.include_all_scrambles,
        config=config.sheet,
    )

    # 4. Write
    if config.output_path is not None:
        write_archive(config.output_path, archive)

    duration = time.perf_counter() - start_time
    logger.info(f"Build complete in {duration:.2f}s: {len(requests)} requests, {len(archive)} bytes")
    return BuildResult(
        archive=archive,
        requests=tuple(requests),
        passcodes=passcodes,
        output_path=config.output_path,
        duration=duration,
    )


def write_archive(path: Path, data: bytes) -> Path:
    """
    Write archive bytes with an exclusive lock held.

    Concurrent writers to the same path are serialized; the file is
    truncated only once the lock is held.

    Raises:
        BuildError: If the file cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "ab") as f:
            portalocker.lock(f, portalocker.LOCK_EX)
            try:
                f.seek(0)
                f.truncate()
                f.write(data)
                f.flush()
            finally:
                portalocker.unlock(f)
    except OSError as exc:
        raise BuildError(f"Cannot write archive to {path}: {exc}", stage="write") from exc

    logger.info(f"Wrote archive to {path}")
    return path

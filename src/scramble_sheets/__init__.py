"""Top-level package for scramble-sheets.

Provides subpackages:
- scramble_sheets.core – request model and geometry primitives
- scramble_sheets.puzzles – puzzle-type interface, registry and scramble pool
- scramble_sheets.layout – text fitting, scramble tables, fewest-moves sheets
- scramble_sheets.output – PDF rendering, document assembly, archive packaging
"""

PROJECT_NAME = "scramble-sheets"


def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            content = pyproject.read_text(encoding="utf-8")
            for line in content.splitlines():
                if line.strip().startswith("version"):
                    # Parse: version = "0.4.0"
                    return line.split("=")[1].strip().strip('"').strip("'")
        except OSError:
            pass

    try:
        from importlib.metadata import PackageNotFoundError, version as pkg_version
        return pkg_version(PROJECT_NAME)
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _get_version()
__all__: list[str] = ["__version__", "PROJECT_NAME", "generator_name"]


def generator_name() -> str:
    """Name and version stamped into generated documents, e.g. ``scramble-sheets-0.4.0``."""
    return f"{PROJECT_NAME}-{__version__}"

"""Auto-detect which source provider reads a given path."""

from pathlib import Path

from api_autodocs.errors import SourceModelError

from .base import SourceModel
from .manifest import ManifestSourceModel
from .python import PythonSourceModel

MANIFEST_SUFFIXES = (".yaml", ".yml", ".json")


def detect_source(source_path: Path) -> str:
    """Detect the kind of source at ``source_path``.

    Returns: 'manifest' or 'python'.
    """
    if source_path.is_file() and source_path.suffix.lower() in MANIFEST_SUFFIXES:
        return "manifest"
    return "python"


def open_source_model(source_path: Path, exclude: list[str] | None = None) -> SourceModel:
    """Build the source model for ``source_path`` with the matching provider."""
    if not source_path.exists():
        raise SourceModelError(f"Source path not found: {source_path}")
    if detect_source(source_path) == "manifest":
        return ManifestSourceModel.from_file(source_path)
    return PythonSourceModel.from_directory(source_path, exclude=exclude)

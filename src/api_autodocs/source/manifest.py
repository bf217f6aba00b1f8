"""Manifest source provider.

Loads already-parsed declarations from a YAML or JSON manifest, e.g. one
exported from another language's type checker.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError

from api_autodocs.errors import SourceModelError

from .base import SourceModel, SourceUnit


class SourceManifest(BaseModel):
    units: list[SourceUnit]


class ManifestSourceModel(SourceModel):
    """Source model read from a declarations manifest."""

    @classmethod
    def from_file(cls, file_path: Path) -> "ManifestSourceModel":
        text = file_path.read_text(encoding="utf-8")
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise SourceModelError(f"Cannot read manifest {file_path}: {e}") from e
        if not isinstance(data, dict):
            raise SourceModelError(f"Manifest {file_path} must be a mapping with a 'units' list")
        try:
            manifest = SourceManifest(**data)
        except ValidationError as e:
            raise SourceModelError(f"Invalid manifest {file_path}: {e}") from e
        return cls(manifest.units)

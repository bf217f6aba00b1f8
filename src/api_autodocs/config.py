"""Configuration models and loader.

Options are read from a YAML (or JSON) file. Keys may be written in
camelCase (``globalPrefix``) or snake_case (``global_prefix``).
"""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from api_autodocs.errors import ConfigError
from api_autodocs.scanner.annotations import AnnotationVocabulary


class _Options(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ContactConfig(_Options):
    name: str | None = None
    email: str | None = None
    url: str | None = None


class ServerConfig(_Options):
    url: str
    description: str | None = None


class VersioningConfig(_Options):
    """Path-based API versioning."""

    enabled: bool = False
    strategy: Literal["path", "decorator"] = "path"
    prefix: str = "/api"
    fallback: str | None = None  # prefix for controllers without a detected version


class SecuritySchemeConfig(_Options):
    type: Literal["apiKey", "http", "oauth2", "openIdConnect"] = "http"
    description: str | None = None
    name: str | None = None
    in_: Literal["query", "header", "cookie"] | None = None
    scheme: str | None = None
    bearer_format: str | None = None

    model_config = ConfigDict(
        alias_generator=lambda f: "in" if f == "in_" else to_camel(f),
        populate_by_name=True,
    )


class AutoDocsOptions(_Options):
    """All inputs of a scan besides the source itself."""

    title: str = "API Documentation"
    version: str = "1.0.0"
    description: str | None = None
    contact: ContactConfig | None = None
    source_path: str = "src"
    global_prefix: str = ""
    servers: list[ServerConfig] | None = None
    category_mapping: dict[str, str] | None = None
    exclude: list[str] = []
    include_security: bool = True
    security_scheme: SecuritySchemeConfig | None = None
    versioning: VersioningConfig | None = None
    base_server_url: str | None = None
    vocabulary: AnnotationVocabulary = AnnotationVocabulary()


def load_options(file_path: Path, **overrides) -> AutoDocsOptions:
    """Load options from a YAML/JSON file; ``overrides`` with a None value are ignored."""
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config {file_path}: {e}") from e
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {file_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config {file_path} must be a mapping")
    return build_options(data, **overrides)


def build_options(data: dict | None = None, **overrides) -> AutoDocsOptions:
    data = dict(data or {})
    data.update({to_camel(k): v for k, v in overrides.items() if v is not None})
    try:
        return AutoDocsOptions.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

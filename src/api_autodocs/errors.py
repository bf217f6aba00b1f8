"""Exceptions raised by api-autodocs."""


class AutoDocsError(Exception):
    """Base class for all api-autodocs errors."""


class ConfigError(AutoDocsError):
    """The configuration file is missing or invalid."""


class SourceModelError(AutoDocsError):
    """The source model could not be loaded."""


class SpecNotGeneratedError(AutoDocsError):
    """The specification was requested before any scan completed."""

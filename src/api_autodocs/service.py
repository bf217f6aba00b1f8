"""AutoDocs service — runs scans and owns the published specification."""

import copy
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from api_autodocs.config import AutoDocsOptions
from api_autodocs.errors import SpecNotGeneratedError
from api_autodocs.generator.category import CategoryGenerator
from api_autodocs.generator.openapi import OpenApiGenerator
from api_autodocs.scanner.annotations import AnnotationClassifier
from api_autodocs.scanner.base import ControllerDescriptor
from api_autodocs.scanner.controller import ControllerScanner
from api_autodocs.source.base import SourceModel
from api_autodocs.source.detect import open_source_model

logger = logging.getLogger(__name__)

SourceFactory = Callable[[AutoDocsOptions], SourceModel]


def default_source_factory(options: AutoDocsOptions) -> SourceModel:
    return open_source_model(Path(options.source_path), exclude=options.exclude)


@dataclass(frozen=True)
class ScanSnapshot:
    """Result of one complete scan. Never modified once published.

    Controllers are frozen descriptors; the document is only handed out
    as a copy by ``AutoDocsService.get_spec``.
    """

    generation: int
    controllers: tuple[ControllerDescriptor, ...]
    document: dict
    scanned_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class AutoDocsService:
    """Scans a source tree and publishes the generated specification.

    Scans are serialized; each one builds a new snapshot and swaps it in
    as a whole, so readers see either the previous or the next document.
    """

    def __init__(self, options: AutoDocsOptions, source_factory: SourceFactory = default_source_factory):
        self.options = options
        self.source_factory = source_factory
        self.category_generator = CategoryGenerator()
        self.openapi_generator = OpenApiGenerator()
        self._scan_lock = threading.Lock()
        self._snapshot: ScanSnapshot | None = None

    def initialize(self) -> None:
        logger.info("Initializing AutoDocs service...")
        try:
            snapshot = self.scan()
        except Exception:
            logger.error("Failed to initialize AutoDocs", exc_info=True)
            raise
        logger.info("AutoDocs initialized - found %d controllers", len(snapshot.controllers))

    def scan(self) -> ScanSnapshot:
        """Rescan the source and publish a fresh snapshot."""
        with self._scan_lock:
            logger.info("Scanning controllers in %s", self.options.source_path)
            source = self.source_factory(self.options)
            classifier = AnnotationClassifier(self.options.vocabulary)
            versioning = self.options.versioning
            strategy = versioning.strategy if versioning else "path"
            controllers = ControllerScanner(source, classifier, version_strategy=strategy).scan_controllers()

            if self.options.category_mapping:
                controllers = self.category_generator.apply_category_mapping(
                    controllers, self.options.category_mapping
                )
            categories = self.category_generator.get_categories(controllers)
            logger.info("Categories: %s", ", ".join(categories))

            document = self.openapi_generator.generate(controllers, self.options)
            previous = self._snapshot.generation if self._snapshot else 0
            snapshot = ScanSnapshot(
                generation=previous + 1,
                controllers=tuple(controllers),
                document=document,
            )
            self._snapshot = snapshot
            logger.info("Scan completed (generation %d)", snapshot.generation)
            return snapshot

    def snapshot(self) -> ScanSnapshot:
        snapshot = self._snapshot
        if snapshot is None:
            raise SpecNotGeneratedError("OpenAPI spec not generated. Call initialize() first.")
        return snapshot

    def get_spec(self) -> dict:
        """A private copy of the current document; changing it does not touch the snapshot."""
        return copy.deepcopy(self.snapshot().document)

    def get_controllers(self) -> list[ControllerDescriptor]:
        snapshot = self._snapshot
        return list(snapshot.controllers) if snapshot else []

    def get_controllers_by_category(self) -> dict[str, list[ControllerDescriptor]]:
        return self.category_generator.group_by_category(self.get_controllers())

    def get_last_scan_time(self) -> datetime | None:
        snapshot = self._snapshot
        return snapshot.scanned_at if snapshot else None

    def get_stats(self) -> dict:
        controllers = self.get_controllers()
        categories = self.category_generator.get_categories(controllers)
        return {
            "total_controllers": len(controllers),
            "total_routes": sum(len(c.routes) for c in controllers),
            "total_categories": len(categories),
            "categories": categories,
            "last_scan_time": self.get_last_scan_time(),
        }

"""Controller scanner — finds annotated controller classes and their routes."""

import logging
import re

from api_autodocs.source.base import Annotation, ClassDecl, SourceModel, SourceUnit, unquote

from .annotations import AnnotationClassifier
from .base import ControllerDescriptor
from .examples import DEFAULT_EXAMPLES, NameHeuristicExamples
from .route import RouteScanner, extract_guards
from .types import TypeResolver

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"
VERSION_PATTERN = re.compile(r"/(v\d+)/")
VERSION_ANCHOR = re.compile(r"/api/v\d+/")
SOURCE_ANCHOR = "/src/"
ARTIFACT_DIRS = {"controllers", "controller"}
MODULE_SUFFIX = "Module"


class ControllerScanner:
    """Builds one ControllerDescriptor per controller class in a source model."""

    def __init__(
        self,
        source: SourceModel,
        classifier: AnnotationClassifier | None = None,
        examples: NameHeuristicExamples | None | object = DEFAULT_EXAMPLES,
        version_strategy: str = "path",
    ):
        self.source = source
        self.version_strategy = version_strategy
        self.classifier = classifier or AnnotationClassifier()
        self.resolver = TypeResolver(source, self.classifier, examples=examples)
        self.route_scanner = RouteScanner(self.resolver, self.classifier)

    def scan_controllers(self) -> list[ControllerDescriptor]:
        controllers = []
        for unit in self.source.units():
            controllers.extend(self._extract_from_unit(unit))
        logger.info("Found %d controllers", len(controllers))
        return controllers

    def _extract_from_unit(self, unit: SourceUnit) -> list[ControllerDescriptor]:
        controllers = []
        for cls in unit.classes:
            decorator = self.classifier.find_controller(cls.annotations)
            if decorator is None:
                continue
            try:
                controllers.append(self._build_controller(cls, decorator, unit.path))
            except Exception:
                logger.warning("Skipping controller %s in %s", cls.name, unit.path, exc_info=True)
        return controllers

    def _build_controller(self, cls: ClassDecl, decorator: Annotation, file_path: str) -> ControllerDescriptor:
        controller_path = decorator.literal(0) or "/"
        return ControllerDescriptor(
            name=cls.name,
            path=controller_path,
            file_path=file_path,
            category=self._detect_category(cls.name, file_path),
            version=self._detect_version(cls, decorator, file_path),
            description=cls.doc.strip() if cls.doc else None,
            routes=self.route_scanner.scan_routes(cls, controller_path),
            guards=extract_guards(cls.annotations, self.classifier),
        )

    def _detect_version(self, cls: ClassDecl, decorator: Annotation, file_path: str) -> str | None:
        """'decorator' reads Version(...) or the controller's version=; 'path' reads the file path."""
        if self.version_strategy == "decorator":
            annotation = self.classifier.find_version(cls.annotations)
            if annotation is not None and annotation.args:
                return normalize_version(annotation.literal(0))
            if "version" in decorator.kwargs:
                return normalize_version(unquote(decorator.kwargs["version"]))
            return None
        return detect_version_from_path(file_path)

    def _detect_category(self, class_name: str, file_path: str) -> str:
        """Owning module's name when the ownership graph knows it, else the file path."""
        owner = self.source.owner_of(class_name, self.classifier.module_names)
        if owner:
            return category_from_module(owner)
        return detect_category_from_path(file_path)


def detect_version_from_path(file_path: str) -> str | None:
    """First '/vN/' segment of the path, e.g. 'v2' for src/api/v2/user/controller.py."""
    match = VERSION_PATTERN.search(file_path.replace("\\", "/"))
    return match.group(1) if match else None


def normalize_version(text: str) -> str | None:
    """'1' -> 'v1'; 'v2' stays as is."""
    text = text.strip()
    if text.isdigit():
        return f"v{text}"
    return text or None


def detect_category_from_path(file_path: str) -> str:
    """Human-readable category from the directories under the source root.

    src/api/v1/admin/auth/controller.py   -> "Admin - Auth"
    src/messaging/controllers/messages.py -> "Messaging"
    """
    normalized = "/" + file_path.replace("\\", "/").lstrip("/")

    match = VERSION_ANCHOR.search(normalized)
    if match:
        relevant = normalized[match.end():]
    elif SOURCE_ANCHOR in normalized:
        relevant = normalized.rsplit(SOURCE_ANCHOR, 1)[1]
    else:
        relevant = normalized

    directories = relevant.split("/")[:-1]
    parts = [p for p in directories if p and p.lower() not in ARTIFACT_DIRS]
    if not parts:
        return UNCATEGORIZED

    humanized = deduplicate_parts([humanize(p) for p in parts])
    return " - ".join(humanized)


def humanize(segment: str) -> str:
    """'admin-auth' -> 'Admin Auth'."""
    words = re.split(r"[-_]", segment)
    return " ".join(w[:1].upper() + w[1:] for w in words if w)


def deduplicate_parts(parts: list[str]) -> list[str]:
    """Drop a part equal to its predecessor, ignoring case, spaces and hyphens."""
    result: list[str] = []
    for part in parts:
        if result and _normalize(part) == _normalize(result[-1]):
            continue
        result.append(part)
    return result


def category_from_module(module_name: str) -> str:
    """'AdminAuthModule' -> 'Admin Auth'."""
    name = module_name
    if name.endswith(MODULE_SUFFIX) and name != MODULE_SUFFIX:
        name = name[: -len(MODULE_SUFFIX)]
    words = re.findall(r"[A-Z]+(?=[A-Z][a-z]|\d|$)|[A-Z]?[a-z]+|\d+", name)
    return " ".join(words) if words else UNCATEGORIZED


def _normalize(text: str) -> str:
    return re.sub(r"[\s_-]+", "", text.lower())

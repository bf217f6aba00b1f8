"""Route scanner — finds the operation-bearing methods of a controller."""

from api_autodocs.source.base import Annotation, ClassDecl, MethodDecl, ParameterDecl, first_line, unquote

from .annotations import AnnotationClassifier
from .base import ParamDescriptor, RouteDescriptor, TypeDescriptor
from .types import TypeResolver


class RouteScanner:
    """Extracts RouteDescriptors from the methods of a controller class."""

    def __init__(self, resolver: TypeResolver, classifier: AnnotationClassifier | None = None):
        self.resolver = resolver
        self.classifier = classifier or resolver.classifier

    def scan_routes(self, cls: ClassDecl, controller_path: str) -> list[RouteDescriptor]:
        """One route per method carrying an HTTP-verb annotation, in declaration order."""
        routes = []
        for method in cls.methods:
            route = self._extract_route(method, controller_path)
            if route is not None:
                routes.append(route)
        return routes

    def _extract_route(self, method: MethodDecl, controller_path: str) -> RouteDescriptor | None:
        verb_annotation = self.classifier.find_http_method(method.annotations)
        if verb_annotation is None:
            return None

        route_path = verb_annotation.literal(0) or ""
        return RouteDescriptor(
            name=method.name,
            http_method=self.classifier.http_method(verb_annotation),
            path=route_path,
            full_path=combine_paths(controller_path, route_path),
            description=first_line(method.doc),
            params=self._extract_parameters(method),
            request_body=self._extract_request_body(method),
            response_type=self.resolver.resolve_body(method.return_type),
            guards=extract_guards(method.annotations, self.classifier),
            is_public=any(self.classifier.is_public(a) for a in method.annotations),
        )

    def _extract_request_body(self, method: MethodDecl) -> TypeDescriptor | None:
        for param in method.parameters:
            if any(self.classifier.param_source(a) == "body" for a in param.annotations):
                # resolve_body leaves bare primitives out
                return self.resolver.resolve_body(param.type)
        return None

    def _extract_parameters(self, method: MethodDecl) -> list[ParamDescriptor]:
        params = []
        for param in method.parameters:
            for annotation in param.annotations:
                location = self.classifier.param_source(annotation)
                if location in ("path", "query", "header"):
                    params.append(self._build_param(param, location, annotation))
        return params

    def _build_param(self, param: ParameterDecl, location: str, annotation: Annotation) -> ParamDescriptor:
        if location == "path":
            required = True
        else:
            required = not param.optional and not param.has_default
        description = annotation.kwargs.get("description")
        return ParamDescriptor(
            name=annotation.literal(0) or param.name,
            location=location,
            type=self.resolver.resolve_shallow(param.type),
            required=required,
            description=unquote(description) if description else None,
        )


def combine_paths(base: str, path: str) -> str:
    """Join a controller path and a route sub-path into one absolute path.

    Separators are stripped from both ends of each segment and exactly one
    '/' goes between non-empty segments. An empty result is '/'.
    """
    segments = [s.strip().strip("/") for s in (base, path)]
    joined = "/".join(s for s in segments if s)
    while "//" in joined:
        joined = joined.replace("//", "/")
    return f"/{joined}"


def extract_guards(annotations, classifier: AnnotationClassifier) -> list[str]:
    """Guard annotation arguments, verbatim."""
    guards = []
    for annotation in annotations:
        if classifier.is_guard(annotation):
            guards.extend(arg.strip() for arg in annotation.args)
    return guards

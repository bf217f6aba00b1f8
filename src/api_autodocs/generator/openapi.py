"""OpenAPI generator — assembles the specification document.

Takes the scanned controller descriptors plus the options and produces an
OpenAPI 3.0 document as a plain dict, ready for JSON/YAML serialization.
"""

import re

from api_autodocs.config import AutoDocsOptions
from api_autodocs.scanner.base import (
    ArrayType,
    ConstraintSet,
    ControllerDescriptor,
    EnumType,
    ObjectType,
    ParamDescriptor,
    PrimitiveType,
    PropertyDescriptor,
    RefType,
    RouteDescriptor,
)

OPENAPI_VERSION = "3.0.0"
SECURITY_SCHEME_NAME = "bearerAuth"
BODY_METHODS = ("POST", "PUT", "PATCH")
PLACEHOLDER = re.compile(r":(\w+)")

DEFAULT_SECURITY_SCHEME = {
    "type": "http",
    "scheme": "bearer",
    "bearerFormat": "JWT",
    "description": "Enter your JWT token in the format: Bearer {token}",
}


class OpenApiGenerator:
    """Builds an OpenAPI document from controller descriptors.

    Named object types referenced through a RefType are collected while
    converting and emitted under ``components.schemas``.
    """

    def __init__(self):
        self._named: dict[str, ObjectType] = {}
        self._referenced: list[str] = []

    def generate(self, controllers: list[ControllerDescriptor], options: AutoDocsOptions) -> dict:
        """Generate a complete document; state from earlier calls is discarded."""
        self._named = {}
        self._referenced = []
        include_security = options.include_security

        paths = self._generate_paths(controllers, options, include_security)
        components: dict = {"schemas": self._generate_components()}
        if include_security:
            components["securitySchemes"] = {SECURITY_SCHEME_NAME: self._security_scheme(options)}

        info = {
            "title": options.title,
            "version": options.version,
            "description": options.description or "Auto-generated API documentation",
        }
        if options.contact:
            info["contact"] = options.contact.model_dump(exclude_none=True)

        if options.servers:
            servers = [s.model_dump(exclude_none=True) for s in options.servers]
        else:
            servers = generate_default_servers(controllers, options)

        return {
            "openapi": OPENAPI_VERSION,
            "info": info,
            "servers": servers,
            "tags": generate_tags(controllers),
            "paths": paths,
            "components": components,
        }

    # -- paths ----------------------------------------------------------------

    def _generate_paths(
        self,
        controllers: list[ControllerDescriptor],
        options: AutoDocsOptions,
        include_security: bool,
    ) -> dict[str, dict]:
        paths: dict[str, dict] = {}
        for controller in controllers:
            for route in controller.routes:
                full_path = build_route_path(controller, route, options)
                operation = self._create_operation(route, controller, full_path, include_security)
                paths.setdefault(full_path, {})[route.http_method.lower()] = operation
        return paths

    def _create_operation(
        self,
        route: RouteDescriptor,
        controller: ControllerDescriptor,
        full_path: str,
        include_security: bool,
    ) -> dict:
        operation: dict = {
            "summary": route.description or f"{route.http_method} {route.full_path}",
            "operationId": f"{controller.name}_{route.name}",
        }
        if route.description:
            operation["description"] = route.description
        if controller.category:
            operation["tags"] = [controller.category]

        parameters = [self._parameter(p) for p in route.params]
        if parameters:
            operation["parameters"] = parameters

        if route.http_method in BODY_METHODS and route.request_body is not None:
            operation["requestBody"] = {
                "required": True,
                "content": {"application/json": {"schema": self.type_to_schema(route.request_body)}},
            }

        success: dict = {"description": "Successful response"}
        if route.response_type is not None:
            success["content"] = {"application/json": {"schema": self.type_to_schema(route.response_type)}}
        operation["responses"] = {
            "200": success,
            "400": {"description": "Bad request"},
            "401": {"description": "Unauthorized"},
            "500": {"description": "Internal server error"},
        }

        if include_security and not route.is_public:
            operation["security"] = [{SECURITY_SCHEME_NAME: []}]
        guards = list(controller.guards + route.guards)
        if guards:
            operation["x-guards"] = guards
        return operation

    def _parameter(self, param: ParamDescriptor) -> dict:
        parameter = {
            "name": param.name,
            "in": param.location,
            "required": param.location == "path" or param.required,
            "schema": self.type_to_schema(param.type),
        }
        if param.description:
            parameter["description"] = param.description
        return parameter

    # -- schemas --------------------------------------------------------------

    def type_to_schema(self, descriptor) -> dict:
        """Convert a type descriptor into an OpenAPI schema object."""
        if descriptor is None:
            return {"type": "object"}
        if isinstance(descriptor, PrimitiveType):
            schema = {"type": descriptor.type}
            if descriptor.format:
                schema["format"] = descriptor.format
            return schema
        if isinstance(descriptor, ArrayType):
            return {"type": "array", "items": self.type_to_schema(descriptor.items)}
        if isinstance(descriptor, EnumType):
            return {"type": "string", "enum": list(descriptor.values)}
        if isinstance(descriptor, RefType):
            if descriptor.name not in self._referenced:
                self._referenced.append(descriptor.name)
            return {"$ref": f"#/components/schemas/{descriptor.name}"}
        if isinstance(descriptor, ObjectType):
            return self._object_to_schema(descriptor)
        return {"type": "object"}

    def _object_to_schema(self, obj: ObjectType) -> dict:
        if obj.name and obj.name not in self._named:
            self._named[obj.name] = obj
        schema: dict = {"type": "object"}
        if not obj.properties:
            if obj.description:
                schema["description"] = obj.description
            return schema

        schema["properties"] = {p.name: self.property_to_schema(p) for p in obj.properties}
        required = [p.name for p in obj.properties if p.required]
        if required:
            schema["required"] = required
        if obj.description:
            schema["description"] = obj.description
        return schema

    def property_to_schema(self, prop: PropertyDescriptor) -> dict:
        schema = self.type_to_schema(prop.type)
        if "$ref" not in schema and not prop.constraints.is_empty():
            apply_constraints(schema, prop.constraints)
        if prop.description:
            schema["description"] = prop.description
        if prop.example is not None and "$ref" not in schema:
            schema["example"] = prop.example
        return schema

    def _generate_components(self) -> dict:
        schemas = {}
        # a referenced type is always an ancestor of its reference, so it is already known
        for name in self._referenced:
            if name in self._named:
                schemas[name] = self._object_to_schema(self._named[name])
        return schemas

    def _security_scheme(self, options: AutoDocsOptions) -> dict:
        if options.security_scheme is not None:
            return options.security_scheme.model_dump(by_alias=True, exclude_none=True)
        return dict(DEFAULT_SECURITY_SCHEME)


def apply_constraints(schema: dict, constraints: ConstraintSet) -> None:
    """Copy the constrained fields of ``constraints`` onto ``schema``."""
    if constraints.type:
        schema["type"] = constraints.type
    if constraints.format:
        schema["format"] = constraints.format
    if constraints.min_length is not None:
        schema["minLength"] = constraints.min_length
    if constraints.max_length is not None:
        schema["maxLength"] = constraints.max_length
    if constraints.pattern:
        schema["pattern"] = constraints.pattern
    if constraints.minimum is not None:
        schema["minimum"] = constraints.minimum
    if constraints.maximum is not None:
        schema["maximum"] = constraints.maximum
    if constraints.min_items is not None:
        schema["minItems"] = constraints.min_items
    if constraints.max_items is not None:
        schema["maxItems"] = constraints.max_items
    if constraints.enum:
        schema["enum"] = list(constraints.enum)
    if constraints.not_enum:
        schema["not"] = {"enum": list(constraints.not_enum)}


def generate_tags(controllers: list[ControllerDescriptor]) -> list[dict]:
    """One tag per distinct category, sorted by name."""
    tags: dict[str, dict] = {}
    for controller in controllers:
        if controller.category and controller.category not in tags:
            tags[controller.category] = {
                "name": controller.category,
                "description": controller.description or f"{controller.category} related endpoints",
            }
    return [tags[name] for name in sorted(tags)]


def build_route_path(controller: ControllerDescriptor, route: RouteDescriptor, options: AutoDocsOptions) -> str:
    """Full path template for a route under the versioning policy.

    1. versioning on, version detected: {prefix}/{version}/{controller}/{route}
    2. versioning on, fallback set:     {fallback}/{controller}/{route}
    3. otherwise:                       {global_prefix}/{controller}/{route}
    """
    versioning = options.versioning
    if versioning and versioning.enabled and controller.version:
        path = combine_paths(versioning.prefix, controller.version, controller.path, route.path)
    elif versioning and versioning.enabled and versioning.fallback:
        path = combine_paths(versioning.fallback, controller.path, route.path)
    else:
        path = combine_paths(options.global_prefix, controller.path, route.path)
    return PLACEHOLDER.sub(r"{\1}", path)


def generate_default_servers(controllers: list[ControllerDescriptor], options: AutoDocsOptions) -> list[dict]:
    servers = []
    versioning = options.versioning

    if versioning and versioning.enabled:
        versions = sorted({c.version for c in controllers if c.version})
        if versions:
            for version in versions:
                servers.append({
                    "url": combine_paths(versioning.prefix, version),
                    "description": f"API {version.upper()}",
                })
        elif versioning.fallback:
            servers.append({"url": versioning.fallback, "description": "API Server"})
    elif options.global_prefix:
        servers.append({"url": options.global_prefix, "description": "API Server"})

    if not servers:
        if options.base_server_url:
            servers.append({"url": options.base_server_url, "description": "Base Server"})
        else:
            servers.append({"url": "/", "description": "Current Server (editable in dropdown)"})
    return servers


def combine_paths(*segments: str | None) -> str:
    """Join path segments with single '/' separators, always starting with '/'."""
    parts = [s.strip().strip("/") for s in segments if s]
    return "/" + "/".join(p for p in parts if p)

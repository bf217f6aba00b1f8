"""Type resolver — source type references into portable type descriptors.

Resolution never raises for shapes it does not understand: it returns None
("absent"), and callers leave the corresponding schema out.
"""

import logging

from api_autodocs.source.base import ClassDecl, PropertyDecl, SourceModel, TypeRef, first_line

from .annotations import AnnotationClassifier
from .base import ArrayType, EnumType, ObjectType, PrimitiveType, PropertyDescriptor, RefType, TypeDescriptor
from .examples import DEFAULT_EXAMPLES, NameHeuristicExamples
from .validators import extract_constraints

logger = logging.getLogger(__name__)

# name -> (schema type, format)
PRIMITIVES: dict[str, tuple[str, str | None]] = {
    "string": ("string", None),
    "str": ("string", None),
    "number": ("number", None),
    "float": ("number", None),
    "Decimal": ("number", None),
    "int": ("integer", None),
    "integer": ("integer", None),
    "bigint": ("integer", "int64"),
    "boolean": ("boolean", None),
    "bool": ("boolean", None),
    "Date": ("string", "date-time"),
    "datetime": ("string", "date-time"),
    "date": ("string", "date"),
    "time": ("string", "time"),
    "UUID": ("string", "uuid"),
    "EmailStr": ("string", "email"),
    "HttpUrl": ("string", "uri"),
    "AnyUrl": ("string", "uri"),
    "bytes": ("string", "binary"),
}


class TypeResolver:
    """Resolves TypeRefs against a source model.

    Named object types currently being expanded are tracked by name; when a
    resolution chain re-enters one of them, a RefType is emitted instead of
    expanding again.
    """

    def __init__(
        self,
        source: SourceModel,
        classifier: AnnotationClassifier | None = None,
        examples: NameHeuristicExamples | None | object = DEFAULT_EXAMPLES,
    ):
        self.source = source
        self.classifier = classifier or AnnotationClassifier()
        self.examples = NameHeuristicExamples() if examples is DEFAULT_EXAMPLES else examples
        self._in_progress: set[str] = set()

    # -- entry points -------------------------------------------------------

    def resolve(self, ref: TypeRef | None) -> TypeDescriptor | None:
        """Resolve any type reference; None when the shape is not understood."""
        if ref is None:
            return None
        kind = ref.kind

        if kind in ("void", "any"):
            return None
        if kind == "primitive" or (kind == "named" and ref.name in PRIMITIVES):
            return self._primitive(ref.name)
        if kind == "generic" and self.classifier.is_async_wrapper(ref.name):
            return self.resolve(self.unwrap(ref))
        if kind == "array":
            element = self.resolve(ref.args[0]) if ref.args else None
            return ArrayType(items=element or ObjectType())
        if kind == "enum":
            return EnumType(values=list(ref.values))
        if kind == "union":
            return self._resolve_union(ref)
        if kind in ("named", "generic"):
            # Generic arguments of user types are not substituted; the base declaration is used.
            resolved = self._resolve_named(ref.name)
            if resolved is None:
                logger.debug("Unresolved type %s", ref.text)
            return resolved
        if kind == "object":
            return self._resolve_inline(ref)
        return None

    def resolve_body(self, ref: TypeRef | None) -> TypeDescriptor | None:
        """Resolve a request body or response type.

        Async wrappers are unwrapped first. Void, free-form and bare primitive
        types yield None, as does an anonymous shape with no members.
        """
        ref = self.unwrap(ref)
        if ref is None or ref.kind in ("void", "any") or self.is_primitive(ref):
            return None
        if ref.kind == "union":
            return self._narrow_union(ref)
        resolved = self.resolve(ref)
        if isinstance(resolved, ObjectType) and resolved.name is None and not resolved.properties:
            return None
        return resolved

    def resolve_shallow(self, ref: TypeRef | None) -> TypeDescriptor:
        """Minimal descriptor for a route parameter: primitive, array or enum."""
        if ref is not None and ref.kind == "union":
            members = [a for a in ref.args if a.kind != "void"]
            ref = members[0] if len(members) == 1 else None
        if ref is None:
            return PrimitiveType(type="string")
        if ref.kind == "array":
            element = ref.args[0] if ref.args else None
            return ArrayType(items=self.resolve_shallow(element))
        if ref.kind == "enum":
            return EnumType(values=list(ref.values))
        if ref.kind == "named":
            enum = self.source.find_enum(ref.name)
            if enum is not None:
                return EnumType(name=enum.name, values=list(enum.values))
        if self.is_primitive(ref):
            return self._primitive(ref.name)
        return PrimitiveType(type="string")

    # -- helpers ------------------------------------------------------------

    def unwrap(self, ref: TypeRef | None) -> TypeRef | None:
        """Strip async result wrappers; a wrapper without type argument is void."""
        while ref is not None and ref.kind == "generic" and self.classifier.is_async_wrapper(ref.name):
            if not ref.args:
                return TypeRef(kind="void")
            ref = ref.args[-1]
        return ref

    def is_primitive(self, ref: TypeRef) -> bool:
        return ref.kind == "primitive" or (ref.kind == "named" and ref.name in PRIMITIVES)

    def enum_values(self, name: str) -> list[str] | None:
        enum = self.source.find_enum(name)
        return list(enum.values) if enum is not None else None

    def _primitive(self, name: str) -> PrimitiveType:
        schema_type, fmt = PRIMITIVES.get(name, ("string", None))
        return PrimitiveType(type=schema_type, format=fmt)

    def _resolve_union(self, ref: TypeRef) -> TypeDescriptor | None:
        members = [a for a in ref.args if a.kind != "void"]
        if len(members) == 1:
            return self.resolve(members[0])
        narrowed = self._narrow_union(ref)
        if narrowed is not None:
            return narrowed
        for member in members:
            resolved = self.resolve(member)
            if resolved is not None:
                return resolved
        return None

    def _narrow_union(self, ref: TypeRef) -> TypeDescriptor | None:
        """First member, in declaration order, that is a known named type or a non-empty object."""
        for member in ref.args:
            member = self.unwrap(member)
            if member is None or member.kind in ("void", "any") or self.is_primitive(member):
                continue
            if member.kind in ("named", "generic"):
                if self.source.find_class(member.name) or self.source.find_enum(member.name):
                    return self.resolve(member)
                continue
            resolved = self.resolve(member)
            if isinstance(resolved, ObjectType) and resolved.properties:
                return resolved
            if isinstance(resolved, ArrayType):
                return resolved
        return None

    def _resolve_named(self, name: str) -> TypeDescriptor | None:
        enum = self.source.find_enum(name)
        if enum is not None:
            return EnumType(name=enum.name, values=list(enum.values))

        cls = self.source.find_class(name)
        if cls is None:
            return None
        if name in self._in_progress:
            return RefType(name=name)

        self._in_progress.add(name)
        try:
            properties = [self._property(p) for p in self._all_properties(cls)]
        finally:
            self._in_progress.discard(name)
        return ObjectType(name=cls.name, description=first_line(cls.doc), properties=properties)

    def _all_properties(self, cls: ClassDecl, visited: set[str] | None = None) -> list[PropertyDecl]:
        """Properties of ``cls`` preceded by those inherited from known bases."""
        visited = visited if visited is not None else {cls.name}
        seen: dict[str, PropertyDecl] = {}
        for base_name in cls.bases:
            base = self.source.find_class(base_name)
            if base is None or base_name in visited:
                continue
            visited.add(base_name)
            for prop in self._all_properties(base, visited):
                seen[prop.name] = prop
        for prop in cls.properties:
            seen[prop.name] = prop
        return list(seen.values())

    def _property(self, prop: PropertyDecl) -> PropertyDescriptor:
        constraints = extract_constraints(prop.annotations, self.classifier, self.enum_values)
        type_descriptor = self.resolve(prop.type) or ObjectType()

        if constraints.optional:
            required = False
        elif constraints.required:
            required = True
        else:
            required = not prop.optional and not prop.has_initializer

        return PropertyDescriptor(
            name=prop.name,
            type=type_descriptor,
            required=required,
            description=prop.doc,
            constraints=constraints,
            example=self._example(prop.name, type_descriptor),
        )

    def _resolve_inline(self, ref: TypeRef) -> ObjectType | None:
        if not ref.members:
            return None
        properties = []
        for member in ref.members:
            type_descriptor = self.resolve(member.type) or ObjectType()
            nullable = member.type.kind == "union" and any(a.kind == "void" for a in member.type.args)
            properties.append(
                PropertyDescriptor(
                    name=member.name,
                    type=type_descriptor,
                    required=not (member.optional or nullable),
                    example=self._example(member.name, type_descriptor),
                )
            )
        return ObjectType(properties=properties)

    def _example(self, name: str, type_descriptor: TypeDescriptor) -> object:
        if self.examples is None:
            return None
        return self.examples.example_for(name, type_descriptor)

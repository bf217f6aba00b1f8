"""Source model: the declarations a scan reads.

Every source provider (Python AST, manifest file) converts its input
into these models; the scanners never look at raw source text.
"""

import ast
from typing import Literal

from pydantic import BaseModel

TypeKind = Literal["primitive", "array", "enum", "union", "named", "generic", "object", "void", "any"]


class Annotation(BaseModel):
    """A decorator-like annotation with its raw argument text."""

    name: str
    args: list[str] = []
    kwargs: dict[str, str] = {}

    def literal(self, index: int = 0) -> str | None:
        """Return positional argument ``index`` as an unquoted literal, if present."""
        if index >= len(self.args):
            return None
        return unquote(self.args[index])


class MemberRef(BaseModel):
    """A member of an inline (anonymous) object shape."""

    name: str
    type: "TypeRef"
    optional: bool = False


class TypeRef(BaseModel):
    """Structural description of a declared type reference."""

    kind: TypeKind
    name: str = ""
    args: list["TypeRef"] = []  # array element, union members, generic arguments
    members: list[MemberRef] = []  # inline object shape
    values: list[str] = []  # literal enum values

    @property
    def text(self) -> str:
        if self.kind == "array" and self.args:
            return f"{self.args[0].text}[]"
        if self.kind == "union":
            return " | ".join(a.text for a in self.args)
        if self.kind == "generic":
            return f"{self.name}<{', '.join(a.text for a in self.args)}>"
        return self.name or self.kind


class ParameterDecl(BaseModel):
    name: str
    type: TypeRef | None = None
    annotations: list[Annotation] = []
    optional: bool = False
    has_default: bool = False


class PropertyDecl(BaseModel):
    name: str
    type: TypeRef | None = None
    annotations: list[Annotation] = []
    optional: bool = False
    has_initializer: bool = False
    doc: str | None = None


class MethodDecl(BaseModel):
    name: str
    doc: str | None = None
    annotations: list[Annotation] = []
    parameters: list[ParameterDecl] = []
    return_type: TypeRef | None = None


class ClassDecl(BaseModel):
    name: str
    doc: str | None = None
    annotations: list[Annotation] = []
    bases: list[str] = []
    methods: list[MethodDecl] = []
    properties: list[PropertyDecl] = []


class EnumDecl(BaseModel):
    name: str
    values: list[str]
    doc: str | None = None


class SourceUnit(BaseModel):
    """One file's worth of declarations."""

    path: str
    classes: list[ClassDecl] = []
    enums: list[EnumDecl] = []


MemberRef.model_rebuild()


def unquote(text: str) -> str:
    """Strip string quoting from an argument's source text."""
    text = text.strip()
    try:
        value = ast.literal_eval(text)
    except (ValueError, SyntaxError):
        return text.strip("'\"`")
    return value if isinstance(value, str) else text


class SourceModel:
    """In-memory source model over a fixed list of units.

    Providers build the unit list; lookups are shared.
    """

    def __init__(self, units: list[SourceUnit]):
        self._units = list(units)
        self._classes: dict[str, ClassDecl] = {}
        self._enums: dict[str, EnumDecl] = {}
        for unit in self._units:
            for cls in unit.classes:
                self._classes.setdefault(cls.name, cls)
            for enum in unit.enums:
                self._enums.setdefault(enum.name, enum)

    def units(self) -> list[SourceUnit]:
        return list(self._units)

    def find_class(self, name: str) -> ClassDecl | None:
        return self._classes.get(name)

    def find_enum(self, name: str) -> EnumDecl | None:
        return self._enums.get(name)

    def owner_of(self, class_name: str, module_annotations: set[str]) -> str | None:
        """Return the name of the module class whose ``controllers`` list contains ``class_name``."""
        for cls in self._classes.values():
            for ann in cls.annotations:
                if ann.name not in module_annotations:
                    continue
                listed = ann.kwargs.get("controllers")
                if listed is None and ann.args:
                    listed = ann.args[0]
                if listed and class_name in _names_in(listed):
                    return cls.name
        return None


def _names_in(text: str) -> set[str]:
    """Collect identifiers from an expression like ``[AdminController, UserController]``."""
    try:
        tree = ast.parse(text, mode="eval")
    except SyntaxError:
        return set()
    names = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Name):
            names.add(node.id)
        elif isinstance(node, ast.Attribute):
            names.add(node.attr)
        elif isinstance(node, ast.Constant) and isinstance(node.value, str):
            names.add(node.value)
    return names


def first_line(text: str | None) -> str | None:
    """First non-blank line of a documentation comment, trimmed."""
    if not text:
        return None
    for line in text.strip().splitlines():
        if line.strip():
            return line.strip()
    return None

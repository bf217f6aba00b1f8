"""Python source provider.

Reads a directory of ``*.py`` files with the ``ast`` module and converts
decorated classes, their methods and annotated fields into the source model.
"""

import ast
import fnmatch
import logging
from pathlib import Path

from .base import (
    Annotation,
    ClassDecl,
    EnumDecl,
    MethodDecl,
    ParameterDecl,
    PropertyDecl,
    SourceModel,
    SourceUnit,
    TypeRef,
)

logger = logging.getLogger(__name__)

IGNORED_DIRS = {"__pycache__", ".git", ".venv", "venv", "node_modules", "site-packages"}

PRIMITIVE_NAMES = {
    "str", "int", "float", "bool", "bytes", "Decimal",
    "datetime", "date", "time", "UUID", "EmailStr", "HttpUrl", "AnyUrl",
}
ARRAY_NAMES = {"list", "List", "Sequence", "set", "Set", "frozenset", "FrozenSet", "Iterable", "tuple", "Tuple"}
MAPPING_NAMES = {"dict", "Dict", "Mapping", "MutableMapping"}
ANY_NAMES = {"Any", "object"}
ENUM_BASES = {"Enum", "StrEnum", "IntEnum"}


class PythonSourceModel(SourceModel):
    """Source model built from Python files under a root directory."""

    @classmethod
    def from_directory(cls, root: Path, exclude: list[str] | None = None) -> "PythonSourceModel":
        units = []
        for file_path in sorted(root.rglob("*.py")):
            if _is_ignored(file_path, root, exclude or []):
                continue
            unit = parse_file(file_path)
            if unit is not None:
                units.append(unit)
        logger.debug("Loaded %d Python source units from %s", len(units), root)
        return cls(units)


def _is_ignored(file_path: Path, root: Path, exclude: list[str]) -> bool:
    rel = file_path.relative_to(root)
    if any(part in IGNORED_DIRS for part in rel.parts[:-1]):
        return True
    rel_text = rel.as_posix()
    return any(fnmatch.fnmatch(rel_text, pattern) for pattern in exclude)


def parse_file(file_path: Path) -> SourceUnit | None:
    """Parse one Python file into a SourceUnit; unparsable files yield None."""
    try:
        tree = ast.parse(file_path.read_text(encoding="utf-8"), filename=str(file_path))
    except (SyntaxError, UnicodeDecodeError) as e:
        logger.warning("Skipping %s: %s", file_path, e)
        return None
    return parse_module(tree, file_path.resolve().as_posix())


def parse_module(tree: ast.Module, path: str) -> SourceUnit:
    classes = []
    enums = []
    for node in tree.body:
        if not isinstance(node, ast.ClassDef):
            continue
        bases = [_dotted_tail(b) for b in node.bases]
        if ENUM_BASES & set(bases):
            enums.append(_parse_enum(node))
        else:
            classes.append(_parse_class(node, bases))
    return SourceUnit(path=path, classes=classes, enums=enums)


# -- declarations -----------------------------------------------------------


def _parse_class(node: ast.ClassDef, bases: list[str]) -> ClassDecl:
    methods = []
    properties = []
    body = node.body
    for i, item in enumerate(body):
        if isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef)):
            methods.append(_parse_method(item))
        elif isinstance(item, ast.AnnAssign) and isinstance(item.target, ast.Name):
            following = body[i + 1] if i + 1 < len(body) else None
            properties.append(_parse_property(item, following))
    return ClassDecl(
        name=node.name,
        doc=ast.get_docstring(node),
        annotations=[_parse_annotation(d) for d in node.decorator_list],
        bases=[b for b in bases if b],
        methods=methods,
        properties=properties,
    )


def _parse_enum(node: ast.ClassDef) -> EnumDecl:
    values = []
    for item in node.body:
        if isinstance(item, ast.Assign) and isinstance(item.value, ast.Constant):
            values.append(str(item.value.value))
    return EnumDecl(name=node.name, values=values, doc=ast.get_docstring(node))


def _parse_method(node: ast.FunctionDef | ast.AsyncFunctionDef) -> MethodDecl:
    args = node.args.posonlyargs + node.args.args + node.args.kwonlyargs
    # Defaults align with the tail of positional args; kw-only defaults are per-arg.
    positional = node.args.posonlyargs + node.args.args
    defaults: dict[str, ast.expr] = {}
    for arg, default in zip(positional[len(positional) - len(node.args.defaults):], node.args.defaults):
        defaults[arg.arg] = default
    for arg, default in zip(node.args.kwonlyargs, node.args.kw_defaults):
        if default is not None:
            defaults[arg.arg] = default

    parameters = [
        _parse_parameter(arg, defaults.get(arg.arg))
        for arg in args
        if arg.arg not in ("self", "cls")
    ]
    return MethodDecl(
        name=node.name,
        doc=ast.get_docstring(node),
        annotations=[_parse_annotation(d) for d in node.decorator_list],
        parameters=parameters,
        return_type=annotation_to_type(node.returns) if node.returns is not None else None,
    )


def _parse_parameter(arg: ast.arg, default: ast.expr | None) -> ParameterDecl:
    annotations = _annotated_metadata(arg.annotation)
    has_default = default is not None
    if isinstance(default, ast.Call):
        # `q: str = Query("q")` marks the source; only `default=` counts as a real default
        annotations.append(_parse_annotation(default))
        has_default = any(kw.arg == "default" for kw in default.keywords)
    type_ref = annotation_to_type(arg.annotation) if arg.annotation is not None else None
    return ParameterDecl(
        name=arg.arg,
        type=type_ref,
        annotations=annotations,
        optional=_is_optional(type_ref),
        has_default=has_default,
    )


def _parse_property(node: ast.AnnAssign, following: ast.stmt | None) -> PropertyDecl:
    doc = None
    if (
        isinstance(following, ast.Expr)
        and isinstance(following.value, ast.Constant)
        and isinstance(following.value.value, str)
    ):
        doc = following.value.value.strip()
    type_ref = annotation_to_type(node.annotation)
    return PropertyDecl(
        name=node.target.id,
        type=type_ref,
        annotations=_annotated_metadata(node.annotation),
        optional=_is_optional(type_ref),
        has_initializer=node.value is not None,
        doc=doc,
    )


def _parse_annotation(node: ast.expr) -> Annotation:
    if isinstance(node, ast.Call):
        return Annotation(
            name=_dotted_tail(node.func),
            args=[ast.unparse(a) for a in node.args],
            kwargs={kw.arg: ast.unparse(kw.value) for kw in node.keywords if kw.arg},
        )
    return Annotation(name=_dotted_tail(node))


def _annotated_metadata(node: ast.expr | None) -> list[Annotation]:
    """Collect the marker calls from ``Annotated[T, Marker(...), ...]``."""
    if isinstance(node, ast.Subscript) and _dotted_tail(node.value) == "Annotated":
        elts = node.slice.elts if isinstance(node.slice, ast.Tuple) else [node.slice]
        return [_parse_annotation(e) for e in elts[1:] if isinstance(e, (ast.Call, ast.Name, ast.Attribute))]
    return []


def _is_optional(type_ref: TypeRef | None) -> bool:
    return (
        type_ref is not None
        and type_ref.kind == "union"
        and any(a.kind == "void" for a in type_ref.args)
    )


def _dotted_tail(node: ast.expr) -> str:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    if isinstance(node, ast.Subscript):
        return _dotted_tail(node.value)
    return ""


# -- type annotations -------------------------------------------------------


def annotation_to_type(node: ast.expr) -> TypeRef:
    """Convert a type annotation expression into a TypeRef."""
    if isinstance(node, ast.Constant):
        if node.value is None:
            return TypeRef(kind="void", name="None")
        if isinstance(node.value, str):
            # Forward reference: "User"
            try:
                return annotation_to_type(ast.parse(node.value, mode="eval").body)
            except SyntaxError:
                return TypeRef(kind="any")
        return TypeRef(kind="any")

    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        return _union([annotation_to_type(node.left), annotation_to_type(node.right)])

    if isinstance(node, (ast.Name, ast.Attribute)):
        return _named(_dotted_tail(node))

    if isinstance(node, ast.Subscript):
        base = _dotted_tail(node.value)
        elts = node.slice.elts if isinstance(node.slice, ast.Tuple) else [node.slice]
        if not elts:
            # tuple[()] and friends
            if base in ARRAY_NAMES:
                return TypeRef(kind="array", name=base, args=[TypeRef(kind="any")])
            return TypeRef(kind="any", name=base)
        if base == "Annotated":
            return annotation_to_type(elts[0])
        if base == "Optional":
            return _union([annotation_to_type(elts[0]), TypeRef(kind="void", name="None")])
        if base == "Union":
            return _union([annotation_to_type(e) for e in elts])
        if base == "Literal":
            values = [str(e.value) for e in elts if isinstance(e, ast.Constant)]
            return TypeRef(kind="enum", name="Literal", values=values)
        if base in ARRAY_NAMES:
            return TypeRef(kind="array", name=base, args=[annotation_to_type(elts[0])])
        if base in MAPPING_NAMES:
            return TypeRef(kind="any", name=base)
        return TypeRef(kind="generic", name=base, args=[annotation_to_type(e) for e in elts])

    return TypeRef(kind="any")


def _named(name: str) -> TypeRef:
    if name == "None":
        return TypeRef(kind="void", name="None")
    if name in PRIMITIVE_NAMES:
        return TypeRef(kind="primitive", name=name)
    if name in ANY_NAMES or name in MAPPING_NAMES:
        return TypeRef(kind="any", name=name)
    if name in ARRAY_NAMES:
        return TypeRef(kind="array", name=name, args=[TypeRef(kind="any")])
    return TypeRef(kind="named", name=name)


def _union(members: list[TypeRef]) -> TypeRef:
    flat = []
    for member in members:
        if member.kind == "union":
            flat.extend(member.args)
        else:
            flat.append(member)
    return TypeRef(kind="union", args=flat)

"""Validator extractor — property constraint annotations into a ConstraintSet."""

import ast
from collections.abc import Callable

from api_autodocs.source.base import Annotation

from .annotations import AnnotationClassifier
from .base import ConstraintSet

EnumLookup = Callable[[str], list[str] | None]

TYPE_RULES = {"string": "string", "number": "number", "integer": "integer", "boolean": "boolean", "array": "array"}
FORMAT_RULES = {"email": "email", "url": "uri", "uuid": "uuid"}
BOUND_RULES = {
    "min": "minimum",
    "max": "maximum",
    "min_length": "min_length",
    "max_length": "max_length",
    "min_items": "min_items",
    "max_items": "max_items",
}


def extract_constraints(
    annotations: list[Annotation],
    classifier: AnnotationClassifier,
    enum_lookup: EnumLookup | None = None,
) -> ConstraintSet:
    """Build the constraint set for one property.

    Annotations apply in declaration order; a later annotation overwrites
    the fields an earlier one set. Unknown annotation names are ignored.
    """
    fields: dict = {}
    for annotation in annotations:
        rule = classifier.constraint_rule(annotation)
        if rule is None:
            continue
        fields.update(_apply_rule(rule, annotation, enum_lookup))
    return ConstraintSet(**fields)


def _apply_rule(rule: str, annotation: Annotation, enum_lookup: EnumLookup | None) -> dict:
    if rule in TYPE_RULES:
        return {"type": TYPE_RULES[rule]}
    if rule in FORMAT_RULES:
        return {"format": FORMAT_RULES[rule]}
    if rule == "date":
        return {"type": "string", "format": "date-time"}
    if rule == "optional":
        return {"optional": True}
    if rule == "required":
        return {"required": True}

    args = [_parse_arg(a) for a in annotation.args]

    if rule in BOUND_RULES:
        if args and _is_number(args[0]):
            value = args[0]
            if rule in ("min_length", "max_length", "min_items", "max_items"):
                value = int(value)
            return {BOUND_RULES[rule]: value}
        return {}
    if rule == "length":
        result = {}
        if len(args) > 0 and _is_number(args[0]):
            result["min_length"] = int(args[0])
        if len(args) > 1 and _is_number(args[1]):
            result["max_length"] = int(args[1])
        return result
    if rule == "pattern":
        if args and isinstance(args[0], str):
            return {"pattern": _strip_regex_literal(args[0])}
        return {}
    if rule in ("in", "not_in"):
        if args and isinstance(args[0], (list, tuple, set)):
            values = [str(v) for v in args[0]]
            return {"enum": values} if rule == "in" else {"not_enum": values}
        return {}
    if rule == "enum":
        if annotation.args and enum_lookup is not None:
            values = enum_lookup(annotation.args[0].strip())
            if values:
                return {"enum": values}
        return {}
    return {}


def _parse_arg(text: str):
    try:
        return ast.literal_eval(text)
    except (ValueError, SyntaxError):
        return text.strip()


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _strip_regex_literal(text: str) -> str:
    """Turn a ``/pattern/flags`` regex literal into its bare pattern."""
    if text.startswith("/") and text.rfind("/") > 0:
        return text[1:text.rfind("/")]
    return text

"""Descriptor models produced by a scan.

The type descriptors are the portable representation of source types;
controller and route descriptors carry everything the assembler needs.
All descriptors are frozen and hold tuples, so a published scan result
cannot be changed by its readers.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class ConstraintSet(_Frozen):
    """Normalized validation constraints for one property.

    Fields left as None were not constrained. ``required``/``optional`` record
    explicit presence annotations; optionality wins when both are set.
    """

    type: str | None = None
    format: str | None = None
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None
    minimum: float | None = None
    maximum: float | None = None
    min_items: int | None = None
    max_items: int | None = None
    enum: tuple[str, ...] | None = None
    not_enum: tuple[str, ...] | None = None
    required: bool = False
    optional: bool = False

    def is_empty(self) -> bool:
        return self == ConstraintSet()


class PrimitiveType(_Frozen):
    kind: Literal["primitive"] = "primitive"
    type: str  # string / number / integer / boolean
    format: str | None = None


class ArrayType(_Frozen):
    kind: Literal["array"] = "array"
    items: "TypeDescriptor"


class EnumType(_Frozen):
    kind: Literal["enum"] = "enum"
    values: tuple[str, ...]
    name: str | None = None


class ObjectType(_Frozen):
    kind: Literal["object"] = "object"
    name: str | None = None  # None for inline/anonymous shapes
    description: str | None = None
    properties: tuple["PropertyDescriptor", ...] = ()


class RefType(_Frozen):
    """Reference to a named object type already being expanded (cycle break)."""

    kind: Literal["ref"] = "ref"
    name: str


TypeDescriptor = Annotated[
    Union[PrimitiveType, ArrayType, EnumType, ObjectType, RefType],
    Field(discriminator="kind"),
]


class PropertyDescriptor(_Frozen):
    name: str
    type: TypeDescriptor
    required: bool
    description: str | None = None
    constraints: ConstraintSet = ConstraintSet()
    example: Any = None


ArrayType.model_rebuild()
ObjectType.model_rebuild()
PropertyDescriptor.model_rebuild()


class ParamDescriptor(_Frozen):
    """A single route parameter."""

    name: str
    location: Literal["path", "query", "header"]
    type: TypeDescriptor
    required: bool
    description: str | None = None


class RouteDescriptor(_Frozen):
    """One operation: HTTP verb + sub-path with its inputs and output."""

    name: str
    http_method: HttpMethod
    path: str  # sub-path as declared, may contain :placeholders
    full_path: str  # controller path + sub-path
    description: str | None = None
    params: tuple[ParamDescriptor, ...] = ()
    request_body: TypeDescriptor | None = None
    response_type: TypeDescriptor | None = None
    guards: tuple[str, ...] = ()
    is_public: bool = False


class ControllerDescriptor(_Frozen):
    """A controller class with its routes and inferred grouping."""

    name: str
    path: str
    file_path: str
    category: str = ""
    version: str | None = None
    description: str | None = None
    routes: tuple[RouteDescriptor, ...] = ()
    guards: tuple[str, ...] = ()

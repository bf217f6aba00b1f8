import pytest
from pydantic import TypeAdapter, ValidationError

from api_autodocs.scanner.base import (
    ArrayType,
    ConstraintSet,
    ControllerDescriptor,
    ObjectType,
    ParamDescriptor,
    PrimitiveType,
    PropertyDescriptor,
    RefType,
    RouteDescriptor,
    TypeDescriptor,
)


class TestConstraintSet:
    def test_empty_by_default(self):
        assert ConstraintSet().is_empty()

    def test_not_empty_when_constrained(self):
        assert not ConstraintSet(min_length=1).is_empty()
        assert not ConstraintSet(optional=True).is_empty()


class TestTypeDescriptor:
    def test_discriminated_by_kind(self):
        adapter = TypeAdapter(TypeDescriptor)
        parsed = adapter.validate_python({"kind": "array", "items": {"kind": "ref", "name": "Node"}})
        assert isinstance(parsed, ArrayType)
        assert parsed.items == RefType(name="Node")

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            TypeAdapter(TypeDescriptor).validate_python({"kind": "tuple"})

    def test_nested_object(self):
        obj = ObjectType(
            name="Profile",
            properties=[PropertyDescriptor(name="tags", type=ArrayType(items=PrimitiveType(type="string")), required=True)],
        )
        dumped = obj.model_dump()
        assert dumped["properties"][0]["type"]["items"]["type"] == "string"
        assert ObjectType.model_validate(dumped) == obj


class TestRouteDescriptor:
    def test_defaults(self):
        route = RouteDescriptor(name="list", http_method="GET", path="", full_path="/users")
        assert route.params == ()
        assert route.request_body is None
        assert route.response_type is None
        assert route.is_public is False

    def test_rejects_unknown_method(self):
        with pytest.raises(ValidationError):
            RouteDescriptor(name="x", http_method="TRACE", path="", full_path="/")

    def test_param_location(self):
        with pytest.raises(ValidationError):
            ParamDescriptor(name="c", location="cookie", type=PrimitiveType(type="string"), required=False)


class TestControllerDescriptor:
    def test_defaults(self):
        controller = ControllerDescriptor(name="UsersController", path="users", file_path="src/users.py")
        assert controller.category == ""
        assert controller.version is None
        assert controller.routes == ()
        assert controller.guards == ()

"""Example values for schema properties, guessed from property names."""

from .base import ArrayType, EnumType, PrimitiveType

# Marks "use a fresh NameHeuristicExamples"; None disables examples.
DEFAULT_EXAMPLES = object()


class NameHeuristicExamples:
    """Picks an example by property-name substring, then by type.

    Rules are checked in order; the first substring contained in the
    lower-cased property name wins.
    """

    NAME_RULES: list[tuple[tuple[str, ...], object]] = [
        (("email",), "user@example.com"),
        (("name",), "Example Name"),
        (("phone",), "+1234567890"),
        (("url", "link"), "https://example.com"),
        (("password",), "********"),
        (("id",), "123e4567-e89b-12d3-a456-426614174000"),
    ]

    def example_for(self, name: str, type_descriptor) -> object:
        lower = name.lower()
        for needles, value in self.NAME_RULES:
            if any(n in lower for n in needles):
                return value

        if isinstance(type_descriptor, PrimitiveType):
            if type_descriptor.type == "string":
                return "example string"
            if type_descriptor.type in ("number", "integer"):
                return 123
            if type_descriptor.type == "boolean":
                return True
        if isinstance(type_descriptor, ArrayType):
            return []
        if isinstance(type_descriptor, EnumType) and type_descriptor.values:
            return type_descriptor.values[0]
        return None

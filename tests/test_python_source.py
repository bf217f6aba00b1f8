import ast
from pathlib import Path

from api_autodocs.source.python import PythonSourceModel, annotation_to_type, parse_file, parse_module

FIXTURES = Path(__file__).parent / "fixtures"
SAMPLE_SRC = FIXTURES / "sample_app" / "src"


def _type(text: str):
    return annotation_to_type(ast.parse(text, mode="eval").body)


def _unit(code: str):
    return parse_module(ast.parse(code), "/app/src/example.py")


class TestAnnotationToType:
    def test_primitive(self):
        ref = _type("str")
        assert ref.kind == "primitive"
        assert ref.name == "str"

    def test_optional_becomes_union_with_void(self):
        ref = _type("Optional[User]")
        assert ref.kind == "union"
        assert [a.kind for a in ref.args] == ["named", "void"]

    def test_pipe_union_is_flattened(self):
        ref = _type("A | B | None")
        assert [a.name for a in ref.args] == ["A", "B", "None"]

    def test_list_is_array(self):
        ref = _type("list[User]")
        assert ref.kind == "array"
        assert ref.args[0].name == "User"

    def test_literal_is_enum(self):
        ref = _type("Literal['asc', 'desc']")
        assert ref.kind == "enum"
        assert ref.values == ["asc", "desc"]

    def test_annotated_unwraps_to_inner_type(self):
        ref = _type("Annotated[int, Min(1)]")
        assert ref.kind == "primitive"
        assert ref.name == "int"

    def test_forward_reference_string(self):
        ref = _type("'Node'")
        assert ref.kind == "named"
        assert ref.name == "Node"

    def test_generic_wrapper(self):
        ref = _type("Awaitable[User]")
        assert ref.kind == "generic"
        assert ref.name == "Awaitable"
        assert ref.args[0].name == "User"

    def test_mapping_is_any(self):
        assert _type("dict[str, int]").kind == "any"
        assert _type("Any").kind == "any"

    def test_dotted_name(self):
        ref = _type("datetime.datetime")
        assert ref.kind == "primitive"
        assert ref.name == "datetime"

    def test_empty_subscript(self):
        ref = _type("tuple[()]")
        assert ref.kind == "array"
        assert ref.args[0].kind == "any"
        assert _type("Wrapper[()]").kind == "any"


class TestParseModule:
    def test_controller_class_with_decorators(self):
        unit = _unit(
            "@Controller('admin')\n"
            "@UseGuards(JwtGuard)\n"
            "class AdminController:\n"
            "    '''Admin endpoints.'''\n"
            "    @Get('profile')\n"
            "    def get_profile(self) -> Profile:\n"
            "        '''Get profile.'''\n"
        )
        cls = unit.classes[0]
        assert cls.name == "AdminController"
        assert cls.doc == "Admin endpoints."
        assert [a.name for a in cls.annotations] == ["Controller", "UseGuards"]
        assert cls.annotations[1].args == ["JwtGuard"]
        method = cls.methods[0]
        assert method.annotations[0].literal(0) == "profile"
        assert method.return_type.name == "Profile"
        assert method.parameters == []

    def test_parameter_marker_from_annotated(self):
        unit = _unit(
            "class C:\n"
            "    def m(self, user_id: Annotated[str, Param('id')]): ...\n"
        )
        param = unit.classes[0].methods[0].parameters[0]
        assert param.name == "user_id"
        assert param.annotations[0].name == "Param"
        assert param.type.name == "str"
        assert param.has_default is False

    def test_parameter_marker_from_default_call(self):
        unit = _unit(
            "class C:\n"
            "    def m(self, q: str = Query('q'), page: int = Query(default=1), size: int = 10): ...\n"
        )
        q, page, size = unit.classes[0].methods[0].parameters
        assert q.annotations[0].name == "Query"
        assert q.has_default is False
        assert page.has_default is True
        assert size.annotations == []
        assert size.has_default is True

    def test_properties_with_docs_and_optionality(self):
        unit = _unit(
            "class Dto:\n"
            "    name: Annotated[str, MinLength(2)]\n"
            "    '''Display name'''\n"
            "    nickname: Optional[str]\n"
            "    active: bool = True\n"
        )
        name, nickname, active = unit.classes[0].properties
        assert name.doc == "Display name"
        assert name.annotations[0].name == "MinLength"
        assert name.annotations[0].args == ["2"]
        assert nickname.optional is True
        assert nickname.has_initializer is False
        assert active.has_initializer is True
        assert active.optional is False

    def test_enum_class(self):
        unit = _unit(
            "class Color(str, Enum):\n"
            "    RED = 'red'\n"
            "    BLUE = 'blue'\n"
        )
        assert unit.classes == []
        assert unit.enums[0].name == "Color"
        assert unit.enums[0].values == ["red", "blue"]

    def test_bases_recorded(self):
        unit = _unit("class Child(Base, mixins.Audit):\n    x: int\n")
        assert unit.classes[0].bases == ["Base", "Audit"]


class TestPythonSourceModel:
    def test_loads_fixture_tree(self):
        model = PythonSourceModel.from_directory(SAMPLE_SRC)
        assert model.find_class("AdminController") is not None
        assert model.find_class("UserController") is not None
        assert model.find_enum("Role") is not None

    def test_unparsable_file_skipped(self):
        assert parse_file(SAMPLE_SRC / "messaging" / "broken.py") is None
        model = PythonSourceModel.from_directory(SAMPLE_SRC)
        assert all(not u.path.endswith("broken.py") for u in model.units())

    def test_exclude_patterns(self):
        model = PythonSourceModel.from_directory(SAMPLE_SRC, exclude=["api/v2/*"])
        assert model.find_class("UserController") is None
        assert model.find_class("AdminController") is not None

    def test_ignored_directories(self, tmp_path):
        (tmp_path / "__pycache__").mkdir()
        (tmp_path / "__pycache__" / "cached.py").write_text("class Cached:\n    pass\n")
        (tmp_path / "real.py").write_text("class Real:\n    pass\n")
        model = PythonSourceModel.from_directory(tmp_path)
        assert model.find_class("Real") is not None
        assert model.find_class("Cached") is None

    def test_empty_tuple_field_does_not_abort_scan(self, tmp_path):
        (tmp_path / "dto.py").write_text("class Empty:\n    t: tuple[()]\n")
        (tmp_path / "api.py").write_text("@Controller('items')\nclass ItemsController:\n    pass\n")
        model = PythonSourceModel.from_directory(tmp_path)
        assert model.find_class("ItemsController") is not None
        assert model.find_class("Empty").properties[0].type.kind == "array"

    def test_unit_paths_are_absolute_posix(self):
        model = PythonSourceModel.from_directory(SAMPLE_SRC)
        assert all(u.path.startswith("/") for u in model.units())

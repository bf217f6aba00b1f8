from pathlib import Path

import pytest

from api_autodocs.errors import SourceModelError
from api_autodocs.source.detect import detect_source, open_source_model
from api_autodocs.source.manifest import ManifestSourceModel
from api_autodocs.source.python import PythonSourceModel

FIXTURES = Path(__file__).parent / "fixtures"


class TestDetectSource:
    def test_detect_manifest(self):
        assert detect_source(FIXTURES / "manifest.yaml") == "manifest"

    def test_detect_python_directory(self):
        assert detect_source(FIXTURES / "sample_app") == "python"

    def test_open_dispatches_by_kind(self):
        assert isinstance(open_source_model(FIXTURES / "manifest.yaml"), ManifestSourceModel)
        assert isinstance(open_source_model(FIXTURES / "sample_app"), PythonSourceModel)

    def test_open_missing_path(self, tmp_path):
        with pytest.raises(SourceModelError):
            open_source_model(tmp_path / "missing")


class TestManifestSourceModel:
    def test_load_units(self):
        model = ManifestSourceModel.from_file(FIXTURES / "manifest.yaml")
        assert len(model.units()) == 1
        controller = model.find_class("OrdersController")
        assert controller.annotations[0].literal(0) == "orders"
        assert model.find_enum("OrderStatus").values == ["pending", "shipped"]

    def test_inline_member_types(self):
        model = ManifestSourceModel.from_file(FIXTURES / "manifest.yaml")
        summary = model.find_class("OrdersController").methods[1]
        shape = summary.return_type.args[0]
        assert shape.kind == "object"
        assert [m.name for m in shape.members] == ["total", "currency"]
        assert shape.members[1].optional is True

    def test_json_manifest(self, tmp_path):
        f = tmp_path / "decls.json"
        f.write_text('{"units": [{"path": "/src/a.ts", "classes": [{"name": "A"}]}]}')
        model = ManifestSourceModel.from_file(f)
        assert model.find_class("A") is not None

    def test_invalid_manifest(self, tmp_path):
        f = tmp_path / "bad.yaml"
        f.write_text("units: 3\n")
        with pytest.raises(SourceModelError):
            ManifestSourceModel.from_file(f)

    def test_non_mapping_manifest(self, tmp_path):
        f = tmp_path / "list.yaml"
        f.write_text("- a\n- b\n")
        with pytest.raises(SourceModelError):
            ManifestSourceModel.from_file(f)

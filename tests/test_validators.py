from api_autodocs.scanner.annotations import AnnotationClassifier, AnnotationVocabulary
from api_autodocs.scanner.validators import extract_constraints
from api_autodocs.source.base import Annotation

CLASSIFIER = AnnotationClassifier()


def _ann(name: str, *args: str) -> Annotation:
    return Annotation(name=name, args=list(args))


class TestExtractConstraints:
    def test_string_bounds(self):
        c = extract_constraints([_ann("MinLength", "3"), _ann("MaxLength", "20")], CLASSIFIER)
        assert c.min_length == 3
        assert c.max_length == 20

    def test_length_sets_both_bounds(self):
        c = extract_constraints([_ann("Length", "2", "10")], CLASSIFIER)
        assert (c.min_length, c.max_length) == (2, 10)

    def test_numeric_bounds(self):
        c = extract_constraints([_ann("Min", "0"), _ann("Max", "99.5")], CLASSIFIER)
        assert c.minimum == 0
        assert c.maximum == 99.5

    def test_array_bounds(self):
        c = extract_constraints([_ann("ArrayMinSize", "1"), _ann("ArrayMaxSize", "5")], CLASSIFIER)
        assert (c.min_items, c.max_items) == (1, 5)

    def test_pattern_from_regex_literal(self):
        c = extract_constraints([_ann("Matches", "/^[a-z]+$/i")], CLASSIFIER)
        assert c.pattern == "^[a-z]+$"

    def test_pattern_from_python_string(self):
        c = extract_constraints([_ann("Matches", "r'^\\d{4}$'")], CLASSIFIER)
        assert c.pattern == "^\\d{4}$"

    def test_formats(self):
        assert extract_constraints([_ann("IsEmail")], CLASSIFIER).format == "email"
        assert extract_constraints([_ann("IsUrl")], CLASSIFIER).format == "uri"
        assert extract_constraints([_ann("IsUUID", "'4'")], CLASSIFIER).format == "uuid"

    def test_date_sets_type_and_format(self):
        c = extract_constraints([_ann("IsDateString")], CLASSIFIER)
        assert (c.type, c.format) == ("string", "date-time")

    def test_membership(self):
        c = extract_constraints([_ann("IsIn", "['a', 'b']"), _ann("IsNotIn", "['x']")], CLASSIFIER)
        assert c.enum == ("a", "b")
        assert c.not_enum == ("x",)

    def test_enum_resolved_through_lookup(self):
        lookup = {"Role": ["admin", "user"]}.get
        c = extract_constraints([_ann("IsEnum", "Role")], CLASSIFIER, lookup)
        assert c.enum == ("admin", "user")

    def test_unknown_enum_is_ignored(self):
        c = extract_constraints([_ann("IsEnum", "Missing")], CLASSIFIER, lambda name: None)
        assert c.enum is None

    def test_unknown_annotations_ignored(self):
        c = extract_constraints([_ann("Transform", "x => x"), _ann("ApiProperty")], CLASSIFIER)
        assert c.is_empty()

    def test_later_annotation_wins(self):
        c = extract_constraints([_ann("MinLength", "3"), _ann("Length", "5")], CLASSIFIER)
        assert c.min_length == 5

    def test_presence_flags(self):
        c = extract_constraints([_ann("IsNotEmpty"), _ann("IsOptional")], CLASSIFIER)
        assert c.required is True
        assert c.optional is True

    def test_non_numeric_bound_ignored(self):
        c = extract_constraints([_ann("Min", "MIN_AGE")], CLASSIFIER)
        assert c.minimum is None

    def test_custom_vocabulary(self):
        classifier = AnnotationClassifier(AnnotationVocabulary(validators={"Ge": "min", "Email": "email"}))
        c = extract_constraints([_ann("Ge", "1"), _ann("Email"), _ann("Min", "5")], classifier)
        assert c.minimum == 1
        assert c.format == "email"

"""Annotation classifier — maps annotation names to their semantic role.

The vocabulary is configuration, so the scanners work with any framework's
decorator names. Defaults follow the common controller/DTO decorator set.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from api_autodocs.source.base import Annotation


class AnnotationVocabulary(BaseModel):
    """Annotation names per role."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    controller: list[str] = ["Controller"]
    module: list[str] = ["Module"]
    version: list[str] = ["Version"]
    http_methods: dict[str, str] = {
        "Get": "GET",
        "Post": "POST",
        "Put": "PUT",
        "Patch": "PATCH",
        "Delete": "DELETE",
        "Options": "OPTIONS",
        "Head": "HEAD",
    }
    param_sources: dict[str, str] = {
        "Param": "path",
        "Query": "query",
        "Headers": "header",
        "Body": "body",
    }
    guards: list[str] = ["UseGuards"]
    public: list[str] = ["Public", "SkipAuth", "SkipGuard", "SkipAllGuards"]
    async_wrappers: list[str] = ["Promise", "Awaitable", "Coroutine", "Observable", "Future", "Task"]
    validators: dict[str, str] = {
        "IsString": "string",
        "IsNumber": "number",
        "IsInt": "integer",
        "IsBoolean": "boolean",
        "IsArray": "array",
        "IsEmail": "email",
        "IsUrl": "url",
        "IsUUID": "uuid",
        "IsDate": "date",
        "IsDateString": "date",
        "IsEnum": "enum",
        "IsOptional": "optional",
        "IsNotEmpty": "required",
        "IsDefined": "required",
        "Min": "min",
        "Max": "max",
        "MinLength": "min_length",
        "MaxLength": "max_length",
        "Length": "length",
        "Matches": "pattern",
        "ArrayMinSize": "min_items",
        "ArrayMaxSize": "max_items",
        "IsIn": "in",
        "IsNotIn": "not_in",
    }


class AnnotationClassifier:
    """Answers role questions about annotations using a vocabulary."""

    def __init__(self, vocabulary: AnnotationVocabulary | None = None):
        self.vocabulary = vocabulary or AnnotationVocabulary()
        self._controller = set(self.vocabulary.controller)
        self._module = set(self.vocabulary.module)
        self._version = set(self.vocabulary.version)
        self._guards = set(self.vocabulary.guards)
        self._public = set(self.vocabulary.public)
        self._wrappers = set(self.vocabulary.async_wrappers)

    @property
    def module_names(self) -> set[str]:
        return set(self._module)

    def is_controller(self, annotation: Annotation) -> bool:
        return annotation.name in self._controller

    def http_method(self, annotation: Annotation) -> str | None:
        return self.vocabulary.http_methods.get(annotation.name)

    def param_source(self, annotation: Annotation) -> str | None:
        return self.vocabulary.param_sources.get(annotation.name)

    def is_guard(self, annotation: Annotation) -> bool:
        return annotation.name in self._guards

    def is_public(self, annotation: Annotation) -> bool:
        return annotation.name in self._public

    def is_async_wrapper(self, type_name: str) -> bool:
        return type_name in self._wrappers

    def constraint_rule(self, annotation: Annotation) -> str | None:
        return self.vocabulary.validators.get(annotation.name)

    def find_controller(self, annotations: list[Annotation]) -> Annotation | None:
        return next((a for a in annotations if self.is_controller(a)), None)

    def find_version(self, annotations: list[Annotation]) -> Annotation | None:
        return next((a for a in annotations if a.name in self._version), None)

    def find_http_method(self, annotations: list[Annotation]) -> Annotation | None:
        return next((a for a in annotations if self.http_method(a)), None)

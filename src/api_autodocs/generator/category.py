"""Category generator — configured category overrides and grouping."""

import re

from api_autodocs.scanner.base import ControllerDescriptor
from api_autodocs.scanner.controller import UNCATEGORIZED


class CategoryGenerator:
    """Applies category mappings and groups controllers by category."""

    def apply_category_mapping(
        self,
        controllers: list[ControllerDescriptor],
        category_mapping: dict[str, str] | None,
    ) -> list[ControllerDescriptor]:
        """Return copies of ``controllers`` with mapped categories.

        Lookup order per controller: exact key, normalized key, normalized
        prefix. The first hit replaces the category; otherwise it is kept.
        """
        if not category_mapping:
            return controllers

        result = []
        for controller in controllers:
            mapped = self._find_mapped_category(controller.category, category_mapping)
            result.append(controller.model_copy(update={"category": mapped or controller.category}))
        return result

    def _find_mapped_category(self, category: str, mapping: dict[str, str]) -> str | None:
        if category in mapping:
            return mapping[category]

        normalized = _normalize(category)
        for key, value in mapping.items():
            if _normalize(key) == normalized:
                return value
        for key, value in mapping.items():
            # "Admin - Auth" matches the key "admin"
            prefix = _normalize(key)
            if prefix and normalized.startswith(prefix):
                return value
        return None

    def get_categories(self, controllers: list[ControllerDescriptor]) -> list[str]:
        """Sorted distinct non-empty categories."""
        return sorted({c.category for c in controllers if c.category})

    def group_by_category(self, controllers: list[ControllerDescriptor]) -> dict[str, list[ControllerDescriptor]]:
        grouped: dict[str, list[ControllerDescriptor]] = {}
        for controller in controllers:
            grouped.setdefault(controller.category or UNCATEGORIZED, []).append(controller)
        return grouped


def _normalize(text: str) -> str:
    return re.sub(r"[\s-]+", "", text.lower())

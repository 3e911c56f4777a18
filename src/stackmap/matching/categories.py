"""Rule classification: which techs make components and which are primary."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from stackmap.core.models import Rule


@dataclass(frozen=True)
class Category:
    """Defaults applied to every rule of one type."""

    name: str
    is_component: bool = False
    description: str = ""


class CategoryTable:
    """Lookup of :class:`Category` by rule type."""

    def __init__(self, categories: Optional[Mapping[str, Category]] = None):
        self._categories: Dict[str, Category] = dict(categories or {})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CategoryTable":
        categories: Dict[str, Category] = {}
        for name, value in (data or {}).items():
            value = value or {}
            categories[str(name)] = Category(
                name=str(name),
                is_component=bool(value.get("is_component", False)),
                description=str(value.get("description") or ""),
            )
        return cls(categories)

    def get(self, rule_type: str) -> Optional[Category]:
        return self._categories.get(rule_type)

    def __contains__(self, rule_type: object) -> bool:
        return rule_type in self._categories

    def __len__(self) -> int:
        return len(self._categories)

    def names(self):
        return sorted(self._categories)


def should_create_component(rule: Rule, categories: Optional[CategoryTable]) -> bool:
    """Rule flag first, then the category default, else no component."""
    if rule.is_component is not None:
        return bool(rule.is_component)
    if categories is not None:
        category = categories.get(rule.type)
        if category is not None:
            return category.is_component
    return False


def should_add_primary_tech(rule: Rule, categories: Optional[CategoryTable]) -> bool:
    if rule.is_primary_tech is not None:
        return bool(rule.is_primary_tech)
    return should_create_component(rule, categories)

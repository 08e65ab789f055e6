"""Property catalog models: the static description of each equipment category.

A category's natural key is the ordered tuple of its key-component
properties, in declaration order.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from gridrecon.core.exceptions import MalformedDescriptorError, UnknownCategoryError
from gridrecon.models.columns import normalize_header


class PropertyDescriptor(BaseModel):
    """A single canonical field of an equipment category."""

    model_config = {"frozen": True}

    name: str
    required: bool = False
    default_value: Optional[str] = None
    aliases: tuple[str, ...] = ()
    is_key_component: bool = False
    group: str = "General"  # Identity, Electrical, Physical, Protection, Study Results
    description: str = ""

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("property name must not be blank")
        return value

    @field_validator("aliases", mode="before")
    @classmethod
    def _clean_aliases(cls, value: Any) -> tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        out: list[str] = []
        seen: set[str] = set()
        for alias in value:
            alias = str(alias).strip()
            if alias and alias.casefold() not in seen:
                seen.add(alias.casefold())
                out.append(alias)
        return tuple(out)

    @property
    def normalized_aliases(self) -> frozenset[str]:
        return frozenset(filter(None, (normalize_header(a) for a in self.aliases)))

    def has_alias(self, text: str) -> bool:
        """Case- and punctuation-insensitive alias membership."""
        return normalize_header(text) in self.normalized_aliases


class CategoryCatalog(BaseModel):
    """All property descriptors for one equipment category."""

    model_config = {"frozen": True}

    name: str
    source_class: str = ""  # table name in the exporting tool, e.g. "Buses"
    properties: tuple[PropertyDescriptor, ...] = ()

    @model_validator(mode="after")
    def _check_properties(self) -> "CategoryCatalog":
        if not self.name.strip():
            raise ValueError("category name must not be blank")
        seen: set[str] = set()
        for prop in self.properties:
            folded = prop.name.casefold()
            if folded in seen:
                raise ValueError(f"duplicate property {prop.name!r} in category {self.name!r}")
            seen.add(folded)
        if not any(p.is_key_component for p in self.properties):
            raise ValueError(f"category {self.name!r} declares no key component")
        return self

    @property
    def key_properties(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.properties if p.is_key_component)

    @property
    def required_properties(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.properties if p.required)

    @property
    def property_names(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.properties)

    def get_property(self, name: str) -> PropertyDescriptor | None:
        folded = name.strip().casefold()
        for prop in self.properties:
            if prop.name.casefold() == folded:
                return prop
        return None


class PropertyCatalog(BaseModel):
    """Category name → CategoryCatalog, looked up case-insensitively."""

    model_config = {"frozen": True}

    categories: dict[str, CategoryCatalog] = Field(default_factory=dict)

    @classmethod
    def of(cls, *categories: CategoryCatalog) -> "PropertyCatalog":
        return cls(categories={c.name: c for c in categories})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PropertyCatalog":
        """Build from ``{"categories": [{"name": ..., "properties": [...]}, ...]}``.

        Raises:
            MalformedDescriptorError: if any category or descriptor is invalid.
        """
        try:
            entries = data.get("categories", [])
            if isinstance(entries, dict):
                entries = [{"name": k, **v} for k, v in entries.items()]
            return cls.of(*(CategoryCatalog.model_validate(e) for e in entries))
        except (ValidationError, AttributeError, TypeError) as exc:
            raise MalformedDescriptorError(f"Invalid property catalog: {exc}") from exc

    def category(self, name: str) -> CategoryCatalog:
        found = self.categories.get(name)
        if found is not None:
            return found
        folded = name.strip().casefold()
        for key, cat in self.categories.items():
            if key.casefold() == folded:
                return cat
        raise UnknownCategoryError(name)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        try:
            self.category(name)
        except UnknownCategoryError:
            return False
        return True

    @property
    def category_names(self) -> list[str]:
        return sorted(self.categories)

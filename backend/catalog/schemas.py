"""Pydantic models for rule catalog payloads.

The browser consumes two payload families:

- the engine catalog (``ui/rulesInfo``): engine name -> groups and category facets
- rule documents (``ui/rules``, ``ui/rulesByCategory``): rule type -> objects -> method rules

Every optional field on a method rule is typed and defaults to ``None`` so the
formatting policy can check presence explicitly instead of probing an open map.
Mapping order is display order and is preserved from the payload.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator


TRIVIAL_CONDITIONS = ("true", "false")


# =============================================================================
# Strict JSON decoding
# =============================================================================


class DuplicateKeyError(ValueError):
    """Raised when a JSON object repeats a key."""


def reject_duplicate_keys(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    """``object_pairs_hook`` that refuses repeated keys at any nesting level."""
    result: dict[str, Any] = {}
    for key, value in pairs:
        if key in result:
            raise DuplicateKeyError(f"Duplicate key in payload: {key!r}")
        result[key] = value
    return result


def loads_strict(text: str | bytes) -> Any:
    """Decode JSON, failing on duplicate object keys."""
    return json.loads(text, object_pairs_hook=reject_duplicate_keys)


# =============================================================================
# Engine Catalog
# =============================================================================


class EngineInfo(BaseModel):
    """Groups and category facets available under one engine."""

    groups: list[str] = Field(default_factory=list)
    categories: dict[str, list[str]] = Field(default_factory=dict)


# =============================================================================
# Rule Document
# =============================================================================


class MethodRule(BaseModel):
    """A single documented rule entry."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    condition: str | None = None
    no_content: bool | None = Field(None, alias="noContent")
    documentation: str | None = None
    code: str | None = None
    method_name: str | None = Field(None, alias="methodName")
    ncubes: list[str] | None = None
    app_id: str | None = Field(None, alias="appId")

    @model_validator(mode="after")
    def _require_app_id_for_references(self) -> MethodRule:
        if self.ncubes and self.app_id is None:
            raise ValueError("appId is required when ncubes is non-empty")
        return self

    @property
    def has_trivial_condition(self) -> bool:
        """True when the condition is the literal ``true`` or ``false``."""
        return self.condition in TRIVIAL_CONDITIONS


class RuleObject(BaseModel):
    """A named unit holding an ordered list of method rules."""

    rules: list[MethodRule] = Field(default_factory=list)


class RuleTypeEntry(BaseModel):
    """Rule objects sharing one implementation class."""

    model_config = ConfigDict(populate_by_name=True)

    class_name: str | None = Field(None, alias="className")
    objects: dict[str, RuleObject] = Field(default_factory=dict)


class ReferenceHtml(BaseModel):
    """Pre-rendered representation of a referenced rule set."""

    html: str


RuleDocument = dict[str, RuleTypeEntry]
EngineCatalog = dict[str, EngineInfo]

_rule_document_adapter = TypeAdapter(RuleDocument)
_engine_catalog_adapter = TypeAdapter(EngineCatalog)


def parse_rule_document(data: Any) -> RuleDocument:
    """Validate a decoded ``ui/rules`` payload."""
    return _rule_document_adapter.validate_python(data)


def parse_engine_catalog(data: Any) -> EngineCatalog:
    """Validate a decoded ``ui/rulesInfo`` payload."""
    return _engine_catalog_adapter.validate_python(data)


def dump_rule_document(document: RuleDocument) -> dict[str, Any]:
    """Serialize a rule document back to its wire shape."""
    return {
        rule_type: entry.model_dump(by_alias=True, exclude_none=True)
        for rule_type, entry in document.items()
    }


# =============================================================================
# Catalog File (metadata service source)
# =============================================================================


class RuleTypeSource(BaseModel):
    """A rule type as stored in the catalog file, with its facet values."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    group: str | None = None
    categories: dict[str, str] = Field(default_factory=dict)
    class_name: str | None = Field(None, alias="className")
    objects: dict[str, RuleObject] = Field(default_factory=dict)

    def to_entry(self) -> RuleTypeEntry:
        return RuleTypeEntry(class_name=self.class_name, objects=self.objects)


class EngineSource(BaseModel):
    """Everything the catalog file knows about one engine."""

    model_config = ConfigDict(populate_by_name=True)

    groups: list[str] = Field(default_factory=list)
    categories: dict[str, list[str]] = Field(default_factory=dict)
    rule_types: list[RuleTypeSource] = Field(default_factory=list, alias="ruleTypes")
    # appId -> reference name -> pre-rendered html
    references: dict[str, dict[str, str]] = Field(default_factory=dict)

    def info(self) -> EngineInfo:
        return EngineInfo(groups=self.groups, categories=self.categories)


class CatalogFile(BaseModel):
    """Top-level catalog file."""

    engines: dict[str, EngineSource] = Field(default_factory=dict)

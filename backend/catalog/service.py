"""
Catalog Store - file-backed lookup of precomputed rule metadata.

Rule metadata is produced elsewhere; this store only reads it and answers the
browser's group, category and reference queries. Nothing is evaluated here.
"""

from __future__ import annotations

import logging
from pathlib import Path

from backend.catalog.schemas import (
    CatalogFile,
    EngineCatalog,
    EngineSource,
    RuleDocument,
    loads_strict,
)

logger = logging.getLogger(__name__)


class UnknownEngineError(KeyError):
    """Raised when a query names an engine the catalog does not hold."""


class UnknownReferenceError(KeyError):
    """Raised when a referenced rule set cannot be found."""


class CatalogStore:
    """Holds a loaded catalog file and answers metadata queries."""

    def __init__(self, catalog: CatalogFile | None = None) -> None:
        self._catalog = catalog or CatalogFile()

    @classmethod
    def from_file(cls, path: str | Path) -> CatalogStore:
        """Load a catalog from a JSON file (duplicate keys are rejected)."""
        path = Path(path)
        data = loads_strict(path.read_text(encoding="utf-8"))
        catalog = CatalogFile.model_validate(data)
        logger.info("Loaded catalog %s with %d engine(s)", path, len(catalog.engines))
        return cls(catalog)

    def _engine(self, engine: str) -> EngineSource:
        try:
            return self._catalog.engines[engine]
        except KeyError:
            raise UnknownEngineError(engine) from None

    def engine_catalog(self) -> EngineCatalog:
        """Engine name -> groups and categories, in file order."""
        return {name: source.info() for name, source in self._catalog.engines.items()}

    def rules_for_group(self, engine: str, group: str) -> RuleDocument:
        """Rule types belonging to ``group`` under ``engine``."""
        source = self._engine(engine)
        return {
            rule_type.name: rule_type.to_entry()
            for rule_type in source.rule_types
            if rule_type.group == group
        }

    def rules_by_category(
        self,
        engine: str,
        selections: dict[str, list[str]],
    ) -> RuleDocument:
        """Rule types matching every supplied category selection.

        Categories absent from ``selections`` do not constrain the result, so an
        empty mapping returns every rule type of the engine.
        """
        source = self._engine(engine)
        document: RuleDocument = {}
        for rule_type in source.rule_types:
            matches = all(
                rule_type.categories.get(category) in set(values)
                for category, values in selections.items()
                if values
            )
            if matches:
                document[rule_type.name] = rule_type.to_entry()
        return document

    def reference_html(self, name: str, app_id: str) -> str:
        """Pre-rendered html for a referenced rule set."""
        for source in self._catalog.engines.values():
            html = source.references.get(app_id, {}).get(name)
            if html is not None:
                return html
        raise UnknownReferenceError(f"{name} ({app_id})")

"""
Selection module - Engine, group and category state for the rule browser.

Holds the cascading facet chain (engine -> group or categories) and enforces
its reset rules. The state is a plain value owned by the page controller, so
it can be exercised without a running page.

States:
- uninitialized: engine catalog not loaded yet
- engine_selected: engine chosen, no group and no applied filter
- group_queried / category_queried: the two mutually exclusive query modes
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Literal, Mapping

from backend.catalog.schemas import EngineCatalog, EngineInfo

QueryMode = Literal["group", "category"]
SelectionStatus = Literal["uninitialized", "engine_selected", "group_queried", "category_queried"]


class InvalidSelectionError(ValueError):
    """Raised for an engine, group or category value outside the catalog."""


# =============================================================================
# Data Structures
# =============================================================================


@dataclass
class CategoryFacet:
    """One category of the filter form with its permissible values."""

    name: str
    values: list[str] = field(default_factory=list)


@dataclass
class SelectionState:
    """Current engine, group and applied category filter."""

    catalog: EngineCatalog = field(default_factory=dict)
    engine: str = ""
    group: str = ""
    category_selections: dict[str, set[str]] = field(default_factory=dict)
    mode: QueryMode | None = None
    loaded: bool = False

    # -------------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------------

    @property
    def status(self) -> SelectionStatus:
        if not self.loaded or not self.engine:
            return "uninitialized"
        if self.mode == "group":
            return "group_queried"
        if self.mode == "category":
            return "category_queried"
        return "engine_selected"

    @property
    def engines(self) -> list[str]:
        return list(self.catalog)

    @property
    def engine_info(self) -> EngineInfo:
        """EngineInfo of the current engine (empty before the catalog loads)."""
        return self.catalog.get(self.engine) or EngineInfo()

    @property
    def group_options(self) -> list[str]:
        """Group choices in display order, led by the empty 'no group' option."""
        if not self.engine:
            return []
        return ["", *self.engine_info.groups]

    @property
    def category_facets(self) -> list[CategoryFacet]:
        return [
            CategoryFacet(name=name, values=list(values))
            for name, values in self.engine_info.categories.items()
        ]

    @property
    def show_category_form(self) -> bool:
        """The filter form is hidden when the engine has no categories."""
        return bool(self.engine_info.categories)

    def selections_payload(self) -> dict[str, list[str]]:
        """Applied selections in facet order, values in permissible order."""
        payload: dict[str, list[str]] = {}
        for name, values in self.engine_info.categories.items():
            chosen = self.category_selections.get(name)
            if chosen:
                payload[name] = [v for v in values if v in chosen]
        return payload

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def load_catalog(self, catalog: EngineCatalog) -> None:
        """Install the engine catalog and select its first engine."""
        if self.loaded:
            raise InvalidSelectionError("Engine catalog is already loaded")
        self.catalog = dict(catalog)
        self.loaded = True
        if self.catalog:
            self.set_engine(next(iter(self.catalog)))

    def set_engine(self, name: str) -> None:
        """Switch engine, resetting the group and every category selection."""
        if name not in self.catalog:
            raise InvalidSelectionError(f"Unknown engine: {name!r}")
        self.engine = name
        self.group = ""
        self.category_selections = {}
        self.mode = None

    def set_group(self, name: str) -> bool:
        """Select a group ('' clears it).

        Returns:
            True when a group query should be issued
        """
        if name and name not in self.engine_info.groups:
            raise InvalidSelectionError(f"Unknown group for {self.engine!r}: {name!r}")
        self.group = name
        self.category_selections = {}
        self.mode = "group" if name else None
        return bool(name)

    def apply_category_filter(self, form_values: Mapping[str, Iterable[str]]) -> dict[str, list[str]]:
        """Apply the filter form and return the outgoing selections.

        Categories with no chosen value are left out entirely, so they do not
        constrain the query. The query is issued even when nothing is chosen.
        """
        categories = self.engine_info.categories
        selections: dict[str, set[str]] = {}
        for name, values in form_values.items():
            if name not in categories:
                raise InvalidSelectionError(f"Unknown category for {self.engine!r}: {name!r}")
            chosen = set(values)
            unknown = chosen.difference(categories[name])
            if unknown:
                raise InvalidSelectionError(
                    f"Unknown value(s) for category {name!r}: {sorted(unknown)}"
                )
            if chosen:
                selections[name] = chosen

        self.group = ""
        self.category_selections = selections
        self.mode = "category"
        return self.selections_payload()

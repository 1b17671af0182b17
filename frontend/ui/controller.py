"""
Controller module - Wires browser events to selection state and queries.

Every user event (page load, engine change, group change, filter apply,
reference click) runs as a coroutine on the page's event loop and suspends
only while the rules client is waiting on the server.

Queries are never cancelled. Each tree query takes a sequence number instead,
and a response that is not the latest issued is dropped, so the last request
issued decides what the user sees. Rendered trees are replaced wholesale.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Protocol

from backend.catalog.schemas import RuleDocument
from backend.core.visualization import RuleTree, RuleTreeBuilder
from frontend.helpers.rules_client import RulesClient, RulesClientError
from frontend.ui.selection import QueryMode, SelectionState

logger = logging.getLogger(__name__)

ViewKey = tuple[str, str]


# =============================================================================
# Host Capabilities
# =============================================================================


class TreeSurface(Protocol):
    """Display medium for the selectors and the rule tree."""

    def show_selectors(self, state: SelectionState) -> None: ...

    def read_category_form(self) -> dict[str, list[str]]: ...

    def clear(self) -> None: ...

    def render(self, tree: RuleTree) -> None: ...

    def show_error(self, error: ViewError) -> None: ...


class ViewSurface(Protocol):
    """Writable secondary view."""

    def write(self, html: str) -> None: ...


class ViewHost(Protocol):
    """Opens secondary views; the same key yields the same view."""

    def open_or_reuse(self, key: ViewKey) -> ViewSurface: ...


# =============================================================================
# Data Structures
# =============================================================================


@dataclass(frozen=True)
class ViewError:
    """User-facing failure state shown in place of the tree."""

    kind: str  # transport, payload
    message: str
    retryable: bool = True

    @classmethod
    def from_exception(cls, exc: RulesClientError) -> ViewError:
        return cls(kind=exc.kind, message=str(exc))

    @property
    def title(self) -> str:
        return {
            "transport": "Could not reach the rules server",
            "payload": "The rules server returned an unexpected response",
        }.get(self.kind, "Request failed")


@dataclass(frozen=True)
class TreeQuery:
    """One outgoing tree query."""

    mode: QueryMode
    engine: str
    group: str = ""
    selections: dict[str, list[str]] = field(default_factory=dict)


# =============================================================================
# Cross References
# =============================================================================


class CrossReferenceResolver:
    """Opens referenced rule sets in secondary views."""

    def __init__(self, client: RulesClient, host: ViewHost) -> None:
        self.client = client
        self.host = host
        self.last_error: ViewError | None = None

    @staticmethod
    def view_key(name: str, app_id: str) -> ViewKey:
        """Key of the secondary view for a reference; stable across clicks."""
        return (name, app_id)

    async def activate(self, name: str, app_id: str) -> bool:
        """Fetch the referenced rule set and show it in its secondary view.

        Returns:
            True when the view was written
        """
        try:
            html = await self.client.get_reference_html(name, app_id)
        except RulesClientError as exc:
            logger.warning("Reference %s (%s) failed: %s", name, app_id, exc)
            self.last_error = ViewError.from_exception(exc)
            return False

        self.last_error = None
        view = self.host.open_or_reuse(self.view_key(name, app_id))
        view.write(html)
        return True


# =============================================================================
# Controller
# =============================================================================


class UIController:
    """Owns the selection state and keeps the displayed tree in step with it."""

    def __init__(
        self,
        client: RulesClient,
        surface: TreeSurface,
        host: ViewHost,
        builder: RuleTreeBuilder | None = None,
    ) -> None:
        self.client = client
        self.surface = surface
        self.builder = builder or RuleTreeBuilder()
        self.state = SelectionState()
        self.resolver = CrossReferenceResolver(client, host)

        self.tree: RuleTree | None = None
        self.error: ViewError | None = None
        self._sequence = 0
        self._retry: Callable[[], Awaitable[bool]] | None = None

    @property
    def sequence(self) -> int:
        """Number of the latest issued tree query."""
        return self._sequence

    @property
    def can_retry(self) -> bool:
        return self._retry is not None

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    async def load(self) -> bool:
        """Page load: fetch the engine catalog once and build the selectors."""
        self._reset_display()
        try:
            catalog = await self.client.get_rules_info()
        except RulesClientError as exc:
            self._fail(exc, self.load)
            return False

        self.state.load_catalog(catalog)
        logger.info("Loaded %d engine(s)", len(catalog))
        self.surface.show_selectors(self.state)
        return True

    async def select_engine(self, name: str) -> None:
        """Switch engine; nothing is queried until a group or filter is chosen."""
        self.state.set_engine(name)
        self._advance()
        self._reset_display()
        self.surface.show_selectors(self.state)

    async def select_group(self, name: str) -> bool:
        """Select a group and query its rules ('' only clears the tree)."""
        should_query = self.state.set_group(name)
        self._advance()
        self._reset_display()
        if not should_query:
            return False
        return await self._run(TreeQuery("group", self.state.engine, group=name))

    async def apply_category_filter(self, form_values: dict[str, list[str]] | None = None) -> bool:
        """Apply the category form and query the matching rules."""
        if form_values is None:
            form_values = self.surface.read_category_form()
        selections = self.state.apply_category_filter(form_values)
        self._reset_display()
        return await self._run(TreeQuery("category", self.state.engine, selections=selections))

    async def activate_reference(self, name: str, app_id: str) -> bool:
        """Open a referenced rule set in its secondary view."""
        return await self.resolver.activate(name, app_id)

    async def retry(self) -> bool:
        """Re-issue the request that last failed."""
        if self._retry is None:
            return False
        action, self._retry = self._retry, None
        self._reset_display()
        return await action()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _advance(self) -> int:
        self._sequence += 1
        return self._sequence

    def _reset_display(self) -> None:
        self.tree = None
        self.error = None
        self._retry = None
        self.surface.clear()

    def _fail(self, exc: RulesClientError, retry: Callable[[], Awaitable[bool]]) -> None:
        logger.warning("Request failed: %s", exc)
        self.tree = None
        self.error = ViewError.from_exception(exc)
        self._retry = retry
        self.surface.clear()
        self.surface.show_error(self.error)

    async def _fetch(self, query: TreeQuery) -> RuleDocument:
        if query.mode == "group":
            return await self.client.get_rules(query.engine, query.group)
        return await self.client.get_rules_by_category(query.engine, query.selections)

    async def _run(self, query: TreeQuery) -> bool:
        sequence = self._advance()
        try:
            document = await self._fetch(query)
        except RulesClientError as exc:
            if sequence != self._sequence:
                logger.debug("Ignoring failure of superseded %s query #%d", query.mode, sequence)
                return False
            self._fail(exc, functools.partial(self._run, query))
            return False

        if sequence != self._sequence:
            logger.info("Discarding stale %s response #%d (latest #%d)", query.mode, sequence, self._sequence)
            return False

        self.tree = self.builder.build(document)
        self.surface.clear()
        self.surface.render(self.tree)
        return True

"""Pytest fixtures for test suite."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable

import pytest

from backend.catalog import CatalogStore
from backend.core.visualization import RuleTree
from frontend.helpers.rules_client import RulesClient, RulesClientError
from frontend.ui.controller import UIController, ViewError
from frontend.ui.rule_tree_view import StreamlitViewHost
from frontend.ui.selection import SelectionState


# =============================================================================
# Test Doubles
# =============================================================================


class ScriptedRulesClient(RulesClient):
    """RulesClient answering from a script instead of the network.

    ``responses`` maps an endpoint to a payload or to a callable taking the
    request params/body. ``gates`` maps a call index to an asyncio.Event the
    call waits on, which lets tests control response order. ``failures`` maps
    an endpoint to an exception raised once on its next call.
    """

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        super().__init__("http://rules.test")
        self.responses: dict[str, Any] = responses or {}
        self.calls: list[tuple[str, str, Any]] = []
        self.gates: dict[int, asyncio.Event] = {}
        self.failures: dict[str, RulesClientError] = {}

    async def query(self, endpoint: str, params: dict | None = None) -> Any:
        return await self._respond("GET", endpoint, params)

    async def query_filtered(self, endpoint: str, body: dict) -> Any:
        return await self._respond("POST", endpoint, body)

    async def _respond(self, method: str, endpoint: str, payload: Any) -> Any:
        index = len(self.calls)
        self.calls.append((method, endpoint, payload))
        gate = self.gates.get(index)
        if gate is not None:
            await gate.wait()
        if endpoint in self.failures:
            raise self.failures.pop(endpoint)
        response = self.responses[endpoint]
        if callable(response):
            return response(payload)
        return response


class RecordingSurface:
    """TreeSurface that records every call in order."""

    def __init__(self) -> None:
        self.events: list[tuple] = []
        self.state: SelectionState | None = None
        self.tree: RuleTree | None = None
        self.error: ViewError | None = None
        self.form: dict[str, list[str]] = {}

    def show_selectors(self, state: SelectionState) -> None:
        self.events.append(("selectors", state.engine))
        self.state = state

    def read_category_form(self) -> dict[str, list[str]]:
        return self.form

    def clear(self) -> None:
        self.events.append(("clear",))
        self.tree = None
        self.error = None

    def render(self, tree: RuleTree) -> None:
        self.events.append(("render", [g.rule_type for g in tree.groups]))
        self.tree = tree

    def show_error(self, error: ViewError) -> None:
        self.events.append(("error", error.kind))
        self.error = error


# =============================================================================
# Payload Fixtures
# =============================================================================


@pytest.fixture
def engine_catalog_payload() -> dict[str, Any]:
    """Engine catalog with one categorized and one plain engine."""
    return {
        "Pricing": {
            "groups": ["Quote", "Renewal"],
            "categories": {
                "Status": ["Active", "Retired"],
                "Line": ["Auto", "Home"],
            },
        },
        "Claims": {"groups": ["Intake"], "categories": {}},
    }


@pytest.fixture
def rule_documents() -> dict[str, dict[str, Any]]:
    """One rule document per group name."""
    return {
        "Quote": {
            "ControlFlow": {
                "className": "com.acme.ControlFlow",
                "objects": {
                    "QuoteEntry": {
                        "rules": [
                            {"name": "start", "condition": "true"},
                            {"name": "young", "condition": "age < 25", "code": "x += 1"},
                        ]
                    }
                },
            }
        },
        "Renewal": {
            "RenewalFlow": {
                "className": "com.acme.Renewal",
                "objects": {"RenewalEntry": {"rules": [{"name": "loyalty"}]}},
            }
        },
        "Intake": {
            "IntakeChecks": {
                "className": "com.acme.Intake",
                "objects": {"FirstNotice": {"rules": [{"name": "in force"}]}},
            }
        },
    }


@pytest.fixture
def scripted_client(
    engine_catalog_payload: dict[str, Any],
    rule_documents: dict[str, dict[str, Any]],
) -> ScriptedRulesClient:
    """Scripted client serving the payload fixtures."""
    return ScriptedRulesClient(
        {
            "/ui/rulesInfo": engine_catalog_payload,
            "/ui/rules": lambda params: rule_documents[params["group"]],
            "/ui/rulesByCategory": lambda body: rule_documents["Quote"],
            "/ui/ncube": lambda params: {"html": f"<h1>{params['name']}</h1>"},
        }
    )


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def view_host() -> StreamlitViewHost:
    return StreamlitViewHost()


@pytest.fixture
def make_controller(
    scripted_client: ScriptedRulesClient,
    surface: RecordingSurface,
    view_host: StreamlitViewHost,
) -> Callable[[], UIController]:
    """Factory for a controller wired to the scripted client."""

    def _make() -> UIController:
        return UIController(scripted_client, surface, view_host)

    return _make


# =============================================================================
# Catalog Fixtures
# =============================================================================


@pytest.fixture
def catalog_file() -> Path:
    """Path to the bundled sample catalog."""
    return Path(__file__).parent.parent / "backend" / "catalog" / "data" / "sample_catalog.json"


@pytest.fixture
def catalog_store(catalog_file: Path) -> CatalogStore:
    """Catalog store loaded from the sample catalog."""
    return CatalogStore.from_file(catalog_file)

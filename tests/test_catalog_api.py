"""Tests for the rule documentation metadata endpoints."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from backend.catalog import CatalogStore, parse_rule_document


# =============================================================================
# Test Client Setup
# =============================================================================


@pytest.fixture
def ui_client(catalog_store: CatalogStore):
    """Create test client with the catalog routes and the sample catalog."""
    from fastapi import FastAPI
    from backend.catalog import catalog_router
    from backend.catalog import router as router_module

    # Save original state
    original_store = router_module._store

    # Inject test store
    router_module._store = catalog_store

    app = FastAPI()
    app.include_router(catalog_router)

    yield TestClient(app)

    # Restore original state
    router_module._store = original_store


# =============================================================================
# Endpoint Tests
# =============================================================================


class TestRulesInfo:
    """Tests for GET /ui/rulesInfo."""

    def test_engine_catalog(self, ui_client) -> None:
        response = ui_client.get("/ui/rulesInfo")
        assert response.status_code == 200

        data = response.json()
        assert list(data) == ["Pricing", "Claims"]
        assert data["Pricing"]["groups"] == ["Quote", "Renewal"]
        assert data["Pricing"]["categories"] == {
            "Status": ["Active", "Retired"],
            "Line": ["Auto", "Home"],
        }
        assert data["Claims"]["categories"] == {}


class TestRules:
    """Tests for GET /ui/rules."""

    def test_rules_for_group(self, ui_client) -> None:
        response = ui_client.get("/ui/rules", params={"engine": "Pricing", "group": "Quote"})
        assert response.status_code == 200

        data = response.json()
        assert list(data) == ["ControlFlow", "Discounts"]
        assert data["ControlFlow"]["className"] == "com.acme.pricing.ControlFlowRules"

        rules = data["ControlFlow"]["objects"]["QuoteEntry"]["rules"]
        assert [r["name"] for r in rules] == ["Start quote", "Young driver surcharge", "Placeholder"]
        assert rules[0]["ncubes"] == ["rating.base", "rating.territory"]
        assert rules[0]["appId"] == "acme/pricing/1.4.0/RELEASE"
        assert rules[2]["noContent"] is True
        # response parses as a rule document
        assert list(parse_rule_document(data)) == ["ControlFlow", "Discounts"]

    def test_unknown_group_is_empty(self, ui_client) -> None:
        response = ui_client.get("/ui/rules", params={"engine": "Pricing", "group": "Nope"})
        assert response.status_code == 200
        assert response.json() == {}

    def test_unknown_engine(self, ui_client) -> None:
        response = ui_client.get("/ui/rules", params={"engine": "Nope", "group": "Quote"})
        assert response.status_code == 404

    def test_missing_params(self, ui_client) -> None:
        assert ui_client.get("/ui/rules").status_code == 422


class TestRulesByCategory:
    """Tests for POST /ui/rulesByCategory."""

    def test_single_category(self, ui_client) -> None:
        response = ui_client.post(
            "/ui/rulesByCategory", json={"_engine": "Pricing", "Status": ["Active"]}
        )
        assert response.status_code == 200
        assert list(response.json()) == ["ControlFlow", "RenewalFlow"]

    def test_categories_combine(self, ui_client) -> None:
        response = ui_client.post(
            "/ui/rulesByCategory",
            json={"_engine": "Pricing", "Status": ["Active"], "Line": ["Home"]},
        )
        assert list(response.json()) == ["RenewalFlow"]

    def test_multiple_values(self, ui_client) -> None:
        response = ui_client.post(
            "/ui/rulesByCategory", json={"_engine": "Pricing", "Line": ["Auto", "Home"]}
        )
        assert list(response.json()) == ["ControlFlow", "Discounts", "RenewalFlow"]

    def test_no_selection_returns_engine_rules(self, ui_client) -> None:
        response = ui_client.post("/ui/rulesByCategory", json={"_engine": "Claims"})
        assert list(response.json()) == ["IntakeChecks"]

    def test_missing_engine(self, ui_client) -> None:
        response = ui_client.post("/ui/rulesByCategory", json={"Status": ["Active"]})
        assert response.status_code == 422

    def test_values_must_be_list(self, ui_client) -> None:
        response = ui_client.post(
            "/ui/rulesByCategory", json={"_engine": "Pricing", "Status": "Active"}
        )
        assert response.status_code == 422

    def test_unknown_engine(self, ui_client) -> None:
        response = ui_client.post("/ui/rulesByCategory", json={"_engine": "Nope"})
        assert response.status_code == 404


class TestReference:
    """Tests for GET /ui/ncube."""

    def test_reference_html(self, ui_client) -> None:
        response = ui_client.get(
            "/ui/ncube",
            params={"name": "rating.base", "appIdString": "acme/pricing/1.4.0/RELEASE"},
        )
        assert response.status_code == 200
        assert "<h1>rating.base</h1>" in response.json()["html"]

    def test_unknown_reference(self, ui_client) -> None:
        response = ui_client.get(
            "/ui/ncube", params={"name": "rating.base", "appIdString": "other"}
        )
        assert response.status_code == 404


# =============================================================================
# Store Tests
# =============================================================================


class TestCatalogStore:
    """Tests for CatalogStore without the HTTP layer."""

    def test_empty_store(self) -> None:
        store = CatalogStore()
        assert store.engine_catalog() == {}

    def test_duplicate_keys_rejected(self, tmp_path) -> None:
        path = tmp_path / "catalog.json"
        path.write_text('{"engines": {"E": {}, "E": {}}}', encoding="utf-8")
        with pytest.raises(ValueError, match="Duplicate key"):
            CatalogStore.from_file(path)

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            CatalogStore.from_file(tmp_path / "missing.json")


# =============================================================================
# Store Loading Tests
# =============================================================================


class TestGetStore:
    """Tests for the global store accessor."""

    def test_default_catalog_does_not_depend_on_cwd(self, tmp_path, monkeypatch) -> None:
        from backend.core.config import Settings

        monkeypatch.chdir(tmp_path)
        path = Path(Settings.model_fields["catalog_file"].default)
        assert path.is_absolute()
        assert path.is_file()

    def test_loads_configured_catalog(self, catalog_file, monkeypatch) -> None:
        from backend.catalog import router as router_module
        from backend.core.config import Settings

        monkeypatch.setattr(router_module, "_store", None)
        monkeypatch.setattr(
            router_module, "get_settings", lambda: Settings(catalog_file=str(catalog_file))
        )
        store = router_module.get_store()
        assert list(store.engine_catalog()) == ["Pricing", "Claims"]
        assert router_module.get_store() is store

    def test_missing_catalog_raises(self, tmp_path, monkeypatch) -> None:
        from backend.catalog import router as router_module
        from backend.core.config import Settings

        missing = tmp_path / "missing.json"
        monkeypatch.setattr(router_module, "_store", None)
        monkeypatch.setattr(router_module, "get_settings", lambda: Settings(catalog_file=str(missing)))

        with pytest.raises(FileNotFoundError, match="Catalog file not found"):
            router_module.get_store()
        assert router_module._store is None

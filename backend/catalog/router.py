"""Routes serving rule catalog metadata to the documentation browser."""

from pathlib import Path
from typing import Any

from fastapi import APIRouter, Body, HTTPException, Query

from backend.core.config import get_settings
from backend.catalog.schemas import EngineInfo, ReferenceHtml, dump_rule_document
from backend.catalog.service import CatalogStore, UnknownEngineError, UnknownReferenceError

router = APIRouter(prefix="/ui", tags=["Rule Documentation"])

ENGINE_KEY = "_engine"

# Global instance
_store: CatalogStore | None = None


def get_store() -> CatalogStore:
    """Get or create the catalog store instance."""
    global _store
    if _store is None:
        settings = get_settings()
        catalog_path = Path(settings.catalog_file)
        if not catalog_path.exists():
            raise FileNotFoundError(f"Catalog file not found: {catalog_path}")
        _store = CatalogStore.from_file(catalog_path)
    return _store


@router.get("/rulesInfo", response_model=dict[str, EngineInfo])
async def rules_info() -> dict[str, EngineInfo]:
    """Engine catalog: groups and category facets per engine."""
    return get_store().engine_catalog()


@router.get("/rules")
async def rules(engine: str = Query(...), group: str = Query(...)) -> dict[str, Any]:
    """Rule document for one group of an engine."""
    try:
        document = get_store().rules_for_group(engine, group)
    except UnknownEngineError:
        raise HTTPException(status_code=404, detail=f"Engine not found: {engine}")
    return dump_rule_document(document)


@router.post("/rulesByCategory")
async def rules_by_category(body: dict[str, Any] = Body(...)) -> dict[str, Any]:
    """Rule document filtered by category selections.

    The body carries the engine under ``_engine``; every other key is a
    category name mapped to the list of accepted values.
    """
    engine = body.get(ENGINE_KEY)
    if not isinstance(engine, str):
        raise HTTPException(status_code=422, detail=f"Missing {ENGINE_KEY}")

    selections: dict[str, list[str]] = {}
    for category, values in body.items():
        if category == ENGINE_KEY:
            continue
        if not isinstance(values, list):
            raise HTTPException(
                status_code=422, detail=f"Category {category} must map to a list"
            )
        selections[category] = [str(v) for v in values]

    try:
        document = get_store().rules_by_category(engine, selections)
    except UnknownEngineError:
        raise HTTPException(status_code=404, detail=f"Engine not found: {engine}")
    return dump_rule_document(document)


@router.get("/ncube", response_model=ReferenceHtml)
async def ncube(
    name: str = Query(...),
    app_id: str = Query(..., alias="appIdString"),
) -> ReferenceHtml:
    """Pre-rendered html of a referenced rule set."""
    try:
        html = get_store().reference_html(name, app_id)
    except UnknownReferenceError:
        raise HTTPException(status_code=404, detail=f"Reference not found: {name}")
    return ReferenceHtml(html=html)

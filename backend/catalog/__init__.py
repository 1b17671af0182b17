"""Catalog domain - rule documentation metadata and browser endpoints."""

from .router import router as catalog_router, get_store
from .schemas import (
    TRIVIAL_CONDITIONS,
    DuplicateKeyError,
    reject_duplicate_keys,
    loads_strict,
    EngineInfo,
    MethodRule,
    RuleObject,
    RuleTypeEntry,
    ReferenceHtml,
    RuleDocument,
    EngineCatalog,
    parse_rule_document,
    parse_engine_catalog,
    dump_rule_document,
    CatalogFile,
    EngineSource,
    RuleTypeSource,
)
from .service import CatalogStore, UnknownEngineError, UnknownReferenceError

__all__ = [
    # Router
    "catalog_router",
    "get_store",
    # Payload models
    "TRIVIAL_CONDITIONS",
    "DuplicateKeyError",
    "reject_duplicate_keys",
    "loads_strict",
    "EngineInfo",
    "MethodRule",
    "RuleObject",
    "RuleTypeEntry",
    "ReferenceHtml",
    "RuleDocument",
    "EngineCatalog",
    "parse_rule_document",
    "parse_engine_catalog",
    "dump_rule_document",
    # Catalog file
    "CatalogFile",
    "EngineSource",
    "RuleTypeSource",
    # Service
    "CatalogStore",
    "UnknownEngineError",
    "UnknownReferenceError",
]

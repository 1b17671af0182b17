"""
Rules API client for the documentation browser.

Provides the request/response boundary between the page and the metadata
service: a read query (GET with key/value parameters) and a filtered query
(POST with a JSON body). Calls are single-attempt with a fixed timeout and no
retry; failures are raised to the caller without interpreting error payloads.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, TypeVar

import requests
from pydantic import ValidationError

from backend.catalog.schemas import (
    EngineCatalog,
    ReferenceHtml,
    RuleDocument,
    parse_engine_catalog,
    parse_rule_document,
    reject_duplicate_keys,
)

logger = logging.getLogger(__name__)

# Default API URL
DEFAULT_API_URL = "http://localhost:8000"

# Rule sets may be large; ten minutes upper bound per request
DEFAULT_TIMEOUT = 600.0

JSON_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}

ENGINE_KEY = "_engine"

T = TypeVar("T")


class RulesClientError(Exception):
    """Base class for gateway failures."""

    kind = "error"


class GatewayError(RulesClientError):
    """Transport, timeout or HTTP status failure."""

    kind = "transport"


class PayloadError(RulesClientError):
    """Response body is not JSON or not the expected shape."""

    kind = "payload"


class RulesClient:
    """Client for rule documentation endpoints."""

    def __init__(self, base_url: str = DEFAULT_API_URL, timeout: float = DEFAULT_TIMEOUT):
        """Initialize the rules client.

        Args:
            base_url: Base URL of the API server
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _get(self, endpoint: str, params: dict | None = None) -> Any:
        """Make a GET request."""
        url = f"{self.base_url}{endpoint}"
        try:
            response = requests.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise GatewayError(f"GET {endpoint} failed: {exc}") from exc
        return self._decode(response, endpoint)

    def _post(self, endpoint: str, data: dict) -> Any:
        """Make a POST request with a JSON body."""
        url = f"{self.base_url}{endpoint}"
        try:
            response = requests.post(url, json=data, headers=JSON_HEADERS, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise GatewayError(f"POST {endpoint} failed: {exc}") from exc
        return self._decode(response, endpoint)

    @staticmethod
    def _decode(response: requests.Response, endpoint: str) -> Any:
        try:
            return response.json(object_pairs_hook=reject_duplicate_keys)
        except ValueError as exc:
            raise PayloadError(f"{endpoint} returned an unreadable body: {exc}") from exc

    @staticmethod
    def _validate(parse: Callable[[Any], T], data: Any, endpoint: str) -> T:
        try:
            return parse(data)
        except ValidationError as exc:
            raise PayloadError(f"{endpoint} returned an unexpected shape: {exc}") from exc

    # =========================================================================
    # Query shapes
    # =========================================================================

    async def query(self, endpoint: str, params: dict | None = None) -> Any:
        """Read query: GET with simple key/value parameters."""
        logger.debug("GET %s %s", endpoint, params)
        return await asyncio.to_thread(self._get, endpoint, params)

    async def query_filtered(self, endpoint: str, body: dict) -> Any:
        """Filtered query: POST with a structured JSON body."""
        logger.debug("POST %s %s", endpoint, body)
        return await asyncio.to_thread(self._post, endpoint, body)

    # =========================================================================
    # Rule Documentation
    # =========================================================================

    async def get_rules_info(self) -> EngineCatalog:
        """Get the engine catalog.

        Returns:
            Engine name -> EngineInfo, in server order
        """
        data = await self.query("/ui/rulesInfo")
        return self._validate(parse_engine_catalog, data, "/ui/rulesInfo")

    async def get_rules(self, engine: str, group: str) -> RuleDocument:
        """Get the rule document of one group."""
        data = await self.query("/ui/rules", {"engine": engine, "group": group})
        return self._validate(parse_rule_document, data, "/ui/rules")

    async def get_rules_by_category(
        self,
        engine: str,
        selections: dict[str, list[str]],
    ) -> RuleDocument:
        """Get the rule document matching category selections.

        Args:
            engine: Engine the query is scoped to
            selections: Category -> chosen values; empty selections are left out

        Returns:
            RuleDocument
        """
        body: dict[str, Any] = {ENGINE_KEY: engine}
        for category, values in selections.items():
            if values:
                body[category] = list(values)
        data = await self.query_filtered("/ui/rulesByCategory", body)
        return self._validate(parse_rule_document, data, "/ui/rulesByCategory")

    async def get_reference_html(self, name: str, app_id: str) -> str:
        """Get the pre-rendered html of a referenced rule set."""
        data = await self.query("/ui/ncube", {"name": name, "appIdString": app_id})
        return self._validate(ReferenceHtml.model_validate, data, "/ui/ncube").html


# Global client instance
_client: RulesClient | None = None


def get_rules_client(base_url: str | None = None) -> RulesClient:
    """Get or create the global rules client.

    Args:
        base_url: API base URL (configured ``api_url`` if None)

    Returns:
        RulesClient instance
    """
    global _client
    if _client is None:
        from backend.core.config import get_settings

        settings = get_settings()
        _client = RulesClient(
            base_url or settings.api_url,
            timeout=settings.request_timeout_seconds,
        )
    return _client


def reset_rules_client() -> None:
    """Reset the global rules client."""
    global _client
    _client = None
